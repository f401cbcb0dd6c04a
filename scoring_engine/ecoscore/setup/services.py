"""This file contains the service dependencies."""

from fastapi import Request

from ecoscore.core.analysis.analyzer import ProductAnalyzer
from ecoscore.setup.container import ServiceContainer


def get_container(request: Request) -> ServiceContainer:
    """Provide the process-wide service container for dependency injection."""
    return request.app.state.container


def get_analyzer(request: Request) -> ProductAnalyzer:
    """Provide the product analyzer for dependency injection."""
    return get_container(request).analyzer
