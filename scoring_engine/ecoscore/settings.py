"""This file contains global application settings."""

from os import path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

DOTENV_FILE = ".env" if path.isfile(".env") else None


class Settings(BaseSettings):
    """Application settings."""

    # Application
    environment: str = "local"
    application_name: str = "ecoscore"
    log_level: str = "INFO"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Storage
    storage_directory: str = "var/storage"
    model_directory: str = "var/models"
    model_name: str = "ecoscore-sustainability-model"

    # Caching
    cache_ttl_seconds: float = 24 * 60 * 60
    cache_max_entries: int = 1000
    error_log_max_entries: int = 100
    error_log_ttl_seconds: float = 7 * 24 * 60 * 60
    sweep_interval_seconds: float = 60 * 60

    # Inference
    prediction_timeout_seconds: float = 5.0
    prediction_max_retries: int = 3
    retry_backoff_seconds: float = 0.1

    # Training
    training_set_max_size: int = 1000
    training_min_samples: int = 10
    retrain_every: int = 10
    training_epochs: int = 50
    training_batch_size: int = 32
    training_validation_split: float = 0.2
    training_history_max_entries: int = 100
    learning_rate: float = 1e-3
    hidden_layer_sizes: List[int] = [64, 32]
    dropout_rates: List[float] = [0.2, 0.1]
    random_seed: int = 42

    # Analysis
    high_confidence_threshold: float = 0.8
    fallback_confidence: float = 0.6
    alternatives_base_url: str = "https://example.com"

    # Metrics
    model_version: str = "1.0.0"
    metrics_refresh_interval_seconds: float = 60 * 60

    model_config = SettingsConfigDict(
        env_file=DOTENV_FILE, env_prefix="ECOSCORE_", protected_namespaces=()
    )


settings = Settings()
