"""Exception types raised by the scoring pipeline."""


class EcoScoreError(Exception):
    """Base class for scoring pipeline errors."""


class StorageUnavailableError(EcoScoreError):
    """Durable storage could not be read while starting up."""


class ModelNotReadyError(EcoScoreError):
    """The model service has not been initialized."""


class PredictionTimeoutError(EcoScoreError):
    """A single inference attempt did not finish in time."""


class PredictionFailedError(EcoScoreError):
    """Inference failed on every attempt."""

    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


class TrainingFailedError(EcoScoreError):
    """A training run failed; the previous weights remain in service."""
