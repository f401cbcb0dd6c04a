"""Model persistence interface."""

from abc import ABC, abstractmethod
from typing import Optional

from ecoscore.core.interfaces.services.scoring_model import IScoringModel


class IModelStore(ABC):
    """Saves and restores a scoring model under a fixed logical name."""

    @abstractmethod
    async def save(self, model: IScoringModel) -> None:
        """Persist the model weights."""
        raise NotImplementedError

    @abstractmethod
    async def load(self) -> Optional[IScoringModel]:
        """Return the persisted model, or None when there is none yet."""
        raise NotImplementedError
