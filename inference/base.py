from abc import ABC, abstractmethod
from .types import GenerationRequest


class ModelBackend(ABC):
    """
    Abstract model boundary.
    Dispatcher code must depend ONLY on this interface.

    A backend performs exactly one remote call with the credential carried
    by the request. It returns the raw text (possibly empty) and lets the
    provider's exception propagate untouched, so the caller can classify it.
    """

    @abstractmethod
    def generate(self, request: GenerationRequest) -> str:
        """Generate text from the model."""
        raise NotImplementedError
