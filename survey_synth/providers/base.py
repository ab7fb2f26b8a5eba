"""Abstract base for all generative text providers."""

from abc import ABC, abstractmethod

from survey_synth.models import Completion


class ProviderError(Exception):
    """Raised when a provider call fails."""

    def __init__(self, provider_name: str, message: str) -> None:
        self.provider_name = provider_name
        super().__init__(f"[{provider_name}] {message}")


class ProviderTimeoutError(ProviderError):
    """Raised when a provider call exceeds its configured timeout."""


class MissingCredentialError(ProviderError):
    """Raised at construction when the provider's API key is not set."""


class AIProvider(ABC):
    """Abstract base for all generative text providers."""

    @abstractmethod
    def name(self) -> str:
        """Return the short provider name (e.g. 'gemini', 'claude')."""
        ...

    @abstractmethod
    def model_string(self) -> str:
        """Return the actual model identifier string."""
        ...

    @abstractmethod
    async def complete(self, prompt: str) -> Completion:
        """Send one prompt and return the raw completion text.

        Args:
            prompt: The full prompt text to send.

        Returns:
            Completion dataclass with content and metadata.

        Raises:
            ProviderError: On API failure or invalid response.
            ProviderTimeoutError: When the call exceeds the configured timeout.
        """
        ...
