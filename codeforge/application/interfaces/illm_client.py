"""Interface for Language Model client implementations."""

from abc import ABC, abstractmethod
from typing import Optional

from codeforge.domain.models import Model


class ILLMClient(ABC):
    """Interface for model-bound clients that turn a prompt into text."""

    def __init__(self, model: Model):
        self.model = model
        self.last_usage = None
        self.last_cost = 0.0

    @abstractmethod
    def complete(
        self,
        prompt: str,
        max_tokens: int = 4000,
        temperature: float = 0.2,
        timeout: Optional[float] = None,
    ) -> str:
        """Send one prompt to the provider and return the reply text.

        Args:
            prompt: Full instruction text
            max_tokens: Upper bound on generated tokens
            temperature: Sampling temperature
            timeout: Per-request timeout in seconds, if the SDK supports one

        Returns:
            The provider's reply with surrounding prose removed

        Raises:
            RuntimeError: If the provider could not produce a reply
        """
        pass
