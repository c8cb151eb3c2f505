"""Interface for the provider gateway used by the Prepare and Generate stages."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from codeforge.domain.model_types import PipelineStage

if TYPE_CHECKING:
    from codeforge.application.services.cancellation import CancellationToken


@dataclass(frozen=True)
class ProviderResponse:
    """Text returned by a provider plus what we know about the call."""

    text: str
    model: str = ""
    attempts: int = 1
    duration_seconds: float = 0.0
    cost: float = 0.0


class IProviderGateway(ABC):
    """Single entry point to the external text-generation provider."""

    @abstractmethod
    def generate(
        self,
        prompt: str,
        max_tokens: int,
        temperature: float,
        cancel_token: Optional["CancellationToken"] = None,
        stage: PipelineStage = PipelineStage.GENERATE,
    ) -> ProviderResponse:
        """Generate text for a prompt.

        Args:
            prompt: Instruction text
            max_tokens: Token budget for the reply
            temperature: Sampling temperature
            cancel_token: Aborts the wait when cancelled
            stage: Pipeline stage reported if the call is cancelled

        Returns:
            ProviderResponse with the reply text

        Raises:
            ProviderUnavailableError: On failure, timeout or exhausted retries
            PipelineCancelledError: If the token was cancelled while waiting
        """
        pass
