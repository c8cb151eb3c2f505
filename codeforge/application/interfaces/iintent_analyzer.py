"""Interface for classifying what a prompt asks for."""

from abc import ABC, abstractmethod
from typing import Optional, TYPE_CHECKING

from codeforge.domain.models import GenerationRequest, IntentAnalysis

if TYPE_CHECKING:
    from codeforge.application.services.cancellation import CancellationToken


class IIntentAnalyzer(ABC):
    @abstractmethod
    def analyze(
        self,
        request: GenerationRequest,
        cancel_token: Optional["CancellationToken"] = None,
    ) -> IntentAnalysis:
        """Classify a request and extract entities, features and components."""
        pass
