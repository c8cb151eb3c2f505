"""Interface for recording pipeline outcomes."""

from abc import ABC, abstractmethod

from codeforge.domain.models import LearningEvent


class ILearningSink(ABC):
    """Receives one event per pipeline run. Callers never wait on the result."""

    @abstractmethod
    def record(self, event: LearningEvent) -> None:
        pass
