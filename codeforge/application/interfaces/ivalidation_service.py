"""Interface for structural validation of generated artifacts."""

from abc import ABC, abstractmethod
from typing import List

from codeforge.domain.models import Artifact, ValidationReport


class IValidationService(ABC):
    """Validates artifacts and annotates them with a quality score."""

    @abstractmethod
    def validate(self, artifacts: List[Artifact]) -> ValidationReport:
        """Run the check battery over every artifact.

        Implementations set ``metadata.validated`` and
        ``metadata.quality_score`` in place and never touch ``content``.

        Args:
            artifacts: Artifacts to check

        Returns:
            ValidationReport with the mean score and all issues found
        """
        pass
