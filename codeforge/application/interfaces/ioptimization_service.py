"""Interface for post-generation optimization."""

from abc import ABC, abstractmethod
from typing import List

from codeforge.domain.models import Artifact


class IOptimizationService(ABC):
    @abstractmethod
    def optimize(self, artifacts: List[Artifact]) -> List[Artifact]:
        """Apply deterministic, idempotent transforms to each artifact.

        Returns the same artifact objects, in the same order.
        """
        pass
