"""Interface for template lookup."""

from abc import ABC, abstractmethod
from typing import List, Optional

from codeforge.domain.models import IntentAnalysis, TemplateRef


class ITemplateCatalog(ABC):
    @abstractmethod
    def search(
        self, intent: IntentAnalysis, framework: str, domain: Optional[str] = None
    ) -> List[TemplateRef]:
        """Return templates matching an intent, best match first. May be empty."""
        pass
