"""Read-only, in-memory template catalog."""

from typing import List, Optional, Sequence

from codeforge.application.interfaces.itemplate_catalog import ITemplateCatalog
from codeforge.domain.model_types import IntentLabel
from codeforge.domain.models import IntentAnalysis, TemplateRef

MAX_RESULTS = 5

LABEL_TAGS = {
    IntentLabel.CREATE_APP: "app",
    IntentLabel.CREATE_COMPONENT: "component",
    IntentLabel.CREATE_PAGE: "page",
    IntentLabel.CREATE_API: "api",
    IntentLabel.CREATE_SERVICE: "service",
    IntentLabel.CREATE_MODEL: "model",
}

DEFAULT_TEMPLATES = (
    TemplateRef("react-list-crud", "react", ("component", "list", "crud", "productivity"),
                "Editable list with add, toggle and delete"),
    TemplateRef("react-form", "react", ("component", "form", "input"),
                "Controlled form with validation messages"),
    TemplateRef("react-dashboard", "react", ("page", "dashboard", "table", "finance"),
                "Dashboard page with summary cards and a table"),
    TemplateRef("react-app-shell", "react", ("app", "navbar", "sidebar", "layout"),
                "Application shell with navigation"),
    TemplateRef("vue-list", "vue", ("component", "list", "productivity"),
                "Single-file list component"),
    TemplateRef("angular-component", "angular", ("component", "card"),
                "Standalone Angular component"),
    TemplateRef("express-rest-api", "any", ("api", "crud", "route"),
                "REST handlers with input validation"),
    TemplateRef("http-service", "any", ("service", "client", "fetcher"),
                "Typed HTTP client service"),
    TemplateRef("domain-model", "any", ("model", "schema", "entity"),
                "Domain model with validation"),
    TemplateRef("shop-catalog", "react", ("page", "product", "cart", "e-commerce"),
                "Product grid with cart"),
)


class InMemoryTemplateCatalog(ITemplateCatalog):
    """Scores templates by tag overlap with the intent, entities and domain."""

    def __init__(self, templates: Sequence[TemplateRef] = DEFAULT_TEMPLATES):
        self._templates = tuple(templates)

    @property
    def templates(self) -> Sequence[TemplateRef]:
        return self._templates

    def search(
        self, intent: IntentAnalysis, framework: str, domain: Optional[str] = None
    ) -> List[TemplateRef]:
        wanted = {LABEL_TAGS[intent.label]}
        wanted.update(e.lower() for e in intent.entities)
        if domain or intent.domain:
            wanted.add((domain or intent.domain).lower())

        scored = []
        for index, template in enumerate(self._templates):
            if template.framework not in (framework, "any"):
                continue
            score = len(wanted.intersection(template.tags))
            if score:
                scored.append((-score, index, template))
        scored.sort()
        return [t for _, _, t in scored[:MAX_RESULTS]]
