from codeforge.domain.model_types import IntentLabel
from codeforge.domain.models import IntentAnalysis, TemplateRef
from codeforge.infrastructure.analysis.template_catalog import (
    MAX_RESULTS,
    InMemoryTemplateCatalog,
)


def test_best_match_first():
    intent = IntentAnalysis(
        label=IntentLabel.CREATE_COMPONENT, confidence=0.7, entities=("List",)
    )
    results = InMemoryTemplateCatalog().search(intent, "react", "productivity")

    assert results[0].name == "react-list-crud"
    assert all(t.framework in ("react", "any") for t in results)
    assert len(results) <= MAX_RESULTS


def test_framework_filter_keeps_generic_templates():
    intent = IntentAnalysis(label=IntentLabel.CREATE_API, confidence=0.6)
    names = [t.name for t in InMemoryTemplateCatalog().search(intent, "vue")]
    assert names == ["express-rest-api"]


def test_no_overlap_returns_nothing():
    catalog = InMemoryTemplateCatalog([TemplateRef("only", "react", ("page",))])
    intent = IntentAnalysis(label=IntentLabel.CREATE_MODEL, confidence=0.6)
    assert catalog.search(intent, "react") == []
