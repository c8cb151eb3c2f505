"""Prepare stage: turns a request into a GenerationContext."""

import logging
from typing import Optional

from codeforge.application.interfaces.iintent_analyzer import IIntentAnalyzer
from codeforge.application.interfaces.itemplate_catalog import ITemplateCatalog
from codeforge.application.services.cancellation import CancellationToken
from codeforge.application.services.exceptions import (
    InvalidRequestError,
    PipelineCancelledError,
)
from codeforge.application.services.naming import derive_component_name
from codeforge.domain.model_types import ArtifactKind, IntentLabel
from codeforge.domain.models import (
    ComponentSpec,
    GenerationContext,
    GenerationRequest,
    IntentAnalysis,
    TechnicalSpecification,
)

logger = logging.getLogger(__name__)

INTENT_KINDS = {
    IntentLabel.CREATE_APP: ArtifactKind.COMPONENT,
    IntentLabel.CREATE_COMPONENT: ArtifactKind.COMPONENT,
    IntentLabel.CREATE_PAGE: ArtifactKind.PAGE,
    IntentLabel.CREATE_API: ArtifactKind.API_HANDLER,
    IntentLabel.CREATE_SERVICE: ArtifactKind.SERVICE,
    IntentLabel.CREATE_MODEL: ArtifactKind.MODEL,
}

NON_UI_LANGUAGES = ("python",)
PLAIN_FRAMEWORK = "plain"


def placeholder_component(prompt: str, intent: Optional[IntentAnalysis]) -> ComponentSpec:
    """The single component used when nothing more specific is known."""
    kind = ArtifactKind.COMPONENT
    features = ()
    if intent is not None:
        kind = INTENT_KINDS.get(intent.label, ArtifactKind.COMPONENT)
        features = tuple(intent.features)
    return ComponentSpec(
        name=derive_component_name(prompt),
        kind=kind,
        purpose=prompt.strip(),
        responsibilities=features,
    )


class ContextBuilder:
    """Validates a request and derives everything the Generate stage needs.

    The configured analyzer may be provider-backed and can fail; in that case
    the heuristic ``fallback_analyzer`` answers instead. A failing template
    catalog yields no templates rather than an error.
    """

    def __init__(
        self,
        intent_analyzer: IIntentAnalyzer,
        fallback_analyzer: IIntentAnalyzer,
        template_catalog: ITemplateCatalog,
        default_language: str = "typescript",
        default_framework: str = "react",
    ):
        self.intent_analyzer = intent_analyzer
        self.fallback_analyzer = fallback_analyzer
        self.template_catalog = template_catalog
        self.default_language = default_language
        self.default_framework = default_framework

    def build(
        self,
        request: GenerationRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> GenerationContext:
        """Build the context for one run.

        Args:
            request: The caller's request
            cancel_token: Optional token, handed to the intent analyzer

        Returns:
            An immutable GenerationContext

        Raises:
            InvalidRequestError: If the prompt is missing or blank
            PipelineCancelledError: If the token is cancelled during analysis
        """
        if not isinstance(request.prompt, str) or not request.prompt.strip():
            raise InvalidRequestError("Prompt must be a non-empty string")

        language = (request.language or self.default_language).lower()
        framework = request.framework
        if not framework:
            framework = (
                PLAIN_FRAMEWORK
                if language in NON_UI_LANGUAGES
                else self.default_framework
            )
        framework = framework.lower()

        intent = self._analyze(request, cancel_token)

        try:
            templates = tuple(
                self.template_catalog.search(intent, framework, request.domain)
            )
        except Exception as e:
            logger.warning(f"Template search failed, continuing without templates: {e}")
            templates = ()

        specification = request.specification
        if specification is None:
            components = tuple(intent.components) or (
                placeholder_component(request.prompt, intent),
            )
            specification = TechnicalSpecification(
                architecture_style="modular",
                components=components,
                technologies=(language, framework),
            )

        logger.info(
            f"Prepared context: intent={intent.label.value} "
            f"components={len(specification.components)} "
            f"language={language} framework={framework}"
        )
        return GenerationContext(
            request=request,
            intent=intent,
            templates=templates,
            specification=specification,
            language=language,
            framework=framework,
        )

    def _analyze(
        self, request: GenerationRequest, cancel_token: Optional[CancellationToken]
    ) -> IntentAnalysis:
        try:
            return self.intent_analyzer.analyze(request, cancel_token)
        except PipelineCancelledError:
            raise
        except Exception as e:
            logger.warning(f"Intent analyzer failed, using heuristic analysis: {e}")
            return self.fallback_analyzer.analyze(request)
