"""Helper module for wiring the pipeline from settings."""

import logging
from dataclasses import dataclass
from typing import Optional

from codeforge.application.interfaces.iintent_analyzer import IIntentAnalyzer
from codeforge.application.interfaces.ilearning_sink import ILearningSink
from codeforge.application.services.artifact_generator import ArtifactGenerator
from codeforge.application.services.context_builder import ContextBuilder
from codeforge.application.services.generation_cache import GenerationCache
from codeforge.application.services.pipeline_orchestrator import PipelineOrchestrator
from codeforge.application.services.result_presenter import ResultPresenter
from codeforge.config import Settings, get_settings
from codeforge.domain.client_types import ClientType
from codeforge.infrastructure.analysis.heuristic_intent_analyzer import (
    HeuristicIntentAnalyzer,
)
from codeforge.infrastructure.analysis.provider_intent_analyzer import (
    ProviderIntentAnalyzer,
)
from codeforge.infrastructure.analysis.template_catalog import InMemoryTemplateCatalog
from codeforge.infrastructure.learning.logging_sink import LoggingLearningSink
from codeforge.infrastructure.learning.sql_learning_event_repository import (
    SqlLearningEventRepository,
)
from codeforge.infrastructure.llm.client_factory import ClientFactory
from codeforge.infrastructure.llm.provider_gateway import LLMProviderGateway
from codeforge.infrastructure.optimization.code_optimizer import CodeOptimizer
from codeforge.infrastructure.validation.structural_validator import (
    StructuralValidator,
)

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """A dataclass that holds the wired pipeline and the parts callers may need."""

    orchestrator: PipelineOrchestrator
    gateway: LLMProviderGateway
    learning_sink: ILearningSink
    presenter: ResultPresenter

    def close(self) -> None:
        """Release the gateway's worker threads."""
        self.gateway.close()

    def __enter__(self) -> "Services":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def build_learning_sink(settings: Settings) -> ILearningSink:
    """SQL repository when a learning database is configured, log lines otherwise."""
    if settings.learning_database_url:
        return SqlLearningEventRepository.from_url(settings.learning_database_url)
    return LoggingLearningSink()


def setup_services(settings: Optional[Settings] = None) -> Services:
    """
    Set up the pipeline and its collaborators.

    Args:
        settings: Settings to use; defaults to the cached environment settings

    Returns:
        Services instance holding a ready orchestrator

    Raises:
        ValueError: If the provider is unknown or its API key is missing
    """
    settings = settings or get_settings()
    client = ClientFactory.from_settings(settings)
    gateway = LLMProviderGateway(
        client,
        timeout_seconds=settings.request_timeout_seconds,
        max_retries=settings.max_retries,
        backoff_seconds=settings.retry_backoff_seconds,
        max_workers=max(settings.max_concurrency, 1) * 2,
    )

    heuristic = HeuristicIntentAnalyzer()
    intent_analyzer: IIntentAnalyzer = heuristic
    if client.model.client_type != ClientType.MOCK:
        intent_analyzer = ProviderIntentAnalyzer(gateway, fallback=heuristic)

    context_builder = ContextBuilder(
        intent_analyzer,
        heuristic,
        InMemoryTemplateCatalog(),
        default_language=settings.default_language,
        default_framework=settings.default_framework,
    )
    generator = ArtifactGenerator(
        gateway,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
        max_concurrency=settings.max_concurrency,
        min_viable_length=settings.min_viable_length,
    )
    learning_sink = build_learning_sink(settings)
    presenter = ResultPresenter()

    orchestrator = PipelineOrchestrator(
        context_builder,
        generator,
        validator=StructuralValidator(complexity_ceiling=settings.complexity_ceiling),
        optimizer=CodeOptimizer(settings.optimization_categories),
        learning_sink=learning_sink,
        presenter=presenter,
        cache=GenerationCache() if settings.enable_cache else None,
        enable_validation=settings.enable_validation,
        enable_optimization=settings.enable_optimization,
    )
    logger.debug(
        f"Pipeline wired: provider={settings.provider} model={client.model.name}"
    )
    return Services(
        orchestrator=orchestrator,
        gateway=gateway,
        learning_sink=learning_sink,
        presenter=presenter,
    )
