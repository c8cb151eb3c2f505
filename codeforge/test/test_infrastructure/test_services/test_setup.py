from unittest.mock import patch

import pytest

from codeforge.config import Settings
from codeforge.domain.models import GenerationRequest
from codeforge.domain.model_types import ResultStatus
from codeforge.infrastructure.analysis.heuristic_intent_analyzer import (
    HeuristicIntentAnalyzer,
)
from codeforge.infrastructure.learning.logging_sink import LoggingLearningSink
from codeforge.infrastructure.learning.sql_learning_event_repository import (
    SqlLearningEventRepository,
)
from codeforge.infrastructure.llm.provider_gateway import LLMProviderGateway
from codeforge.infrastructure.services.setup import setup_services


def mock_settings(**values) -> Settings:
    return Settings(
        _env_file=None,
        provider="mock",
        openai_api_key=None,
        groq_api_key=None,
        **values,
    )


def test_mock_provider_runs_end_to_end():
    services = setup_services(mock_settings())
    try:
        result = services.orchestrator.execute(
            GenerationRequest(prompt="todo list app", framework="react", language="typescript")
        )
    finally:
        services.close()

    assert result.status == ResultStatus.COMPLETED
    assert result.artifact_names == ["TodoList"]
    assert result.artifacts[0].metadata.validated
    assert result.dependencies == ("react",)
    assert isinstance(services.learning_sink, LoggingLearningSink)
    assert isinstance(
        services.orchestrator.context_builder.intent_analyzer, HeuristicIntentAnalyzer
    )


def test_settings_flow_into_the_pipeline():
    services = setup_services(
        mock_settings(
            enable_cache=True,
            enable_optimization=False,
            max_concurrency=2,
            request_timeout_seconds=7,
            learning_database_url="sqlite:///:memory:",
        )
    )
    try:
        orchestrator = services.orchestrator
        assert orchestrator.cache is not None
        assert orchestrator.enable_validation
        assert not orchestrator.enable_optimization
        assert orchestrator.artifact_generator.max_concurrency == 2
        assert services.gateway.timeout_seconds == 7
        assert isinstance(services.learning_sink, SqlLearningEventRepository)

        orchestrator.execute(GenerationRequest(prompt="a modal dialog"))
        assert services.learning_sink.count() == 1
    finally:
        services.close()


def test_missing_api_key_is_a_value_error():
    with pytest.raises(ValueError, match="OPENAI_API_KEY"):
        setup_services(
            Settings(_env_file=None, provider="openai", openai_api_key=None)
        )


def test_services_release_the_gateway_on_exit():
    with patch.object(LLMProviderGateway, "close") as close:
        with setup_services(mock_settings()) as services:
            assert services.orchestrator.enable_validation
        close.assert_called_once_with()
