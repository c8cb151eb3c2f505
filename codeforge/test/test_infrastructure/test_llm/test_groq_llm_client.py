import pytest
from unittest.mock import patch, MagicMock
from codeforge.infrastructure.llm.groq_llm_client import GroqLLMClient
from codeforge.domain.models import Model
from codeforge.test.test_infrastructure.test_llm.mocks import (
    mock_groq_client,
    mock_model_groq,
)


@pytest.fixture
def groq_llm_client(mock_model_groq: Model, mock_groq_client: MagicMock):
    """Create a GroqLLMClient with the Groq(...) usage patched."""
    with patch(
        "codeforge.infrastructure.llm.groq_llm_client.Groq",
        return_value=mock_groq_client,
    ):
        yield GroqLLMClient(mock_model_groq, api_key="gsk-test")


def test_complete(groq_llm_client: GroqLLMClient, mock_groq_client: MagicMock):
    mock_groq_client.chat.completions.create.return_value.choices[
        0
    ].message.content = "   ```ts\nexport const B = 2;\n```   "
    assert groq_llm_client.complete("make B") == "```ts\nexport const B = 2;\n```"

    kwargs = mock_groq_client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "test-groq-model"
    assert kwargs["temperature"] == 0.2
    assert kwargs["messages"][1]["content"] == "make B"


def test_cost(groq_llm_client: GroqLLMClient, mock_groq_client: MagicMock):
    mock_groq_client.chat.completions.create.return_value.choices[
        0
    ].message.content = "code"
    groq_llm_client.complete("prompt", timeout=5)

    assert mock_groq_client.chat.completions.create.call_args.kwargs["timeout"] == 5
    # 1.5k tokens at 0.005 per 1k
    assert groq_llm_client.last_cost == pytest.approx(0.0075)


def test_sdk_errors_propagate(groq_llm_client: GroqLLMClient, mock_groq_client: MagicMock):
    mock_groq_client.chat.completions.create.side_effect = ConnectionError("reset")
    with pytest.raises(ConnectionError):
        groq_llm_client.complete("prompt")
