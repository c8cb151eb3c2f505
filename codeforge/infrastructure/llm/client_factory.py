from typing import Union

from codeforge.application.interfaces.illm_client import ILLMClient
from codeforge.config import Settings
from codeforge.domain.client_types import ClientType
from codeforge.domain.model_types import GroqModelType, OpenAIModelType
from codeforge.infrastructure.llm.groq_llm_client import GroqLLMClient
from codeforge.infrastructure.llm.mock_llm_client import MockLLMClient
from codeforge.infrastructure.llm.model_factory import ModelFactory
from codeforge.infrastructure.llm.openai_llm_client import OpenAILLMClient


class ClientFactory:
    @staticmethod
    def get_llm_client(
        model_type: Union[GroqModelType, OpenAIModelType],
    ) -> Union[GroqLLMClient, OpenAILLMClient]:
        if isinstance(model_type, GroqModelType):
            model = ModelFactory.get_model(ClientType.GROQ, model_type)
            return GroqLLMClient(model)
        elif isinstance(model_type, OpenAIModelType):
            model = ModelFactory.get_model(ClientType.OPENAI, model_type)
            return OpenAILLMClient(model)
        else:
            raise ValueError(f"Unsupported client type: {model_type}")

    @staticmethod
    def from_settings(settings: Settings) -> ILLMClient:
        """Build the client selected by ``settings.provider``.

        Raises:
            ValueError: If the provider is unknown or its API key is missing
        """
        try:
            client_type = ClientType(settings.provider.lower())
        except ValueError:
            raise ValueError(f"Unsupported provider: {settings.provider}") from None

        model = ModelFactory.get_model_by_name(client_type, settings.model)
        if client_type == ClientType.MOCK:
            return MockLLMClient(model)
        if client_type == ClientType.OPENAI:
            if not settings.openai_api_key:
                raise ValueError("OPENAI_API_KEY is not set")
            return OpenAILLMClient(
                model,
                api_key=settings.openai_api_key,
                base_url=settings.provider_endpoint,
            )
        if not settings.groq_api_key:
            raise ValueError("GROQ_API_KEY is not set")
        return GroqLLMClient(model, api_key=settings.groq_api_key)
