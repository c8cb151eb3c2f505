from enum import Enum
from typing import Optional, Union

from codeforge.domain.client_types import ClientType
from codeforge.domain.model_types import GroqModelType, OpenAIModelType
from codeforge.domain.models import Model

BaseModelType = Union[GroqModelType, OpenAIModelType]

MOCK_MODEL_NAME = "mock-codegen"


class ModelFactory:
    """
    A factory class to retrieve Model instances based on the client (OpenAI, Groq
    or the offline mock) and a specified model type (from the respective enums).

    This class acts as a centralized registry for model configurations,
    including context windows, token limits and pricing.
    """

    OPENAI_MODELS = {
        OpenAIModelType.GPT_4O: Model(
            client_type=ClientType.OPENAI,
            name="gpt-4o",
            context_window=128000,
            max_output_tokens=16384,
            prompt_cost_per_1k=0.0025,
            completion_cost_per_1k=0.01,
            supports_reasoning=False,
            knowledge_cutoff_date="2023-10-01",
        ),
        OpenAIModelType.GPT_4O_MINI: Model(
            client_type=ClientType.OPENAI,
            name="gpt-4o-mini",
            context_window=128000,
            max_output_tokens=16384,
            prompt_cost_per_1k=0.00015,
            completion_cost_per_1k=0.0006,
            supports_reasoning=False,
            knowledge_cutoff_date="2023-10-01",
        ),
        OpenAIModelType.O1_MINI: Model(
            client_type=ClientType.OPENAI,
            name="o1-mini",
            context_window=128000,
            max_output_tokens=65536,
            prompt_cost_per_1k=0.003,
            completion_cost_per_1k=0.012,
            supports_reasoning=True,
            knowledge_cutoff_date="2023-10-01",
        ),
    }

    GROQ_MODELS = {
        GroqModelType.GEMMA2_9B_IT: Model(
            client_type=ClientType.GROQ,
            name="gemma2-9b-it",
            context_window=8192,
            max_output_tokens=4096,
            prompt_cost_per_1k=0.025,
            completion_cost_per_1k=0.05,
        ),
        GroqModelType.LLAMA_3_3_70B_VERSATILE: Model(
            client_type=ClientType.GROQ,
            name="llama-3.3-70b-versatile",
            context_window=128000,
            max_output_tokens=32768,
            prompt_cost_per_1k=0.00059,
            completion_cost_per_1k=0.00079,
        ),
        GroqModelType.LLAMA_3_1_8B_INSTANT: Model(
            client_type=ClientType.GROQ,
            name="llama-3.1-8b-instant",
            context_window=128000,
            max_output_tokens=8192,
            prompt_cost_per_1k=0.00005,
            completion_cost_per_1k=0.00008,
        ),
    }

    MOCK_MODEL = Model(
        client_type=ClientType.MOCK,
        name=MOCK_MODEL_NAME,
        context_window=128000,
        max_output_tokens=16384,
        prompt_cost_per_1k=0.0,
        completion_cost_per_1k=0.0,
    )

    DEFAULT_MODELS = {
        ClientType.OPENAI: OpenAIModelType.GPT_4O_MINI,
        ClientType.GROQ: GroqModelType.LLAMA_3_3_70B_VERSATILE,
    }

    @staticmethod
    def get_model(client_type: ClientType, model_type: Optional[Enum] = None) -> Model:
        """
        Retrieve a Model instance based on the given client type and model type.

        Args:
            client_type (ClientType): The type of client.
            model_type (Enum): The specific model type from the respective enum.
                Ignored for the mock client.

        Returns:
            Model: A configured Model instance.

        Raises:
            ValueError: If the provided model type is not known for the given client,
                        or if the client type is unsupported.
        """
        if client_type == ClientType.MOCK:
            return ModelFactory.MOCK_MODEL
        if model_type is None:
            model_type = ModelFactory.DEFAULT_MODELS[client_type]
        if client_type == ClientType.OPENAI:
            if model_type in ModelFactory.OPENAI_MODELS:
                return ModelFactory.OPENAI_MODELS[model_type]
            raise ValueError(f"Unknown OpenAI model type: {model_type}")
        elif client_type == ClientType.GROQ:
            if model_type in ModelFactory.GROQ_MODELS:
                return ModelFactory.GROQ_MODELS[model_type]
            raise ValueError(f"Unknown Groq model type: {model_type}")
        raise ValueError(f"Unsupported client type: {client_type}")

    @staticmethod
    def get_model_by_name(client_type: ClientType, name: Optional[str]) -> Model:
        """Resolve a model from its provider-side name, e.g. ``"gpt-4o"``.

        Raises:
            ValueError: If the name is not registered for the client
        """
        if not name:
            return ModelFactory.get_model(client_type)
        enum_type = {
            ClientType.OPENAI: OpenAIModelType,
            ClientType.GROQ: GroqModelType,
        }.get(client_type)
        if enum_type is None:
            return ModelFactory.get_model(client_type)
        try:
            model_type = enum_type(name)
        except ValueError:
            raise ValueError(f"Unknown {client_type.value} model: {name}") from None
        return ModelFactory.get_model(client_type, model_type)
