import logging
from os import getenv
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from openai import OpenAI
from openai.types.chat import (
    ChatCompletionSystemMessageParam,
    ChatCompletionUserMessageParam,
)

from codeforge.domain.models import Model
from codeforge.infrastructure.llm.base_chat_client import BaseChatLLMClient

load_dotenv()

logger = logging.getLogger(__name__)


class OpenAILLMClient(BaseChatLLMClient):
    """
    Code-generation client backed by the OpenAI chat completions API.
    """

    def __init__(
        self,
        model: Model,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        super().__init__(model)
        self.client = OpenAI(
            api_key=api_key or getenv("OPENAI_API_KEY"),
            base_url=base_url,
            max_retries=0,
        )

    def _generic_chat_call(
        self,
        system_message: Dict[str, Any],
        user_message: Dict[str, Any],
        temperature: float = 0.2,
        max_tokens: int = 4000,
        timeout: Optional[float] = None,
    ) -> str:
        """
        Wraps one OpenAI ChatCompletion call and records usage and cost.
        """
        messages = [
            ChatCompletionSystemMessageParam(**system_message),
            ChatCompletionUserMessageParam(**user_message),
        ]
        logger.debug(f"Using model name: {self.model.name}")
        kwargs: Dict[str, Any] = {
            "model": self.model.name,
            "messages": messages,
            "max_tokens": max_tokens,
            "stream": False,
        }
        # Reasoning models reject a temperature parameter
        if not self.model.supports_reasoning:
            kwargs["temperature"] = temperature
        if timeout is not None:
            kwargs["timeout"] = timeout

        response = self.client.chat.completions.create(**kwargs)
        self._record_usage(getattr(response, "usage", None))
        return self._extract_content(response)
