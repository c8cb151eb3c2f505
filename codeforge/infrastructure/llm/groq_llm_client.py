import logging
from os import getenv
from typing import Any, Dict, Optional, cast

from dotenv import load_dotenv
from groq import Groq
from groq.types.chat import (
    ChatCompletionMessageParam,
    ChatCompletionSystemMessageParam,
    ChatCompletionUserMessageParam,
)

from codeforge.domain.models import Model
from codeforge.infrastructure.llm.base_chat_client import BaseChatLLMClient

load_dotenv()

logger = logging.getLogger(__name__)


class GroqLLMClient(BaseChatLLMClient):
    """
    Code-generation client backed by Groq's hosted models.
    """

    def __init__(self, model: Model, api_key: Optional[str] = None):
        super().__init__(model)
        self.client = Groq(api_key=api_key or getenv("GROQ_API_KEY"), max_retries=0)

    def _generic_chat_call(
        self,
        system_message: Dict[str, Any],
        user_message: Dict[str, Any],
        temperature: float = 0.2,
        max_tokens: int = 4000,
        timeout: Optional[float] = None,
    ) -> str:
        messages = cast(
            list[ChatCompletionMessageParam],
            [
                ChatCompletionSystemMessageParam(
                    role="system", content=system_message["content"]
                ),
                ChatCompletionUserMessageParam(
                    role="user", content=user_message["content"]
                ),
            ],
        )
        kwargs: Dict[str, Any] = {
            "model": self.model.name,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if timeout is not None:
            kwargs["timeout"] = timeout
        logger.debug(f"Using model name: {self.model.name}")
        response = self.client.chat.completions.create(**kwargs)

        self._record_usage(getattr(response, "usage", None))
        return self._extract_content(response)
