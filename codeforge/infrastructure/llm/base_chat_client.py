"""Shared behaviour for chat-completion style provider clients."""

import json
import logging
import re
from abc import abstractmethod
from typing import Any, Dict, Optional

from openai.types.completion_usage import CompletionUsage

from codeforge.application.interfaces.illm_client import ILLMClient

SYSTEM_PROMPT = (
    "You are a senior software engineer who writes complete, working source files. "
    "Follow the requested output format exactly. Return only fenced code blocks, "
    "with no explanations, disclaimers or apologies before or after them."
)

FENCE_SPAN_PATTERN = re.compile(r"```[\s\S]*```")
PROSE_LINE_PATTERN = re.compile(
    r"^(?:I'm sorry|Please note|Note:|Here(?: is|'s| are)|Based on|This code)[^\n]*\n?",
    re.MULTILINE,
)


class BaseChatLLMClient(ILLMClient):
    """Implements ``complete`` on top of a single ``_generic_chat_call``.

    Subclasses own the SDK client and translate one request into one reply.
    Retries live in the provider gateway, so a client makes exactly one call.
    """

    @abstractmethod
    def _generic_chat_call(
        self,
        system_message: Dict[str, Any],
        user_message: Dict[str, Any],
        temperature: float,
        max_tokens: int,
        timeout: Optional[float],
    ) -> str:
        pass

    def complete(
        self,
        prompt: str,
        max_tokens: int = 4000,
        temperature: float = 0.2,
        timeout: Optional[float] = None,
    ) -> str:
        max_tokens = min(max_tokens, self.model.max_output_tokens)
        response = self._generic_chat_call(
            system_message={"role": "system", "content": SYSTEM_PROMPT},
            user_message={"role": "user", "content": prompt},
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
        )
        return self._strip_prose(response)

    def _record_usage(self, usage: Any) -> None:
        # Providers report usage in their own types; normalize to CompletionUsage
        if isinstance(getattr(usage, "prompt_tokens", None), int):
            self.last_usage = CompletionUsage(
                prompt_tokens=usage.prompt_tokens,
                completion_tokens=usage.completion_tokens or 0,
                total_tokens=usage.total_tokens or 0,
            )
            self.last_cost = self.compute_cost_from_model(self.last_usage)
        else:
            self.last_usage = CompletionUsage(
                prompt_tokens=0, completion_tokens=0, total_tokens=0
            )
            self.last_cost = 0.0

    def compute_cost_from_model(self, usage: CompletionUsage) -> float:
        prompt_cost = (usage.prompt_tokens / 1000.0) * self.model.prompt_cost_per_1k
        completion_cost = (
            usage.completion_tokens / 1000.0
        ) * self.model.completion_cost_per_1k
        return round(prompt_cost + completion_cost, 6)

    @staticmethod
    def _extract_content(response: Any) -> str:
        if not hasattr(response, "choices") or not response.choices:
            raise RuntimeError("Invalid response structure from LLM")
        message = getattr(response.choices[0], "message", None)
        if message is None or not hasattr(message, "content"):
            raise RuntimeError("Missing message content in response.")
        content = message.content
        return content.strip() if content is not None else ""

    @staticmethod
    def _strip_prose(text: str) -> str:
        """Drop chatter around the fenced blocks but keep the fences themselves."""
        if not text:
            return ""
        span = FENCE_SPAN_PATTERN.search(text)
        if span:
            return span.group(0).strip()
        return PROSE_LINE_PATTERN.sub("", text).strip()

    @staticmethod
    def _attempt_json_parse(text: str) -> Optional[Dict[str, Any]]:
        """
        Attempt to parse JSON from the LLM's response text.
        """
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, TypeError):
            matches = re.findall(r"```(?:json)?\s*([\s\S]*?)\s*```", text or "")
            if not matches:
                return None
            try:
                data = json.loads(matches[0])
            except json.JSONDecodeError:
                logging.getLogger(__name__).debug("Fenced JSON block did not parse")
                return None
        return data if isinstance(data, dict) else None
