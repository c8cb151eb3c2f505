"""Enums for client types in codeforge."""

from enum import Enum


class ClientType(Enum):
    """
    Enumeration of supported LLM clients.

    - OPENAI: Models and endpoints associated with OpenAI.
    - GROQ: Models and endpoints offered by the Groq service.
    - MOCK: Deterministic offline client returning canned output.
    """

    OPENAI = "openai"
    GROQ = "groq"
    MOCK = "mock"
