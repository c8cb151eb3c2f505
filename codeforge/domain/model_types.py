from enum import Enum


class OpenAIModelType(Enum):
    """
    Enumeration of available OpenAI model types.

    - GPT_4O: The versatile, high-intelligence GPT-4o model with large context.
    - GPT_4O_MINI: A faster, more cost-effective smaller variant of GPT-4o.
    - O1_MINI: A smaller reasoning model, slower but more careful.
    """

    GPT_4O = "gpt-4o"
    GPT_4O_MINI = "gpt-4o-mini"
    O1_MINI = "o1-mini"


class GroqModelType(Enum):
    """
    Enumeration of available Groq model types.

    - LLAMA_3_3_70B_VERSATILE: A 70B parameter Llama 3.3 variant with a large context window.
    - LLAMA_3_1_8B_INSTANT: A smaller, faster Llama 3.1 8B model with a large context.
    - GEMMA2_9B_IT: A 9-billion parameter model from Google (Gemma2) with an 8K context.
    """

    LLAMA_3_3_70B_VERSATILE = "llama-3.3-70b-versatile"
    LLAMA_3_1_8B_INSTANT = "llama-3.1-8b-instant"
    GEMMA2_9B_IT = "gemma2-9b-it"


class ArtifactKind(Enum):
    """Kinds of generated files an artifact can represent."""

    COMPONENT = "component"
    PAGE = "page"
    SERVICE = "service"
    API_HANDLER = "api-handler"
    MODEL = "model"
    TEST = "test"
    CONFIG = "config"

    @classmethod
    def parse(cls, value: str, default: "ArtifactKind") -> "ArtifactKind":
        """Map a loosely written kind ("api", "Page", "api_handler") onto a member."""
        normalized = (value or "").strip().lower().replace("_", "-")
        aliases = {
            "api": cls.API_HANDLER,
            "handler": cls.API_HANDLER,
            "route": cls.API_HANDLER,
            "controller": cls.API_HANDLER,
            "screen": cls.PAGE,
            "view": cls.PAGE,
            "spec": cls.TEST,
            "schema": cls.MODEL,
            "type": cls.MODEL,
            "types": cls.MODEL,
        }
        for member in cls:
            if member.value == normalized:
                return member
        return aliases.get(normalized, default)


class ArtifactSource(Enum):
    """Where an artifact's content came from."""

    PROVIDER = "provider"
    FALLBACK = "fallback"


class IssueSeverity(Enum):
    """Severity of a structural validation issue, most severe first."""

    CRITICAL = "critical"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def weight(self) -> int:
        return SEVERITY_WEIGHTS[self]

    @property
    def is_blocking(self) -> bool:
        return self in (IssueSeverity.CRITICAL, IssueSeverity.ERROR)


SEVERITY_WEIGHTS = {
    IssueSeverity.CRITICAL: 10,
    IssueSeverity.ERROR: 7,
    IssueSeverity.WARNING: 3,
    IssueSeverity.INFO: 1,
}


class PipelineStage(Enum):
    """The four pipeline stages, in execution order."""

    PREPARE = "prepare"
    GENERATE = "generate"
    VALIDATE = "validate"
    OPTIMIZE = "optimize"


class StageStatus(Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


class ResultStatus(Enum):
    """
    Overall outcome of a pipeline run that produced a result.

    - COMPLETED: every stage ran and nothing was degraded.
    - DEGRADED: a result was produced, but a fallback or a skipped stage
      lowered its quality. The warnings in the metadata say which.
    """

    COMPLETED = "completed"
    DEGRADED = "degraded"


class IntentLabel(Enum):
    """Coarse classification of what a prompt is asking for."""

    CREATE_APP = "CREATE_APP"
    CREATE_COMPONENT = "CREATE_COMPONENT"
    CREATE_PAGE = "CREATE_PAGE"
    CREATE_API = "CREATE_API"
    CREATE_SERVICE = "CREATE_SERVICE"
    CREATE_MODEL = "CREATE_MODEL"
