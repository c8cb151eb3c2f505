"""Core domain models for the code-generation pipeline."""

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Generic, List, Mapping, Optional, Tuple, TypeVar

from codeforge.domain.client_types import ClientType
from codeforge.domain.model_types import (
    ArtifactKind,
    ArtifactSource,
    IntentLabel,
    IssueSeverity,
    PipelineStage,
    ResultStatus,
    StageStatus,
)

T = TypeVar("T")


class Model:
    """Configuration for a specific language model."""

    def __init__(
        self,
        client_type: ClientType,
        name: str,
        context_window: int,
        max_output_tokens: int,
        prompt_cost_per_1k: float,
        completion_cost_per_1k: float,
        supports_reasoning: bool = False,
        knowledge_cutoff_date: Optional[str] = None,
    ):
        """Initialize a model configuration.

        Args:
            client_type: Type of LLM client
            name: Model name as sent to the provider
            context_window: Max context length
            max_output_tokens: Max generation length
            prompt_cost_per_1k: Input cost per 1k tokens
            completion_cost_per_1k: Output cost per 1k tokens
            supports_reasoning: Whether model can reason
            knowledge_cutoff_date: Optional training cutoff
        """
        self.client_type = client_type
        self.name = name
        self.context_window = context_window
        self.max_output_tokens = max_output_tokens
        self.prompt_cost_per_1k = prompt_cost_per_1k
        self.completion_cost_per_1k = completion_cost_per_1k
        self.supports_reasoning = supports_reasoning
        self.knowledge_cutoff_date = knowledge_cutoff_date


# ---------------------------------------------------------------------------
# Request and context
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ComponentSpec:
    """One unit the technical specification asks the pipeline to produce."""

    name: str
    kind: ArtifactKind = ArtifactKind.COMPONENT
    purpose: str = ""
    responsibilities: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TechnicalSpecification:
    """Architecture style, the components to produce and target technologies."""

    architecture_style: str = "modular"
    components: Tuple[ComponentSpec, ...] = ()
    technologies: Tuple[str, ...] = ()


@dataclass(frozen=True)
class GenerationRequest:
    """A natural-language request submitted to the pipeline.

    The context mapping is copied into a read-only view so a submitted
    request cannot change underneath a running pipeline.
    """

    prompt: str
    framework: Optional[str] = None
    language: Optional[str] = None
    context: Mapping[str, Any] = field(default_factory=dict)
    specification: Optional[TechnicalSpecification] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "context", MappingProxyType(dict(self.context or {})))

    @property
    def domain(self) -> str:
        return str(self.context.get("domain") or "general")

    @property
    def complexity(self) -> str:
        return str(self.context.get("complexity") or "standard")

    def to_dict(self) -> Dict[str, Any]:
        """Plain representation used for fingerprints and learning events."""
        spec = None
        if self.specification is not None:
            spec = {
                "architecture_style": self.specification.architecture_style,
                "components": [
                    {
                        "name": c.name,
                        "kind": c.kind.value,
                        "purpose": c.purpose,
                        "responsibilities": list(c.responsibilities),
                    }
                    for c in self.specification.components
                ],
                "technologies": list(self.specification.technologies),
            }
        return {
            "prompt": self.prompt,
            "framework": self.framework,
            "language": self.language,
            "context": dict(self.context),
            "specification": spec,
        }


@dataclass(frozen=True)
class IntentAnalysis:
    """Coarse classification of a prompt plus what could be extracted from it."""

    label: IntentLabel
    confidence: float
    entities: Tuple[str, ...] = ()
    features: Tuple[str, ...] = ()
    domain: str = "general"
    complexity: str = "standard"
    components: Tuple[ComponentSpec, ...] = ()


@dataclass(frozen=True)
class TemplateRef:
    """A candidate template found for a request."""

    name: str
    framework: str
    tags: Tuple[str, ...] = ()
    description: str = ""


@dataclass(frozen=True)
class GenerationContext:
    """Everything the Generate stage needs, derived once from a request."""

    request: GenerationRequest
    intent: IntentAnalysis
    templates: Tuple[TemplateRef, ...]
    specification: TechnicalSpecification
    language: str
    framework: str


# ---------------------------------------------------------------------------
# Artifacts
# ---------------------------------------------------------------------------


class FrozenArtifactError(AttributeError):
    """Raised when an artifact is modified after the pipeline finished with it."""


class _Freezable:
    _frozen = False

    def __setattr__(self, name: str, value: Any) -> None:
        if self._frozen:
            raise FrozenArtifactError(
                f"{type(self).__name__} is frozen; cannot set '{name}'"
            )
        super().__setattr__(name, value)


@dataclass
class ArtifactMetadata(_Freezable):
    """Mutable bookkeeping attached to an artifact during Validate and Optimize."""

    lines_of_code: int = 0
    complexity: int = 1
    quality_score: float = 0.0
    validated: bool = False
    optimization_log: List[str] = field(default_factory=list)
    source: ArtifactSource = ArtifactSource.PROVIDER

    def freeze(self) -> None:
        self.optimization_log = tuple(self.optimization_log)  # type: ignore[assignment]
        object.__setattr__(self, "_frozen", True)


@dataclass
class Artifact(_Freezable):
    """One generated file."""

    name: str
    kind: ArtifactKind
    content: str
    language: str
    path: str
    framework: str
    dependencies: List[str] = field(default_factory=list)
    metadata: ArtifactMetadata = field(default_factory=ArtifactMetadata)

    def freeze(self) -> None:
        """Make the artifact and its metadata read-only."""
        self.metadata.freeze()
        self.dependencies = tuple(self.dependencies)  # type: ignore[assignment]
        object.__setattr__(self, "_frozen", True)

    @property
    def is_frozen(self) -> bool:
        return self._frozen


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Issue:
    """A single structural finding for one artifact."""

    artifact: str
    check: str
    severity: IssueSeverity
    message: str
    line: int = 0

    def __str__(self) -> str:
        location = f"{self.artifact}:{self.line}" if self.line else self.artifact
        return f"{location}: {self.severity.value} [{self.check}] {self.message}"


@dataclass(frozen=True)
class ValidationReport:
    score: float
    issues: Tuple[Issue, ...] = ()

    @property
    def blocking_issues(self) -> Tuple[Issue, ...]:
        return tuple(i for i in self.issues if i.severity.is_blocking)


# ---------------------------------------------------------------------------
# Stage outcomes and results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StageOutcome(Generic[T]):
    """Result of running one stage: a payload on success, an error otherwise."""

    success: bool
    payload: Optional[T] = None
    error: Optional[str] = None
    cause: Optional[BaseException] = None

    def __post_init__(self) -> None:
        if self.success and self.payload is None:
            raise ValueError("A successful stage outcome must carry a payload")
        if not self.success and self.payload is not None:
            raise ValueError("A failed stage outcome must not carry a payload")

    @classmethod
    def ok(cls, payload: T) -> "StageOutcome[T]":
        return cls(success=True, payload=payload)

    @classmethod
    def failed(
        cls, error: str, cause: Optional[BaseException] = None
    ) -> "StageOutcome[T]":
        return cls(success=False, error=error, cause=cause)


@dataclass(frozen=True)
class PipelineWarning:
    """A non-fatal problem absorbed at a stage boundary."""

    stage: PipelineStage
    code: str
    message: str
    component: Optional[str] = None


@dataclass(frozen=True)
class GenerationMetadata:
    started_at: datetime
    duration_seconds: float
    stages: Mapping[PipelineStage, StageStatus]
    warnings: Tuple[PipelineWarning, ...] = ()
    fingerprint: str = ""
    fallback_count: int = 0
    language: str = ""
    framework: str = ""


@dataclass(frozen=True)
class PipelineResult:
    """The final, read-only outcome of a successful pipeline run."""

    artifacts: Tuple[Artifact, ...]
    quality_score: float
    dependencies: Tuple[str, ...]
    issues: Tuple[Issue, ...]
    metadata: GenerationMetadata
    package_manifest: Mapping[str, str]
    summary: str

    @property
    def success(self) -> bool:
        return True

    @property
    def status(self) -> ResultStatus:
        if self.metadata.warnings:
            return ResultStatus.DEGRADED
        return ResultStatus.COMPLETED

    @property
    def artifact_names(self) -> List[str]:
        return [a.name for a in self.artifacts]


@dataclass(frozen=True)
class LearningEvent:
    """Record handed to the learning sink after every run."""

    prompt: str
    context: Mapping[str, Any]
    outcome: Mapping[str, Any]
    success: bool
    recorded_at: datetime
