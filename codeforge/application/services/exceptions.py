"""Error taxonomy for the generation pipeline.

Every error carries the stage it was raised in. Errors raised out of
``PipelineOrchestrator.execute`` mean no result was produced; the rest are
caught at a stage boundary and turned into warnings.
"""

from typing import Optional

from codeforge.domain.model_types import PipelineStage


class PipelineError(Exception):
    """Base class for all pipeline errors."""

    code = "pipeline_error"

    def __init__(
        self,
        message: str,
        stage: Optional[PipelineStage] = None,
        component: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.component = component

    def __str__(self) -> str:
        if self.stage is None:
            return self.message
        return f"[{self.stage.value}] {self.message}"


class InvalidRequestError(PipelineError):
    """The request cannot be processed (e.g. an empty prompt)."""

    code = "invalid_request"

    def __init__(self, message: str):
        super().__init__(message, stage=PipelineStage.PREPARE)


class ProviderUnavailableError(PipelineError):
    """The provider failed, timed out or ran out of retries."""

    code = "provider_unavailable"

    def __init__(self, message: str, component: Optional[str] = None):
        super().__init__(message, stage=PipelineStage.GENERATE, component=component)


class SplitFailureError(PipelineError):
    """Provider text held no usable artifact."""

    code = "split_failure"

    def __init__(self, message: str, component: Optional[str] = None):
        super().__init__(message, stage=PipelineStage.GENERATE, component=component)


class ValidationUnavailableError(PipelineError):
    code = "validation_unavailable"

    def __init__(self, message: str):
        super().__init__(message, stage=PipelineStage.VALIDATE)


class OptimizationUnavailableError(PipelineError):
    code = "optimization_unavailable"

    def __init__(self, message: str):
        super().__init__(message, stage=PipelineStage.OPTIMIZE)


class InternalPipelineError(PipelineError):
    """An internal invariant was violated, such as a duplicate artifact name."""

    code = "internal_error"


class PipelineCancelledError(PipelineError):
    code = "cancelled"
