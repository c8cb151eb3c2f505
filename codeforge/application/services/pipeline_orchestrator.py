"""Runs the Prepare, Generate, Validate and Optimize stages for one request."""

import copy
import logging
import time
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, List, Optional, Tuple

from codeforge.application.interfaces.ilearning_sink import ILearningSink
from codeforge.application.interfaces.ioptimization_service import (
    IOptimizationService,
)
from codeforge.application.interfaces.ivalidation_service import IValidationService
from codeforge.application.services.artifact_generator import (
    ArtifactGenerator,
    GenerationOutput,
)
from codeforge.application.services.cancellation import CancellationToken
from codeforge.application.services.context_builder import ContextBuilder
from codeforge.application.services.exceptions import (
    InternalPipelineError,
    OptimizationUnavailableError,
    PipelineError,
    ValidationUnavailableError,
)
from codeforge.application.services.generation_cache import (
    GenerationCache,
    request_fingerprint,
)
from codeforge.application.services.result_presenter import (
    ResultPresenter,
    merge_dependencies,
)
from codeforge.domain.model_types import PipelineStage, StageStatus
from codeforge.domain.models import (
    Artifact,
    GenerationContext,
    GenerationMetadata,
    GenerationRequest,
    Issue,
    LearningEvent,
    PipelineResult,
    PipelineWarning,
    StageOutcome,
    ValidationReport,
)

logger = logging.getLogger(__name__)


class _RunState:
    """Per-run bookkeeping. Never shared between calls."""

    def __init__(self, request: GenerationRequest, fingerprint: str):
        self.request = request
        self.fingerprint = fingerprint
        self.started_at = datetime.now(timezone.utc)
        self.started = time.perf_counter()
        self.stage = PipelineStage.PREPARE
        self.stages: Dict[PipelineStage, StageStatus] = {}
        self.warnings: List[PipelineWarning] = []
        self.context: Optional[GenerationContext] = None

    @property
    def elapsed(self) -> float:
        return time.perf_counter() - self.started


class PipelineOrchestrator:
    """Turns a GenerationRequest into a PipelineResult.

    Prepare and Generate are fatal: their errors propagate as PipelineError
    subclasses. Validate and Optimize are not: each works on a deep copy of
    the artifacts, and the copy is adopted only if the stage succeeds. A
    failed stage is logged, recorded as a warning, and the artifacts from
    before the stage are kept.

    All collaborators are injected. The orchestrator holds no per-run state,
    so one instance can serve concurrent ``execute`` calls.
    """

    def __init__(
        self,
        context_builder: ContextBuilder,
        artifact_generator: ArtifactGenerator,
        validator: Optional[IValidationService] = None,
        optimizer: Optional[IOptimizationService] = None,
        learning_sink: Optional[ILearningSink] = None,
        presenter: Optional[ResultPresenter] = None,
        cache: Optional[GenerationCache] = None,
        enable_validation: bool = True,
        enable_optimization: bool = True,
    ):
        self.context_builder = context_builder
        self.artifact_generator = artifact_generator
        self.validator = validator
        self.optimizer = optimizer
        self.learning_sink = learning_sink
        self.presenter = presenter or ResultPresenter()
        self.cache = cache
        self.enable_validation = enable_validation and validator is not None
        self.enable_optimization = enable_optimization and optimizer is not None

    def execute(
        self,
        request: GenerationRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> PipelineResult:
        """Run the full pipeline for one request.

        Args:
            request: What to generate
            cancel_token: Optional token; cancelling aborts the run

        Returns:
            PipelineResult with at least one artifact

        Raises:
            InvalidRequestError: If the request is unusable
            PipelineCancelledError: If the token was cancelled
            InternalPipelineError: If an internal invariant was violated
        """
        fingerprint = request_fingerprint(request)
        if self.cache is not None:
            return self.cache.get_or_compute(
                fingerprint,
                lambda: self._run(request, fingerprint, cancel_token),
                cancel_token,
            )
        return self._run(request, fingerprint, cancel_token)

    def _run(
        self,
        request: GenerationRequest,
        fingerprint: str,
        cancel_token: Optional[CancellationToken],
    ) -> PipelineResult:
        state = _RunState(request, fingerprint)
        logger.info(f"Pipeline started for request {fingerprint[:12]}")
        try:
            result = self._run_stages(state, cancel_token)
        except PipelineError as e:
            if e.stage is None:
                e.stage = state.stage
            logger.error(f"Pipeline failed in {e.stage.value}: {e.message}")
            self._record(state, success=False, error=e)
            raise
        except Exception as e:
            error = InternalPipelineError(f"Unexpected error: {e}", stage=state.stage)
            logger.exception(f"Pipeline failed in {state.stage.value}")
            self._record(state, success=False, error=error)
            raise error from e

        logger.info(
            f"Pipeline finished: {len(result.artifacts)} artifact(s), "
            f"score={result.quality_score}, status={result.status.value}, "
            f"{result.metadata.duration_seconds:.2f}s"
        )
        self._record(state, success=True, result=result)
        return result

    def _run_stages(
        self, state: _RunState, cancel_token: Optional[CancellationToken]
    ) -> PipelineResult:
        # Prepare
        self._enter(state, PipelineStage.PREPARE, cancel_token)
        context = self.context_builder.build(state.request, cancel_token)
        state.context = context
        state.stages[PipelineStage.PREPARE] = StageStatus.SUCCEEDED

        # Generate
        self._enter(state, PipelineStage.GENERATE, cancel_token)
        output: GenerationOutput = self.artifact_generator.generate(context, cancel_token)
        state.warnings.extend(output.warnings)
        artifacts = output.artifacts
        self._check_artifacts(artifacts)
        state.stages[PipelineStage.GENERATE] = StageStatus.SUCCEEDED

        # Validate
        self._enter(state, PipelineStage.VALIDATE, cancel_token)
        issues: Tuple[Issue, ...] = ()
        if self.enable_validation:
            validated = self._validate(artifacts)
            if validated.success:
                artifacts, report = validated.payload
                issues = report.issues
                state.stages[PipelineStage.VALIDATE] = StageStatus.SUCCEEDED
            else:
                self._stage_failed(state, ValidationUnavailableError.code, validated)
        else:
            state.stages[PipelineStage.VALIDATE] = StageStatus.SKIPPED

        # Optimize
        self._enter(state, PipelineStage.OPTIMIZE, cancel_token)
        if self.enable_optimization:
            optimized = self._optimize(artifacts)
            if optimized.success:
                artifacts = optimized.payload
                state.stages[PipelineStage.OPTIMIZE] = StageStatus.SUCCEEDED
            else:
                self._stage_failed(state, OptimizationUnavailableError.code, optimized)
        else:
            state.stages[PipelineStage.OPTIMIZE] = StageStatus.SKIPPED

        if cancel_token is not None:
            cancel_token.raise_if_cancelled(PipelineStage.OPTIMIZE)
        return self._build_result(state, context, artifacts, issues, output.fallback_count)

    def _enter(
        self,
        state: _RunState,
        stage: PipelineStage,
        cancel_token: Optional[CancellationToken],
    ) -> None:
        state.stage = stage
        if cancel_token is not None:
            cancel_token.raise_if_cancelled(stage)
        logger.info(f"Stage {stage.value} started")

    def _stage_failed(
        self, state: _RunState, code: str, outcome: StageOutcome
    ) -> None:
        message = f"{state.stage.value} skipped: {outcome.error}"
        logger.warning(message, exc_info=outcome.cause)
        state.stages[state.stage] = StageStatus.FAILED
        state.warnings.append(
            PipelineWarning(stage=state.stage, code=code, message=message)
        )

    def _validate(
        self, artifacts: List[Artifact]
    ) -> StageOutcome[Tuple[List[Artifact], ValidationReport]]:
        working = copy.deepcopy(artifacts)
        try:
            report = self.validator.validate(working)
        except Exception as e:
            return StageOutcome.failed(str(e) or type(e).__name__, e)
        for artifact in working:
            blocking = any(
                i.artifact == artifact.name and i.severity.is_blocking
                for i in report.issues
            )
            if blocking and artifact.metadata.validated:
                return StageOutcome.failed(
                    f"{artifact.name} marked valid despite blocking issues"
                )
        return StageOutcome.ok((working, report))

    def _optimize(self, artifacts: List[Artifact]) -> StageOutcome[List[Artifact]]:
        working = copy.deepcopy(artifacts)
        try:
            optimized = self.optimizer.optimize(working)
        except Exception as e:
            return StageOutcome.failed(str(e) or type(e).__name__, e)
        if [a.name for a in optimized] != [a.name for a in artifacts]:
            return StageOutcome.failed("Optimizer changed the set of artifacts")
        return StageOutcome.ok(list(optimized))

    @staticmethod
    def _check_artifacts(artifacts: List[Artifact]) -> None:
        if not artifacts:
            raise InternalPipelineError(
                "Generate stage produced no artifacts", stage=PipelineStage.GENERATE
            )
        names = [a.name for a in artifacts]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise InternalPipelineError(
                f"Duplicate artifact names: {', '.join(duplicates)}",
                stage=PipelineStage.GENERATE,
            )

    def _build_result(
        self,
        state: _RunState,
        context: GenerationContext,
        artifacts: List[Artifact],
        issues: Tuple[Issue, ...],
        fallback_count: int,
    ) -> PipelineResult:
        for artifact in artifacts:
            artifact.freeze()

        quality_score = round(
            sum(a.metadata.quality_score for a in artifacts) / len(artifacts), 2
        )
        warnings = tuple(state.warnings)
        metadata = GenerationMetadata(
            started_at=state.started_at,
            duration_seconds=state.elapsed,
            stages=MappingProxyType(dict(state.stages)),
            warnings=warnings,
            fingerprint=state.fingerprint,
            fallback_count=fallback_count,
            language=context.language,
            framework=context.framework,
        )
        return PipelineResult(
            artifacts=tuple(artifacts),
            quality_score=quality_score,
            dependencies=tuple(merge_dependencies(artifacts)),
            issues=issues,
            metadata=metadata,
            package_manifest=MappingProxyType(self.presenter.package_manifest(artifacts)),
            summary=self.presenter.summary(
                artifacts,
                quality_score,
                issues,
                warnings,
                title=context.specification.components[0].name
                if context.specification.components
                else "Generated project",
            ),
        )

    def _record(
        self,
        state: _RunState,
        success: bool,
        result: Optional[PipelineResult] = None,
        error: Optional[PipelineError] = None,
    ) -> None:
        """Hand an event to the learning sink. Sink errors are logged, never raised."""
        if self.learning_sink is None:
            return

        request = state.request
        context = dict(request.context)
        context.update(
            {
                "framework": state.context.framework if state.context else request.framework,
                "language": state.context.language if state.context else request.language,
            }
        )
        outcome: Dict[str, object] = {
            "fingerprint": state.fingerprint,
            "duration_seconds": round(state.elapsed, 4),
            "stages": {s.value: status.value for s, status in state.stages.items()},
            "warnings": [w.code for w in state.warnings],
        }
        if result is not None:
            outcome.update(
                {
                    "status": result.status.value,
                    "quality_score": result.quality_score,
                    "artifact_count": len(result.artifacts),
                    "fallback_count": result.metadata.fallback_count,
                }
            )
        if error is not None:
            outcome.update(
                {
                    "status": "failed",
                    "error": error.code,
                    "message": error.message,
                    "stage": error.stage.value if error.stage else None,
                }
            )

        event = LearningEvent(
            prompt=request.prompt if isinstance(request.prompt, str) else "",
            context=MappingProxyType(context),
            outcome=MappingProxyType(outcome),
            success=success,
            recorded_at=datetime.now(timezone.utc),
        )
        try:
            self.learning_sink.record(event)
        except Exception as e:
            logger.warning(f"Learning sink failed, event dropped: {e}")
