"""Generate stage: one provider call per component, fallback on failure."""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Set

from codeforge.application.interfaces.iprovider_gateway import IProviderGateway
from codeforge.application.services.artifact_splitter import (
    ArtifactDraft,
    ArtifactSplitter,
)
from codeforge.application.services.cancellation import CancellationToken
from codeforge.application.services.code_metrics import (
    calculate_complexity,
    count_lines_of_code,
    extract_dependencies,
)
from codeforge.application.services.context_builder import placeholder_component
from codeforge.application.services.exceptions import (
    PipelineCancelledError,
    PipelineError,
    ProviderUnavailableError,
    SplitFailureError,
)
from codeforge.application.services.fallback_generator import FallbackGenerator
from codeforge.application.services.instruction_builder import InstructionBuilder
from codeforge.application.services.naming import (
    artifact_path,
    is_generic_name,
    unique_name,
)
from codeforge.domain.model_types import ArtifactSource, PipelineStage
from codeforge.domain.models import (
    Artifact,
    ArtifactMetadata,
    ComponentSpec,
    GenerationContext,
    PipelineWarning,
)

logger = logging.getLogger(__name__)


@dataclass
class ComponentOutcome:
    component: ComponentSpec
    drafts: List[ArtifactDraft]
    source: ArtifactSource
    warnings: List[PipelineWarning] = field(default_factory=list)


@dataclass
class GenerationOutput:
    """Artifacts from the Generate stage plus the per-component warnings."""

    artifacts: List[Artifact]
    warnings: List[PipelineWarning]
    fallback_count: int


class ArtifactGenerator:
    """Produces artifacts for every component of a context.

    Components are generated concurrently on a bounded pool and reassembled in
    component order. A component whose provider call fails, times out or
    returns nothing usable is replaced by a fallback stub; the other
    components are unaffected.
    """

    def __init__(
        self,
        gateway: IProviderGateway,
        splitter: Optional[ArtifactSplitter] = None,
        fallback_generator: Optional[FallbackGenerator] = None,
        instruction_builder: Optional[InstructionBuilder] = None,
        max_tokens: int = 4000,
        temperature: float = 0.2,
        max_concurrency: int = 4,
        min_viable_length: int = 50,
    ):
        self.gateway = gateway
        self.splitter = splitter or ArtifactSplitter(min_viable_length)
        self.fallback_generator = fallback_generator or FallbackGenerator()
        self.instruction_builder = instruction_builder or InstructionBuilder()
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.max_concurrency = max(1, max_concurrency)
        self.min_viable_length = min_viable_length

    def generate(
        self,
        context: GenerationContext,
        cancel_token: Optional[CancellationToken] = None,
    ) -> GenerationOutput:
        """Generate artifacts for all components in the context.

        Args:
            context: Context built by the Prepare stage
            cancel_token: Optional token; cancelling discards partial output

        Returns:
            GenerationOutput with at least one artifact

        Raises:
            PipelineCancelledError: If the token is cancelled mid-stage
        """
        components = list(context.specification.components)
        if not components:
            components = [placeholder_component(context.request.prompt, context.intent)]
            logger.info(f"No components specified, using '{components[0].name}'")

        workers = min(self.max_concurrency, len(components))
        executor = ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="codeforge-generate"
        )
        cancelled = False
        try:
            futures = [
                executor.submit(self._generate_component, c, context, cancel_token)
                for c in components
            ]
            outcomes = []
            for future in futures:
                if cancel_token is not None and cancel_token.cancelled:
                    cancelled = True
                    cancel_token.raise_if_cancelled(PipelineStage.GENERATE)
                outcomes.append(future.result())
        except PipelineCancelledError:
            cancelled = True
            raise
        finally:
            executor.shutdown(wait=True, cancel_futures=cancelled)

        return self._assemble(outcomes, context)

    def _generate_component(
        self,
        component: ComponentSpec,
        context: GenerationContext,
        cancel_token: Optional[CancellationToken],
    ) -> ComponentOutcome:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled(PipelineStage.GENERATE)

        try:
            drafts = self._drafts_from_provider(component, context, cancel_token)
            return ComponentOutcome(component, drafts, ArtifactSource.PROVIDER)
        except PipelineCancelledError:
            raise
        except PipelineError as e:
            code, message = e.code, e.message
        except Exception as e:
            logger.exception(f"Unexpected error generating {component.name}")
            code, message = ProviderUnavailableError.code, str(e)

        logger.warning(f"Using fallback for {component.name}: {message}")
        draft = self.fallback_generator.generate(
            component, context.language, context.framework
        )
        warning = PipelineWarning(
            stage=PipelineStage.GENERATE,
            code=code,
            message=f"Fallback used for {component.name}: {message}",
            component=component.name,
        )
        return ComponentOutcome(component, [draft], ArtifactSource.FALLBACK, [warning])

    def _drafts_from_provider(
        self,
        component: ComponentSpec,
        context: GenerationContext,
        cancel_token: Optional[CancellationToken],
    ) -> List[ArtifactDraft]:
        instruction = self.instruction_builder.build(component, context)
        response = self.gateway.generate(
            instruction, self.max_tokens, self.temperature, cancel_token
        )
        drafts = self.splitter.split(
            response.text,
            component_name=component.name,
            kind=component.kind,
            entities=context.intent.entities,
            language=context.language,
        )
        if not drafts or not self._is_viable("".join(d.content for d in drafts)):
            raise SplitFailureError(
                f"No usable content in provider reply ({len(drafts)} draft(s))",
                component=component.name,
            )
        logger.debug(
            f"{component.name}: {len(drafts)} artifact(s) after "
            f"{response.attempts} attempt(s)"
        )
        return [self._fix_generic_name(d, component.name) for d in drafts]

    def _is_viable(self, content: str) -> bool:
        return len(re.sub(r"\s", "", content)) >= self.min_viable_length

    @staticmethod
    def _fix_generic_name(draft: ArtifactDraft, expected: str) -> ArtifactDraft:
        """Rename a draft the provider gave a placeholder name such as "Item"."""
        if not is_generic_name(draft.name) or is_generic_name(expected):
            return draft
        pattern = re.compile(rf"\b{re.escape(draft.name)}(?=\b|Props\b)")
        path = draft.path.replace(draft.name, expected) if draft.path else None
        return ArtifactDraft(
            name=expected,
            kind=draft.kind,
            content=pattern.sub(expected, draft.content),
            path=path,
            strategy=draft.strategy,
        )

    def _assemble(
        self, outcomes: List[ComponentOutcome], context: GenerationContext
    ) -> GenerationOutput:
        taken: Set[str] = set()
        artifacts: List[Artifact] = []
        warnings: List[PipelineWarning] = []
        fallback_count = 0

        for outcome in outcomes:
            warnings.extend(outcome.warnings)
            if outcome.source == ArtifactSource.FALLBACK:
                fallback_count += 1
            for draft in outcome.drafts:
                name = unique_name(draft.name, taken)
                path = draft.path or artifact_path(
                    name, draft.kind, context.language, context.framework
                )
                artifacts.append(
                    Artifact(
                        name=name,
                        kind=draft.kind,
                        content=draft.content,
                        language=context.language,
                        path=path,
                        framework=context.framework,
                        dependencies=extract_dependencies(
                            draft.content, context.language
                        ),
                        metadata=ArtifactMetadata(
                            lines_of_code=count_lines_of_code(draft.content),
                            complexity=calculate_complexity(draft.content),
                            source=outcome.source,
                        ),
                    )
                )

        logger.info(
            f"Generated {len(artifacts)} artifact(s) from {len(outcomes)} "
            f"component(s), {fallback_count} fallback(s)"
        )
        return GenerationOutput(artifacts, warnings, fallback_count)
