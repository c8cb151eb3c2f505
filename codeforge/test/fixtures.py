"""Stub collaborators and builders shared by the pipeline tests."""

import threading
import time
from typing import Callable, List, Optional, Sequence

from codeforge.application.interfaces.iintent_analyzer import IIntentAnalyzer
from codeforge.application.interfaces.illm_client import ILLMClient
from codeforge.application.interfaces.ilearning_sink import ILearningSink
from codeforge.application.interfaces.ioptimization_service import (
    IOptimizationService,
)
from codeforge.application.interfaces.iprovider_gateway import (
    IProviderGateway,
    ProviderResponse,
)
from codeforge.application.interfaces.itemplate_catalog import ITemplateCatalog
from codeforge.application.interfaces.ivalidation_service import IValidationService
from codeforge.application.services.artifact_generator import ArtifactGenerator
from codeforge.application.services.context_builder import ContextBuilder
from codeforge.application.services.exceptions import (
    OptimizationUnavailableError,
    ProviderUnavailableError,
    ValidationUnavailableError,
)
from codeforge.application.services.generation_cache import GenerationCache
from codeforge.application.services.pipeline_orchestrator import PipelineOrchestrator
from codeforge.domain.model_types import ArtifactKind, IntentLabel, PipelineStage
from codeforge.domain.models import (
    Artifact,
    ArtifactMetadata,
    ComponentSpec,
    GenerationContext,
    GenerationRequest,
    IntentAnalysis,
    LearningEvent,
    TechnicalSpecification,
    TemplateRef,
    ValidationReport,
)
from codeforge.infrastructure.analysis.heuristic_intent_analyzer import (
    HeuristicIntentAnalyzer,
)
from codeforge.infrastructure.analysis.template_catalog import InMemoryTemplateCatalog
from codeforge.infrastructure.llm.mock_llm_client import MockLLMClient
from codeforge.infrastructure.llm.model_factory import ModelFactory
from codeforge.infrastructure.optimization.code_optimizer import CodeOptimizer
from codeforge.infrastructure.validation.structural_validator import (
    StructuralValidator,
)

TSX_TODO_LIST = """import React, { useState } from 'react';

interface TodoItem {
  id: number;
  title: string;
  done: boolean;
}

export default function TodoList() {
  const [todos, setTodos] = useState<TodoItem[]>([]);

  const toggle = (id: number) => {
    setTodos(todos.map((t) => (t.id === id ? { ...t, done: !t.done } : t)));
  };

  return (
    <ul>
      {todos.map((t) => (
        <li key={t.id} onClick={() => toggle(t.id)}>{t.title}</li>
      ))}
    </ul>
  );
}
"""


def canned_reply(prompt: str) -> str:
    """Marker-tagged code for the component named in the prompt."""
    return MockLLMClient(ModelFactory.MOCK_MODEL).complete(prompt)


class ScriptedGateway(IProviderGateway):
    """Answers with ``respond(prompt)`` and records every prompt it saw."""

    def __init__(
        self,
        respond: Callable[[str], str] = canned_reply,
        delay: float = 0.0,
    ):
        self.respond = respond
        self.delay = delay
        self.prompts: List[str] = []
        self._lock = threading.Lock()

    @property
    def calls(self) -> int:
        with self._lock:
            return len(self.prompts)

    def generate(
        self,
        prompt,
        max_tokens,
        temperature,
        cancel_token=None,
        stage=PipelineStage.GENERATE,
    ):
        with self._lock:
            self.prompts.append(prompt)
        if self.delay:
            time.sleep(self.delay)
        if cancel_token is not None:
            cancel_token.raise_if_cancelled(stage)
        return ProviderResponse(text=self.respond(prompt), model="stub")


class FailingGateway(IProviderGateway):
    def __init__(self):
        self.calls = 0

    def generate(
        self,
        prompt,
        max_tokens,
        temperature,
        cancel_token=None,
        stage=PipelineStage.GENERATE,
    ):
        self.calls += 1
        raise ProviderUnavailableError("provider down")


class StubAnalyzer(IIntentAnalyzer):
    def __init__(self, analysis: Optional[IntentAnalysis] = None, error=None):
        self.analysis = analysis
        self.error = error

    def analyze(self, request: GenerationRequest, cancel_token=None) -> IntentAnalysis:
        if self.error is not None:
            raise self.error
        return self.analysis


class BlockingClient(ILLMClient):
    """Holds every call until ``release`` is set, like a provider that hangs."""

    def __init__(self):
        super().__init__(ModelFactory.MOCK_MODEL)
        self.started = threading.Event()
        self.release = threading.Event()

    def complete(self, prompt, max_tokens=4000, temperature=0.2, timeout=None):
        self.started.set()
        self.release.wait(10)
        return "{}"


class FailingCatalog(ITemplateCatalog):
    def search(self, intent, framework, domain=None) -> List[TemplateRef]:
        raise RuntimeError("catalog offline")


class RecordingSink(ILearningSink):
    def __init__(self):
        self.events: List[LearningEvent] = []

    def record(self, event: LearningEvent) -> None:
        self.events.append(event)


class FailingSink(ILearningSink):
    def record(self, event: LearningEvent) -> None:
        raise RuntimeError("sink unavailable")


class FailingValidator(IValidationService):
    """Marks everything valid, then fails, to prove the stage works on a copy."""

    def validate(self, artifacts: List[Artifact]) -> ValidationReport:
        for artifact in artifacts:
            artifact.metadata.validated = True
            artifact.metadata.quality_score = 100.0
            artifact.content = "corrupted"
        raise ValidationUnavailableError("validator crashed")


class FailingOptimizer(IOptimizationService):
    def optimize(self, artifacts: List[Artifact]) -> List[Artifact]:
        for artifact in artifacts:
            artifact.content = "half-optimized"
        raise OptimizationUnavailableError("optimizer crashed")


def make_artifact(
    name: str = "TodoList",
    content: str = TSX_TODO_LIST,
    language: str = "typescript",
    framework: str = "react",
    kind: ArtifactKind = ArtifactKind.COMPONENT,
    dependencies: Sequence[str] = (),
) -> Artifact:
    return Artifact(
        name=name,
        kind=kind,
        content=content,
        language=language,
        path=f"src/components/{name}.tsx",
        framework=framework,
        dependencies=list(dependencies),
        metadata=ArtifactMetadata(),
    )


def make_context(
    prompt: str = "todo list app",
    components: Sequence[ComponentSpec] = (),
    language: str = "typescript",
    framework: str = "react",
    entities: Sequence[str] = (),
) -> GenerationContext:
    request = GenerationRequest(prompt=prompt, framework=framework, language=language)
    intent = IntentAnalysis(
        label=IntentLabel.CREATE_COMPONENT, confidence=0.7, entities=tuple(entities)
    )
    return GenerationContext(
        request=request,
        intent=intent,
        templates=(),
        specification=TechnicalSpecification(components=tuple(components)),
        language=language,
        framework=framework,
    )


def make_orchestrator(
    gateway: IProviderGateway,
    validator: Optional[IValidationService] = None,
    optimizer: Optional[IOptimizationService] = None,
    learning_sink: Optional[ILearningSink] = None,
    cache: Optional[GenerationCache] = None,
    **generator_options,
) -> PipelineOrchestrator:
    """Real pipeline components around a stub gateway."""
    heuristic = HeuristicIntentAnalyzer()
    return PipelineOrchestrator(
        ContextBuilder(heuristic, heuristic, InMemoryTemplateCatalog()),
        ArtifactGenerator(gateway, **generator_options),
        validator=validator or StructuralValidator(),
        optimizer=optimizer or CodeOptimizer(),
        learning_sink=learning_sink,
        cache=cache,
    )
