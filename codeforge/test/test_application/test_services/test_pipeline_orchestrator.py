import logging
import threading

import pytest

from codeforge.application.services.cancellation import CancellationToken
from codeforge.application.services.context_builder import ContextBuilder
from codeforge.application.services.artifact_generator import ArtifactGenerator
from codeforge.application.services.exceptions import (
    InvalidRequestError,
    PipelineCancelledError,
    ValidationUnavailableError,
)
from codeforge.application.services.generation_cache import GenerationCache
from codeforge.application.services.pipeline_orchestrator import PipelineOrchestrator
from codeforge.domain.model_types import (
    ArtifactSource,
    PipelineStage,
    ResultStatus,
    StageStatus,
)
from codeforge.domain.models import FrozenArtifactError, GenerationRequest
from codeforge.infrastructure.analysis.heuristic_intent_analyzer import (
    HeuristicIntentAnalyzer,
)
from codeforge.infrastructure.analysis.provider_intent_analyzer import (
    ProviderIntentAnalyzer,
)
from codeforge.infrastructure.analysis.template_catalog import InMemoryTemplateCatalog
from codeforge.infrastructure.llm.provider_gateway import LLMProviderGateway
from codeforge.test.fixtures import (
    TSX_TODO_LIST,
    BlockingClient,
    FailingGateway,
    FailingOptimizer,
    FailingSink,
    FailingValidator,
    RecordingSink,
    ScriptedGateway,
    make_orchestrator,
)

THREE_SECTIONS = """Here are the layout pieces.

```component:Header:component:src/components/Header.tsx
export default function Header() {
  return <header className="site-header">Site title and navigation</header>;
}
```

```component:Footer:component:src/components/Footer.tsx
export default function Footer() {
  return <footer className="site-footer">Copyright and contact links</footer>;
}
```

```component:Main:component:src/components/Main.tsx
export default function Main() {
  return <main className="site-main">Primary page content goes here</main>;
}
```
"""


def todo_request(**kwargs):
    return GenerationRequest(
        prompt="todo list app", framework="react", language="typescript", **kwargs
    )


def test_unmarked_reply_becomes_one_named_artifact():
    gateway = ScriptedGateway(lambda p: f"```tsx\n{TSX_TODO_LIST}```")
    result = make_orchestrator(gateway).execute(todo_request())

    assert result.success
    assert result.status == ResultStatus.COMPLETED
    assert result.artifact_names == ["TodoList"]
    artifact = result.artifacts[0]
    assert artifact.kind.value == "component"
    assert artifact.path == "src/components/TodoList.tsx"
    assert artifact.metadata.validated
    assert artifact.metadata.quality_score > 0
    assert result.dependencies == ("react",)
    assert dict(result.package_manifest) == {"react": "latest"}
    assert result.summary.startswith("# TodoList")
    assert gateway.calls == 1


TSX_TODO_LIST_EXPORTED_TYPES = """import React, { useState } from 'react';

export type Filter = 'all' | 'open' | 'done';

export interface TodoListProps {
  initialFilter?: Filter;
}

export default function TodoList({ initialFilter = 'all' }: TodoListProps) {
  const [filter, setFilter] = useState<Filter>(initialFilter);

  return (
    <section>
      <button onClick={() => setFilter('open')}>Open</button>
      <p>Showing {filter}</p>
    </section>
  );
}
"""


def test_exported_prop_types_stay_with_their_component():
    gateway = ScriptedGateway(lambda p: f"```tsx\n{TSX_TODO_LIST_EXPORTED_TYPES}```")
    result = make_orchestrator(gateway).execute(todo_request())

    assert result.status == ResultStatus.COMPLETED
    assert result.artifact_names == ["TodoList"]
    content = result.artifacts[0].content
    assert content.startswith("import React, { useState } from 'react';")
    assert "export interface TodoListProps" in content
    assert "export type Filter" in content
    assert result.artifacts[0].metadata.validated
    assert result.dependencies == ("react",)


def test_marker_blocks_become_artifacts_in_order():
    gateway = ScriptedGateway(lambda p: THREE_SECTIONS)
    result = make_orchestrator(gateway).execute(
        GenerationRequest(prompt="landing page layout", framework="react", language="typescript")
    )

    assert result.artifact_names == ["Header", "Footer", "Main"]
    assert [a.path for a in result.artifacts] == [
        "src/components/Header.tsx",
        "src/components/Footer.tsx",
        "src/components/Main.tsx",
    ]
    assert all(a.metadata.validated for a in result.artifacts)
    assert result.metadata.stages == {
        PipelineStage.PREPARE: StageStatus.SUCCEEDED,
        PipelineStage.GENERATE: StageStatus.SUCCEEDED,
        PipelineStage.VALIDATE: StageStatus.SUCCEEDED,
        PipelineStage.OPTIMIZE: StageStatus.SUCCEEDED,
    }


def test_failing_validator_degrades_without_losing_artifacts():
    gateway = ScriptedGateway(lambda p: f"```tsx\n{TSX_TODO_LIST}```")
    result = make_orchestrator(gateway, validator=FailingValidator()).execute(
        todo_request()
    )

    assert result.success
    assert result.status == ResultStatus.DEGRADED
    assert all(not a.metadata.validated for a in result.artifacts)
    assert all(a.content != "corrupted" for a in result.artifacts)
    assert "export default function TodoList()" in result.artifacts[0].content
    assert result.quality_score == 0.0
    assert result.issues == ()
    warnings = result.metadata.warnings
    assert [w.stage for w in warnings] == [PipelineStage.VALIDATE]
    assert warnings[0].code == "validation_unavailable"
    assert result.metadata.stages[PipelineStage.VALIDATE] == StageStatus.FAILED
    assert result.metadata.stages[PipelineStage.OPTIMIZE] == StageStatus.SUCCEEDED


def test_stage_failure_is_logged_with_its_cause(caplog: pytest.LogCaptureFixture):
    gateway = ScriptedGateway(lambda p: f"```tsx\n{TSX_TODO_LIST}```")
    with caplog.at_level(logging.WARNING):
        make_orchestrator(gateway, validator=FailingValidator()).execute(todo_request())

    [record] = [r for r in caplog.records if "validate skipped" in r.getMessage()]
    assert isinstance(record.exc_info[1], ValidationUnavailableError)


def test_failing_optimizer_keeps_validated_artifacts():
    gateway = ScriptedGateway(lambda p: f"```tsx\n{TSX_TODO_LIST}```")
    result = make_orchestrator(gateway, optimizer=FailingOptimizer()).execute(
        todo_request()
    )

    assert result.status == ResultStatus.DEGRADED
    artifact = result.artifacts[0]
    assert artifact.content != "half-optimized"
    assert artifact.metadata.validated
    assert result.metadata.warnings[0].stage == PipelineStage.OPTIMIZE
    assert result.metadata.stages[PipelineStage.OPTIMIZE] == StageStatus.FAILED


def test_identical_concurrent_requests_share_one_run():
    gateway = ScriptedGateway(delay=0.3)
    orchestrator = make_orchestrator(gateway, cache=GenerationCache())
    barrier = threading.Barrier(2)
    results = [None, None]

    def run(index):
        barrier.wait()
        results[index] = orchestrator.execute(todo_request())

    threads = [threading.Thread(target=run, args=(i,)) for i in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(10)

    assert gateway.calls == 1
    assert results[0] is not None
    assert results[0] is results[1]


def test_provider_outage_yields_fallback_result():
    result = make_orchestrator(FailingGateway()).execute(todo_request())

    assert result.success
    assert result.status == ResultStatus.DEGRADED
    assert result.metadata.fallback_count == 1
    assert result.artifacts[0].metadata.source == ArtifactSource.FALLBACK
    assert "(placeholder)" in result.summary


def test_result_artifacts_are_frozen():
    result = make_orchestrator(ScriptedGateway()).execute(todo_request())
    artifact = result.artifacts[0]

    with pytest.raises(FrozenArtifactError):
        artifact.content = "changed"
    with pytest.raises(FrozenArtifactError):
        artifact.metadata.quality_score = 1.0
    with pytest.raises(TypeError):
        result.metadata.stages[PipelineStage.VALIDATE] = StageStatus.SKIPPED


def test_disabled_stages_are_skipped_without_warnings():
    heuristic = HeuristicIntentAnalyzer()
    orchestrator = PipelineOrchestrator(
        ContextBuilder(heuristic, heuristic, InMemoryTemplateCatalog()),
        ArtifactGenerator(ScriptedGateway()),
    )
    result = orchestrator.execute(todo_request())

    assert result.status == ResultStatus.COMPLETED
    assert result.metadata.warnings == ()
    assert result.metadata.stages[PipelineStage.VALIDATE] == StageStatus.SKIPPED
    assert result.metadata.stages[PipelineStage.OPTIMIZE] == StageStatus.SKIPPED
    assert not result.artifacts[0].metadata.validated
    assert result.quality_score == 0.0


def test_blank_prompt_is_rejected_and_recorded():
    sink = RecordingSink()
    orchestrator = make_orchestrator(ScriptedGateway(), learning_sink=sink)

    with pytest.raises(InvalidRequestError) as exc_info:
        orchestrator.execute(GenerationRequest(prompt="   "))

    assert exc_info.value.stage == PipelineStage.PREPARE
    assert len(sink.events) == 1
    event = sink.events[0]
    assert not event.success
    assert event.outcome["error"] == "invalid_request"
    assert event.outcome["stage"] == "prepare"


def test_cancelled_before_start():
    gateway = ScriptedGateway()
    token = CancellationToken()
    token.cancel()

    with pytest.raises(PipelineCancelledError) as exc_info:
        make_orchestrator(gateway).execute(todo_request(), token)

    assert exc_info.value.stage == PipelineStage.PREPARE
    assert gateway.calls == 0


def test_cancelled_during_generation_returns_no_result():
    token = CancellationToken()

    def respond(prompt):
        token.cancel("caller gave up")
        return f"```tsx\n{TSX_TODO_LIST}```"

    with pytest.raises(PipelineCancelledError):
        make_orchestrator(ScriptedGateway(respond)).execute(todo_request(), token)


def test_cancelled_during_intent_analysis():
    client = BlockingClient()
    analysis_gateway = LLMProviderGateway(client, timeout_seconds=5)
    generation_gateway = ScriptedGateway()
    sink = RecordingSink()
    orchestrator = PipelineOrchestrator(
        ContextBuilder(
            ProviderIntentAnalyzer(analysis_gateway),
            HeuristicIntentAnalyzer(),
            InMemoryTemplateCatalog(),
        ),
        ArtifactGenerator(generation_gateway),
        learning_sink=sink,
    )
    token = CancellationToken()
    canceller = threading.Thread(
        target=lambda: client.started.wait(5) and token.cancel("caller gave up")
    )
    canceller.start()

    try:
        with pytest.raises(PipelineCancelledError) as exc_info:
            orchestrator.execute(todo_request(), token)
    finally:
        canceller.join()
        client.release.set()
        analysis_gateway.close()

    assert exc_info.value.stage == PipelineStage.PREPARE
    assert generation_gateway.calls == 0
    assert sink.events[0].outcome["stage"] == "prepare"
    assert sink.events[0].outcome["error"] == "cancelled"


def test_learning_event_describes_the_run():
    sink = RecordingSink()
    result = make_orchestrator(ScriptedGateway(), learning_sink=sink).execute(
        todo_request(context={"domain": "productivity"})
    )

    assert len(sink.events) == 1
    event = sink.events[0]
    assert event.success
    assert event.prompt == "todo list app"
    assert event.context["domain"] == "productivity"
    assert event.context["framework"] == "react"
    assert event.outcome["status"] == "completed"
    assert event.outcome["artifact_count"] == 1
    assert event.outcome["quality_score"] == result.quality_score
    assert event.outcome["fingerprint"] == result.metadata.fingerprint


def test_failing_sink_does_not_fail_the_run():
    result = make_orchestrator(ScriptedGateway(), learning_sink=FailingSink()).execute(
        todo_request()
    )
    assert result.success
    assert result.status == ResultStatus.COMPLETED
