from codeforge.application.services.artifact_splitter import ArtifactSplitter
from codeforge.infrastructure.llm.mock_llm_client import MockLLMClient
from codeforge.infrastructure.llm.model_factory import ModelFactory


def test_echoes_requested_marker():
    client = MockLLMClient(ModelFactory.MOCK_MODEL)
    reply = client.complete(
        "Wrap it as ```component:TodoList:component:src/components/TodoList.tsx"
    )

    assert reply.startswith("```component:TodoList:component:src/components/TodoList.tsx\n")
    assert "export default function TodoList" in reply
    assert "TodoListProps" in reply
    assert client.calls == 1

    drafts = ArtifactSplitter().split(reply, component_name="TodoList")
    assert [d.name for d in drafts] == ["TodoList"]
    assert drafts[0].path == "src/components/TodoList.tsx"


def test_language_follows_path():
    client = MockLLMClient(ModelFactory.MOCK_MODEL)

    python = client.complete("component:TaskStore:service:app/services/task_store.py")
    assert "class TaskStore:" in python
    assert "task store" in python

    js = client.complete("component:Cart:component:src/components/Cart.jsx")
    assert "CartProps" not in js

    service = client.complete("component:Api:service:src/services/Api.ts")
    assert "export class Api" in service


def test_without_marker_returns_nothing():
    assert MockLLMClient(ModelFactory.MOCK_MODEL).complete("no marker here") == ""
