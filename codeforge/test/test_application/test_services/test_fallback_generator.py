import ast

import pytest

from codeforge.application.services.fallback_generator import (
    NOT_IMPLEMENTED,
    FallbackGenerator,
    comment_text,
)
from codeforge.domain.model_types import ArtifactKind
from codeforge.domain.models import ComponentSpec
from codeforge.infrastructure.validation.structural_validator import (
    StructuralValidator,
)
from codeforge.infrastructure.validation.validators import (
    BraceLanguageValidator,
    PythonValidator,
)
from codeforge.test.fixtures import make_artifact


def test_react_stub_is_structurally_valid():
    component = ComponentSpec(
        name="TodoList",
        kind=ArtifactKind.COMPONENT,
        responsibilities=("add todo", "toggle todo"),
    )
    draft = FallbackGenerator().generate(component, "typescript", "react")

    assert draft.name == "TodoList"
    assert draft.strategy == "fallback"
    assert "export default function TodoList" in draft.content
    assert f"{NOT_IMPLEMENTED}: add todo" in draft.content
    checks = BraceLanguageValidator().run_structural_checks(draft.content)
    assert all(c.passed for c in checks)


def test_vue_and_angular_stubs():
    component = ComponentSpec(name="UserCard", kind=ArtifactKind.COMPONENT)
    vue = FallbackGenerator().generate(component, "typescript", "vue").content
    angular = FallbackGenerator().generate(component, "typescript", "angular").content

    assert "<template>" in vue and "defineComponent" in vue
    assert "selector: 'app-user-card'" in angular
    assert "export class UserCardComponent" in angular
    validator = BraceLanguageValidator()
    assert all(c.passed for c in validator.run_structural_checks(vue))
    assert all(c.passed for c in validator.run_structural_checks(angular))


def test_service_stub_methods_throw_not_implemented():
    component = ComponentSpec(
        name="UserService",
        kind=ArtifactKind.SERVICE,
        purpose="Manages users",
        responsibilities=("load users", "save user", "load users"),
    )
    content = FallbackGenerator().generate(component, "typescript", "react").content

    assert "export class UserService" in content
    assert "loadUsers(): void" in content
    assert "loadUsers2(): void" in content
    assert "throw new Error('Not implemented: saveUser')" in content
    assert "Manages users" in content


def test_javascript_stub_has_no_type_annotations():
    component = ComponentSpec(name="Cart", kind=ArtifactKind.SERVICE)
    content = FallbackGenerator().generate(component, "javascript", "react").content
    assert "execute() {" in content
    assert ": void" not in content


def test_python_stub_parses():
    component = ComponentSpec(
        name="InvoiceService",
        kind=ArtifactKind.SERVICE,
        purpose='Creates "invoices"',
        responsibilities=("create invoice", "send reminder"),
    )
    content = FallbackGenerator().generate(component, "python", "plain").content

    tree = ast.parse(content)
    cls = tree.body[0]
    assert isinstance(cls, ast.ClassDef) and cls.name == "InvoiceService"
    methods = [n.name for n in cls.body if isinstance(n, ast.FunctionDef)]
    assert methods == ["create_invoice", "send_reminder"]
    assert all(c.passed for c in PythonValidator().run_structural_checks(content))


def test_python_ui_component_gets_class_stub():
    component = ComponentSpec(name="Widget", kind=ArtifactKind.COMPONENT)
    content = FallbackGenerator().generate(component, "python", "react").content
    assert content.startswith("class Widget:")
    assert "def execute(self):" in content


MULTI_LINE_PURPOSE = "todo list app\nit's (nice */ {"


@pytest.mark.parametrize(
    "kind, language, framework",
    [
        (ArtifactKind.COMPONENT, "typescript", "react"),
        (ArtifactKind.COMPONENT, "javascript", "react"),
        (ArtifactKind.COMPONENT, "typescript", "vue"),
        (ArtifactKind.COMPONENT, "typescript", "angular"),
        (ArtifactKind.SERVICE, "typescript", "react"),
        (ArtifactKind.SERVICE, "python", "plain"),
    ],
)
def test_multi_line_purpose_keeps_stub_valid(kind, language, framework):
    component = ComponentSpec(
        name="TodoList",
        kind=kind,
        purpose=MULTI_LINE_PURPOSE,
        responsibilities=() if kind == ArtifactKind.COMPONENT else ("load\n(todos",),
    )
    draft = FallbackGenerator().generate(component, language, framework)
    artifact = make_artifact(
        draft.name, content=draft.content, language=language, framework=framework
    )

    StructuralValidator().validate([artifact])

    assert artifact.metadata.validated, draft.content


def test_comment_text_flattens_free_text():
    assert comment_text(MULTI_LINE_PURPOSE) == "todo list app it's (nice {"
    assert comment_text(None) == ""
