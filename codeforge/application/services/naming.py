"""Naming helpers shared by the Prepare and Generate stages."""

import re
from typing import Iterable, List, Optional, Set

from codeforge.domain.model_types import ArtifactKind

DEFAULT_COMPONENT_NAME = "Component"
MAX_NAME_WORDS = 4

STOP_WORDS = frozenset(
    [
        "a", "an", "the", "create", "build", "make", "generate", "write",
        "implement", "add", "app", "application", "with", "for", "and", "or",
        "of", "to", "in", "on", "that", "which", "please", "me", "my", "i",
        "want", "need", "some", "simple", "basic", "new", "using", "use",
        "is", "it", "be", "can", "should", "will", "component", "page",
        "service", "react", "vue", "angular", "typescript", "javascript",
        "python", "code",
    ]
)

# Names a provider tends to emit when it ignores the requested entity.
GENERIC_NAMES = frozenset(["Item", "Component", "Element", "Widget"])

KIND_DIRECTORIES = {
    ArtifactKind.COMPONENT: "components",
    ArtifactKind.PAGE: "pages",
    ArtifactKind.SERVICE: "services",
    ArtifactKind.API_HANDLER: "api",
    ArtifactKind.MODEL: "models",
    ArtifactKind.TEST: "tests",
    ArtifactKind.CONFIG: "config",
}

UI_FRAMEWORKS = frozenset(["react", "vue", "angular", "nextjs", "next"])
UI_KINDS = frozenset([ArtifactKind.COMPONENT, ArtifactKind.PAGE])

_WORD_RE = re.compile(r"[A-Za-z][A-Za-z0-9]*")
_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def words(text: str) -> List[str]:
    """Split free text or an identifier into lowercase words."""
    spaced = _CAMEL_BOUNDARY_RE.sub(" ", text or "")
    return [w.lower() for w in _WORD_RE.findall(spaced)]


def to_pascal_case(text: str) -> str:
    return "".join(w.capitalize() for w in words(text))


def to_lower_camel(text: str) -> str:
    parts = words(text)
    if not parts:
        return ""
    return parts[0] + "".join(w.capitalize() for w in parts[1:])


def to_snake_case(text: str) -> str:
    return "_".join(words(text))


def to_kebab_case(text: str) -> str:
    return "-".join(words(text))


def derive_component_name(prompt: str) -> str:
    """Name a component from a prompt with the keyword rule.

    Stop words are dropped, the remaining words are title-cased and
    concatenated. "todo list app" becomes "TodoList"; a prompt made only of
    stop words yields "Component".

    Args:
        prompt: Free-text request

    Returns:
        A PascalCase identifier
    """
    kept = [w for w in words(prompt) if w not in STOP_WORDS]
    if not kept:
        return DEFAULT_COMPONENT_NAME
    return "".join(w.capitalize() for w in kept[:MAX_NAME_WORDS])


def sanitize_identifier(name: str, default: str = DEFAULT_COMPONENT_NAME) -> str:
    """Turn an arbitrary string into a PascalCase identifier.

    Names that are already valid identifiers keep their casing.
    """
    stripped = (name or "").strip()
    if re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", stripped):
        return stripped[0].upper() + stripped[1:]
    pascal = to_pascal_case(stripped)
    return pascal or default


def is_generic_name(name: str) -> bool:
    return name in GENERIC_NAMES


def unique_name(name: str, taken: Set[str]) -> str:
    """Return ``name`` or ``name`` plus the lowest numeric suffix not in ``taken``.

    The returned name is added to ``taken``.
    """
    candidate = name
    suffix = 2
    while candidate in taken:
        candidate = f"{name}{suffix}"
        suffix += 1
    taken.add(candidate)
    return candidate


def make_unique(names: Iterable[str]) -> List[str]:
    taken: Set[str] = set()
    return [unique_name(n, taken) for n in names]


def file_extension(language: str, framework: str, kind: ArtifactKind) -> str:
    language = (language or "").lower()
    framework = (framework or "").lower()
    if language == "python":
        return ".py"
    jsx = framework in ("react", "nextjs", "next") and kind in UI_KINDS
    if language == "javascript":
        return ".jsx" if jsx else ".js"
    if framework == "vue" and kind in UI_KINDS:
        return ".vue"
    return ".tsx" if jsx else ".ts"


def artifact_path(
    name: str, kind: ArtifactKind, language: str, framework: str
) -> str:
    """Build the relative output path for an artifact.

    Args:
        name: Artifact name
        kind: Artifact kind, selects the directory
        language: Target language, selects the extension
        framework: Target framework

    Returns:
        Path such as ``src/components/TodoList.tsx``
    """
    directory = KIND_DIRECTORIES[kind]
    extension = file_extension(language, framework, kind)
    if (language or "").lower() == "python":
        stem = to_snake_case(name) or "module"
        if kind == ArtifactKind.TEST:
            stem = f"test_{stem}"
        return f"{directory}/{stem}{extension}"
    if kind == ArtifactKind.TEST:
        return f"src/{directory}/{name}.test{extension}"
    if framework == "angular" and kind in UI_KINDS:
        return f"src/app/{directory}/{to_kebab_case(name)}.component{extension}"
    return f"src/{directory}/{name}{extension}"


def is_ui_target(kind: ArtifactKind, framework: Optional[str]) -> bool:
    return kind in UI_KINDS and (framework or "").lower() in UI_FRAMEWORKS
