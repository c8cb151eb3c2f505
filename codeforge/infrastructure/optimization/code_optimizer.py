"""Deterministic, idempotent source transforms applied after validation."""

import logging
import re
from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Optional, Sequence

from codeforge.application.interfaces.ioptimization_service import (
    IOptimizationService,
)
from codeforge.application.services.exceptions import OptimizationUnavailableError
from codeforge.domain.models import Artifact

logger = logging.getLogger(__name__)

FORMATTING = "formatting"
READABILITY = "readability"
PERFORMANCE = "performance"
BEST_PRACTICES = "best-practices"
CATEGORIES = (FORMATTING, READABILITY, PERFORMANCE, BEST_PRACTICES)

JS_LANGUAGES = frozenset(["typescript", "javascript"])
ALL_LANGUAGES: FrozenSet[str] = frozenset()

TRAILING_WHITESPACE = re.compile(r"[ \t]+$", re.MULTILINE)
BLANK_LINE_RUN = re.compile(r"\n{3,}")
VAR_DECLARATION = re.compile(r"(^|[;{}(]\s*|^\s+)var(\s+)(?=[A-Za-z_$])", re.MULTILINE)
LENGTH_LOOP = re.compile(
    r"for\s*\(\s*(let|var)\s+([A-Za-z_$][\w$]*)\s*=\s*([^;,()]+?)\s*;"
    r"\s*\2\s*<\s*([A-Za-z_$][\w$.]*)\.length\s*;"
)
# Complete, unindented import statements only; multi-line imports never match.
JS_IMPORT_LINE = re.compile(r"^import\s[^\n]*['\"][^'\"\n]+['\"]\s*;?\s*$")
PY_IMPORT_LINE = re.compile(
    r"^(?:import\s+[^\n(\\]+|from\s+\S+\s+import\s+(?:[^\n(\\]+|\([^\n)]*\)))$"
)
JS_STRING_DELIMITERS = ("`",)
PY_STRING_DELIMITERS = ('"""', "'''")


@dataclass(frozen=True)
class Transform:
    """A named rewrite. Applying it to its own output must change nothing."""

    name: str
    category: str
    description: str
    apply: Callable[[str, str], str]
    languages: FrozenSet[str] = ALL_LANGUAGES

    def applies_to(self, language: str) -> bool:
        return not self.languages or language in self.languages


def _remove_duplicate_imports(content: str, language: str) -> str:
    if language == "python":
        pattern, delimiters = PY_IMPORT_LINE, PY_STRING_DELIMITERS
    else:
        pattern, delimiters = JS_IMPORT_LINE, JS_STRING_DELIMITERS
    seen = set()
    kept = []
    open_string: Optional[str] = None
    for line in content.split("\n"):
        if open_string is None and pattern.match(line):
            key = line.rstrip()
            if key in seen:
                continue
            seen.add(key)
        kept.append(line)
        open_string = _string_state_after(line, open_string, delimiters)
    return "\n".join(kept)


def _string_state_after(
    line: str, open_string: Optional[str], delimiters: Sequence[str]
) -> Optional[str]:
    """Track which multi-line string delimiter, if any, is still open after a line."""
    position = 0
    while True:
        if open_string is not None:
            end = line.find(open_string, position)
            if end < 0:
                return open_string
            position = end + len(open_string)
            open_string = None
            continue
        found = [(line.find(d, position), d) for d in delimiters]
        found = [(index, d) for index, d in found if index >= 0]
        if not found:
            return None
        index, open_string = min(found)
        position = index + len(open_string)


def _var_to_let(content: str, language: str) -> str:
    return VAR_DECLARATION.sub(r"\1let\2", content)


def _cache_loop_length(content: str, language: str) -> str:
    return LENGTH_LOOP.sub(
        lambda m: (
            f"for ({m.group(1)} {m.group(2)} = {m.group(3)}, "
            f"{m.group(2)}Len = {m.group(4)}.length; {m.group(2)} < {m.group(2)}Len;"
        ),
        content,
    )


def _strip_trailing_whitespace(content: str, language: str) -> str:
    return TRAILING_WHITESPACE.sub("", content)


def _collapse_blank_lines(content: str, language: str) -> str:
    return BLANK_LINE_RUN.sub("\n\n", content)


def _ensure_final_newline(content: str, language: str) -> str:
    if not content.strip():
        return content
    return content.rstrip("\n") + "\n"


# Code rewrites run before formatting so formatting sees their output.
DEFAULT_TRANSFORMS = (
    Transform(
        "remove-duplicate-imports",
        READABILITY,
        "removed duplicate import lines",
        _remove_duplicate_imports,
    ),
    Transform(
        "cache-loop-length",
        PERFORMANCE,
        "cached array length in for loops",
        _cache_loop_length,
        JS_LANGUAGES,
    ),
    Transform(
        "var-to-let",
        BEST_PRACTICES,
        "replaced var declarations with let",
        _var_to_let,
        JS_LANGUAGES,
    ),
    Transform(
        "strip-trailing-whitespace",
        FORMATTING,
        "removed trailing whitespace",
        _strip_trailing_whitespace,
    ),
    Transform(
        "collapse-blank-lines",
        FORMATTING,
        "collapsed runs of blank lines",
        _collapse_blank_lines,
    ),
    Transform(
        "ensure-final-newline",
        FORMATTING,
        "normalized the final newline",
        _ensure_final_newline,
    ),
)


class CodeOptimizer(IOptimizationService):
    """Applies the enabled transform categories to each artifact in place.

    Each transform that changes an artifact appends
    ``"<category>: <description>"`` to its optimization log. Running the
    optimizer over its own output changes nothing and logs nothing.
    """

    def __init__(
        self,
        categories: Optional[Sequence[str]] = None,
        transforms: Sequence[Transform] = DEFAULT_TRANSFORMS,
    ):
        self.categories = tuple(categories) if categories is not None else CATEGORIES
        self.transforms = tuple(transforms)

    def optimize(self, artifacts: List[Artifact]) -> List[Artifact]:
        """Optimize artifacts in place.

        Args:
            artifacts: Artifacts to rewrite

        Returns:
            The same artifact objects, in order

        Raises:
            OptimizationUnavailableError: If an unknown category is enabled
        """
        unknown = [c for c in self.categories if c not in CATEGORIES]
        if unknown:
            raise OptimizationUnavailableError(
                f"Unknown optimization categories: {', '.join(unknown)}"
            )

        enabled = [t for t in self.transforms if t.category in self.categories]
        for artifact in artifacts:
            language = (artifact.language or "").lower()
            content = artifact.content
            for transform in enabled:
                if not transform.applies_to(language):
                    continue
                rewritten = transform.apply(content, language)
                if rewritten != content:
                    content = rewritten
                    artifact.metadata.optimization_log.append(
                        f"{transform.category}: {transform.description}"
                    )
            if content != artifact.content:
                logger.debug(
                    f"{artifact.name}: {len(artifact.metadata.optimization_log)} "
                    "optimization(s) applied"
                )
                artifact.content = content
        return artifacts
