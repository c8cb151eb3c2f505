"""Splits raw provider text into named artifact drafts."""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from codeforge.application.services.naming import (
    DEFAULT_COMPONENT_NAME,
    sanitize_identifier,
)
from codeforge.domain.model_types import ArtifactKind

logger = logging.getLogger(__name__)

# ```component:Name:kind:path, or a bare marker line followed by its own fence
MARKER_PATTERN = re.compile(
    r"^(```[ \t]*)?component:([^:\n`]+):([^:\n`]*):([^\n`]*?)[ \t]*\n"
    r"(?(1)|```[^\n]*\n)"
    r"(.*?)^```[ \t]*$",
    re.MULTILINE | re.DOTALL,
)
FENCED_BLOCK_PATTERN = re.compile(
    r"^```[^\n]*\n(.*?)^```[ \t]*$", re.MULTILINE | re.DOTALL
)
FENCE_LINE_PATTERN = re.compile(r"^[ \t]*```[^\n]*$\n?", re.MULTILINE)

JS_DECLARATION_PATTERN = re.compile(
    r"^export[ \t]+(?:default[ \t]+)?(?:async[ \t]+)?"
    r"(?:function\*?|class|const)"
    r"(?:[ \t]+([A-Za-z_$][\w$]*))?",
    re.MULTILINE,
)
PY_DECLARATION_PATTERN = re.compile(
    r"^(?:async[ \t]+)?(?:def|class)[ \t]+([A-Za-z_]\w*)", re.MULTILINE
)
# Lines that belong to the declaration after them rather than the one before
JS_ATTACHED_PATTERN = re.compile(
    r"^export[ \t]+(?:declare[ \t]+)?(?:interface|type|enum)\b", re.MULTILINE
)
PY_ATTACHED_PATTERN = re.compile(r"^@", re.MULTILINE)
JS_IMPORT_PATTERN = re.compile(
    r"^import\b[^;'\"]*?['\"][^'\"\n]+['\"][ \t]*;?[ \t]*$", re.MULTILINE
)
PY_IMPORT_PATTERN = re.compile(
    r"^(?:from[ \t]+\S+[ \t]+)?import[ \t]+(?:\([^)]*\)|[^\n]*)$", re.MULTILINE
)


@dataclass(frozen=True)
class ArtifactDraft:
    """Named slice of provider text, before paths and metrics are resolved."""

    name: str
    kind: ArtifactKind
    content: str
    path: Optional[str] = None
    strategy: str = "single"


class ArtifactSplitter:
    """Turns provider text into one or more artifact drafts.

    Strategies run in order and the first that yields anything wins:

    1. Marker blocks tagged ``component:<name>:<kind>:<path>``, in source order.
    2. Top-level declaration boundaries, when there are at least two.
    3. The whole text as a single artifact.

    The splitter never raises on malformed input; at worst it returns an
    empty list for empty text.

    Args:
        min_fragment_length: Declaration slices with fewer non-whitespace
            characters are merged into a neighbour instead of standing alone
    """

    def __init__(self, min_fragment_length: int = 50):
        self.min_fragment_length = min_fragment_length

    def split(
        self,
        text: Optional[str],
        component_name: Optional[str] = None,
        kind: ArtifactKind = ArtifactKind.COMPONENT,
        entities: Sequence[str] = (),
        language: str = "typescript",
    ) -> List[ArtifactDraft]:
        """Split provider output into drafts.

        Args:
            text: Raw provider output
            component_name: Name of the component being produced, if any
            kind: Kind to use when the text does not say
            entities: Entities extracted from the prompt, used for naming
            language: Target language, selects the declaration heuristic

        Returns:
            Drafts in source order; empty if the text holds no content
        """
        text = (text or "").replace("\r\n", "\n")
        if not text.strip():
            return []

        drafts = self._split_by_markers(text, kind)
        if drafts:
            logger.debug(f"Marker strategy produced {len(drafts)} draft(s)")
            return drafts

        code = self.strip_fences(text)
        if not code.strip():
            return []

        drafts = self._split_by_declarations(code, kind, language)
        if drafts:
            logger.debug(f"Declaration strategy produced {len(drafts)} draft(s)")
            return drafts

        name = self._default_name(component_name, entities)
        return [ArtifactDraft(name=name, kind=kind, content=code.strip() + "\n")]

    @staticmethod
    def strip_fences(text: str) -> str:
        """Return the contents of fenced blocks, or the text minus stray fence lines."""
        blocks = FENCED_BLOCK_PATTERN.findall(text)
        if blocks:
            return "\n\n".join(b.strip("\n") for b in blocks)
        return FENCE_LINE_PATTERN.sub("", text)

    def _split_by_markers(
        self, text: str, default_kind: ArtifactKind
    ) -> List[ArtifactDraft]:
        drafts = []
        for match in MARKER_PATTERN.finditer(text):
            _, raw_name, raw_kind, raw_path, body = match.groups()
            if not body.strip():
                continue
            drafts.append(
                ArtifactDraft(
                    name=sanitize_identifier(raw_name),
                    kind=ArtifactKind.parse(raw_kind, default_kind),
                    content=body.strip("\n") + "\n",
                    path=raw_path.strip() or None,
                    strategy="marker",
                )
            )
        return drafts

    def _split_by_declarations(
        self, code: str, kind: ArtifactKind, language: str
    ) -> List[ArtifactDraft]:
        if (language or "").lower() == "python":
            pattern, attached, imports = (
                PY_DECLARATION_PATTERN,
                PY_ATTACHED_PATTERN,
                PY_IMPORT_PATTERN,
            )
        else:
            pattern, attached, imports = (
                JS_DECLARATION_PATTERN,
                JS_ATTACHED_PATTERN,
                JS_IMPORT_PATTERN,
            )
        boundaries = list(pattern.finditer(code))
        if len(boundaries) < 2:
            return []

        starts = [boundaries[0].start()]
        for previous, match in zip(boundaries, boundaries[1:]):
            leading = attached.search(code, previous.end(), match.start())
            starts.append(leading.start() if leading else match.start())

        slices = []
        for index, match in enumerate(boundaries):
            end = starts[index + 1] if index + 1 < len(starts) else len(code)
            name = sanitize_identifier(match.group(1) or "", DEFAULT_COMPONENT_NAME)
            slices.append([name, code[starts[index] : end].strip("\n")])

        slices = self._merge_fragments(slices)
        if len(slices) < 2:
            return []

        preamble = code[: starts[0]].strip("\n")
        shared = "\n".join(m.group(0) for m in imports.finditer(preamble))
        drafts = []
        for index, (name, body) in enumerate(slices):
            header = preamble if index == 0 else shared
            if header.strip():
                body = header + "\n\n" + body
            drafts.append(
                ArtifactDraft(
                    name=name, kind=kind, content=body + "\n", strategy="declaration"
                )
            )
        return drafts

    def _merge_fragments(self, slices: List[List[str]]) -> List[List[str]]:
        """Fold slices too small to stand alone into the following slice."""
        merged: List[List[str]] = []
        carry = ""
        for index, (name, body) in enumerate(slices):
            body = carry + body
            carry = ""
            if not self._is_substantial(body) and index + 1 < len(slices):
                carry = body + "\n\n"
                continue
            merged.append([name, body])
        if len(merged) > 1 and not self._is_substantial(merged[-1][1]):
            tail = merged.pop()
            merged[-1][1] += "\n\n" + tail[1]
        return merged

    def _is_substantial(self, body: str) -> bool:
        return len(re.sub(r"\s", "", body)) >= self.min_fragment_length

    @staticmethod
    def _default_name(component_name: Optional[str], entities: Sequence[str]) -> str:
        if component_name and component_name.strip():
            return sanitize_identifier(component_name)
        for entity in entities:
            if entity and entity.strip():
                return sanitize_identifier(entity)
        return DEFAULT_COMPONENT_NAME
