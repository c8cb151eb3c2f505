"""Structural validator for brace-delimited languages (TypeScript, JavaScript)."""

import re

from codeforge.domain.model_types import IssueSeverity
from codeforge.infrastructure.validation.validators.base import (
    CheckResult,
    CodeValidator,
    strip_pattern,
)

COMMENT_PATTERN = re.compile(r"/\*[\s\S]*?\*/|//[^\n]*")
STRING_PATTERN = re.compile(
    r"'(?:[^'\\\n]|\\.)*'|\"(?:[^\"\\\n]|\\.)*\"|`(?:[^`\\]|\\.)*`"
)
DECLARATION_PATTERN = re.compile(
    r"^\s*(?:export\s+)?(?:default\s+)?(?:abstract\s+)?(?:async\s+)?"
    r"(?:function\*?|class|const|let|var|interface|type|enum)\b"
    r"|^\s*export\s+default\b|^\s*module\.exports\b|<template>",
    re.MULTILINE,
)


class BraceLanguageValidator(CodeValidator):
    """Checks declarations and bracket balance with comments and strings removed."""

    def __init__(self, tool: str = ""):
        self.tool = tool

    def run_declaration_check(self, code: str) -> CheckResult:
        found = bool(DECLARATION_PATTERN.search(code))
        return CheckResult(
            check="declaration",
            severity=IssueSeverity.ERROR,
            passed=found,
            message="" if found else "No function, class or exported declaration found",
        )

    def run_delimiter_check(self, code: str) -> CheckResult:
        stripped = strip_pattern(code, COMMENT_PATTERN)
        stripped = strip_pattern(stripped, STRING_PATTERN)
        offending = self.count_unbalanced(stripped)
        return CheckResult(
            check="balanced-delimiters",
            severity=IssueSeverity.ERROR,
            passed=not offending,
            message=f"Unbalanced '{offending}'" if offending else "",
        )
