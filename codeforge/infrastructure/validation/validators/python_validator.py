"""Structural validator for Python sources."""

import ast
import re

from codeforge.domain.model_types import IssueSeverity
from codeforge.infrastructure.validation.validators.base import (
    CheckResult,
    CodeValidator,
)

DECLARATION_PATTERN = re.compile(
    r"^(?:async\s+)?(?:def|class)\s+\w+|^[A-Za-z_]\w*\s*(?::[^=\n]+)?=", re.MULTILINE
)


class PythonValidator(CodeValidator):
    """Uses the ``ast`` parser for the delimiter check, so any syntax error fails it."""

    def __init__(self, tool: str = ""):
        self.tool = tool

    def run_declaration_check(self, code: str) -> CheckResult:
        found = bool(DECLARATION_PATTERN.search(code))
        return CheckResult(
            check="declaration",
            severity=IssueSeverity.ERROR,
            passed=found,
            message="" if found else "No top-level def, class or assignment found",
        )

    def run_delimiter_check(self, code: str) -> CheckResult:
        try:
            ast.parse(code)
        except SyntaxError as e:
            return CheckResult(
                check="balanced-delimiters",
                severity=IssueSeverity.ERROR,
                passed=False,
                message=f"Does not parse: {e.msg}",
                line=e.lineno or 0,
            )
        return CheckResult(
            check="balanced-delimiters", severity=IssueSeverity.ERROR, passed=True
        )
