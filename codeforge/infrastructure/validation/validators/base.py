"""Base class for language-specific structural validators."""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from codeforge.domain.model_types import IssueSeverity


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one check against one artifact."""

    check: str
    severity: IssueSeverity
    passed: bool
    message: str = ""
    line: int = 0


class CodeValidator(ABC):
    """Abstract base class for language-specific validators.

    Each validator must implement:
    - run_declaration_check: the file declares something
    - run_delimiter_check: brackets are balanced / the file parses
    """

    @abstractmethod
    def run_declaration_check(self, code: str) -> CheckResult:
        pass

    @abstractmethod
    def run_delimiter_check(self, code: str) -> CheckResult:
        pass

    def run_structural_checks(self, code: str) -> List[CheckResult]:
        return [self.run_declaration_check(code), self.run_delimiter_check(code)]

    @staticmethod
    def count_unbalanced(code: str, pairs: str = "(){}[]") -> str:
        """Return the first unbalanced delimiter, or an empty string.

        Args:
            code: Source with strings and comments already removed
            pairs: Opening/closing characters, two at a time

        Returns:
            The offending character, or "" if balanced
        """
        closers = {pairs[i + 1]: pairs[i] for i in range(0, len(pairs), 2)}
        openers = set(closers.values())
        stack: List[str] = []
        for char in code:
            if char in openers:
                stack.append(char)
            elif char in closers:
                if not stack or stack[-1] != closers[char]:
                    return char
                stack.pop()
        return stack[-1] if stack else ""


def line_of(code: str, index: int) -> int:
    return code.count("\n", 0, index) + 1


def strip_pattern(code: str, pattern: "re.Pattern[str]") -> str:
    """Blank out matches while keeping newlines so line numbers survive."""
    return pattern.sub(lambda m: re.sub(r"[^\n]", " ", m.group(0)), code)
