from codeforge.infrastructure.validation.validators.base import CheckResult, CodeValidator
from codeforge.infrastructure.validation.validators.brace_validator import (
    BraceLanguageValidator,
)
from codeforge.infrastructure.validation.validators.python_validator import (
    PythonValidator,
)

__all__ = ["CheckResult", "CodeValidator", "BraceLanguageValidator", "PythonValidator"]
