"""Structural validation of generated artifacts."""

import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import yaml

from codeforge.application.interfaces.ivalidation_service import IValidationService
from codeforge.application.services.exceptions import ValidationUnavailableError
from codeforge.application.services.code_metrics import calculate_complexity
from codeforge.domain.model_types import IssueSeverity
from codeforge.domain.models import Artifact, Issue, ValidationReport
from codeforge.infrastructure.validation import validators as validator_module
from codeforge.infrastructure.validation.validators.base import (
    CheckResult,
    CodeValidator,
    line_of,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "validators", "config.yml")
FENCE_PATTERN = re.compile(r"^[ \t]*```", re.MULTILINE)


@dataclass(frozen=True)
class AntiPatternRule:
    id: str
    severity: IssueSeverity
    pattern: "re.Pattern[str]"
    message: str
    languages: Tuple[str, ...]

    def applies_to(self, language: str) -> bool:
        return not self.languages or language in self.languages


class StructuralValidator(IValidationService):
    """Runs a fixed battery of checks over each artifact and scores it.

    Checks per artifact:
    - non-empty content (critical)
    - a declaration is present (error)
    - delimiters are balanced / the source parses (error)
    - no leftover markdown fences (warning)
    - complexity under the ceiling (warning)
    - every anti-pattern rule for the artifact's language

    An artifact's score is the weighted share of checks that passed, times
    100, with weights critical 10, error 7, warning 3, info 1. The report
    score is the mean over artifacts. Content is never modified.
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        complexity_ceiling: Optional[int] = None,
    ):
        self.config_path = config_path or DEFAULT_CONFIG_PATH
        self._complexity_ceiling = complexity_ceiling
        self._config: Optional[Dict[str, Any]] = None
        self._rules: Optional[List[AntiPatternRule]] = None
        self._validators: Dict[str, CodeValidator] = {}

    def validate(self, artifacts: List[Artifact]) -> ValidationReport:
        """Validate and annotate artifacts.

        Args:
            artifacts: Artifacts to check; ``validated`` and ``quality_score``
                are set in place

        Returns:
            ValidationReport with the mean score and every failed check

        Raises:
            ValidationUnavailableError: If the validator configuration cannot be loaded
        """
        rules = self._load_rules()
        issues: List[Issue] = []
        scores: List[float] = []

        for artifact in artifacts:
            results = self._run_checks(artifact, rules)
            score = self.score(results)
            artifact_issues = [
                Issue(
                    artifact=artifact.name,
                    check=r.check,
                    severity=r.severity,
                    message=r.message,
                    line=r.line,
                )
                for r in results
                if not r.passed
            ]
            artifact.metadata.quality_score = score
            artifact.metadata.validated = not any(
                i.severity.is_blocking for i in artifact_issues
            )
            issues.extend(artifact_issues)
            scores.append(score)
            logger.debug(
                f"{artifact.name}: score={score:.1f} issues={len(artifact_issues)}"
            )

        report_score = sum(scores) / len(scores) if scores else 100.0
        return ValidationReport(score=round(report_score, 2), issues=tuple(issues))

    @staticmethod
    def score(results: List[CheckResult]) -> float:
        """Weighted pass rate of check results, 0-100. No checks scores 100."""
        total = sum(r.severity.weight for r in results)
        if total == 0:
            return 100.0
        passed = sum(r.severity.weight for r in results if r.passed)
        return round(100.0 * passed / total, 2)

    @property
    def complexity_ceiling(self) -> int:
        if self._complexity_ceiling is not None:
            return self._complexity_ceiling
        return int(self._load_config().get("complexity_ceiling", 25))

    def _run_checks(
        self, artifact: Artifact, rules: List[AntiPatternRule]
    ) -> List[CheckResult]:
        content = artifact.content or ""
        language = (artifact.language or "").lower()
        results = [
            CheckResult(
                check="non-empty",
                severity=IssueSeverity.CRITICAL,
                passed=bool(content.strip()),
                message="" if content.strip() else "Artifact has no content",
            )
        ]
        results.extend(self._get_validator(language).run_structural_checks(content))

        fence = FENCE_PATTERN.search(content)
        results.append(
            CheckResult(
                check="no-markdown-fences",
                severity=IssueSeverity.WARNING,
                passed=fence is None,
                message="" if fence is None else "Leftover markdown fence",
                line=line_of(content, fence.start()) if fence else 0,
            )
        )

        complexity = calculate_complexity(content)
        ceiling = self.complexity_ceiling
        results.append(
            CheckResult(
                check="complexity",
                severity=IssueSeverity.WARNING,
                passed=complexity <= ceiling,
                message=""
                if complexity <= ceiling
                else f"Complexity {complexity} exceeds {ceiling}",
            )
        )

        for rule in rules:
            if not rule.applies_to(language):
                continue
            match = rule.pattern.search(content)
            results.append(
                CheckResult(
                    check=rule.id,
                    severity=rule.severity,
                    passed=match is None,
                    message="" if match is None else rule.message,
                    line=line_of(content, match.start()) if match else 0,
                )
            )
        return results

    def _load_config(self) -> Dict[str, Any]:
        """Load validator configuration from YAML file.

        Returns:
            Configuration dictionary
        """
        if self._config is None:
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    config = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ValidationUnavailableError(
                    f"Cannot load validator config {self.config_path}: {e}"
                ) from e
            if not isinstance(config, dict):
                raise ValidationUnavailableError("Validator config must be a mapping")
            self._config = config
        return self._config

    def _load_rules(self) -> List[AntiPatternRule]:
        if self._rules is None:
            rules = []
            for raw in self._load_config().get("anti_patterns", []) or []:
                try:
                    rules.append(
                        AntiPatternRule(
                            id=raw["id"],
                            severity=IssueSeverity(raw.get("severity", "warning")),
                            pattern=re.compile(raw["pattern"], re.MULTILINE),
                            message=raw.get("message", raw["id"]),
                            languages=tuple(raw.get("languages", []) or []),
                        )
                    )
                except (KeyError, ValueError, re.error) as e:
                    raise ValidationUnavailableError(
                        f"Invalid anti-pattern rule {raw!r}: {e}"
                    ) from e
            self._rules = rules
        return self._rules

    def _get_validator(self, language: str) -> CodeValidator:
        """Get validator instance for a language.

        Args:
            language: Programming language to get validator for

        Returns:
            Validator instance

        Raises:
            ValidationUnavailableError: If no validator is configured for the language
        """
        if language in self._validators:
            return self._validators[language]

        validators_config = self._load_config().get("validators", {}) or {}
        lang_cfg = validators_config.get(language) or validators_config.get("default")
        if not lang_cfg:
            raise ValidationUnavailableError(
                f"No validator configured for language: {language}"
            )
        validator_class = getattr(validator_module, lang_cfg["class"], None)
        if validator_class is None:
            raise ValidationUnavailableError(
                f"Unknown validator class: {lang_cfg['class']}"
            )
        validator = validator_class(tool=lang_cfg.get("tool", ""))
        self._validators[language] = validator
        return validator
