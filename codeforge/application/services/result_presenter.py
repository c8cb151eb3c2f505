"""Caller-facing views derived from a finished artifact list."""

import json
from typing import Any, Dict, List, Sequence

from codeforge.domain.model_types import ArtifactSource
from codeforge.domain.models import Artifact, Issue, PipelineResult, PipelineWarning


def merge_dependencies(artifacts: Sequence[Artifact]) -> List[str]:
    """Ordered union of the artifacts' dependencies."""
    merged: List[str] = []
    for artifact in artifacts:
        for dependency in artifact.dependencies:
            if dependency not in merged:
                merged.append(dependency)
    return merged


class ResultPresenter:
    """Builds the dependency manifest and markdown summary of a result.

    Everything here is a pure function of its arguments.
    """

    def package_manifest(self, artifacts: Sequence[Artifact]) -> Dict[str, str]:
        """Map each dependency to a version specifier, sorted by name."""
        return {name: "latest" for name in sorted(merge_dependencies(artifacts))}

    def to_dict(self, result: PipelineResult, include_content: bool = True) -> Dict[str, Any]:
        """JSON-ready view of a result."""
        metadata = result.metadata
        return {
            "success": result.success,
            "status": result.status.value,
            "quality_score": result.quality_score,
            "artifacts": [
                {
                    "name": a.name,
                    "kind": a.kind.value,
                    "path": a.path,
                    "language": a.language,
                    "framework": a.framework,
                    "dependencies": list(a.dependencies),
                    "lines_of_code": a.metadata.lines_of_code,
                    "complexity": a.metadata.complexity,
                    "quality_score": a.metadata.quality_score,
                    "validated": a.metadata.validated,
                    "source": a.metadata.source.value,
                    "optimizations": list(a.metadata.optimization_log),
                    **({"content": a.content} if include_content else {}),
                }
                for a in result.artifacts
            ],
            "dependencies": list(result.dependencies),
            "package_manifest": dict(result.package_manifest),
            "issues": [
                {
                    "artifact": i.artifact,
                    "check": i.check,
                    "severity": i.severity.value,
                    "message": i.message,
                    "line": i.line,
                }
                for i in result.issues
            ],
            "metadata": {
                "started_at": metadata.started_at.isoformat(),
                "duration_seconds": round(metadata.duration_seconds, 4),
                "stages": {s.value: st.value for s, st in metadata.stages.items()},
                "warnings": [
                    {
                        "stage": w.stage.value,
                        "code": w.code,
                        "message": w.message,
                        "component": w.component,
                    }
                    for w in metadata.warnings
                ],
                "fingerprint": metadata.fingerprint,
                "fallback_count": metadata.fallback_count,
                "language": metadata.language,
                "framework": metadata.framework,
            },
        }

    def package_json(self, project_name: str, artifacts: Sequence[Artifact]) -> str:
        """A minimal package.json for JavaScript and TypeScript output."""
        document = {
            "name": project_name,
            "version": "0.1.0",
            "private": True,
            "dependencies": self.package_manifest(artifacts),
        }
        return json.dumps(document, indent=2) + "\n"

    def summary(
        self,
        artifacts: Sequence[Artifact],
        quality_score: float,
        issues: Sequence[Issue] = (),
        warnings: Sequence[PipelineWarning] = (),
        title: str = "Generated project",
    ) -> str:
        """Render a markdown summary of a result.

        Args:
            artifacts: Final artifacts
            quality_score: Overall score, 0-100
            issues: Validator findings
            warnings: Non-fatal pipeline warnings
            title: Heading for the document

        Returns:
            Markdown text
        """
        lines = [f"# {title}", "", f"Quality score: {quality_score:.1f}/100", ""]

        lines.append("## Files")
        lines.append("")
        for artifact in artifacts:
            marker = (
                " (placeholder)"
                if artifact.metadata.source == ArtifactSource.FALLBACK
                else ""
            )
            lines.append(
                f"- `{artifact.path}`: {artifact.name} ({artifact.kind.value}, "
                f"{artifact.metadata.lines_of_code} lines){marker}"
            )
        lines.append("")

        dependencies = merge_dependencies(artifacts)
        lines.append("## Dependencies")
        lines.append("")
        if dependencies:
            lines.extend(f"- {d}" for d in dependencies)
        else:
            lines.append("None")
        lines.append("")

        if issues:
            lines.append("## Issues")
            lines.append("")
            lines.extend(f"- {issue}" for issue in issues)
            lines.append("")

        if warnings:
            lines.append("## Warnings")
            lines.append("")
            for warning in warnings:
                lines.append(f"- [{warning.stage.value}] {warning.message}")
            lines.append("")

        return "\n".join(lines)
