"""Builds the provider instruction for one component."""

from typing import List

from codeforge.application.services.naming import artifact_path
from codeforge.domain.models import ComponentSpec, GenerationContext


class InstructionBuilder:
    """Deterministic prompt text for a single component.

    The same component and context always produce the same instruction. The
    instruction always states the marker contract so the splitter's first
    strategy can recover names, kinds and paths.
    """

    def build(self, component: ComponentSpec, context: GenerationContext) -> str:
        path = artifact_path(
            component.name, component.kind, context.language, context.framework
        )
        lines: List[str] = [
            f"You are generating production-quality {context.language} code"
            f" for the {context.framework} framework.",
            "",
            f"Original request: {context.request.prompt.strip()}",
            "",
            f"Component: {component.name}",
            f"Kind: {component.kind.value}",
        ]
        if component.purpose:
            lines.append(f"Purpose: {component.purpose}")
        if component.responsibilities:
            lines.append("Responsibilities:")
            lines.extend(f"- {r}" for r in component.responsibilities)

        style = context.request.context.get("style")
        if style:
            lines.append(f"Style preferences: {style}")
        if context.specification.architecture_style:
            lines.append(f"Architecture: {context.specification.architecture_style}")
        if context.templates:
            names = ", ".join(t.name for t in context.templates)
            lines.append(f"Relevant templates: {names}")

        lines.extend(
            [
                "",
                "Output format:",
                "Wrap every file in a fenced block whose info string is",
                "component:<Name>:<kind>:<path>, for example:",
                f"```component:{component.name}:{component.kind.value}:{path}",
                "<file contents>",
                "```",
                "Return only fenced blocks. No explanations.",
            ]
        )
        return "\n".join(lines)
