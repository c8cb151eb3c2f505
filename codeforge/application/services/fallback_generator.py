"""Template-based stand-in used when the provider cannot produce a component."""

import logging
from typing import List, Optional

from codeforge.application.services.artifact_splitter import ArtifactDraft
from codeforge.application.services.naming import (
    is_ui_target,
    make_unique,
    sanitize_identifier,
    to_kebab_case,
    to_lower_camel,
    to_snake_case,
)
from codeforge.domain.models import ComponentSpec

logger = logging.getLogger(__name__)

NOT_IMPLEMENTED = "Not implemented"
DEFAULT_METHOD = "execute"


def comment_text(text: Optional[str]) -> str:
    """Flatten free text onto one line that is safe inside any comment form."""
    return " ".join((text or "").replace("*/", "").split())


class FallbackGenerator:
    """Produces a compilable placeholder for one component.

    Pure templating: no I/O and no failure modes. UI kinds on a UI framework
    get a framework stub; everything else gets a class whose methods are the
    component's responsibilities, each raising "Not implemented".
    """

    def generate(
        self, component: ComponentSpec, language: str, framework: str
    ) -> ArtifactDraft:
        name = sanitize_identifier(component.name)
        language = (language or "typescript").lower()
        framework = (framework or "").lower()

        if language != "python" and is_ui_target(component.kind, framework):
            if framework == "vue":
                content = self._vue_stub(name, component)
            elif framework == "angular":
                content = self._angular_stub(name, component)
            else:
                content = self._react_stub(name, component, language)
        elif language == "python":
            content = self._python_class_stub(name, component)
        else:
            content = self._class_stub(name, component, language)

        logger.debug(f"Built fallback stub for {name} ({language}/{framework})")
        return ArtifactDraft(
            name=name, kind=component.kind, content=content, strategy="fallback"
        )

    @staticmethod
    def _todo_lines(component: ComponentSpec, prefix: str) -> List[str]:
        lines = [
            f"{prefix} {NOT_IMPLEMENTED}: {comment_text(r)}"
            for r in component.responsibilities
        ]
        purpose = comment_text(component.purpose) or "content"
        return lines or [f"{prefix} {NOT_IMPLEMENTED}: {purpose}"]

    @staticmethod
    def _method_names(component: ComponentSpec, convert) -> List[str]:
        names = [convert(r) for r in component.responsibilities]
        names = [n for n in names if n]
        return make_unique(names) or [DEFAULT_METHOD]

    def _react_stub(self, name: str, component: ComponentSpec, language: str) -> str:
        typed = language != "javascript"
        todos = "\n".join("  " + line for line in self._todo_lines(component, "//"))
        header = "import React from 'react';\n\n"
        if typed:
            header += (
                f"export interface {name}Props {{\n"
                "  className?: string;\n"
                "}\n\n"
            )
            signature = f"export default function {name}({{ className }}: {name}Props) {{"
        else:
            signature = f"export default function {name}({{ className }}) {{"
        return (
            f"{header}{signature}\n"
            f"{todos}\n"
            "  return (\n"
            f'    <div className={{className}} data-component="{name}">\n'
            f"      <p>{name}: {NOT_IMPLEMENTED}</p>\n"
            "    </div>\n"
            "  );\n"
            "}\n"
        )

    def _vue_stub(self, name: str, component: ComponentSpec) -> str:
        todos = "\n".join("    " + line for line in self._todo_lines(component, "//"))
        return (
            "<template>\n"
            f'  <div class="{to_kebab_case(name)}">\n'
            f"    <p>{name}: {NOT_IMPLEMENTED}</p>\n"
            "  </div>\n"
            "</template>\n\n"
            '<script lang="ts">\n'
            "import { defineComponent } from 'vue';\n\n"
            "export default defineComponent({\n"
            f"  name: '{name}',\n"
            "  setup() {\n"
            f"{todos}\n"
            "    return {};\n"
            "  },\n"
            "});\n"
            "</script>\n"
        )

    def _angular_stub(self, name: str, component: ComponentSpec) -> str:
        todos = "\n".join("  " + line for line in self._todo_lines(component, "//"))
        class_name = name if name.endswith("Component") else f"{name}Component"
        return (
            "import { Component } from '@angular/core';\n\n"
            "@Component({\n"
            f"  selector: 'app-{to_kebab_case(name)}',\n"
            f"  template: '<p>{name}: {NOT_IMPLEMENTED}</p>',\n"
            "})\n"
            f"export class {class_name} {{\n"
            f"{todos}\n"
            "}\n"
        )

    def _class_stub(self, name: str, component: ComponentSpec, language: str) -> str:
        typed = language != "javascript"
        return_type = ": void" if typed else ""
        methods = []
        for method in self._method_names(component, to_lower_camel):
            methods.append(
                f"  {method}(){return_type} {{\n"
                f"    throw new Error('{NOT_IMPLEMENTED}: {method}');\n"
                "  }"
            )
        doc = ""
        if component.purpose:
            doc = f"/**\n * {comment_text(component.purpose)}\n */\n"
        return f"{doc}export class {name} {{\n" + "\n\n".join(methods) + "\n}\n"

    def _python_class_stub(self, name: str, component: ComponentSpec) -> str:
        lines = [f"class {name}:"]
        if component.purpose:
            purpose = component.purpose.replace("\\", "\\\\").replace('"', "'")
            lines.append(f'    """{purpose}"""')
            lines.append("")
        for index, method in enumerate(self._method_names(component, to_snake_case)):
            if index:
                lines.append("")
            lines.append(f"    def {method}(self):")
            lines.append(
                f'        raise NotImplementedError("{NOT_IMPLEMENTED}: {method}")'
            )
        return "\n".join(lines) + "\n"
