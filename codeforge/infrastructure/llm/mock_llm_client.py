import re
from typing import Optional

from codeforge.application.interfaces.illm_client import ILLMClient
from codeforge.application.services.naming import to_snake_case
from codeforge.domain.models import Model

MARKER_LINE = re.compile(r"component:([A-Za-z_]\w*):([\w-]+):(\S+)")


class MockLLMClient(ILLMClient):
    """Offline client that answers with canned, marker-tagged code.

    The reply echoes the first ``component:<name>:<kind>:<path>`` marker found
    in the prompt, so the pipeline can run end to end without a provider.
    """

    def __init__(self, model: Model):
        super().__init__(model)
        self.calls = 0

    def complete(
        self,
        prompt: str,
        max_tokens: int = 4000,
        temperature: float = 0.2,
        timeout: Optional[float] = None,
    ) -> str:
        self.calls += 1
        match = MARKER_LINE.search(prompt or "")
        if not match:
            return ""
        name, kind, path = match.groups()
        if path.endswith(".py"):
            body = self._python_code(name)
        elif path.endswith((".tsx", ".jsx")):
            body = self._react_code(name, typed=path.endswith(".tsx"))
        else:
            body = self._class_code(name, typed=not path.endswith(".js"))
        return f"```component:{name}:{kind}:{path}\n{body}```"

    def _react_code(self, name: str, typed: bool) -> str:
        props = f": {name}Props" if typed else ""
        interface = (
            f"export interface {name}Props {{\n  title?: string;\n}}\n\n" if typed else ""
        )
        state = "useState<string[]>([])" if typed else "useState([])"
        value = "value: string" if typed else "value"
        return (
            "import React, { useState } from 'react';\n\n"
            f"{interface}"
            f"export default function {name}({{ title = '{name}' }}{props}) {{\n"
            f"  const [items, setItems] = {state};\n\n"
            f"  const addItem = ({value}) => {{\n"
            "    if (value.trim().length > 0) {\n"
            "      setItems([...items, value]);\n"
            "    }\n"
            "  };\n\n"
            "  return (\n"
            "    <section>\n"
            "      <h2>{title}</h2>\n"
            "      <ul>\n"
            "        {items.map((item) => (\n"
            "          <li key={item}>{item}</li>\n"
            "        ))}\n"
            "      </ul>\n"
            "      <button onClick={() => addItem('New item')}>Add</button>\n"
            "    </section>\n"
            "  );\n"
            "}\n"
        )

    def _class_code(self, name: str, typed: bool) -> str:
        field = "private readonly items: string[] = [];" if typed else "items = [];"
        arg = "item: string" if typed else "item"
        return (
            f"export class {name} {{\n"
            f"  {field}\n\n"
            f"  add({arg}) {{\n"
            "    if (!item) {\n"
            "      throw new Error('item is required');\n"
            "    }\n"
            "    this.items.push(item);\n"
            "    return this.items.length;\n"
            "  }\n"
            "}\n"
        )

    def _python_code(self, name: str) -> str:
        return (
            f"class {name}:\n"
            f'    """In-memory {to_snake_case(name).replace("_", " ")} store."""\n\n'
            "    def __init__(self):\n"
            "        self.items = []\n\n"
            "    def add(self, item):\n"
            "        if not item:\n"
            '            raise ValueError("item is required")\n'
            "        self.items.append(item)\n"
            "        return len(self.items)\n"
        )
