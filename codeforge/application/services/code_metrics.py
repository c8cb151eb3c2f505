"""Static measurements taken from generated source text."""

import re
import sys
from typing import List

BRANCH_PATTERN = re.compile(
    r"\b(?:if|else|elif|for|while|switch|case|except|catch)\b|&&|\|\|"
)

JS_IMPORT_PATTERNS = [
    re.compile(r"""^\s*import\s+(?:type\s+)?[^'"]*?\s+from\s+['"]([^'"]+)['"]""", re.M),
    re.compile(r"""^\s*import\s+['"]([^'"]+)['"]""", re.M),
    re.compile(r"""\brequire\(\s*['"]([^'"]+)['"]\s*\)"""),
    re.compile(r"""\bimport\(\s*['"]([^'"]+)['"]\s*\)"""),
    re.compile(r"""^\s*export\s+[^'"]*?\s+from\s+['"]([^'"]+)['"]""", re.M),
]
PY_IMPORT_PATTERN = re.compile(r"^[ \t]*import[ \t]+([\w., \t]+)", re.M)
PY_FROM_PATTERN = re.compile(r"^[ \t]*from[ \t]+([\w.]+)[ \t]+import\b", re.M)

NODE_BUILTINS = frozenset(
    [
        "assert", "buffer", "child_process", "crypto", "events", "fs", "http",
        "https", "net", "os", "path", "process", "querystring", "stream",
        "url", "util", "zlib",
    ]
)
PYTHON_STDLIB = frozenset(getattr(sys, "stdlib_module_names", ()))


def count_lines_of_code(content: str) -> int:
    """Number of non-blank lines."""
    return sum(1 for line in content.splitlines() if line.strip())


def calculate_complexity(content: str) -> int:
    """1 plus the number of branch tokens in the text."""
    return 1 + len(BRANCH_PATTERN.findall(content or ""))


def _normalize_js_package(specifier: str) -> str:
    if specifier.startswith("node:"):
        return ""
    parts = specifier.split("/")
    if specifier.startswith("@"):
        return "/".join(parts[:2]) if len(parts) >= 2 else ""
    return parts[0]


def extract_dependencies(content: str, language: str) -> List[str]:
    """External package names imported by the content, in first-seen order.

    Relative imports, Node built-ins and the Python standard library are
    skipped. Deep imports collapse to their package (``lodash/map`` becomes
    ``lodash``).

    Args:
        content: Source text
        language: Language of the source

    Returns:
        De-duplicated package names
    """
    found: List[str] = []
    if (language or "").lower() == "python":
        located = []
        for match in PY_FROM_PATTERN.finditer(content):
            located.append((match.start(), match.group(1)))
        for match in PY_IMPORT_PATTERN.finditer(content):
            for part in match.group(1).split(","):
                part = part.strip().split(" ")[0]
                if part:
                    located.append((match.start(), part))
        for _, name in sorted(located, key=lambda item: item[0]):
            if name.startswith("."):
                continue
            top = name.split(".")[0]
            if top and top not in PYTHON_STDLIB and top not in found:
                found.append(top)
        return found

    positions = []
    for pattern in JS_IMPORT_PATTERNS:
        for match in pattern.finditer(content):
            positions.append((match.start(1), match.group(1)))
    for _, specifier in sorted(positions):
        if specifier.startswith((".", "/", "~", "@/")):
            continue
        package = _normalize_js_package(specifier)
        if package and package not in NODE_BUILTINS and package not in found:
            found.append(package)
    return found
