"""
Base class for code generation backends.

Each backend renders one generated Python module (types, parsers or
serializers) from the IR with jinja2 templates, and records the imports the
rendered body needs so modules can be emitted split or combined.
"""

from __future__ import annotations

import collections
import json
from abc import ABC, abstractmethod
from pathlib import Path

import jinja2

from ..analyzer.ir_nodes import IR, TypeKind, TypeRef
from ..config import CodegenConfig

RUNTIME_PACKAGE = "rnc_to_code"
STDLIB_MODULES = {"__future__", "collections.abc", "dataclasses", "enum", "typing"}
DEFAULT_TYPES_MODULE = ".types"

# An import is (module, name); an empty name means "import module"
Import = tuple[str, str]


def py_string(text: str) -> str:
    """Render a Python string literal."""
    return json.dumps(text, ensure_ascii=False)


def docstring(text: str) -> str:
    """Make text safe to place between triple quotes."""
    text = text.strip().replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text = text[:-1] + '\\"'
    return text


def annotation(type_ref: TypeRef) -> str:
    """Python annotation for a field or choice variant value."""
    if type_ref.kind == TypeKind.MARKER:
        return "bool"
    if type_ref.kind == TypeKind.RAW:
        return "RawXmlElement"
    if type_ref.external is not None:
        return f"{type_ref.external.module}.{type_ref.name}"
    return type_ref.name


def assemble_imports(imports: set[Import]) -> list[str]:
    """
    Turn import pairs into grouped import statements.

    ``__future__`` comes first, then the standard library, then
    ``rnc_to_code``, then the generated types module. Groups are separated by
    a blank line.

    Args:
        imports: Set of (module, name) pairs

    Returns:
        Import lines
    """
    import_groups: dict[str, set[str]] = collections.defaultdict(set)
    for module, name in imports:
        import_groups[module].add(name)

    def group_of(module: str) -> int:
        if module == "__future__":
            return 0
        if module in STDLIB_MODULES:
            return 1
        if module == RUNTIME_PACKAGE or module.startswith(f"{RUNTIME_PACKAGE}."):
            return 2
        return 3

    sections: list[list[str]] = [[], [], [], []]
    for module in sorted(import_groups, key=lambda m: (group_of(m), m)):
        names = import_groups[module]
        section = sections[group_of(module)]
        if "" in names:
            section.insert(0, f"import {module}")
            names = names - {""}
        if not names:
            continue
        ordered = sorted(names)
        if len(ordered) > 3:
            section.append(f"from {module} import (")
            section.extend(f"    {name}," for name in ordered)
            section.append(")")
        else:
            section.append(f"from {module} import {', '.join(ordered)}")

    assembled: list[str] = []
    for section in sections:
        if not section:
            continue
        if assembled:
            assembled.append("")
        assembled.extend(section)
    return assembled


class CodeBackend(ABC):
    """Abstract base class for the generated module backends."""

    # Template directory name
    TEMPLATE_LANG: str = "python"

    # File extension
    FILE_EXTENSION: str = "py"

    def __init__(self, config: CodegenConfig):
        """
        Initialize the backend.

        Args:
            config: Code generation configuration
        """
        self.config = config
        self.python_imports: set[Import] = set()
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
        )
        self.jinja_env.filters["pystr"] = py_string
        self.jinja_env.filters["docstring"] = docstring

        self.prefix_template = self._template("prefix")

    def _template(self, name: str) -> jinja2.Template:
        return self.jinja_env.get_template(f"{name}.{self.FILE_EXTENSION}.jinja2")

    def generate(self, ir: IR) -> str:
        """
        Generate one standalone module from the IR.

        Args:
            ir: The intermediate representation

        Returns:
            Generated code as a string
        """
        body = self.render_body(ir, split=True)
        return self.render_prefix(ir, self.python_imports) + body

    def render_prefix(self, ir: IR, imports: set[Import]) -> str:
        """Render the generation header and import block."""
        comment_lines = ir.generation_comment.splitlines() if ir.generation_comment else []
        return self.prefix_template.render(
            generation_comment=comment_lines,
            required_imports=assemble_imports(imports),
        )

    @abstractmethod
    def render_body(self, ir: IR, split: bool) -> str:
        """
        Render everything below the imports, filling ``python_imports``.

        Args:
            ir: The intermediate representation
            split: True when types live in their own module and must be imported

        Returns:
            Module body
        """

    def _types_import(self, names: list[str]) -> None:
        """Import generated names from the split types module."""
        module = self.config.types_module or DEFAULT_TYPES_MODULE
        for name in names:
            self.python_imports.add((module, name))
