"""
Pipeline generator: schema and config in, generated Python modules out.

1. Phase 1 (Lexer/Parser): RNC text into the schema AST (``schema_ast``)
2. Phase 2 (Classification): decide what each definition becomes
3. Phase 3 (Analyzer): names, fields and feature gating into the IR
4. Phase 4 (Backends): render types, parsers and serializers from the IR
5. Phase 5 (Formatter): optional black pass
"""

from __future__ import annotations

import logging

from .analyzer.analyzer import SchemaAnalyzer
from .analyzer.ir_nodes import IR
from .backends import CodeBackend, ParsersBackend, SerializersBackend, TypesBackend
from .backends.base import Import
from .config import CodegenConfig
from .formatters import BlackFormatter
from .schema_ast import nodes as rnc

logger = logging.getLogger(__name__)

# File names written by split generation
SPLIT_FILES = ("types.py", "parsers.py", "serializers.py")


class PipelineGenerator:
    """Generates the three mirrored modules for one schema."""

    def __init__(self, schema: rnc.Schema, config: CodegenConfig | None = None):
        """
        Initialize the generator.

        Args:
            schema: Parsed (and possibly merged) schema
            config: Code generation configuration
        """
        self.schema = schema
        self.config = config or CodegenConfig()
        self._ir: IR | None = None

    @property
    def ir(self) -> IR:
        if self._ir is None:
            self._ir = SchemaAnalyzer(self.schema, self.config).analyze()
            logger.debug(
                "Analyzed %d classes, %d choices, %d enums, %d aliases",
                len(self._ir.classes),
                len(self._ir.choices),
                len(self._ir.enums),
                len(self._ir.type_aliases),
            )
        return self._ir

    def generate(self) -> str:
        """Generate the types module."""
        return self._format(TypesBackend(self.config).generate(self.ir))

    def generate_parsers(self) -> str:
        """Generate the parsers module, importing from ``config.types_module``."""
        return self._format(ParsersBackend(self.config).generate(self.ir))

    def generate_serializers(self) -> str:
        """Generate the serializers module, importing from ``config.types_module``."""
        return self._format(SerializersBackend(self.config).generate(self.ir))

    def generate_module(self) -> str:
        """Generate types, parsers and serializers as one self-contained module."""
        backends: list[CodeBackend] = [TypesBackend(self.config), ParsersBackend(self.config), SerializersBackend(self.config)]
        bodies = [backend.render_body(self.ir, split=False) for backend in backends]
        imports: set[Import] = set()
        for backend in backends:
            imports |= backend.python_imports
        code = backends[0].render_prefix(self.ir, imports) + "\n\n".join(body.rstrip("\n") + "\n" for body in bodies)
        return self._format(code)

    def generate_split(self) -> dict[str, str]:
        """Generate the three modules keyed by file name."""
        return dict(zip(SPLIT_FILES, (self.generate(), self.generate_parsers(), self.generate_serializers())))

    def _format(self, code: str) -> str:
        if not self.config.formatter.enabled:
            return code
        return BlackFormatter(self.config.formatter).format(code)
