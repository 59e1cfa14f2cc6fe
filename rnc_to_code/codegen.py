"""
Functional entry points for code generation.

Each function is a pure function of (schema, config): identical inputs give
byte-identical output.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from .pipeline.config import CodegenConfig
from .pipeline.generator import PipelineGenerator
from .pipeline.schema_ast import merge_schemas, parse_rnc
from .pipeline.schema_ast import nodes as rnc

logger = logging.getLogger(__name__)


def load_schema(paths: Iterable[str | Path]) -> rnc.Schema:
    """
    Parse RNC files and merge them into one schema.

    Files are merged in the order given, so a shared simple-types module
    goes first and the module-specific schema after it.

    Raises:
        LexError: If a file cannot be tokenized
        ParseError: If a file is not valid RNC
    """
    schemas = []
    for path in paths:
        path = Path(path)
        logger.debug("Parsing %s", path)
        schemas.append(parse_rnc(path.read_text(encoding="utf-8")))
    return merge_schemas(*schemas)


def generate(schema: rnc.Schema, config: CodegenConfig | None = None) -> str:
    """Generate the types module."""
    return PipelineGenerator(schema, config).generate()


def generate_parsers(schema: rnc.Schema, config: CodegenConfig | None = None) -> str:
    """Generate the parsers module."""
    return PipelineGenerator(schema, config).generate_parsers()


def generate_serializers(schema: rnc.Schema, config: CodegenConfig | None = None) -> str:
    """Generate the serializers module."""
    return PipelineGenerator(schema, config).generate_serializers()


def generate_module(schema: rnc.Schema, config: CodegenConfig | None = None) -> str:
    """Generate types, parsers and serializers as one module."""
    return PipelineGenerator(schema, config).generate_module()
