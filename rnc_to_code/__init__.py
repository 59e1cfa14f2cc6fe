"""RNC to Code Generator

Compiles the RELAX NG Compact schemas ECMA-376 publishes for Office Open XML
into Python: dataclasses for the content model, event-driven parsers and
serializers that round-trip unknown content, and a linter that checks the
name and feature mapping files against the schema.
"""

__version__ = "0.1.0"

from .analysis import ModuleReport, analyze_schema
from .codegen import generate, generate_module, generate_parsers, generate_serializers, load_schema
from .errors import ConfigError, LexError, ParseError, RncError
from .pipeline import (
    AtomicWriter,
    CodegenConfig,
    FeatureMappings,
    FormatterConfig,
    NameMappings,
    OutputMode,
    PipelineGenerator,
)
from .pipeline.schema_ast import merge_schemas, parse_rnc, tokenize

__all__ = [
    "ModuleReport",
    "analyze_schema",
    "generate",
    "generate_module",
    "generate_parsers",
    "generate_serializers",
    "load_schema",
    "ConfigError",
    "LexError",
    "ParseError",
    "RncError",
    "AtomicWriter",
    "CodegenConfig",
    "FeatureMappings",
    "FormatterConfig",
    "NameMappings",
    "OutputMode",
    "PipelineGenerator",
    "merge_schemas",
    "parse_rnc",
    "tokenize",
]
