"""
Pipeline - RNC schema to Python code generator.

This module provides a multi-phase architecture for generating the object
model, parsers and serializers from an RNC schema:

1. Phase 1 (Parser): Lex and parse RNC text into the schema AST
2. Phase 2 (Classification): Decide what each definition becomes
3. Phase 3 (Analyzer): Resolve names, fields and feature gating into the IR
4. Phase 4 (Backends): Render types, parsers and serializers with jinja2
5. Phase 5 (Formatter): Optional post-processing with black
6. Phase 6 (Writer): Atomic, validated writes of the generated files
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter, GeneratedCodeError
from .config import (
    CodegenConfig,
    ExternalModule,
    FeatureMappings,
    FormatterConfig,
    ModuleMappings,
    NameMappings,
    OutputMode,
)
from .generator import PipelineGenerator

__all__ = [
    "PipelineGenerator",
    "CodegenConfig",
    "ExternalModule",
    "FeatureMappings",
    "FormatterConfig",
    "ModuleMappings",
    "NameMappings",
    "OutputMode",
    "AtomicWriter",
    "GeneratedCodeError",
]
