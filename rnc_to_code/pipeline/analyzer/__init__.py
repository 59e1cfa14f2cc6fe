"""
Analyzer module.

Classifies schema definitions, resolves names and builds the IR the backends
render from.
"""

from __future__ import annotations

from .analyzer import SchemaAnalyzer
from .classification import (
    DefinitionKind,
    FieldKind,
    FieldSource,
    ResolvedField,
    classify_definition,
    collect_fields,
    is_inline_attribute_ref,
    is_simple_type,
    resolve_fields,
)
from .ir_nodes import IR
from .name_resolver import NameResolver, NameTable

__all__ = [
    "SchemaAnalyzer",
    "DefinitionKind",
    "FieldKind",
    "FieldSource",
    "ResolvedField",
    "classify_definition",
    "collect_fields",
    "is_inline_attribute_ref",
    "is_simple_type",
    "resolve_fields",
    "IR",
    "NameResolver",
    "NameTable",
]
