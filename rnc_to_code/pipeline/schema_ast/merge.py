"""
Merge several parsed RNC modules into one schema.

OOXML modules share simple types (``shared-commonSimpleTypes.rnc``) and
reference each other's definitions, so callers usually compile a shared
module together with a format-specific one.
"""

from __future__ import annotations

import logging

from .nodes import Definition, Namespace, Schema

logger = logging.getLogger(__name__)


def merge_schemas(*schemas: Schema) -> Schema:
    """
    Concatenate schemas in order.

    Namespaces are merged first-seen-wins by prefix. Definitions are
    appended; a later definition reusing an existing name replaces the
    earlier pattern in place, so names stay unique and order stays stable.

    Args:
        *schemas: Schemas to merge, shared modules first

    Returns:
        A new merged schema
    """
    namespaces: list[Namespace] = []
    seen_prefixes: set[str] = set()
    definitions: dict[str, Definition] = {}

    for schema in schemas:
        for ns in schema.namespaces:
            if ns.prefix in seen_prefixes:
                continue
            seen_prefixes.add(ns.prefix)
            namespaces.append(ns)
        for definition in schema.definitions:
            if definition.name in definitions:
                logger.debug("Definition %s redefined by a later module", definition.name)
            definitions[definition.name] = definition

    return Schema(namespaces=tuple(namespaces), definitions=tuple(definitions.values()))
