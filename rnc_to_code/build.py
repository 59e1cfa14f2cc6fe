"""
Build-time regeneration of committed generated modules.

Generated code is checked in and only regenerated on request: a build
script calls ``regenerate`` on every run, and it does nothing unless the
``OOXML_REGENERATE`` environment variable is set. When the schema files are
not available (they are downloaded separately) the committed output is kept
and a warning is logged instead of failing the build.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import replace
from pathlib import Path

from .codegen import load_schema
from .pipeline.atomic_writer import AtomicWriter
from .pipeline.config import CodegenConfig, FeatureMappings, NameMappings, OutputMode
from .pipeline.generator import PipelineGenerator

logger = logging.getLogger(__name__)

REGENERATE_ENV = "OOXML_REGENERATE"


def regeneration_requested(environ: Mapping[str, str] | None = None) -> bool:
    """Whether the regeneration flag is set, whatever its value."""
    environ = os.environ if environ is None else environ
    return REGENERATE_ENV in environ


def load_mappings(
    names_path: str | Path | None, features_path: str | Path | None
) -> tuple[NameMappings | None, FeatureMappings | None]:
    """
    Load the mapping files that exist.

    A missing file means no table of that kind. A file that exists but is
    malformed raises ``ConfigError``.
    """
    name_mappings = None
    if names_path is not None:
        if Path(names_path).exists():
            name_mappings = NameMappings.from_yaml_file(names_path)
            logger.info("Loaded name mappings from %s", names_path)
        else:
            logger.warning("Name mappings not found at %s; using default names", names_path)

    feature_mappings = None
    if features_path is not None:
        if Path(features_path).exists():
            feature_mappings = FeatureMappings.from_yaml_file(features_path)
            logger.info("Loaded feature mappings from %s", features_path)
        else:
            logger.warning("Feature mappings not found at %s; no fields are gated", features_path)

    return name_mappings, feature_mappings


def regenerate(
    schemas: Sequence[str | Path],
    output: str | Path,
    config: CodegenConfig,
    names_path: str | Path | None = None,
    features_path: str | Path | None = None,
    split: bool = False,
    mode: OutputMode = OutputMode.FORCE,
    force: bool = False,
    environ: Mapping[str, str] | None = None,
) -> list[Path]:
    """
    Regenerate the committed modules for one schema module.

    Args:
        schemas: RNC files in merge order, shared modules first
        output: Target file, or target directory when ``split``
        config: Code generation configuration; mapping files given here
            replace its name and feature mappings
        names_path: Optional name mapping YAML file
        features_path: Optional feature mapping YAML file
        split: Write types.py, parsers.py and serializers.py into ``output``
        mode: What to do with existing files
        force: Regenerate even when the environment flag is not set
        environ: Environment to read the flag from, defaults to ``os.environ``

    Returns:
        Paths of the files that were written

    Raises:
        RncError: If a schema cannot be lexed or parsed
        ConfigError: If a mapping file is malformed
        FileExistsError: If a file exists and ``mode`` is ``error``
    """
    if not force and not regeneration_requested(environ):
        logger.debug("%s not set; keeping committed output %s", REGENERATE_ENV, output)
        return []

    missing = [str(path) for path in schemas if not Path(path).exists()]
    if missing:
        logger.warning("Schema not found: %s; keeping committed output %s", ", ".join(missing), output)
        return []

    name_mappings, feature_mappings = load_mappings(names_path, features_path)
    if names_path is not None:
        config = replace(config, name_mappings=name_mappings)
    if features_path is not None:
        config = replace(config, feature_mappings=feature_mappings)

    logger.info("Regenerating %s from %d schema file(s)", output, len(schemas))
    generator = PipelineGenerator(load_schema(schemas), config)
    output = Path(output)
    if split:
        outputs = {output / name: code for name, code in generator.generate_split().items()}
    else:
        outputs = {output: generator.generate_module()}

    writer = AtomicWriter()
    written = []
    for path, code in outputs.items():
        if writer.write_with_mode(path, code, mode):
            logger.info("Generated %d bytes to %s", len(code.encode("utf-8")), path)
            written.append(path)
    return written
