from __future__ import annotations

import sys
import types
from pathlib import Path

import pytest

from rnc_to_code.codegen import load_schema
from rnc_to_code.pipeline.config import CodegenConfig, FeatureMappings, NameMappings

TEST_DATA = Path(__file__).parent / "test_data"


@pytest.fixture
def data_dir() -> Path:
    return TEST_DATA


@pytest.fixture
def sml_schema():
    """The shared simple types merged with the sml test module."""
    return load_schema([TEST_DATA / "shared.rnc", TEST_DATA / "sml.rnc"])


@pytest.fixture
def name_mappings() -> NameMappings:
    return NameMappings.from_yaml_file(TEST_DATA / "names.yaml")


@pytest.fixture
def feature_mappings() -> FeatureMappings:
    return FeatureMappings.from_yaml_file(TEST_DATA / "features.yaml")


@pytest.fixture
def sml_config(name_mappings, feature_mappings) -> CodegenConfig:
    return CodegenConfig(
        module_name="sml",
        name_mappings=name_mappings,
        feature_mappings=feature_mappings,
    )


@pytest.fixture
def load_generated():
    """Execute generated code as a registered module.

    Generated dataclasses use string annotations (``ClassVar`` among them),
    which dataclasses resolves through ``sys.modules``, so the module has to
    be registered before its body runs.
    """
    loaded: list[str] = []

    def load(name: str, code: str) -> types.ModuleType:
        module = types.ModuleType(name)
        sys.modules[name] = module
        loaded.append(name)
        exec(compile(code, f"<{name}>", "exec"), module.__dict__)
        return module

    yield load

    for name in loaded:
        sys.modules.pop(name, None)
