import logging

import pytest

from rnc_to_code.build import REGENERATE_ENV, load_mappings, regenerate, regeneration_requested
from rnc_to_code.errors import ConfigError
from rnc_to_code.pipeline import AtomicWriter, CodegenConfig, GeneratedCodeError, OutputMode

REQUESTED = {REGENERATE_ENV: "1"}


@pytest.fixture
def schemas(data_dir):
    return [data_dir / "shared.rnc", data_dir / "sml.rnc"]


@pytest.fixture
def config():
    return CodegenConfig(module_name="sml", add_generation_comment=False)


def test_regeneration_requested():
    assert regeneration_requested({REGENERATE_ENV: ""})
    assert regeneration_requested({REGENERATE_ENV: "0"})
    assert not regeneration_requested({})


class TestRegenerate:
    def test_does_nothing_unless_requested(self, schemas, config, tmp_path):
        output = tmp_path / "sml.py"
        assert regenerate(schemas, output, config, environ={}) == []
        assert not output.exists()

    def test_requested(self, schemas, config, tmp_path):
        output = tmp_path / "generated" / "sml.py"
        assert regenerate(schemas, output, config, environ=REQUESTED) == [output]
        assert "def from_xml(" in output.read_text(encoding="utf-8")

    def test_force(self, schemas, config, tmp_path):
        output = tmp_path / "sml.py"
        assert regenerate(schemas, output, config, force=True, environ={}) == [output]

    def test_missing_schema_keeps_committed_output(self, data_dir, config, tmp_path, caplog):
        output = tmp_path / "sml.py"
        output.write_text("# committed\n", encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="rnc_to_code.build"):
            written = regenerate([data_dir / "missing.rnc"], output, config, environ=REQUESTED)
        assert written == []
        assert output.read_text(encoding="utf-8") == "# committed\n"
        assert "Schema not found" in caplog.text
        assert "missing.rnc" in caplog.text

    def test_skip_unchanged(self, schemas, config, tmp_path):
        output = tmp_path / "sml.py"
        regenerate(schemas, output, config, force=True)
        mtime = output.stat().st_mtime_ns
        assert regenerate(schemas, output, config, force=True, mode=OutputMode.SKIP_UNCHANGED) == []
        assert output.stat().st_mtime_ns == mtime

    def test_skip_unchanged_rewrites_stale_output(self, schemas, config, tmp_path):
        output = tmp_path / "sml.py"
        output.write_text("# stale\n", encoding="utf-8")
        assert regenerate(schemas, output, config, force=True, mode=OutputMode.SKIP_UNCHANGED) == [output]

    def test_error_if_exists(self, schemas, config, tmp_path):
        output = tmp_path / "sml.py"
        output.write_text("# committed\n", encoding="utf-8")
        with pytest.raises(FileExistsError):
            regenerate(schemas, output, config, force=True, mode=OutputMode.ERROR_IF_EXISTS)

    def test_split(self, schemas, config, tmp_path):
        written = regenerate(schemas, tmp_path, config, split=True, force=True)
        assert [path.name for path in written] == ["types.py", "parsers.py", "serializers.py"]

    def test_mapping_files_replace_config_mappings(self, schemas, config, data_dir, tmp_path):
        output = tmp_path / "sml.py"
        regenerate(
            schemas,
            output,
            config,
            names_path=data_dir / "names.yaml",
            features_path=data_dir / "features.yaml",
            force=True,
        )
        code = output.read_text(encoding="utf-8")
        assert "class Extension:" in code
        assert '"feature": "sml-view"' in code

    def test_missing_mapping_file_warns(self, schemas, config, tmp_path, caplog):
        output = tmp_path / "sml.py"
        with caplog.at_level(logging.WARNING, logger="rnc_to_code.build"):
            regenerate(schemas, output, config, names_path=tmp_path / "names.yaml", force=True)
        assert "Name mappings not found" in caplog.text
        # Default names apply
        assert "class Ext:" in output.read_text(encoding="utf-8")


class TestLoadMappings:
    def test_none(self):
        assert load_mappings(None, None) == (None, None)

    def test_files(self, data_dir):
        names, features = load_mappings(data_dir / "names.yaml", data_dir / "features.yaml")
        assert names.resolve_type("sml", "CT_Ext") == "Extension"
        assert features.primary_feature("sml", "Worksheet", "frozen") == "view"

    def test_missing_feature_file_warns(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger="rnc_to_code.build"):
            assert load_mappings(None, tmp_path / "features.yaml") == (None, None)
        assert "Feature mappings not found" in caplog.text

    def test_malformed_file_raises(self, tmp_path):
        path = tmp_path / "features.yaml"
        path.write_text("sml:\n  Font: 3\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_mappings(None, path)


class TestAtomicWriter:
    def test_invalid_python_leaves_nothing_behind(self, tmp_path):
        path = tmp_path / "out.py"
        with pytest.raises(GeneratedCodeError):
            AtomicWriter().write(path, "def broken(:\n")
        assert list(tmp_path.iterdir()) == []

    def test_invalid_python_keeps_existing_file(self, tmp_path):
        path = tmp_path / "out.py"
        path.write_text("x = 1\n", encoding="utf-8")
        with pytest.raises(GeneratedCodeError):
            AtomicWriter().write(path, "def broken(:\n")
        assert path.read_text(encoding="utf-8") == "x = 1\n"
        assert list(tmp_path.iterdir()) == [path]

    def test_custom_validator(self, tmp_path):
        seen = []
        AtomicWriter(validate_python=seen.append).write(tmp_path / "out.py", "anything")
        assert seen == ["anything"]

    def test_validation_can_be_skipped(self, tmp_path):
        path = tmp_path / "data.txt"
        AtomicWriter().write(path, "not python (", validate=False)
        assert path.read_text(encoding="utf-8") == "not python ("
