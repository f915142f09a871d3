"""Tests for reading reflector dumps."""

import json

import pytest
import yaml

from docexport.models import TagKind, VariableTag, VersionTag
from docexport.parsing import TagRegistry
from docexport.reflection import (
    ReflectionLoadError,
    classify_tags,
    load_reflection,
    read_reflection_dump,
)


class TestClassifyTags:
    """Tests for classify_tags()."""

    def test_raw_tags_typed(self):
        """Test raw name/text pairs become typed tag mappings."""
        data = {"docblock": {"tags": [{"name": "param", "text": "int $id Post ID."}]}}

        tag = classify_tags(data)["docblock"]["tags"][0]

        assert tag["kind"] == "variable"
        assert tag["variable"] == "$id"
        assert tag["types"] == ["int"]

    def test_content_key_accepted(self):
        """Test raw annotations may use content instead of text."""
        data = {"docblock": {"tags": [{"name": "since", "content": "2.0.0"}]}}

        tag = classify_tags(data)["docblock"]["tags"][0]

        assert tag["kind"] == "version"
        assert tag["version"] == "2.0.0"

    def test_typed_tags_untouched(self):
        """Test annotations that already carry a kind pass through."""
        typed = {"kind": "plain", "name": "param", "content": "raw"}

        result = classify_tags({"docblock": {"tags": [typed]}})

        assert result["docblock"]["tags"] == [typed]

    def test_nested_docblocks(self):
        """Test docblocks at any depth are classified."""
        data = {
            "classes": [
                {"methods": [{"docblock": {"tags": [{"name": "return", "text": "bool"}]}}]}
            ]
        }

        tag = classify_tags(data)["classes"][0]["methods"][0]["docblock"]["tags"][0]

        assert tag["kind"] == "typed"
        assert tag["types"] == ["bool"]

    def test_registry_used(self):
        """Test the registry decides the kind."""
        registry = TagRegistry.default().with_overrides(kinds={"option": TagKind.VARIABLE})
        data = {"docblock": {"tags": [{"name": "option", "text": "string $key Key."}]}}

        tag = classify_tags(data, registry)["docblock"]["tags"][0]

        assert tag["kind"] == "variable"

    def test_input_not_mutated(self):
        """Test a copy is returned."""
        data = {"docblock": {"tags": [{"name": "since", "text": "1.0"}]}}

        classify_tags(data)

        assert data == {"docblock": {"tags": [{"name": "since", "text": "1.0"}]}}


class TestReadReflectionDump:
    """Tests for read_reflection_dump()."""

    def test_sample_dump(self, sample_dump_path):
        """Test the sample dump yields one classified mapping."""
        files = read_reflection_dump(sample_dump_path)

        assert len(files) == 1
        assert files[0]["path"] == "/srv/wp/wp-includes/post.php"
        assert files[0]["docblock"]["tags"][0]["kind"] == "plain"

    def test_bare_list(self, tmp_path):
        """Test a top-level list of files is accepted."""
        path = tmp_path / "dump.json"
        path.write_text(json.dumps([{"path": "a.php"}, {"path": "b.php"}]))

        assert [f["path"] for f in read_reflection_dump(path)] == ["a.php", "b.php"]

    def test_yaml_dump(self, tmp_path):
        """Test YAML dumps are read."""
        path = tmp_path / "dump.yml"
        path.write_text(yaml.safe_dump({"files": [{"path": "a.php"}]}))

        assert read_reflection_dump(path) == [{"path": "a.php"}]

    def test_missing_file(self, tmp_path):
        """Test a missing dump raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            read_reflection_dump(tmp_path / "missing.json")

    def test_unsupported_suffix(self, tmp_path):
        """Test only JSON and YAML are read."""
        path = tmp_path / "dump.xml"
        path.write_text("<files/>")

        with pytest.raises(ReflectionLoadError, match="Unsupported dump format"):
            read_reflection_dump(path)

    def test_invalid_json(self, tmp_path):
        """Test malformed JSON raises ReflectionLoadError."""
        path = tmp_path / "dump.json"
        path.write_text("{not json")

        with pytest.raises(ReflectionLoadError, match="Invalid JSON"):
            read_reflection_dump(path)

    def test_wrong_shape(self, tmp_path):
        """Test a mapping without files is rejected."""
        path = tmp_path / "dump.json"
        path.write_text(json.dumps({"items": []}))

        with pytest.raises(ReflectionLoadError, match="'files' list"):
            read_reflection_dump(path)

    def test_non_mapping_entry(self, tmp_path):
        """Test every entry must be a mapping."""
        path = tmp_path / "dump.json"
        path.write_text(json.dumps([{"path": "a.php"}, "b.php"]))

        with pytest.raises(ReflectionLoadError, match="#1 is not a mapping"):
            read_reflection_dump(path)

    def test_invalid_file_not_validated(self, tmp_path):
        """Test invalid files are left for the orchestrator."""
        path = tmp_path / "dump.json"
        path.write_text(json.dumps([{"path": "a.php", "functions": [{"name": "f", "line": 0}]}]))

        assert read_reflection_dump(path)[0]["functions"][0]["line"] == 0


class TestLoadReflection:
    """Tests for load_reflection()."""

    def test_sample_dump(self, sample_dump_path):
        """Test the sample dump validates into models."""
        (file,) = load_reflection(sample_dump_path)

        function = file.functions[0]
        assert function.name == "get_posts"
        assert isinstance(function.docblock.tags[0], VersionTag)
        assert function.docblock.tags[0].version == "1.2.0"
        assert isinstance(function.docblock.tags[1], VariableTag)
        assert function.docblock.tags[1].content.startswith("{")
        assert file.classes[0].final is True
        assert file.classes[0].methods[0].static is True

    def test_validation_errors_located(self, tmp_path):
        """Test errors name the file index and field."""
        path = tmp_path / "dump.json"
        path.write_text(
            json.dumps(
                [
                    {"path": "a.php"},
                    {"path": "b.php", "functions": [{"name": "f", "line": 0}]},
                ]
            )
        )

        with pytest.raises(ReflectionLoadError) as exc_info:
            load_reflection(path)

        error = exc_info.value
        assert error.errors[0]["loc"] == ("files", 1, "functions", 0, "line")
        assert "files.1.functions.0.line" in str(error)
        assert f"(file: {path})" in str(error)
