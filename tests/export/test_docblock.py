"""Tests for the docblock normalizer."""

import logging

import pytest

from docexport.export import DocBlockNormalizer, empty_docblock
from docexport.models import (
    PlainTag,
    RawDocBlock,
    ReferenceTag,
    TypedTag,
    VariableTag,
    VersionTag,
)
from docexport.parsing import HashNotationError, HashNotationParser

from fixtures.builders import HASH_PARAM_TEXT, make_docblock


class TestNormalizeEmpty:
    """Tests for elements without a docblock."""

    def test_none_gives_empty_record(self, normalizer):
        """Test absence yields empty strings and no tags, never None."""
        assert normalizer.normalize(None) == {
            "description": "",
            "long_description": "",
            "tags": [],
        }

    def test_empty_docblock_helper(self):
        """Test each call returns a fresh record."""
        first = empty_docblock()
        first["tags"].append("x")

        assert empty_docblock()["tags"] == []


class TestNormalizeDescriptions:
    """Tests for description handling."""

    def test_newlines_collapsed(self, normalizer):
        """Test CR/LF runs in descriptions become single spaces."""
        docblock = RawDocBlock(
            short_description="Retrieve\nposts.",
            long_description="First line.\r\n\r\nSecond line.",
        )

        doc = normalizer.normalize(docblock)

        assert doc["description"] == "Retrieve posts."
        assert doc["long_description"] == "First line. Second line."


class TestNormalizeTags:
    """Tests for per-kind tag fields."""

    def test_tag_order_preserved(self, normalizer):
        """Test tags come out in source order, none dropped."""
        docblock = make_docblock(
            tags=[("since", "1.0.0"), ("param", "int $a A."), ("param", "int $b B."), ("return", "int")]
        )

        doc = normalizer.normalize(docblock)

        assert [(t["name"], t.get("variable")) for t in doc["tags"]] == [
            ("since", None),
            ("param", "$a"),
            ("param", "$b"),
            ("return", None),
        ]

    def test_plain_tag_fields(self, normalizer):
        """Test plain tags carry only name and content."""
        doc = normalizer.normalize(RawDocBlock(tags=[PlainTag(name="todo", content="Fix\nthis.")]))

        assert doc["tags"] == [{"name": "todo", "content": "Fix this."}]

    def test_typed_tag_fields(self, normalizer):
        """Test typed tags add types."""
        doc = normalizer.normalize(
            RawDocBlock(tags=[TypedTag(name="return", content="Posts.", types=["array"])])
        )

        assert doc["tags"] == [{"name": "return", "content": "Posts.", "types": ["array"]}]

    def test_variable_tag_fields(self, normalizer):
        """Test variable tags add types and variable."""
        doc = normalizer.normalize(
            RawDocBlock(
                tags=[VariableTag(name="param", content="ID.", types=["int"], variable="$id")]
            )
        )

        assert doc["tags"] == [
            {"name": "param", "content": "ID.", "types": ["int"], "variable": "$id"}
        ]

    def test_reference_tag_fields(self, normalizer):
        """Test reference tags add refers."""
        doc = normalizer.normalize(
            RawDocBlock(tags=[ReferenceTag(name="see", content="", reference="get_post()")])
        )

        assert doc["tags"] == [{"name": "see", "content": "", "refers": "get_post()"}]

    def test_since_version_overrides_content(self, normalizer):
        """Test a non-empty @since version replaces the content."""
        doc = normalizer.normalize(
            RawDocBlock(tags=[VersionTag(name="since", content="Added.", version="4.4.0")])
        )

        assert doc["tags"] == [{"name": "since", "content": "4.4.0"}]

    def test_since_without_version_keeps_content(self, normalizer):
        """Test an empty version leaves the content alone."""
        doc = normalizer.normalize(
            RawDocBlock(tags=[VersionTag(name="since", content="MU (3.0.0)")])
        )

        assert doc["tags"][0]["content"] == "MU (3.0.0)"

    def test_other_version_tags_keep_content(self, normalizer):
        """Test only @since is overridden."""
        doc = normalizer.normalize(
            RawDocBlock(tags=[VersionTag(name="deprecated", content="Use x().", version="5.0.0")])
        )

        assert doc["tags"][0]["content"] == "Use x()."


class TestHashNotationTags:
    """Tests for @param content written in hash notation."""

    def test_hash_param_parsed(self, normalizer):
        """Test the parsed tree replaces the content string."""
        doc = normalizer.normalize(make_docblock(tags=[("param", HASH_PARAM_TEXT)]))
        tag = doc["tags"][0]

        assert tag["variable"] == "$args"
        assert tag["types"] == ["array"]
        assert tag["content"] == {
            "content": "Optional. Arguments to retrieve posts.",
            "types": ["array"],
            "$numberposts": {"content": "Total number of posts.", "types": ["int"]},
            "$meta": {
                "content": "",
                "types": ["array"],
                "$key": {"content": "Meta key.", "types": ["string"]},
                "$value": {"content": "Meta value.", "types": ["string"]},
            },
        }

    def test_only_param_is_parsed(self, normalizer):
        """Test other tags starting with a brace stay text."""
        doc = normalizer.normalize(
            RawDocBlock(tags=[TypedTag(name="return", content="{ @type int $x X. }", types=["array"])])
        )

        assert doc["tags"][0]["content"] == "{ @type int $x X. }"

    def test_fallback_to_raw_text(self, normalizer, caplog):
        """Test a malformed tag keeps its raw text and the rest survives."""
        docblock = make_docblock(
            tags=[
                ("param", "array $args { @type $bad No type. }"),
                ("param", "int $id Post ID."),
            ]
        )

        with caplog.at_level(logging.WARNING, logger="docexport.export.docblock"):
            doc = normalizer.normalize(docblock)

        assert doc["tags"][0]["content"] == "{ @type $bad No type. }"
        assert doc["tags"][1]["content"] == "Post ID."
        assert "Keeping raw text for @param $args" in caplog.text

    def test_strict_mode_raises(self, registry):
        """Test errors propagate without fallback."""
        normalizer = DocBlockNormalizer(registry, fallback_to_raw=False)

        with pytest.raises(HashNotationError):
            normalizer.normalize(make_docblock(tags=[("param", "array $args { @type $bad x }")]))

    def test_depth_limit_applies(self, registry):
        """Test the normalizer uses its parser's depth limit."""
        normalizer = DocBlockNormalizer(registry, HashNotationParser(registry, max_depth=1))
        text = "array $args { @type array $a { @type array $b { @type int $x X. } } }"

        doc = normalizer.normalize(make_docblock(tags=[("param", text)]))

        assert isinstance(doc["tags"][0]["content"], str)

    def test_default_collaborators(self):
        """Test a normalizer built without arguments parses hash notation."""
        normalizer = DocBlockNormalizer()

        doc = normalizer.normalize(make_docblock(tags=[("param", "array $a { @type int $x X. }")]))

        assert doc["tags"][0]["content"]["$x"]["types"] == ["int"]
