"""Tests for galaxy.yml parsing and validation."""

import pytest

from galaxy_sync.errors import GalaxyParseError, GalaxyValidationError
from galaxy_sync.galaxy.schema import (
    DEFAULT_README,
    EMPTY_MESSAGE,
    EMPTY_OR_INVALID_MESSAGE,
    has_required_fields,
    is_galaxy_file_name,
    load_galaxy_metadata,
    parse_galaxy_file,
    validate_galaxy_content,
)


class TestValidateGalaxyContent:
    """Tests for validate_galaxy_content."""

    def test_valid_content(self, galaxy_yml):
        """Should accept a complete galaxy.yml."""
        result = validate_galaxy_content(parse_galaxy_file(galaxy_yml))

        assert result.success is True
        assert result.errors is None
        assert result.data.full_name == "acme.network"
        assert result.data.version == "1.2.0"
        assert result.data.license == ["GPL-3.0-or-later"]
        assert result.data.dependencies == {"ansible.netcommon": ">=2.0.0", "ansible.utils": "*"}

    def test_null_fields_get_defaults(self):
        """Should default version, readme and authors when they are null."""
        result = validate_galaxy_content({
            "namespace": "acme",
            "name": "tools",
            "version": None,
            "readme": None,
            "authors": None,
        })

        assert result.success is True
        assert result.data.version == "N/A"
        assert result.data.readme == DEFAULT_README
        assert result.data.authors == ["N/A"]

    def test_single_author_string_becomes_list(self):
        """Should wrap a single author string in a list."""
        result = validate_galaxy_content({"namespace": "acme", "name": "tools", "authors": "Jane"})

        assert result.data.authors == ["Jane"]

    def test_numeric_version_becomes_string(self):
        """Should accept YAML floats such as `version: 1.0`."""
        data = parse_galaxy_file("namespace: acme\nname: tools\nversion: 1.0\n")

        result = validate_galaxy_content(data)

        assert result.data.version == "1.0"

    def test_missing_namespace_reported_with_path(self):
        """Should report missing fields as 'path: message'."""
        result = validate_galaxy_content({"name": "tools"})

        assert result.success is False
        assert any(e.startswith("namespace:") for e in result.errors)

    @pytest.mark.parametrize("name", ["1tools", "my-tools", ""])
    def test_invalid_names_rejected(self, name):
        """Should reject names that are empty or do not match the pattern."""
        result = validate_galaxy_content({"namespace": "acme", "name": name})

        assert result.success is False
        assert any(e.startswith("name:") for e in result.errors)

    def test_non_mapping_rejected(self):
        """Should reject content that is not a mapping."""
        for content in (None, "text", ["a", "b"]):
            result = validate_galaxy_content(content)
            assert result.errors == [EMPTY_OR_INVALID_MESSAGE]

    def test_empty_mapping_rejected(self):
        """Should reject an empty mapping with a distinct message."""
        result = validate_galaxy_content({})

        assert result.errors == [EMPTY_MESSAGE]

    def test_unknown_fields_ignored(self):
        """Should ignore keys outside the galaxy.yml schema."""
        result = validate_galaxy_content({"namespace": "acme", "name": "tools", "build_ignore": ["*.tar.gz"]})

        assert result.success is True


class TestHasRequiredFields:
    """Tests for has_required_fields."""

    def test_all_present(self):
        """Should pass when every required key is present."""
        assert has_required_fields({
            "namespace": "acme",
            "name": "tools",
            "version": "1.0.0",
            "authors": ["Jane"],
            "readme": "README.md",
        })

    def test_presence_not_value_for_version_authors_readme(self):
        """Should accept null version, authors and readme as long as keys exist."""
        assert has_required_fields({
            "namespace": "acme",
            "name": "tools",
            "version": None,
            "authors": None,
            "readme": None,
        })

    def test_empty_namespace_fails(self):
        """Should require namespace and name to be non-empty strings."""
        assert not has_required_fields({
            "namespace": "",
            "name": "tools",
            "version": "1.0.0",
            "authors": [],
            "readme": "README.md",
        })

    def test_missing_readme_key_fails(self):
        """Should fail when a required key is absent."""
        assert not has_required_fields({
            "namespace": "acme",
            "name": "tools",
            "version": "1.0.0",
            "authors": [],
        })

    def test_non_mapping_fails(self):
        assert not has_required_fields(None)


class TestParsing:
    """Tests for parse_galaxy_file and load_galaxy_metadata."""

    def test_parse_error(self):
        """Should raise GalaxyParseError on invalid YAML."""
        with pytest.raises(GalaxyParseError):
            parse_galaxy_file("namespace: [unclosed")

    def test_load_metadata(self, galaxy_yml):
        """Should return validated metadata."""
        metadata = load_galaxy_metadata(galaxy_yml)

        assert metadata.namespace == "acme"

    def test_load_metadata_validation_error(self):
        """Should raise GalaxyValidationError carrying the error list."""
        with pytest.raises(GalaxyValidationError) as exc_info:
            load_galaxy_metadata("name: tools\n")

        assert any(e.startswith("namespace:") for e in exc_info.value.errors)

    @pytest.mark.parametrize(
        "file_name,expected",
        [("galaxy.yml", True), ("galaxy.yaml", True), ("Galaxy.YML", True), ("galaxy.json", False)],
    )
    def test_is_galaxy_file_name(self, file_name, expected):
        assert is_galaxy_file_name(file_name) is expected
