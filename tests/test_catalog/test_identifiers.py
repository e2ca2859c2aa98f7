"""Tests for collection, repository and source identifiers."""

import re
from dataclasses import replace

import pytest

from galaxy_sync.catalog.identifiers import (
    MAX_NAME_LENGTH,
    CollectionIdentifier,
    create_collection_identifier,
    create_collection_key,
    create_repository_key,
    generate_collection_entity_name,
    generate_repository_entity_name,
    generate_source_id,
    get_default_host,
    sanitize_host_name,
    sanitize_name,
)
from galaxy_sync.galaxy.schema import GalaxyMetadata


class TestSanitizeName:
    """Tests for sanitize_name."""

    def test_lowercases_and_hyphenates(self):
        """Should replace runs of non-alphanumerics with a single hyphen."""
        assert sanitize_name("Acme.Network__Tools") == "acme-network-tools"

    def test_trims_leading_and_trailing_hyphens(self):
        assert sanitize_name("--acme/tools--") == "acme-tools"

    def test_caps_length(self):
        """Should never return more than 63 characters."""
        assert len(sanitize_name("a" * 100)) == MAX_NAME_LENGTH

    @pytest.mark.parametrize(
        "value",
        [
            "a" * 62 + ".b",
            "acme." * 20,
            "--" + "x" * 70,
            "Acme__Network..Tools-" * 5,
            "a" * 30 + "-" + "b" * 31 + "-1.0.0",
        ],
    )
    def test_result_is_a_valid_entity_name(self, value):
        """Should never cut to a trailing hyphen or leave edge or double hyphens."""
        result = sanitize_name(value)

        assert len(result) <= MAX_NAME_LENGTH
        assert re.fullmatch(r"[a-z0-9-]*", result)
        assert not result.startswith("-")
        assert not result.endswith("-")
        assert "--" not in result
        assert sanitize_name(result) == result

    def test_host_name(self):
        assert sanitize_host_name("GitHub.Example.COM") == "github-example-com"

    def test_default_hosts(self):
        assert get_default_host("github") == "github.com"
        assert get_default_host("gitlab") == "gitlab.com"


class TestKeys:
    """Tests for collection and repository keys."""

    def test_collection_key(self, github_source):
        """Should combine provider, host and namespace:name@version."""
        metadata = GalaxyMetadata(namespace="Acme", name="network", version="1.2.0")

        identifier = create_collection_identifier(metadata, github_source)

        assert identifier.host == "github.com"
        assert identifier.host_name == "github-com"
        assert create_collection_key(identifier) == "github:github.com:Acme:network@1.2.0"

    def test_collection_key_without_version(self, gitlab_source):
        """Should use the N/A placeholder when the version is missing."""
        metadata = GalaxyMetadata(namespace="acme", name="tools", version=None)

        key = create_collection_key(create_collection_identifier(metadata, gitlab_source))

        assert key == "gitlab:gitlab.example.com:acme:tools@N/A"

    def test_collection_key_separates_namespace_and_name(self, github_source):
        """Should not collide when a dot moves between namespace and name."""
        left = GalaxyMetadata(namespace="a.b", name="c", version="1.0.0")
        right = GalaxyMetadata(namespace="a", name="b.c", version="1.0.0")

        assert create_collection_key(create_collection_identifier(left, github_source)) != (
            create_collection_key(create_collection_identifier(right, github_source))
        )

    def test_collection_key_differs_per_field(self):
        base = CollectionIdentifier(
            scm_provider="github",
            host="github.com",
            host_name="github-com",
            organization="acme",
            namespace="acme",
            name="network",
            version="1.0.0",
        )
        variants = [
            replace(base, scm_provider="gitlab"),
            replace(base, host="github-com", host_name="github-com"),
            replace(base, host="github.example.com", host_name="github-example-com"),
            replace(base, namespace="acme2"),
            replace(base, name="network2"),
            replace(base, version="1.0.1"),
        ]

        keys = {create_collection_key(base)} | {create_collection_key(v) for v in variants}

        assert len(keys) == len(variants) + 1

    def test_repository_key(self, gitlab_source, repository_factory):
        repository = repository_factory("roles", org="platform/ansible")

        assert create_repository_key(repository, gitlab_source) == (
            "gitlab:gitlab-example-com:platform/ansible/roles"
        )


class TestEntityNames:
    """Tests for generated entity names."""

    def test_collection_entity_name(self, github_source):
        metadata = GalaxyMetadata(namespace="acme", name="network", version="1.2.0")

        assert generate_collection_entity_name(metadata, github_source) == (
            "acme-network-1-2-0-github-github-com"
        )

    def test_long_collection_entity_name_has_no_trailing_hyphen(self, github_source):
        """Should trim a hyphen left at the length cut."""
        metadata = GalaxyMetadata(namespace="a" * 30, name="b" * 31, version="1.0.0")

        name = generate_collection_entity_name(metadata, github_source)

        assert name == "a" * 30 + "-" + "b" * 31
        assert generate_collection_entity_name(metadata, github_source) == name

    def test_repository_entity_name(self, github_source, repository_factory):
        assert generate_repository_entity_name(repository_factory("network"), github_source) == (
            "acme-network-github-github-com"
        )


class TestSourceId:
    """Tests for generate_source_id."""

    def test_github_source_id(self, github_source):
        assert generate_source_id(github_source) == "development:github:github-com:acme"

    def test_nested_group_is_sanitized(self, gitlab_source):
        """Should sanitize nested group paths into a single segment."""
        assert generate_source_id(gitlab_source) == (
            "production:gitlab:gitlab-example-com:platform-ansible"
        )
