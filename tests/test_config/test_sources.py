"""Tests for the sources file loader and typed source configs."""

import pytest
from pydantic import ValidationError

from galaxy_sync.config.sources import (
    GithubSourceConfig,
    GitlabSourceConfig,
    ScheduleConfig,
    SourceConfigAdapter,
    SyncConfig,
    expand_env_references,
    load_sync_config,
)
from galaxy_sync.errors import ConfigurationError, NoTokenConfiguredError
from galaxy_sync.scm.factory import ScmClientFactory

SOURCES_YAML = """\
environments:
  development:
    schedule:
      frequency_seconds: 600
      timeout_seconds: 120
    providers:
      github:
        - name: github-public
          orgs:
            - name: acme
              branches: [main, stable-2]
              tags: ["v*"]
            - name: acme-labs
              schedule:
                frequency_seconds: 60
                timeout_seconds: 30
      gitlab:
        - name: internal-gitlab
          host: gitlab.example.com
          orgs:
            - name: platform/ansible
              galaxy_file_paths: [collections]
              crawl_depth: 3
integrations:
  github:
    - host: github.com
      token: ${GALAXY_SYNC_TEST_TOKEN}
  gitlab:
    - host: gitlab.example.com
      token: glpat-abc
hub:
  repositories: [published, validated]
"""


@pytest.fixture
def sources_file(tmp_path, monkeypatch):
    monkeypatch.setenv("GALAXY_SYNC_TEST_TOKEN", "ghp-secret")
    path = tmp_path / "galaxy-sync.yaml"
    path.write_text(SOURCES_YAML)
    return path


class TestLoadSyncConfig:
    """Tests for load_sync_config."""

    def test_loads_and_expands_env_vars(self, sources_file):
        """Should substitute ${VAR} references from the environment."""
        config = load_sync_config(sources_file)

        assert config.integrations.github[0].token == "ghp-secret"
        assert config.integrations.gitlab[0].host == "gitlab.example.com"
        assert config.hub.repositories == ["published", "validated"]

    def test_unset_env_var_leaves_token_empty(self, tmp_path, monkeypatch):
        """Should not keep an unresolved ${VAR} reference as a token."""
        monkeypatch.delenv("GALAXY_SYNC_UNSET_TOKEN", raising=False)
        path = tmp_path / "sources.yaml"
        path.write_text(
            "integrations:\n"
            "  github:\n"
            "    - host: github.com\n"
            "      token: ${GALAXY_SYNC_UNSET_TOKEN}\n"
            "    - host: github.example.com\n"
            '      token: "${GALAXY_SYNC_UNSET_TOKEN}"\n'
        )

        config = load_sync_config(path)

        assert config.integrations.github[0].token is None
        assert config.integrations.github[1].token == ""

    def test_unset_token_fails_at_client_creation(self, tmp_path, monkeypatch):
        """Should raise NoTokenConfiguredError for a token whose variable is unset."""
        monkeypatch.delenv("GALAXY_SYNC_UNSET_TOKEN", raising=False)
        path = tmp_path / "sources.yaml"
        path.write_text(
            "integrations:\n"
            "  github:\n"
            "    - host: github.com\n"
            "      token: ${GALAXY_SYNC_UNSET_TOKEN}\n"
        )
        factory = ScmClientFactory(load_sync_config(path).integrations)

        with pytest.raises(NoTokenConfiguredError):
            factory.create_client("github", "acme")

    def test_expand_env_references(self, monkeypatch):
        monkeypatch.setenv("GALAXY_SYNC_HOST", "gitlab.example.com")
        monkeypatch.delenv("GALAXY_SYNC_MISSING", raising=False)

        assert expand_env_references("host: ${GALAXY_SYNC_HOST}") == "host: gitlab.example.com"
        assert expand_env_references("a${GALAXY_SYNC_MISSING}b") == "ab"
        assert expand_env_references("cost: $5") == "cost: $5"

    def test_missing_file_raises(self, tmp_path):
        """Should raise ConfigurationError when the file does not exist."""
        with pytest.raises(ConfigurationError, match="not found"):
            load_sync_config(tmp_path / "missing.yaml")

    def test_invalid_yaml_raises(self, tmp_path):
        """Should raise ConfigurationError on unparseable YAML."""
        path = tmp_path / "bad.yaml"
        path.write_text("environments: [unclosed")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_sync_config(path)

    def test_invalid_schema_raises(self, tmp_path):
        """Should raise ConfigurationError when validation fails."""
        path = tmp_path / "bad.yaml"
        path.write_text("environments:\n  dev:\n    schedule:\n      frequency_seconds: -1\n")

        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_sync_config(path)

    def test_empty_file_is_empty_config(self, tmp_path):
        """Should treat an empty file as a config with no sources."""
        path = tmp_path / "empty.yaml"
        path.write_text("")

        config = load_sync_config(path)

        assert config.source_configs() == []
        assert config.hub is None


class TestSourceConfigs:
    """Tests for flattening environments into per-organization sources."""

    def test_one_source_per_org(self, sources_file):
        """Should create a typed source for every organization."""
        sources = load_sync_config(sources_file).source_configs()

        assert [(s.scm_provider, s.organization) for s in sources] == [
            ("github", "acme"),
            ("github", "acme-labs"),
            ("gitlab", "platform/ansible"),
        ]
        assert isinstance(sources[0], GithubSourceConfig)
        assert isinstance(sources[2], GitlabSourceConfig)

    def test_default_host_applied(self, sources_file):
        """Should use github.com when a provider entry has no host."""
        sources = load_sync_config(sources_file).source_configs()

        assert sources[0].host == "github.com"
        assert sources[0].host_name == "github-public"
        assert sources[2].host == "gitlab.example.com"

    def test_org_schedule_overrides_env_schedule(self, sources_file):
        """Should prefer the organization schedule over the environment one."""
        sources = load_sync_config(sources_file).source_configs()

        assert sources[0].schedule.frequency_seconds == 600
        assert sources[1].schedule.frequency_seconds == 60

    def test_discovery_options_carried(self, sources_file):
        """Should carry branches, tags, paths and depth onto the source."""
        sources = load_sync_config(sources_file).source_configs()

        assert sources[0].branches == ("main", "stable-2")
        assert sources[0].tags == ("v*",)
        assert sources[2].galaxy_file_paths == ("collections",)
        assert sources[2].crawl_depth == 3

    def test_org_without_any_schedule_is_skipped(self):
        """Should skip organizations when neither org nor env has a schedule."""
        config = SyncConfig.model_validate({
            "environments": {
                "dev": {
                    "providers": {
                        "github": [{"name": "gh", "orgs": [
                            {"name": "scheduled", "schedule": {"frequency_seconds": 10}},
                            {"name": "unscheduled"},
                        ]}],
                    },
                },
            },
        })

        sources = config.source_configs()

        assert [s.organization for s in sources] == ["scheduled"]

    def test_disabled_environment_skipped(self):
        """Should produce no sources for a disabled environment."""
        config = SyncConfig.model_validate({
            "environments": {
                "dev": {
                    "enabled": False,
                    "schedule": {"frequency_seconds": 10},
                    "providers": {"github": [{"name": "gh", "orgs": [{"name": "acme"}]}]},
                },
            },
        })

        assert config.source_configs() == []


class TestSourceConfigUnion:
    """Tests for the discriminated source config union."""

    def test_discriminates_on_provider(self):
        """Should pick the variant from scm_provider."""
        source = SourceConfigAdapter.validate_python({
            "scm_provider": "gitlab",
            "host": "gitlab.com",
            "host_name": "gl",
            "organization": "group",
        })

        assert isinstance(source, GitlabSourceConfig)

    def test_rejects_unknown_provider(self):
        """Should reject a provider outside the union."""
        with pytest.raises(ValidationError):
            SourceConfigAdapter.validate_python({
                "scm_provider": "bitbucket",
                "host": "bitbucket.org",
                "host_name": "bb",
                "organization": "team",
            })

    def test_source_is_immutable(self, github_source):
        """Should not allow mutating a validated source."""
        with pytest.raises(ValidationError):
            github_source.organization = "other"

    def test_schedule_defaults(self):
        """Should default to hourly runs with a 15 minute timeout."""
        schedule = ScheduleConfig()

        assert schedule.frequency_seconds == 3600
        assert schedule.timeout_seconds == 900
        assert schedule.initial_delay_seconds == 0
