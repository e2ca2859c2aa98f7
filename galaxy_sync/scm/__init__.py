"""SCM client abstraction - GitHub and GitLab read-only clients."""

from galaxy_sync.scm.base import ScmClient, ScmClientConfig
from galaxy_sync.scm.factory import ScmClientFactory
from galaxy_sync.scm.github import GithubClient
from galaxy_sync.scm.gitlab import GitlabClient
from galaxy_sync.scm.schemas import DirectoryEntry, RepositoryInfo, RepositoryRef

__all__ = [
    "DirectoryEntry",
    "GithubClient",
    "GitlabClient",
    "RepositoryInfo",
    "RepositoryRef",
    "ScmClient",
    "ScmClientConfig",
    "ScmClientFactory",
]
