"""Data shapes shared by the SCM clients."""

from dataclasses import dataclass
from typing import Literal

RefType = Literal["branch", "tag"]
EntryType = Literal["file", "dir"]


@dataclass(frozen=True)
class RepositoryInfo:
    """A repository (GitHub) or project (GitLab) in an organization."""

    name: str
    full_path: str
    default_branch: str
    url: str
    description: str | None = None


@dataclass(frozen=True)
class DirectoryEntry:
    name: str
    path: str
    type: EntryType


@dataclass(frozen=True)
class RepositoryRef:
    name: str
    ref_type: RefType
