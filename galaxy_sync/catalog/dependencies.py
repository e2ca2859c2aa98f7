"""Dependency extraction from galaxy.yml ``dependencies`` mappings."""

from collections.abc import Mapping
from dataclasses import dataclass

from galaxy_sync.catalog.identifiers import sanitize_name


@dataclass(frozen=True)
class Dependency:
    namespace: str
    name: str
    version: str


def parse_dependencies(dependencies: Mapping[str, str] | None) -> list[Dependency]:
    """
    Split ``"namespace.name" -> version`` entries into Dependency records.

    The key is split on its first dot. A key without a dot is used as both
    namespace and name.
    """
    if not dependencies:
        return []

    parsed = []
    for full_name, version in dependencies.items():
        namespace, sep, name = full_name.partition(".")
        if not sep:
            namespace = name = full_name
        parsed.append(Dependency(namespace=namespace, name=name, version=version))
    return parsed


def create_dependency_relations(dependencies: Mapping[str, str] | None) -> list[str]:
    """Relation targets (``component:default/<name>``) for each dependency."""
    return [
        f"component:default/{sanitize_name(f'{dep.namespace}-{dep.name}')}"
        for dep in parse_dependencies(dependencies)
    ]
