"""Catalog identifiers, dependency relations, entity builders and sinks."""

from galaxy_sync.catalog.dependencies import Dependency, create_dependency_relations, parse_dependencies
from galaxy_sync.catalog.identifiers import (
    CollectionIdentifier,
    create_collection_identifier,
    create_collection_key,
    create_repository_key,
    generate_collection_entity_name,
    generate_repository_entity_name,
    generate_source_id,
    sanitize_host_name,
    sanitize_name,
)
from galaxy_sync.catalog.sink import CatalogSink, InMemoryCatalogSink, Relation

__all__ = [
    "CatalogSink",
    "CollectionIdentifier",
    "Dependency",
    "InMemoryCatalogSink",
    "Relation",
    "create_collection_identifier",
    "create_collection_key",
    "create_dependency_relations",
    "create_repository_key",
    "generate_collection_entity_name",
    "generate_repository_entity_name",
    "generate_source_id",
    "parse_dependencies",
    "sanitize_host_name",
    "sanitize_name",
]
