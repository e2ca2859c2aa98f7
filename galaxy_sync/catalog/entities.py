"""
Catalog entity builders.

Turns discovered galaxy files, repositories and hub collections into
catalog Component entities (plain dicts in the apiVersion/kind/metadata/
spec shape the catalog expects).
"""

import json
from typing import Any

from galaxy_sync.catalog.dependencies import create_dependency_relations
from galaxy_sync.catalog.identifiers import (
    Source,
    generate_collection_entity_name,
    generate_repository_entity_name,
    generate_source_id,
    sanitize_name,
)
from galaxy_sync.crawler.schemas import DiscoveredGalaxyFile
from galaxy_sync.galaxy.schema import DEFAULT_VERSION
from galaxy_sync.scm.schemas import RepositoryInfo

API_VERSION = "backstage.io/v1alpha1"
ANNOTATION_PREFIX = "ansible.io"


def build_file_url(scm_provider: str, host: str, repo_path: str, ref: str, file_path: str) -> str:
    """Browser URL of a file at a given ref."""
    if scm_provider == "github":
        return f"https://{host}/{repo_path}/blob/{ref}/{file_path}"
    return f"https://{host}/{repo_path}/-/blob/{ref}/{file_path}"


def _directory_of(file_path: str) -> str:
    head, sep, _ = file_path.rpartition("/")
    return head if sep and head else ""


def _metadata_links(galaxy_file: DiscoveredGalaxyFile) -> list[dict[str, str]]:
    metadata = galaxy_file.metadata
    links = []
    for url, title, icon in (
        (metadata.repository, "Repository", "github"),
        (metadata.documentation, "Documentation", "docs"),
        (metadata.homepage, "Homepage", "web"),
        (metadata.issues, "Issues", "bug"),
    ):
        if url:
            links.append({"url": url, "title": title, "icon": icon})
    return links


def build_collection_entity(
    galaxy_file: DiscoveredGalaxyFile,
    source: Source,
    source_location: str,
) -> dict[str, Any]:
    """Build the Component entity for one collection version."""
    metadata = galaxy_file.metadata
    repository = galaxy_file.repository
    host = source.host
    file_url = build_file_url(source.scm_provider, host, repository.full_path, galaxy_file.ref, galaxy_file.path)

    annotations = {
        "backstage.io/source-location": source_location,
        "backstage.io/view-url": file_url,
        "backstage.io/managed-by-location": f"url:{file_url}",
        "backstage.io/managed-by-origin-location": f"url:{file_url}",
        f"{ANNOTATION_PREFIX}/scm-provider": source.scm_provider,
        f"{ANNOTATION_PREFIX}/scm-host": host,
        f"{ANNOTATION_PREFIX}/scm-organization": source.organization,
        f"{ANNOTATION_PREFIX}/scm-repository": repository.full_path,
        f"{ANNOTATION_PREFIX}/galaxy-namespace": metadata.namespace,
        f"{ANNOTATION_PREFIX}/galaxy-name": metadata.name,
        f"{ANNOTATION_PREFIX}/galaxy-version": metadata.version,
        f"{ANNOTATION_PREFIX}/galaxy-full-name": metadata.full_name,
        f"{ANNOTATION_PREFIX}/galaxy-ref": galaxy_file.ref,
        f"{ANNOTATION_PREFIX}/galaxy-ref-type": galaxy_file.ref_type,
        f"{ANNOTATION_PREFIX}/galaxy-file-path": galaxy_file.path,
        f"{ANNOTATION_PREFIX}/discovery-source-id": generate_source_id(source),
    }
    if metadata.dependencies:
        annotations[f"{ANNOTATION_PREFIX}/galaxy-dependencies"] = json.dumps(metadata.dependencies)
    if metadata.authors:
        annotations[f"{ANNOTATION_PREFIX}/galaxy-authors"] = json.dumps(metadata.authors)
    if metadata.license:
        license_value = metadata.license
        if isinstance(license_value, list):
            license_value = ", ".join(license_value)
        annotations[f"{ANNOTATION_PREFIX}/galaxy-license"] = license_value
    if metadata.readme:
        directory = _directory_of(galaxy_file.path)
        readme_path = f"{directory}/{metadata.readme}" if directory else metadata.readme
        annotations[f"{ANNOTATION_PREFIX}/galaxy-readme-url"] = build_file_url(
            source.scm_provider, host, repository.full_path, galaxy_file.ref, readme_path
        )

    # dict.fromkeys keeps first-seen order while dropping duplicates
    tags = [sanitize_name(t) for t in metadata.tags or []]
    tags += [source.scm_provider, "ansible-collection"]
    tags = list(dict.fromkeys(t for t in tags if t))

    title = metadata.full_name
    if metadata.version and metadata.version != DEFAULT_VERSION:
        title = f"{title} v{metadata.version}"

    entity_metadata: dict[str, Any] = {
        "name": generate_collection_entity_name(metadata, source),
        "namespace": "default",
        "title": title,
        "description": metadata.description or f"Ansible Collection: {metadata.full_name}",
        "annotations": annotations,
        "tags": tags,
    }
    links = _metadata_links(galaxy_file)
    if links:
        entity_metadata["links"] = links

    spec: dict[str, Any] = {
        "type": "ansible-collection",
        "lifecycle": "production" if galaxy_file.ref_type == "tag" else "development",
        "owner": metadata.namespace,
        "system": f"{metadata.namespace}-collections",
        "subcomponentOf": f"component:default/{generate_repository_entity_name(repository, source)}",
    }
    dependency_refs = create_dependency_relations(metadata.dependencies)
    if dependency_refs:
        spec["dependsOn"] = dependency_refs

    return {"apiVersion": API_VERSION, "kind": "Component", "metadata": entity_metadata, "spec": spec}


def build_repository_entity(
    repository: RepositoryInfo,
    source: Source,
    collection_entity_names: list[str],
) -> dict[str, Any]:
    """Build the Component entity for a repository that holds collections."""
    host = source.host
    repo_url = repository.url or f"https://{host}/{repository.full_path}"

    annotations = {
        "backstage.io/source-location": f"url:{repo_url}",
        "backstage.io/view-url": repo_url,
        "backstage.io/managed-by-location": f"url:{repo_url}",
        "backstage.io/managed-by-origin-location": f"url:{repo_url}",
        f"{ANNOTATION_PREFIX}/scm-provider": source.scm_provider,
        f"{ANNOTATION_PREFIX}/scm-host": host,
        f"{ANNOTATION_PREFIX}/scm-organization": source.organization,
        f"{ANNOTATION_PREFIX}/scm-repository": repository.full_path,
        f"{ANNOTATION_PREFIX}/repository-name": repository.name,
        f"{ANNOTATION_PREFIX}/repository-default-branch": repository.default_branch,
        f"{ANNOTATION_PREFIX}/repository-collection-count": str(len(collection_entity_names)),
        f"{ANNOTATION_PREFIX}/discovery-source-id": generate_source_id(source),
    }
    if collection_entity_names:
        annotations[f"{ANNOTATION_PREFIX}/repository-collections"] = json.dumps(collection_entity_names)

    spec: dict[str, Any] = {
        "type": "git-repository",
        "lifecycle": "production",
        "owner": source.organization,
        "system": f"{source.organization}-repositories",
    }
    if collection_entity_names:
        spec["dependsOn"] = [f"component:default/{name}" for name in collection_entity_names]

    return {
        "apiVersion": API_VERSION,
        "kind": "Component",
        "metadata": {
            "name": generate_repository_entity_name(repository, source),
            "namespace": "default",
            "title": repository.full_path,
            "description": repository.description
            or f"Git repository containing Ansible collections: {repository.full_path}",
            "annotations": annotations,
            "tags": ["git-repository", source.scm_provider, "ansible-collections-source"],
            "links": [{
                "url": repo_url,
                "title": "Repository",
                "icon": "github" if source.scm_provider == "github" else "gitlab",
            }],
        },
        "spec": spec,
    }


def build_hub_collection_entity(
    collection: dict[str, Any],
    repository_name: str,
    base_url: str,
) -> dict[str, Any]:
    """
    Build the Component entity for a collection version served by an
    automation hub repository.

    ``collection`` is one ``collection_version`` record from the hub search
    API (namespace, name, version, description, tags, dependencies).
    """
    namespace = collection["namespace"]
    name = collection["name"]
    version = collection.get("version") or DEFAULT_VERSION
    full_name = f"{namespace}.{name}"
    source_url = f"{base_url.rstrip('/')}/content/collections/{repository_name}/{namespace}/{name}"

    tags = [sanitize_name(t["name"] if isinstance(t, dict) else str(t)) for t in collection.get("tags") or []]
    tags += ["automation-hub", "ansible-collection"]
    dependencies = collection.get("dependencies") or {}

    annotations = {
        "backstage.io/source-location": f"url:{source_url}",
        "backstage.io/view-url": source_url,
        "backstage.io/managed-by-location": f"url:{source_url}",
        "backstage.io/managed-by-origin-location": f"url:{source_url}",
        f"{ANNOTATION_PREFIX}/collection-source": "pah",
        f"{ANNOTATION_PREFIX}/collection-source-repository": repository_name,
        f"{ANNOTATION_PREFIX}/galaxy-namespace": namespace,
        f"{ANNOTATION_PREFIX}/galaxy-name": name,
        f"{ANNOTATION_PREFIX}/galaxy-version": version,
        f"{ANNOTATION_PREFIX}/galaxy-full-name": full_name,
    }
    if dependencies:
        annotations[f"{ANNOTATION_PREFIX}/galaxy-dependencies"] = json.dumps(dependencies)

    spec: dict[str, Any] = {
        "type": "ansible-collection",
        "lifecycle": "production",
        "owner": namespace,
        "system": f"{namespace}-collections",
    }
    dependency_refs = create_dependency_relations(dependencies)
    if dependency_refs:
        spec["dependsOn"] = dependency_refs

    return {
        "apiVersion": API_VERSION,
        "kind": "Component",
        "metadata": {
            "name": sanitize_name(f"pah-{repository_name}-{namespace}-{name}-{version}"),
            "namespace": "default",
            "title": f"{full_name} v{version}" if version != DEFAULT_VERSION else full_name,
            "description": collection.get("description") or f"Ansible Collection: {full_name}",
            "annotations": annotations,
            "tags": list(dict.fromkeys(t for t in tags if t)),
        },
        "spec": spec,
    }
