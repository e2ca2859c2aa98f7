"""galaxy.yml parsing and validation."""

from galaxy_sync.galaxy.schema import (
    GalaxyMetadata,
    GalaxyValidationResult,
    has_required_fields,
    is_galaxy_file_name,
    load_galaxy_metadata,
    parse_galaxy_file,
    validate_galaxy_content,
)

__all__ = [
    "GalaxyMetadata",
    "GalaxyValidationResult",
    "has_required_fields",
    "is_galaxy_file_name",
    "load_galaxy_metadata",
    "parse_galaxy_file",
    "validate_galaxy_content",
]
