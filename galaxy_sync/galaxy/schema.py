"""
galaxy.yml parsing and validation.

Validation normalizes what collection authors commonly leave loose:
a null version becomes "N/A", a missing readme becomes "Not Available.",
a single author string becomes a one-element list, and null optional
fields are treated as absent.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from galaxy_sync.errors import GalaxyParseError, GalaxyValidationError

NAME_PATTERN = r"^[a-zA-Z][a-zA-Z0-9_.]*$"

DEFAULT_VERSION = "N/A"
DEFAULT_README = "Not Available."
DEFAULT_AUTHORS = ["N/A"]

EMPTY_OR_INVALID_MESSAGE = "galaxy.yml content is empty or not a valid object"
EMPTY_MESSAGE = "galaxy.yml content is empty"

GALAXY_FILE_NAMES = ("galaxy.yml", "galaxy.yaml")


class GalaxyMetadata(BaseModel):
    """Normalized contents of a galaxy.yml file."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    namespace: str = Field(..., min_length=1, pattern=NAME_PATTERN)
    name: str = Field(..., min_length=1, pattern=NAME_PATTERN)
    version: str = DEFAULT_VERSION
    readme: str = DEFAULT_README
    authors: list[str] = Field(default_factory=lambda: list(DEFAULT_AUTHORS))

    description: str | None = None
    license: str | list[str] | None = None
    license_file: str | None = None
    tags: list[str] | None = None
    dependencies: dict[str, str] | None = None
    repository: str | None = None
    documentation: str | None = None
    homepage: str | None = None
    issues: str | None = None

    @field_validator("version", mode="before")
    @classmethod
    def _default_version(cls, v: Any) -> Any:
        if v is None:
            return DEFAULT_VERSION
        # YAML reads `version: 1.0` as a float
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("readme", mode="before")
    @classmethod
    def _default_readme(cls, v: Any) -> Any:
        return DEFAULT_README if v is None else v

    @field_validator("authors", mode="before")
    @classmethod
    def _normalize_authors(cls, v: Any) -> Any:
        if v is None:
            return list(DEFAULT_AUTHORS)
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("dependencies", mode="before")
    @classmethod
    def _stringify_dependency_versions(cls, v: Any) -> Any:
        if isinstance(v, Mapping):
            return {k: v2 if isinstance(v2, str) else str(v2) for k, v2 in v.items()}
        return v

    @property
    def full_name(self) -> str:
        return f"{self.namespace}.{self.name}"


@dataclass
class GalaxyValidationResult:
    """Outcome of validating parsed galaxy.yml content."""

    success: bool
    data: GalaxyMetadata | None = None
    errors: list[str] | None = None


def _format_errors(exc: ValidationError) -> list[str]:
    errors = []
    for err in exc.errors():
        path = ".".join(str(part) for part in err["loc"]) or "root"
        errors.append(f"{path}: {err['msg']}")
    return errors


def validate_galaxy_content(content: Any) -> GalaxyValidationResult:
    """
    Validate and normalize parsed galaxy.yml content.

    Never raises for parsed input; problems are reported as
    ``"<field path>: <message>"`` strings in ``errors``.
    """
    if not isinstance(content, Mapping):
        return GalaxyValidationResult(success=False, errors=[EMPTY_OR_INVALID_MESSAGE])

    if not content:
        return GalaxyValidationResult(success=False, errors=[EMPTY_MESSAGE])

    try:
        metadata = GalaxyMetadata.model_validate(dict(content))
    except ValidationError as e:
        return GalaxyValidationResult(success=False, errors=_format_errors(e))

    return GalaxyValidationResult(success=True, data=metadata)


def has_required_fields(content: Any) -> bool:
    """
    Cheap pre-check before full validation.

    namespace and name must be non-empty strings; version, authors and
    readme only need to be present as keys, whatever their value.
    """
    if not isinstance(content, Mapping):
        return False

    namespace = content.get("namespace")
    name = content.get("name")
    if not isinstance(namespace, str) or not namespace:
        return False
    if not isinstance(name, str) or not name:
        return False

    return all(key in content for key in ("version", "authors", "readme"))


def parse_galaxy_file(raw_text: str) -> Any:
    """
    Parse galaxy.yml text into plain Python data.

    Raises:
        GalaxyParseError: If the text is not valid YAML.
    """
    try:
        return yaml.safe_load(raw_text)
    except yaml.YAMLError as e:
        raise GalaxyParseError(f"Invalid YAML: {e}") from e


def load_galaxy_metadata(raw_text: str) -> GalaxyMetadata:
    """
    Parse and validate galaxy.yml text in one step.

    Raises:
        GalaxyParseError: If the text is not valid YAML.
        GalaxyValidationError: If the content fails validation.
    """
    result = validate_galaxy_content(parse_galaxy_file(raw_text))
    if not result.success:
        raise GalaxyValidationError(result.errors or [])
    return result.data


def is_galaxy_file_name(file_name: str) -> bool:
    return file_name.lower() in GALAXY_FILE_NAMES
