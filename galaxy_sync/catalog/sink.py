"""
Catalog sink interface and an in-memory implementation.

Writes are upserts keyed by a stable key (EntityKey or RepositoryKey),
so crawling the same collection twice replaces rather than duplicates.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Relation:
    source: str
    type: str
    target: str


class CatalogSink(ABC):
    """Destination for discovered entities and relations."""

    @abstractmethod
    async def upsert_entity(self, key: str, entity: dict[str, Any]) -> None:
        """Insert or replace the entity stored under ``key``."""

    @abstractmethod
    async def upsert_relation(self, relation: Relation) -> None:
        """Insert the relation if it is not already present."""


class InMemoryCatalogSink(CatalogSink):
    """
    Catalog sink held in process memory.

    Backs the HTTP API and the CLI when no external catalog is wired in,
    and doubles as the sink in tests.
    """

    def __init__(self) -> None:
        self._entities: dict[str, dict[str, Any]] = {}
        self._relations: set[Relation] = set()
        self._lock = asyncio.Lock()

    async def upsert_entity(self, key: str, entity: dict[str, Any]) -> None:
        async with self._lock:
            self._entities[key] = entity
        logger.debug(f"Upserted entity {key}")

    async def upsert_relation(self, relation: Relation) -> None:
        async with self._lock:
            self._relations.add(relation)

    @property
    def entities(self) -> dict[str, dict[str, Any]]:
        return dict(self._entities)

    @property
    def relations(self) -> set[Relation]:
        return set(self._relations)
