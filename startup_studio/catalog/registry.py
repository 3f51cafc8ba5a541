"""Dimension catalog - loads and serves taxonomy entities.

One file per dimension in the definitions directory, named after the
dimension (`industries.json`, `occupations.yaml`, ...). Each file holds
either a list of entities or an object with an `entities` list.

The catalog is read-only once loaded and may be shared across concurrent
work freely.
"""

import json
import logging
import os
from pathlib import Path
from typing import Iterable, Optional

import yaml

from startup_studio.catalog.filters import apply_filter
from startup_studio.catalog.schemas import (
    DIMENSION_ORDER,
    DimensionEntity,
    DimensionFilter,
    DimensionName,
    DimensionSummary,
)

logger = logging.getLogger(__name__)

CATALOG_DIR_ENV = "STUDIO_CATALOG_DIR"


class DimensionCatalog:
    """Registry of taxonomy entities, keyed by dimension then entity id."""

    def __init__(self, definitions_dir: Optional[Path] = None):
        if definitions_dir is None:
            env_dir = os.environ.get(CATALOG_DIR_ENV)
            definitions_dir = Path(env_dir) if env_dir else Path(__file__).parent / "definitions"
        self.definitions_dir = definitions_dir
        self._entities: dict[DimensionName, dict[str, DimensionEntity]] = {
            d: {} for d in DIMENSION_ORDER
        }
        self._loaded = False

    @classmethod
    def from_entities(
        cls,
        entities: dict[DimensionName, Iterable[DimensionEntity]],
    ) -> "DimensionCatalog":
        """Build an already-loaded catalog from in-memory entities."""
        catalog = cls(definitions_dir=Path(os.devnull))
        for dimension, items in entities.items():
            dimension = DimensionName(dimension)
            for entity in items:
                catalog._add(dimension, entity)
        catalog._loaded = True
        return catalog

    def load(self) -> None:
        """Load all dimension files from the definitions directory."""
        if self._loaded:
            return

        if not self.definitions_dir.is_dir():
            logger.warning(f"Catalog directory not found: {self.definitions_dir}")
            self._loaded = True
            return

        for dimension in DIMENSION_ORDER:
            for suffix in (".json", ".yaml", ".yml"):
                path = self.definitions_dir / f"{dimension.value}{suffix}"
                if path.exists():
                    self._load_file(dimension, path)
                    break

        self._loaded = True
        logger.info(
            "Loaded catalog: "
            + ", ".join(f"{d.value}={len(self._entities[d])}" for d in DIMENSION_ORDER)
        )

    def _load_file(self, dimension: DimensionName, path: Path) -> None:
        try:
            with open(path, "r") as f:
                if path.suffix == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except Exception as e:
            logger.error(f"Failed to read {dimension.value} catalog {path}: {e}")
            return

        if isinstance(data, dict):
            data = data.get("entities", [])

        for raw in data or []:
            try:
                self._add(dimension, DimensionEntity.model_validate(raw))
            except Exception as e:
                logger.error(f"Skipping malformed {dimension.value} entity in {path}: {e}")

    def _add(self, dimension: DimensionName, entity: DimensionEntity) -> None:
        bucket = self._entities[dimension]
        if entity.id in bucket:
            logger.warning(f"Duplicate {dimension.value} id {entity.id}, keeping first")
            return
        bucket[entity.id] = entity

    def get(self, dimension: DimensionName, entity_id: str) -> Optional[DimensionEntity]:
        """Get an entity by id."""
        self.load()
        return self._entities[DimensionName(dimension)].get(entity_id)

    def list_entities(self, dimension: DimensionName) -> list[DimensionEntity]:
        """All entities of a dimension, in source order."""
        self.load()
        return list(self._entities[DimensionName(dimension)].values())

    def lookup(
        self,
        dimension: DimensionName,
        dimension_filter: Optional[DimensionFilter] = None,
    ) -> list[DimensionEntity]:
        """Entities of a dimension reduced by an optional filter."""
        return apply_filter(self.list_entities(dimension), dimension_filter)

    def count(self, dimension: Optional[DimensionName] = None) -> int:
        """Entity count for one dimension, or across all of them."""
        self.load()
        if dimension is not None:
            return len(self._entities[DimensionName(dimension)])
        return sum(len(bucket) for bucket in self._entities.values())

    def list_summaries(self) -> list[DimensionSummary]:
        self.load()
        return [
            DimensionSummary(dimension=d, entity_count=len(self._entities[d]))
            for d in DIMENSION_ORDER
        ]


# Global catalog instance
_catalog: Optional[DimensionCatalog] = None


def get_dimension_catalog() -> DimensionCatalog:
    """Get the global dimension catalog instance."""
    global _catalog
    if _catalog is None:
        _catalog = DimensionCatalog()
    return _catalog
