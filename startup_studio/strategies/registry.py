"""Strategy registry for loading and managing strategy definitions."""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from .schemas import StrategyConfig, StrategyStatus, StrategySummary

logger = logging.getLogger(__name__)

STRATEGIES_DIR_ENV = "STUDIO_STRATEGIES_DIR"


class StrategyRegistry:
    """Registry for strategy definitions.

    Loads strategy definitions from JSON files in the definitions directory.
    """

    def __init__(self, definitions_dir: Optional[Path] = None):
        if definitions_dir is None:
            env_dir = os.environ.get(STRATEGIES_DIR_ENV)
            definitions_dir = Path(env_dir) if env_dir else Path(__file__).parent / "definitions"
        self.definitions_dir = definitions_dir
        self._strategies: dict[str, StrategyConfig] = {}
        self._loaded = False

    def load(self) -> None:
        """Load all strategy definitions from JSON files."""
        if self._loaded:
            return

        if not self.definitions_dir.exists():
            self._loaded = True
            return

        for json_file in sorted(self.definitions_dir.glob("*.json")):
            try:
                with open(json_file, "r") as f:
                    data = json.load(f)
                strategy = StrategyConfig.model_validate(data)
                self._strategies[strategy.id] = strategy
            except Exception as e:
                logger.error(f"Failed to load strategy {json_file}: {e}")

        self._loaded = True

    def get(self, strategy_id: str) -> Optional[StrategyConfig]:
        """Get a strategy definition by id."""
        self.load()
        return self._strategies.get(strategy_id)

    def list_all(self) -> list[StrategySummary]:
        """List all strategy summaries."""
        self.load()
        return [
            StrategySummary(
                id=s.id,
                name=s.name,
                status=s.status,
                enabled_dimensions=s.dimensions.enabled(),
            )
            for s in self._strategies.values()
        ]

    def list_by_status(self, status: StrategyStatus) -> list[StrategySummary]:
        """List strategies in a given lifecycle status."""
        return [s for s in self.list_all() if s.status == status]

    def count(self) -> int:
        """Get total number of strategies."""
        self.load()
        return len(self._strategies)

    def save(self, strategy: StrategyConfig) -> bool:
        """Save a strategy definition to a JSON file.

        Creates a new file if the strategy doesn't exist, or updates existing.

        Returns:
            True if save was successful, False otherwise
        """
        self.load()

        json_file = self.definitions_dir / f"{strategy.id}.json"

        try:
            self.definitions_dir.mkdir(parents=True, exist_ok=True)
            with open(json_file, "w") as f:
                json.dump(strategy.model_dump(mode="json"), f, indent=2)

            self._strategies[strategy.id] = strategy
            logger.info(f"Saved strategy: {strategy.id}")
            return True

        except Exception as e:
            logger.error(f"Failed to save strategy {strategy.id}: {e}")
            return False

    def reload(self) -> None:
        """Force reload all definitions."""
        self._loaded = False
        self._strategies.clear()
        self.load()


# Global registry instance
_registry: Optional[StrategyRegistry] = None


def get_strategy_registry() -> StrategyRegistry:
    """Get the global strategy registry instance."""
    global _registry
    if _registry is None:
        _registry = StrategyRegistry()
    return _registry
