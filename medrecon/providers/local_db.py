"""
Local Medicine Database Provider

A curated JSON file of common medicines, searched in memory. Useful when the
public registries are unreachable, but weighted low.
"""
import json
import logging
from typing import Any, Dict, List, Optional

from medrecon.config import MEDICINE_DB_PATH
from medrecon.models.records import SearchStrategy, StrategyKind
from medrecon.providers import registry
from medrecon.providers.base import ProviderClient

logger = logging.getLogger(__name__)


def load_medicine_database(path: str = MEDICINE_DB_PATH) -> List[Dict[str, Any]]:
    """
    Load the local medicine database.

    Args:
        path: JSON file holding a list of medicine entries

    Returns:
        List of entries, empty if the file is missing or unreadable
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.warning(f"Local medicine database not found at {path}")
        return []
    except (OSError, ValueError) as e:
        logger.error(f"Could not read local medicine database {path}: {e}")
        return []

    if not isinstance(data, list):
        logger.error(f"Local medicine database {path} is not a list")
        return []
    logger.info(f"Loaded {len(data)} medicines from {path}")
    return data


class LocalDatabaseProvider(ProviderClient):
    """In-memory search over the bundled medicine list."""

    name = registry.LOCAL_DATABASE

    def __init__(self, entries: Optional[List[Dict[str, Any]]] = None, path: str = MEDICINE_DB_PATH, **kwargs):
        """
        Args:
            entries: Medicine entries to search; loaded from path when omitted
            path: Location of the JSON database
        """
        super().__init__(**kwargs)
        self.path = path
        self._entries = entries

    @property
    def entries(self) -> List[Dict[str, Any]]:
        if self._entries is None:
            self._entries = load_medicine_database(self.path)
        return self._entries

    @staticmethod
    def matches(entry: Dict[str, Any], strategy: SearchStrategy) -> bool:
        if strategy.kind == StrategyKind.NDC:
            return (entry.get("ndc") or "") == strategy.value

        term = strategy.value.lower()
        names = [entry.get("brandName"), entry.get("genericName")]
        names.extend(entry.get("activeIngredients") or [])
        return any(term in name.lower() for name in names if isinstance(name, str))

    async def fetch(self, strategy: SearchStrategy) -> Optional[List[Dict[str, Any]]]:
        found = [entry for entry in self.entries if self.matches(entry, strategy)]
        return found or None

    def count_data_points(self, payload: List[Dict[str, Any]]) -> int:
        return sum(len([value for value in entry.values() if value]) for entry in payload)
