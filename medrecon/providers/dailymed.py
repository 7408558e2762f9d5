"""
DailyMed Provider Client

Searches structured product labels (SPLs) on DailyMed. SPL titles carry brand,
generic, dose form and labeler in one line, e.g.
"PRINIVIL (LISINOPRIL) TABLET [MERCK SHARP & DOHME LLC]".
"""
import re
import logging
from typing import Any, Dict, List, Optional

from medrecon.models.records import SearchStrategy, StrategyKind
from medrecon.providers import registry
from medrecon.providers.base import ProviderClient
from medrecon.utils.api_clients import make_request

logger = logging.getLogger(__name__)

# Constants for DailyMed API
DAILYMED_SEARCH_URL = "https://dailymed.nlm.nih.gov/dailymed/services/v2/spls.json"

LABELER_PATTERN = re.compile(r"\[([^\]]*)\]\s*$")
GENERIC_PATTERN = re.compile(r"^(?P<brand>[^(]*)\((?P<generic>[^)]*)\)(?P<form>.*)$")


def parse_spl_title(title: Optional[str]) -> Dict[str, Optional[str]]:
    """
    Split an SPL title into its parts.

    Args:
        title: SPL title as returned by spls.json

    Returns:
        Dictionary with brand, generic, form and labeler (missing parts are None)
    """
    parts = {"brand": None, "generic": None, "form": None, "labeler": None}
    if not title:
        return parts

    text = " ".join(title.split())
    labeler = LABELER_PATTERN.search(text)
    if labeler:
        parts["labeler"] = labeler.group(1).strip() or None
        text = text[:labeler.start()].strip()

    match = GENERIC_PATTERN.match(text)
    if match:
        parts["brand"] = match.group("brand").strip() or None
        parts["generic"] = match.group("generic").strip() or None
        parts["form"] = match.group("form").strip() or None
    else:
        parts["brand"] = text or None
    return parts


class DailyMedProvider(ProviderClient):
    """DailyMed SPL search."""

    name = registry.DAILYMED
    page_size: int = 5

    async def fetch(self, strategy: SearchStrategy) -> Optional[List[Dict[str, Any]]]:
        params: Dict[str, Any] = {"page": 1, "pagesize": self.page_size}
        if strategy.kind == StrategyKind.NDC:
            params["ndc"] = strategy.value
        else:
            params["drug_name"] = strategy.value

        data = await make_request(
            url=DAILYMED_SEARCH_URL,
            params=params,
            timeout=self.timeout,
            client=self.http,
            cache_service="dailymed",
        )
        if not isinstance(data, dict):
            return None

        results = data.get("data")
        return results if isinstance(results, list) and results else None

    def count_data_points(self, payload: List[Dict[str, Any]]) -> int:
        # Estimate 10 data points per SPL entry
        return len(payload) * 10
