"""
ClinicalTrials.gov Provider Client

Studies whose interventions mention the product, from the v2 studies API.
"""
import logging
from typing import Any, Dict, List, Optional

from medrecon.models.records import SearchStrategy, StrategyKind
from medrecon.providers import registry
from medrecon.providers.base import ProviderClient
from medrecon.utils.api_clients import make_request

logger = logging.getLogger(__name__)

CLINICAL_TRIALS_ENDPOINT = "https://clinicaltrials.gov/api/v2/studies"

STUDY_FIELDS = "NCTId,BriefTitle,Condition,InterventionName,Phase,OverallStatus"


class ClinicalTrialsProvider(ProviderClient):
    """ClinicalTrials.gov study search."""

    name = registry.CLINICAL_TRIALS
    page_size: int = 10

    def supports(self, strategy: SearchStrategy) -> bool:
        # Studies are registered by intervention name, never by package code
        return strategy.kind != StrategyKind.NDC

    async def fetch(self, strategy: SearchStrategy) -> Optional[List[Dict[str, Any]]]:
        data = await make_request(
            url=CLINICAL_TRIALS_ENDPOINT,
            params={
                "query.intr": strategy.value,
                "fields": STUDY_FIELDS,
                "pageSize": self.page_size,
            },
            timeout=self.timeout,
            client=self.http,
            cache_service="trials",
        )
        if not isinstance(data, dict):
            return None
        return data.get("studies") or None

    def count_data_points(self, payload: List[Dict[str, Any]]) -> int:
        return len(payload) * 5
