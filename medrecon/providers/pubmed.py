"""
PubMed Provider Client

Literature search through NCBI E-utilities: esearch for matching PMIDs, then
esummary for the top hits.
"""
import logging
from typing import Any, Dict, Optional

from medrecon.config import get_api_key
from medrecon.models.records import SearchStrategy, StrategyKind
from medrecon.providers import registry
from medrecon.providers.base import ProviderClient
from medrecon.utils.api_clients import make_request

logger = logging.getLogger(__name__)

EUTILS_BASE = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"
ESEARCH_ENDPOINT = f"{EUTILS_BASE}/esearch.fcgi"
ESUMMARY_ENDPOINT = f"{EUTILS_BASE}/esummary.fcgi"
PUBMED_ARTICLE_URL = "https://pubmed.ncbi.nlm.nih.gov/{pmid}/"

SUMMARY_LIMIT = 5


class PubMedProvider(ProviderClient):
    """PubMed title/abstract search."""

    name = registry.PUBMED
    max_results: int = 10

    def supports(self, strategy: SearchStrategy) -> bool:
        return strategy.kind != StrategyKind.NDC

    def _params(self, **params: Any) -> Dict[str, Any]:
        params["db"] = "pubmed"
        params["retmode"] = "json"
        ncbi_api_key = get_api_key("NCBI_API_KEY")
        if ncbi_api_key:
            params["api_key"] = ncbi_api_key
        return params

    async def fetch(self, strategy: SearchStrategy) -> Optional[Dict[str, Any]]:
        search = await make_request(
            url=ESEARCH_ENDPOINT,
            params=self._params(term=f"{strategy.value}[Title/Abstract]", retmax=self.max_results),
            timeout=self.timeout,
            client=self.http,
            cache_service="pubmed",
        )
        ids = ((search or {}).get("esearchresult") or {}).get("idlist") or []
        if not ids:
            return None

        summary = await make_request(
            url=ESUMMARY_ENDPOINT,
            params=self._params(id=",".join(ids[:SUMMARY_LIMIT])),
            timeout=self.timeout,
            client=self.http,
            cache_service="pubmed",
        )
        return {"ids": ids, "result": (summary or {}).get("result") or {}}

    def count_data_points(self, payload: Dict[str, Any]) -> int:
        return len(payload.get("ids") or []) * 2
