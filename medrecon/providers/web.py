"""
Web Lookup Provider

Consumer health summaries from the MedlinePlus web service. The service answers
in XML whose content fields embed escaped HTML highlight markup, so both layers
go through BeautifulSoup.
"""
import logging
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

from medrecon.models.records import SearchStrategy, StrategyKind
from medrecon.providers import registry
from medrecon.providers.base import ProviderClient
from medrecon.utils.api_clients import make_request

logger = logging.getLogger(__name__)

MEDLINEPLUS_SEARCH_URL = "https://wsearch.nlm.nih.gov/ws/query"


def _strip_markup(fragment: str) -> str:
    return " ".join(BeautifulSoup(fragment, "html.parser").get_text(" ").split())


def parse_search_results(document: str, limit: int = 5) -> List[Dict[str, Any]]:
    """
    Parse a MedlinePlus search response.

    Args:
        document: Raw XML body
        limit: Maximum number of documents to keep

    Returns:
        List of {"url", "title", "summary"} dictionaries
    """
    soup = BeautifulSoup(document, "html.parser")
    results = []
    for doc in soup.find_all("document")[:limit]:
        fields = {}
        for content in doc.find_all("content"):
            field_name = content.get("name")
            if field_name:
                fields[field_name.lower()] = _strip_markup(content.get_text())

        title = fields.get("title")
        if not title:
            continue
        results.append({
            "url": doc.get("url"),
            "title": title,
            "summary": fields.get("snippet") or fields.get("fullsummary"),
        })
    return results


class WebLookupProvider(ProviderClient):
    """MedlinePlus health topic search."""

    name = registry.WEB_LOOKUP
    max_results: int = 5

    def supports(self, strategy: SearchStrategy) -> bool:
        return strategy.kind != StrategyKind.NDC

    async def fetch(self, strategy: SearchStrategy) -> Optional[List[Dict[str, Any]]]:
        body = await make_request(
            url=MEDLINEPLUS_SEARCH_URL,
            params={"db": "healthTopics", "term": strategy.value, "retmax": self.max_results},
            timeout=self.timeout,
            client=self.http,
            cache_service="medlineplus",
            expect="text",
        )
        if not body:
            return None
        return parse_search_results(body, limit=self.max_results) or None
