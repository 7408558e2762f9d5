"""
RxNorm Provider Client

Resolves an RxCUI through RxNav and then fetches its properties, related
ingredient/brand/dose-form concepts, NDCs and interactions in parallel. Each
detail lookup settles on its own; one failing never discards the others.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

from medrecon.config import DETAIL_REQUEST_TIMEOUT
from medrecon.models.records import SearchStrategy, StrategyKind
from medrecon.providers import registry
from medrecon.providers.base import ProviderClient
from medrecon.utils.api_clients import make_request

logger = logging.getLogger(__name__)

RXNAV_API_BASE = "https://rxnav.nlm.nih.gov/REST"
RXNAV_DRUGS_ENDPOINT = f"{RXNAV_API_BASE}/drugs.json"
RXNAV_RXCUI_ENDPOINT = f"{RXNAV_API_BASE}/rxcui.json"
RXNAV_INTERACTION_ENDPOINT = f"{RXNAV_API_BASE}/interaction/interaction.json"
RXNAV_NDC_PROPERTIES_ENDPOINT = f"{RXNAV_API_BASE}/ndcproperties.json"

RELATED_TERM_TYPES = "IN+BN+DF"


def rxcui_endpoint(rxcui: str, resource: str) -> str:
    return f"{RXNAV_API_BASE}/rxcui/{rxcui}/{resource}.json"


def first_rxcui(concept_groups: List[Dict[str, Any]]) -> Optional[str]:
    """Return the RxCUI of the first concept in a drugs.json conceptGroup list."""
    for group in concept_groups:
        for concept in group.get("conceptProperties") or []:
            if concept.get("rxcui"):
                return concept["rxcui"]
    return None


class RxNormProvider(ProviderClient):
    """RxNav: normalized names, relationships and NDCs."""

    name = registry.RXNORM
    detail_timeout: float = DETAIL_REQUEST_TIMEOUT

    async def _get(self, url: str, params: Optional[Dict[str, Any]] = None, timeout: Optional[float] = None):
        return await make_request(
            url=url,
            params=params,
            timeout=timeout or self.timeout,
            client=self.http,
            cache_service="rxnav",
        )

    async def resolve_rxcui(self, strategy: SearchStrategy) -> Dict[str, Any]:
        """
        Look up the RxCUI for a strategy.

        Returns:
            Dictionary with "rxcui" (or None) and the "concept_groups" it came from
        """
        if strategy.kind == StrategyKind.NDC:
            data = await self._get(RXNAV_RXCUI_ENDPOINT, {"idtype": "NDC", "id": strategy.value})
            ids = ((data or {}).get("idGroup") or {}).get("rxnormId") or []
            return {"rxcui": ids[0] if ids else None, "concept_groups": []}

        data = await self._get(RXNAV_DRUGS_ENDPOINT, {"name": strategy.value})
        concept_groups = ((data or {}).get("drugGroup") or {}).get("conceptGroup") or []
        return {"rxcui": first_rxcui(concept_groups), "concept_groups": concept_groups}

    async def fetch(self, strategy: SearchStrategy) -> Optional[Dict[str, Any]]:
        resolved = await self.resolve_rxcui(strategy)
        rxcui = resolved["rxcui"]
        if not rxcui:
            return None

        lookups = {
            "properties": self._get(rxcui_endpoint(rxcui, "properties"), timeout=self.detail_timeout),
            "related": self._get(
                rxcui_endpoint(rxcui, "related"), {"tty": RELATED_TERM_TYPES}, timeout=self.detail_timeout
            ),
            "ndcs": self._get(rxcui_endpoint(rxcui, "ndcs"), timeout=self.detail_timeout),
            "ndc_properties": self._get(
                RXNAV_NDC_PROPERTIES_ENDPOINT, {"id": rxcui}, timeout=self.detail_timeout
            ),
            "interactions": self._get(
                RXNAV_INTERACTION_ENDPOINT, {"rxcui": rxcui}, timeout=self.detail_timeout
            ),
        }
        results = await asyncio.gather(*lookups.values(), return_exceptions=True)

        payload: Dict[str, Any] = {"rxcui": rxcui, "concept_groups": resolved["concept_groups"]}
        for key, result in zip(lookups.keys(), results):
            if isinstance(result, Exception):
                logger.warning(f"RxNorm {key} lookup failed for {rxcui}: {result}")
                payload[key] = None
            else:
                payload[key] = result

        payload["properties"] = (payload["properties"] or {}).get("properties")
        payload["related"] = ((payload["related"] or {}).get("relatedGroup") or {}).get("conceptGroup")
        payload["ndcs"] = (((payload["ndcs"] or {}).get("ndcGroup") or {}).get("ndcList") or {}).get("ndc")
        payload["ndc_properties"] = ((payload["ndc_properties"] or {}).get("ndcPropertyList") or {}).get("ndcProperty")
        payload["interactions"] = (payload["interactions"] or {}).get("interactionTypeGroup")
        return payload

    def count_data_points(self, payload: Dict[str, Any]) -> int:
        count = 0
        if payload.get("concept_groups"):
            count += 5
        if payload.get("properties"):
            count += 10
        if payload.get("related"):
            count += 15
        if payload.get("interactions"):
            count += 20
        ndcs = payload.get("ndcs")
        if ndcs:
            count += len(ndcs) if isinstance(ndcs, list) else 5
        return count
