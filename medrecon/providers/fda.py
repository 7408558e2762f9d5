"""
openFDA Provider Clients

Drugs@FDA applications, structured product labeling, FAERS adverse event counts
and recall enforcement reports, all served from api.fda.gov.
"""
import logging
from typing import Any, Dict, List, Optional

from medrecon.config import get_api_key
from medrecon.models.records import SearchStrategy, StrategyKind
from medrecon.providers import registry
from medrecon.providers.base import ProviderClient
from medrecon.utils.api_clients import make_request

logger = logging.getLogger(__name__)

# FDA API endpoints
FDA_API_BASE = "https://api.fda.gov/drug"
FDA_DRUGSFDA_ENDPOINT = f"{FDA_API_BASE}/drugsfda.json"
FDA_LABEL_ENDPOINT = f"{FDA_API_BASE}/label.json"
FDA_EVENT_ENDPOINT = f"{FDA_API_BASE}/event.json"
FDA_ENFORCEMENT_ENDPOINT = f"{FDA_API_BASE}/enforcement.json"

LABEL_SECTIONS = [
    'indications_and_usage', 'dosage_and_administration', 'contraindications',
    'warnings', 'adverse_reactions', 'drug_interactions', 'clinical_pharmacology',
]


def product_ndc(ndc: str) -> str:
    """Labeler-product part of a package NDC ("0069-1020-68" -> "0069-1020")."""
    return "-".join(ndc.split("-")[:2])


def openfda_query(strategy: SearchStrategy, include_substance: bool = False) -> str:
    """Build an openFDA search expression against the harmonized openfda fields."""
    value = strategy.value.replace('"', '')
    if strategy.kind == StrategyKind.NDC:
        return f'openfda.package_ndc:"{value}" OR openfda.product_ndc:"{product_ndc(value)}"'
    if strategy.kind == StrategyKind.BRAND_NAME:
        return f'openfda.brand_name:"{value}"'
    if strategy.kind == StrategyKind.GENERIC_NAME:
        return f'openfda.generic_name:"{value}"'
    if strategy.kind == StrategyKind.ACTIVE_INGREDIENT and include_substance:
        return f'openfda.substance_name:"{value}"'
    return f'openfda.brand_name:"{value}" OR openfda.generic_name:"{value}"'


class OpenFDAProvider(ProviderClient):
    """Shared request handling for the openFDA drug endpoints."""

    endpoint: str = FDA_DRUGSFDA_ENDPOINT
    limit: int = 10

    def build_query(self, strategy: SearchStrategy) -> str:
        return openfda_query(strategy)

    def extra_params(self) -> Dict[str, Any]:
        return {"limit": self.limit}

    async def fetch(self, strategy: SearchStrategy) -> Optional[List[Dict[str, Any]]]:
        params = {"search": self.build_query(strategy)}
        params.update(self.extra_params())

        # Add API key to params if available (FDA accepts it as a parameter)
        fda_api_key = get_api_key("FDA_API_KEY")
        if fda_api_key:
            params["api_key"] = fda_api_key

        response = await make_request(
            url=self.endpoint,
            params=params,
            timeout=self.timeout,
            client=self.http,
            cache_service="fda",
        )
        if not isinstance(response, dict):
            return None
        return response.get("results") or None


class FDADrugsProvider(OpenFDAProvider):
    """Drugs@FDA: approved applications, sponsors and products."""

    name = registry.FDA_DRUGS
    endpoint = FDA_DRUGSFDA_ENDPOINT

    def build_query(self, strategy: SearchStrategy) -> str:
        return openfda_query(strategy, include_substance=True)

    def count_data_points(self, payload: List[Dict[str, Any]]) -> int:
        count = 0
        for result in payload:
            count += len(result.get("openfda") or {})
            count += len(result)
        return count


class OpenFDALabelingProvider(OpenFDAProvider):
    """Structured product labeling (package inserts)."""

    name = registry.OPENFDA_LABELING
    endpoint = FDA_LABEL_ENDPOINT
    limit = 5

    def count_data_points(self, payload: List[Dict[str, Any]]) -> int:
        count = 0
        for result in payload:
            for section in LABEL_SECTIONS:
                value = result.get(section)
                if value:
                    count += len(value) if isinstance(value, list) else 1
        return count


class OpenFDAAdverseEventsProvider(OpenFDAProvider):
    """FAERS reports, counted by MedDRA reaction term."""

    name = registry.OPENFDA_ADVERSE_EVENTS
    endpoint = FDA_EVENT_ENDPOINT
    limit = 100

    def build_query(self, strategy: SearchStrategy) -> str:
        value = strategy.value.replace('"', '')
        if strategy.kind == StrategyKind.NDC:
            return f'patient.drug.openfda.package_ndc:"{value}"'
        return f'patient.drug.medicinalproduct:"{value}"'

    def extra_params(self) -> Dict[str, Any]:
        return {"count": "patient.reaction.reactionmeddrapt.exact", "limit": self.limit}


class OpenFDAEnforcementProvider(OpenFDAProvider):
    """Recall enforcement reports."""

    name = registry.OPENFDA_ENFORCEMENT
    endpoint = FDA_ENFORCEMENT_ENDPOINT

    def build_query(self, strategy: SearchStrategy) -> str:
        value = strategy.value.replace('"', '')
        return f'product_description:"{value}"'
