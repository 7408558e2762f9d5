"""
Pytest configuration and shared fixtures for the reconciliation engine tests.
"""
import asyncio
from typing import Any, Dict, List, Optional

import pytest

from medrecon.models.records import SearchStrategy, SourceResult, SourceStatus, StrategyKind
from medrecon.providers.base import ProviderClient
from medrecon.providers.registry import DISPLAY_NAMES, SOURCE_RELIABILITY
from medrecon.utils.api_cache import clear_all_caches


class FakeProvider(ProviderClient):
    """Provider that returns a canned payload after an optional delay."""

    def __init__(self, name: str, payload: Any = None, delay: float = 0.0,
                 error: Optional[Exception] = None, budget: float = 5.0):
        super().__init__(budget=budget)
        self.name = name
        self.payload = payload
        self.delay = delay
        self.error = error
        self.calls: List[SearchStrategy] = []

    async def fetch(self, strategy: SearchStrategy) -> Any:
        self.calls.append(strategy)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.payload


def drugsfda_payload(brand_name: str = "Prinivil", generic_name: str = "lisinopril",
                     package_ndc: Optional[str] = "0006-0019-54", manufacturer: Optional[str] = "Merck Sharp & Dohme LLC",
                     strength: str = "10MG", dosage_form: str = "TABLET") -> List[Dict[str, Any]]:
    openfda: Dict[str, Any] = {
        "brand_name": [brand_name],
        "generic_name": [generic_name],
        "substance_name": [generic_name.upper()],
    }
    if package_ndc:
        openfda["package_ndc"] = [package_ndc]
        openfda["product_ndc"] = ["-".join(package_ndc.split("-")[:2])]
    if manufacturer:
        openfda["manufacturer_name"] = [manufacturer]
    return [{
        "application_number": "NDA019558",
        "sponsor_name": "MERCK SHARP DOHME",
        "openfda": openfda,
        "products": [{
            "brand_name": brand_name.upper(),
            "dosage_form": dosage_form,
            "marketing_status": "Prescription",
            "active_ingredients": [{"name": generic_name.upper(), "strength": strength}],
        }],
    }]


def rxnorm_payload(brand_name: Optional[str] = "Prinivil", generic_name: Optional[str] = "lisinopril",
                   ndcs: Optional[List[str]] = None, labeler: Optional[str] = None,
                   dosage_form: Optional[str] = "Oral Tablet") -> Dict[str, Any]:
    related = []
    if generic_name:
        related.append({"tty": "IN", "conceptProperties": [{"rxcui": "29046", "name": generic_name}]})
    if brand_name:
        related.append({"tty": "BN", "conceptProperties": [{"rxcui": "203644", "name": brand_name}]})
    if dosage_form:
        related.append({"tty": "DF", "conceptProperties": [{"rxcui": "317541", "name": dosage_form}]})
    return {
        "rxcui": "314076",
        "concept_groups": [{"tty": "SBD", "conceptProperties": [{"rxcui": "314076"}]}],
        "properties": {"rxcui": "314076", "name": "lisinopril 10 MG Oral Tablet [Prinivil]"},
        "related": related,
        "ndcs": ndcs,
        "ndc_properties": [{"ndc10": ndcs[0], "labeler": labeler}] if ndcs and labeler else None,
        "interactions": None,
    }


def success(provider: str, payload: Any, data_points: int = 10) -> SourceResult:
    return SourceResult(
        provider=provider,
        display_name=DISPLAY_NAMES.get(provider, provider),
        status=SourceStatus.SUCCESS,
        reliability=SOURCE_RELIABILITY.get(provider, 5),
        payload=payload,
        data_points=data_points,
        strategy=SearchStrategy(StrategyKind.BRAND_NAME, "Prinivil", 2),
    )


@pytest.fixture(autouse=True)
def fresh_caches():
    """Start every test with empty response caches."""
    clear_all_caches()
    yield
    clear_all_caches()


@pytest.fixture
def prinivil_analysis() -> Dict[str, Any]:
    """Vision analysis of a Prinivil 10 mg blister pack."""
    return {
        "identified": True,
        "confidence": 8,
        "medicine": {
            "brandName": "Prinivil",
            "genericName": "lisinopril",
            "activeIngredients": ["lisinopril"],
            "strength": "10 mg",
            "dosageForm": "tablet",
            "manufacturer": "Merck Sharp & Dohme",
        },
        "physicalCharacteristics": {"markings": "MSD 19", "shape": "shield", "color": "blue"},
        "extractedText": {
            "drugNames": ["PRINIVIL"],
            "allText": ["Prinivil 10 mg", "NDC 0006-0019-54", "Rx only"],
        },
        "manufacturingInfo": {"lotNumber": "X1234"},
    }
