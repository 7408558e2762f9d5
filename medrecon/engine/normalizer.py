"""
Field Normalizer

Maps each provider's payload shape onto the shared field model through an
explicit (provider, field) dispatch table. Pairs missing from the table, and
payloads that do not have the expected shape, produce no value.
"""
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from medrecon.models.records import FieldValue, Observation, ProfileField, SourceResult
from medrecon.providers import registry
from medrecon.providers.dailymed import parse_spl_title
from medrecon.providers.registry import priority_rank

logger = logging.getLogger(__name__)

Extractor = Callable[[Any], Any]


def _first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _first_result(payload: Any) -> Dict[str, Any]:
    if isinstance(payload, list) and payload and isinstance(payload[0], dict):
        return payload[0]
    return {}


def format_ndc11(ndc: Optional[str]) -> Optional[str]:
    """Render an unhyphenated 11-digit NDC in 5-4-2 form; other values pass through."""
    if ndc and len(ndc) == 11 and ndc.isdigit():
        return f"{ndc[:5]}-{ndc[5:9]}-{ndc[9:]}"
    return ndc


# openFDA (Drugs@FDA and labeling share the harmonized openfda block)

def _openfda(payload: Any) -> Dict[str, Any]:
    return _first_result(payload).get("openfda") or {}


def openfda_brand_name(payload):
    return _first(_openfda(payload).get("brand_name"))


def openfda_generic_name(payload):
    return _first(_openfda(payload).get("generic_name"))


def openfda_ndc(payload):
    openfda = _openfda(payload)
    return _first(openfda.get("package_ndc")) or _first(openfda.get("product_ndc"))


def openfda_manufacturer(payload):
    return _first(_openfda(payload).get("manufacturer_name"))


def openfda_active_ingredients(payload):
    return _openfda(payload).get("substance_name")


def _first_product(payload: Any) -> Dict[str, Any]:
    products = _first_result(payload).get("products") or []
    return products[0] if products else {}


def drugsfda_strength(payload):
    ingredients = _first_product(payload).get("active_ingredients") or []
    strengths = [item.get("strength") for item in ingredients if item.get("strength")]
    return ", ".join(strengths) if strengths else None


def drugsfda_dosage_form(payload):
    return _first_product(payload).get("dosage_form")


def label_section(section: str) -> Extractor:
    def extract(payload):
        return _first_result(payload).get(section)
    extract.__name__ = f"label_{section}"
    return extract


def adverse_event_terms(payload):
    return [item.get("term") for item in payload or [] if isinstance(item, dict)]


# RxNorm

def _related_names(payload: Any, term_type: str) -> List[str]:
    names = []
    for group in payload.get("related") or []:
        if group.get("tty") != term_type:
            continue
        for concept in group.get("conceptProperties") or []:
            if concept.get("name"):
                names.append(concept["name"])
    return names


def rxnorm_brand_name(payload):
    return _first(_related_names(payload, "BN"))


def rxnorm_generic_name(payload):
    return _first(_related_names(payload, "IN"))


def rxnorm_active_ingredients(payload):
    return _related_names(payload, "IN")


def rxnorm_dosage_form(payload):
    return _first(_related_names(payload, "DF"))


def rxnorm_ndc(payload):
    properties = _first(payload.get("ndc_properties") or [])
    if properties and properties.get("ndc10"):
        return properties["ndc10"]
    return format_ndc11(_first(payload.get("ndcs") or []))


def rxnorm_manufacturer(payload):
    properties = _first(payload.get("ndc_properties") or [])
    return properties.get("labeler") if properties else None


def rxnorm_interactions(payload):
    descriptions = []
    for type_group in payload.get("interactions") or []:
        for interaction_type in type_group.get("interactionType") or []:
            for pair in interaction_type.get("interactionPair") or []:
                if pair.get("description"):
                    descriptions.append(pair["description"])
    return descriptions


# DailyMed

def _dailymed_title(payload: Any) -> Dict[str, Optional[str]]:
    return parse_spl_title(_first_result(payload).get("title"))


def dailymed_brand_name(payload):
    return _dailymed_title(payload)["brand"]


def dailymed_generic_name(payload):
    return _dailymed_title(payload)["generic"]


def dailymed_dosage_form(payload):
    return _dailymed_title(payload)["form"]


def dailymed_manufacturer(payload):
    return _dailymed_title(payload)["labeler"]


# Local database

def local_entry(key: str) -> Extractor:
    def extract(payload):
        return _first_result(payload).get(key)
    extract.__name__ = f"local_{key}"
    return extract


FIELD_EXTRACTORS: Dict[tuple, Extractor] = {
    (registry.FDA_DRUGS, ProfileField.BRAND_NAME): openfda_brand_name,
    (registry.FDA_DRUGS, ProfileField.GENERIC_NAME): openfda_generic_name,
    (registry.FDA_DRUGS, ProfileField.NDC): openfda_ndc,
    (registry.FDA_DRUGS, ProfileField.MANUFACTURER): openfda_manufacturer,
    (registry.FDA_DRUGS, ProfileField.ACTIVE_INGREDIENTS): openfda_active_ingredients,
    (registry.FDA_DRUGS, ProfileField.STRENGTH): drugsfda_strength,
    (registry.FDA_DRUGS, ProfileField.DOSAGE_FORM): drugsfda_dosage_form,

    (registry.OPENFDA_LABELING, ProfileField.BRAND_NAME): openfda_brand_name,
    (registry.OPENFDA_LABELING, ProfileField.GENERIC_NAME): openfda_generic_name,
    (registry.OPENFDA_LABELING, ProfileField.NDC): openfda_ndc,
    (registry.OPENFDA_LABELING, ProfileField.MANUFACTURER): openfda_manufacturer,
    (registry.OPENFDA_LABELING, ProfileField.ACTIVE_INGREDIENTS): openfda_active_ingredients,
    (registry.OPENFDA_LABELING, ProfileField.INDICATIONS): label_section("indications_and_usage"),
    (registry.OPENFDA_LABELING, ProfileField.CONTRAINDICATIONS): label_section("contraindications"),
    (registry.OPENFDA_LABELING, ProfileField.WARNINGS): label_section("warnings"),
    (registry.OPENFDA_LABELING, ProfileField.ADVERSE_REACTIONS): label_section("adverse_reactions"),
    (registry.OPENFDA_LABELING, ProfileField.DRUG_INTERACTIONS): label_section("drug_interactions"),

    (registry.OPENFDA_ADVERSE_EVENTS, ProfileField.ADVERSE_REACTIONS): adverse_event_terms,

    (registry.RXNORM, ProfileField.BRAND_NAME): rxnorm_brand_name,
    (registry.RXNORM, ProfileField.GENERIC_NAME): rxnorm_generic_name,
    (registry.RXNORM, ProfileField.NDC): rxnorm_ndc,
    (registry.RXNORM, ProfileField.MANUFACTURER): rxnorm_manufacturer,
    (registry.RXNORM, ProfileField.ACTIVE_INGREDIENTS): rxnorm_active_ingredients,
    (registry.RXNORM, ProfileField.DOSAGE_FORM): rxnorm_dosage_form,
    (registry.RXNORM, ProfileField.DRUG_INTERACTIONS): rxnorm_interactions,

    (registry.DAILYMED, ProfileField.BRAND_NAME): dailymed_brand_name,
    (registry.DAILYMED, ProfileField.GENERIC_NAME): dailymed_generic_name,
    (registry.DAILYMED, ProfileField.MANUFACTURER): dailymed_manufacturer,
    (registry.DAILYMED, ProfileField.DOSAGE_FORM): dailymed_dosage_form,

    (registry.LOCAL_DATABASE, ProfileField.BRAND_NAME): local_entry("brandName"),
    (registry.LOCAL_DATABASE, ProfileField.GENERIC_NAME): local_entry("genericName"),
    (registry.LOCAL_DATABASE, ProfileField.NDC): local_entry("ndc"),
    (registry.LOCAL_DATABASE, ProfileField.MANUFACTURER): local_entry("manufacturer"),
    (registry.LOCAL_DATABASE, ProfileField.ACTIVE_INGREDIENTS): local_entry("activeIngredients"),
    (registry.LOCAL_DATABASE, ProfileField.STRENGTH): local_entry("strength"),
    (registry.LOCAL_DATABASE, ProfileField.DOSAGE_FORM): local_entry("dosageForm"),
    (registry.LOCAL_DATABASE, ProfileField.INDICATIONS): local_entry("uses"),
    (registry.LOCAL_DATABASE, ProfileField.CONTRAINDICATIONS): local_entry("contraindications"),
    (registry.LOCAL_DATABASE, ProfileField.WARNINGS): local_entry("warnings"),
    (registry.LOCAL_DATABASE, ProfileField.ADVERSE_REACTIONS): local_entry("sideEffects"),
    (registry.LOCAL_DATABASE, ProfileField.DRUG_INTERACTIONS): local_entry("drugInteractions"),
}


def normalize_value(value: Any) -> Optional[FieldValue]:
    """
    Clean an extracted value.

    Strings are stripped, lists become tuples without empty entries, and
    anything empty becomes None.
    """
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        items = tuple(str(item).strip() for item in value if item is not None and str(item).strip())
        return items or None
    text = str(value).strip()
    return text or None


def extract_field(provider: str, field: ProfileField, payload: Any) -> Optional[FieldValue]:
    """
    Extract and normalize one field from one provider's payload.

    Args:
        provider: Provider name
        field: Field to extract
        payload: Raw payload from a successful SourceResult

    Returns:
        Normalized value or None
    """
    extractor = FIELD_EXTRACTORS.get((provider, field))
    if extractor is None or payload is None:
        return None
    try:
        return normalize_value(extractor(payload))
    except (AttributeError, KeyError, IndexError, TypeError) as e:
        logger.warning(f"Unexpected {provider} payload shape for {field.value}: {e}")
        return None


def collect_observations(sources: Iterable[SourceResult]) -> Dict[ProfileField, List[Observation]]:
    """
    Build the per-field observation lists from successful sources.

    Observations are ordered by provider priority rank, then provider name.
    """
    successful = sorted(
        (source for source in sources if source.succeeded),
        key=lambda source: (priority_rank(source.provider), source.provider),
    )

    observations: Dict[ProfileField, List[Observation]] = {field: [] for field in ProfileField}
    for source in successful:
        for field in ProfileField:
            value = extract_field(source.provider, field, source.payload)
            if value is not None:
                observations[field].append(Observation(value, source.provider, source.reliability))

    populated = sum(1 for values in observations.values() if values)
    logger.info(f"Normalized {len(successful)} sources into {populated} populated fields")
    return observations
