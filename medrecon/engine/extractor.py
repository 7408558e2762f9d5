"""
Identifier Extractor

Turns a loosely structured vision-analysis result into validated
SeedIdentifiers. Missing or ambiguous fields lower the quality scores but never
abort the pipeline.
"""
import re
import logging
from typing import Any, Dict, Iterable, List, Optional

from medrecon.models.seed import IdentifierValidation, PhysicalCharacteristics, SeedIdentifiers

logger = logging.getLogger(__name__)

NDC_PATTERN = re.compile(r"\d{4,5}-\d{3,4}-\d{1,2}")
NDC_FULL_PATTERN = re.compile(r"^\d{4,5}-\d{3,4}-\d{1,2}$")

KNOWN_MANUFACTURERS = [
    'pfizer', 'johnson', 'merck', 'novartis', 'roche', 'abbott', 'bayer',
    'glaxosmithkline', 'sanofi', 'astrazeneca', 'bristol', 'eli lilly',
]

GENERIC_MARKERS = ('acid',)
GENERIC_SUFFIXES = ('ine', 'ol', 'pril', 'statin', 'cillin', 'azole', 'sartan', 'mab')

# (path into the analysis, weight)
QUALITY_CHECKS = [
    (("medicine", "brandName"), 15),
    (("medicine", "genericName"), 15),
    (("medicine", "activeIngredients"), 10),
    (("medicine", "strength"), 10),
    (("medicine", "manufacturer"), 10),
    (("medicine", "ndc"), 15),
    (("physicalCharacteristics", "markings"), 10),
    (("extractedText", "allText"), 10),
    (("manufacturingInfo", "lotNumber"), 5),
]


def _section(analysis: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = analysis.get(name)
    return value if isinstance(value, dict) else {}


def _strings(value: Any) -> List[str]:
    """Coerce a scalar or list field into a list of non-empty strings."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items = value
    else:
        items = [value]
    return [str(item).strip() for item in items if item is not None and str(item).strip()]


def _dedupe(candidates: Iterable[str]) -> List[str]:
    """Drop duplicates ignoring case and whitespace; the first spelling wins."""
    seen = set()
    unique = []
    for candidate in candidates:
        key = " ".join(candidate.lower().split())
        if key and key not in seen:
            seen.add(key)
            unique.append(" ".join(candidate.split()))
    return unique


def _looks_generic(candidate: str) -> bool:
    lowered = candidate.lower()
    if candidate[:1].islower():
        return True
    if any(marker in lowered for marker in GENERIC_MARKERS):
        return True
    return any(word.endswith(GENERIC_SUFFIXES) for word in lowered.split())


def select_best_candidate(candidates: Iterable[str], kind: str) -> Optional[str]:
    """
    Pick the most plausible candidate for a name field.

    Args:
        candidates: Raw candidate strings, possibly duplicated
        kind: "brand_name", "generic_name" or "manufacturer"

    Returns:
        The chosen candidate or None when there are none
    """
    unique = _dedupe(candidates)
    if not unique:
        return None
    if len(unique) == 1:
        return unique[0]

    if kind == "brand_name":
        preferred = [c for c in unique if re.match(r"^[A-Z][a-z]+", c)]
    elif kind == "generic_name":
        preferred = [c for c in unique if _looks_generic(c)]
    elif kind == "manufacturer":
        preferred = [c for c in unique if any(m in c.lower() for m in KNOWN_MANUFACTURERS)]
    else:
        preferred = []

    return preferred[0] if preferred else unique[0]


def find_ndc(analysis: Dict[str, Any]) -> Optional[str]:
    """Return the first NDC-shaped value found in the analysis, or None."""
    medicine = _section(analysis, "medicine")
    manufacturing = _section(analysis, "manufacturingInfo")
    extracted = _section(analysis, "extractedText")

    sources = (
        _strings(medicine.get("ndc"))
        + _strings(manufacturing.get("ndc"))
        + _strings(extracted.get("codes"))
        + _strings(extracted.get("allText"))
    )
    for text in sources:
        match = NDC_PATTERN.search(text)
        if match:
            return match.group(0)
    return None


def assess_initial_data_quality(analysis: Dict[str, Any]) -> int:
    """Weighted presence check over the key vision fields, scaled to 0-100."""
    score = 0
    max_score = 0
    for (section_name, key), weight in QUALITY_CHECKS:
        max_score += weight
        if _strings(_section(analysis, section_name).get(key)):
            score += weight
    return round(score / max_score * 100)


def validate_brand_name(brand_name: Optional[str]) -> int:
    if not brand_name:
        return 0
    score = 50
    if re.match(r"^[A-Z]", brand_name):
        score += 20
    if 3 <= len(brand_name) <= 20:
        score += 15
    if not re.search(r"\d", brand_name):
        score += 10
    if not re.search(r"[^a-zA-Z\s-]", brand_name):
        score += 5
    return min(100, score)


def validate_generic_name(generic_name: Optional[str]) -> int:
    if not generic_name:
        return 0
    score = 50
    if len(generic_name) >= 4:
        score += 20
    if any(marker in generic_name.lower() for marker in ('acid', 'ine', 'ol')):
        score += 15
    if not re.search(r"[^a-zA-Z\s-]", generic_name):
        score += 15
    return min(100, score)


def validate_ndc_format(ndc: Optional[str]) -> int:
    """100 for a well-formed NDC, 20 for something present but malformed."""
    if not ndc:
        return 0
    return 100 if NDC_FULL_PATTERN.match(ndc) else 20


def validate_manufacturer(manufacturer: Optional[str]) -> int:
    if not manufacturer:
        return 0
    lowered = manufacturer.lower()
    score = 50
    if any(known in lowered for known in KNOWN_MANUFACTURERS):
        score += 40
    if 'pharmaceutical' in lowered or 'pharma' in lowered or 'labs' in lowered:
        score += 10
    return min(100, score)


def validate_identifiers(brand_name, generic_name, ndc, manufacturer) -> IdentifierValidation:
    scores = {
        "brand_name": validate_brand_name(brand_name),
        "generic_name": validate_generic_name(generic_name),
        "ndc": validate_ndc_format(ndc),
        "manufacturer": validate_manufacturer(manufacturer),
    }
    overall = round(sum(scores.values()) / len(scores))
    return IdentifierValidation(overall=overall, **scores)


def extract_identifiers(analysis: Optional[Dict[str, Any]]) -> SeedIdentifiers:
    """
    Build SeedIdentifiers from a raw vision-analysis result.

    Args:
        analysis: Vision-analysis dictionary; any field may be missing or null

    Returns:
        SeedIdentifiers, possibly empty
    """
    if not isinstance(analysis, dict):
        logger.warning("Vision analysis missing or malformed, continuing with empty identifiers")
        analysis = {}

    medicine = _section(analysis, "medicine")
    extracted = _section(analysis, "extractedText")
    physical = _section(analysis, "physicalCharacteristics")
    manufacturing = _section(analysis, "manufacturingInfo")

    brand_name = select_best_candidate(
        _strings(medicine.get("brandName")) + _strings(extracted.get("drugNames")),
        "brand_name",
    )
    generic_name = select_best_candidate(
        _strings(medicine.get("genericName")) + _strings(medicine.get("activeIngredients")),
        "generic_name",
    )
    manufacturer = select_best_candidate(
        _strings(medicine.get("manufacturer"))
        + _strings(medicine.get("distributedBy"))
        + _strings(manufacturing.get("manufacturer")),
        "manufacturer",
    )
    ndc = find_ndc(analysis)

    active_ingredients = _dedupe(
        _strings(medicine.get("activeIngredients")) + _strings(medicine.get("genericName"))
    )

    try:
        initial_confidence = int(analysis.get("confidence") or 1)
    except (TypeError, ValueError, OverflowError):
        initial_confidence = 1
    initial_confidence = max(1, min(10, initial_confidence))

    seed = SeedIdentifiers(
        brand_name=brand_name,
        generic_name=generic_name,
        ndc=ndc,
        manufacturer=manufacturer,
        active_ingredients=active_ingredients,
        strength=(_strings(medicine.get("strength")) or [None])[0],
        dosage_form=(_strings(medicine.get("dosageForm")) or [None])[0],
        route=(_strings(medicine.get("route")) or [None])[0],
        physical=PhysicalCharacteristics(
            markings=(_strings(physical.get("markings")) or [None])[0],
            shape=(_strings(physical.get("shape")) or [None])[0],
            color=(_strings(physical.get("color")) or [None])[0],
            size=(_strings(physical.get("size")) or [None])[0],
            packaging=(_strings(physical.get("packaging")) or [None])[0],
        ),
        raw_text=_strings(extracted.get("allText")),
        initial_confidence=initial_confidence,
        identified=bool(analysis.get("identified")),
        data_quality=assess_initial_data_quality(analysis),
        validation=validate_identifiers(brand_name, generic_name, ndc, manufacturer),
    )

    logger.info(
        f"Extracted identifiers: brand={seed.brand_name!r} generic={seed.generic_name!r} "
        f"ndc={seed.ndc!r} quality={seed.data_quality}"
    )
    return seed
