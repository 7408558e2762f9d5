"""
Quality Assessment

Consistency rules across sources, per-field scores and the aggregate quality
metrics that decide the verification tier.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from medrecon.config import DEFAULT_WEIGHTS, ScoringWeights
from medrecon.engine.cross_reference import comparison_key
from medrecon.models.profile import FieldScore, QualityMetrics, VerificationLevel
from medrecon.models.records import ConflictResolution, FieldCrossReference, Observation, ProfileField, SourceResult

logger = logging.getLogger(__name__)

# Parent and subsidiary labelers often appear side by side
MAX_DISTINCT_MANUFACTURERS = 2


@dataclass(frozen=True)
class RuleResult:
    """Outcome of one consistency rule."""
    name: str
    valid: bool
    severity: str
    description: str = ""
    conflicting: Tuple[Observation, ...] = field(default_factory=tuple)


def _distinct(observations: Sequence[Observation]) -> int:
    return len({comparison_key(obs.value) for obs in observations})


def _exact_rule(name: str, severity: str, observations: Sequence[Observation], label: str) -> RuleResult:
    if len(observations) <= 1 or _distinct(observations) == 1:
        return RuleResult(name=name, valid=True, severity=severity)
    return RuleResult(
        name=name,
        valid=False,
        severity=severity,
        description=f"Sources report {_distinct(observations)} different {label} values",
        conflicting=tuple(observations),
    )


def validate_ndc_consistency(observations: Dict[ProfileField, List[Observation]]) -> RuleResult:
    return _exact_rule("ndc", "high", observations.get(ProfileField.NDC, []), "NDC")


def validate_name_consistency(observations: Dict[ProfileField, List[Observation]]) -> RuleResult:
    brands = observations.get(ProfileField.BRAND_NAME, [])
    generics = observations.get(ProfileField.GENERIC_NAME, [])

    conflicting: List[Observation] = []
    parts = []
    if len(brands) > 1 and _distinct(brands) > 1:
        conflicting.extend(brands)
        parts.append(f"{_distinct(brands)} brand names")
    if len(generics) > 1 and _distinct(generics) > 1:
        conflicting.extend(generics)
        parts.append(f"{_distinct(generics)} generic names")

    if not conflicting:
        return RuleResult(name="names", valid=True, severity="medium")
    return RuleResult(
        name="names",
        valid=False,
        severity="medium",
        description=f"Sources report {' and '.join(parts)}",
        conflicting=tuple(conflicting),
    )


def validate_manufacturer_consistency(observations: Dict[ProfileField, List[Observation]]) -> RuleResult:
    manufacturers = observations.get(ProfileField.MANUFACTURER, [])
    if len(manufacturers) <= 1 or _distinct(manufacturers) <= MAX_DISTINCT_MANUFACTURERS:
        return RuleResult(name="manufacturer", valid=True, severity="low")
    return RuleResult(
        name="manufacturer",
        valid=False,
        severity="low",
        description=f"Sources report {_distinct(manufacturers)} different manufacturers",
        conflicting=tuple(manufacturers),
    )


def validate_strength_consistency(observations: Dict[ProfileField, List[Observation]]) -> RuleResult:
    return _exact_rule("strength", "medium", observations.get(ProfileField.STRENGTH, []), "strength")


def validate_dosage_form_consistency(observations: Dict[ProfileField, List[Observation]]) -> RuleResult:
    return _exact_rule("dosage_form", "low", observations.get(ProfileField.DOSAGE_FORM, []), "dosage form")


CONSISTENCY_RULES = [
    validate_ndc_consistency,
    validate_name_consistency,
    validate_manufacturer_consistency,
    validate_strength_consistency,
    validate_dosage_form_consistency,
]


def validate_consistency(observations: Dict[ProfileField, List[Observation]]) -> Tuple[int, List[RuleResult]]:
    """
    Apply every consistency rule.

    Returns:
        Tuple of (consistency score 0-100, rule results in rule order)
    """
    results = [rule(observations) for rule in CONSISTENCY_RULES]
    valid = sum(1 for result in results if result.valid)
    score = round(valid / len(results) * 100)
    failed = [result.name for result in results if not result.valid]
    if failed:
        logger.info(f"Consistency score {score}, failed rules: {', '.join(failed)}")
    return score, results


def field_reliability(observations: Sequence[Observation]) -> int:
    """Weighted towards the most reliable source: 0.7 * max + 0.3 * mean."""
    if not observations:
        return 0
    scores = [obs.reliability for obs in observations]
    return round(max(scores) * 0.7 + sum(scores) / len(scores) * 0.3)


def compute_field_scores(references: Dict[ProfileField, FieldCrossReference]) -> Dict[str, FieldScore]:
    return {
        field.value: FieldScore(
            confidence=reference.confidence,
            source_count=len(set(reference.sources)),
            agreements=reference.agreements,
            conflicts=len(reference.conflicts),
            reliability=field_reliability(reference.observations),
        )
        for field, reference in references.items()
    }


def determine_verification_level(overall_quality: int, weights: ScoringWeights = DEFAULT_WEIGHTS) -> VerificationLevel:
    if overall_quality >= weights.gold_threshold:
        return VerificationLevel.GOLD
    if overall_quality >= weights.silver_threshold:
        return VerificationLevel.SILVER
    if overall_quality >= weights.bronze_threshold:
        return VerificationLevel.BRONZE
    return VerificationLevel.BASIC


def compute_quality_metrics(
    references: Dict[ProfileField, FieldCrossReference],
    consistency_score: int,
    sources: Sequence[SourceResult],
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    resolutions: Optional[Dict[ProfileField, ConflictResolution]] = None,
) -> QualityMetrics:
    """
    Aggregate quality of a reconciliation.

    Args:
        references: Cross-reference result per field
        consistency_score: Output of validate_consistency
        sources: All SourceResults (failed ones are ignored)
        weights: Scoring constants
        resolutions: Final value per field; when given, a field only counts as
            complete if the resolver accepted a value for it

    Returns:
        QualityMetrics with every score in [0, 100]
    """
    field_count = len(ProfileField)
    with_consensus = 0
    for profile_field, ref in references.items():
        if ref.consensus is None:
            continue
        resolution = resolutions.get(profile_field) if resolutions is not None else None
        if resolution is not None and not resolution.resolved:
            continue
        with_consensus += 1
    verified = sum(1 for ref in references.values() if ref.agreements > len(ref.conflicts))

    successful = [source for source in sources if source.succeeded]
    if successful:
        source_reliability = round(sum(s.reliability for s in successful) / len(successful) * 10)
    else:
        source_reliability = 0

    completeness = round(with_consensus / field_count * 100)
    cross_verification = round(verified / field_count * 100)
    accuracy = consistency_score

    overall = round(
        weights.completeness_weight * completeness
        + weights.accuracy_weight * accuracy
        + weights.source_reliability_weight * source_reliability
        + weights.cross_verification_weight * cross_verification
    )
    overall = max(0, min(100, overall))

    confidences = [ref.confidence for ref in references.values()]
    overall_confidence = round(sum(confidences) / len(confidences)) if confidences else 0

    metrics = QualityMetrics(
        completeness=completeness,
        accuracy=accuracy,
        source_reliability=min(100, source_reliability),
        cross_verification=cross_verification,
        overall_quality=overall,
        overall_confidence=overall_confidence,
        verification_level=determine_verification_level(overall, weights),
        consistent=accuracy >= weights.consistency_pass,
        source_count=len(successful),
    )
    logger.info(
        f"Quality: overall={metrics.overall_quality} level={metrics.verification_level.value} "
        f"completeness={completeness} accuracy={accuracy} reliability={source_reliability} "
        f"cross_verification={cross_verification}"
    )
    return metrics
