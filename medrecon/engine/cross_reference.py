"""
Cross-Referencer

Groups the observations for each field into equivalence classes, counts
agreements and conflicts, picks a consensus candidate and scores the field.
"""
import logging
from typing import Dict, List, Sequence

from medrecon.config import DEFAULT_WEIGHTS, ScoringWeights
from medrecon.models.records import FieldCrossReference, FieldValue, Observation, ProfileField

logger = logging.getLogger(__name__)


def comparison_key(value: FieldValue) -> str:
    """
    Key under which two values count as the same.

    Strings are lower-cased with whitespace collapsed; lists are keyed by their
    sorted normalized items joined with "|".
    """
    if isinstance(value, (list, tuple)):
        return "|".join(sorted(comparison_key(item) for item in value))
    return " ".join(str(value).lower().split())


def group_observations(observations: Sequence[Observation]) -> List[List[Observation]]:
    """Equivalence classes in order of first appearance."""
    groups: Dict[str, List[Observation]] = {}
    for observation in observations:
        groups.setdefault(comparison_key(observation.value), []).append(observation)
    return list(groups.values())


def single_source_confidence(reliability: int, weights: ScoringWeights = DEFAULT_WEIGHTS) -> int:
    return round(min(weights.single_source_cap, reliability * weights.single_source_multiplier))


def multi_source_confidence(
    agreements: int,
    observations: Sequence[Observation],
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> int:
    total = len(observations)
    # Max rather than mean, so an agreeing low-reliability source never lowers confidence
    max_reliability = max(obs.reliability for obs in observations)
    source_count = len({obs.source for obs in observations})

    score = weights.agreement_weight * (agreements / total)
    score += weights.reliability_weight * (max_reliability / 10)
    score += weights.diversity_weight * min(source_count / weights.diversity_saturation, 1)
    return max(0, min(100, round(score * 100)))


def cross_reference_field(
    field: ProfileField,
    observations: Sequence[Observation],
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> FieldCrossReference:
    """
    Cross-reference one field.

    Args:
        field: Field being analyzed
        observations: Observations in deterministic provider order
        weights: Scoring constants

    Returns:
        FieldCrossReference for the field
    """
    observations = tuple(observations)
    if not observations:
        return FieldCrossReference(field=field)

    if len(observations) == 1:
        only = observations[0]
        return FieldCrossReference(
            field=field,
            observations=observations,
            consensus=only.value,
            confidence=single_source_confidence(only.reliability, weights),
        )

    groups = group_observations(observations)
    if len(groups) == 1:
        agreements = len(observations)
        conflicts: List[Observation] = []
    else:
        agreements = sum(len(group) for group in groups if len(group) > 1)
        conflicts = [group[0] for group in groups if len(group) == 1]

    # Strict comparison keeps the earlier group on ties
    best_group = groups[0]
    best_score = None
    for group in groups:
        score = len(group) * weights.consensus_member_weight + sum(obs.reliability for obs in group)
        if best_score is None or score > best_score:
            best_group, best_score = group, score

    return FieldCrossReference(
        field=field,
        observations=observations,
        agreements=agreements,
        conflicts=tuple(conflicts),
        consensus=best_group[0].value,
        confidence=multi_source_confidence(agreements, observations, weights),
    )


def cross_reference_all(
    observations: Dict[ProfileField, Sequence[Observation]],
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> Dict[ProfileField, FieldCrossReference]:
    """Cross-reference every field, in ProfileField order."""
    references = {
        field: cross_reference_field(field, observations.get(field, ()), weights)
        for field in ProfileField
    }
    conflicted = [field.value for field, ref in references.items() if ref.conflicts]
    if conflicted:
        logger.info(f"Conflicting values for: {', '.join(conflicted)}")
    return references
