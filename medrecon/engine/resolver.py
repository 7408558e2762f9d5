"""
Conflict Resolver

Chooses one final value per field: the consensus when sources agree, otherwise
the value of the highest-priority provider, otherwise the most reliable one.
NDC values must be well-formed before they can be chosen.
"""
import logging
from typing import Dict, List, Optional, Tuple

from medrecon.config import DEFAULT_WEIGHTS, ScoringWeights
from medrecon.engine.cross_reference import comparison_key, single_source_confidence
from medrecon.engine.extractor import NDC_FULL_PATTERN
from medrecon.models.records import (
    ConflictResolution,
    FieldCrossReference,
    FieldValue,
    Observation,
    ProfileField,
    ResolutionMethod,
)
from medrecon.providers.registry import PROVIDER_PRIORITY, priority_rank

logger = logging.getLogger(__name__)

NDC_VALID_SCORE = 100
NDC_INVALID_SCORE = 20


def is_valid_ndc(value: Optional[FieldValue]) -> bool:
    return isinstance(value, str) and NDC_FULL_PATTERN.match(value) is not None


def _candidates(reference: FieldCrossReference) -> Tuple[ResolutionMethod, List[Observation]]:
    """Observations in the order they should be considered, with the method that ranks them."""
    observations = list(reference.observations)

    if not reference.conflicts:
        key = comparison_key(reference.consensus)
        agreeing = [obs for obs in observations if comparison_key(obs.value) == key]
        others = [obs for obs in observations if comparison_key(obs.value) != key]
        return ResolutionMethod.CONSENSUS, agreeing + others

    ranked = [obs for obs in observations if obs.source in PROVIDER_PRIORITY]
    if ranked:
        ranked.sort(key=lambda obs: (priority_rank(obs.source), obs.source))
        return ResolutionMethod.PRIORITY, ranked

    # sorted() is stable, so equal reliability keeps provider order
    return ResolutionMethod.RELIABILITY, sorted(observations, key=lambda obs: -obs.reliability)


def _confidence(
    method: ResolutionMethod,
    chosen: Observation,
    reference: FieldCrossReference,
    weights: ScoringWeights,
) -> int:
    if method == ResolutionMethod.CONSENSUS:
        if comparison_key(chosen.value) == comparison_key(reference.consensus):
            return reference.confidence
        return single_source_confidence(chosen.reliability, weights)
    if method == ResolutionMethod.PRIORITY:
        return round(min(weights.priority_cap, chosen.reliability * weights.priority_multiplier))
    return round(min(weights.reliability_cap, chosen.reliability * weights.reliability_multiplier))


def resolve_field(
    reference: FieldCrossReference,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> ConflictResolution:
    """
    Resolve a single field.

    Args:
        reference: Cross-reference result for the field
        weights: Scoring constants

    Returns:
        ConflictResolution derived from the cross-reference only
    """
    if not reference.observations:
        return ConflictResolution(
            field=reference.field,
            resolved=False,
            final_value=None,
            method=ResolutionMethod.CONSENSUS,
            chosen_source=None,
            confidence=0,
        )

    method, candidates = _candidates(reference)
    validation_score = None

    if reference.field == ProfileField.NDC:
        acceptable = [obs for obs in candidates if is_valid_ndc(obs.value)]
        if not acceptable:
            logger.warning(
                f"No well-formed NDC among {len(candidates)} candidates: "
                f"{[obs.value for obs in candidates]}"
            )
            return ConflictResolution(
                field=reference.field,
                resolved=False,
                final_value=None,
                method=method,
                chosen_source=None,
                confidence=0,
                alternatives=tuple(candidates),
                validation_score=NDC_INVALID_SCORE,
            )
        if acceptable[0] is not candidates[0]:
            logger.info(f"Skipped malformed NDC {candidates[0].value!r} from {candidates[0].source}")
        candidates = acceptable
        validation_score = NDC_VALID_SCORE

    chosen = candidates[0]
    return ConflictResolution(
        field=reference.field,
        resolved=True,
        final_value=chosen.value,
        method=method,
        chosen_source=chosen.source,
        confidence=_confidence(method, chosen, reference, weights),
        alternatives=tuple(obs for obs in reference.observations if obs is not chosen),
        validation_score=validation_score,
    )


def resolve_all(
    references: Dict[ProfileField, FieldCrossReference],
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> Dict[ProfileField, ConflictResolution]:
    """Resolve every cross-referenced field."""
    resolutions = {field: resolve_field(reference, weights) for field, reference in references.items()}
    by_method: Dict[str, int] = {}
    for resolution in resolutions.values():
        if resolution.resolved:
            by_method[resolution.method.value] = by_method.get(resolution.method.value, 0) + 1
    logger.info(f"Resolved fields by method: {by_method}")
    return resolutions
