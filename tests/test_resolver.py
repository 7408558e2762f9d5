"""
Unit tests for conflict resolution and the NDC format gate.
"""
from medrecon.engine.cross_reference import cross_reference_field
from medrecon.engine.resolver import resolve_all, resolve_field
from medrecon.models.records import FieldCrossReference, Observation, ProfileField, ResolutionMethod


def resolve(field, observations):
    return resolve_field(cross_reference_field(field, observations))


def test_consensus_is_accepted_when_sources_agree():
    fda = Observation("Prinivil", "fda_drugs", 10)
    rxnorm = Observation("prinivil", "rxnorm", 8)
    resolution = resolve(ProfileField.BRAND_NAME, [fda, rxnorm])

    assert resolution.resolved
    assert resolution.method == ResolutionMethod.CONSENSUS
    assert resolution.final_value == "Prinivil"
    assert resolution.chosen_source == "fda_drugs"
    assert resolution.confidence == 82
    assert resolution.alternatives == (rxnorm,)
    assert resolution.validation_score is None


def test_priority_wins_over_larger_group():
    """Any conflict hands the decision to the provider priority order."""
    observations = [
        Observation("Merck", "fda_drugs", 10),
        Observation("Merck Labs", "rxnorm", 8),
        Observation("Merck Labs", "dailymed", 9),
    ]
    resolution = resolve(ProfileField.MANUFACTURER, observations)

    assert resolution.method == ResolutionMethod.PRIORITY
    assert resolution.final_value == "Merck"
    assert resolution.chosen_source == "fda_drugs"
    assert resolution.confidence == 90


def test_priority_ignores_observation_order():
    fda = Observation("0069-1020-68", "fda_drugs", 10)
    rxnorm = Observation("0069-9999-99", "rxnorm", 8)
    resolution = resolve_field(FieldCrossReference(
        field=ProfileField.NDC,
        observations=(rxnorm, fda),
        conflicts=(rxnorm, fda),
        consensus=rxnorm.value,
        confidence=40,
    ))

    assert resolution.method == ResolutionMethod.PRIORITY
    assert resolution.final_value == "0069-1020-68"
    assert resolution.alternatives == (rxnorm,)
    assert resolution.validation_score == 100


def test_reliability_fallback_for_unranked_sources():
    observations = [
        Observation("Merck", "custom_feed", 3),
        Observation("Organon", "openfda_enforcement", 8),
    ]
    resolution = resolve(ProfileField.MANUFACTURER, observations)

    assert resolution.method == ResolutionMethod.RELIABILITY
    assert resolution.final_value == "Organon"
    assert resolution.confidence == 64


def test_malformed_single_ndc_is_never_accepted():
    product_ndc = Observation("0006-0019", "fda_drugs", 10)
    resolution = resolve(ProfileField.NDC, [product_ndc])

    assert not resolution.resolved
    assert resolution.final_value is None
    assert resolution.chosen_source is None
    assert resolution.validation_score == 20
    assert resolution.alternatives == (product_ndc,)


def test_ndc_gate_falls_back_to_next_candidate():
    observations = [
        Observation("0006-0019", "fda_drugs", 10),
        Observation("00006-0019-54", "rxnorm", 8),
    ]
    resolution = resolve(ProfileField.NDC, observations)

    assert resolution.resolved
    assert resolution.method == ResolutionMethod.PRIORITY
    assert resolution.final_value == "00006-0019-54"
    assert resolution.chosen_source == "rxnorm"
    assert resolution.confidence == 72
    assert resolution.validation_score == 100


def test_ndc_gate_applies_to_consensus():
    observations = [
        Observation("0006-0019", "fda_drugs", 10),
        Observation("0006-0019", "openfda_labeling", 10),
    ]
    resolution = resolve(ProfileField.NDC, observations)

    assert not resolution.resolved
    assert resolution.validation_score == 20


def test_empty_field_is_unresolved():
    resolution = resolve(ProfileField.WARNINGS, [])
    assert not resolution.resolved
    assert resolution.final_value is None
    assert resolution.confidence == 0


def test_resolution_is_deterministic():
    refs = {
        ProfileField.NDC: cross_reference_field(ProfileField.NDC, [
            Observation("0069-1020-68", "fda_drugs", 10),
            Observation("0069-9999-99", "rxnorm", 8),
        ]),
        ProfileField.BRAND_NAME: cross_reference_field(ProfileField.BRAND_NAME, [
            Observation("Prinivil", "fda_drugs", 10),
        ]),
    }
    assert resolve_all(refs) == resolve_all(refs)
