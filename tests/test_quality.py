"""
Unit tests for consistency rules, field scores and quality metrics.
"""
import pytest

from conftest import success
from medrecon.config import ScoringWeights
from medrecon.engine.cross_reference import cross_reference_all
from medrecon.engine.quality import (
    compute_field_scores,
    compute_quality_metrics,
    determine_verification_level,
    field_reliability,
    validate_consistency,
    validate_manufacturer_consistency,
    validate_name_consistency,
    validate_ndc_consistency,
)
from medrecon.engine.resolver import resolve_all
from medrecon.models.profile import VerificationLevel
from medrecon.models.records import Observation, ProfileField, SourceResult, SourceStatus
from medrecon.providers import registry


def obs(value, source, reliability=8):
    return Observation(value, source, reliability)


def test_consistency_rules_pass_without_data():
    score, results = validate_consistency({})
    assert score == 100
    assert [r.name for r in results] == ["ndc", "names", "manufacturer", "strength", "dosage_form"]
    assert all(r.valid for r in results)


def test_ndc_rule_is_high_severity():
    result = validate_ndc_consistency({ProfileField.NDC: [
        obs("0069-1020-68", registry.FDA_DRUGS, 10),
        obs("0069-9999-99", registry.RXNORM),
    ]})
    assert not result.valid
    assert result.severity == "high"
    assert len(result.conflicting) == 2


def test_name_rule_checks_brand_and_generic():
    agreeing = {
        ProfileField.BRAND_NAME: [obs("Prinivil", registry.FDA_DRUGS), obs("PRINIVIL", registry.DAILYMED)],
        ProfileField.GENERIC_NAME: [obs("lisinopril", registry.FDA_DRUGS)],
    }
    assert validate_name_consistency(agreeing).valid

    disagreeing = dict(agreeing)
    disagreeing[ProfileField.GENERIC_NAME] = [obs("lisinopril", registry.FDA_DRUGS), obs("enalapril", registry.RXNORM)]
    result = validate_name_consistency(disagreeing)
    assert not result.valid
    assert result.severity == "medium"
    assert [o.value for o in result.conflicting] == ["lisinopril", "enalapril"]


def test_manufacturer_rule_allows_two_names():
    two = [obs("Merck", registry.FDA_DRUGS), obs("Merck Labs", registry.RXNORM), obs("merck", registry.DAILYMED)]
    assert validate_manufacturer_consistency({ProfileField.MANUFACTURER: two}).valid

    three = two + [obs("Organon", registry.LOCAL_DATABASE)]
    result = validate_manufacturer_consistency({ProfileField.MANUFACTURER: three})
    assert not result.valid
    assert result.severity == "low"


def test_consistency_score_counts_valid_rules():
    observations = {
        ProfileField.NDC: [obs("0069-1020-68", registry.FDA_DRUGS), obs("0069-9999-99", registry.RXNORM)],
        ProfileField.STRENGTH: [obs("10 mg", registry.FDA_DRUGS), obs("20 mg", registry.LOCAL_DATABASE)],
    }
    score, _ = validate_consistency(observations)
    assert score == 60


def test_field_reliability_weights_towards_best_source():
    assert field_reliability([obs("a", "x", 10), obs("a", "y", 8)]) == 10
    assert field_reliability([obs("a", "x", 5), obs("a", "y", 4)]) == 5
    assert field_reliability([]) == 0


@pytest.mark.parametrize("overall, level", [
    (100, VerificationLevel.GOLD),
    (90, VerificationLevel.GOLD),
    (89, VerificationLevel.SILVER),
    (80, VerificationLevel.SILVER),
    (79, VerificationLevel.BRONZE),
    (70, VerificationLevel.BRONZE),
    (69, VerificationLevel.BASIC),
    (0, VerificationLevel.BASIC),
])
def test_verification_levels(overall, level):
    assert determine_verification_level(overall) == level


def test_metrics_when_every_source_failed():
    refs = cross_reference_all({})
    failed = SourceResult(registry.FDA_DRUGS, "FDA Drugs@FDA", SourceStatus.FAILED, 10, error="down")
    metrics = compute_quality_metrics(refs, 100, [failed])

    assert metrics.completeness == 0
    assert metrics.accuracy == 100
    assert metrics.source_reliability == 0
    assert metrics.cross_verification == 0
    assert metrics.overall_quality == 30
    assert metrics.verification_level == VerificationLevel.BASIC
    assert metrics.source_count == 0


def test_metrics_for_partial_agreement():
    observations = {
        ProfileField.BRAND_NAME: [obs("Prinivil", registry.FDA_DRUGS, 10), obs("Prinivil", registry.RXNORM, 8)],
        ProfileField.GENERIC_NAME: [obs("lisinopril", registry.FDA_DRUGS, 10), obs("lisinopril", registry.RXNORM, 8)],
        ProfileField.NDC: [obs("0069-1020-68", registry.FDA_DRUGS, 10), obs("0069-9999-99", registry.RXNORM, 8)],
        ProfileField.MANUFACTURER: [obs("Merck", registry.FDA_DRUGS, 10)],
        ProfileField.STRENGTH: [obs("10MG", registry.FDA_DRUGS, 10)],
        ProfileField.DOSAGE_FORM: [obs("Oral Tablet", registry.RXNORM, 8)],
    }
    refs = cross_reference_all(observations)
    score, _ = validate_consistency(observations)
    sources = [
        success(registry.FDA_DRUGS, ["x"]),
        success(registry.RXNORM, {"x": 1}),
        SourceResult(registry.DAILYMED, "DailyMed", SourceStatus.NO_MATCH, 9),
    ]
    metrics = compute_quality_metrics(refs, score, sources)

    assert score == 80
    assert metrics.completeness == 50
    assert metrics.accuracy == 80
    assert metrics.source_reliability == 90
    assert metrics.cross_verification == 17
    # 0.3*50 + 0.3*80 + 0.2*90 + 0.2*17
    assert metrics.overall_quality == 60
    assert metrics.overall_confidence == 36
    assert metrics.verification_level == VerificationLevel.BASIC
    assert metrics.source_count == 2

    scores = compute_field_scores(refs)
    assert scores["brand_name"].agreements == 2
    assert scores["brand_name"].source_count == 2
    assert scores["ndc"].conflicts == 2
    assert scores["warnings"].confidence == 0


def test_rejected_ndc_does_not_count_towards_completeness():
    observations = {ProfileField.NDC: [obs("12-34", registry.FDA_DRUGS, 10)]}
    refs = cross_reference_all(observations)
    resolutions = resolve_all(refs)
    sources = [success(registry.FDA_DRUGS, ["x"])]

    assert refs[ProfileField.NDC].consensus == "12-34"
    assert compute_quality_metrics(refs, 100, sources).completeness == 8
    assert compute_quality_metrics(refs, 100, sources, resolutions=resolutions).completeness == 0


@pytest.mark.parametrize("score, consistent", [(100, True), (80, True), (60, False), (0, False)])
def test_consistency_flag(score, consistent):
    metrics = compute_quality_metrics(cross_reference_all({}), score, [])
    assert metrics.consistent is consistent


def test_consistency_threshold_is_configurable():
    weights = ScoringWeights(consistency_pass=90)
    metrics = compute_quality_metrics(cross_reference_all({}), 80, [], weights)
    assert metrics.consistent is False
