"""
Unit tests for profile compilation, disclaimers and recommendations.
"""
import pytest

from conftest import drugsfda_payload, success
from medrecon.engine.compiler import (
    DISCLAIMER_PREFIX,
    MINIMAL_DISCLAIMER,
    build_minimal_profile,
    compile_clinical,
    compile_discrepancies,
    compile_regulatory,
    compile_source_attribution,
    generate_disclaimer,
    generate_recommendations,
    section_confidence,
    verified_field,
)
from medrecon.engine.quality import RuleResult
from medrecon.models.profile import QualityMetrics, VerificationLevel, VerifiedField
from medrecon.models.records import (
    ConflictResolution,
    Observation,
    ProfileField,
    ResolutionMethod,
    SourceResult,
    SourceStatus,
)
from medrecon.models.seed import SeedIdentifiers
from medrecon.providers import registry


@pytest.mark.parametrize("level, wording", [
    (VerificationLevel.GOLD, "cross-verified from multiple authoritative sources"),
    (VerificationLevel.SILVER, "moderate verification"),
    (VerificationLevel.BRONZE, "moderate verification"),
    (VerificationLevel.BASIC, "limited verification and may be incomplete"),
])
def test_disclaimer_wording(level, wording):
    disclaimer = generate_disclaimer(level)
    assert disclaimer.startswith(DISCLAIMER_PREFIX)
    assert wording in disclaimer
    assert "should not replace professional medical advice" in disclaimer


def test_recommendations_for_weak_metrics():
    metrics = QualityMetrics(completeness=40, accuracy=60, source_reliability=50)
    recommendations = generate_recommendations(metrics)

    assert [r.type for r in recommendations] == ["data_completeness", "accuracy", "reliability", "general"]
    assert [r.priority for r in recommendations] == ["high", "high", "medium", "high"]


def test_general_recommendation_is_always_last():
    metrics = QualityMetrics(completeness=100, accuracy=100, source_reliability=100)
    recommendations = generate_recommendations(metrics)
    assert [r.type for r in recommendations] == ["general"]


def test_verified_field_from_resolution():
    resolution = ConflictResolution(
        field=ProfileField.ACTIVE_INGREDIENTS,
        resolved=True,
        final_value=("LISINOPRIL",),
        method=ResolutionMethod.CONSENSUS,
        chosen_source=registry.FDA_DRUGS,
        confidence=82,
        alternatives=(Observation(("lisinopril",), registry.RXNORM, 8),),
    )
    field = verified_field(resolution)

    assert field.value == ["LISINOPRIL"]
    assert field.method == "consensus"
    assert field.alternatives[0].value == ["lisinopril"]
    assert field.alternatives[0].source == registry.RXNORM


def test_unresolved_field_is_omitted():
    resolution = ConflictResolution(
        field=ProfileField.NDC,
        resolved=False,
        final_value=None,
        method=ResolutionMethod.CONSENSUS,
        chosen_source=None,
        confidence=0,
        validation_score=20,
    )
    assert verified_field(resolution) is None
    assert verified_field(None) is None


def test_section_confidence_ignores_missing_fields():
    fields = [
        VerifiedField(value="a", confidence=80, method="consensus"),
        None,
        VerifiedField(value="b", confidence=61, method="priority"),
    ]
    assert section_confidence(fields) == 70
    assert section_confidence([None, None]) == 0


def test_regulatory_from_drugsfda_and_enforcement():
    recall = {
        "recall_number": "D-0001-2024",
        "classification": "Class II",
        "status": "Terminated",
        "reason_for_recall": "Subpotent drug",
        "report_date": "20240102",
    }
    sources = {
        registry.FDA_DRUGS: success(registry.FDA_DRUGS, drugsfda_payload()),
        registry.OPENFDA_ENFORCEMENT: success(registry.OPENFDA_ENFORCEMENT, [recall]),
    }
    regulatory = compile_regulatory(sources)

    assert regulatory.application_number == "NDA019558"
    assert regulatory.sponsor_name == "MERCK SHARP DOHME"
    assert regulatory.marketing_status == "Prescription"
    assert regulatory.confidence == 90
    assert regulatory.sources == [registry.FDA_DRUGS, registry.OPENFDA_ENFORCEMENT]
    assert regulatory.recalls[0].classification == "Class II"
    assert regulatory.recalls[0].reason == "Subpotent drug"


def test_regulatory_with_recalls_only():
    sources = {
        registry.FDA_DRUGS: SourceResult(registry.FDA_DRUGS, "FDA Drugs@FDA", SourceStatus.FAILED, 10, error="down"),
        registry.OPENFDA_ENFORCEMENT: success(registry.OPENFDA_ENFORCEMENT, [{"recall_number": "D-1"}]),
    }
    regulatory = compile_regulatory(sources)
    assert regulatory.application_number is None
    assert regulatory.confidence == 40
    assert len(regulatory.recalls) == 1


def test_regulatory_without_sources():
    regulatory = compile_regulatory({})
    assert regulatory.confidence == 0
    assert regulatory.recalls == []


def test_clinical_section():
    study = {"protocolSection": {
        "identificationModule": {"nctId": "NCT00000001", "briefTitle": "Lisinopril in hypertension"},
        "statusModule": {"overallStatus": "COMPLETED"},
        "designModule": {"phases": ["PHASE3"]},
        "conditionsModule": {"conditions": ["Hypertension"]},
    }}
    articles = {
        "ids": ["111", "222"],
        "result": {
            "uids": ["111", "222"],
            "111": {"title": "ACE inhibitors", "fulljournalname": "Hypertension", "pubdate": "2020 Jan"},
            "222": {"title": "Cough and lisinopril", "source": "BMJ", "pubdate": "2019"},
        },
    }
    clinical = compile_clinical({
        registry.CLINICAL_TRIALS: success(registry.CLINICAL_TRIALS, [study]),
        registry.PUBMED: success(registry.PUBMED, articles),
    })

    assert clinical.confidence == 70
    trial = clinical.clinical_trials[0]
    assert trial.nct_id == "NCT00000001"
    assert trial.status == "COMPLETED"
    assert trial.phases == ["PHASE3"]
    assert [a.pmid for a in clinical.literature] == ["111", "222"]
    assert clinical.literature[1].journal == "BMJ"
    assert clinical.literature[0].url == "https://pubmed.ncbi.nlm.nih.gov/111/"


def test_clinical_without_trials():
    clinical = compile_clinical({})
    assert clinical.confidence == 20
    assert clinical.clinical_trials == []
    assert clinical.literature == []


def test_discrepancies_only_for_failed_rules():
    conflicting = (
        Observation("0069-1020-68", registry.FDA_DRUGS, 10),
        Observation("0069-9999-99", registry.RXNORM, 8),
    )
    rules = [
        RuleResult(name="ndc", valid=False, severity="high", description="Sources report 2 different NDC values",
                   conflicting=conflicting),
        RuleResult(name="names", valid=True, severity="medium"),
    ]
    discrepancies = compile_discrepancies(rules)

    assert len(discrepancies) == 1
    assert discrepancies[0].field == "ndc"
    assert discrepancies[0].severity == "high"
    assert [v.value for v in discrepancies[0].conflicting_values] == ["0069-1020-68", "0069-9999-99"]


def test_source_attribution_keeps_order_and_errors():
    sources = {
        registry.FDA_DRUGS: success(registry.FDA_DRUGS, drugsfda_payload(), data_points=14),
        registry.RXNORM: SourceResult(registry.RXNORM, "RxNorm", SourceStatus.FAILED, 8, error="Timed out after 45.0s"),
    }
    attribution = compile_source_attribution(sources)

    assert [a.provider for a in attribution] == [registry.FDA_DRUGS, registry.RXNORM]
    assert attribution[0].status == "success"
    assert attribution[0].data_points == 14
    assert attribution[0].search_strategy == "brand_name"
    assert attribution[1].status == "failed"
    assert attribution[1].error == "Timed out after 45.0s"


def test_minimal_profile():
    seed = SeedIdentifiers(brand_name="Prinivil", generic_name="lisinopril")
    profile = build_minimal_profile(seed, error="boom")

    assert profile.kind == "minimal"
    assert profile.brand_name == "Prinivil"
    assert profile.identification_confidence == "low"
    assert profile.completeness == 10
    assert profile.accuracy == 30
    assert profile.verification_level == VerificationLevel.BASIC
    assert profile.verified is False
    assert profile.sources == ["vision analysis only"]
    assert profile.disclaimer == MINIMAL_DISCLAIMER
    assert profile.error == "boom"

    assert build_minimal_profile(None).brand_name is None
