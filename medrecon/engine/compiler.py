"""
Profile Compiler

Assembles the VerifiedProfile from resolved fields, raw regulatory and clinical
payloads, quality metrics and source attribution, and builds the MinimalProfile
used when reconciliation cannot finish.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from medrecon.config import DEFAULT_WEIGHTS, ScoringWeights
from medrecon.engine.quality import RuleResult
from medrecon.models.profile import (
    ArticleSummary,
    ClinicalProfile,
    Discrepancy,
    FieldScore,
    IdentificationProfile,
    ManufacturingProfile,
    MinimalProfile,
    PrescribingProfile,
    QualityMetrics,
    RecallNotice,
    Recommendation,
    RegulatoryProfile,
    SafetyProfile,
    SourceAttribution,
    SourceValue,
    TrialSummary,
    VerificationLevel,
    VerifiedField,
    VerifiedProfile,
)
from medrecon.models.records import ConflictResolution, FieldValue, Observation, ProfileField, SourceResult
from medrecon.models.seed import SeedIdentifiers
from medrecon.providers import registry
from medrecon.providers.pubmed import PUBMED_ARTICLE_URL

logger = logging.getLogger(__name__)

DISCLAIMER_PREFIX = "IMPORTANT MEDICAL DISCLAIMER: "
DISCLAIMER_BY_LEVEL = {
    VerificationLevel.GOLD: "This information has been cross-verified from multiple authoritative sources. ",
    VerificationLevel.SILVER: "This information has been compiled from available sources with moderate verification. ",
    VerificationLevel.BRONZE: "This information has been compiled from available sources with moderate verification. ",
    VerificationLevel.BASIC: "This information has limited verification and may be incomplete. ",
}
DISCLAIMER_SUFFIX = (
    "This tool is for informational purposes only and should not replace professional medical advice. "
    "Always consult with qualified healthcare professionals before making any medical decisions. "
    "Do not rely solely on automated identification for medicine verification. "
    "In case of medical emergency, contact emergency services immediately."
)
MINIMAL_DISCLAIMER = (
    "Analysis incomplete due to system limitations. "
    "Consult healthcare professional for accurate medicine identification."
)

CLINICAL_CONFIDENCE_WITH_TRIALS = 70
CLINICAL_CONFIDENCE_WITHOUT_TRIALS = 20
REGULATORY_CONFIDENCE_RECALLS_ONLY = 40

MAX_TRIALS = 10
MAX_ARTICLES = 5


def _plain(value: FieldValue) -> Any:
    return list(value) if isinstance(value, tuple) else value


def source_value(observation: Observation) -> SourceValue:
    return SourceValue(value=_plain(observation.value), source=observation.source, reliability=observation.reliability)


def verified_field(resolution: Optional[ConflictResolution]) -> Optional[VerifiedField]:
    """VerifiedField for a resolved field, None when nothing was accepted."""
    if resolution is None or not resolution.resolved or resolution.final_value is None:
        return None
    return VerifiedField(
        value=_plain(resolution.final_value),
        confidence=resolution.confidence,
        source=resolution.chosen_source,
        method=resolution.method.value,
        alternatives=[source_value(obs) for obs in resolution.alternatives],
    )


def section_confidence(fields: Sequence[Optional[VerifiedField]]) -> int:
    """Mean confidence of the populated fields of a section."""
    scores = [f.confidence for f in fields if f is not None]
    return round(sum(scores) / len(scores)) if scores else 0


def compile_identification(resolutions: Dict[ProfileField, ConflictResolution]) -> IdentificationProfile:
    fields = {
        name: verified_field(resolutions.get(ProfileField(name)))
        for name in ("brand_name", "generic_name", "active_ingredients", "strength", "dosage_form", "ndc")
    }
    return IdentificationProfile(confidence=section_confidence(list(fields.values())), **fields)


def compile_prescribing(resolutions: Dict[ProfileField, ConflictResolution]) -> PrescribingProfile:
    indications = verified_field(resolutions.get(ProfileField.INDICATIONS))
    contraindications = verified_field(resolutions.get(ProfileField.CONTRAINDICATIONS))
    return PrescribingProfile(
        indications=indications,
        contraindications=contraindications,
        confidence=section_confidence([indications, contraindications]),
    )


def compile_safety(resolutions: Dict[ProfileField, ConflictResolution]) -> SafetyProfile:
    fields = {
        name: verified_field(resolutions.get(ProfileField(name)))
        for name in ("warnings", "adverse_reactions", "drug_interactions", "contraindications")
    }
    return SafetyProfile(confidence=section_confidence(list(fields.values())), **fields)


def compile_manufacturing(resolutions: Dict[ProfileField, ConflictResolution]) -> ManufacturingProfile:
    manufacturer = verified_field(resolutions.get(ProfileField.MANUFACTURER))
    ndc = verified_field(resolutions.get(ProfileField.NDC))
    return ManufacturingProfile(
        manufacturer=manufacturer,
        ndc=ndc,
        confidence=section_confidence([manufacturer, ndc]),
    )


def _successful(sources: Dict[str, SourceResult], provider: str) -> Optional[SourceResult]:
    result = sources.get(provider)
    return result if result is not None and result.succeeded else None


def compile_regulatory(sources: Dict[str, SourceResult], weights: ScoringWeights = DEFAULT_WEIGHTS) -> RegulatoryProfile:
    """
    Regulatory section from the Drugs@FDA application and enforcement reports.

    Args:
        sources: SourceResults keyed by provider name
        weights: Scoring constants

    Returns:
        RegulatoryProfile, empty when neither source returned data
    """
    profile: Dict[str, Any] = {"recalls": [], "sources": [], "confidence": 0}

    drugs = _successful(sources, registry.FDA_DRUGS)
    if drugs is not None and drugs.payload:
        application = drugs.payload[0]
        products = application.get("products") or []
        profile["application_number"] = application.get("application_number")
        profile["sponsor_name"] = application.get("sponsor_name")
        profile["marketing_status"] = products[0].get("marketing_status") if products else None
        profile["sources"].append(drugs.provider)
        profile["confidence"] = round(min(weights.priority_cap, drugs.reliability * weights.priority_multiplier))

    enforcement = _successful(sources, registry.OPENFDA_ENFORCEMENT)
    if enforcement is not None and enforcement.payload:
        profile["recalls"] = [
            RecallNotice(
                recall_number=report.get("recall_number"),
                classification=report.get("classification"),
                status=report.get("status"),
                reason=report.get("reason_for_recall"),
                report_date=report.get("report_date"),
            )
            for report in enforcement.payload
            if isinstance(report, dict)
        ]
        profile["sources"].append(enforcement.provider)
        if not profile["confidence"]:
            profile["confidence"] = REGULATORY_CONFIDENCE_RECALLS_ONLY

    return RegulatoryProfile(**profile)


def trial_summary(study: Dict[str, Any]) -> TrialSummary:
    protocol = study.get("protocolSection") or {}
    identification = protocol.get("identificationModule") or {}
    return TrialSummary(
        nct_id=identification.get("nctId"),
        title=identification.get("briefTitle"),
        status=(protocol.get("statusModule") or {}).get("overallStatus"),
        phases=(protocol.get("designModule") or {}).get("phases") or [],
        conditions=(protocol.get("conditionsModule") or {}).get("conditions") or [],
    )


def article_summaries(payload: Dict[str, Any]) -> List[ArticleSummary]:
    result = payload.get("result") or {}
    articles = []
    for pmid in (result.get("uids") or payload.get("ids") or [])[:MAX_ARTICLES]:
        summary = result.get(pmid) or {}
        articles.append(ArticleSummary(
            pmid=pmid,
            title=summary.get("title"),
            journal=summary.get("fulljournalname") or summary.get("source"),
            publication_date=summary.get("pubdate"),
            url=PUBMED_ARTICLE_URL.format(pmid=pmid),
        ))
    return articles


def compile_clinical(sources: Dict[str, SourceResult]) -> ClinicalProfile:
    trials = _successful(sources, registry.CLINICAL_TRIALS)
    literature = _successful(sources, registry.PUBMED)
    return ClinicalProfile(
        clinical_trials=[trial_summary(study) for study in trials.payload[:MAX_TRIALS]] if trials else [],
        literature=article_summaries(literature.payload) if literature else [],
        confidence=CLINICAL_CONFIDENCE_WITH_TRIALS if trials else CLINICAL_CONFIDENCE_WITHOUT_TRIALS,
    )


def compile_source_attribution(sources: Dict[str, SourceResult]) -> List[SourceAttribution]:
    return [
        SourceAttribution(
            provider=result.provider,
            display_name=result.display_name,
            status=result.status.value,
            reliability=result.reliability,
            data_points=result.data_points,
            search_strategy=result.strategy.kind.value if result.strategy else None,
            error=result.error,
        )
        for result in sources.values()
    ]


def compile_discrepancies(rule_results: Sequence[RuleResult]) -> List[Discrepancy]:
    """One discrepancy per failed consistency rule."""
    return [
        Discrepancy(
            field=rule.name,
            severity=rule.severity,
            description=rule.description or f"Inconsistent {rule.name} values found across sources",
            conflicting_values=[source_value(obs) for obs in rule.conflicting],
        )
        for rule in rule_results
        if not rule.valid
    ]


def generate_recommendations(metrics: QualityMetrics, weights: ScoringWeights = DEFAULT_WEIGHTS) -> List[Recommendation]:
    recommendations = []

    if metrics.completeness < weights.completeness_warning:
        recommendations.append(Recommendation(
            type="data_completeness",
            priority="high",
            message="Limited medicine information available. Consult additional sources.",
        ))

    if metrics.accuracy < weights.accuracy_warning:
        recommendations.append(Recommendation(
            type="accuracy",
            priority="high",
            message="Data accuracy concerns detected. Verify information with healthcare professional.",
        ))

    if metrics.source_reliability < weights.reliability_warning:
        recommendations.append(Recommendation(
            type="reliability",
            priority="medium",
            message="Limited high-reliability sources available. Cross-check with official sources.",
        ))

    recommendations.append(Recommendation(
        type="general",
        priority="high",
        message="Always consult healthcare professionals before making medical decisions.",
    ))
    return recommendations


def generate_disclaimer(level: VerificationLevel) -> str:
    return DISCLAIMER_PREFIX + DISCLAIMER_BY_LEVEL[level] + DISCLAIMER_SUFFIX


def compile_profile(
    sources: Dict[str, SourceResult],
    resolutions: Dict[ProfileField, ConflictResolution],
    rule_results: Sequence[RuleResult],
    metrics: QualityMetrics,
    field_scores: Dict[str, FieldScore],
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> VerifiedProfile:
    """
    Assemble the verified profile.

    Args:
        sources: SourceResults keyed by provider name, in registration order
        resolutions: Final value per field
        rule_results: Consistency rule outcomes
        metrics: Aggregate quality metrics
        field_scores: Per-field scores keyed by field name
        weights: Scoring constants

    Returns:
        VerifiedProfile
    """
    return VerifiedProfile(
        identification=compile_identification(resolutions),
        prescribing_information=compile_prescribing(resolutions),
        safety=compile_safety(resolutions),
        manufacturing=compile_manufacturing(resolutions),
        regulatory=compile_regulatory(sources, weights),
        clinical=compile_clinical(sources),
        quality=metrics,
        field_scores=field_scores,
        source_attribution=compile_source_attribution(sources),
        discrepancies=compile_discrepancies(rule_results),
        recommendations=generate_recommendations(metrics, weights),
        disclaimer=generate_disclaimer(metrics.verification_level),
    )


def build_minimal_profile(seed: Optional[SeedIdentifiers], error: Optional[str] = None) -> MinimalProfile:
    """Fail-soft result carrying only what the vision step read."""
    return MinimalProfile(
        brand_name=seed.brand_name if seed else None,
        generic_name=seed.generic_name if seed else None,
        error=error,
        disclaimer=MINIMAL_DISCLAIMER,
    )
