from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field


class VerificationLevel(str, Enum):
    GOLD = "gold"
    SILVER = "silver"
    BRONZE = "bronze"
    BASIC = "basic"


class SourceValue(BaseModel):
    value: Union[str, List[str]] = Field(..., description="Value as reported by the source")
    source: str = Field(..., description="Provider name")
    reliability: int = Field(..., description="Static reliability weight of the provider (1-10)")


class VerifiedField(BaseModel):
    value: Union[str, List[str]] = Field(..., description="Resolved value")
    confidence: int = Field(..., ge=0, le=100, description="Confidence in the resolved value")
    source: Optional[str] = Field(None, description="Provider the value was taken from")
    method: str = Field(..., description="Resolution method: consensus, priority or reliability")
    alternatives: List[SourceValue] = Field(default_factory=list, description="Values reported by other providers")


class IdentificationProfile(BaseModel):
    brand_name: Optional[VerifiedField] = None
    generic_name: Optional[VerifiedField] = None
    active_ingredients: Optional[VerifiedField] = None
    strength: Optional[VerifiedField] = None
    dosage_form: Optional[VerifiedField] = None
    ndc: Optional[VerifiedField] = None
    confidence: int = 0


class PrescribingProfile(BaseModel):
    indications: Optional[VerifiedField] = None
    contraindications: Optional[VerifiedField] = None
    confidence: int = 0


class SafetyProfile(BaseModel):
    warnings: Optional[VerifiedField] = None
    adverse_reactions: Optional[VerifiedField] = None
    drug_interactions: Optional[VerifiedField] = None
    contraindications: Optional[VerifiedField] = None
    confidence: int = 0


class ManufacturingProfile(BaseModel):
    manufacturer: Optional[VerifiedField] = None
    ndc: Optional[VerifiedField] = None
    confidence: int = 0


class RecallNotice(BaseModel):
    recall_number: Optional[str] = None
    classification: Optional[str] = None
    status: Optional[str] = None
    reason: Optional[str] = None
    report_date: Optional[str] = None


class RegulatoryProfile(BaseModel):
    application_number: Optional[str] = Field(None, description="NDA/ANDA/BLA number from Drugs@FDA")
    sponsor_name: Optional[str] = Field(None, description="Application sponsor")
    marketing_status: Optional[str] = Field(None, description="Marketing status of the first product")
    recalls: List[RecallNotice] = Field(default_factory=list, description="Enforcement reports mentioning the product")
    sources: List[str] = Field(default_factory=list, description="Providers this section was compiled from")
    confidence: int = 0


class TrialSummary(BaseModel):
    nct_id: Optional[str] = None
    title: Optional[str] = None
    status: Optional[str] = None
    phases: List[str] = Field(default_factory=list)
    conditions: List[str] = Field(default_factory=list)


class ArticleSummary(BaseModel):
    pmid: str
    title: Optional[str] = None
    journal: Optional[str] = None
    publication_date: Optional[str] = None
    url: Optional[str] = None


class ClinicalProfile(BaseModel):
    clinical_trials: List[TrialSummary] = Field(default_factory=list)
    literature: List[ArticleSummary] = Field(default_factory=list)
    confidence: int = 0


class QualityMetrics(BaseModel):
    completeness: int = Field(0, ge=0, le=100, description="Share of key fields with an accepted value")
    accuracy: int = Field(0, ge=0, le=100, description="Share of consistency rules that passed")
    source_reliability: int = Field(0, ge=0, le=100, description="Mean reliability of successful sources")
    cross_verification: int = Field(0, ge=0, le=100, description="Share of fields with more agreements than conflicts")
    overall_quality: int = Field(0, ge=0, le=100, description="Weighted combination of the four metrics")
    overall_confidence: int = Field(0, ge=0, le=100, description="Mean field confidence")
    verification_level: VerificationLevel = VerificationLevel.BASIC
    consistent: bool = Field(False, description="Whether enough consistency rules passed to treat the sources as agreeing")
    source_count: int = Field(0, description="Number of providers that returned data")


class FieldScore(BaseModel):
    confidence: int = 0
    source_count: int = 0
    agreements: int = 0
    conflicts: int = 0
    reliability: int = 0


class SourceAttribution(BaseModel):
    provider: str
    display_name: str
    status: str
    reliability: int
    data_points: int = 0
    search_strategy: Optional[str] = None
    error: Optional[str] = None


class Discrepancy(BaseModel):
    field: str
    severity: Literal["high", "medium", "low"]
    description: str
    conflicting_values: List[SourceValue] = Field(default_factory=list)


class Recommendation(BaseModel):
    type: str
    priority: Literal["high", "medium", "low"]
    message: str


class VerifiedProfile(BaseModel):
    """Reconciled medicine profile with quality metrics and full attribution."""
    kind: Literal["verified"] = "verified"
    identification: IdentificationProfile = Field(default_factory=IdentificationProfile)
    prescribing_information: PrescribingProfile = Field(default_factory=PrescribingProfile)
    safety: SafetyProfile = Field(default_factory=SafetyProfile)
    manufacturing: ManufacturingProfile = Field(default_factory=ManufacturingProfile)
    regulatory: RegulatoryProfile = Field(default_factory=RegulatoryProfile)
    clinical: ClinicalProfile = Field(default_factory=ClinicalProfile)
    quality: QualityMetrics = Field(default_factory=QualityMetrics)
    field_scores: Dict[str, FieldScore] = Field(default_factory=dict)
    source_attribution: List[SourceAttribution] = Field(default_factory=list)
    discrepancies: List[Discrepancy] = Field(default_factory=list)
    recommendations: List[Recommendation] = Field(default_factory=list)
    disclaimer: str = ""

    @property
    def verification_level(self) -> VerificationLevel:
        return self.quality.verification_level


class MinimalProfile(BaseModel):
    """Low-confidence result returned when reconciliation could not complete."""
    kind: Literal["minimal"] = "minimal"
    brand_name: Optional[str] = Field(None, description="Brand name as read by the vision step (unverified)")
    generic_name: Optional[str] = Field(None, description="Generic name as read by the vision step (unverified)")
    identification_confidence: Literal["low"] = "low"
    completeness: int = 10
    accuracy: int = 30
    verification_level: VerificationLevel = VerificationLevel.BASIC
    verified: bool = False
    sources: List[str] = Field(default_factory=lambda: ["vision analysis only"])
    error: Optional[str] = Field(None, description="Reason reconciliation did not complete")
    disclaimer: str = ""


ReconciliationOutcome = Annotated[Union[VerifiedProfile, MinimalProfile], Field(discriminator="kind")]
