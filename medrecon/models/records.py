"""
Pipeline Records

Immutable records passed between the reconciliation stages.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple, Union


FieldValue = Union[str, Tuple[str, ...]]


class StrategyKind(str, Enum):
    NDC = "ndc"
    BRAND_NAME = "brand_name"
    GENERIC_NAME = "generic_name"
    BRAND_NAME_STRENGTH = "brand_name_strength"
    GENERIC_NAME_STRENGTH = "generic_name_strength"
    ACTIVE_INGREDIENT = "active_ingredient"
    MANUFACTURER_BRAND = "manufacturer_brand"


class SourceStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    NO_MATCH = "no_match"


class ProfileField(str, Enum):
    """Logical fields cross-referenced across providers."""
    BRAND_NAME = "brand_name"
    GENERIC_NAME = "generic_name"
    NDC = "ndc"
    MANUFACTURER = "manufacturer"
    ACTIVE_INGREDIENTS = "active_ingredients"
    STRENGTH = "strength"
    DOSAGE_FORM = "dosage_form"
    INDICATIONS = "indications"
    CONTRAINDICATIONS = "contraindications"
    WARNINGS = "warnings"
    ADVERSE_REACTIONS = "adverse_reactions"
    DRUG_INTERACTIONS = "drug_interactions"


class ResolutionMethod(str, Enum):
    CONSENSUS = "consensus"
    PRIORITY = "priority"
    RELIABILITY = "reliability"


@dataclass(frozen=True)
class SearchStrategy:
    """One way of looking a product up, tried by every provider in order."""
    kind: StrategyKind
    value: str
    priority: int


@dataclass(frozen=True)
class SourceResult:
    """Outcome of one provider invocation."""
    provider: str
    display_name: str
    status: SourceStatus
    reliability: int
    payload: Any = None
    data_points: int = 0
    strategy: Optional[SearchStrategy] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == SourceStatus.SUCCESS


@dataclass(frozen=True)
class Observation:
    """A normalized value reported for a field by one source."""
    value: FieldValue
    source: str
    reliability: int


@dataclass(frozen=True)
class FieldCrossReference:
    field: ProfileField
    observations: Tuple[Observation, ...] = ()
    agreements: int = 0
    conflicts: Tuple[Observation, ...] = ()
    consensus: Optional[FieldValue] = None
    confidence: int = 0

    @property
    def sources(self) -> List[str]:
        return [obs.source for obs in self.observations]


@dataclass(frozen=True)
class ConflictResolution:
    field: ProfileField
    resolved: bool
    final_value: Optional[FieldValue]
    method: ResolutionMethod
    chosen_source: Optional[str]
    confidence: int
    alternatives: Tuple[Observation, ...] = field(default_factory=tuple)
    validation_score: Optional[int] = None
