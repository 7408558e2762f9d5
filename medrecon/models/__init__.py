"""
Data models for seed identifiers, pipeline records and verified profiles.
"""

from medrecon.models.records import (
    ConflictResolution,
    FieldCrossReference,
    FieldValue,
    Observation,
    ProfileField,
    ResolutionMethod,
    SearchStrategy,
    SourceResult,
    SourceStatus,
    StrategyKind,
)
from medrecon.models.seed import IdentifierValidation, PhysicalCharacteristics, SeedIdentifiers
from medrecon.models.profile import (
    Discrepancy,
    MinimalProfile,
    QualityMetrics,
    ReconciliationOutcome,
    Recommendation,
    SourceAttribution,
    SourceValue,
    VerificationLevel,
    VerifiedField,
    VerifiedProfile,
)

__all__ = [
    'ConflictResolution',
    'FieldCrossReference',
    'FieldValue',
    'Observation',
    'ProfileField',
    'ResolutionMethod',
    'SearchStrategy',
    'SourceResult',
    'SourceStatus',
    'StrategyKind',
    'IdentifierValidation',
    'PhysicalCharacteristics',
    'SeedIdentifiers',
    'Discrepancy',
    'MinimalProfile',
    'QualityMetrics',
    'ReconciliationOutcome',
    'Recommendation',
    'SourceAttribution',
    'SourceValue',
    'VerificationLevel',
    'VerifiedField',
    'VerifiedProfile',
]
