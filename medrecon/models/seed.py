from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class PhysicalCharacteristics(BaseModel):
    model_config = ConfigDict(frozen=True)

    markings: Optional[str] = Field(None, description="Imprint or embossed markings")
    shape: Optional[str] = Field(None, description="Tablet or capsule shape")
    color: Optional[str] = Field(None, description="Dominant color")
    size: Optional[str] = Field(None, description="Approximate size")
    packaging: Optional[str] = Field(None, description="Packaging type (blister, bottle, ...)")


class IdentifierValidation(BaseModel):
    model_config = ConfigDict(frozen=True)

    brand_name: int = Field(0, ge=0, le=100)
    generic_name: int = Field(0, ge=0, le=100)
    ndc: int = Field(0, ge=0, le=100)
    manufacturer: int = Field(0, ge=0, le=100)
    overall: int = Field(0, ge=0, le=100)


class SeedIdentifiers(BaseModel):
    """Tentative product identifiers handed to the reconciliation engine."""
    model_config = ConfigDict(frozen=True)

    brand_name: Optional[str] = Field(None, description="Brand name of the product")
    generic_name: Optional[str] = Field(None, description="Generic (nonproprietary) name")
    ndc: Optional[str] = Field(None, description="National Drug Code")
    manufacturer: Optional[str] = Field(None, description="Manufacturer or distributor")
    active_ingredients: List[str] = Field(default_factory=list, description="Active ingredients in label order")
    strength: Optional[str] = Field(None, description="Strength, e.g. '10 mg'")
    dosage_form: Optional[str] = Field(None, description="Dosage form, e.g. 'tablet'")
    route: Optional[str] = Field(None, description="Route of administration")
    physical: PhysicalCharacteristics = Field(default_factory=PhysicalCharacteristics)
    raw_text: List[str] = Field(default_factory=list, description="Text lines extracted from the image")
    initial_confidence: int = Field(1, ge=1, le=10, description="Confidence carried from the vision step")
    identified: bool = Field(False, description="Whether the vision step claimed an identification")
    data_quality: int = Field(0, ge=0, le=100, description="Initial data quality score")
    validation: IdentifierValidation = Field(default_factory=IdentifierValidation)
