"""
Reconciliation Routes

Endpoints that run the reconciliation engine on a raw vision analysis or on
already extracted seed identifiers.
"""
from typing import Any, Dict
import logging

from fastapi import APIRouter, Body, Depends

from medrecon.engine import ReconciliationEngine
from medrecon.models.profile import ReconciliationOutcome
from medrecon.models.seed import SeedIdentifiers

router = APIRouter(tags=["reconciliation"])
logger = logging.getLogger(__name__)

_engine = None


def get_engine() -> ReconciliationEngine:
    """Shared engine instance; override in tests with app.dependency_overrides."""
    global _engine
    if _engine is None:
        _engine = ReconciliationEngine()
    return _engine


@router.post("/reconcile", response_model=ReconciliationOutcome)
async def reconcile_analysis(
    analysis: Dict[str, Any] = Body(..., description="Vision analysis result (medicine, extractedText, ...)"),
    engine: ReconciliationEngine = Depends(get_engine),
):
    """
    Reconcile a raw vision analysis.

    Identifiers are extracted from the analysis and cross-verified against all
    providers. The response is a verified profile, or a minimal profile when
    reconciliation could not complete.
    """
    outcome = await engine.analyze(analysis)
    logger.info(f"POST /reconcile -> {outcome.kind}")
    return outcome


@router.post("/reconcile/seed", response_model=ReconciliationOutcome)
async def reconcile_seed(
    seed: SeedIdentifiers,
    engine: ReconciliationEngine = Depends(get_engine),
):
    """Reconcile identifiers that were already extracted."""
    outcome = await engine.reconcile(seed)
    logger.info(f"POST /reconcile/seed -> {outcome.kind}")
    return outcome
