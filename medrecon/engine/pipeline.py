"""
Reconciliation Pipeline

Extract -> plan -> collect -> normalize -> cross-reference -> resolve ->
assess quality -> compile. Only collection is concurrent; every other stage is
a pure function of the previous stage's output.
"""
import logging
from typing import Any, Dict, Optional, Sequence

from medrecon.config import DEFAULT_WEIGHTS, RECONCILE_DEADLINE, ScoringWeights
from medrecon.engine.collector import collect_sources
from medrecon.engine.compiler import build_minimal_profile, compile_profile
from medrecon.engine.cross_reference import cross_reference_all
from medrecon.engine.extractor import extract_identifiers
from medrecon.engine.normalizer import collect_observations
from medrecon.engine.planner import plan_search_strategies
from medrecon.engine.quality import compute_field_scores, compute_quality_metrics, validate_consistency
from medrecon.engine.resolver import resolve_all
from medrecon.models.profile import ReconciliationOutcome, VerifiedProfile
from medrecon.models.seed import SeedIdentifiers
from medrecon.providers import ProviderClient, default_providers

logger = logging.getLogger(__name__)


class ReconciliationEngine:
    """Reconciles seed identifiers against every registered provider."""

    def __init__(
        self,
        providers: Optional[Sequence[ProviderClient]] = None,
        weights: ScoringWeights = DEFAULT_WEIGHTS,
        deadline: Optional[float] = RECONCILE_DEADLINE,
    ):
        """
        Args:
            providers: Provider clients in registration order, defaults to all
            weights: Scoring constants
            deadline: Seconds allowed for the collection stage
        """
        self.providers = list(providers) if providers is not None else default_providers()
        self.weights = weights
        self.deadline = deadline

    async def reconcile(self, seed: SeedIdentifiers) -> ReconciliationOutcome:
        """
        Build a verified profile for the seed.

        Never raises: a failure anywhere after extraction yields a MinimalProfile.
        """
        try:
            return await self._reconcile(seed)
        except Exception as e:
            logger.error(f"Reconciliation failed, returning minimal profile: {e}", exc_info=True)
            return build_minimal_profile(seed, error=str(e) or type(e).__name__)

    async def analyze(self, analysis: Optional[Dict[str, Any]]) -> ReconciliationOutcome:
        """Extract identifiers from a raw vision analysis and reconcile them."""
        seed = extract_identifiers(analysis)
        return await self.reconcile(seed)

    async def _reconcile(self, seed: SeedIdentifiers) -> VerifiedProfile:
        strategies = plan_search_strategies(seed)
        collection = await collect_sources(self.providers, strategies, deadline=self.deadline)
        sources = list(collection.sources.values())

        observations = collect_observations(sources)
        references = cross_reference_all(observations, self.weights)
        resolutions = resolve_all(references, self.weights)

        consistency_score, rule_results = validate_consistency(observations)
        metrics = compute_quality_metrics(references, consistency_score, sources, self.weights, resolutions)

        profile = compile_profile(
            collection.sources,
            resolutions,
            rule_results,
            metrics,
            compute_field_scores(references),
            self.weights,
        )
        logger.info(
            f"Reconciled {seed.brand_name or seed.generic_name or 'unknown product'}: "
            f"{profile.verification_level.value} ({metrics.overall_quality}) from "
            f"{collection.successful} sources"
        )
        return profile
