"""
Parallel Collector

Runs every provider concurrently against the same strategy list. Each provider
settles independently: a timeout, an exception or a missed request deadline
turns into a failed SourceResult for that provider only.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from medrecon.models.records import SearchStrategy, SourceResult, SourceStatus
from medrecon.providers.base import ProviderClient

logger = logging.getLogger(__name__)

# Extra time granted on top of a provider's own budget before the collector
# gives up on it
BUDGET_GRACE = 1.0


@dataclass
class CollectionResult:
    """Per-provider outcomes in registration order."""
    sources: Dict[str, SourceResult] = field(default_factory=dict)

    @property
    def successful(self) -> int:
        return sum(1 for result in self.sources.values() if result.status == SourceStatus.SUCCESS)

    @property
    def failed(self) -> int:
        return sum(1 for result in self.sources.values() if result.status == SourceStatus.FAILED)

    @property
    def total_data_points(self) -> int:
        return sum(result.data_points for result in self.sources.values() if result.succeeded)

    def successful_sources(self) -> List[SourceResult]:
        return [result for result in self.sources.values() if result.succeeded]


def no_match(provider: ProviderClient) -> SourceResult:
    return SourceResult(
        provider=provider.name,
        display_name=provider.display_name,
        status=SourceStatus.NO_MATCH,
        reliability=provider.reliability,
    )


async def _run_provider(provider: ProviderClient, strategies: Sequence[SearchStrategy]) -> Optional[SourceResult]:
    try:
        return await asyncio.wait_for(provider.search(strategies), timeout=provider.budget + BUDGET_GRACE)
    except asyncio.TimeoutError:
        logger.warning(f"{provider.display_name} did not settle within its budget")
        return provider.failed(f"Timed out after {provider.budget:.1f}s")
    except Exception as e:
        logger.error(f"{provider.display_name} raised during collection: {e}", exc_info=True)
        return provider.failed(str(e) or type(e).__name__)


async def collect_sources(
    providers: Sequence[ProviderClient],
    strategies: Sequence[SearchStrategy],
    deadline: Optional[float] = None,
) -> CollectionResult:
    """
    Query all providers in parallel.

    Args:
        providers: Provider clients in registration order
        strategies: Ordered search strategies shared by every provider
        deadline: Seconds to wait for the whole fan-out; None waits for all

    Returns:
        CollectionResult keyed by provider name
    """
    collection = CollectionResult()
    if not providers:
        return collection

    tasks = [asyncio.ensure_future(_run_provider(provider, strategies)) for provider in providers]
    _, pending = await asyncio.wait(tasks, timeout=deadline)

    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)

    for provider, task in zip(providers, tasks):
        if task in pending or task.cancelled():
            logger.warning(f"{provider.display_name} still running at the request deadline")
            result = provider.failed("Request deadline exceeded")
        else:
            result = task.result() or no_match(provider)
        collection.sources[provider.name] = result

    logger.info(
        f"Collected {collection.successful}/{len(providers)} sources "
        f"({collection.failed} failed, {collection.total_data_points} data points)"
    )
    return collection
