"""
Provider Client Base

Every data source implements the same contract: try the search strategies in
order, return on the first one that yields data, and never let an error escape.
"""
import asyncio
import logging
from typing import Any, Optional, Sequence

import httpx

from medrecon.config import REQUEST_TIMEOUT, PROVIDER_BUDGET
from medrecon.models.records import SearchStrategy, SourceResult, SourceStatus
from medrecon.providers.registry import DEFAULT_RELIABILITY, DISPLAY_NAMES, SOURCE_RELIABILITY
from medrecon.utils.api_clients import get_http_client

logger = logging.getLogger(__name__)


class ProviderClient:
    """Base class for a single external data source."""

    name: str = "provider"
    timeout: float = REQUEST_TIMEOUT

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        budget: Optional[float] = None,
    ):
        """
        Args:
            client: AsyncClient to use, defaults to the shared pool
            timeout: Per-call timeout in seconds
            budget: Total time allowed across all strategies
        """
        self._client = client
        if timeout is not None:
            self.timeout = timeout
        self.budget = budget if budget is not None else PROVIDER_BUDGET

    @property
    def display_name(self) -> str:
        return DISPLAY_NAMES.get(self.name, self.name)

    @property
    def reliability(self) -> int:
        return SOURCE_RELIABILITY.get(self.name, DEFAULT_RELIABILITY)

    @property
    def http(self) -> httpx.AsyncClient:
        return self._client or get_http_client()

    def supports(self, strategy: SearchStrategy) -> bool:
        """Whether this source can meaningfully run the given strategy."""
        return True

    async def fetch(self, strategy: SearchStrategy) -> Any:
        """Run one strategy and return the raw payload, or something falsy."""
        raise NotImplementedError

    def count_data_points(self, payload: Any) -> int:
        """Estimate how much usable information a payload holds."""
        try:
            return len(payload)
        except TypeError:
            return 1

    async def search(self, strategies: Sequence[SearchStrategy]) -> Optional[SourceResult]:
        """
        Try strategies in priority order until one yields data.

        Args:
            strategies: Ordered search strategies

        Returns:
            A success SourceResult, a failed SourceResult, or None when
            every strategy came back empty
        """
        try:
            return await asyncio.wait_for(self._search_strategies(strategies), timeout=self.budget)
        except asyncio.TimeoutError:
            logger.warning(f"{self.display_name} exceeded its {self.budget:.1f}s budget")
            return self.failed(f"Timed out after {self.budget:.1f}s")
        except Exception as e:
            logger.error(f"{self.display_name} search failed: {e}", exc_info=True)
            return self.failed(str(e) or type(e).__name__)

    async def _search_strategies(self, strategies: Sequence[SearchStrategy]) -> Optional[SourceResult]:
        for strategy in strategies:
            if not self.supports(strategy):
                continue
            try:
                logger.info(f"{self.display_name}: trying {strategy.kind.value} '{strategy.value}'")
                payload = await self.fetch(strategy)
            except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
                logger.warning(f"{self.display_name} search failed for {strategy.kind.value}: {e}")
                continue

            if payload:
                return SourceResult(
                    provider=self.name,
                    display_name=self.display_name,
                    status=SourceStatus.SUCCESS,
                    reliability=self.reliability,
                    payload=payload,
                    data_points=self.count_data_points(payload),
                    strategy=strategy,
                )

        logger.info(f"{self.display_name}: no match for {len(strategies)} strategies")
        return None

    def failed(self, error: str) -> SourceResult:
        return SourceResult(
            provider=self.name,
            display_name=self.display_name,
            status=SourceStatus.FAILED,
            reliability=self.reliability,
            error=error,
        )
