"""
API Response Cache

In-memory cache for provider API responses. Repeated reconciliations of the
same product hit the public registries once per TTL window instead of once per
request.
"""
import json
import time
import logging
import hashlib
from typing import Dict, Any, Optional, Tuple

from medrecon.config import CACHE_ENABLED, CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)

# Per-service TTLs in seconds
SERVICE_TTLS = {
    "fda": 7 * 24 * 60 * 60,      # openFDA data: 7 days
    "rxnav": 30 * 24 * 60 * 60,   # RxNav data: 30 days
    "dailymed": 7 * 24 * 60 * 60,
    "pubmed": 1 * 24 * 60 * 60,   # PubMed data: 1 day
    "trials": 1 * 24 * 60 * 60,
}


class ApiCache:
    """TTL cache for JSON responses of a single service."""

    def __init__(self, service_name: str = "api", ttl_seconds: Optional[int] = None, enabled: bool = CACHE_ENABLED):
        self.service_name = service_name
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else CACHE_TTL_SECONDS
        self.enabled = enabled
        self._entries: Dict[str, Tuple[Any, float]] = {}

    def _get_cache_key(self, endpoint: str, params: Dict[str, Any]) -> str:
        """Hash the endpoint and its sorted params into a stable key."""
        param_str = json.dumps(sorted(params.items()), default=str)
        hash_input = f"{endpoint}:{param_str}"
        return hashlib.md5(hash_input.encode('utf-8')).hexdigest()

    def get(self, endpoint: str, params: Dict[str, Any]) -> Optional[Any]:
        """
        Get a cached response if available and not expired.

        Args:
            endpoint: API endpoint URL
            params: Query parameters

        Returns:
            Cached response or None if not found or expired
        """
        if not self.enabled:
            return None

        cache_key = self._get_cache_key(endpoint, params)
        entry = self._entries.get(cache_key)
        if entry is None:
            return None

        data, timestamp = entry
        if time.time() - timestamp < self.ttl_seconds:
            logger.debug(f"Cache hit ({self.service_name}): {endpoint}")
            return data

        logger.debug(f"Cache expired ({self.service_name}): {endpoint}")
        del self._entries[cache_key]
        return None

    def set(self, endpoint: str, params: Dict[str, Any], data: Any) -> None:
        """Cache a response."""
        if not self.enabled:
            return
        cache_key = self._get_cache_key(endpoint, params)
        self._entries[cache_key] = (data, time.time())

    def clear(self) -> int:
        """
        Clear all entries.

        Returns:
            Number of entries cleared
        """
        count = len(self._entries)
        self._entries.clear()
        return count

    def __len__(self) -> int:
        return len(self._entries)


_caches: Dict[str, ApiCache] = {}


def get_cache(service_name: str) -> ApiCache:
    """
    Get the shared cache instance for a service.

    Args:
        service_name: Name of the service

    Returns:
        ApiCache instance
    """
    key = service_name.lower()
    if key not in _caches:
        _caches[key] = ApiCache(service_name=key, ttl_seconds=SERVICE_TTLS.get(key, CACHE_TTL_SECONDS))
    return _caches[key]


def clear_all_caches() -> None:
    """Drop every service cache."""
    for cache in _caches.values():
        cache.clear()
