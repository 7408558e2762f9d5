"""
API Client Utility Module

This module owns the process-wide HTTP connection pool shared by all provider
clients and the request helper they use: bounded retries, response parsing,
error handling and caching.
"""
import asyncio
import logging
from typing import Dict, Any, Optional, Union
from urllib.parse import urlparse

import httpx
from httpx import Response

from medrecon.config import REQUEST_TIMEOUT, MAX_RETRIES, RETRY_DELAY, USER_AGENT
from medrecon.utils.api_cache import get_cache

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": USER_AGENT,
}

_http_client: Optional[httpx.AsyncClient] = None


def get_http_client() -> httpx.AsyncClient:
    """Return the shared AsyncClient, creating it on first use."""
    global _http_client
    if _http_client is None or _http_client.is_closed:
        _http_client = httpx.AsyncClient(
            timeout=REQUEST_TIMEOUT,
            headers=DEFAULT_HEADERS,
            follow_redirects=True,
            limits=httpx.Limits(max_connections=50, max_keepalive_connections=20),
        )
    return _http_client


async def close_http_client() -> None:
    """Close the shared AsyncClient (application shutdown)."""
    global _http_client
    if _http_client is not None and not _http_client.is_closed:
        await _http_client.aclose()
        logger.info("Closed shared HTTP client")
    _http_client = None


async def make_request(
    url: str,
    params: Optional[Dict[str, Any]] = None,
    timeout: float = REQUEST_TIMEOUT,
    retries: int = MAX_RETRIES,
    client: Optional[httpx.AsyncClient] = None,
    use_cache: bool = True,
    cache_service: Optional[str] = None,
    expect: str = "json",
) -> Union[Dict[str, Any], str, None]:
    """
    Make a GET request to an external API and handle response processing.

    Args:
        url: URL to make request to
        params: URL parameters for the request (copied, never modified)
        timeout: Per-call timeout in seconds
        retries: Number of attempts on transport failure
        client: AsyncClient to use, defaults to the shared pool
        use_cache: Whether to use the response cache
        cache_service: Service name for cache identification (e.g., 'fda', 'rxnav')
        expect: "json" for parsed JSON, "text" for the raw body

    Returns:
        Parsed JSON (or text) response, or None if the request failed or found nothing
    """
    params = dict(params) if params else {}
    client = client or get_http_client()

    cache = None
    if use_cache:
        cache = get_cache(cache_service or extract_service_name(url))
        cached_response = cache.get(url, params)
        if cached_response is not None:
            logger.debug(f"Using cached response for {url}")
            return cached_response

    attempt = 0
    while attempt < retries:
        try:
            if attempt > 0:
                delay = calculate_retry_delay(attempt)
                logger.info(f"Retrying in {delay:.1f} seconds (attempt {attempt + 1}/{retries})...")
                await asyncio.sleep(delay)

            logger.debug(f"Making GET request to {url}")
            response = await client.get(url, params=params, timeout=timeout)
            result = process_response(response, expect=expect)

            if result is not None and cache is not None:
                cache.set(url, params, result)
            return result

        except httpx.RequestError as e:
            attempt += 1
            logger.warning(f"Request to {url} failed (attempt {attempt}/{retries}): {e!r}")
            if attempt >= retries:
                logger.error(f"Request to {url} failed after {retries} attempts")
                return None

    return None


def process_response(response: Response, expect: str = "json") -> Union[Dict[str, Any], str, None]:
    """
    Process an HTTP response and handle errors.

    Args:
        response: HTTP response object
        expect: "json" or "text"

    Returns:
        Parsed body or None if the response carries no usable data
    """
    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        status_code = e.response.status_code
        if status_code == 404:
            # openFDA answers "no matches" with a 404
            logger.info(f"No matches at {response.request.url}")
        elif status_code == 429:
            logger.warning("API rate limit exceeded. Try again later or use an API key.")
        else:
            logger.error(f"HTTP error: {status_code} - {e.response.reason_phrase}")
        return None

    if expect == "text":
        return response.text

    try:
        return response.json()
    except ValueError:
        content_type = response.headers.get("content-type", "")
        logger.error(f"Failed to decode response as JSON (Content-Type: {content_type}): {response.text[:200]}...")
        return None


def extract_service_name(url: str) -> str:
    """
    Extract service name from URL for cache identification.

    Args:
        url: API endpoint URL

    Returns:
        Service name for cache identification
    """
    hostname = urlparse(url).netloc.lower()

    if 'api.fda.gov' in hostname:
        return 'fda'
    elif 'rxnav.nlm.nih.gov' in hostname:
        return 'rxnav'
    elif 'dailymed' in hostname:
        return 'dailymed'
    elif 'eutils.ncbi.nlm.nih.gov' in hostname:
        return 'pubmed'
    elif 'clinicaltrials' in hostname:
        return 'trials'

    parts = hostname.split('.')
    if len(parts) > 1:
        return parts[-2]
    return 'generic'


def calculate_retry_delay(attempt: int, base_delay: float = RETRY_DELAY) -> float:
    """
    Exponential backoff delay for retries: base_delay * 2^(attempt-1).

    Args:
        attempt: Current attempt number (1-based)
        base_delay: Base delay in seconds

    Returns:
        Delay in seconds before next retry
    """
    return max(0.1, base_delay * (2 ** (attempt - 1)))
