"""
Engine Configuration

Environment-driven settings for provider timeouts, retries, caching and the
scoring constants used by cross-referencing and quality assessment.
"""
import os
import logging
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# Request settings
REQUEST_TIMEOUT = float(os.getenv('REQUEST_TIMEOUT', '15'))
DETAIL_REQUEST_TIMEOUT = float(os.getenv('DETAIL_REQUEST_TIMEOUT', '10'))
MAX_RETRIES = int(os.getenv('MAX_RETRIES', '2'))
RETRY_DELAY = float(os.getenv('RETRY_DELAY', '0.5'))

# Upper bound on the time a single provider may spend across all strategies
PROVIDER_BUDGET = float(os.getenv('PROVIDER_BUDGET', '45'))

# Request-level deadline for the whole collection stage
RECONCILE_DEADLINE = float(os.getenv('RECONCILE_DEADLINE', '60'))

# Caching
CACHE_ENABLED = os.getenv('ENABLE_API_CACHE', 'true').lower() == 'true'
CACHE_TTL_SECONDS = int(os.getenv('CACHE_TTL_SECONDS', str(7 * 24 * 60 * 60)))

# Local medicine database
DEFAULT_MEDICINE_DB_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "medicines.json")
MEDICINE_DB_PATH = os.getenv('MEDICINE_DB_PATH', DEFAULT_MEDICINE_DB_PATH)

USER_AGENT = "MedicineReconciliationEngine/0.1.0"


def get_api_key(key_name: str) -> Optional[str]:
    """
    Get API key from environment variables.

    Args:
        key_name: Name of the environment variable containing the API key

    Returns:
        API key as string or None if not found
    """
    api_key = os.getenv(key_name)
    if api_key:
        logger.debug(f"Found API key for {key_name}")
        return api_key
    logger.debug(f"No API key found for {key_name}, using unauthenticated access")
    return None


@dataclass(frozen=True)
class ScoringWeights:
    """Constants for consensus scoring, field confidence and overall quality."""
    # consensus group score = members * consensus_member_weight + sum(reliability)
    consensus_member_weight: float = 10.0

    # multi-source field confidence
    agreement_weight: float = 0.4
    reliability_weight: float = 0.3
    diversity_weight: float = 0.3
    diversity_saturation: int = 5

    # single observation confidence = min(cap, reliability * multiplier)
    single_source_multiplier: float = 8.0
    single_source_cap: float = 80.0

    # conflict resolution confidence
    priority_multiplier: float = 9.0
    priority_cap: float = 90.0
    reliability_multiplier: float = 8.0
    reliability_cap: float = 80.0

    # overall quality
    completeness_weight: float = 0.3
    accuracy_weight: float = 0.3
    source_reliability_weight: float = 0.2
    cross_verification_weight: float = 0.2

    # verification tiers
    gold_threshold: int = 90
    silver_threshold: int = 80
    bronze_threshold: int = 70

    # recommendation thresholds
    completeness_warning: int = 70
    accuracy_warning: int = 80
    reliability_warning: int = 70

    # consistency score at or above which the dataset counts as valid
    consistency_pass: int = 70


DEFAULT_WEIGHTS = ScoringWeights()
