"""
Search Strategy Planner

Maps SeedIdentifiers to the ordered list of lookups every provider tries.
"""
import logging
from typing import List

from medrecon.models.records import SearchStrategy, StrategyKind
from medrecon.models.seed import SeedIdentifiers

logger = logging.getLogger(__name__)


def plan_search_strategies(seed: SeedIdentifiers) -> List[SearchStrategy]:
    """
    Generate search strategies ranked by expected specificity.

    NDC (1) > brand/generic name (2) > name + strength (3) > each active
    ingredient (4) > brand + manufacturer (5). Equal priorities keep their
    insertion order.
    """
    strategies: List[SearchStrategy] = []

    if seed.ndc:
        strategies.append(SearchStrategy(StrategyKind.NDC, seed.ndc, 1))

    if seed.brand_name:
        strategies.append(SearchStrategy(StrategyKind.BRAND_NAME, seed.brand_name, 2))
    if seed.generic_name:
        strategies.append(SearchStrategy(StrategyKind.GENERIC_NAME, seed.generic_name, 2))

    if seed.brand_name and seed.strength:
        strategies.append(SearchStrategy(
            StrategyKind.BRAND_NAME_STRENGTH, f"{seed.brand_name} {seed.strength}", 3
        ))
    if seed.generic_name and seed.strength:
        strategies.append(SearchStrategy(
            StrategyKind.GENERIC_NAME_STRENGTH, f"{seed.generic_name} {seed.strength}", 3
        ))

    for ingredient in seed.active_ingredients:
        strategies.append(SearchStrategy(StrategyKind.ACTIVE_INGREDIENT, ingredient, 4))

    if seed.manufacturer and seed.brand_name:
        strategies.append(SearchStrategy(
            StrategyKind.MANUFACTURER_BRAND, f"{seed.brand_name} {seed.manufacturer}", 5
        ))

    # sorted() is stable
    strategies = sorted(strategies, key=lambda s: s.priority)
    logger.info(f"Planned {len(strategies)} search strategies")
    return strategies
