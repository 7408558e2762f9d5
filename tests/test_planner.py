"""
Unit tests for search strategy planning.
"""
from medrecon.engine.planner import plan_search_strategies
from medrecon.models.records import StrategyKind
from medrecon.models.seed import SeedIdentifiers


def test_full_seed_strategy_order():
    seed = SeedIdentifiers(
        brand_name="Prinivil",
        generic_name="lisinopril",
        ndc="0006-0019-54",
        manufacturer="Merck",
        active_ingredients=["lisinopril"],
        strength="10 mg",
    )
    strategies = plan_search_strategies(seed)

    assert [(s.kind, s.value, s.priority) for s in strategies] == [
        (StrategyKind.NDC, "0006-0019-54", 1),
        (StrategyKind.BRAND_NAME, "Prinivil", 2),
        (StrategyKind.GENERIC_NAME, "lisinopril", 2),
        (StrategyKind.BRAND_NAME_STRENGTH, "Prinivil 10 mg", 3),
        (StrategyKind.GENERIC_NAME_STRENGTH, "lisinopril 10 mg", 3),
        (StrategyKind.ACTIVE_INGREDIENT, "lisinopril", 4),
        (StrategyKind.MANUFACTURER_BRAND, "Prinivil Merck", 5),
    ]


def test_priorities_are_non_decreasing():
    seed = SeedIdentifiers(
        brand_name="Zestoretic",
        active_ingredients=["lisinopril", "hydrochlorothiazide"],
        manufacturer="Almatica",
    )
    priorities = [s.priority for s in plan_search_strategies(seed)]
    assert priorities == sorted(priorities)


def test_ingredients_keep_label_order():
    seed = SeedIdentifiers(active_ingredients=["lisinopril", "hydrochlorothiazide"])
    strategies = plan_search_strategies(seed)
    assert [s.value for s in strategies] == ["lisinopril", "hydrochlorothiazide"]


def test_empty_seed_yields_no_strategies():
    assert plan_search_strategies(SeedIdentifiers()) == []


def test_manufacturer_without_brand_is_ignored():
    strategies = plan_search_strategies(SeedIdentifiers(generic_name="lisinopril", manufacturer="Merck"))
    assert [s.kind for s in strategies] == [StrategyKind.GENERIC_NAME]
