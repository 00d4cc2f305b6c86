from conftest import iron_bonus, make_node
from planetfall_tech.models import TechCategory, UnlockMethod
from planetfall_tech.models.effects import Effect, EffectKind
from planetfall_tech.models.technology import format_duration


def test_defaults_and_display_strings():
    node = make_node("improved_mining", cost={"Iron": 10, "Copper": 5}, duration=90)

    assert node.name == "Improved Mining"
    assert node.cost_string() == "10 Iron, 5 Copper"
    assert node.time_string() == "1m 30s"
    assert node.effects_description() == "No effects"
    assert node.is_researchable
    assert not node.researched and not node.available


def test_free_research():
    assert make_node("free").cost_string() == "Free"


def test_format_duration():
    assert format_duration(45) == "45s"
    assert format_duration(60) == "1m"
    assert format_duration(3600) == "1h"
    assert format_duration(3720) == "1h 2m"


def test_prerequisites_met():
    node = make_node("c", requires=("a", "b"))

    assert node.prerequisites_met({"a", "b", "x"})
    assert not node.prerequisites_met({"a"})


def test_effect_lookup_by_kind():
    unlock = Effect(EffectKind.UNLOCK_BUILDING, unlocks=("Forge",))
    node = make_node(
        "forging",
        effects=(iron_bonus(10), unlock),
        category=TechCategory.MILITARY,
        unlock_method=UnlockMethod.EXTERNALLY_GRANTED,
    )

    assert node.has_effect(EffectKind.UNLOCK_BUILDING)
    assert node.get_effects(EffectKind.UNLOCK_BUILDING) == [unlock]
    assert not node.has_effect(EffectKind.RESEARCH_SPEED)
    assert node.effects_description() == "+10% Iron production\nUnlocks: Forge"
    assert not node.is_researchable


def test_nodes_compare_by_identity():
    assert make_node("a") != make_node("a")
