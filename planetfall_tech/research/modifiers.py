"""Modifier aggregation over researched technologies."""

from collections.abc import Iterable

from planetfall_tech.models.technology import TechNode


def collect_modifiers(nodes: Iterable[TechNode], keys: Iterable[str]) -> dict[str, float]:
    """
    Sum effect contributions for several modifier keys at once.

    Each effect of each node is visited exactly once, whatever the number of
    keys. Contributions for the same key stack additively.
    """
    totals = dict.fromkeys(keys, 0.0)
    for node in nodes:
        for effect in node.effects:
            for key in totals:
                if effect.provides(key):
                    totals[key] += effect.contribute(key)
    return totals


def get_modifier(nodes: Iterable[TechNode], key: str) -> float:
    """Total bonus for ``key``, e.g. 0.35 for +35%."""
    return collect_modifiers(nodes, [key])[key]


def get_total_multiplier(nodes: Iterable[TechNode], key: str) -> float:
    """Ready-to-multiply scalar: 1.0 plus every bonus for ``key``."""
    return 1.0 + get_modifier(nodes, key)


def unlocked_buildings(nodes: Iterable[TechNode]) -> list[str]:
    """Buildings unlocked by the given technologies, in first-seen order."""
    seen: dict[str, None] = {}
    for node in nodes:
        for effect in node.effects:
            for building in effect.unlocks:
                seen.setdefault(building, None)
    return list(seen)
