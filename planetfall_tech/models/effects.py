"""Technology effects.

An effect is a frozen value tagged with its kind. Behavior for each kind
lives in a registry, so new kinds can be plugged in with
``register_effect_kind`` without touching the scheduler.

Modifier keys follow the ``"{Aspect}_{Scope}"`` convention, e.g.
``"ResourceProduction_Iron"``. Global effects (``scope is None``) answer every
key of their aspect, including the ``"{Aspect}_All"`` wildcard.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from planetfall_tech.models.technology import TechNode

logger = logging.getLogger(__name__)

ALL_SCOPE = "All"


class EffectKind(str, Enum):
    """Built-in effect kinds."""

    RESOURCE_EFFICIENCY = "resource_efficiency"
    WORKER_UPGRADE = "worker_upgrade"
    ENERGY_EFFICIENCY = "energy_efficiency"
    MILITARY_UPGRADE = "military_upgrade"
    POLLUTION_REDUCTION = "pollution_reduction"
    RESEARCH_SPEED = "research_speed"
    STORAGE_EXPANSION = "storage_expansion"
    UNLOCK_BUILDING = "unlock_building"


class EnergyVariant(str, Enum):
    REDUCED_CONSUMPTION = "reduced_consumption"
    INCREASED_PRODUCTION = "increased_production"


class MilitaryUpgradeType(str, Enum):
    TURRET_DAMAGE = "TurretDamage"
    TURRET_RANGE = "TurretRange"
    TURRET_FIRE_RATE = "TurretFireRate"
    WALL_HEALTH = "WallHealth"
    BUILDING_ARMOR = "BuildingArmor"
    PROJECTILE_SPEED = "ProjectileSpeed"


def modifier_key(aspect: str, scope: str | None = None) -> str:
    """Build a modifier key; a missing scope means the ``All`` wildcard."""
    return f"{aspect}_{scope or ALL_SCOPE}"


def split_key(key: str) -> tuple[str, str]:
    """Split ``"Aspect_Scope"`` into its parts. Keys without a scope get ``""``."""
    aspect, _, scope = key.partition("_")
    return aspect, scope


@dataclass(frozen=True)
class Effect:
    """A composable unit of gameplay modification attached to a technology."""

    kind: str
    magnitude: float = 0.0
    scope: str | None = None  # None = applies to every entity kind
    variant: str | None = None  # Aspect selector for energy/military effects
    speed_bonus: float = 0.0  # Worker upgrades only
    unlocks: tuple[str, ...] = ()  # Building unlocks only
    name: str = ""

    @property
    def behavior(self) -> EffectBehavior:
        try:
            return _BEHAVIORS[_kind_key(self.kind)]
        except KeyError:
            raise KeyError(f"Unknown effect kind: {self.kind!r}") from None

    @property
    def is_global(self) -> bool:
        return self.scope is None

    def aspects(self) -> tuple[str, ...]:
        return self.behavior.aspects(self)

    def provides(self, key: str) -> bool:
        """Check if this effect contributes to the given modifier key."""
        aspect, scope = split_key(key)
        if not scope or aspect not in self.aspects():
            return False
        return self.is_global or scope == self.scope

    def contribute(self, key: str) -> float:
        """Magnitude contributed to ``key`` (0.0 if inapplicable)."""
        if not self.provides(key):
            return 0.0
        return self.behavior.contribute(self, split_key(key)[0])

    def activate(self, node: TechNode) -> None:
        """One-shot hook run when the owning technology is researched."""
        self.behavior.on_activate(self, node)

    def describe(self) -> str:
        return self.behavior.describe(self)


@dataclass(frozen=True)
class EffectBehavior:
    """Hooks implementing one effect kind."""

    aspects: Callable[[Effect], tuple[str, ...]]
    describe: Callable[[Effect], str]
    contribute: Callable[[Effect, str], float] | None = None
    on_activate: Callable[[Effect, TechNode], None] | None = None

    def __post_init__(self) -> None:
        if self.contribute is None:
            object.__setattr__(self, "contribute", _magnitude)
        if self.on_activate is None:
            object.__setattr__(self, "on_activate", _log_activation)


_BEHAVIORS: dict[str, EffectBehavior] = {}


def _kind_key(kind: str | Enum) -> str:
    return kind.value if isinstance(kind, Enum) else kind


def register_effect_kind(kind: str | Enum, behavior: EffectBehavior) -> None:
    """Register (or replace) the behavior for an effect kind."""
    _BEHAVIORS[_kind_key(kind)] = behavior


def known_effect_kinds() -> list[str]:
    return sorted(_BEHAVIORS)


def is_registered(kind: str | Enum) -> bool:
    return _kind_key(kind) in _BEHAVIORS


def _target(effect: Effect, everything: str) -> str:
    return effect.scope if effect.scope is not None else everything


def _percent(value: float) -> str:
    return f"{value * 100:g}%"


def _magnitude(effect: Effect, aspect: str) -> float:
    return effect.magnitude


def _log_activation(effect: Effect, node: TechNode) -> None:
    logger.info("%s: %s", node.name, effect.describe())


def _worker_contribute(effect: Effect, aspect: str) -> float:
    if aspect == "WorkerSpeed":
        return effect.speed_bonus
    return effect.magnitude


def _energy_aspect(effect: Effect) -> tuple[str, ...]:
    if effect.variant == EnergyVariant.INCREASED_PRODUCTION.value:
        return ("EnergyProduction",)
    return ("EnergyConsumption",)


def _energy_describe(effect: Effect) -> str:
    target = _target(effect, "all buildings")
    if effect.variant == EnergyVariant.INCREASED_PRODUCTION.value:
        return f"+{_percent(effect.magnitude)} energy production for {target}"
    return f"-{_percent(effect.magnitude)} energy consumption for {target}"


def _military_aspect(effect: Effect) -> tuple[str, ...]:
    return (effect.variant or MilitaryUpgradeType.TURRET_DAMAGE.value,)


def _unlock_activate(effect: Effect, node: TechNode) -> None:
    # Buildings read unlocks from the researched set, nothing to apply here
    for building in effect.unlocks:
        logger.info("%s: unlocked building %s", node.name, building)


def _unlock_describe(effect: Effect) -> str:
    if not effect.unlocks:
        return "No buildings unlocked"
    return f"Unlocks: {', '.join(effect.unlocks)}"


register_effect_kind(
    EffectKind.RESOURCE_EFFICIENCY,
    EffectBehavior(
        aspects=lambda e: ("ResourceProduction",),
        describe=lambda e: (
            f"+{_percent(e.magnitude)} {e.scope} production"
            if e.scope
            else f"+{_percent(e.magnitude)} all resource production"
        ),
    ),
)
register_effect_kind(
    EffectKind.WORKER_UPGRADE,
    EffectBehavior(
        aspects=lambda e: ("WorkerEfficiency", "WorkerSpeed"),
        describe=lambda e: (
            f"+{_percent(e.magnitude)} {_target(e, 'all worker')} efficiency"
        ),
        contribute=_worker_contribute,
    ),
)
register_effect_kind(
    EffectKind.ENERGY_EFFICIENCY,
    EffectBehavior(aspects=_energy_aspect, describe=_energy_describe),
)
register_effect_kind(
    EffectKind.MILITARY_UPGRADE,
    EffectBehavior(
        aspects=_military_aspect,
        describe=lambda e: (
            f"+{_percent(e.magnitude)} {_military_aspect(e)[0]} "
            f"for {_target(e, 'all defenses')}"
        ),
    ),
)
register_effect_kind(
    EffectKind.POLLUTION_REDUCTION,
    EffectBehavior(
        aspects=lambda e: ("PollutionReduction",),
        describe=lambda e: (
            f"-{_percent(e.magnitude)} pollution for {_target(e, 'all buildings')}"
        ),
    ),
)
register_effect_kind(
    EffectKind.RESEARCH_SPEED,
    EffectBehavior(
        aspects=lambda e: ("ResearchSpeed",),
        describe=lambda e: (
            f"+{_percent(e.magnitude)} research speed for "
            f"{_target(e, 'all')} technologies"
        ),
    ),
)
register_effect_kind(
    EffectKind.STORAGE_EXPANSION,
    EffectBehavior(
        aspects=lambda e: ("StorageCapacity",),
        describe=lambda e: (
            f"+{e.magnitude:g} {e.scope} storage"
            if e.scope
            else f"+{e.magnitude:g} storage capacity (all resources)"
        ),
    ),
)
register_effect_kind(
    EffectKind.UNLOCK_BUILDING,
    EffectBehavior(
        aspects=lambda e: (),
        describe=_unlock_describe,
        on_activate=_unlock_activate,
    ),
)
