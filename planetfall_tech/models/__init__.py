"""Data models for the Planetfall technology tree."""

from dataclasses import dataclass
from enum import Enum


class TechCategory(Enum):
    """Categories used to organize technologies."""

    ECONOMY = "economy"  # Resource production, worker efficiency
    MILITARY = "military"  # Combat upgrades, defenses
    EXPANSION = "expansion"  # Pollution, territory, exploration
    AUTOMATION = "automation"
    RESEARCH = "research"

    @property
    def label(self) -> str:
        """Name used in modifier keys, e.g. "Economy"."""
        return self.value.title()


class UnlockMethod(Enum):
    """How a technology becomes available for research."""

    RESEARCHABLE = "researchable"
    EXTERNALLY_GRANTED = "externally_granted"  # Mission rewards and scripted grants
    MISSION_REWARD = "externally_granted"  # Alias


@dataclass(frozen=True)
class ResourceCost:
    """Amount of one resource kind consumed by research."""

    resource: str
    amount: int

    def __str__(self) -> str:
        return f"{self.amount} {self.resource}"


