"""Technology data models."""

from dataclasses import dataclass, field

from planetfall_tech.models import ResourceCost, TechCategory, UnlockMethod
from planetfall_tech.models.effects import Effect


@dataclass(eq=False)
class TechNode:
    """Represents a technology that can be researched.

    Descriptor fields are fixed at content-load time. Only ``researched``
    and ``available`` change at runtime, and both are owned by the
    research scheduler.
    """

    id: str  # e.g., "improved_mining"
    tier: int
    category: TechCategory
    research_cost: tuple[ResourceCost, ...] = ()
    research_duration: float = 60.0  # seconds
    prerequisites: frozenset[str] = frozenset()
    unlock_method: UnlockMethod = UnlockMethod.RESEARCHABLE
    effects: tuple[Effect, ...] = ()
    name: str = ""
    description: str = ""

    researched: bool = field(default=False, repr=False)
    available: bool = field(default=False, repr=False)

    def __post_init__(self) -> None:
        self.research_cost = tuple(self.research_cost)
        self.prerequisites = frozenset(self.prerequisites)
        self.effects = tuple(self.effects)
        if not self.name:
            self.name = self.id.replace("_", " ").title()

    @property
    def is_researchable(self) -> bool:
        return self.unlock_method is UnlockMethod.RESEARCHABLE

    def prerequisites_met(self, researched: set[str] | frozenset[str]) -> bool:
        """Check if all prerequisite technologies have been researched."""
        return self.prerequisites <= researched

    def reset_status(self) -> None:
        self.researched = False
        self.available = False

    def cost_string(self) -> str:
        """Human-readable research cost."""
        if not self.research_cost:
            return "Free"
        return ", ".join(str(cost) for cost in self.research_cost)

    def time_string(self) -> str:
        return format_duration(self.research_duration)

    def effects_description(self) -> str:
        if not self.effects:
            return "No effects"
        return "\n".join(effect.describe() for effect in self.effects)

    def get_effects(self, kind: str) -> list[Effect]:
        """Get all effects of a specific kind."""
        return [effect for effect in self.effects if effect.kind == kind]

    def has_effect(self, kind: str) -> bool:
        return bool(self.get_effects(kind))


def format_duration(seconds: float) -> str:
    """
    Format a research duration for display.

    Examples:
        45 -> "45s"
        90 -> "1m 30s"
        3720 -> "1h 2m"
    """
    if seconds < 60:
        return f"{seconds:.0f}s"

    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}h {minutes}m" if minutes else f"{hours}h"
    return f"{minutes}m {secs}s" if secs else f"{minutes}m"
