"""Single-flight research scheduler."""

import logging

from planetfall_tech.errors import (
    AlreadyResearchedError,
    InsufficientResourcesError,
    InvalidStateError,
    NoActiveResearchError,
    NotAvailableError,
)
from planetfall_tech.ledger import ResourceLedger
from planetfall_tech.models import TechCategory
from planetfall_tech.models.database import TechDatabase
from planetfall_tech.models.effects import modifier_key
from planetfall_tech.models.technology import TechNode
from planetfall_tech.notifications import NotificationSink, NullSink
from planetfall_tech.research import modifiers
from planetfall_tech.research.availability import recompute_available
from planetfall_tech.research.persistence import ResearchSnapshot

logger = logging.getLogger(__name__)


class ResearchScheduler:
    """
    Owns the researched set and at most one research in flight.

    Time only moves through ``tick``. Every mutating call runs to completion
    before returning and must not be re-entered; callers on several threads
    need their own lock.

    Lifecycle:
    1. ``start_research`` validates the node and deducts its whole cost
    2. ``tick`` accumulates elapsed time and reports progress
    3. ``complete`` marks the node researched, activates its effects,
       re-evaluates availability, then announces completion
    """

    def __init__(
        self,
        database: TechDatabase,
        ledger: ResourceLedger,
        sink: NotificationSink | None = None,
        apply_research_speed: bool = False,
    ):
        self.database = database
        self.ledger = ledger
        self.sink = sink or NullSink()
        self.apply_research_speed = apply_research_speed

        self._researched: set[str] = set()
        self._granted: set[str] = set()
        self._available: set[str] = set()
        self._current: TechNode | None = None
        self._elapsed = 0.0

        self._update_available()

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def current(self) -> TechNode | None:
        return self._current

    @property
    def elapsed(self) -> float:
        return self._elapsed

    @property
    def is_researching(self) -> bool:
        return self._current is not None

    @property
    def progress(self) -> float:
        """Progress on current research, clamped to [0, 1]."""
        if self._current is None:
            return 0.0
        return _progress(self._elapsed, self._current.research_duration)

    def is_researched(self, node: TechNode | str) -> bool:
        return _tech_id(node) in self._researched

    def is_available(self, node: TechNode | str) -> bool:
        return _tech_id(node) in self._available

    def researched_nodes(self) -> list[TechNode]:
        return [node for node in self.database if node.id in self._researched]

    def available_nodes(self) -> list[TechNode]:
        return [node for node in self.database if node.id in self._available]

    def nodes_by_tier(self, tier: int) -> list[TechNode]:
        return self.database.nodes_by_tier(tier)

    def nodes_by_category(self, category: TechCategory) -> list[TechNode]:
        return self.database.nodes_by_category(category)

    def get_modifier(self, key: str) -> float:
        return modifiers.get_modifier(self.researched_nodes(), key)

    def get_total_multiplier(self, key: str) -> float:
        return modifiers.get_total_multiplier(self.researched_nodes(), key)

    def get_modifiers(self, keys: list[str]) -> dict[str, float]:
        return modifiers.collect_modifiers(self.researched_nodes(), keys)

    def unlocked_buildings(self) -> list[str]:
        return modifiers.unlocked_buildings(self.researched_nodes())

    # ── Operations ───────────────────────────────────────────────────────

    def start_research(self, node: TechNode | str) -> TechNode:
        """
        Start researching a technology.

        Raises:
            InvalidStateError: another research is in flight
            AlreadyResearchedError: the technology is already researched
            NotAvailableError: prerequisites unmet, locked, or unknown id
            InsufficientResourcesError: the ledger cannot cover the cost
        """
        tech_id = _tech_id(node)

        if self._current is not None:
            raise InvalidStateError(
                f"Already researching {self._current.name}. "
                "Can only research one tech at a time.",
                tech_id,
            )
        if tech_id in self._researched:
            raise AlreadyResearchedError(f"{tech_id} is already researched", tech_id)
        if tech_id not in self._available:
            raise NotAvailableError(
                f"{tech_id} is not available for research "
                "(prerequisites not met or locked)",
                tech_id,
            )

        tech = self.database[tech_id]
        if not self.ledger.affordable(tech.research_cost):
            raise InsufficientResourcesError(
                f"Not enough resources to research {tech.name} "
                f"(needs {tech.cost_string()})",
                tech_id,
            )
        if not self.ledger.deduct(tech.research_cost):
            raise InsufficientResourcesError(
                f"Failed to consume resources for {tech.name}", tech_id
            )

        self._current = tech
        self._elapsed = 0.0
        logger.info("Started researching %s (%s)", tech.name, tech.time_string())
        self.sink.started_research(tech)
        return tech

    def tick(self, delta: float) -> TechNode | None:
        """
        Advance research by ``delta`` seconds.

        Returns the technology completed by this tick, if any.
        """
        if delta < 0:
            raise ValueError(f"Cannot tick backwards: {delta}")
        if self._current is None:
            return None

        tech = self._current
        if self.apply_research_speed:
            delta *= self.get_total_multiplier(
                modifier_key("ResearchSpeed", tech.category.label)
            )

        self._elapsed += delta
        self.sink.progress_changed(tech, _progress(self._elapsed, tech.research_duration))

        if self._elapsed >= tech.research_duration:
            return self.complete()
        return None

    def complete(self) -> TechNode:
        """Complete current research and apply its effects."""
        if self._current is None:
            raise NoActiveResearchError("No research in progress")

        tech = self._current
        self._researched.add(tech.id)
        tech.researched = True

        # A failing hook must not leave the node half-completed.
        for effect in tech.effects:
            try:
                effect.activate(tech)
            except Exception:
                logger.exception(
                    "Effect %s failed to activate for %s", effect.kind, tech.name
                )

        self._current = None
        self._elapsed = 0.0
        self._update_available()

        logger.info("Completed research: %s", tech.name)
        self.sink.researched(tech)
        return tech

    def cancel(self) -> TechNode:
        """Cancel current research. Spent resources are not refunded."""
        if self._current is None:
            raise NoActiveResearchError("No research to cancel")

        tech = self._current
        self._current = None
        self._elapsed = 0.0

        logger.info("Cancelled research: %s", tech.name)
        self.sink.cancelled(tech)
        return tech

    def unlock_externally(self, node: TechNode | str) -> bool:
        """
        Make a technology researchable outside the normal tree, e.g. as a
        mission reward. It still has to be researched.

        Returns False (and logs why) when nothing changed.
        """
        tech_id = _tech_id(node)
        tech = self.database.get(tech_id)

        if tech is None or not self.database.is_valid(tech_id):
            logger.warning("Cannot unlock %s: unknown or invalid technology", tech_id)
            return False
        if tech_id in self._researched:
            logger.warning("%s is already researched", tech.name)
            return False
        if not tech.prerequisites_met(self._researched):
            logger.warning("Cannot unlock %s: prerequisites not met", tech.name)
            return False
        if tech_id in self._available:
            logger.info("%s is already available", tech.name)
            return False

        self._granted.add(tech_id)
        self._update_available()
        logger.info("Unlocked %s for research", tech.name)
        return True

    def reset_all(self) -> None:
        """Forget all research progress. Spent resources are not refunded."""
        self._researched.clear()
        self._granted.clear()
        self._current = None
        self._elapsed = 0.0

        for tech in self.database:
            tech.reset_status()

        self._update_available()
        logger.info("Reset all research progress")

    # ── Persistence ──────────────────────────────────────────────────────

    def snapshot(self) -> ResearchSnapshot:
        return ResearchSnapshot(
            researched=[tech.id for tech in self.researched_nodes()],
            granted=[t.id for t in self.database if t.id in self._granted],
            current=self._current.id if self._current else None,
            elapsed=self._elapsed,
        )

    def restore(self, snapshot: ResearchSnapshot) -> None:
        """
        Replace the research state with a saved one.

        Availability is re-derived from the restored researched set. No
        resources are deducted and no effects are re-activated.
        """
        self.reset_all()

        for tech_id in snapshot.researched:
            if not self.database.is_valid(tech_id):
                logger.warning("Skipping unknown researched technology %s", tech_id)
                continue
            self._researched.add(tech_id)
            self.database[tech_id].researched = True

        for tech_id in snapshot.granted:
            if self.database.is_valid(tech_id) and tech_id not in self._researched:
                self._granted.add(tech_id)

        self._update_available()

        if snapshot.current is not None:
            if snapshot.current in self._available:
                tech = self.database[snapshot.current]
                self._current = tech
                self._elapsed = min(max(snapshot.elapsed, 0.0), tech.research_duration)
            else:
                logger.warning(
                    "Dropping in-flight research %s: not available", snapshot.current
                )

        logger.info(
            "Restored %d researched technologies%s",
            len(self._researched),
            f", researching {self._current.name}" if self._current else "",
        )

    # ── Internal ─────────────────────────────────────────────────────────

    def _update_available(self) -> None:
        """Re-evaluate availability and notify about every transition."""
        self._granted -= self._researched
        new_available = recompute_available(
            self.database,
            self._researched,
            granted=self._granted,
            excluded=self.database.invalid,
        )
        changed = new_available ^ self._available
        self._available = new_available

        for tech in self.database:
            tech.available = tech.id in new_available
            if tech.id in changed:
                self.sink.availability_changed(tech, tech.available)

        logger.debug("%d technologies available for research", len(new_available))


def _tech_id(node: TechNode | str) -> str:
    return node if isinstance(node, str) else node.id


def _progress(elapsed: float, duration: float) -> float:
    if duration <= 0:
        return 1.0
    return min(max(elapsed / duration, 0.0), 1.0)
