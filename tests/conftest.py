import pytest

from planetfall_tech.ledger import InMemoryLedger
from planetfall_tech.models import ResourceCost, TechCategory, UnlockMethod
from planetfall_tech.models.database import TechDatabase
from planetfall_tech.models.effects import Effect, EffectKind
from planetfall_tech.models.technology import TechNode
from planetfall_tech.notifications import RecordingSink
from planetfall_tech.research.scheduler import ResearchScheduler


def make_node(
    tech_id: str,
    *,
    cost: dict[str, int] | None = None,
    duration: float = 10.0,
    requires: tuple[str, ...] = (),
    effects: tuple[Effect, ...] = (),
    tier: int = 1,
    category: TechCategory = TechCategory.ECONOMY,
    unlock_method: UnlockMethod = UnlockMethod.RESEARCHABLE,
) -> TechNode:
    return TechNode(
        id=tech_id,
        tier=tier,
        category=category,
        research_cost=tuple(ResourceCost(r, a) for r, a in (cost or {}).items()),
        research_duration=duration,
        prerequisites=frozenset(requires),
        unlock_method=unlock_method,
        effects=effects,
    )


def iron_bonus(percent: float) -> Effect:
    return Effect(EffectKind.RESOURCE_EFFICIENCY, magnitude=percent / 100, scope="Iron")


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def mining_database() -> TechDatabase:
    """A (no prerequisites) -> B, plus an externally granted Z."""
    return TechDatabase(
        [
            make_node("a", cost={"Iron": 10}, duration=5),
            make_node("b", cost={"Iron": 5}, duration=3, requires=("a",), tier=2),
            make_node(
                "z",
                cost={"Iron": 1},
                duration=2,
                unlock_method=UnlockMethod.EXTERNALLY_GRANTED,
                tier=3,
            ),
        ]
    )


@pytest.fixture
def ledger() -> InMemoryLedger:
    return InMemoryLedger({"Iron": 12})


@pytest.fixture
def scheduler(mining_database, ledger, sink) -> ResearchScheduler:
    return ResearchScheduler(mining_database, ledger, sink)
