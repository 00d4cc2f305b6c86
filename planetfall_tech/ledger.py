"""Resource ledger used to pay for research."""

import logging
from collections.abc import Iterable, Mapping
from typing import Protocol

from planetfall_tech.models import ResourceCost

logger = logging.getLogger(__name__)


class ResourceLedger(Protocol):
    """What the research scheduler needs from the colony's resource store.

    Both methods are all-or-nothing over the whole cost list.
    """

    def affordable(self, costs: Iterable[ResourceCost]) -> bool: ...

    def deduct(self, costs: Iterable[ResourceCost]) -> bool: ...


def total_costs(costs: Iterable[ResourceCost]) -> dict[str, int]:
    """Merge cost entries by resource kind."""
    totals: dict[str, int] = {}
    for cost in costs:
        totals[cost.resource] = totals.get(cost.resource, 0) + cost.amount
    return totals


class InMemoryLedger:
    """Simple resource store with optional per-resource capacities."""

    def __init__(
        self,
        amounts: Mapping[str, int] | None = None,
        capacities: Mapping[str, int] | None = None,
    ):
        self._amounts: dict[str, int] = dict(amounts or {})
        self._capacities: dict[str, int] = dict(capacities or {})

    def amount(self, resource: str) -> int:
        return self._amounts.get(resource, 0)

    def capacity(self, resource: str) -> int | None:
        """Storage cap for a resource, None when unbounded."""
        return self._capacities.get(resource)

    def amounts(self) -> dict[str, int]:
        return dict(self._amounts)

    def set_capacity(self, resource: str, capacity: int) -> None:
        self._capacities[resource] = capacity
        if self.amount(resource) > capacity:
            self._amounts[resource] = capacity

    def deposit(self, resource: str, amount: int) -> int:
        """Add resources up to capacity. Returns the amount actually stored."""
        if amount < 0:
            raise ValueError(f"Cannot deposit a negative amount: {amount}")

        current = self.amount(resource)
        cap = self.capacity(resource)
        new_amount = current + amount if cap is None else min(current + amount, cap)
        self._amounts[resource] = new_amount
        return new_amount - current

    def affordable(self, costs: Iterable[ResourceCost]) -> bool:
        """Check if current resources can afford the given costs."""
        return all(
            self.amount(resource) >= amount
            for resource, amount in total_costs(costs).items()
        )

    def deduct(self, costs: Iterable[ResourceCost]) -> bool:
        """Spend resources. Nothing is spent unless every entry is covered."""
        totals = total_costs(costs)
        if any(amount < 0 for amount in totals.values()):
            logger.warning("Refusing to deduct negative costs: %s", totals)
            return False
        if not self.affordable(ResourceCost(r, a) for r, a in totals.items()):
            return False

        for resource, amount in totals.items():
            self._amounts[resource] = self.amount(resource) - amount
        return True
