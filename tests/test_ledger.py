import pytest

from planetfall_tech.ledger import InMemoryLedger, total_costs
from planetfall_tech.models import ResourceCost


def costs(**amounts):
    return [ResourceCost(resource, amount) for resource, amount in amounts.items()]


def test_affordable_checks_every_entry():
    ledger = InMemoryLedger({"Iron": 10, "Copper": 2})

    assert ledger.affordable(costs(Iron=10))
    assert not ledger.affordable(costs(Iron=5, Copper=3))
    assert not ledger.affordable(costs(Crystal=1))
    assert ledger.affordable([])


def test_deduct_is_all_or_nothing():
    ledger = InMemoryLedger({"Iron": 10, "Copper": 2})

    assert not ledger.deduct(costs(Iron=5, Copper=3))
    assert ledger.amounts() == {"Iron": 10, "Copper": 2}

    assert ledger.deduct(costs(Iron=5, Copper=2))
    assert ledger.amounts() == {"Iron": 5, "Copper": 0}


def test_repeated_resource_entries_are_summed():
    ledger = InMemoryLedger({"Iron": 10})
    split = [ResourceCost("Iron", 6), ResourceCost("Iron", 6)]

    assert total_costs(split) == {"Iron": 12}
    assert not ledger.affordable(split)
    assert not ledger.deduct(split)
    assert ledger.amount("Iron") == 10


def test_deposit_respects_capacity():
    ledger = InMemoryLedger({"Iron": 90}, capacities={"Iron": 100})

    assert ledger.deposit("Iron", 25) == 10
    assert ledger.amount("Iron") == 100
    assert ledger.deposit("Copper", 5) == 5

    with pytest.raises(ValueError):
        ledger.deposit("Iron", -1)


def test_lowering_capacity_trims_stock():
    ledger = InMemoryLedger({"Iron": 90})
    ledger.set_capacity("Iron", 50)

    assert ledger.amount("Iron") == 50
    assert ledger.capacity("Iron") == 50
    assert ledger.capacity("Copper") is None
