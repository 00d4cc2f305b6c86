import itertools
import logging

from conftest import make_node
from planetfall_tech.errors import ContentErrorKind
from planetfall_tech.models import ResourceCost, UnlockMethod
from planetfall_tech.models.database import TechDatabase
from planetfall_tech.models.effects import Effect
from planetfall_tech.research.availability import (
    find_cycles,
    recompute_available,
    validate_nodes,
)


def tree():
    return [
        make_node("a"),
        make_node("b", requires=("a",)),
        make_node("c", requires=("a", "b")),
        make_node("d"),
        make_node("g", unlock_method=UnlockMethod.EXTERNALLY_GRANTED),
        make_node("h", requires=("d",), unlock_method=UnlockMethod.EXTERNALLY_GRANTED),
    ]


def test_available_iff_unresearched_with_prerequisites_and_researchable():
    nodes = tree()
    ids = [node.id for node in nodes]

    for size in range(len(ids) + 1):
        for researched in itertools.combinations(ids, size):
            researched = set(researched)
            available = recompute_available(nodes, researched)

            expected = {
                node.id
                for node in nodes
                if node.id not in researched
                and node.prerequisites <= researched
                and node.unlock_method is UnlockMethod.RESEARCHABLE
            }
            assert available == expected


def test_granted_nodes_need_prerequisites():
    nodes = tree()

    assert "h" not in recompute_available(nodes, set(), granted={"h"})
    assert "h" in recompute_available(nodes, {"d"}, granted={"h"})
    assert "g" in recompute_available(nodes, set(), granted={"g"})
    assert "g" not in recompute_available(nodes, {"g"}, granted={"g"})


def test_excluded_nodes_never_available():
    assert "a" not in recompute_available(tree(), set(), excluded={"a"})


def test_validate_reports_structural_errors():
    nodes = [
        make_node("ok"),
        make_node("ok", duration=99),
        make_node("zero", duration=0),
        make_node("dangling", requires=("ghost",)),
        make_node("tier", tier=0),
        make_node("cheap"),
    ]
    nodes[-1].research_cost = (ResourceCost("Iron", -5),)

    unique, errors = validate_nodes(nodes)

    assert [node.id for node in unique] == ["ok", "zero", "dangling", "tier", "cheap"]
    assert unique[0].research_duration == 10.0
    assert {(e.tech_id, e.kind) for e in errors} == {
        ("ok", ContentErrorKind.DUPLICATE_ID),
        ("zero", ContentErrorKind.INVALID_DURATION),
        ("dangling", ContentErrorKind.DANGLING_PREREQUISITE),
        ("tier", ContentErrorKind.INVALID_TIER),
        ("cheap", ContentErrorKind.NEGATIVE_COST),
    }


def test_find_cycles_flags_only_cycle_members():
    nodes = {
        node.id: node
        for node in [
            make_node("root"),
            make_node("x", requires=("root", "z")),
            make_node("y", requires=("x",)),
            make_node("z", requires=("y",)),
            make_node("after", requires=("z",)),
            make_node("self", requires=("self",)),
        ]
    }

    errors = find_cycles(nodes)

    assert {e.tech_id for e in errors} == {"x", "y", "z", "self"}
    assert all(e.kind is ContentErrorKind.PREREQUISITE_CYCLE for e in errors)


def test_database_excludes_invalid_nodes_and_logs_once(caplog):
    with caplog.at_level(logging.WARNING):
        database = TechDatabase(
            [
                make_node("ok"),
                make_node("ok", duration=3),
                make_node("loop_a", requires=("loop_b",)),
                make_node("loop_b", requires=("loop_a",)),
                make_node("child", requires=("loop_a",)),
            ]
        )

    assert database.invalid == {"loop_a", "loop_b"}
    assert database.is_valid("ok")
    assert database["ok"].research_duration == 10.0
    assert len(database) == 4
    summaries = [r for r in caplog.records if "content error" in r.getMessage()]
    assert len(summaries) == 1
    assert recompute_available(database, set(), excluded=database.invalid) == {"ok"}


def test_database_queries():
    database = TechDatabase(
        [
            make_node("a", tier=1),
            make_node("b", tier=2, requires=("a",)),
            make_node("c", tier=2, requires=("a",)),
        ]
    )

    assert [n.id for n in database.nodes_by_tier(2)] == ["b", "c"]
    assert database.tiers() == [1, 2]
    assert [n.id for n in database.dependents("a")] == ["b", "c"]
    assert "a" in database and "x" not in database
    assert database.get("x") is None


def test_unknown_effect_kind_excludes_node():
    database = TechDatabase(
        [
            make_node("ok"),
            make_node("bogus", effects=(Effect("teleportation", magnitude=0.1),)),
        ]
    )

    assert [(e.tech_id, e.kind) for e in database.errors] == [
        ("bogus", ContentErrorKind.UNKNOWN_EFFECT_KIND)
    ]
    assert database.invalid == {"bogus"}
    assert recompute_available(database, set(), excluded=database.invalid) == {"ok"}
