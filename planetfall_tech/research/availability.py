"""Dependency graph evaluation: content checks and the available set."""

import logging
from collections.abc import Iterable

from planetfall_tech.errors import ContentError, ContentErrorKind
from planetfall_tech.models.effects import is_registered
from planetfall_tech.models.technology import TechNode

logger = logging.getLogger(__name__)


def recompute_available(
    nodes: Iterable[TechNode],
    researched: set[str] | frozenset[str],
    granted: set[str] | frozenset[str] = frozenset(),
    excluded: set[str] | frozenset[str] = frozenset(),
) -> set[str]:
    """
    Compute which technologies can be researched right now.

    A node is available iff it is not researched, not excluded for content
    errors, all of its prerequisites are researched, and it is either
    researchable or has been explicitly granted.
    """
    available = set()
    for node in nodes:
        if node.id in researched or node.id in excluded:
            continue
        if not node.prerequisites_met(researched):
            continue
        if node.is_researchable or node.id in granted:
            available.add(node.id)
    return available


def validate_nodes(nodes: list[TechNode]) -> tuple[list[TechNode], list[ContentError]]:
    """
    Check raw content for structural errors.

    Returns:
        (unique nodes in load order, content errors). A node that appears in
        any error is considered invalid by the caller; duplicates after the
        first occurrence are dropped from the node list.
    """
    errors: list[ContentError] = []
    unique: dict[str, TechNode] = {}

    for node in nodes:
        if node.id in unique:
            errors.append(ContentError(node.id, ContentErrorKind.DUPLICATE_ID))
            continue
        unique[node.id] = node

    for node in unique.values():
        if node.research_duration <= 0:
            errors.append(
                ContentError(
                    node.id,
                    ContentErrorKind.INVALID_DURATION,
                    f"{node.research_duration}s",
                )
            )
        if node.tier < 1:
            errors.append(
                ContentError(node.id, ContentErrorKind.INVALID_TIER, str(node.tier))
            )
        for cost in node.research_cost:
            if cost.amount < 0:
                errors.append(
                    ContentError(node.id, ContentErrorKind.NEGATIVE_COST, str(cost))
                )
        for effect in node.effects:
            if not is_registered(effect.kind):
                errors.append(
                    ContentError(
                        node.id, ContentErrorKind.UNKNOWN_EFFECT_KIND, str(effect.kind)
                    )
                )
        for prereq in sorted(node.prerequisites - unique.keys()):
            errors.append(
                ContentError(node.id, ContentErrorKind.DANGLING_PREREQUISITE, prereq)
            )

    errors.extend(find_cycles(unique))
    return list(unique.values()), errors


def find_cycles(nodes: dict[str, TechNode]) -> list[ContentError]:
    """Report every node that sits on a prerequisite cycle."""
    # Iterative DFS with colors: 0 = unvisited, 1 = on stack, 2 = done
    color = dict.fromkeys(nodes, 0)
    on_cycle: dict[str, list[str]] = {}

    for root in nodes:
        if color[root]:
            continue
        path: list[str] = []
        stack = [(root, iter(sorted(nodes[root].prerequisites)))]
        color[root] = 1
        path.append(root)

        while stack:
            tech_id, children = stack[-1]
            for child in children:
                if child not in nodes:
                    continue
                if color[child] == 1:
                    cycle = path[path.index(child):]
                    for member in cycle:
                        on_cycle.setdefault(member, cycle + [child])
                elif color[child] == 0:
                    color[child] = 1
                    path.append(child)
                    stack.append((child, iter(sorted(nodes[child].prerequisites))))
                    break
            else:
                color[tech_id] = 2
                path.pop()
                stack.pop()

    return [
        ContentError(tech_id, ContentErrorKind.PREREQUISITE_CYCLE, " -> ".join(cycle))
        for tech_id, cycle in on_cycle.items()
    ]


def report_content_errors(errors: list[ContentError]) -> None:
    """Log aggregated content errors once."""
    if not errors:
        return
    invalid = sorted({error.tech_id for error in errors})
    logger.warning(
        "%d content error(s), excluded %d technologies: %s",
        len(errors),
        len(invalid),
        ", ".join(invalid),
    )
    for error in errors:
        logger.warning("  %s", error)
