"""Database of all technologies in the game."""

import logging
from collections.abc import Iterable, Iterator

from planetfall_tech.errors import ContentError, ContentErrorKind
from planetfall_tech.models import TechCategory
from planetfall_tech.models.technology import TechNode
from planetfall_tech.research.availability import (
    report_content_errors,
    validate_nodes,
)

logger = logging.getLogger(__name__)


class TechDatabase:
    """
    Ordered, validated collection of technologies.

    Built once at content-load time. Structural problems are collected in
    ``errors``; the offending technologies stay listed but are marked
    ``invalid`` so they never become available. For duplicate ids the first
    definition wins and later ones are dropped.
    """

    def __init__(
        self,
        nodes: Iterable[TechNode],
        load_errors: Iterable[ContentError] = (),
    ):
        unique, errors = validate_nodes(list(nodes))
        errors = [*load_errors, *errors]
        self._nodes: dict[str, TechNode] = {node.id: node for node in unique}
        self.errors: list[ContentError] = errors
        self.invalid: frozenset[str] = frozenset(
            error.tech_id
            for error in errors
            if error.kind is not ContentErrorKind.DUPLICATE_ID
        )

        logger.info("Loaded %d technologies", len(self._nodes))
        report_content_errors(errors)

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[TechNode]:
        return iter(self._nodes.values())

    def __contains__(self, tech_id: object) -> bool:
        return tech_id in self._nodes

    def get(self, tech_id: str) -> TechNode | None:
        return self._nodes.get(tech_id)

    def __getitem__(self, tech_id: str) -> TechNode:
        return self._nodes[tech_id]

    @property
    def ids(self) -> list[str]:
        return list(self._nodes)

    def is_valid(self, tech_id: str) -> bool:
        return tech_id in self._nodes and tech_id not in self.invalid

    def nodes_by_tier(self, tier: int) -> list[TechNode]:
        return [node for node in self._nodes.values() if node.tier == tier]

    def nodes_by_category(self, category: TechCategory) -> list[TechNode]:
        return [node for node in self._nodes.values() if node.category is category]

    def tiers(self) -> list[int]:
        return sorted({node.tier for node in self._nodes.values()})

    def dependents(self, tech_id: str) -> list[TechNode]:
        """Technologies that list ``tech_id`` as a direct prerequisite."""
        return [node for node in self._nodes.values() if tech_id in node.prerequisites]
