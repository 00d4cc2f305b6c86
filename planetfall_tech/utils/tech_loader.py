"""Technology data loader."""

import contextlib
import json
import logging
from pathlib import Path

from planetfall_tech.errors import ContentError, ContentErrorKind
from planetfall_tech.models import ResourceCost, TechCategory, UnlockMethod
from planetfall_tech.models.database import TechDatabase
from planetfall_tech.models.effects import Effect, EffectKind, is_registered
from planetfall_tech.models.technology import TechNode

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = Path(__file__).parent.parent.parent / "data" / "technologies.json"


def parse_time_string(time_str: str | int | float) -> float:
    """
    Parse a research duration to seconds.

    Examples:
        "00:06:23" -> 383.0
        "29:47:49" -> 107269.0
        90 -> 90.0
    """
    if isinstance(time_str, (int, float)) and not isinstance(time_str, bool):
        return float(time_str)

    parts = str(time_str).split(":")
    if len(parts) != 3:
        raise ValueError(f"Invalid time format: {time_str}")

    hours, minutes, seconds = map(int, parts)
    return float(hours * 3600 + minutes * 60 + seconds)


def parse_costs(data: dict | list) -> tuple[ResourceCost, ...]:
    """
    Parse research costs.

    Accepts either {"Iron": 10, "Copper": 5} or
    [{"resource": "Iron", "amount": 10}, ...]; order is preserved.
    """
    if isinstance(data, dict):
        return tuple(ResourceCost(str(k), int(v)) for k, v in data.items())
    return tuple(ResourceCost(str(c["resource"]), int(c["amount"])) for c in data)


def parse_effect(data: dict) -> Effect:
    """
    Parse one effect entry.

    Magnitudes are fractions ("magnitude": 0.25) or percentages
    ("percent": 25); storage expansion uses absolute units.
    """
    kind = data["kind"]
    if not is_registered(kind):
        raise ValueError(f"unknown effect kind {kind!r}")
    with contextlib.suppress(ValueError):
        kind = EffectKind(kind)

    if "percent" in data:
        magnitude = float(data["percent"]) / 100.0
    else:
        magnitude = float(data.get("magnitude", 0.0))

    speed_bonus = data.get("speed_bonus", 0.0)
    if "speed_multiplier" in data:
        speed_bonus = float(data["speed_multiplier"]) - 1.0

    return Effect(
        kind=kind,
        magnitude=magnitude,
        scope=data.get("scope"),
        variant=data.get("variant"),
        speed_bonus=float(speed_bonus),
        unlocks=tuple(data.get("unlocks", ())),
        name=data.get("name", ""),
    )


def parse_tech_entry(data: dict) -> TechNode:
    """
    Parse one technology entry.

    Expected format:
        {
          "id": "improved_mining",
          "name": "Improved Mining",
          "tier": 1,
          "category": "economy",
          "unlock_method": "researchable",
          "research_time": "00:01:30",
          "cost": {"Iron": 10},
          "requires": ["basic_tools"],
          "effects": [{"kind": "resource_efficiency", "scope": "Iron", "percent": 25}]
        }
    """
    unlock_name = str(data.get("unlock_method", "researchable")).upper()

    return TechNode(
        id=str(data["id"]),
        name=data.get("name", ""),
        description=data.get("description", ""),
        tier=int(data.get("tier", 1)),
        category=TechCategory(data.get("category", "economy")),
        research_cost=parse_costs(data.get("cost", {})),
        research_duration=parse_time_string(data.get("research_time", 60)),
        prerequisites=frozenset(data.get("requires", ())),
        unlock_method=UnlockMethod[unlock_name],
        effects=tuple(parse_effect(e) for e in data.get("effects", ())),
    )


def load_technologies(json_path: Path | None = None) -> TechDatabase:
    """Load the technology database from a JSON file.

    Malformed entries are reported as content errors and skipped; the rest of
    the file still loads.
    """
    if json_path is None:
        json_path = DEFAULT_DATABASE

    logger.debug("Loading technologies from %s", json_path)
    with open(json_path) as f:
        data = json.load(f)

    entries = data["technologies"] if isinstance(data, dict) else data
    return build_database(entries)


def build_database(entries: list[dict]) -> TechDatabase:
    nodes: list[TechNode] = []
    errors: list[ContentError] = []

    for index, entry in enumerate(entries):
        tech_id = f"#{index}"
        if isinstance(entry, dict):
            tech_id = str(entry.get("id", tech_id))
        try:
            nodes.append(parse_tech_entry(entry))
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            errors.append(ContentError(tech_id, ContentErrorKind.MALFORMED, str(e)))

    return TechDatabase(nodes, load_errors=errors)
