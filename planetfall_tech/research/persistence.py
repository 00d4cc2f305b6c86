"""Save and load research progress.

Only ids and the in-flight timer are stored. Availability and effect state
are always re-derived from the technology database on load.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class ResearchSnapshot:
    """Serializable research state."""

    researched: list[str] = field(default_factory=list)
    granted: list[str] = field(default_factory=list)  # Externally unlocked ids
    current: str | None = None
    elapsed: float = 0.0

    def to_dict(self) -> dict:
        return {
            "researched": list(self.researched),
            "granted": list(self.granted),
            "current": self.current,
            "elapsed": self.elapsed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ResearchSnapshot":
        current = data.get("current")
        return cls(
            researched=[str(tech_id) for tech_id in data.get("researched", [])],
            granted=[str(tech_id) for tech_id in data.get("granted", [])],
            current=str(current) if current is not None else None,
            elapsed=float(data.get("elapsed", 0.0)) if current is not None else 0.0,
        )


def save_snapshot(snapshot: ResearchSnapshot, path: Path) -> None:
    path.write_text(json.dumps(snapshot.to_dict(), indent=2))


def load_snapshot(path: Path) -> ResearchSnapshot:
    """Load a snapshot written by ``save_snapshot``."""
    with open(path) as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Invalid research snapshot: {path}")
    return ResearchSnapshot.from_dict(data)
