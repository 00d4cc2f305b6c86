"""Simulation configuration."""

import json
from dataclasses import dataclass, field
from pathlib import Path

from planetfall_tech.utils.tech_loader import DEFAULT_DATABASE


@dataclass
class SimulationConfig:
    """Settings for a command line research run."""

    database: Path = DEFAULT_DATABASE
    starting_resources: dict[str, int] = field(
        default_factory=lambda: {"Iron": 200, "Copper": 100, "Crystal": 50}
    )
    capacities: dict[str, int] = field(default_factory=dict)
    tick_seconds: float = 1.0
    apply_research_speed: bool = False
    log_level: str = "INFO"


def load_config(config_path: Path | None = None) -> SimulationConfig:
    """
    Load a simulation configuration.

    Unknown keys are rejected; missing keys keep their defaults. A relative
    database path is resolved against the config file's directory.
    """
    if config_path is None:
        return SimulationConfig()

    with open(config_path) as f:
        data = json.load(f)

    known = set(SimulationConfig.__dataclass_fields__)
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown config keys in {config_path}: {sorted(unknown)}")

    config = SimulationConfig(**data)
    config.database = Path(config.database)
    if not config.database.is_absolute():
        config.database = config_path.parent / config.database
    if config.tick_seconds <= 0:
        raise ValueError(f"tick_seconds must be positive, got {config.tick_seconds}")
    return config
