"""Simulation settings - SimulationConfig dataclass, optionally loaded from YAML."""

from __future__ import annotations

import dataclasses
from dataclasses import asdict, dataclass
from pathlib import Path

import yaml


@dataclass(frozen=True)
class SimulationConfig:
    """All tunable constants of the synthetic market."""
    # Reference price walk
    initial_price: float = 0.5818
    spread: float = 0.0001
    tick_size: float = 0.0001
    price_precision: int = 4
    walk_step: float = 0.00025

    # Order book ladder
    book_levels: int = 20
    base_volume: int = 1000
    max_volume: int = 10000
    high_volume_threshold: int = 5000

    # Footprint clusters
    cluster_half_width: int = 10
    cluster_min_volume: int = 50
    cluster_max_volume: int = 550
    important_threshold: int = 300

    # Trade tape
    trade_jitter: float = 0.0001
    trade_min_volume: int = 20
    trade_max_volume: int = 170
    history_length: int = 8

    # Clock and UI
    interval_sec: float = 1.5
    highlight_sec: float = 3.0

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise ValueError if the settings cannot produce a consistent market."""
        if self.initial_price <= 0:
            raise ValueError(f"initial_price must be positive, got {self.initial_price}")
        if self.spread < 0:
            raise ValueError(f"spread must be non-negative, got {self.spread}")
        if self.tick_size <= 0:
            raise ValueError(f"tick_size must be positive, got {self.tick_size}")
        if self.tick_size < 10 ** -self.price_precision:
            raise ValueError(
                f"tick_size {self.tick_size} is finer than price_precision {self.price_precision}"
            )
        if self.walk_step < 0:
            raise ValueError(f"walk_step must be non-negative, got {self.walk_step}")
        if self.interval_sec <= 0:
            raise ValueError(f"interval_sec must be positive, got {self.interval_sec}")
        if self.book_levels < 1 or self.history_length < 1 or self.cluster_half_width < 0:
            raise ValueError("book_levels and history_length must be >= 1, cluster_half_width >= 0")
        if self.max_volume <= 0 or self.base_volume < 0:
            raise ValueError("max_volume must be positive and base_volume non-negative")
        if self.cluster_max_volume <= self.cluster_min_volume:
            raise ValueError("cluster_max_volume must exceed cluster_min_volume")
        if self.trade_max_volume <= self.trade_min_volume:
            raise ValueError("trade_max_volume must exceed trade_min_volume")

    @classmethod
    def from_yaml(cls, path: str | Path) -> "SimulationConfig":
        """Build a config from a YAML file. Missing file gives the defaults."""
        p = Path(path)
        if not p.exists():
            return cls()
        with open(p, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})

    def to_yaml(self, path: str | Path) -> None:
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(asdict(self), f, default_flow_style=False, allow_unicode=True)

    def to_dict(self) -> dict:
        return asdict(self)

    def replace(self, **overrides) -> "SimulationConfig":
        """Copy with overrides; None values are ignored (unset CLI flags)."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return dataclasses.replace(self, **changes)
