"""Driver definitions, driver stats, owned drivers and driver boosts."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

__all__ = [
    "DriverBoost",
    "DriverInventoryItem",
    "DriverStats",
    "OwnedDriverDefinition",
    "OwnedDriverLevelStats",
]


@dataclass(frozen=True)
class DriverStats:
    """Driver stats, separate from part stats."""

    overtaking: int = 0
    defending: int = 0
    qualifying: int = 0
    race_start: int = 0
    tyre_management: int = 0

    def total(self) -> int:
        return (
            self.overtaking
            + self.defending
            + self.qualifying
            + self.race_start
            + self.tyre_management
        )

    def add(self, other: DriverStats) -> DriverStats:
        return DriverStats(
            overtaking=self.overtaking + other.overtaking,
            defending=self.defending + other.defending,
            qualifying=self.qualifying + other.qualifying,
            race_start=self.race_start + other.race_start,
            tyre_management=self.tyre_management + other.tyre_management,
        )

    def __add__(self, other: object) -> DriverStats:
        if not isinstance(other, DriverStats):
            return NotImplemented
        return self.add(other)

    def boosted(self, percentage: int) -> DriverStats:
        """Apply a percentage boost; the bonus is rounded up."""
        mult = percentage / 100.0

        def boost(value: int) -> int:
            return value + math.ceil(value * mult)

        return DriverStats(
            overtaking=boost(self.overtaking),
            defending=boost(self.defending),
            qualifying=boost(self.qualifying),
            race_start=boost(self.race_start),
            tyre_management=boost(self.tyre_management),
        )


@dataclass
class OwnedDriverLevelStats:
    """Stats and upgrade costs of a driver at one level."""

    level: int
    overtaking: int
    defending: int
    qualifying: int
    race_start: int
    tyre_management: int
    cards_required: int = 0
    coins_cost: int = 0
    legacy_points: int = 0

    def to_stats(self) -> DriverStats:
        return DriverStats(
            overtaking=self.overtaking,
            defending=self.defending,
            qualifying=self.qualifying,
            race_start=self.race_start,
            tyre_management=self.tyre_management,
        )

    def total(self) -> int:
        return self.to_stats().total()


@dataclass
class OwnedDriverDefinition:
    """A driver definition, one per name, rarity and season."""

    id: int
    name: str
    season: str
    rarity: str
    series: str
    sort_order: int
    levels: list[OwnedDriverLevelStats] = field(default_factory=list)

    def stats_for_level(self, level: int) -> OwnedDriverLevelStats | None:
        return next((stats for stats in self.levels if stats.level == level), None)

    def max_level(self) -> int:
        return self.levels[-1].level if self.levels else 1


@dataclass(frozen=True)
class DriverInventoryItem:
    """A driver the player owns."""

    id: int
    driver_name: str
    rarity: str
    level: int
    cards_owned: int


@dataclass(frozen=True)
class DriverBoost:
    """A boost applied to a driver."""

    id: int
    driver_name: str
    rarity: str
    percentage: int