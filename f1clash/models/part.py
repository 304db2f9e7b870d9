"""Car part categories, part stats and part definitions."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

from f1clash.data import StatPriorities

__all__ = [
    "OwnedLevelStats",
    "OwnedPartDefinition",
    "PartCategory",
    "Stats",
]


def _round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


class PartCategory(Enum):
    """Car part categories, in their canonical order.

    The value is the category's slug.
    """

    FRONT_WING = "front_wing"
    BRAKES = "brakes"
    SUSPENSION = "suspension"
    REAR_WING = "rear_wing"
    GEARBOX = "gearbox"
    ENGINE = "engine"
    BATTERY = "battery"

    @classmethod
    def all(cls) -> list[PartCategory]:
        """Every known category in canonical order."""
        return list(cls)

    def _position(self) -> int:
        return list(type(self)).index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, PartCategory):
            return NotImplemented
        return self._position() < other._position()

    def __le__(self, other: object) -> bool:
        if not isinstance(other, PartCategory):
            return NotImplemented
        return self._position() <= other._position()

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, PartCategory):
            return NotImplemented
        return self._position() > other._position()

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, PartCategory):
            return NotImplemented
        return self._position() >= other._position()

    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    def slug(self) -> str:
        return self.value

    def icon_path(self) -> str:
        return f"/static/icons/{self.value}.svg"


_DISPLAY_NAMES = {
    PartCategory.FRONT_WING: "Front Wing",
    PartCategory.BRAKES: "Brakes",
    PartCategory.SUSPENSION: "Suspension",
    PartCategory.REAR_WING: "Rear Wing",
    PartCategory.GEARBOX: "Gearbox",
    PartCategory.ENGINE: "Engine",
    PartCategory.BATTERY: "Battery",
}


def _pit_score(n: float, pit_sum: float) -> int:
    """Pit-stop contribution: round(n + 29 * (n - pit_sum))."""
    return _round_half_away(n + 29.0 * (n - pit_sum))


def _boost_int(value: int, multiplier: float) -> int:
    # Ceiling so any non-zero boost adds at least one point.
    return value + math.ceil(value * multiplier)


@dataclass(frozen=True)
class Stats:
    """Stats that car parts contribute to a setup."""

    speed: int = 0
    cornering: int = 0
    power_unit: int = 0
    qualifying: int = 0
    pit_stop_time: float = 0.0
    additional_stat_value: int = 0

    def _base_sum(self) -> int:
        return (
            self.speed
            + self.cornering
            + self.power_unit
            + self.qualifying
            + self.additional_stat_value
        )

    def total_performance(self) -> int:
        """Combined 7-part score; pit_stop_time is the sum over 7 parts."""
        return self._base_sum() + _pit_score(7.0, self.pit_stop_time)

    def single_part_total(self) -> int:
        """Display total for a single part."""
        return self._base_sum() + _pit_score(1.0, self.pit_stop_time)

    def add(self, other: Stats) -> Stats:
        return Stats(
            speed=self.speed + other.speed,
            cornering=self.cornering + other.cornering,
            power_unit=self.power_unit + other.power_unit,
            qualifying=self.qualifying + other.qualifying,
            pit_stop_time=self.pit_stop_time + other.pit_stop_time,
            additional_stat_value=self.additional_stat_value + other.additional_stat_value,
        )

    def __add__(self, other: object) -> Stats:
        if not isinstance(other, Stats):
            return NotImplemented
        return self.add(other)

    def boosted(self, percentage: int) -> Stats:
        """Apply a percentage boost; pit time drops 0.7s per 100%, extra stat unchanged."""
        mult = percentage / 100.0
        pit = _round_half_away((self.pit_stop_time - 0.7 * mult) * 100.0) / 100.0
        return Stats(
            speed=_boost_int(self.speed, mult),
            cornering=_boost_int(self.cornering, mult),
            power_unit=_boost_int(self.power_unit, mult),
            qualifying=_boost_int(self.qualifying, mult),
            pit_stop_time=pit,
            additional_stat_value=self.additional_stat_value,
        )


@dataclass
class OwnedLevelStats:
    """Stats of one part at one upgrade level."""

    level: int
    speed: int
    cornering: int
    power_unit: int
    qualifying: int
    pit_stop_time: float
    additional_stat_value: int = 0
    additional_stat_details: dict[str, int] = field(default_factory=dict)

    def priority_score(self, priorities: StatPriorities) -> int:
        """Sum of the stats selected in the priorities."""
        selected = (
            (priorities.speed, self.speed),
            (priorities.cornering, self.cornering),
            (priorities.power_unit, self.power_unit),
            (priorities.qualifying, self.qualifying),
        )
        return sum(value for chosen, value in selected if chosen)

    def total_performance(self) -> int:
        return (
            _pit_score(1.0, self.pit_stop_time)
            + self.speed
            + self.cornering
            + self.power_unit
            + self.qualifying
            + self.additional_stat_value
        )


@dataclass
class OwnedPartDefinition:
    """A part definition scoped to a season."""

    id: int
    name: str
    season: str
    category: PartCategory
    series: int
    rarity: str
    sort_order: int
    additional_stat_name: str | None = None
    levels: list[OwnedLevelStats] = field(default_factory=list)

    def stats_for_level(self, level: int) -> OwnedLevelStats | None:
        return next((stats for stats in self.levels if stats.level == level), None)

    def max_level(self) -> int:
        return self.levels[-1].level if self.levels else 1

    def rarity_css_class(self) -> str:
        return {"Rare": "rarity-rare", "Epic": "rarity-epic"}.get(
            self.rarity, "rarity-common"
        )