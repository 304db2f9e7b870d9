"""Brute-force setup optimizer over owned parts and drivers."""

from __future__ import annotations

import itertools
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, TypeVar

from f1clash.data import StatPriorities
from f1clash.models.driver import DriverInventoryItem, DriverStats
from f1clash.models.part import PartCategory, Stats

__all__ = [
    "MAX_PARTS_PER_CAT",
    "DriverPriorities",
    "OptimizeResult",
    "ResolvedDriver",
    "ResolvedPart",
    "prune_category",
    "run_brute_force",
    "score_part_combo",
]

# Cap on candidates per category so the brute force stays tractable.
MAX_PARTS_PER_CAT = 10

T = TypeVar("T")


class _OwnedItem(Protocol):
    """An owned inventory entry; the optimizer only needs its id."""

    @property
    def id(self) -> int: ...


def _last_max(items: Iterable[T], key: Callable[[T], Any]) -> T | None:
    """The maximum element by key; on ties the last one wins."""
    best: T | None = None
    best_key: Any = None
    for item in items:
        item_key = key(item)
        if best is None or item_key >= best_key:
            best, best_key = item, item_key
    return best


@dataclass(frozen=True)
class ResolvedPart:
    """An owned part together with its effective stats."""

    item: _OwnedItem
    stats: Stats
    rarity_css_class: str


@dataclass(frozen=True)
class ResolvedDriver:
    """An owned driver together with its effective stats."""

    item: DriverInventoryItem
    stats: DriverStats


@dataclass
class OptimizeResult:
    """The best part combination and driver pair found."""

    part_picks: list[tuple[PartCategory, _OwnedItem, Stats, str]]
    driver1: tuple[DriverInventoryItem, DriverStats] | None
    driver2: tuple[DriverInventoryItem, DriverStats] | None
    total_parts: Stats = field(default_factory=Stats)
    total_drivers: DriverStats = field(default_factory=DriverStats)


def prune_category(parts: list[ResolvedPart]) -> list[ResolvedPart]:
    """Keep at most MAX_PARTS_PER_CAT candidates.

    The best part for each of the four performance stats is always kept,
    so single-stat priorities still find the optimum; the remaining slots
    go to the highest total performance.
    """
    if len(parts) <= MAX_PARTS_PER_CAT:
        return parts

    stat_keys: tuple[Callable[[ResolvedPart], int], ...] = (
        lambda p: p.stats.speed,
        lambda p: p.stats.cornering,
        lambda p: p.stats.power_unit,
        lambda p: p.stats.qualifying,
    )
    must = {
        best.item.id
        for key in stat_keys
        if (best := _last_max(parts, key)) is not None
    }

    ranked = sorted(
        parts,
        key=lambda p: (p.item.id not in must, -p.stats.total_performance()),
    )
    return ranked[:MAX_PARTS_PER_CAT]


def score_part_combo(stats: Stats, priorities: StatPriorities) -> tuple[int, int, int]:
    """Score as (min of selected stats, sum of selected stats, total performance)."""
    total = stats.total_performance()
    if not priorities.any_selected():
        return total, total, total
    values = [
        value
        for selected, value in (
            (priorities.speed, stats.speed),
            (priorities.cornering, stats.cornering),
            (priorities.power_unit, stats.power_unit),
            (priorities.qualifying, stats.qualifying),
        )
        if selected
    ]
    return min(values), sum(values), total


@dataclass(frozen=True)
class DriverPriorities:
    """Which driver stats the optimizer should favour."""

    overtaking: bool = False
    defending: bool = False
    qualifying: bool = False
    race_start: bool = False
    tyre_management: bool = False

    def _flags(self, stats: DriverStats | None = None) -> list[tuple[bool, str, int]]:
        s = stats or DriverStats()
        return [
            (self.overtaking, "Overtaking", s.overtaking),
            (self.defending, "Defending", s.defending),
            (self.qualifying, "Qualifying", s.qualifying),
            (self.race_start, "Race Start", s.race_start),
            (self.tyre_management, "Tyre Mgmt", s.tyre_management),
        ]

    def any_selected(self) -> bool:
        return any(selected for selected, _, _ in self._flags())

    def labels(self) -> list[str]:
        return [label for selected, label, _ in self._flags() if selected]

    def score(self, stats: DriverStats) -> tuple[int, int]:
        """Score as (min, sum) of the selected stats, or (total, total) if none."""
        if not self.any_selected():
            total = stats.total()
            return total, total
        values = [value for selected, _, value in self._flags(stats) if selected]
        return min(values), sum(values)


def _pair_stats(
    pair: tuple[int | None, int | None], drivers: Sequence[ResolvedDriver]
) -> DriverStats:
    total = DriverStats()
    for index in pair:
        if index is not None:
            total = total.add(drivers[index].stats)
    return total


def run_brute_force(
    parts_per_cat: Sequence[Sequence[ResolvedPart]],
    categories: Sequence[PartCategory],
    driver_pairs: Sequence[tuple[int | None, int | None]],
    resolved_drivers: Sequence[ResolvedDriver],
    part_priorities: StatPriorities,
    driver_priorities: DriverPriorities,
) -> OptimizeResult | None:
    """Find the best part combination and driver pair.

    Returns None if any category has no candidate parts. Part score always
    dominates driver score, so the two are optimised independently.
    """
    if any(not candidates for candidates in parts_per_cat):
        return None

    best_combo: tuple[ResolvedPart, ...] | None = None
    best_score: tuple[int, int, int] | None = None
    for combo in itertools.product(*parts_per_cat):
        combined = Stats()
        for part in combo:
            combined = combined.add(part.stats)
        score = score_part_combo(combined, part_priorities)
        if best_score is None or score > best_score:
            best_combo, best_score = combo, score

    if best_combo is None:
        return None
    if not driver_pairs:
        raise ValueError("driver_pairs must hold at least one pair")

    best_pair = _last_max(
        driver_pairs,
        key=lambda pair: driver_priorities.score(_pair_stats(pair, resolved_drivers)),
    )
    assert best_pair is not None

    picks = sorted(
        (
            (category, part.item, part.stats, part.rarity_css_class)
            for category, part in zip(categories, best_combo)
        ),
        key=lambda pick: pick[0],
    )
    total_parts = Stats()
    for _, _, stats, _ in picks:
        total_parts = total_parts.add(stats)

    first, second = (
        resolved_drivers[i] if i is not None else None for i in best_pair
    )
    return OptimizeResult(
        part_picks=picks,
        driver1=(first.item, first.stats) if first else None,
        driver2=(second.item, second.stats) if second else None,
        total_parts=total_parts,
        total_drivers=_pair_stats(best_pair, resolved_drivers),
    )