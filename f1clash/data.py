"""Part stat priorities, the upgrade calculator and coin formatting."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

__all__ = [
    "CARD_COSTS",
    "Rarity",
    "StatPriorities",
    "UpgradeInfo",
    "calculate_upgrade",
    "calculate_upgrade_cards_only",
    "coin_costs_for_season",
    "format_coins",
    "max_level_for_rarity",
]


@dataclass(frozen=True)
class StatPriorities:
    """Which part stats the optimizer should favour."""

    speed: bool = False
    cornering: bool = False
    power_unit: bool = False
    qualifying: bool = False

    def any_selected(self) -> bool:
        return self.speed or self.cornering or self.power_unit or self.qualifying

    def labels(self) -> list[str]:
        flags = (
            (self.speed, "Speed"),
            (self.cornering, "Cornering"),
            (self.power_unit, "Power Unit"),
            (self.qualifying, "Qualifying"),
        )
        return [label for selected, label in flags if selected]


# Cards required to go from level N to N+1 (index 0 is L1 -> L2); the same
# for every rarity and series.
CARD_COSTS: tuple[int, ...] = (4, 10, 20, 50, 100, 200, 400, 1_000, 2_000, 4_000)

# Coin cost from level N to N+1 per series (outer index is series - 1).
_COIN_COSTS_S2025: tuple[tuple[int, ...], ...] = (
    (2_000, 8_000, 35_000, 90_000, 275_000, 800_000, 1_600_000, 2_400_000, 3_200_000, 4_000_000),
    (6_000, 30_000, 95_000, 300_000, 950_000, 1_900_000, 3_750_000, 5_600_000, 7_450_000, 9_300_000),
    (22_000, 45_000, 135_000, 450_000, 1_350_000, 2_800_000, 5_250_000, 7_700_000, 10_150_000, 12_600_000),
    (1_950_000, 3_850_000, 5_800_000, 7_700_000, 15_750_000, 28_000_000, 51_750_000),
    (4_500_000, 9_000_000, 20_000_000, 42_250_000, 139_250_000, 167_000_000, 195_000_000, 223_000_000),
    (790_000, 1_600_000, 2_400_000, 3_200_000, 6_800_000, 19_500_000, 36_250_000, 53_000_000, 69_750_000, 86_500_000),
    (1_950_000, 3_850_000, 5_800_000, 7_700_000, 15_750_000, 28_000_000, 51_750_000, 75_500_000),
    (4_500_000, 9_000_000, 20_000_000, 42_250_000, 139_250_000, 167_000_000, 195_000_000, 223_000_000),
    (9_500_000, 19_000_000, 45_000_000, 105_000_000, 199_000_000, 239_000_000, 278_000_000, 317_000_000),
    (22_000_000, 43_000_000, 65_000_000, 150_000_000, 284_000_000, 341_000_000, 398_000_000),
    (54_000_000, 107_000_000, 161_000_000, 215_000_000, 406_000_000, 487_000_000, 568_000_000),
    (116_000_000, 232_000_000, 348_000_000, 464_000_000, 580_000_000, 696_000_000, 812_000_000),
)

_COIN_COSTS_S2026: tuple[tuple[int, ...], ...] = (
    (3_000, 13_000, 60_000, 190_000, 640_000, 2_100_000, 4_700_000, 7_300_000, 9_900_000, 12_500_000),
    (8_600, 53_000, 190_000, 680_000, 2_300_000, 5_400_000, 11_000_000, 16_600_000, 22_200_000, 27_800_000),
    (35_000, 70_000, 250_000, 910_000, 3_100_000, 7_200_000, 15_000_000, 22_800_000, 30_600_000, 38_400_000),
    (110_000, 220_000, 330_000, 3_300_000, 7_900_000, 17_000_000, 34_000_000, 51_000_000, 68_000_000, 85_000_000),
    (400_000, 810_000, 1_200_000, 4_400_000, 11_000_000, 39_000_000, 82_000_000, 125_000_000, 168_000_000, 211_000_000),
    (1_500_000, 2_900_000, 4_400_000, 5_900_000, 14_000_000, 52_000_000, 110_000_000, 168_000_000),
    (3_800_000, 7_500_000, 11_000_000, 15_000_000, 34_000_000, 69_000_000, 150_000_000, 231_000_000, 312_000_000, 393_000_000),
    (9_000_000, 18_000_000, 46_000_000, 110_000_000, 460_000_000, 550_000_000, 640_000_000, 730_000_000),
    (21_000_000, 41_000_000, 110_000_000, 290_000_000, 610_000_000, 730_000_000, 1_200_000_000, 1_670_000_000),
    (49_000_000, 98_000_000, 150_000_000, 390_000_000, 820_000_000, 1_400_000_000, 2_200_000_000, 3_000_000_000),
    (130_000_000, 260_000_000, 390_000_000, 520_000_000, 1_100_000_000, 1_800_000_000, 2_900_000_000, 4_000_000_000),
    (290_000_000, 580_000_000, 870_000_000, 1_600_000_000, 2_000_000_000, 3_300_000_000, 5_400_000_000),
)


def coin_costs_for_season(season: str) -> tuple[tuple[int, ...], ...]:
    """Coin cost table for a season; unknown seasons use the 2025 costs."""
    return _COIN_COSTS_S2026 if season == "2026" else _COIN_COSTS_S2025


def max_level_for_rarity(rarity: str) -> int:
    """Maximum upgrade level for a rarity; anything unknown counts as Common."""
    return {"Epic": 8, "Rare": 9}.get(rarity, 11)


def _lookup(table: tuple[int, ...], index: int) -> int:
    return table[index] if 0 <= index < len(table) else 0


@dataclass(frozen=True)
class UpgradeInfo:
    """Result of an upgrade calculation."""

    reachable_level: int
    coins_needed: int
    cards_to_next: int


def calculate_upgrade(
    current_level: int,
    cards_owned: int,
    series: int,
    rarity: str,
    season: str,
) -> UpgradeInfo:
    """How far a part can be upgraded with the cards owned, and at what coin cost."""
    max_level = max_level_for_rarity(rarity)
    costs = coin_costs_for_season(season)
    coin_table = costs[series - 1] if 1 <= series <= len(costs) else ()

    cards_remaining = cards_owned
    coins_needed = 0
    reachable_level = current_level
    cards_to_next = 0

    for from_level in range(current_level, max_level):
        card_cost = _lookup(CARD_COSTS, from_level - 1)
        if cards_remaining < card_cost:
            cards_to_next = card_cost - cards_remaining
            break
        cards_remaining -= card_cost
        coins_needed += _lookup(coin_table, from_level - 1)
        reachable_level = from_level + 1

    return UpgradeInfo(reachable_level, coins_needed, cards_to_next)


def calculate_upgrade_cards_only(
    current_level: int, cards_owned: int, max_level: int
) -> tuple[int, int]:
    """Return (reachable_level, cards_to_next) without any coin data."""
    cards_remaining = cards_owned
    reachable = current_level
    for from_level in range(current_level, max_level):
        card_cost = _lookup(CARD_COSTS, from_level - 1)
        if cards_remaining < card_cost:
            return reachable, card_cost - cards_remaining
        cards_remaining -= card_cost
        reachable = from_level + 1
    return reachable, 0


def format_coins(coins: int) -> str:
    """Format a coin amount compactly, e.g. 1_250_000 -> "1.2M"."""
    if coins < 0:
        raise ValueError(f"coin amount cannot be negative: {coins}")
    if coins >= 1_000_000_000:
        return f"{coins / 1_000_000_000:.1f}B"
    if coins >= 1_000_000:
        return f"{coins / 1_000_000:.1f}M"
    if coins >= 1_000:
        return f"{coins / 1_000:.0f}K"
    return str(coins)


class Rarity(Enum):
    """Part rarity."""

    COMMON = "Common"
    RARE = "Rare"
    EPIC = "Epic"

    def label(self) -> str:
        return self.value

    def css_class(self) -> str:
        return f"rarity-{self.value.lower()}"