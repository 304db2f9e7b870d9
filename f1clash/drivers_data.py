"""Driver rarities and the categories they are grouped into."""

from __future__ import annotations

from enum import Enum

__all__ = ["DriverCategory", "DriverRarity"]


class DriverCategory(Enum):
    """Grouping of driver rarities."""

    NORMAL = "Normal"
    LEGENDARY = "Legendary"
    SPECIAL_EDITION = "Special Edition"

    @classmethod
    def all(cls) -> list[DriverCategory]:
        return list(cls)

    def display_name(self) -> str:
        return self.value


class DriverRarity(Enum):
    """Driver rarity; the value is both the label and the stored key."""

    COMMON = "Common"
    RARE = "Rare"
    EPIC = "Epic"
    LEGENDARY = "Legendary"
    PROSPECT_STANDARD = "Prospect Standard"
    PROSPECT_TURBOCHARGED = "Prospect Turbocharged"
    PODIUM_STARS = "Podium Stars"
    PODIUM_STARS_LEGENDS = "Podium Stars Legends"

    def label(self) -> str:
        return self.value

    def css_class(self) -> str:
        return _CSS_CLASSES[self]

    def db_key(self) -> str:
        return self.label()

    @classmethod
    def from_db(cls, value: str) -> DriverRarity | None:
        """Parse a stored rarity key (case-sensitive); None when unknown."""
        return next((member for member in cls if member.value == value), None)

    def category(self) -> DriverCategory:
        if self in (DriverRarity.COMMON, DriverRarity.RARE, DriverRarity.EPIC):
            return DriverCategory.NORMAL
        if self is DriverRarity.LEGENDARY:
            return DriverCategory.LEGENDARY
        return DriverCategory.SPECIAL_EDITION


_CSS_CLASSES = {
    DriverRarity.COMMON: "rarity-common",
    DriverRarity.RARE: "rarity-rare",
    DriverRarity.EPIC: "rarity-epic",
    DriverRarity.LEGENDARY: "rarity-legendary",
    DriverRarity.PROSPECT_STANDARD: "rarity-prospect-std",
    DriverRarity.PROSPECT_TURBOCHARGED: "rarity-prospect-turbo",
    DriverRarity.PODIUM_STARS: "rarity-podium",
    DriverRarity.PODIUM_STARS_LEGENDS: "rarity-podium-legends",
}