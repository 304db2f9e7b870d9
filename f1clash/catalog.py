"""Part and driver catalog: seeding from JSON and loading into memory."""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from f1clash.models.driver import OwnedDriverDefinition, OwnedDriverLevelStats
from f1clash.models.part import OwnedLevelStats, OwnedPartDefinition, PartCategory

__all__ = ["Catalog", "CatalogError"]

log = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS part_catalog (
    id                   INTEGER PRIMARY KEY AUTOINCREMENT,
    name                 TEXT    NOT NULL,
    season               TEXT    NOT NULL,
    category             TEXT    NOT NULL,
    series               INTEGER NOT NULL,
    rarity               TEXT    NOT NULL,
    sort_order           INTEGER NOT NULL,
    additional_stat_name TEXT,
    UNIQUE (name, season)
);
CREATE TABLE IF NOT EXISTS part_level_stats (
    part_id                 INTEGER NOT NULL REFERENCES part_catalog(id) ON DELETE CASCADE,
    level                   INTEGER NOT NULL,
    speed                   INTEGER NOT NULL,
    cornering               INTEGER NOT NULL,
    power_unit              INTEGER NOT NULL,
    qualifying              INTEGER NOT NULL,
    pit_stop_time           REAL    NOT NULL,
    additional_stat_value   INTEGER NOT NULL DEFAULT 0,
    additional_stat_details TEXT    NOT NULL DEFAULT '{}',
    PRIMARY KEY (part_id, level)
);
CREATE TABLE IF NOT EXISTS driver_catalog (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    name       TEXT    NOT NULL,
    season     TEXT    NOT NULL,
    rarity     TEXT    NOT NULL,
    series     TEXT    NOT NULL,
    sort_order INTEGER NOT NULL,
    UNIQUE (name, rarity, season)
);
CREATE TABLE IF NOT EXISTS driver_level_stats (
    driver_id       INTEGER NOT NULL REFERENCES driver_catalog(id) ON DELETE CASCADE,
    level           INTEGER NOT NULL,
    overtaking      INTEGER NOT NULL,
    defending       INTEGER NOT NULL,
    qualifying      INTEGER NOT NULL,
    race_start      INTEGER NOT NULL,
    tyre_management INTEGER NOT NULL,
    cards_required  INTEGER NOT NULL DEFAULT 0,
    coins_cost      INTEGER NOT NULL DEFAULT 0,
    legacy_points   INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (driver_id, level)
);
CREATE TABLE IF NOT EXISTS season_categories (
    season   TEXT NOT NULL,
    category TEXT NOT NULL,
    PRIMARY KEY (season, category)
);
"""


class CatalogError(Exception):
    """Raised when catalog data cannot be parsed, stored or loaded."""


# ── JSON parsing ──────────────────────────────────────────────────────────────


def _field(data: dict[str, Any], key: str, kind: type, context: str, default: Any = ...) -> Any:
    if key not in data or (data[key] is None and default is not ...):
        if default is ...:
            raise CatalogError(f"missing field `{key}` in {context}")
        return default
    value = data[key]
    if kind is float:
        valid = isinstance(value, (int, float)) and not isinstance(value, bool)
    elif kind is int:
        valid = isinstance(value, int) and not isinstance(value, bool)
    else:
        valid = isinstance(value, kind)
    if not valid:
        raise CatalogError(f"invalid type for `{key}` in {context}: {value!r}")
    return float(value) if kind is float else value


def _load_seasons(text: str) -> dict[str, list[dict[str, Any]]]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CatalogError(f"invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise CatalogError("expected a JSON object mapping seasons to entries")
    for season, entries in data.items():
        if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
            raise CatalogError(f"season {season!r} must hold a list of objects")
    return data


@dataclass
class _SeedPart:
    name: str
    category: PartCategory
    series: int
    rarity: str
    sort_order: int
    additional_stat_name: str | None
    levels: list[OwnedLevelStats] = field(default_factory=list)


@dataclass
class _SeedDriver:
    name: str
    rarity: str
    series: str
    sort_order: int
    levels: list[OwnedDriverLevelStats] = field(default_factory=list)


def _parse_level(data: dict[str, Any], context: str) -> OwnedLevelStats:
    details = _field(data, "additional_stat_details", dict, context, default={})
    if not all(
        isinstance(k, str) and isinstance(v, int) and not isinstance(v, bool)
        for k, v in details.items()
    ):
        raise CatalogError(f"`additional_stat_details` must map names to integers in {context}")
    # The legacy `drs` field is accepted and ignored.
    return OwnedLevelStats(
        level=_field(data, "level", int, context),
        speed=_field(data, "speed", int, context),
        cornering=_field(data, "cornering", int, context),
        power_unit=_field(data, "power_unit", int, context),
        qualifying=_field(data, "qualifying", int, context),
        pit_stop_time=_field(data, "pit_stop_time", float, context),
        additional_stat_value=_field(data, "additional_stat_value", int, context, default=0),
        additional_stat_details=dict(details),
    )


def _parse_part(data: dict[str, Any]) -> _SeedPart:
    context = f"part {data.get('name')!r}"
    slug = _field(data, "category", str, context)
    try:
        category = PartCategory(slug)
    except ValueError:
        raise CatalogError(f"unknown category {slug!r} in {context}") from None
    levels = _field(data, "levels", list, context)
    return _SeedPart(
        name=_field(data, "name", str, context),
        category=category,
        series=_field(data, "series", int, context),
        rarity=_field(data, "rarity", str, context),
        sort_order=_field(data, "sort_order", int, context),
        additional_stat_name=_field(data, "additional_stat_name", str, context, default=None),
        levels=[_parse_level(_as_object(lvl, context), context) for lvl in levels],
    )


def _parse_driver_level(data: dict[str, Any], context: str) -> OwnedDriverLevelStats:
    return OwnedDriverLevelStats(
        level=_field(data, "level", int, context),
        overtaking=_field(data, "overtaking", int, context),
        defending=_field(data, "defending", int, context),
        qualifying=_field(data, "qualifying", int, context),
        race_start=_field(data, "race_start", int, context),
        tyre_management=_field(data, "tyre_management", int, context),
        cards_required=_field(data, "cards_required", int, context, default=0),
        coins_cost=_field(data, "coins_cost", int, context, default=0),
        legacy_points=_field(data, "legacy_points", int, context, default=0),
    )


def _parse_driver(data: dict[str, Any]) -> _SeedDriver:
    context = f"driver {data.get('name')!r}"
    levels = _field(data, "levels", list, context)
    return _SeedDriver(
        name=_field(data, "name", str, context),
        rarity=_field(data, "rarity", str, context),
        series=_field(data, "series", str, context),
        sort_order=_field(data, "sort_order", int, context),
        levels=[_parse_driver_level(_as_object(lvl, context), context) for lvl in levels],
    )


def _as_object(value: Any, context: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise CatalogError(f"level entries must be objects in {context}")
    return value


# ── Catalog store ─────────────────────────────────────────────────────────────


class Catalog:
    """Catalog of parts, drivers and season categories in an SQLite database."""

    def __init__(self, database: str | Path | sqlite3.Connection = ":memory:") -> None:
        if isinstance(database, sqlite3.Connection):
            self.connection = database
            self._owns_connection = False
        else:
            self.connection = sqlite3.connect(str(database))
            self._owns_connection = True
        self.ensure_schema()

    def __enter__(self) -> Catalog:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_connection:
            self.connection.close()

    def ensure_schema(self) -> None:
        """Create the catalog tables if they do not exist yet."""
        self.connection.executescript(_SCHEMA)

    # ── Parts ────────────────────────────────────────────────────────────────

    def seed_parts_from_str(self, text: str) -> None:
        """Upsert all parts and levels from a parts JSON document; never deletes."""
        seasons = {
            season: [_parse_part(entry) for entry in entries]
            for season, entries in _load_seasons(text).items()
        }
        with self.connection:
            for season, parts in seasons.items():
                for part in parts:
                    self._upsert_part(season, part)
        log.info("Catalog seeded from parts JSON")

    def _upsert_part(self, season: str, part: _SeedPart) -> None:
        try:
            self.connection.execute(
                """INSERT INTO part_catalog
                       (name, season, category, series, rarity, sort_order, additional_stat_name)
                   VALUES (?, ?, ?, ?, ?, ?, ?)
                   ON CONFLICT (name, season) DO UPDATE
                     SET category             = excluded.category,
                         series               = excluded.series,
                         rarity               = excluded.rarity,
                         sort_order           = excluded.sort_order,
                         additional_stat_name = excluded.additional_stat_name""",
                (
                    part.name, season, part.category.slug(), part.series,
                    part.rarity, part.sort_order, part.additional_stat_name,
                ),
            )
            (part_id,) = self.connection.execute(
                "SELECT id FROM part_catalog WHERE name = ? AND season = ?",
                (part.name, season),
            ).fetchone()
        except sqlite3.Error as exc:
            raise CatalogError(f"Failed to upsert part '{part.name}': {exc}") from exc

        for lvl in part.levels:
            try:
                self.connection.execute(
                    """INSERT INTO part_level_stats
                           (part_id, level, speed, cornering, power_unit, qualifying,
                            pit_stop_time, additional_stat_value, additional_stat_details)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                       ON CONFLICT (part_id, level) DO UPDATE
                         SET speed                   = excluded.speed,
                             cornering               = excluded.cornering,
                             power_unit              = excluded.power_unit,
                             qualifying              = excluded.qualifying,
                             pit_stop_time           = excluded.pit_stop_time,
                             additional_stat_value   = excluded.additional_stat_value,
                             additional_stat_details = excluded.additional_stat_details""",
                    (
                        part_id, lvl.level, lvl.speed, lvl.cornering, lvl.power_unit,
                        lvl.qualifying, lvl.pit_stop_time, lvl.additional_stat_value,
                        json.dumps(lvl.additional_stat_details),
                    ),
                )
            except sqlite3.Error as exc:
                raise CatalogError(
                    f"Failed to upsert level {lvl.level} for '{part.name}': {exc}"
                ) from exc

    def seed_catalog(self, path: str | Path = "parts.json") -> bool:
        """Seed parts from a JSON file; logs and returns False on any failure."""
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            log.warning("parts.json not found, skipping catalog seed: %s", exc)
            return False
        try:
            self.seed_parts_from_str(text)
        except CatalogError as exc:
            log.error("Failed to seed parts catalog: %s", exc)
            return False
        return True

    def load_catalog(self) -> list[OwnedPartDefinition]:
        """Load every part of every season, ordered by season and sort order."""
        try:
            part_rows = self.connection.execute(
                """SELECT id, name, season, category, series, rarity, sort_order,
                          additional_stat_name
                   FROM part_catalog
                   ORDER BY season, sort_order"""
            ).fetchall()
            level_rows = self.connection.execute(
                """SELECT part_id, level, speed, cornering, power_unit, qualifying,
                          pit_stop_time, additional_stat_value, additional_stat_details
                   FROM part_level_stats
                   ORDER BY part_id, level"""
            ).fetchall()
        except sqlite3.Error as exc:
            raise CatalogError(f"Failed to load part catalog: {exc}") from exc

        levels_by_part: dict[int, list[OwnedLevelStats]] = {}
        for part_id, level, speed, cornering, power_unit, qualifying, pit, extra, details in level_rows:
            levels_by_part.setdefault(part_id, []).append(
                OwnedLevelStats(
                    level=level,
                    speed=speed,
                    cornering=cornering,
                    power_unit=power_unit,
                    qualifying=qualifying,
                    pit_stop_time=float(pit),
                    additional_stat_value=extra,
                    additional_stat_details=_decode_details(details),
                )
            )

        definitions = []
        for part_id, name, season, category, series, rarity, sort_order, stat_name in part_rows:
            try:
                part_category = PartCategory(category)
            except ValueError:
                raise CatalogError(f"unknown category {category!r} for part '{name}'") from None
            definitions.append(
                OwnedPartDefinition(
                    id=part_id,
                    name=name,
                    season=season,
                    category=part_category,
                    series=series,
                    rarity=rarity,
                    sort_order=sort_order,
                    additional_stat_name=stat_name,
                    levels=levels_by_part.get(part_id, []),
                )
            )
        return definitions

    # ── Drivers ──────────────────────────────────────────────────────────────

    def seed_drivers_from_str(self, text: str) -> None:
        """Upsert all drivers and levels from a drivers JSON document; never deletes."""
        seasons = {
            season: [_parse_driver(entry) for entry in entries]
            for season, entries in _load_seasons(text).items()
        }
        with self.connection:
            for season, drivers in seasons.items():
                for driver in drivers:
                    self._upsert_driver(season, driver)
        log.info("Driver catalog seeded from drivers JSON")

    def _upsert_driver(self, season: str, driver: _SeedDriver) -> None:
        try:
            self.connection.execute(
                """INSERT INTO driver_catalog (name, season, rarity, series, sort_order)
                   VALUES (?, ?, ?, ?, ?)
                   ON CONFLICT (name, rarity, season) DO UPDATE
                     SET series     = excluded.series,
                         sort_order = excluded.sort_order""",
                (driver.name, season, driver.rarity, driver.series, driver.sort_order),
            )
            (driver_id,) = self.connection.execute(
                "SELECT id FROM driver_catalog WHERE name = ? AND rarity = ? AND season = ?",
                (driver.name, driver.rarity, season),
            ).fetchone()
        except sqlite3.Error as exc:
            raise CatalogError(f"Failed to upsert driver '{driver.name}': {exc}") from exc

        for lvl in driver.levels:
            try:
                self.connection.execute(
                    """INSERT INTO driver_level_stats
                           (driver_id, level, overtaking, defending, qualifying, race_start,
                            tyre_management, cards_required, coins_cost, legacy_points)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                       ON CONFLICT (driver_id, level) DO UPDATE
                         SET overtaking      = excluded.overtaking,
                             defending       = excluded.defending,
                             qualifying      = excluded.qualifying,
                             race_start      = excluded.race_start,
                             tyre_management = excluded.tyre_management,
                             cards_required  = excluded.cards_required,
                             coins_cost      = excluded.coins_cost,
                             legacy_points   = excluded.legacy_points""",
                    (
                        driver_id, lvl.level, lvl.overtaking, lvl.defending, lvl.qualifying,
                        lvl.race_start, lvl.tyre_management, lvl.cards_required,
                        lvl.coins_cost, lvl.legacy_points,
                    ),
                )
            except sqlite3.Error as exc:
                raise CatalogError(
                    f"Failed to upsert level {lvl.level} for driver '{driver.name}': {exc}"
                ) from exc

    def seed_drivers_catalog(self, path: str | Path = "drivers.json") -> bool:
        """Seed drivers from a JSON file; logs and returns False on any failure."""
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError:
            log.warning("drivers.json not found — driver catalog not updated")
            return False
        try:
            self.seed_drivers_from_str(text)
        except CatalogError as exc:
            log.error("Failed to seed drivers catalog: %s", exc)
            return False
        return True

    def load_drivers_catalog(self) -> list[OwnedDriverDefinition]:
        """Load every driver of every season, ordered by season and sort order."""
        try:
            driver_rows = self.connection.execute(
                """SELECT id, name, season, rarity, series, sort_order
                   FROM driver_catalog
                   ORDER BY season, sort_order"""
            ).fetchall()
            level_rows = self.connection.execute(
                """SELECT driver_id, level, overtaking, defending, qualifying, race_start,
                          tyre_management, cards_required, coins_cost, legacy_points
                   FROM driver_level_stats
                   ORDER BY driver_id, level"""
            ).fetchall()
        except sqlite3.Error as exc:
            raise CatalogError(f"Failed to load driver catalog: {exc}") from exc

        levels_by_driver: dict[int, list[OwnedDriverLevelStats]] = {}
        for driver_id, *values in level_rows:
            levels_by_driver.setdefault(driver_id, []).append(OwnedDriverLevelStats(*values))

        return [
            OwnedDriverDefinition(
                id=driver_id,
                name=name,
                season=season,
                rarity=rarity,
                series=series,
                sort_order=sort_order,
                levels=levels_by_driver.get(driver_id, []),
            )
            for driver_id, name, season, rarity, series, sort_order in driver_rows
        ]

    # ── Season categories ─────────────────────────────────────────────────────

    def load_season_categories(self) -> dict[str, list[PartCategory]]:
        """Map each season to its categories in canonical order; empty on failure."""
        try:
            rows = self.connection.execute(
                "SELECT season, category FROM season_categories ORDER BY season"
            ).fetchall()
            mapping: dict[str, list[PartCategory]] = {}
            for season, category in rows:
                mapping.setdefault(season, []).append(PartCategory(category))
        except (sqlite3.Error, ValueError) as exc:
            log.warning("Failed to load season categories: %s", exc)
            return {}
        return {season: sorted(cats) for season, cats in mapping.items()}


def _decode_details(raw: str | None) -> dict[str, int]:
    try:
        value = json.loads(raw) if raw else {}
    except json.JSONDecodeError:
        return {}
    if not isinstance(value, dict) or not all(
        isinstance(k, str) and isinstance(v, int) and not isinstance(v, bool)
        for k, v in value.items()
    ):
        return {}
    return value