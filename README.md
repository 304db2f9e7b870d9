# f1clash

Tools for planning an F1 Clash garage: a catalogue of car parts and drivers
stored in SQLite, an upgrade calculator, a brute-force setup optimizer, and a
small, anonymous analytics layer that a web front end can feed and query.

The package has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## What is inside

- `f1clash.data`: `StatPriorities` (which part stats to favour), the
  `CARD_COSTS` table, `coin_costs_for_season` (2026 costs for `"2026"`, 2025
  costs for any other season), `max_level_for_rarity`, `calculate_upgrade`
  (returns an `UpgradeInfo`), `calculate_upgrade_cards_only`, `format_coins`
  and the `Rarity` enum.
- `f1clash.drivers_data`: `DriverRarity` (labels, CSS classes, `from_db`
  parsing and `category()`) and `DriverCategory`.
- `f1clash.models.part`: `PartCategory` (in canonical order, with display
  names, slugs and icon paths), `Stats` with pit-stop aware
  `total_performance`, `single_part_total`, `add` and percentage `boosted`,
  `OwnedLevelStats` and `OwnedPartDefinition`.
- `f1clash.models.driver`: `DriverStats`, `OwnedDriverLevelStats`,
  `OwnedDriverDefinition`, `DriverInventoryItem` and `DriverBoost`.
- `f1clash.optimizer_core`: `run_brute_force`, `prune_category`
  (keeps at most `MAX_PARTS_PER_CAT` candidates), `score_part_combo`,
  `DriverPriorities`, `ResolvedPart`, `ResolvedDriver` and `OptimizeResult`.
- `f1clash.catalog`: `Catalog`, which upserts parts and drivers from JSON into
  an SQLite database (never deleting), loads them back as definitions, and
  reads season-to-category mappings. Parse and storage failures raise
  `CatalogError`; `seed_catalog` and `seed_drivers_catalog` log and return
  `False` instead.
- `f1clash.analytics.domain`: `PageEvent`, `FeatureEvent`, `Device` (coarse
  user-agent classification), the abstract `AnalyticsSink` and
  `AnalyticsQuery`, the aggregate result types, `AnalyticsError`, and `fire`
  for recording a feature event as a background task.
- `f1clash.analytics.geoip`: the `GeoIpProvider` interface and `NoopGeoIp`.
- `f1clash.analytics.middleware`: `record_page_event`, which builds and stores
  a `PageEvent` for a finished request, plus `should_skip`,
  `canonicalize_path`, `extract_referrer_host` and `client_ip`.
- `f1clash.analytics.store`: `SqliteAnalytics`, an SQLite-backed sink and
  query backend with `prune`.
- `f1clash.analytics.admin`: `RangeParams.from_query`, `guard`,
  `stats_endpoint`, `time_patterns`, `dashboard` and `error_response` for the
  admin statistics.
- `f1clash.auth`: `get_cookie` and `AuthStatus.from_headers`, which compares
  the `admin_session` cookie with a configured session token.
- `f1clash.error`: `AppError` and its subclasses, and `error_response`, which
  maps them to an HTTP status and a user-facing message.

## Examples

How far can a part be upgraded with the cards you own?

```python
from f1clash.data import calculate_upgrade, format_coins

info = calculate_upgrade(current_level=1, cards_owned=14, series=1,
                         rarity="Common", season="2025")
print(info.reachable_level)            # 3
print(format_coins(info.coins_needed)) # 10K
```

Scoring a combined setup:

```python
from f1clash.models.part import Stats

total = Stats(speed=10, cornering=20, power_unit=30, qualifying=40,
              pit_stop_time=1.0, additional_stat_value=5)
print(total.total_performance())  # 286
```

`run_brute_force` takes the candidate `ResolvedPart`s for each category, the
categories themselves, the driver pairs to consider (pairs of indexes into the
resolved drivers, either of which may be `None`), the resolved drivers, and
the part and driver priorities. Part combinations are compared by the tuple of
the weakest prioritised stat, the sum of the prioritised stats and the total
performance; the best driver pair is then chosen independently. It returns
`None` when a category has no candidates.

Canonicalising paths for analytics:

```python
from f1clash.analytics.middleware import canonicalize_path

canonicalize_path("/inventory/42/level")  # "/inventory/:id/level"
```

## What it does not do

- There is no web server, no HTTP routing and no HTML pages. The analytics,
  auth and error modules provide the logic a web application would call, but
  wiring them to requests is left to that application.
- There is no command-line program.
- Country lookup comes only with `NoopGeoIp`, which never knows the country;
  a real lookup needs your own `GeoIpProvider`.
- There is no model of saved setups or of owned part inventory; the optimizer
  accepts any inventory item that has an `id`.
- Storage is SQLite only.