from dataclasses import dataclass

import pytest

from f1clash.data import StatPriorities
from f1clash.models.driver import DriverInventoryItem, DriverStats
from f1clash.models.part import PartCategory, Stats
from f1clash.optimizer_core import (
    MAX_PARTS_PER_CAT,
    DriverPriorities,
    ResolvedDriver,
    ResolvedPart,
    prune_category,
    run_brute_force,
    score_part_combo,
)


@dataclass(frozen=True)
class OwnedPart:
    id: int
    part_name: str
    level: int
    cards_owned: int


def make_part(id_, speed, cornering, power_unit, qualifying):
    return ResolvedPart(
        item=OwnedPart(id=id_, part_name=f"Part {id_}", level=8, cards_owned=0),
        stats=Stats(
            speed=speed,
            cornering=cornering,
            power_unit=power_unit,
            qualifying=qualifying,
            pit_stop_time=0.30,
            additional_stat_value=0,
        ),
        rarity_css_class="rarity-epic",
    )


def make_driver(id_, total):
    per = total // 5
    return ResolvedDriver(
        item=DriverInventoryItem(
            id=id_, driver_name=f"Driver {id_}", rarity="Epic", level=3, cards_owned=0
        ),
        stats=DriverStats(
            overtaking=per,
            defending=per,
            qualifying=per,
            race_start=per,
            tyre_management=total - per * 4,
        ),
    )


def build_driver_pairs(drivers):
    pairs = [(None, None)]
    for i in range(len(drivers)):
        pairs.append((i, None))
        for j in range(i + 1, len(drivers)):
            pairs.append((i, j))
    return pairs


def build_series12_data():
    categories = [
        PartCategory.ENGINE,
        PartCategory.FRONT_WING,
        PartCategory.REAR_WING,
        PartCategory.SUSPENSION,
        PartCategory.BRAKES,
        PartCategory.GEARBOX,
    ]
    parts_per_cat = [
        [make_part(1, 48, 19, 19, 21), make_part(2, 50, 20, 20, 23),
         make_part(3, 16, 15, 42, 17), make_part(4, 18, 17, 47, 19)],
        [make_part(10, 46, 20, 19, 17), make_part(11, 48, 21, 20, 18),
         make_part(12, 17, 42, 15, 16), make_part(13, 19, 45, 16, 17)],
        [make_part(20, 42, 16, 15, 17), make_part(21, 45, 17, 16, 18),
         make_part(22, 11, 46, 12, 13), make_part(23, 12, 48, 13, 14)],
        [make_part(30, 49, 17, 18, 20), make_part(31, 51, 18, 19, 21),
         make_part(32, 21, 17, 48, 21), make_part(33, 21, 46, 19, 17)],
        [make_part(40, 19, 17, 49, 17), make_part(41, 20, 18, 51, 18),
         make_part(42, 16, 42, 17, 14), make_part(43, 17, 45, 18, 15)],
        [make_part(50, 42, 15, 17, 16), make_part(51, 44, 16, 18, 17),
         make_part(52, 17, 20, 46, 19), make_part(53, 19, 22, 50, 21)],
    ]
    drivers = [
        make_driver(1, 350),
        make_driver(2, 330),
        make_driver(3, 325),
        make_driver(4, 325),
        make_driver(5, 315),
        make_driver(6, 280),
    ]
    return parts_per_cat, categories, drivers


def run(priorities, driver_priorities=DriverPriorities()):
    parts, categories, drivers = build_series12_data()
    return run_brute_force(
        parts, categories, build_driver_pairs(drivers), drivers, priorities, driver_priorities
    )


def test_speed_preset_picks_fastest_part_per_category():
    result = run(StatPriorities(speed=True))
    assert [p[0] for p in result.part_picks] == [
        PartCategory.FRONT_WING,
        PartCategory.BRAKES,
        PartCategory.SUSPENSION,
        PartCategory.REAR_WING,
        PartCategory.GEARBOX,
        PartCategory.ENGINE,
    ]
    assert [p[1].id for p in result.part_picks] == [11, 41, 31, 21, 51, 2]
    assert result.total_parts.speed == 258


def test_power_unit_preset_picks_strongest_power_units():
    result = run(StatPriorities(power_unit=True))
    assert [p[1].id for p in result.part_picks] == [11, 41, 32, 21, 53, 4]
    assert result.total_parts.power_unit == 232


def test_total_parts_is_sum_of_picks():
    result = run(StatPriorities(cornering=True, qualifying=True))
    assert result.total_parts.speed == sum(p[2].speed for p in result.part_picks)
    assert result.total_parts.pit_stop_time == pytest.approx(1.8)
    assert all(p[3] == "rarity-epic" for p in result.part_picks)


def test_multi_priority_result_not_worse_than_other_combo():
    priorities = StatPriorities(speed=True, qualifying=True)
    parts, _, _ = build_series12_data()
    result = run(priorities)
    alternative = Stats()
    for candidates in parts:
        alternative = alternative.add(candidates[0].stats)
    assert score_part_combo(result.total_parts, priorities) >= score_part_combo(
        alternative, priorities
    )


def test_default_driver_priorities_pick_highest_total_pair():
    result = run(StatPriorities(speed=True))
    assert result.driver1[0].id == 1
    assert result.driver2[0].id == 2
    assert result.total_drivers.total() == 680


def test_no_drivers_gives_empty_driver_slots():
    parts, categories, _ = build_series12_data()
    result = run_brute_force(
        parts, categories, [(None, None)], [], StatPriorities(), DriverPriorities()
    )
    assert result.driver1 is None
    assert result.driver2 is None
    assert result.total_drivers.total() == 0


def test_driver_tie_prefers_last_pair():
    drivers = [make_driver(1, 100), make_driver(2, 100)]
    parts, categories, _ = build_series12_data()
    result = run_brute_force(
        parts, categories, [(0, None), (1, None)], drivers,
        StatPriorities(), DriverPriorities(),
    )
    assert result.driver1[0].id == 2
    assert result.driver2 is None


def test_empty_category_returns_none():
    parts, categories, drivers = build_series12_data()
    parts[2] = []
    assert run_brute_force(
        parts, categories, build_driver_pairs(drivers), drivers,
        StatPriorities(), DriverPriorities(),
    ) is None


def test_score_part_combo_without_priorities_uses_total():
    stats = Stats(speed=10, qualifying=5, pit_stop_time=7.0)
    assert score_part_combo(stats, StatPriorities()) == (22, 22, 22)


def test_score_part_combo_with_priorities():
    stats = Stats(speed=10, qualifying=5, pit_stop_time=7.0)
    prio = StatPriorities(speed=True, qualifying=True)
    assert score_part_combo(stats, prio) == (5, 15, 22)


def test_prune_keeps_short_lists_unchanged():
    parts = [make_part(i, i, i, i, i) for i in range(MAX_PARTS_PER_CAT)]
    assert prune_category(parts) == parts


def test_prune_keeps_stat_leaders_then_best_totals():
    parts = [make_part(i, 10 + i, 10 + i, 10 + i, 10 + i) for i in range(1, 12)]
    parts.append(make_part(99, 100, 0, 0, 0))
    pruned = prune_category(parts)
    assert len(pruned) == MAX_PARTS_PER_CAT
    assert [p.item.id for p in pruned] == [99, 11, 10, 9, 8, 7, 6, 5, 4, 3]


def test_driver_priorities_labels_in_order():
    prio = DriverPriorities(
        overtaking=True, defending=True, qualifying=True, race_start=True, tyre_management=True
    )
    assert prio.labels() == ["Overtaking", "Defending", "Qualifying", "Race Start", "Tyre Mgmt"]
    assert DriverPriorities().labels() == []


def test_driver_priorities_any_selected():
    assert DriverPriorities().any_selected() is False
    assert DriverPriorities(race_start=True).any_selected() is True


def test_driver_priorities_score():
    stats = DriverStats(10, 20, 30, 40, 50)
    assert DriverPriorities().score(stats) == (150, 150)
    assert DriverPriorities(defending=True, race_start=True).score(stats) == (20, 60)