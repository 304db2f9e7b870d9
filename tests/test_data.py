import pytest

from f1clash.data import (
    CARD_COSTS,
    Rarity,
    StatPriorities,
    calculate_upgrade,
    calculate_upgrade_cards_only,
    coin_costs_for_season,
    format_coins,
    max_level_for_rarity,
)


# --- Upgrade calculator ---


def test_max_level_for_rarity_common():
    assert max_level_for_rarity("Common") == 11


def test_max_level_for_rarity_rare():
    assert max_level_for_rarity("Rare") == 9


def test_max_level_for_rarity_epic():
    assert max_level_for_rarity("Epic") == 8


def test_max_level_for_unknown_rarity_is_common():
    assert max_level_for_rarity("Legendary") == 11


def test_calculate_upgrade_already_at_max():
    info = calculate_upgrade(8, 999, 1, "Epic", "2025")
    assert info.reachable_level == 8
    assert info.coins_needed == 0


def test_calculate_upgrade_no_cards():
    info = calculate_upgrade(1, 0, 1, "Common", "2025")
    assert info.reachable_level == 1
    assert info.coins_needed == 0
    assert info.cards_to_next == 4


def test_calculate_upgrade_exact_cards_for_one_level():
    info = calculate_upgrade(1, 4, 1, "Common", "2025")
    assert info.reachable_level == 2
    assert info.coins_needed == 2_000


def test_calculate_upgrade_two_levels():
    info = calculate_upgrade(1, 14, 1, "Common", "2025")
    assert info.reachable_level == 3
    assert info.coins_needed == 10_000


def test_calculate_upgrade_not_enough_for_next():
    info = calculate_upgrade(1, 3, 1, "Common", "2025")
    assert info.reachable_level == 1
    assert info.coins_needed == 0
    assert info.cards_to_next == 1


def test_calculate_upgrade_series_2_costs():
    info = calculate_upgrade(1, 4, 2, "Common", "2025")
    assert info.reachable_level == 2
    assert info.coins_needed == 6_000


def test_calculate_upgrade_season_2026_costs():
    info = calculate_upgrade(1, 4, 1, "Common", "2026")
    assert info.reachable_level == 2
    assert info.coins_needed == 3_000


def test_calculate_upgrade_unknown_series_costs_no_coins():
    info = calculate_upgrade(1, 14, 99, "Common", "2025")
    assert info.reachable_level == 3
    assert info.coins_needed == 0


def test_calculate_upgrade_past_end_of_coin_table_costs_no_coins():
    # Series 4 in 2025 lists only seven coin costs.
    info = calculate_upgrade(8, 10_000, 4, "Common", "2025")
    assert info.reachable_level == 11
    assert info.coins_needed == 0
    assert info.cards_to_next == 0


def test_calculate_upgrade_all_cards_reaches_max():
    info = calculate_upgrade(1, sum(CARD_COSTS), 1, "Common", "2025")
    assert info.reachable_level == 11
    assert info.coins_needed == sum(coin_costs_for_season("2025")[0])
    assert info.cards_to_next == 0


def test_coin_costs_unknown_season_defaults_to_2025():
    assert coin_costs_for_season("1999") == coin_costs_for_season("2025")
    assert coin_costs_for_season("2026") != coin_costs_for_season("2025")


def test_coin_costs_have_twelve_series():
    assert len(coin_costs_for_season("2025")) == 12
    assert len(coin_costs_for_season("2026")) == 12


def test_cards_only_partial():
    assert calculate_upgrade_cards_only(1, 14, 11) == (3, 20)


def test_cards_only_reaches_max():
    assert calculate_upgrade_cards_only(1, sum(CARD_COSTS), 11) == (11, 0)


def test_cards_only_at_max_already():
    assert calculate_upgrade_cards_only(9, 0, 9) == (9, 0)


# --- format_coins ---


def test_format_coins_small():
    assert format_coins(500) == "500"


def test_format_coins_thousands():
    assert format_coins(2_000) == "2K"


def test_format_coins_millions():
    assert format_coins(1_250_000) == "1.2M"
    assert format_coins(1_750_000) == "1.8M"


def test_format_coins_billions():
    assert format_coins(1_200_000_000) == "1.2B"


def test_format_coins_negative_raises():
    with pytest.raises(ValueError):
        format_coins(-1)


# --- StatPriorities ---


def test_stat_priorities_any_selected_false_when_all_false():
    assert StatPriorities().any_selected() is False


@pytest.mark.parametrize("field", ["speed", "cornering", "power_unit", "qualifying"])
def test_stat_priorities_any_selected_true_when_one_set(field):
    assert StatPriorities(**{field: True}).any_selected() is True


def test_stat_priorities_labels_empty_when_none_selected():
    assert StatPriorities().labels() == []


def test_stat_priorities_labels_correct_order():
    p = StatPriorities(speed=True, cornering=True, power_unit=True, qualifying=True)
    assert p.labels() == ["Speed", "Cornering", "Power Unit", "Qualifying"]


def test_stat_priorities_labels_single():
    assert StatPriorities(qualifying=True).labels() == ["Qualifying"]


# --- Rarity ---


def test_rarity_labels_and_classes():
    assert Rarity.COMMON.label() == "Common"
    assert Rarity.RARE.css_class() == "rarity-rare"
    assert Rarity.EPIC.css_class() == "rarity-epic"
    assert Rarity.COMMON.css_class() == "rarity-common"