"""Tests for catalog filtering, sorting and cache freshness."""

from datetime import datetime, timedelta, timezone

import pytest

from riftbound.services.card_catalog import (
    CardFilters,
    CardSortOption,
    filter_cards,
    matches,
    should_refresh_cache,
    sort_cards,
)

from factories import make_card, make_rune


@pytest.fixture
def catalog():
    return [
        make_card(
            "card_ogn_003",
            name="Ember Wolf",
            energy_cost=2,
            might=3,
            keywords=("Accelerate",),
            set_code="OGN",
            number="003",
        ),
        make_card(
            "card_ogn_001",
            name="Jinx, Rebel",
            domains=("Fury", "Chaos"),
            type="Champion",
            energy_cost=5,
            might=5,
            is_signature=True,
            champion_tag="jinx",
            set_code="OGN",
            number="001",
        ),
        make_card(
            "card_ogn_002",
            name="Zaun Alley",
            domains=("Chaos",),
            type="Battlefield",
            is_battlefield=True,
            rules_text="When you conquer here, draw a card.",
            set_code="OGN",
            number="002",
        ),
        make_rune("card_rune_fury"),
    ]


class TestCardFilters:
    def test_inactive_filters_match_everything(self, catalog) -> None:
        assert not CardFilters().is_active
        assert filter_cards(catalog, CardFilters()) == sort_cards(catalog)

    def test_search_covers_name_text_and_keywords(self, catalog) -> None:
        def names(search: str) -> list[str]:
            return [c.name for c in filter_cards(catalog, CardFilters(search=search))]

        assert names("wolf") == ["Ember Wolf"]
        assert names("CONQUER") == ["Zaun Alley"]
        assert names("accel") == ["Ember Wolf"]

    def test_domain_filter_matches_any_shared_domain(self, catalog) -> None:
        result = filter_cards(catalog, CardFilters(domains={"Chaos"}))

        assert [c.name for c in result] == ["Jinx, Rebel", "Zaun Alley"]

    def test_cost_bounds_exclude_costless_cards_from_max(self, catalog) -> None:
        result = filter_cards(catalog, CardFilters(max_cost=4))

        assert [c.name for c in result] == ["Ember Wolf"]

    def test_might_minimum(self, catalog) -> None:
        result = filter_cards(catalog, CardFilters(min_might=4))

        assert [c.name for c in result] == ["Jinx, Rebel"]

    def test_flag_filters(self, catalog) -> None:
        assert [c.id for c in catalog if matches(c, CardFilters(runes_only=True))] == [
            "card_rune_fury"
        ]
        assert [c.id for c in catalog if matches(c, CardFilters(signatures_only=True))] == [
            "card_ogn_001"
        ]
        assert [c.id for c in catalog if matches(c, CardFilters(battlefields_only=True))] == [
            "card_ogn_002"
        ]


class TestSortCards:
    def test_sort_by_cost(self, catalog) -> None:
        result = sort_cards(catalog, CardSortOption.COST)

        assert [c.energy_cost for c in result] == [None, None, 2, 5]

    def test_sort_by_set_number(self, catalog) -> None:
        result = sort_cards(catalog[:3], CardSortOption.SET_NUMBER)

        assert [c.display_id for c in result] == ["OGN-001", "OGN-002", "OGN-003"]


class TestCacheFreshness:
    def test_empty_cache_needs_refresh(self) -> None:
        assert should_refresh_cache([], datetime.now(timezone.utc))

    def test_fresh_cache(self) -> None:
        now = datetime.now(timezone.utc)

        assert not should_refresh_cache([now - timedelta(hours=23)], now)

    def test_oldest_entry_decides(self) -> None:
        now = datetime.now(timezone.utc)

        assert should_refresh_cache([now, now - timedelta(hours=25)], now)
