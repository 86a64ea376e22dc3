"""Tests for deck domain models."""

from datetime import timedelta

import pytest

from riftbound.models.deck import (
    Deck,
    DeckCard,
    DeckItem,
    DeckSection,
    Vote,
    join_items,
)

from factories import make_card


class TestDeckSection:
    def test_labels(self) -> None:
        assert [section.label for section in DeckSection] == ["Main", "Sideboard", "Runes"]


class TestDeck:
    def test_create_assigns_id_and_timestamps(self) -> None:
        deck = Deck.create("user_1", "Jinx Aggro", "jinx", ["Fury", "Chaos"])

        assert deck.id.startswith("deck_")
        assert deck.is_public is False
        assert deck.created_at == deck.updated_at
        assert deck.created_at.tzinfo is not None
        assert (deck.count_main, deck.count_side, deck.count_runes) == (0, 0, 0)

    def test_create_requires_domains(self) -> None:
        with pytest.raises(ValueError):
            Deck.create("user_1", "No Legend", "jinx", [])

    def test_ids_are_unique(self) -> None:
        ids = {Deck.create("user_1", "Deck", "jinx", ["Fury"]).id for _ in range(20)}

        assert len(ids) == 20

    def test_recompute_counts(self, sample_deck: Deck, sample_items: list[DeckItem]) -> None:
        sample_deck.count_main = 99

        sample_deck.recompute_counts(sample_items)

        assert (sample_deck.count_main, sample_deck.count_side, sample_deck.count_runes) == (
            5,
            1,
            12,
        )

    def test_touch_moves_updated_at(self, sample_deck: Deck) -> None:
        sample_deck.updated_at -= timedelta(minutes=5)
        before = sample_deck.updated_at

        sample_deck.touch()

        assert sample_deck.updated_at > before


class TestDeckItem:
    def test_id_is_derived(self) -> None:
        item = DeckItem("deck_1", "card_ogn_001", DeckSection.SIDE, 2)

        assert item.id == "deckitem_deck_1_card_ogn_001_side"

    def test_same_card_in_two_sections_has_two_ids(self) -> None:
        main = DeckItem("deck_1", "card_1", DeckSection.MAIN, 1)
        side = DeckItem("deck_1", "card_1", DeckSection.SIDE, 1)

        assert main.id != side.id

    @pytest.mark.parametrize("qty", [0, -1])
    def test_quantity_must_be_positive(self, qty: int) -> None:
        with pytest.raises(ValueError):
            DeckItem("deck_1", "card_1", DeckSection.MAIN, qty)


class TestVote:
    def test_id_is_derived(self) -> None:
        assert Vote("deck_1", "user_2").id == "vote_deck_1_user_2"


class TestJoinItems:
    def test_joins_one_section(self, sample_items: list[DeckItem]) -> None:
        cards = {
            "card_ogn_001": make_card("card_ogn_001"),
            "card_ogn_003": make_card("card_ogn_003"),
        }

        joined = join_items(sample_items, cards, DeckSection.MAIN)

        # card_ogn_002 is not in the lookup and is skipped
        assert joined == [DeckCard(cards["card_ogn_001"], 3)]
