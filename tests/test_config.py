"""Tests for settings and deck rule configuration."""

from riftbound.config import DeckRules, Settings


class TestDeckRules:
    def test_defaults(self) -> None:
        rules = Settings().deck_rules()

        assert rules == DeckRules()
        assert (rules.main_minimum, rules.copy_limit, rules.rune_deck_size) == (40, 3, 12)
        assert rules.strict_copy_rule is False
        assert rules.sideboard_max is None

    def test_rules_from_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("DECK_STRICT_COPY_RULE", "true")
        monkeypatch.setenv("DECK_SIDEBOARD_MAX", "8")

        rules = Settings().deck_rules()

        assert rules.strict_copy_rule is True
        assert rules.sideboard_max == 8
