from dataclasses import dataclass

from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True, slots=True)
class DeckRules:
    """
    Deck construction limits.

    Passed explicitly into the validator so alternate limits can be exercised
    without touching process-wide state.

    Attributes:
        main_minimum: Minimum number of cards in the main deck
        copy_limit: Maximum copies of a card name per section
        strict_copy_rule: Also enforce copy_limit across Main+Sideboard combined
        signature_cap: Maximum signature cards matching the legend's champion tag
        signature_includes_sideboard: Count sideboard signatures toward the cap
        rune_deck_size: Exact size of the rune deck
        sideboard_max: Sideboard size cap (None = unconstrained)
    """

    main_minimum: int = 40
    copy_limit: int = 3
    strict_copy_rule: bool = False
    signature_cap: int = 3
    signature_includes_sideboard: bool = False
    rune_deck_size: int = 12
    sideboard_max: int | None = None


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "Riftbound"
    debug: bool = False

    database_url: str = "sqlite+aiosqlite:///./riftbound.db"

    ai_api_base_url: str = "https://api.riftbound.com"
    ai_api_timeout: float = 30.0

    rules_edition: str = "1.1-100125"

    # Deck construction rules (DECK_MAIN_MINIMUM, DECK_COPY_LIMIT, ...)
    deck_main_minimum: int = 40
    deck_copy_limit: int = 3
    deck_strict_copy_rule: bool = False
    deck_signature_cap: int = 3
    deck_signature_includes_sideboard: bool = False
    deck_rune_deck_size: int = 12
    deck_sideboard_max: int | None = None

    def deck_rules(self) -> DeckRules:
        """Build the validator rule set from the configured values."""
        return DeckRules(
            main_minimum=self.deck_main_minimum,
            copy_limit=self.deck_copy_limit,
            strict_copy_rule=self.deck_strict_copy_rule,
            signature_cap=self.deck_signature_cap,
            signature_includes_sideboard=self.deck_signature_includes_sideboard,
            rune_deck_size=self.deck_rune_deck_size,
            sideboard_max=self.deck_sideboard_max,
        )


settings = Settings()


# =============================================================================
# CARD CACHE
# =============================================================================

# Cached card catalog older than this is refreshed from the record store
CARD_CACHE_MAX_AGE_HOURS = 24
