from riftbound.services.aggregation import (
    DeckWithVotes,
    PublicDeckSort,
    rank_decks,
    section_count,
    section_counts,
    signature_count,
    summarize_votes,
    trending_score,
)
from riftbound.services.deck_codec import (
    DeckFormatError,
    InvalidFormatError,
    InvalidItemFormatError,
    export_deck,
    import_deck,
)
from riftbound.services.deck_validator import validate

__all__ = [
    "DeckFormatError",
    "DeckWithVotes",
    "InvalidFormatError",
    "InvalidItemFormatError",
    "PublicDeckSort",
    "export_deck",
    "import_deck",
    "rank_decks",
    "section_count",
    "section_counts",
    "signature_count",
    "summarize_votes",
    "trending_score",
    "validate",
]
