from riftbound.models.card import Card
from riftbound.models.deck import (
    Deck,
    DeckCard,
    DeckItem,
    DeckSection,
    Vote,
    deck_item_id,
    join_items,
    vote_id,
)
from riftbound.models.failure import (
    ApiResponse,
    FailureDetail,
    FailureKind,
    KnownError,
    OutcomeType,
    RecordConflictError,
    RecordNotFoundError,
    RecordStoreError,
    classify_store_error,
)
from riftbound.models.validation import (
    ValidationError,
    ValidationErrorKind,
    ValidationResult,
    ValidationWarning,
    ValidationWarningKind,
)

__all__ = [
    "ApiResponse",
    "Card",
    "Deck",
    "DeckCard",
    "DeckItem",
    "DeckSection",
    "FailureDetail",
    "FailureKind",
    "KnownError",
    "OutcomeType",
    "RecordConflictError",
    "RecordNotFoundError",
    "RecordStoreError",
    "ValidationError",
    "ValidationErrorKind",
    "ValidationResult",
    "ValidationWarning",
    "ValidationWarningKind",
    "Vote",
    "classify_store_error",
    "deck_item_id",
    "join_items",
    "vote_id",
]
