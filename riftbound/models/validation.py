"""
Deck validation findings.

Findings are data, not exceptions: an illegal deck is a normal outcome.
Each finding carries the values needed to render its message and cite the
rule it breaks without re-deriving anything from the deck.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, ClassVar


class ValidationErrorKind(str, Enum):
    """Deck construction rule violations."""

    MAIN_DECK_TOO_SMALL = "main_deck_too_small"
    TOO_MANY_COPIES = "too_many_copies"
    DOMAIN_MISMATCH = "domain_mismatch"
    TOO_MANY_SIGNATURES = "too_many_signatures"
    RUNE_DECK_WRONG_SIZE = "rune_deck_wrong_size"
    RUNE_DOMAIN_MISMATCH = "rune_domain_mismatch"


class ValidationWarningKind(str, Enum):
    """Informational findings that never affect legality."""

    MULTIPLE_BATTLEFIELDS = "multiple_battlefields"
    SIDEBOARD_NOT_EMPTY = "sideboard_not_empty"
    SIDEBOARD_OVER_MAX = "sideboard_over_max"


@dataclass(frozen=True)
class ValidationError:
    """Base class for rule violations."""

    kind: ClassVar[ValidationErrorKind]

    @property
    def id(self) -> str:
        """Stable key for this finding."""
        raise NotImplementedError

    @property
    def description(self) -> str:
        """Human-readable message."""
        raise NotImplementedError

    @property
    def rule(self) -> str:
        """Text of the rule this finding violates."""
        raise NotImplementedError

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "id": self.id,
            "message": self.description,
            "rule": self.rule,
            "data": asdict(self),
        }


@dataclass(frozen=True)
class MainDeckTooSmall(ValidationError):
    kind: ClassVar[ValidationErrorKind] = ValidationErrorKind.MAIN_DECK_TOO_SMALL

    current: int
    minimum: int

    @property
    def id(self) -> str:
        return "main_deck_size"

    @property
    def description(self) -> str:
        return f"Main deck has {self.current} cards, but must have at least {self.minimum}"

    @property
    def rule(self) -> str:
        return f"Main deck must have at least {self.minimum} cards"


@dataclass(frozen=True)
class TooManyCopies(ValidationError):
    kind: ClassVar[ValidationErrorKind] = ValidationErrorKind.TOO_MANY_COPIES

    card_name: str
    section: str
    count: int
    limit: int

    @property
    def id(self) -> str:
        return f"copies_{self.card_name}_{self.section}"

    @property
    def description(self) -> str:
        return (
            f"{self.card_name} has {self.count} copies in {self.section}, "
            f"exceeding limit of {self.limit}"
        )

    @property
    def rule(self) -> str:
        return f"Maximum {self.limit} copies of any card per section"


@dataclass(frozen=True)
class DomainMismatch(ValidationError):
    kind: ClassVar[ValidationErrorKind] = ValidationErrorKind.DOMAIN_MISMATCH

    card_name: str
    card_domains: tuple[str, ...]
    legend_domains: tuple[str, ...]

    @property
    def id(self) -> str:
        return f"domain_{self.card_name}"

    @property
    def description(self) -> str:
        return (
            f"{self.card_name} has domains {', '.join(self.card_domains)} "
            f"which don't match legend domains {', '.join(self.legend_domains)}"
        )

    @property
    def rule(self) -> str:
        return "All cards must match legend's domain identity"


@dataclass(frozen=True)
class TooManySignatures(ValidationError):
    kind: ClassVar[ValidationErrorKind] = ValidationErrorKind.TOO_MANY_SIGNATURES

    count: int
    limit: int

    @property
    def id(self) -> str:
        return "signature_count"

    @property
    def description(self) -> str:
        return f"Deck has {self.count} Signature cards, exceeding limit of {self.limit}"

    @property
    def rule(self) -> str:
        return f"Maximum {self.limit} Signature cards matching legend's champion tag"


@dataclass(frozen=True)
class RuneDeckWrongSize(ValidationError):
    kind: ClassVar[ValidationErrorKind] = ValidationErrorKind.RUNE_DECK_WRONG_SIZE

    current: int
    required: int

    @property
    def id(self) -> str:
        return "rune_deck_size"

    @property
    def description(self) -> str:
        return f"Rune deck has {self.current} runes, but must have exactly {self.required}"

    @property
    def rule(self) -> str:
        return f"Rune deck must have exactly {self.required} runes"


@dataclass(frozen=True)
class RuneDomainMismatch(ValidationError):
    kind: ClassVar[ValidationErrorKind] = ValidationErrorKind.RUNE_DOMAIN_MISMATCH

    card_name: str
    card_domains: tuple[str, ...]
    legend_domains: tuple[str, ...]

    @property
    def id(self) -> str:
        return f"rune_domain_{self.card_name}"

    @property
    def description(self) -> str:
        return (
            f"Rune {self.card_name} has domains {', '.join(self.card_domains)} "
            f"which don't match legend domains {', '.join(self.legend_domains)}"
        )

    @property
    def rule(self) -> str:
        return "All runes must match legend's domain identity"


@dataclass(frozen=True)
class ValidationWarning:
    """Base class for informational findings."""

    kind: ClassVar[ValidationWarningKind]

    @property
    def id(self) -> str:
        return self.kind.value

    @property
    def description(self) -> str:
        raise NotImplementedError

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "id": self.id,
            "message": self.description,
            "data": asdict(self),
        }


@dataclass(frozen=True)
class MultipleBattlefields(ValidationWarning):
    kind: ClassVar[ValidationWarningKind] = ValidationWarningKind.MULTIPLE_BATTLEFIELDS

    count: int

    @property
    def description(self) -> str:
        return f"Deck has {self.count} battlefields. You'll choose 1 at game start."


@dataclass(frozen=True)
class SideboardNotEmpty(ValidationWarning):
    kind: ClassVar[ValidationWarningKind] = ValidationWarningKind.SIDEBOARD_NOT_EMPTY

    count: int

    @property
    def description(self) -> str:
        return f"Sideboard has {self.count} cards (informational - not enforced)"


@dataclass(frozen=True)
class SideboardOverMax(ValidationWarning):
    kind: ClassVar[ValidationWarningKind] = ValidationWarningKind.SIDEBOARD_OVER_MAX

    count: int
    limit: int

    @property
    def description(self) -> str:
        return f"Sideboard has {self.count} cards, above the suggested maximum of {self.limit}"


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of validating a deck.

    The deck is legal when there are no errors; warnings never affect legality.
    """

    errors: tuple[ValidationError, ...] = field(default_factory=tuple)
    warnings: tuple[ValidationWarning, ...] = field(default_factory=tuple)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def error_kinds(self) -> set[ValidationErrorKind]:
        """Distinct kinds of errors present."""
        return {error.kind for error in self.errors}
