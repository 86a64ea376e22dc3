"""
Deck construction rules.

Applies every rule to a deck's three sections and collects all findings.
Rules never short-circuit: a deck that is too small still reports its copy
limit and domain violations in the same result.

The validator is a pure function of its inputs. Limits come from an explicit
DeckRules value rather than global settings.
"""

from collections.abc import Iterable, Sequence

from riftbound.config import DeckRules
from riftbound.models.deck import DeckCard, DeckSection
from riftbound.models.validation import (
    DomainMismatch,
    MainDeckTooSmall,
    MultipleBattlefields,
    RuneDeckWrongSize,
    RuneDomainMismatch,
    SideboardNotEmpty,
    SideboardOverMax,
    TooManyCopies,
    TooManySignatures,
    ValidationError,
    ValidationResult,
    ValidationWarning,
)
from riftbound.services.aggregation import signature_count, total_quantity

DEFAULT_RULES = DeckRules()

# Section label used when the strict copy rule sums Main and Sideboard together
COMBINED_SECTION_LABEL = f"{DeckSection.MAIN.label}+{DeckSection.SIDE.label}"


def validate(
    main_cards: Sequence[DeckCard],
    side_cards: Sequence[DeckCard],
    rune_cards: Sequence[DeckCard],
    legend_champion_tag: str,
    legend_domains: Iterable[str],
    rules: DeckRules = DEFAULT_RULES,
) -> ValidationResult:
    """
    Validate a deck against the construction rules.

    Args:
        main_cards: Main deck cards with quantities
        side_cards: Sideboard cards with quantities
        rune_cards: Rune deck cards with quantities
        legend_champion_tag: Champion tag of the deck's legend
        legend_domains: Domain identity of the deck's legend
        rules: Limits to validate against

    Returns:
        ValidationResult with every error and warning found
    """
    # Findings list legend domains in sorted order
    legend = tuple(sorted(set(legend_domains)))
    errors: list[ValidationError] = []
    warnings: list[ValidationWarning] = []

    # 1. Main deck size
    main_count = total_quantity(main_cards)
    if main_count < rules.main_minimum:
        errors.append(MainDeckTooSmall(current=main_count, minimum=rules.main_minimum))

    # 2. Copy limits, each section on its own
    errors.extend(_copy_limit_errors(main_cards, DeckSection.MAIN.label, rules.copy_limit))
    errors.extend(_copy_limit_errors(side_cards, DeckSection.SIDE.label, rules.copy_limit))
    errors.extend(_copy_limit_errors(rune_cards, DeckSection.RUNE.label, rules.copy_limit))
    if rules.strict_copy_rule:
        errors.extend(
            _copy_limit_errors(
                [*main_cards, *side_cards], COMBINED_SECTION_LABEL, rules.copy_limit
            )
        )

    # 3. Domain identity (runes are checked separately)
    errors.extend(_domain_errors(main_cards, legend))
    errors.extend(_domain_errors(side_cards, legend))

    # 4. Signature cap
    signatures = signature_count(main_cards, legend_champion_tag)
    if rules.signature_includes_sideboard:
        signatures += signature_count(side_cards, legend_champion_tag)
    if signatures > rules.signature_cap:
        errors.append(TooManySignatures(count=signatures, limit=rules.signature_cap))

    # 5. Rune deck size
    rune_count = total_quantity(rune_cards)
    if rune_count != rules.rune_deck_size:
        errors.append(RuneDeckWrongSize(current=rune_count, required=rules.rune_deck_size))

    # 6. Rune domain identity
    legend_set = set(legend)
    for deck_card in rune_cards:
        card = deck_card.card
        if not card.is_rune:
            continue
        if not card.domains <= legend_set:
            errors.append(
                RuneDomainMismatch(
                    card_name=card.name,
                    card_domains=tuple(sorted(card.domains)),
                    legend_domains=legend,
                )
            )

    # 7. Warnings
    battlefields = total_quantity(dc for dc in main_cards if dc.card.is_battlefield)
    if battlefields > 1:
        warnings.append(MultipleBattlefields(count=battlefields))

    side_count = total_quantity(side_cards)
    if side_count > 0:
        warnings.append(SideboardNotEmpty(count=side_count))
    if rules.sideboard_max is not None and side_count > rules.sideboard_max:
        warnings.append(SideboardOverMax(count=side_count, limit=rules.sideboard_max))

    return ValidationResult(errors=tuple(errors), warnings=tuple(warnings))


def _copy_limit_errors(
    cards: Iterable[DeckCard],
    section_label: str,
    limit: int,
) -> list[TooManyCopies]:
    """Group by card name (reprints share the limit) and flag groups over the limit."""
    counts: dict[str, int] = {}
    for deck_card in cards:
        name = deck_card.card.name
        counts[name] = counts.get(name, 0) + deck_card.quantity

    return [
        TooManyCopies(card_name=name, section=section_label, count=count, limit=limit)
        for name, count in counts.items()
        if count > limit
    ]


def _domain_errors(
    cards: Iterable[DeckCard],
    legend_domains: tuple[str, ...],
) -> list[DomainMismatch]:
    """Flag non-rune cards whose domains fall outside the legend's identity."""
    legend_set = set(legend_domains)
    mismatches: list[DomainMismatch] = []
    for deck_card in cards:
        card = deck_card.card
        if card.is_rune:
            continue
        if not card.domains <= legend_set:
            mismatches.append(
                DomainMismatch(
                    card_name=card.name,
                    card_domains=tuple(sorted(card.domains)),
                    legend_domains=legend_domains,
                )
            )
    return mismatches
