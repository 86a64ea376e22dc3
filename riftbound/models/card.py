from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Card:
    """
    A card from the catalog.

    Attributes:
        id: Globally unique card id (e.g., "card_ogn_001")
        name: Card name; reprints share a name across ids
        type: Card category (Champion, Action, Ally, Equipment, Battlefield, Rune, ...)
        domains: Domain tags (Fury, Mind, Valor, Spirit, Wild, ...)
        energy_cost: Energy cost, if the card has one
        might: Might value, if the card has one
        keywords: Rules keywords
        tags: Free-form tags
        rules_text: Printed rules text
        is_signature: True for signature cards tied to a champion
        champion_tag: Champion this signature card belongs to
        is_battlefield: True for battlefield cards
        is_rune: True for rune cards
        set_code: Set code (e.g., "OGN")
        number: Collector number within set
        rarity: Rarity, if known
    """

    id: str
    name: str
    type: str
    domains: frozenset[str] = field(default_factory=frozenset)
    energy_cost: int | None = None
    might: int | None = None
    keywords: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    rules_text: str = ""
    is_signature: bool = False
    champion_tag: str | None = None
    is_battlefield: bool = False
    is_rune: bool = False
    set_code: str = ""
    number: str = ""
    rarity: str | None = None

    @property
    def display_id(self) -> str:
        """Set code and collector number, e.g. "OGN-042"."""
        return f"{self.set_code}-{self.number}"
