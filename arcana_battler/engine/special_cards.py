"""
Special cards for the arcana battler.
Each special kind has a catalog entry and an effect in the dispatch table.
"""

from dataclasses import dataclass
from typing import Callable, Union

from .deck import SpecialCard, SpecialKind


@dataclass
class SpecialCardDef:
    """Catalog entry for a special card kind."""
    kind: SpecialKind
    name: str
    description: str
    cost: int = 0  # Pentacles consumed when the effect fires


DEATH_DAMAGE = 25
DEATH_CONSOLATION = 3

SPECIAL_CARDS = {
    SpecialKind.DEATH: SpecialCardDef(
        SpecialKind.DEATH,
        "Death",
        "If you have at least 10 pentacles, deals 25 damage to the enemy. "
        "Otherwise, gives you 3 pentacles.",
        cost=10,
    ),
}


def get_special_kind(kind: Union[str, SpecialKind]) -> SpecialKind:
    """Resolve a kind given by enum or by display name."""
    if isinstance(kind, SpecialKind):
        return kind
    try:
        return SpecialKind(kind)
    except ValueError:
        raise KeyError(f"Unknown special card: {kind}. Available: {[k.value for k in SpecialKind]}")


def create_special(kind: Union[str, SpecialKind]) -> SpecialCard:
    """Create a fresh special card from the catalog."""
    entry = SPECIAL_CARDS[get_special_kind(kind)]
    return SpecialCard(
        special=entry.kind,
        name=entry.name,
        description=entry.description,
        cost=entry.cost,
    )


def _death(card: SpecialCard, ctx, pentacles: int) -> None:
    # Rich players pay to strike, poor players get a consolation
    if pentacles >= card.cost:
        ctx.add_damage(DEATH_DAMAGE, card.name)
        ctx.spend_pentacles(card.cost, card.name)
    else:
        ctx.gain_pentacles(DEATH_CONSOLATION, card.name)


SPECIAL_EFFECTS: dict[SpecialKind, Callable] = {
    SpecialKind.DEATH: _death,
}


def apply_special(card: SpecialCard, ctx, pentacles: int) -> None:
    """Dispatch a special card's effect into the running effect context."""
    SPECIAL_EFFECTS[card.special](card, ctx, pentacles)
