"""
Combat resolution for the arcana battler.
Turns evaluated cards into effect totals and applies them to the battle state.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from .deck import AnyCard, Suit


class Outcome(Enum):
    CONTINUING = "continuing"
    ENEMY_DEFEATED = "enemy_defeated"
    PLAYER_DEFEATED = "player_defeated"
    RUN_WON = "run_won"


@dataclass(frozen=True)
class EffectTotals:
    """Aggregate effects of one resolved hand."""
    damage: int = 0
    shield: int = 0
    healing: int = 0
    pentacles_gained: int = 0
    pentacles_spent: int = 0
    details: tuple = ()

    def by_suit(self) -> dict[str, int]:
        """Per-suit preview, keyed by the suit that produces each effect."""
        return {
            Suit.SWORDS.value: self.damage,
            Suit.WANDS.value: self.shield,
            Suit.CUPS.value: self.healing,
            Suit.PENTACLES.value: self.pentacles_gained,
        }


@dataclass
class EffectContext:
    """Running totals while a hand is resolved."""
    damage: int = 0
    shield: int = 0
    healing: int = 0
    pentacles_gained: int = 0
    pentacles_spent: int = 0
    details: list[str] = field(default_factory=list)

    def add(self, suit: Suit, amount: int, source: str = ""):
        if suit == Suit.SWORDS:
            self.add_damage(amount, source)
        elif suit == Suit.WANDS:
            self.shield += amount
            if source:
                self.details.append(f"+{amount} Shield ({source})")
        elif suit == Suit.CUPS:
            self.healing += amount
            if source:
                self.details.append(f"+{amount} Healing ({source})")
        elif suit == Suit.PENTACLES:
            self.gain_pentacles(amount, source)

    def add_damage(self, amount: int, source: str = ""):
        self.damage += amount
        if source:
            self.details.append(f"+{amount} Damage ({source})")

    def gain_pentacles(self, amount: int, source: str = ""):
        self.pentacles_gained += amount
        if source:
            self.details.append(f"+{amount} Pentacles ({source})")

    def spend_pentacles(self, amount: int, source: str = ""):
        self.pentacles_spent += amount
        if source:
            self.details.append(f"-{amount} Pentacles ({source})")

    def freeze(self) -> EffectTotals:
        return EffectTotals(
            damage=self.damage,
            shield=self.shield,
            healing=self.healing,
            pentacles_gained=self.pentacles_gained,
            pentacles_spent=self.pentacles_spent,
            details=tuple(self.details),
        )


def compute_effects(cards: list[AnyCard], scoring_indices: Iterable[int],
                    multiplier: int, pentacles: int = 0) -> EffectTotals:
    """
    Calculate the effect totals for a played hand.

    Args:
        cards: The played cards, in evaluation order
        scoring_indices: Positions that receive the multiplier
        multiplier: Hand multiplier from evaluation
        pentacles: Player's pentacles before resolution. Special cards read the
            running balance, so earlier cards in the hand are already counted.
    """
    from .special_cards import apply_special

    scoring = set(scoring_indices)
    ctx = EffectContext()

    for i, card in enumerate(cards):
        if card.is_special:
            balance = pentacles + ctx.pentacles_gained - ctx.pentacles_spent
            apply_special(card, ctx, balance)
            continue
        factor = multiplier if i in scoring else 1
        source = f"{card} x{factor}" if factor > 1 else str(card)
        ctx.add(card.suit, card.value * factor, source)

    return ctx.freeze()


def apply_player_effects(state, effects: EffectTotals) -> None:
    """Apply the player's hand: damage the enemy, set shield, heal, collect pentacles."""
    player = state.player
    state.roster.current.health -= effects.damage
    player.shield = effects.shield
    player.health = min(player.health + effects.healing, player.max_health)
    player.pentacles += effects.pentacles_gained - effects.pentacles_spent


def apply_enemy_counterattack(state) -> int:
    """
    Current enemy strikes back through the player's shield.
    Shield is single-use and always cleared. Returns damage taken.
    """
    player = state.player
    actual_damage = max(0, state.roster.current.damage - player.shield)
    player.health = max(0, player.health - actual_damage)
    player.shield = 0
    return actual_damage


def check_outcome(state) -> Outcome:
    """Determine the round outcome. Enemy health is checked before player health."""
    if state.roster.current.health <= 0:
        if state.roster.has_next():
            return Outcome.ENEMY_DEFEATED
        return Outcome.RUN_WON
    if state.player.health <= 0:
        return Outcome.PLAYER_DEFEATED
    return Outcome.CONTINUING
