"""
Card selection strategies for autoplay.
"""

from collections import Counter
from dataclasses import dataclass
from itertools import combinations

from .hand_detector import HandType

# Hands worth keeping without digging for something better
STRONG_HANDS = {
    HandType.STRAIGHT,
    HandType.FLUSH,
    HandType.FULL_HOUSE,
    HandType.FOUR_OF_A_KIND,
    HandType.STRAIGHT_FLUSH,
    HandType.FIVE_OF_A_KIND,
}


@dataclass
class PlayOption:
    """A possible play with its estimated value."""
    indices: list[int]
    hand_type: HandType
    value: float


class BasicStrategy:
    """
    Greedy strategy: try every play of up to five cards and pick the one
    with the best value against the current enemy.

    Damage counts in full. Shield only counts up to the enemy's attack,
    healing only up to missing health, and pentacles count for a little.
    """

    def __init__(self, pentacle_weight: float = 0.25, max_discard: int = 3):
        self.pentacle_weight = pentacle_weight
        self.max_discard = max_discard

    def evaluate_play(self, battle, indices) -> PlayOption:
        preview = battle.preview(indices)
        state = battle.state
        effects = preview.effects
        enemy = state.roster.current
        player = state.player

        damage = min(effects.damage, max(enemy.health, 0))
        blocked = min(effects.shield, enemy.damage)
        healed = min(effects.healing, player.max_health - player.health)
        pentacles = effects.pentacles_gained - effects.pentacles_spent

        value = damage + blocked + healed + self.pentacle_weight * pentacles
        # A killing blow beats anything else
        if effects.damage >= enemy.health:
            value += 1000
        return PlayOption(list(indices), preview.evaluation.category, value)

    def options(self, battle) -> list[PlayOption]:
        """All plays of 1..max_play_size cards, best first."""
        hand_size = battle.state.hand.size()
        max_cards = min(battle.config.max_play_size, hand_size)
        options = []
        for n in range(1, max_cards + 1):
            for indices in combinations(range(hand_size), n):
                options.append(self.evaluate_play(battle, indices))
        options.sort(key=lambda o: o.value, reverse=True)
        return options

    def select_cards_to_play(self, battle) -> list[int]:
        """Returns indices of cards to play."""
        options = self.options(battle)
        if not options:
            return []
        return options[0].indices

    def select_cards_to_discard(self, battle) -> list[int]:
        """
        Returns indices of cards to discard (empty if should not discard).
        Throws away low unpaired cards unless a strong hand is already held.
        """
        state = battle.state
        if state.discards_remaining <= 0 or state.deck.cards_remaining() == 0:
            return []

        options = self.options(battle)
        if not options or options[0].hand_type in STRONG_HANDS or options[0].value >= 1000:
            return []

        keep = set(options[0].indices)
        cards = state.hand.cards
        value_counts = Counter(c.value for c in cards if not c.is_special)

        # Lonely cards outside the best play, lowest first
        lonely = [i for i, c in enumerate(cards)
                  if i not in keep and not c.is_special and value_counts[c.value] == 1]
        lonely.sort(key=lambda i: cards[i].value)
        return lonely[:min(self.max_discard, state.deck.cards_remaining())]
