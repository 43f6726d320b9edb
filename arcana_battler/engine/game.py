"""
Battle state and round loop for the arcana battler.
"""

import logging
import random
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Iterable, Optional

from .deck import Deck, Hand, AnyCard
from .hand_detector import EvaluationResult, evaluate_hand
from .history import BattleHistory
from .scoring import (
    EffectTotals, Outcome, compute_effects, apply_player_effects,
    apply_enemy_counterattack, check_outcome,
)
from .special_cards import create_special

logger = logging.getLogger(__name__)


class Phase(Enum):
    DRAFTING = "drafting"
    RESOLVING = "resolving"
    ROUND_END = "round_end"
    RESET = "reset"


class DeclineReason(Enum):
    INVALID_SELECTION = "invalid_selection"
    NO_DISCARDS = "no_discards"
    STALE_INDEX = "stale_index"
    BUSY = "busy"


DEFAULT_ENEMIES = [(30, 6), (35, 8)]


@dataclass
class GameConfig:
    """Configuration for a battle."""
    max_health: int = 50
    hand_size: int = 5
    max_play_size: int = 5
    starting_discards: int = 2
    enemies: list = None          # [(health, damage)] or [(name, health, damage)]
    # Deck modifications
    suit_values: dict = None      # {Suit: allowed values}
    special_cards: list = None    # Special kinds or names, one card each
    fresh_deck_each_round: bool = True
    seed: Optional[int] = None

    def __post_init__(self):
        if self.enemies is None:
            self.enemies = list(DEFAULT_ENEMIES)
        if not self.enemies:
            raise ValueError("At least one enemy is required")
        if self.hand_size < 1 or self.max_play_size < 1:
            raise ValueError("Hand size and play size must be positive")
        if self.starting_discards < 0:
            raise ValueError("Discards cannot be negative")
        if self.max_health < 1:
            raise ValueError("Max health must be positive")


@dataclass
class Player:
    health: int
    shield: int = 0
    pentacles: int = 0
    max_health: int = 50

    def reset(self) -> None:
        self.health = self.max_health
        self.shield = 0
        self.pentacles = 0


@dataclass
class Enemy:
    name: str
    health: int
    damage: int
    max_health: int = 0  # Baseline health restored on reset

    def __post_init__(self):
        if not self.max_health:
            self.max_health = self.health

    def reset(self) -> None:
        self.health = self.max_health


class EnemyRoster:
    """Ordered enemies plus a cursor on the one being fought."""

    def __init__(self, enemies: list[Enemy]):
        self.enemies = enemies
        self.index = 0

    @classmethod
    def from_config(cls, entries: list) -> "EnemyRoster":
        enemies = []
        for i, entry in enumerate(entries):
            if len(entry) == 3:
                name, health, damage = entry
            else:
                health, damage = entry
                name = f"Enemy {i + 1}"
            enemies.append(Enemy(name=name, health=health, damage=damage))
        return cls(enemies)

    @property
    def current(self) -> Enemy:
        return self.enemies[self.index]

    def has_next(self) -> bool:
        return self.index + 1 < len(self.enemies)

    def advance(self) -> bool:
        """Move to the next enemy. Returns False when none remain."""
        if not self.has_next():
            return False
        self.index += 1
        return True

    def reset(self) -> None:
        self.index = 0
        for enemy in self.enemies:
            enemy.reset()

    def __len__(self) -> int:
        return len(self.enemies)


@dataclass
class BattleState:
    """Everything a battle owns: player, enemies, deck, hand and selection."""
    player: Player
    roster: EnemyRoster
    deck: Deck = field(default_factory=Deck)
    hand: Hand = field(default_factory=Hand)
    discards_remaining: int = 0
    selected: set = field(default_factory=set)  # Card ids
    run: int = 0
    round: int = 0


@dataclass(frozen=True)
class CardView:
    """Presentation-facing description of a held card."""
    id: int
    label: str
    kind: str
    suit: Optional[str]
    value: Optional[int]
    selected: bool
    description: str = ""


@dataclass(frozen=True)
class HandPreview:
    """Evaluation and effect preview for a set of held cards."""
    positions: tuple
    evaluation: EvaluationResult
    effects: EffectTotals

    @property
    def label(self) -> str:
        return self.evaluation.label

    @property
    def scoring_positions(self) -> tuple:
        """Hand positions of the scoring cards."""
        return tuple(p for i, p in enumerate(self.positions)
                     if self.evaluation.is_scoring(i))

    def by_suit(self) -> dict[str, int]:
        return self.effects.by_suit()


@dataclass(frozen=True)
class RoundResult:
    """Result of playing a hand."""
    cards: tuple
    evaluation: EvaluationResult
    effects: EffectTotals
    damage_taken: int
    outcome: Outcome
    enemy_name: str
    enemy_index: int


@dataclass(frozen=True)
class BattleSnapshot:
    player: Player
    current_enemy: Enemy
    enemy_index: int
    enemy_count: int
    hand: tuple
    deck_count: int
    discards_remaining: int
    phase: Phase
    last_evaluation: Optional[HandPreview]
    last_round: Optional[RoundResult]
    run: int
    round: int


@dataclass(frozen=True)
class ActionResult:
    accepted: bool
    snapshot: BattleSnapshot
    reason: Optional[DeclineReason] = None
    round: Optional[RoundResult] = None


class Battle:
    """
    Runs a battle: rounds of draw, select, resolve, then advance or reset.

    Actions never raise for bad input. A declined action leaves the state
    untouched and comes back as ActionResult(accepted=False, reason=...).
    """

    def __init__(self, config: GameConfig = None, rng: random.Random = None,
                 preset_name: str = "standard"):
        self.config = config or GameConfig()
        self.rng = rng or random.Random(self.config.seed)
        self.history = BattleHistory(preset_name=preset_name)

        self.state = BattleState(
            player=Player(health=self.config.max_health, max_health=self.config.max_health),
            roster=EnemyRoster.from_config(self.config.enemies),
        )
        self.phase = Phase.RESET
        self.last_round: Optional[RoundResult] = None
        self._listeners: list[Callable] = []
        self._busy = 0

        self._start_run()

    # Observers and guard

    def subscribe(self, listener: Callable) -> Callable:
        """Call listener(snapshot) after every state change. Returns an unsubscribe function."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    @contextmanager
    def busy(self):
        """Decline play/discard/selection while held, e.g. during an animation."""
        self._busy += 1
        try:
            yield self
        finally:
            self._busy -= 1

    @property
    def is_resolving(self) -> bool:
        return self._busy > 0

    # Inbound actions

    def toggle_selection(self, index: int) -> ActionResult:
        """Select or deselect the card at a hand position."""
        if self.is_resolving:
            return self._decline(DeclineReason.BUSY)
        if not self.state.hand.is_valid_index(index):
            return self._decline_stale([index])

        with self.busy():
            card_id = self.state.hand.cards[index].id
            self.state.selected ^= {card_id}
            return self._accept()

    def clear_selection(self) -> ActionResult:
        if self.is_resolving:
            return self._decline(DeclineReason.BUSY)
        with self.busy():
            self.state.selected.clear()
            return self._accept()

    def discard(self, indices: Iterable[int] = None) -> ActionResult:
        """Discard the selected cards and draw the same number of replacements."""
        if self.is_resolving:
            return self._decline(DeclineReason.BUSY)
        if self.state.discards_remaining <= 0:
            return self._decline(DeclineReason.NO_DISCARDS)
        indices = None if indices is None else set(indices)
        ids = self._selection_ids(indices)
        if ids is None:
            return self._decline_stale(indices)
        if not ids:
            return self._decline(DeclineReason.INVALID_SELECTION)

        with self.busy():
            state = self.state
            discarded = state.hand.remove_ids(ids)
            state.selected.clear()
            drawn = state.deck.draw(len(discarded))
            state.hand.add(drawn)
            state.discards_remaining -= 1

            self.history.add_discard(
                run=state.run,
                round=state.round,
                enemy=state.roster.current.name,
                discarded=[str(c) for c in discarded],
                drawn=[str(c) for c in drawn],
                discards_remaining=state.discards_remaining,
            )
            return self._accept()

    def play(self, indices: Iterable[int] = None) -> ActionResult:
        """
        Play the selected cards (1 to max_play_size).

        Fully resolves before returning: effects, counterattack, outcome and
        the next round's setup.
        """
        if self.is_resolving:
            return self._decline(DeclineReason.BUSY)
        indices = None if indices is None else set(indices)
        ids = self._selection_ids(indices)
        if ids is None:
            return self._decline_stale(indices)
        if not 1 <= len(ids) <= self.config.max_play_size:
            return self._decline(DeclineReason.INVALID_SELECTION)

        with self.busy():
            self.phase = Phase.RESOLVING
            result = self._resolve(ids)
            self.phase = Phase.ROUND_END
            self._finish_round(result.outcome)
            self.last_round = result
            self.phase = Phase.DRAFTING
            return self._accept(round_result=result)

    def new_run(self) -> ActionResult:
        """Abandon the current run and start over from baseline."""
        if self.is_resolving:
            return self._decline(DeclineReason.BUSY)
        with self.busy():
            self.last_round = None
            self._start_run()
            return self._accept()

    # Outbound data

    def preview(self, indices: Iterable[int] = None) -> Optional[HandPreview]:
        """
        Preview the hand a play would make.

        Uses the given positions, else the current selection, else the first
        cards of the hand up to the play size.
        """
        hand = self.state.hand
        if indices is not None:
            positions = sorted(i for i in set(indices) if hand.is_valid_index(i))
        elif self.state.selected:
            positions = hand.positions_of(self.state.selected)
        else:
            positions = list(range(min(self.config.max_play_size, hand.size())))
        if not positions:
            return None

        cards = [hand.cards[i] for i in positions]
        evaluation = evaluate_hand(cards)
        effects = compute_effects(cards, evaluation.scoring_indices, evaluation.multiplier,
                                  pentacles=self.state.player.pentacles)
        return HandPreview(tuple(positions), evaluation, effects)

    def snapshot(self) -> BattleSnapshot:
        state = self.state
        hand_view = tuple(self._card_view(c) for c in state.hand)
        return BattleSnapshot(
            player=replace(state.player),
            current_enemy=replace(state.roster.current),
            enemy_index=state.roster.index,
            enemy_count=len(state.roster),
            hand=hand_view,
            deck_count=state.deck.cards_remaining(),
            discards_remaining=state.discards_remaining,
            phase=self.phase,
            last_evaluation=self.preview(),
            last_round=self.last_round,
            run=state.run,
            round=state.round,
        )

    # Internals

    def _resolve(self, ids: set) -> RoundResult:
        state = self.state
        enemy = state.roster.current
        positions = state.hand.positions_of(ids)
        cards = [state.hand.cards[i] for i in positions]

        evaluation = evaluate_hand(cards)
        effects = compute_effects(cards, evaluation.scoring_indices, evaluation.multiplier,
                                  pentacles=state.player.pentacles)
        apply_player_effects(state, effects)
        damage_taken = apply_enemy_counterattack(state)

        state.hand.remove_ids(ids)
        state.selected.clear()
        outcome = check_outcome(state)

        logger.debug("Round %d: %s x%d -> %s, took %d, outcome %s",
                     state.round, evaluation.label, evaluation.multiplier,
                     effects.by_suit(), damage_taken, outcome.value)

        self.history.add_round_played(
            run=state.run,
            round=state.round,
            enemy=enemy.name,
            cards=[str(c) for c in cards],
            hand_type=evaluation.label,
            multiplier=evaluation.multiplier,
            effects={
                "damage": effects.damage,
                "shield": effects.shield,
                "healing": effects.healing,
                "pentacles_gained": effects.pentacles_gained,
                "pentacles_spent": effects.pentacles_spent,
            },
            damage_taken=damage_taken,
            player_health=state.player.health,
            enemy_health=enemy.health,
        )

        return RoundResult(
            cards=tuple(cards),
            evaluation=evaluation,
            effects=effects,
            damage_taken=damage_taken,
            outcome=outcome,
            enemy_name=enemy.name,
            enemy_index=state.roster.index,
        )

    def _finish_round(self, outcome: Outcome) -> None:
        state = self.state
        enemy = state.roster.current

        if outcome == Outcome.ENEMY_DEFEATED:
            logger.info("%s defeated in round %d", enemy.name, state.round)
            self.history.add_enemy_defeated(state.run, state.round, enemy.name,
                                            overkill=-enemy.health)
            state.roster.advance()
            self._setup_round(fresh=True)

        elif outcome in (Outcome.RUN_WON, Outcome.PLAYER_DEFEATED):
            victory = outcome == Outcome.RUN_WON
            logger.info("Run %d %s in round %d", state.run,
                        "won" if victory else "lost", state.round)
            self.history.add_run_end(
                run=state.run,
                round=state.round,
                enemy=enemy.name,
                victory=victory,
                enemies_defeated=state.roster.index + (1 if victory else 0),
                final_pentacles=state.player.pentacles,
            )
            self.phase = Phase.RESET
            self._start_run()

        else:
            self._setup_round(fresh=self.config.fresh_deck_each_round)

    def _start_run(self) -> None:
        state = self.state
        state.player.reset()
        state.roster.reset()
        state.run += 1
        state.round = 0
        self.history.add_run_start(
            run=state.run,
            player_health=state.player.health,
            enemies=[e.name for e in state.roster.enemies],
        )
        self._setup_round(fresh=True)

    def _setup_round(self, fresh: bool) -> None:
        """
        Deal the next round. A fresh round rebuilds and reshuffles the deck;
        a kept deck is only rebuilt once it has run dry.
        """
        state = self.state
        if fresh or state.deck.cards_remaining() == 0:
            state.deck = self._build_deck()
            state.deck.shuffle(self.rng)
            state.hand.clear()
        needed = self.config.hand_size - state.hand.size()
        if needed > 0:
            state.hand.add(state.deck.draw(needed))
        state.selected.clear()
        state.discards_remaining = self.config.starting_discards
        state.player.shield = 0
        state.round += 1
        self.phase = Phase.DRAFTING

    def _build_deck(self) -> Deck:
        specials = [create_special(kind) for kind in (self.config.special_cards or [])]
        return Deck.create(suit_values=self.config.suit_values, special_cards=specials)

    def _selection_ids(self, indices: Optional[Iterable[int]]) -> Optional[set]:
        """Card ids for the action: given positions, else the current selection. None if stale."""
        if indices is None:
            return set(self.state.selected)
        hand = self.state.hand
        if not all(hand.is_valid_index(i) for i in indices):
            return None
        return hand.ids_at(indices)

    def _card_view(self, card: AnyCard) -> CardView:
        selected = card.id in self.state.selected
        if card.is_special:
            return CardView(card.id, card.label, card.kind.value, None, None,
                            selected, card.description)
        return CardView(card.id, card.label, card.kind.value, card.suit.value,
                        card.value, selected)

    def _emit(self, snapshot: BattleSnapshot) -> None:
        for listener in list(self._listeners):
            listener(snapshot)

    def _accept(self, round_result: RoundResult = None) -> ActionResult:
        snapshot = self.snapshot()
        self._emit(snapshot)
        return ActionResult(accepted=True, snapshot=snapshot, round=round_result)

    def _decline(self, reason: DeclineReason) -> ActionResult:
        logger.debug("Declined action: %s", reason.value)
        return ActionResult(accepted=False, snapshot=self.snapshot(), reason=reason)

    def _decline_stale(self, indices) -> ActionResult:
        logger.warning("Ignoring stale hand positions %s (hand size %d)",
                       sorted(indices), self.state.hand.size())
        return self._decline(DeclineReason.STALE_INDEX)

