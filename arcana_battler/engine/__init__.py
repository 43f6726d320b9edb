"""
Arcana battler engine components.
"""

from .deck import Card, SpecialCard, Deck, Hand, Suit, CardKind, SpecialKind, SUITS, VALUES
from .hand_detector import HandType, EvaluationResult, HAND_MULTIPLIERS, evaluate_hand
from .scoring import EffectTotals, Outcome, compute_effects, apply_player_effects, apply_enemy_counterattack, check_outcome
from .special_cards import SPECIAL_CARDS, create_special
from .game import Battle, BattleState, GameConfig, Player, Enemy, EnemyRoster, Phase, DeclineReason
