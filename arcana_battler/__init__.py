"""
Arcana Battler
"""

from .engine.deck import Card, SpecialCard, Deck, Hand, Suit, SpecialKind
from .engine.hand_detector import HandType, EvaluationResult, evaluate_hand
from .engine.scoring import EffectTotals, Outcome, compute_effects
from .engine.game import Battle, GameConfig, ActionResult, BattleSnapshot, DeclineReason, Phase

__version__ = "0.1.0"
