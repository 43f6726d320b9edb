#!/usr/bin/env python3
"""
Demo script for the arcana battler.
Shows hand evaluation, effect calculation, a scripted round and a simulation.

Run with: python -m arcana_battler.demo
"""

import logging
import os

from arcana_battler.engine.deck import Card, Suit
from arcana_battler.engine.hand_detector import evaluate_hand
from arcana_battler.engine.scoring import compute_effects
from arcana_battler.engine.special_cards import create_special
from arcana_battler.engine.game import Battle, GameConfig
from arcana_battler.simulator import Simulator


def setup_logging(level: str = None) -> None:
    """Configure logging for the demo. LOG_LEVEL=DEBUG shows every round."""
    level = (level or os.getenv("LOG_LEVEL", "WARNING")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def demo_hand_evaluation():
    """Demonstrate hand evaluation."""
    print("=" * 60)
    print("HAND EVALUATION DEMO")
    print("=" * 60)

    test_hands = [
        # One pair from only two cards
        [Card(Suit.SWORDS, 4), Card(Suit.CUPS, 4)],
        # Three of a kind
        [Card(Suit.SWORDS, 2), Card(Suit.WANDS, 2), Card(Suit.CUPS, 2), Card(Suit.PENTACLES, 5)],
        # Full house
        [Card(Suit.SWORDS, 3), Card(Suit.WANDS, 3), Card(Suit.CUPS, 3),
         Card(Suit.PENTACLES, 2), Card(Suit.SWORDS, 2)],
        # Straight
        [Card(Suit.SWORDS, 1), Card(Suit.CUPS, 2), Card(Suit.WANDS, 3),
         Card(Suit.PENTACLES, 4), Card(Suit.SWORDS, 5)],
        # Straight flush
        [Card(Suit.SWORDS, v) for v in range(1, 6)],
    ]

    for cards in test_hands:
        result = evaluate_hand(cards)
        scoring = [str(cards[i]) for i in sorted(result.scoring_indices)]
        print(f"\nCards: {', '.join(str(c) for c in cards)}")
        print(f"  Hand: {result.label} (x{result.multiplier})")
        print(f"  Scoring cards: {', '.join(scoring) if scoring else 'none'}")


def demo_effects():
    """Demonstrate effect calculation."""
    print("\n" + "=" * 60)
    print("EFFECTS DEMO")
    print("=" * 60)

    cards = [Card(Suit.SWORDS, 4), Card(Suit.WANDS, 4), Card(Suit.CUPS, 1), create_special("Death")]
    result = evaluate_hand(cards)
    for pentacles in (0, 12):
        effects = compute_effects(cards, result.scoring_indices, result.multiplier, pentacles)
        print(f"\nPlayed: {', '.join(str(c) for c in cards)} with {pentacles} pentacles")
        print(f"Detected: {result.label}")
        for line in effects.details:
            print(f"  {line}")
        print(f"  Totals: {effects.by_suit()}")


def demo_battle():
    """Play a few greedy rounds and show the snapshots."""
    print("\n" + "=" * 60)
    print("BATTLE DEMO")
    print("=" * 60)

    battle = Battle(GameConfig(seed=7, special_cards=["Death"]))
    for _ in range(3):
        snap = battle.snapshot()
        enemy = snap.current_enemy
        print(f"\nRound {snap.round} vs {enemy.name} ({enemy.health} hp, hits {enemy.damage})")
        print(f"  Player: {snap.player.health} hp, {snap.player.pentacles} pentacles")
        print(f"  Hand: {', '.join(c.label for c in snap.hand)}")
        print(f"  Preview: {snap.last_evaluation.label} -> {snap.last_evaluation.by_suit()}")

        result = battle.play(range(len(snap.hand)))
        rnd = result.round
        print(f"  Played {rnd.evaluation.label}: dealt {rnd.effects.damage}, "
              f"took {rnd.damage_taken} -> {rnd.outcome.value}")


def demo_simulation(runs: int = 50):
    """Demonstrate batch simulation."""
    print("\n" + "=" * 60)
    print("SIMULATION DEMO")
    print("=" * 60)

    sim = Simulator(seed=42)
    print(sim.run("death_card", verbose=True))
    print(sim.run_batch("standard", runs=runs))


if __name__ == "__main__":
    setup_logging()
    demo_hand_evaluation()
    demo_effects()
    demo_battle()
    demo_simulation()
