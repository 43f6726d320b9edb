"""Shared fixtures for the arcana battler tests."""

from __future__ import annotations

import random

import pytest

from arcana_battler.engine.deck import Card, Suit
from arcana_battler.engine.game import Battle, GameConfig


def rig_hand(battle: Battle, cards: list) -> None:
    """Replace the held cards, clearing any selection."""
    battle.state.hand.cards = list(cards)
    battle.state.selected.clear()


@pytest.fixture
def battle() -> Battle:
    return Battle(GameConfig(), rng=random.Random(1234))


@pytest.fixture
def straight_flush() -> list[Card]:
    return [Card(Suit.SWORDS, value) for value in range(1, 6)]


@pytest.fixture
def rig():
    return rig_hand
