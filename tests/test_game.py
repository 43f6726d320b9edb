"""Tests for the battle round loop, action guards and run resets."""

from __future__ import annotations

import random

import pytest

from arcana_battler.engine.deck import SUITS, Card, Suit
from arcana_battler.engine.game import Battle, DeclineReason, GameConfig, Phase
from arcana_battler.engine.hand_detector import HandType
from arcana_battler.engine.scoring import Outcome
from arcana_battler.engine.special_cards import create_special


def held_ids(battle: Battle) -> set[int]:
    return {c.id for c in battle.state.hand}


def test_new_battle_deals_first_round(battle: Battle) -> None:
    snap = battle.snapshot()

    assert snap.phase is Phase.DRAFTING
    assert len(snap.hand) == 5
    assert snap.deck_count == 15
    assert snap.discards_remaining == 2
    assert (snap.run, snap.round) == (1, 1)
    assert snap.player.health == 50
    assert snap.current_enemy.health == 30
    assert (snap.enemy_index, snap.enemy_count) == (0, 2)


def test_straight_flush_defeats_first_enemy(battle: Battle, rig, straight_flush) -> None:
    rig(battle, straight_flush)

    result = battle.play(range(5))

    assert result.accepted
    rnd = result.round
    assert rnd.evaluation.category is HandType.STRAIGHT_FLUSH
    assert rnd.effects.damage == 75
    assert rnd.damage_taken == 6
    assert rnd.outcome is Outcome.ENEMY_DEFEATED

    snap = result.snapshot
    assert snap.enemy_index == 1
    assert snap.current_enemy.health == 35
    assert snap.player.health == 44
    assert len(snap.hand) == 5
    assert snap.discards_remaining == 2
    assert snap.round == 2
    assert snap.last_round is rnd


def test_winning_the_run_resets_everything(battle: Battle, rig, straight_flush) -> None:
    battle.state.roster.advance()
    battle.state.player.pentacles = 7
    battle.state.player.health = 20
    rig(battle, straight_flush)

    result = battle.play(range(5))

    assert result.round.outcome is Outcome.RUN_WON
    snap = result.snapshot
    assert snap.run == 2
    assert snap.round == 1
    assert snap.enemy_index == 0
    assert snap.player.health == 50
    assert snap.player.pentacles == 0
    assert [e.health for e in battle.state.roster.enemies] == [30, 35]
    assert len(snap.hand) == 5
    assert snap.phase is Phase.DRAFTING


def test_player_defeat_resets_everything(battle: Battle, rig) -> None:
    battle.state.player.health = 3
    battle.state.roster.current.health = 12
    rig(battle, [Card(Suit.CUPS, 1)])

    result = battle.play([0])

    assert result.round.outcome is Outcome.PLAYER_DEFEATED
    snap = result.snapshot
    assert snap.run == 2
    assert snap.player.health == 50
    assert snap.current_enemy.health == 30


def test_simultaneous_knockout_favours_the_player(battle: Battle, rig, straight_flush) -> None:
    battle.state.player.health = 3
    rig(battle, straight_flush)

    result = battle.play(range(5))

    assert result.round.outcome is Outcome.ENEMY_DEFEATED
    assert result.snapshot.player.health == 0
    assert result.snapshot.enemy_index == 1

    rig(battle, [Card(Suit.SWORDS, 1)])
    follow_up = battle.play([0])

    assert follow_up.round.outcome is Outcome.PLAYER_DEFEATED
    assert follow_up.snapshot.run == 2


def test_shield_blocks_once(battle: Battle, rig) -> None:
    rig(battle, [Card(Suit.WANDS, 5), Card(Suit.WANDS, 4)])

    result = battle.play([0, 1])

    assert result.round.effects.shield == 9
    assert result.round.damage_taken == 0
    assert battle.state.player.health == 50
    assert battle.state.player.shield == 0


def test_healing_is_capped(battle: Battle, rig) -> None:
    battle.state.player.health = 48
    rig(battle, [Card(Suit.CUPS, 5), Card(Suit.CUPS, 5)])

    battle.play([0, 1])

    assert battle.state.player.health == 50 - 6


def test_play_uses_selection_by_card_id(battle: Battle) -> None:
    target = battle.state.hand.cards[3]
    battle.toggle_selection(3)

    result = battle.play()

    assert result.accepted
    assert result.round.cards == (target,)
    assert target.id not in held_ids(battle)


def test_toggle_twice_deselects(battle: Battle) -> None:
    battle.toggle_selection(1)
    result = battle.toggle_selection(1)

    assert result.accepted
    assert not any(c.selected for c in result.snapshot.hand)


def test_clear_selection(battle: Battle) -> None:
    battle.toggle_selection(0)
    battle.toggle_selection(2)

    result = battle.clear_selection()

    assert result.accepted
    assert battle.state.selected == set()


def test_play_rejects_empty_and_oversized_selection(battle: Battle, rig) -> None:
    assert battle.play().reason is DeclineReason.INVALID_SELECTION
    assert battle.play([]).reason is DeclineReason.INVALID_SELECTION

    rig(battle, [Card(suit, 1) for suit in SUITS] + [Card(Suit.SWORDS, 2), Card(Suit.CUPS, 2)])
    for i in range(6):
        battle.toggle_selection(i)

    result = battle.play()

    assert not result.accepted
    assert result.reason is DeclineReason.INVALID_SELECTION
    assert battle.state.hand.size() == 6
    assert battle.state.round == 1


def test_discard_replaces_selected_cards(battle: Battle) -> None:
    gone = {battle.state.hand.cards[0].id, battle.state.hand.cards[4].id}
    battle.toggle_selection(0)
    battle.toggle_selection(4)

    result = battle.discard()

    assert result.accepted
    snap = result.snapshot
    assert len(snap.hand) == 5
    assert snap.deck_count == 13
    assert snap.discards_remaining == 1
    assert not gone & held_ids(battle)
    assert battle.state.selected == set()


def test_discard_declines(battle: Battle) -> None:
    assert battle.discard().reason is DeclineReason.INVALID_SELECTION

    assert battle.discard([0]).accepted
    assert battle.discard([0]).accepted
    result = battle.discard([0])

    assert result.reason is DeclineReason.NO_DISCARDS
    assert result.snapshot.discards_remaining == 0


def test_discard_from_empty_deck_shrinks_hand(battle: Battle) -> None:
    battle.state.deck.cards = []

    result = battle.discard([0, 1])

    assert result.accepted
    assert len(result.snapshot.hand) == 3


@pytest.mark.parametrize("bad_index", [5, 17, -1])
def test_stale_positions_are_declined_without_changes(battle: Battle, bad_index: int) -> None:
    before = [c.id for c in battle.state.hand]

    for result in (battle.play([0, bad_index]), battle.discard([bad_index]),
                   battle.toggle_selection(bad_index)):
        assert not result.accepted
        assert result.reason is DeclineReason.STALE_INDEX

    assert [c.id for c in battle.state.hand] == before
    assert battle.state.discards_remaining == 2
    assert battle.state.round == 1


def test_stale_index_is_logged(battle: Battle, caplog) -> None:
    with caplog.at_level("WARNING", logger="arcana_battler.engine.game"):
        battle.play([9])

    assert "stale hand positions" in caplog.text


def test_busy_guard_declines_everything(battle: Battle) -> None:
    with battle.busy():
        assert battle.is_resolving
        results = [battle.play([0]), battle.discard([0]), battle.toggle_selection(0),
                   battle.clear_selection(), battle.new_run()]

    assert all(r.reason is DeclineReason.BUSY for r in results)
    assert not battle.is_resolving
    assert battle.state.round == 1


def test_listeners_see_accepted_actions_only(battle: Battle) -> None:
    seen = []
    unsubscribe = battle.subscribe(seen.append)

    battle.toggle_selection(0)
    battle.play([9])
    battle.play()

    assert len(seen) == 2
    assert seen[0].hand[0].selected
    assert seen[1].round == 2

    unsubscribe()
    battle.toggle_selection(0)
    assert len(seen) == 2


def test_listener_cannot_reenter(battle: Battle) -> None:
    inner = []

    def listener(snapshot) -> None:
        inner.append(battle.play([0]))

    battle.subscribe(listener)
    outer = battle.toggle_selection(0)

    assert outer.accepted
    assert inner[0].reason is DeclineReason.BUSY
    assert battle.state.round == 1


def test_preview_defaults_and_selection(battle: Battle, rig, straight_flush) -> None:
    rig(battle, straight_flush)

    full = battle.preview()
    assert full.evaluation.category is HandType.STRAIGHT_FLUSH
    assert full.by_suit()["Swords"] == 75

    battle.toggle_selection(0)
    battle.toggle_selection(1)
    partial = battle.preview()
    assert partial.positions == (0, 1)
    assert partial.label == "High Card"
    assert partial.effects.damage == 3


def test_preview_scoring_positions(battle: Battle, rig) -> None:
    rig(battle, [Card(Suit.SWORDS, 1), Card(Suit.CUPS, 3), Card(Suit.WANDS, 3)])

    preview = battle.preview([2, 1, 0])

    assert preview.label == "One Pair"
    assert preview.scoring_positions == (1, 2)
    assert preview.by_suit() == {"Swords": 1, "Wands": 6, "Cups": 6, "Pentacles": 0}


def test_preview_of_nothing(battle: Battle, rig) -> None:
    assert battle.preview([]) is None
    assert battle.preview([42]) is None

    rig(battle, [])
    assert battle.preview() is None
    assert battle.snapshot().last_evaluation is None


def test_fresh_deck_each_round(battle: Battle) -> None:
    kept = held_ids(battle) - {battle.state.hand.cards[0].id}
    battle.state.roster.current.health = 100

    battle.play([0])

    assert not kept & held_ids(battle)
    assert battle.snapshot().deck_count == 15


def test_kept_deck_carries_cards_between_rounds() -> None:
    battle = Battle(GameConfig(fresh_deck_each_round=False), rng=random.Random(3))
    kept = held_ids(battle) - {battle.state.hand.cards[0].id}
    battle.state.roster.current.health = 100

    result = battle.play([0])

    assert result.round.outcome is Outcome.CONTINUING
    assert kept <= held_ids(battle)
    assert result.snapshot.deck_count == 14


def test_kept_deck_rebuilds_when_empty() -> None:
    battle = Battle(GameConfig(fresh_deck_each_round=False), rng=random.Random(3))
    battle.state.deck.cards = []
    battle.state.roster.current.health = 100

    result = battle.play([0])

    assert len(result.snapshot.hand) == 5
    assert result.snapshot.deck_count == 15


def test_small_deck_deals_short_hand() -> None:
    battle = Battle(GameConfig(suit_values={suit: [1] for suit in SUITS}), rng=random.Random(0))

    snap = battle.snapshot()

    assert len(snap.hand) == 4
    assert snap.deck_count == 0
    assert snap.last_evaluation.label == "Four of a Kind"


def test_death_card_in_play() -> None:
    battle = Battle(GameConfig(special_cards=["Death"]), rng=random.Random(11))
    assert battle.state.deck.count_special() + sum(c.is_special for c in battle.state.hand) == 1

    battle.state.player.pentacles = 12
    battle.state.hand.cards = [create_special("Death")]

    result = battle.play([0])

    assert result.round.effects.damage == 25
    assert battle.state.roster.current.health == 5
    assert battle.state.player.pentacles == 2
    view = result.snapshot
    assert view.player.pentacles == 2


def test_two_deaths_cannot_overspend() -> None:
    battle = Battle(GameConfig(special_cards=["Death", "Death"]), rng=random.Random(11))
    battle.state.player.pentacles = 12
    battle.state.hand.cards = [create_special("Death"), create_special("Death")]

    result = battle.play([0, 1])

    assert result.round.effects.damage == 25
    assert battle.state.roster.current.health == 5
    assert battle.state.player.pentacles == 12 - 10 + 3


def test_special_card_view(battle: Battle, rig) -> None:
    rig(battle, [create_special("Death"), Card(Suit.PENTACLES, 2)])

    death, two = battle.snapshot().hand

    assert (death.kind, death.suit, death.value) == ("special", None, None)
    assert death.description
    assert (two.kind, two.suit, two.value, two.label) == ("normal", "Pentacles", 2, "2 of Pentacles")


def test_new_run_starts_over(battle: Battle, rig, straight_flush) -> None:
    rig(battle, straight_flush)
    battle.play(range(5))

    result = battle.new_run()

    snap = result.snapshot
    assert (snap.run, snap.round, snap.enemy_index) == (2, 1, 0)
    assert snap.player.health == 50
    assert snap.last_round is None


def test_snapshot_is_detached(battle: Battle) -> None:
    snap = battle.snapshot()

    battle.state.player.health = 1

    assert snap.player.health == 50


def test_seeded_battles_deal_the_same_hand() -> None:
    first = Battle(GameConfig(seed=21))
    second = Battle(GameConfig(seed=21))

    assert [c.label for c in first.snapshot().hand] == [c.label for c in second.snapshot().hand]


def test_named_enemies() -> None:
    battle = Battle(GameConfig(enemies=[("Page", 10, 2), (12, 3)]))

    assert [e.name for e in battle.state.roster.enemies] == ["Page", "Enemy 2"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"enemies": []},
        {"hand_size": 0},
        {"max_play_size": 0},
        {"starting_discards": -1},
        {"max_health": 0},
    ],
)
def test_config_validation(overrides: dict) -> None:
    with pytest.raises(ValueError):
        GameConfig(**overrides)
