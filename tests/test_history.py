"""Tests for battle history events and summaries."""

from __future__ import annotations

from arcana_battler.engine.deck import Card, Suit
from arcana_battler.engine.game import Battle
from arcana_battler.engine.history import CLOSE_CALL_HEALTH, BattleHistory


def record_round(history: BattleHistory, round: int, damage: int, player_health: int,
                 hand_type: str = "One Pair") -> None:
    history.add_round_played(
        run=1,
        round=round,
        enemy="Enemy 1",
        cards=["4S", "4C"],
        hand_type=hand_type,
        multiplier=2,
        effects={"damage": damage, "shield": 0, "healing": 0,
                 "pentacles_gained": 0, "pentacles_spent": 0},
        damage_taken=6,
        player_health=player_health,
        enemy_health=30 - damage,
    )


def test_events_are_sequenced() -> None:
    history = BattleHistory(preset_name="gauntlet")
    history.add_run_start(run=1, player_health=50, enemies=["Enemy 1"])
    record_round(history, 1, 8, 44)

    assert [e.timestamp for e in history.events] == [0, 1]
    assert history.events[0].event_type == "run_start"
    assert history.metadata == {"preset": "gauntlet"}


def test_close_calls() -> None:
    history = BattleHistory()
    record_round(history, 1, 8, CLOSE_CALL_HEALTH)
    record_round(history, 2, 8, CLOSE_CALL_HEALTH + 1)
    record_round(history, 3, 8, 0)

    assert [e.round for e in history.get_close_calls()] == [1]


def test_summary_counts() -> None:
    history = BattleHistory()
    history.add_run_start(run=1, player_health=50, enemies=["Enemy 1", "Enemy 2"])
    record_round(history, 1, 8, 44)
    record_round(history, 2, 40, 38, hand_type="Straight")
    history.add_enemy_defeated(run=1, round=2, enemy="Enemy 1", overkill=18)
    history.add_run_end(run=1, round=3, enemy="Enemy 2", victory=False,
                        enemies_defeated=1, final_pentacles=4)

    summary = history.to_dict()["summary"]

    assert summary["runs_started"] == 1
    assert summary["rounds_played"] == 2
    assert summary["enemies_defeated"] == 1
    assert summary["runs_won"] == 0
    assert summary["defeats"] == 1
    assert summary["total_damage_dealt"] == 48
    assert summary["total_damage_taken"] == 12
    assert summary["best_hand"] == "Straight"
    assert summary["hand_types"] == {"One Pair": 1, "Straight": 1}


def test_empty_history_summary() -> None:
    summary = BattleHistory().to_dict()["summary"]

    assert summary["rounds_played"] == 0
    assert summary["best_hand"] is None


def test_battle_records_its_actions(battle: Battle, rig) -> None:
    battle.discard([0])
    rig(battle, [Card(Suit.SWORDS, 5), Card(Suit.CUPS, 5)])
    battle.play([0, 1])

    types = [e.event_type for e in battle.history.events]
    assert types == ["run_start", "discard", "round_played"]

    played = battle.history.rounds()[0]
    assert played.data["cards"] == ["5S", "5C"]
    assert played.data["hand_type"] == "One Pair"
    assert played.data["effects"]["damage"] == 10
    assert played.data["enemy_health"] == 20
    assert played.enemy == "Enemy 1"


def test_battle_records_run_end(battle: Battle, rig, straight_flush) -> None:
    battle.state.roster.advance()
    rig(battle, straight_flush)

    battle.play(range(5))

    end = [e for e in battle.history.events if e.event_type == "run_won"][0]
    assert end.data == {"victory": True, "enemies_defeated": 2, "final_pentacles": 0}
    assert battle.history.events[-1].event_type == "run_start"
    assert battle.history.events[-1].run == 2
