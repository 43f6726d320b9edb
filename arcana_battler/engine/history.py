"""
Battle history tracking.
Captures key events during a run so callers can inspect or summarize it.
"""

from collections import Counter
from dataclasses import dataclass, asdict
from typing import Optional

# Player health at or below this after a round counts as a close call
CLOSE_CALL_HEALTH = 10


@dataclass
class BattleEvent:
    """Single event in a run."""
    run: int
    round: int
    enemy: Optional[str]
    event_type: str  # "run_start", "discard", "round_played", "enemy_defeated", etc.
    data: dict
    timestamp: int = 0  # event sequence number


class BattleHistory:
    """Captures the events of every run a battle goes through."""

    def __init__(self, preset_name: str = "standard"):
        self.events: list[BattleEvent] = []
        self.metadata = {"preset": preset_name}
        self._event_counter = 0

    def add_event(self, run: int, round: int, event_type: str, data: dict,
                  enemy: str = None):
        """Add an event to the history."""
        self.events.append(BattleEvent(
            run=run,
            round=round,
            enemy=enemy,
            event_type=event_type,
            data=data,
            timestamp=self._event_counter
        ))
        self._event_counter += 1

    def add_run_start(self, run: int, player_health: int, enemies: list):
        """Log the start of a run."""
        self.add_event(
            run=run,
            round=0,
            event_type="run_start",
            data={
                "player_health": player_health,
                "enemies": enemies,
            }
        )

    def add_discard(self, run: int, round: int, enemy: str, discarded: list,
                    drawn: list, discards_remaining: int):
        """Log a discard and redraw."""
        self.add_event(
            run=run,
            round=round,
            enemy=enemy,
            event_type="discard",
            data={
                "discarded": discarded,
                "drawn": drawn,
                "discards_remaining": discards_remaining,
            }
        )

    def add_round_played(self, run: int, round: int, enemy: str, cards: list,
                         hand_type: str, multiplier: int, effects: dict,
                         damage_taken: int, player_health: int, enemy_health: int):
        """Log a resolved round."""
        self.add_event(
            run=run,
            round=round,
            enemy=enemy,
            event_type="round_played",
            data={
                "cards": cards,
                "hand_type": hand_type,
                "multiplier": multiplier,
                "effects": effects,
                "damage_taken": damage_taken,
                "player_health": player_health,
                "enemy_health": enemy_health,
                "close_call": 0 < player_health <= CLOSE_CALL_HEALTH,
            }
        )

    def add_enemy_defeated(self, run: int, round: int, enemy: str, overkill: int):
        """Log an enemy going down with more to come."""
        self.add_event(
            run=run,
            round=round,
            enemy=enemy,
            event_type="enemy_defeated",
            data={"overkill": overkill}
        )

    def add_run_end(self, run: int, round: int, enemy: str, victory: bool,
                    enemies_defeated: int, final_pentacles: int):
        """Log run completion, by victory or defeat."""
        self.add_event(
            run=run,
            round=round,
            enemy=enemy,
            event_type="run_won" if victory else "player_defeated",
            data={
                "victory": victory,
                "enemies_defeated": enemies_defeated,
                "final_pentacles": final_pentacles,
            }
        )

    def rounds(self) -> list[BattleEvent]:
        return [e for e in self.events if e.event_type == "round_played"]

    def get_close_calls(self) -> list[BattleEvent]:
        """Get all rounds that left the player nearly dead."""
        return [e for e in self.rounds() if e.data.get("close_call")]

    def hand_type_counts(self) -> dict[str, int]:
        return dict(Counter(e.data["hand_type"] for e in self.rounds()))

    def to_dict(self) -> dict:
        """Convert to a plain dict."""
        return {
            "metadata": self.metadata,
            "events": [asdict(e) for e in self.events],
            "summary": self._generate_summary()
        }

    def _generate_summary(self) -> dict:
        """Generate a quick summary of everything recorded."""
        rounds = self.rounds()
        run_ends = [e for e in self.events if e.event_type in ("run_won", "player_defeated")]

        best = max(rounds, key=lambda e: e.data["effects"]["damage"], default=None)

        return {
            "runs_started": sum(1 for e in self.events if e.event_type == "run_start"),
            "rounds_played": len(rounds),
            "discards_used": sum(1 for e in self.events if e.event_type == "discard"),
            "enemies_defeated": (
                sum(1 for e in self.events if e.event_type == "enemy_defeated")
                + sum(1 for e in run_ends if e.data.get("victory"))
            ),
            "runs_won": sum(1 for e in run_ends if e.data.get("victory")),
            "defeats": sum(1 for e in run_ends if not e.data.get("victory")),
            "total_damage_dealt": sum(e.data["effects"]["damage"] for e in rounds),
            "total_damage_taken": sum(e.data["damage_taken"] for e in rounds),
            "close_calls": len(self.get_close_calls()),
            "best_hand": best.data["hand_type"] if best else None,
            "hand_types": self.hand_type_counts(),
        }
