"""
Autoplay simulation for the arcana battler.
Plays whole runs with a strategy and aggregates the results.
"""

import random
from dataclasses import dataclass, field
from typing import Optional, Union

from .engine.game import Battle, GameConfig
from .engine.scoring import Outcome
from .engine.strategy import BasicStrategy
from .presets import Preset, get_preset, list_presets

# Safety valve for strategies that never finish a run
MAX_ROUNDS = 200


@dataclass
class RunSummary:
    """Summary of a single simulated run."""
    victory: bool
    finished: bool
    rounds_played: int
    enemies_defeated: int
    final_health: int
    final_pentacles: int
    damage_dealt: int
    damage_taken: int
    discards_used: int
    hand_types: dict[str, int] = field(default_factory=dict)
    preset_used: str = "standard"

    def __str__(self):
        if not self.finished:
            result = "UNFINISHED"
        else:
            result = "VICTORY!" if self.victory else "DEFEAT"
        lines = [
            f"{'='*50}",
            f"  {result} - {self.rounds_played} rounds",
            f"{'='*50}",
            f"  Enemies defeated: {self.enemies_defeated}",
            f"  Final health: {self.final_health}",
            f"  Final pentacles: {self.final_pentacles}",
            f"  Damage dealt/taken: {self.damage_dealt}/{self.damage_taken}",
            f"  Discards used: {self.discards_used}",
        ]
        if self.hand_types:
            hands_str = ", ".join(f"{k}:{v}" for k, v in
                                  sorted(self.hand_types.items(), key=lambda x: -x[1]))
            lines.append(f"  Hands: {hands_str}")
        lines.append(f"{'='*50}")
        return "\n".join(lines)

    def to_dict(self):
        return {
            "victory": self.victory,
            "finished": self.finished,
            "rounds_played": self.rounds_played,
            "enemies_defeated": self.enemies_defeated,
            "final_health": self.final_health,
            "final_pentacles": self.final_pentacles,
            "damage_dealt": self.damage_dealt,
            "damage_taken": self.damage_taken,
            "discards_used": self.discards_used,
            "hand_types": self.hand_types,
            "preset_used": self.preset_used,
        }


@dataclass
class BatchResult:
    """Results from multiple simulated runs."""
    runs: int
    wins: int
    win_rate: float
    avg_rounds: float
    avg_enemies_defeated: float
    avg_final_health: float
    hand_type_distribution: dict[str, int]
    preset_used: str

    def __str__(self):
        lines = [
            f"{'='*50}",
            f"  BATCH RESULTS ({self.runs} runs)",
            f"  Preset: {self.preset_used}",
            f"{'='*50}",
            f"  Win rate: {self.wins}/{self.runs} ({self.win_rate:.1f}%)",
            f"  Avg rounds: {self.avg_rounds:.1f}",
            f"  Avg enemies defeated: {self.avg_enemies_defeated:.2f}",
            f"  Avg final health: {self.avg_final_health:.1f}",
            "",
            "  Hands played:",
        ]

        total = sum(self.hand_type_distribution.values()) or 1
        for hand, count in sorted(self.hand_type_distribution.items(), key=lambda x: -x[1]):
            pct = count / total * 100
            bar = "█" * int(pct / 2)
            lines.append(f"    {hand:<16} {count:>5} ({pct:>5.1f}%) {bar}")

        lines.append(f"{'='*50}")
        return "\n".join(lines)

    def to_dict(self):
        return {
            "runs": self.runs,
            "wins": self.wins,
            "win_rate": self.win_rate,
            "avg_rounds": self.avg_rounds,
            "avg_enemies_defeated": self.avg_enemies_defeated,
            "avg_final_health": self.avg_final_health,
            "hand_type_distribution": self.hand_type_distribution,
            "preset_used": self.preset_used,
        }


def simulate_run(battle: Battle, strategy=None, max_rounds: int = MAX_ROUNDS,
                 verbose: bool = False) -> RunSummary:
    """Play the battle's current run to victory or defeat."""
    if strategy is None:
        strategy = BasicStrategy()

    run = battle.state.run
    finished = False

    for played in range(1, max_rounds + 1):
        # Optionally discard first
        while battle.state.discards_remaining > 0:
            discard_indices = strategy.select_cards_to_discard(battle)
            if not discard_indices or not battle.discard(discard_indices).accepted:
                break

        play_indices = strategy.select_cards_to_play(battle)
        result = battle.play(play_indices)
        if not result.accepted:
            break

        rnd = result.round
        if verbose:
            print(f"Round {played}: "
                  f"{rnd.evaluation.label} x{rnd.evaluation.multiplier} vs {rnd.enemy_name} - "
                  f"dealt {rnd.effects.damage}, took {rnd.damage_taken}, {rnd.outcome.value}")

        if rnd.outcome in (Outcome.RUN_WON, Outcome.PLAYER_DEFEATED):
            finished = True
            break

    return summarize_run(battle, run, finished)


def summarize_run(battle: Battle, run: int, finished: bool) -> RunSummary:
    """Build a RunSummary from the history events of one run."""
    events = [e for e in battle.history.events if e.run == run]
    rounds = [e for e in events if e.event_type == "round_played"]
    run_end = next((e for e in events if e.event_type in ("run_won", "player_defeated")), None)

    hand_types: dict[str, int] = {}
    for e in rounds:
        hand_types[e.data["hand_type"]] = hand_types.get(e.data["hand_type"], 0) + 1

    if run_end:
        enemies_defeated = run_end.data["enemies_defeated"]
        final_pentacles = run_end.data["final_pentacles"]
    else:
        enemies_defeated = sum(1 for e in events if e.event_type == "enemy_defeated")
        final_pentacles = battle.state.player.pentacles

    return RunSummary(
        victory=bool(run_end and run_end.data["victory"]),
        finished=finished,
        rounds_played=len(rounds),
        enemies_defeated=enemies_defeated,
        final_health=rounds[-1].data["player_health"] if rounds else battle.state.player.health,
        final_pentacles=final_pentacles,
        damage_dealt=sum(e.data["effects"]["damage"] for e in rounds),
        damage_taken=sum(e.data["damage_taken"] for e in rounds),
        discards_used=sum(1 for e in events if e.event_type == "discard"),
        hand_types=hand_types,
        preset_used=battle.history.metadata["preset"],
    )


class Simulator:
    """
    Main simulator class.

    Usage:
        sim = Simulator(seed=7)
        result = sim.run("death_card")
        print(result)

        # Or run many:
        batch = sim.run_batch("standard", runs=100)
        print(batch)
    """

    def __init__(self, seed: Optional[int] = None, strategy=None):
        self.rng = random.Random(seed)
        self.strategy = strategy or BasicStrategy()

    def _resolve_preset(self, preset: Union[str, Preset]) -> tuple[Preset, str]:
        if isinstance(preset, str):
            p = get_preset(preset)
            if p is None:
                raise ValueError(f"Unknown preset: {preset}. Available: {list_presets()}")
            return p, preset
        return preset, preset.name

    def new_battle(self, preset: Union[str, Preset] = "standard") -> Battle:
        """Create a battle for the preset with its own derived random stream."""
        p, preset_name = self._resolve_preset(preset)
        config: GameConfig = p.build_config()
        return Battle(config=config, rng=random.Random(self.rng.getrandbits(32)),
                      preset_name=preset_name)

    def run(self, preset: Union[str, Preset] = "standard",
            verbose: bool = False) -> RunSummary:
        """
        Run a single simulated run.

        Args:
            preset: Preset name (string) or Preset object
            verbose: Print each round as it resolves
        """
        battle = self.new_battle(preset)
        return simulate_run(battle, self.strategy, verbose=verbose)

    def run_batch(self, preset: Union[str, Preset] = "standard",
                  runs: int = 100, verbose: bool = False) -> BatchResult:
        """
        Run multiple simulations and aggregate results.

        Args:
            preset: Preset name or Preset object
            runs: Number of runs
            verbose: Print progress
        """
        _, preset_name = self._resolve_preset(preset)

        wins = 0
        total_rounds = 0
        total_defeated = 0
        win_health = 0
        distribution: dict[str, int] = {}

        for i in range(runs):
            if verbose and (i + 1) % 10 == 0:
                print(f"  Run {i + 1}/{runs}...")

            summary = self.run(preset)

            if summary.victory:
                wins += 1
                win_health += summary.final_health
            total_rounds += summary.rounds_played
            total_defeated += summary.enemies_defeated
            for hand, count in summary.hand_types.items():
                distribution[hand] = distribution.get(hand, 0) + count

        return BatchResult(
            runs=runs,
            wins=wins,
            win_rate=wins / runs * 100 if runs else 0.0,
            avg_rounds=total_rounds / runs if runs else 0.0,
            avg_enemies_defeated=total_defeated / runs if runs else 0.0,
            avg_final_health=win_health / wins if wins else 0.0,
            hand_type_distribution=distribution,
            preset_used=preset_name,
        )


# Convenience functions
def run(preset: str = "standard", verbose: bool = False, seed: Optional[int] = None) -> RunSummary:
    """Quick run with a default simulator."""
    return Simulator(seed=seed).run(preset, verbose)


def run_batch(preset: str = "standard", runs: int = 100, verbose: bool = False,
              seed: Optional[int] = None) -> BatchResult:
    """Quick batch run with a default simulator."""
    return Simulator(seed=seed).run_batch(preset, runs, verbose)
