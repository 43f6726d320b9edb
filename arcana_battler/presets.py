"""
Preset configurations for the arcana battler.
Allows easy setup of different decks and enemy lineups.
"""

import copy
from dataclasses import dataclass, field
from typing import Optional

from .engine.deck import Suit
from .engine.game import GameConfig


@dataclass
class Preset:
    """A complete preset configuration for a battle."""
    name: str
    description: str
    config_overrides: dict = field(default_factory=dict)

    def build_config(self, **extra) -> GameConfig:
        """Create a GameConfig with this preset's overrides applied."""
        config = GameConfig()
        for key, value in {**self.config_overrides, **extra}.items():
            if not hasattr(config, key):
                raise ValueError(f"Unknown config option: {key}")
            setattr(config, key, copy.deepcopy(value))
        # Re-run validation on the overridden values
        config.__post_init__()
        return config


# Built-in presets
PRESETS = {
    "standard": Preset(
        name="Standard",
        description="Twenty-card deck against the two default enemies",
    ),

    "death_card": Preset(
        name="Death Card",
        description="Standard deck with the Death card shuffled in",
        config_overrides={"special_cards": ["Death"]},
    ),

    "lean_pentacles": Preset(
        name="Lean Pentacles",
        description="Pentacles only run from 1 to 3",
        config_overrides={"suit_values": {Suit.PENTACLES: [1, 2, 3]}},
    ),

    "gauntlet": Preset(
        name="Gauntlet",
        description="Three enemies, the last one hits hard",
        config_overrides={"enemies": [(30, 6), (35, 8), ("Champion", 45, 11)]},
    ),

    "big_hand": Preset(
        name="Big Hand",
        description="Hold eight cards, still play at most five",
        config_overrides={"hand_size": 8, "fresh_deck_each_round": False},
    ),
}


def get_preset(name: str) -> Optional[Preset]:
    """Get a preset by name."""
    return PRESETS.get(name.lower().replace(" ", "_"))


def list_presets() -> list[str]:
    """List all available preset names."""
    return list(PRESETS.keys())


def get_preset_info(name: str) -> Optional[dict]:
    """Get info about a preset."""
    preset = get_preset(name)
    if preset:
        return {
            "name": preset.name,
            "description": preset.description,
            "overrides": sorted(preset.config_overrides),
        }
    return None
