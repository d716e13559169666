"""
Dungeon Clear Rewards.

Turns a finished run's statistics into the end-of-dungeon payout.
"""
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional
import math

from ..random_provider import RandomProvider
from .loot_tables import LootTableResolver
from .models import Dungeon, Item

MIN_MULTIPLIER = 0.5
TIME_REFERENCE_MINUTES = 30


@dataclass
class ClearStats:
    """What the player did during a run."""
    monsters_killed: int = 0
    rooms_explored: int = 0
    boss_defeated: bool = False
    challenges_completed: int = 0
    time_elapsed_seconds: Optional[float] = None
    deaths: int = 0


@dataclass
class ClearRewards:
    """Final payout for clearing a dungeon."""
    gold: int
    experience: int
    items: List[Item] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gold": self.gold,
            "experience": self.experience,
            "items": [i.to_dict() for i in self.items],
        }


def reward_multipliers(stats: ClearStats) -> Dict[str, float]:
    """
    Compute the gold and experience multipliers for a run.

    Kills, exploration, the boss, challenges and speed raise them; deaths
    lower them. Neither drops below 0.5.
    """
    gold = 1.0
    experience = 1.0

    gold += stats.monsters_killed * 0.02
    experience += stats.monsters_killed * 0.01

    gold += stats.rooms_explored * 0.05
    experience += stats.rooms_explored * 0.03

    if stats.boss_defeated:
        gold += 0.5
        experience += 0.4

    gold += stats.challenges_completed * 0.2
    experience += stats.challenges_completed * 0.15

    if stats.time_elapsed_seconds is not None:
        minutes = stats.time_elapsed_seconds / 60
        time_factor = max(0.0, 1 - minutes / TIME_REFERENCE_MINUTES)
        gold += time_factor * 0.5
        experience += time_factor * 0.3

    gold -= stats.deaths * 0.1
    experience -= stats.deaths * 0.05

    return {
        "gold": max(MIN_MULTIPLIER, gold),
        "experience": max(MIN_MULTIPLIER, experience),
    }


def calculate_clear_rewards(
    dungeon: Dungeon,
    stats: ClearStats,
    rng: RandomProvider
) -> ClearRewards:
    """
    Calculate the payout for clearing a dungeon.

    Args:
        dungeon: The cleared dungeon
        stats: Run statistics
        rng: Stream for the reward items

    Returns:
        ClearRewards with gold, experience and items
    """
    difficulty = dungeon.difficulty
    multipliers = reward_multipliers(stats)

    item_count = 1 + difficulty // 2
    if stats.boss_defeated:
        item_count += 1
    item_count += stats.challenges_completed

    loot = LootTableResolver(rng)
    items = [loot.create_item(difficulty) for _ in range(item_count)]

    return ClearRewards(
        gold=math.floor(100 * difficulty * multipliers["gold"]),
        experience=math.floor(50 * difficulty * multipliers["experience"]),
        items=items,
    )
