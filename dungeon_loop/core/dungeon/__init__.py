"""
Procedural Dungeon Generation System.

Generates playable dungeon levels using:
- Rejection-sampled room placement
- Minimum spanning tree connectivity with extra loops
- Weighted tables for rarity, room purpose and element
- Difficulty scaling shared by monsters, traps and loot
"""

from .biomes import Biome, BiomeConfig, GenerationConfig, build_generation_config, resolve_biome
from .dungeon_generator import DungeonGenerator, generate_dungeon
from .loot_tables import ChestContents, LootTableResolver, rarity_weights
from .models import Dungeon, EntityKind, Item, ItemCategory, Monster, Rarity, Room, RoomPurpose
from .monster_factory import MonsterFactory
from .rewards import ClearRewards, ClearStats, calculate_clear_rewards

__all__ = [
    "Biome",
    "BiomeConfig",
    "GenerationConfig",
    "build_generation_config",
    "resolve_biome",
    "DungeonGenerator",
    "generate_dungeon",
    "ChestContents",
    "LootTableResolver",
    "rarity_weights",
    "Dungeon",
    "EntityKind",
    "Item",
    "ItemCategory",
    "Monster",
    "Rarity",
    "Room",
    "RoomPurpose",
    "MonsterFactory",
    "ClearRewards",
    "ClearStats",
    "calculate_clear_rewards",
]
