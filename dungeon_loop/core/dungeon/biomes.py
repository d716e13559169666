"""
Biome Tuning for Dungeon Generation.

Maps dungeon ids to biomes and scales each biome's layout tuning
by difficulty.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, Optional


class Biome(str, Enum):
    """Thematic dungeon categories."""
    FOREST = "forest"
    CAVE = "cave"
    RUINS = "ruins"
    TOWER = "tower"
    CASTLE = "castle"
    LIBRARY = "library"
    MINE = "mine"
    CITY = "city"
    GENERIC = "generic"


class HazardType(str, Enum):
    """Room-wide environmental hazards."""
    FALLING_ROCKS = "falling_rocks"
    POISONOUS_PLANTS = "poisonous_plants"
    MAGIC_DEVICE = "magic_device"


@dataclass(frozen=True)
class BiomeConfig:
    """Layout tuning for a biome, before difficulty adjustment."""
    name: str
    room_size_min: int = 5
    room_size_max: int = 15
    min_rooms: int = 8
    max_rooms: int = 15
    special_room_chance: float = 0.3
    trap_chance: float = 0.3
    hazard: Optional[HazardType] = None
    hazard_chance: float = 0.3


@dataclass(frozen=True)
class GenerationConfig:
    """Biome tuning after difficulty adjustment; built once per dungeon."""
    biome: Biome
    difficulty: int
    room_size_min: int
    room_size_max: int
    min_rooms: int
    max_rooms: int
    special_room_chance: float
    trap_chance: float
    hazard: Optional[HazardType]
    hazard_chance: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "biome": self.biome.value,
            "difficulty": self.difficulty,
            "room_size_min": self.room_size_min,
            "room_size_max": self.room_size_max,
            "min_rooms": self.min_rooms,
            "max_rooms": self.max_rooms,
            "special_room_chance": round(self.special_room_chance, 4),
            "trap_chance": self.trap_chance,
            "hazard": self.hazard.value if self.hazard else None,
            "hazard_chance": self.hazard_chance,
        }


# Dungeon id -> biome
DUNGEON_BIOMES: Dict[str, Biome] = {
    "sword_forest": Biome.FOREST,
    "staff_tower": Biome.TOWER,
    "temple_ruins": Biome.RUINS,
    "crystal_caves": Biome.CAVE,
    "dark_castle": Biome.CASTLE,
    "forbidden_library": Biome.LIBRARY,
    "abandoned_mine": Biome.MINE,
    "ancient_city": Biome.CITY,
}


BIOME_CONFIGS: Dict[Biome, BiomeConfig] = {
    Biome.FOREST: BiomeConfig(
        name="Forest",
        room_size_min=8,   # Wide, organic clearings
        room_size_max=20,
        special_room_chance=0.4,
        hazard=HazardType.POISONOUS_PLANTS,
    ),
    Biome.TOWER: BiomeConfig(
        name="Tower",
        room_size_min=4,   # Many small chambers
        room_size_max=10,
        max_rooms=20,
        special_room_chance=0.25,
        hazard=HazardType.MAGIC_DEVICE,
    ),
    Biome.CAVE: BiomeConfig(
        name="Cave",
        room_size_min=4,   # Irregular sizes
        room_size_max=25,
        special_room_chance=0.2,
        hazard=HazardType.FALLING_ROCKS,
    ),
    Biome.RUINS: BiomeConfig(
        name="Ruins",
        room_size_min=6,
        room_size_max=12,
        special_room_chance=0.35,
        trap_chance=0.5,
    ),
    Biome.CASTLE: BiomeConfig(
        name="Castle",
        room_size_min=7,
        room_size_max=14,
        max_rooms=18,
        special_room_chance=0.3,
    ),
    Biome.LIBRARY: BiomeConfig(name="Library"),
    Biome.MINE: BiomeConfig(name="Mine", trap_chance=0.5),
    Biome.CITY: BiomeConfig(name="City"),
    Biome.GENERIC: BiomeConfig(name="Generic"),
}


def resolve_biome(dungeon_id: str) -> Biome:
    """Get the biome for a dungeon id; unknown ids use the generic biome."""
    return DUNGEON_BIOMES.get(dungeon_id, Biome.GENERIC)


def get_biome_config(biome: Biome) -> BiomeConfig:
    """Get the tuning for a biome, falling back to the generic tuning."""
    return BIOME_CONFIGS.get(biome, BIOME_CONFIGS[Biome.GENERIC])


def build_generation_config(biome: Biome, difficulty: int) -> GenerationConfig:
    """
    Apply difficulty adjustments to a biome's tuning.

    Harder dungeons have more rooms (max + difficulty // 2) and more
    special rooms (+1% per difficulty level).

    Args:
        biome: Dungeon biome
        difficulty: Dungeon difficulty (>= 1)

    Returns:
        Immutable GenerationConfig for one generation run
    """
    base = get_biome_config(biome)
    return GenerationConfig(
        biome=biome,
        difficulty=difficulty,
        room_size_min=base.room_size_min,
        room_size_max=base.room_size_max,
        min_rooms=base.min_rooms,
        max_rooms=base.max_rooms + difficulty // 2,
        special_room_chance=base.special_room_chance + difficulty * 0.01,
        trap_chance=base.trap_chance,
        hazard=base.hazard,
        hazard_chance=base.hazard_chance,
    )
