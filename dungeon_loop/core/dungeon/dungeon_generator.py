"""
Procedural Dungeon Generator.

Assembles a playable dungeon level from the layout, connectivity and
population stages. A dungeon is a pure function of (dungeon id,
difficulty, seed).
"""
from typing import Optional
import logging

from ..errors import InvalidDifficultyError
from ..random_provider import RandomProvider
from .biomes import GenerationConfig, build_generation_config, resolve_biome
from .connectivity import ConnectivityEngine
from .loot_tables import LootTableResolver
from .models import Dungeon, Rect, Room, RoomPurpose
from .monster_factory import MonsterFactory
from .population import PopulationEngine
from .room_layout import RoomLayoutEngine, measure_extent

logger = logging.getLogger(__name__)


class DungeonGenerator:
    """
    Generates dungeon levels.

    Every stage draws from the generator's own RandomProvider, so two
    generators with the same seed produce identical dungeons.
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[RandomProvider] = None):
        """
        Initialize the dungeon generator.

        Args:
            seed: Stream seed for reproducibility (ignored if rng is given)
            rng: An existing stream, e.g. from RandomProvider.spawn()
        """
        self.rng = rng or RandomProvider(seed)
        self.layout = RoomLayoutEngine(self.rng)
        self.connectivity = ConnectivityEngine(self.rng)
        self.monsters = MonsterFactory(self.rng)
        self.loot = LootTableResolver(self.rng)
        self.population = PopulationEngine(self.rng, self.monsters, self.loot)

    @property
    def seed(self) -> int:
        return self.rng.seed

    def generate(
        self,
        dungeon_id: str,
        difficulty: int,
        room_count: Optional[int] = None
    ) -> Dungeon:
        """
        Generate a dungeon.

        Args:
            dungeon_id: Dungeon identifier; selects the biome
            difficulty: Scaling input (>= 1)
            room_count: Rooms to attempt (None draws from the biome range)

        Returns:
            Fully populated Dungeon

        Raises:
            InvalidDifficultyError: If difficulty is not an integer >= 1
        """
        if isinstance(difficulty, bool) or not isinstance(difficulty, int) or difficulty < 1:
            raise InvalidDifficultyError(difficulty)

        biome = resolve_biome(dungeon_id)
        config = build_generation_config(biome, difficulty)

        if room_count is None:
            room_count = self.rng.between(config.min_rooms, config.max_rooms)

        rooms = self.layout.generate_rooms(config, room_count)
        if not rooms:
            rooms = [self._fallback_room(config)]

        width, height = measure_extent(rooms)
        dungeon = Dungeon(
            id=dungeon_id,
            difficulty=difficulty,
            biome=biome,
            rooms=rooms,
            width=width,
            height=height,
            seed=self.rng.seed,
        )

        dungeon.connections = self.connectivity.connect(dungeon.rooms)
        self.population.populate(dungeon, config)
        self.assign_start_and_end(dungeon)

        summary = dungeon.summary()
        logger.info(
            "Generated dungeon %s (%s, difficulty %d, seed %s): %d/%d rooms, %d connections",
            dungeon_id, biome.value, difficulty, dungeon.seed,
            summary["total_rooms"], room_count, summary["connections"]
        )
        return dungeon

    def assign_start_and_end(self, dungeon: Dungeon) -> None:
        """
        Fix the start and end rooms.

        The start is the first entrance; without one, room 0 becomes the
        start and is retagged as the entrance unless it holds the boss.
        The end is the first boss room; without one, the last room is
        retagged and populated as the boss room. Calling this again on a
        dungeon that already has both is a no-op.
        """
        entrance = next(iter(dungeon.rooms_with_purpose(RoomPurpose.ENTRANCE)), None)
        if entrance is not None:
            dungeon.start_room = entrance.id
        else:
            dungeon.start_room = 0
            if dungeon.rooms[0].purpose != RoomPurpose.BOSS:
                dungeon.rooms[0].purpose = RoomPurpose.ENTRANCE

        boss_room = next(iter(dungeon.rooms_with_purpose(RoomPurpose.BOSS)), None)
        if boss_room is not None:
            dungeon.end_room = boss_room.id
        else:
            last = dungeon.rooms[-1]
            logger.debug("No boss room in %s; promoting room %d", dungeon.id, last.id)
            last.purpose = RoomPurpose.BOSS
            dungeon.end_room = last.id
            self.population.populate_boss_room(dungeon, last)

    def _fallback_room(self, config: GenerationConfig) -> Room:
        """Single entrance room used when no room could be placed."""
        logger.debug("Layout produced no rooms; using a fallback room")
        size = self.rng.between(config.room_size_min, config.room_size_max)
        return Room(id=0, rect=Rect(0, 0, size, size), purpose=RoomPurpose.ENTRANCE)


def generate_dungeon(
    dungeon_id: str,
    difficulty: int,
    seed: Optional[int] = None,
    room_count: Optional[int] = None
) -> Dungeon:
    """
    Convenience function to generate a dungeon.

    Args:
        dungeon_id: Dungeon identifier, e.g. "sword_forest"
        difficulty: Scaling input (>= 1)
        seed: Random seed for reproducibility
        room_count: Force the number of rooms to attempt

    Returns:
        Dungeon with rooms, connections and entities
    """
    generator = DungeonGenerator(seed=seed)
    return generator.generate(dungeon_id, difficulty, room_count=room_count)
