"""
Population Engine.

Fills each room with entities according to its purpose, then rolls
traps and biome hazards.
"""
from typing import Optional
import logging

from ..random_provider import RandomProvider
from .biomes import GenerationConfig, HazardType, build_generation_config
from .loot_tables import LootTableResolver
from .models import (
    Chest,
    Dungeon,
    GroundItem,
    Hazard,
    Merchant,
    Point,
    Reward,
    Room,
    RoomPurpose,
    Shrine,
    ShrineType,
    Trap,
    TrapType,
    WavePlan,
)
from .monster_factory import MonsterFactory

logger = logging.getLogger(__name__)


INTERIOR_MARGIN = 2
MAX_MONSTERS_PER_ROOM = 10
AREA_PER_MONSTER = 25
GROUND_ITEM_CHANCE = 0.3

MAX_TRAPS_PER_ROOM = 5
AREA_PER_TRAP = 50
TRAP_PLACEMENT_ATTEMPTS = 10
TRAP_CLEARANCE = 3
HIDDEN_TRAP_CHANCE = 0.5

SHRINE_DURATION = 300

LEGACY_ITEM_CHANCE = 0.01


class PopulationEngine:
    """
    Places monsters, loot, NPCs, traps and hazards into rooms.

    The monster factory and loot resolver share the engine's stream.
    """

    def __init__(
        self,
        rng: RandomProvider,
        monsters: Optional[MonsterFactory] = None,
        loot: Optional[LootTableResolver] = None
    ):
        self.rng = rng
        self.monsters = monsters or MonsterFactory(rng)
        self.loot = loot or LootTableResolver(rng)

    def populate(self, dungeon: Dungeon, config: Optional[GenerationConfig] = None) -> None:
        """
        Populate every room of a connected dungeon.

        Args:
            dungeon: Dungeon whose rooms already have purposes and doors
            config: Generation tuning; rebuilt from the dungeon if omitted
        """
        if config is None:
            config = build_generation_config(dungeon.biome, dungeon.difficulty)

        for room in dungeon.rooms:
            self.populate_room(dungeon, room)
            self.add_traps_and_hazards(dungeon, room, config)

    def populate_room(self, dungeon: Dungeon, room: Room) -> None:
        """Dispatch on the room's purpose."""
        handlers = {
            RoomPurpose.NORMAL: self.populate_normal_room,
            RoomPurpose.TREASURE: self.populate_treasure_room,
            RoomPurpose.CHALLENGE: self.populate_challenge_room,
            RoomPurpose.MERCHANT: self.populate_merchant_room,
            RoomPurpose.SHRINE: self.populate_shrine_room,
            RoomPurpose.BOSS: self.populate_boss_room,
        }
        handler = handlers.get(room.purpose)
        if handler:
            handler(dungeon, room)

    # -------------------------------------------------------------------------
    # Purpose handlers
    # -------------------------------------------------------------------------

    def populate_normal_room(self, dungeon: Dungeon, room: Room) -> None:
        """Monsters scaled to room area, sometimes a ground item."""
        max_monsters = min(MAX_MONSTERS_PER_ROOM, room.area // AREA_PER_MONSTER)
        count = self.rng.between(max_monsters // 2, max_monsters)

        for _ in range(count):
            monster = self.monsters.create_monster(dungeon.biome, dungeon.difficulty)
            self._place(monster, self.interior_point(room))
            room.entities.append(monster)

        if self.rng.chance(GROUND_ITEM_CHANCE):
            item = self.loot.create_item(dungeon.difficulty)
            point = self.interior_point(room)
            room.entities.append(GroundItem(item=item, x=point.x, y=point.y))

    def populate_treasure_room(self, dungeon: Dungeon, room: Room) -> None:
        """1-3 chests, half the time guarded by an elite."""
        for _ in range(self.rng.between(1, 3)):
            rarity = self.loot.roll_rarity(dungeon.difficulty, treasure=True)
            point = self.interior_point(room)
            room.entities.append(Chest(rarity=rarity, x=point.x, y=point.y))

        if self.rng.chance(0.5):
            guardian = self.monsters.create_monster(
                dungeon.biome, dungeon.difficulty + 1, is_elite=True
            )
            self._place(guardian, self.interior_point(room))
            room.entities.append(guardian)

    def populate_challenge_room(self, dungeon: Dungeon, room: Room) -> None:
        """
        Monster waves that must be cleared for the reward.

        Wave n fights at difficulty + n; the last wave is elite-heavy.
        """
        total = self.rng.between(2, 4)
        plan = WavePlan()

        for wave in range(total):
            elite_chance = 0.5 if wave == total - 1 else 0.2
            batch = []
            for _ in range(self.rng.between(3, 6)):
                monster = self.monsters.create_monster(
                    dungeon.biome,
                    dungeon.difficulty + wave,
                    is_elite=self.rng.chance(elite_chance),
                )
                self._place(monster, self.interior_point(room))
                batch.append(monster)
            plan.waves.append(batch)

        room.waves = plan
        room.reward = Reward(
            gold=50 * dungeon.difficulty,
            items=[self.loot.create_item(dungeon.difficulty + 1)],
            requires_clear=True,
        )

    def populate_merchant_room(self, dungeon: Dungeon, room: Room) -> None:
        center = room.center
        room.entities.append(Merchant(
            inventory=self.loot.create_merchant_stock(dungeon.difficulty),
            x=center.x,
            y=center.y,
        ))

    def populate_shrine_room(self, dungeon: Dungeon, room: Room) -> None:
        center = room.center
        room.entities.append(Shrine(
            shrine_type=self.rng.choice(list(ShrineType)),
            buff_strength=dungeon.difficulty * 2 + 10,
            duration=SHRINE_DURATION,
            x=center.x,
            y=center.y,
        ))

    def populate_boss_room(self, dungeon: Dungeon, room: Room) -> None:
        """Boss at the centre, 2-4 minions and the dungeon's main reward."""
        difficulty = dungeon.difficulty

        boss = self.monsters.create_boss(dungeon.biome, difficulty)
        self._place(boss, room.center)
        room.entities.append(boss)

        minion_difficulty = max(1, difficulty - 1)
        for _ in range(self.rng.between(2, 4)):
            minion = self.monsters.create_monster(dungeon.biome, minion_difficulty)
            minion.is_minion = True
            self._place(minion, self.interior_point(room))
            room.entities.append(minion)

        room.reward = Reward(
            gold=100 * difficulty,
            experience=50 * difficulty,
            items=[
                self.loot.create_item(difficulty + 2),
                self.loot.create_item(difficulty),
            ],
            legacy_item=self.loot.roll_legacy_item(LEGACY_ITEM_CHANCE),
        )

    # -------------------------------------------------------------------------
    # Traps and hazards
    # -------------------------------------------------------------------------

    def add_traps_and_hazards(self, dungeon: Dungeon, room: Room, config: GenerationConfig) -> None:
        """Roll traps and the biome hazard; merchants and entrances stay safe."""
        if room.purpose in (RoomPurpose.MERCHANT, RoomPurpose.ENTRANCE):
            return

        max_traps = min(MAX_TRAPS_PER_ROOM, room.area // AREA_PER_TRAP)
        if max_traps >= 1 and self.rng.chance(config.trap_chance):
            for _ in range(self.rng.between(1, max_traps)):
                trap = self._create_trap(room, dungeon.difficulty)
                if trap is not None:
                    room.entities.append(trap)

        if config.hazard is not None and self.rng.chance(config.hazard_chance):
            room.hazards = [self._create_hazard(config.hazard, dungeon.difficulty)]

    def _create_trap(self, room: Room, difficulty: int) -> Optional[Trap]:
        trap_type = self.rng.choice(list(TrapType))

        for _ in range(TRAP_PLACEMENT_ATTEMPTS):
            point = self.interior_point(room)
            if point.distance_to(room.center) <= TRAP_CLEARANCE:
                continue
            if any(point.distance_to(door.point) < TRAP_CLEARANCE for door in room.doors):
                continue
            return Trap(
                trap_type=trap_type,
                damage=5 + difficulty * 2,
                hidden=self.rng.chance(HIDDEN_TRAP_CHANCE),
                x=point.x,
                y=point.y,
            )

        logger.debug("No clear spot for a %s trap in room %d", trap_type.value, room.id)
        return None

    def _create_hazard(self, hazard_type: HazardType, difficulty: int) -> Hazard:
        if hazard_type == HazardType.FALLING_ROCKS:
            return Hazard(
                hazard_type=hazard_type,
                damage=8 + difficulty,
                interval=self.rng.between(5, 10),
            )
        if hazard_type == HazardType.POISONOUS_PLANTS:
            return Hazard(hazard_type=hazard_type, damage=3 + difficulty, slow_effect=0.3)
        return Hazard(
            hazard_type=hazard_type,
            damage=10 + difficulty,
            interval=self.rng.between(6, 12),
            effect_type=self.rng.choice(["fire", "ice", "lightning"]),
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def interior_point(self, room: Room) -> Point:
        """A random point at least two units inside the room's walls."""
        rect = room.rect
        return Point(
            self.rng.between(rect.x + INTERIOR_MARGIN, rect.right - INTERIOR_MARGIN),
            self.rng.between(rect.y + INTERIOR_MARGIN, rect.bottom - INTERIOR_MARGIN),
        )

    @staticmethod
    def _place(entity, point: Point) -> None:
        entity.x = point.x
        entity.y = point.y
