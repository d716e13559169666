"""
Dungeon Data Model.

Records produced by the generator and consumed read-only by gameplay:
rooms, connections, the placed-entity variants (monster, trap, chest,
merchant, shrine, ground item) and the item/monster records they carry.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Union
import math

from .biomes import Biome, HazardType


# =============================================================================
# ENUMS
# =============================================================================

class RoomPurpose(str, Enum):
    """Functional tag that decides how a room is populated."""
    ENTRANCE = "entrance"
    NORMAL = "normal"
    TREASURE = "treasure"
    CHALLENGE = "challenge"
    MERCHANT = "merchant"
    SHRINE = "shrine"
    BOSS = "boss"


SPECIAL_PURPOSES = (
    RoomPurpose.TREASURE,
    RoomPurpose.CHALLENGE,
    RoomPurpose.MERCHANT,
    RoomPurpose.SHRINE,
)


class EntityKind(str, Enum):
    """Tag for each placed-entity variant."""
    MONSTER = "monster"
    TRAP = "trap"
    CHEST = "chest"
    MERCHANT = "merchant"
    SHRINE = "shrine"
    ITEM = "item"


class Rarity(str, Enum):
    """Item quality bands, lowest first."""
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"
    MYTHIC = "mythic"

    @property
    def rank(self) -> int:
        """Position in the tier order (common = 0)."""
        return RARITY_ORDER.index(self)


RARITY_ORDER = [
    Rarity.COMMON,
    Rarity.UNCOMMON,
    Rarity.RARE,
    Rarity.EPIC,
    Rarity.LEGENDARY,
    Rarity.MYTHIC,
]


class ItemCategory(str, Enum):
    """Top-level item categories."""
    WEAPON = "weapon"
    ARMOR = "armor"
    ACCESSORY = "accessory"
    CONSUMABLE = "consumable"


class Element(str, Enum):
    """Monster elements."""
    NEUTRAL = "neutral"
    FIRE = "fire"
    ICE = "ice"
    LIGHTNING = "lightning"
    EARTH = "earth"
    WATER = "water"
    LIGHT = "light"
    DARK = "dark"


class AttackStyle(str, Enum):
    """How a monster attacks."""
    MELEE = "melee"
    RANGED = "ranged"
    MAGIC = "magic"


class TrapType(str, Enum):
    """Floor trap types."""
    SPIKE = "spike"
    POISON = "poison"
    ARROW = "arrow"
    FIRE = "fire"
    FROST = "frost"


class ShrineType(str, Enum):
    """Buff granted by a shrine."""
    HEALTH = "health"
    STRENGTH = "strength"
    DEFENSE = "defense"
    SPEED = "speed"
    MANA = "mana"


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys whose value is None."""
    return {k: v for k, v in data.items() if v is not None}


# =============================================================================
# GEOMETRY
# =============================================================================

@dataclass(frozen=True)
class Point:
    """A grid coordinate."""
    x: int
    y: int

    def distance_to(self, other: "Point") -> float:
        """Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Rect:
    """Axis-aligned room rectangle."""
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return Point(self.x + self.width // 2, self.y + self.height // 2)

    @property
    def area(self) -> int:
        return self.width * self.height

    def intersects(self, other: "Rect", padding: int = 0) -> bool:
        """
        Check overlap with another rectangle, both expanded by ``padding``.

        Touching edges count as an intersection.
        """
        return not (
            self.x - padding > other.right + padding
            or self.right + padding < other.x - padding
            or self.y - padding > other.bottom + padding
            or self.bottom + padding < other.y - padding
        )

    def translated(self, dx: int, dy: int) -> "Rect":
        """Return a copy moved by (dx, dy)."""
        return Rect(self.x + dx, self.y + dy, self.width, self.height)

    def is_interior(self, px: int, py: int) -> bool:
        """Check if a point lies strictly inside the boundary."""
        return self.x < px < self.right and self.y < py < self.bottom

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class Door:
    """A door on a room's boundary leading to a neighbour."""
    x: int
    y: int
    to_room: int

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y, "to_room": self.to_room}


@dataclass(frozen=True)
class Connection:
    """An undirected graph edge between two rooms."""
    room_a: int
    room_b: int
    door_a: Point
    door_b: Point

    def to_dict(self) -> Dict[str, Any]:
        return {
            "room_a": self.room_a,
            "room_b": self.room_b,
            "door_a": self.door_a.to_dict(),
            "door_b": self.door_b.to_dict(),
        }


# =============================================================================
# ITEMS
# =============================================================================

@dataclass
class ItemAttribute:
    """A typed stat bonus on an item."""
    type: str
    value: int

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "value": self.value}


@dataclass
class SpecialEffect:
    """A typed special effect, only on rare and better items."""
    type: str
    value: int

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "value": self.value}


@dataclass
class ConsumableEffect:
    """Effect values for a consumable item."""
    effect_type: str
    effect_value: int
    quality: Optional[str] = None
    radius: Optional[int] = None              # Bombs
    status_duration: Optional[int] = None     # Bombs: burn/freeze/stun seconds
    buff_type: Optional[str] = None           # Food
    buff_value: Optional[int] = None
    buff_duration: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "effect_type": self.effect_type,
            "effect_value": self.effect_value,
            "quality": self.quality,
            "radius": self.radius,
            "status_duration": self.status_duration,
            "buff_type": self.buff_type,
            "buff_value": self.buff_value,
            "buff_duration": self.buff_duration,
        })


@dataclass
class Item:
    """A fully specified item record."""
    id: str
    name: str
    category: ItemCategory
    rarity: Rarity
    sub_type: str
    attack: Optional[int] = None
    defense: Optional[int] = None
    attributes: List[ItemAttribute] = field(default_factory=list)
    special_effects: List[SpecialEffect] = field(default_factory=list)
    required_level: Optional[int] = None
    enchant_level: int = 0
    stack_count: Optional[int] = None
    consumable: Optional[ConsumableEffect] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return _compact({
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "rarity": self.rarity.value,
            "sub_type": self.sub_type,
            "attack": self.attack,
            "defense": self.defense,
            "attributes": [a.to_dict() for a in self.attributes],
            "special_effects": [e.to_dict() for e in self.special_effects],
            "required_level": self.required_level,
            "enchant_level": self.enchant_level,
            "stack_count": self.stack_count,
            "consumable": self.consumable.to_dict() if self.consumable else None,
        })


# =============================================================================
# MONSTERS
# =============================================================================

@dataclass
class MonsterAbility:
    """
    A special ability. Only the fields relevant to the ability's shape
    are set; the rest stay None.
    """
    type: str
    cooldown: int
    damage: Optional[int] = None
    chance: Optional[float] = None
    duration: Optional[int] = None
    count: Optional[int] = None            # Summons
    minion_level: Optional[int] = None
    threshold: Optional[float] = None      # Enrage
    damage_boost: Optional[float] = None
    speed_boost: Optional[float] = None
    heal_amount: Optional[int] = None      # Regeneration

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "type": self.type,
            "cooldown": self.cooldown,
            "damage": self.damage,
            "chance": self.chance,
            "duration": self.duration,
            "count": self.count,
            "minion_level": self.minion_level,
            "threshold": self.threshold,
            "damage_boost": self.damage_boost,
            "speed_boost": self.speed_boost,
            "heal_amount": self.heal_amount,
        })


@dataclass(frozen=True)
class BossPhase:
    """Health fraction at which a boss gains a stat multiplier."""
    threshold: float
    stat_boost: float
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"threshold": self.threshold, "stat_boost": self.stat_boost, "message": self.message}


@dataclass(frozen=True)
class MonsterLoot:
    """Loot hints for the combat collaborator."""
    gold_min: int
    gold_max: int
    experience: int
    drop_chance: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gold_min": self.gold_min,
            "gold_max": self.gold_max,
            "experience": self.experience,
            "drop_chance": self.drop_chance,
        }


@dataclass
class Monster:
    """A monster stat block placed in a room."""
    kind: ClassVar[EntityKind] = EntityKind.MONSTER

    monster_type: str
    name: str
    level: int
    hp: int
    max_hp: int
    attack: int
    defense: int
    speed: int
    element: Element
    attack_style: AttackStyle
    loot: MonsterLoot
    is_elite: bool = False
    is_boss: bool = False
    is_minion: bool = False
    abilities: List[MonsterAbility] = field(default_factory=list)
    phases: List[BossPhase] = field(default_factory=list)
    x: int = 0
    y: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "kind": self.kind.value,
            "monster_type": self.monster_type,
            "name": self.name,
            "level": self.level,
            "hp": self.hp,
            "max_hp": self.max_hp,
            "attack": self.attack,
            "defense": self.defense,
            "speed": self.speed,
            "element": self.element.value,
            "attack_style": self.attack_style.value,
            "is_elite": self.is_elite,
            "is_boss": self.is_boss,
            "is_minion": self.is_minion,
            "abilities": [a.to_dict() for a in self.abilities],
            "phases": [p.to_dict() for p in self.phases],
            "loot": self.loot.to_dict(),
            "x": self.x,
            "y": self.y,
        }


# =============================================================================
# OTHER ENTITIES
# =============================================================================

@dataclass
class Trap:
    """A floor trap."""
    kind: ClassVar[EntityKind] = EntityKind.TRAP

    trap_type: TrapType
    damage: int
    hidden: bool
    x: int = 0
    y: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "trap_type": self.trap_type.value,
            "damage": self.damage,
            "hidden": self.hidden,
            "x": self.x,
            "y": self.y,
        }


@dataclass
class Chest:
    """A closed chest; contents are resolved when it is opened."""
    kind: ClassVar[EntityKind] = EntityKind.CHEST

    rarity: Rarity
    x: int = 0
    y: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "rarity": self.rarity.value, "x": self.x, "y": self.y}


@dataclass
class MerchantOffer:
    """An item for sale."""
    item: Item
    price: int

    def to_dict(self) -> Dict[str, Any]:
        return {"item": self.item.to_dict(), "price": self.price}


@dataclass
class Merchant:
    """A merchant with a generated stock."""
    kind: ClassVar[EntityKind] = EntityKind.MERCHANT

    inventory: List[MerchantOffer] = field(default_factory=list)
    x: int = 0
    y: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "inventory": [o.to_dict() for o in self.inventory],
            "x": self.x,
            "y": self.y,
        }


@dataclass
class Shrine:
    """A shrine granting a timed buff."""
    kind: ClassVar[EntityKind] = EntityKind.SHRINE

    shrine_type: ShrineType
    buff_strength: int      # Percent
    duration: int           # Seconds
    x: int = 0
    y: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "shrine_type": self.shrine_type.value,
            "buff_strength": self.buff_strength,
            "duration": self.duration,
            "x": self.x,
            "y": self.y,
        }


@dataclass
class GroundItem:
    """An item lying on the floor."""
    kind: ClassVar[EntityKind] = EntityKind.ITEM

    item: Item
    x: int = 0
    y: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "item": self.item.to_dict(), "x": self.x, "y": self.y}


Entity = Union[Monster, Trap, Chest, Merchant, Shrine, GroundItem]


# =============================================================================
# ROOM CONTENTS
# =============================================================================

@dataclass
class Hazard:
    """A room-wide environmental hazard."""
    hazard_type: HazardType
    damage: int
    interval: Optional[int] = None        # Seconds between triggers
    slow_effect: Optional[float] = None
    effect_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "hazard_type": self.hazard_type.value,
            "damage": self.damage,
            "interval": self.interval,
            "slow_effect": self.slow_effect,
            "effect_type": self.effect_type,
        })


@dataclass
class WavePlan:
    """Ordered monster batches for a challenge room."""
    waves: List[List[Monster]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.waves)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "waves": [[m.to_dict() for m in wave] for wave in self.waves],
        }


@dataclass
class Reward:
    """A reward bundle granted by a room."""
    gold: int
    experience: int = 0
    items: List[Item] = field(default_factory=list)
    legacy_item: Optional[str] = None
    requires_clear: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "gold": self.gold,
            "experience": self.experience,
            "items": [i.to_dict() for i in self.items],
            "legacy_item": self.legacy_item,
            "requires_clear": self.requires_clear,
        })


# =============================================================================
# ROOMS AND DUNGEON
# =============================================================================

@dataclass
class Room:
    """A generated room in the dungeon."""
    id: int
    rect: Rect
    purpose: RoomPurpose = RoomPurpose.NORMAL
    neighbors: List[int] = field(default_factory=list)
    doors: List[Door] = field(default_factory=list)
    entities: List[Entity] = field(default_factory=list)
    waves: Optional[WavePlan] = None
    reward: Optional[Reward] = None
    hazards: List[Hazard] = field(default_factory=list)

    @property
    def center(self) -> Point:
        return self.rect.center

    @property
    def area(self) -> int:
        return self.rect.area

    def entities_of(self, kind: EntityKind) -> List[Entity]:
        """Get all placed entities of one kind."""
        return [e for e in self.entities if e.kind == kind]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return _compact({
            "id": self.id,
            "rect": self.rect.to_dict(),
            "center": self.center.to_dict(),
            "purpose": self.purpose.value,
            "neighbors": list(self.neighbors),
            "doors": [d.to_dict() for d in self.doors],
            "entities": [e.to_dict() for e in self.entities],
            "waves": self.waves.to_dict() if self.waves else None,
            "reward": self.reward.to_dict() if self.reward else None,
            "hazards": [h.to_dict() for h in self.hazards],
        })


@dataclass
class Dungeon:
    """A complete generated dungeon level."""
    id: str
    difficulty: int
    biome: Biome
    rooms: List[Room] = field(default_factory=list)
    connections: List[Connection] = field(default_factory=list)
    width: int = 0
    height: int = 0
    start_room: Optional[int] = None
    end_room: Optional[int] = None
    seed: Optional[int] = None

    @property
    def floor(self) -> int:
        """A new floor every three difficulty steps."""
        return math.ceil(self.difficulty / 3)

    def get_room(self, room_id: int) -> Room:
        """Get a room by id."""
        return self.rooms[room_id]

    def rooms_with_purpose(self, purpose: RoomPurpose) -> List[Room]:
        return [r for r in self.rooms if r.purpose == purpose]

    def summary(self) -> Dict[str, Any]:
        """Room purpose counts and entity totals."""
        purposes: Dict[str, int] = {}
        entity_counts: Dict[str, int] = {}
        for room in self.rooms:
            purposes[room.purpose.value] = purposes.get(room.purpose.value, 0) + 1
            for entity in room.entities:
                entity_counts[entity.kind.value] = entity_counts.get(entity.kind.value, 0) + 1

        return {
            "id": self.id,
            "biome": self.biome.value,
            "difficulty": self.difficulty,
            "floor": self.floor,
            "total_rooms": len(self.rooms),
            "connections": len(self.connections),
            "room_purposes": purposes,
            "entities": entity_counts,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses and persistence."""
        return {
            "id": self.id,
            "difficulty": self.difficulty,
            "floor": self.floor,
            "biome": self.biome.value,
            "width": self.width,
            "height": self.height,
            "start_room": self.start_room,
            "end_room": self.end_room,
            "seed": self.seed,
            "rooms": [r.to_dict() for r in self.rooms],
            "connections": [c.to_dict() for c in self.connections],
        }
