"""
Loot Table Resolution.

Generates item records scaled by difficulty:
- Rarity rolls over difficulty-shifted weight tables
- Weapon, armor, accessory and consumable sub-generators
- Attribute and special-effect tables drawn without replacement
- Merchant pricing and chest contents
"""
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Tuple
import logging
import math

from ..random_provider import RandomProvider
from .models import (
    Chest,
    ConsumableEffect,
    Item,
    ItemAttribute,
    ItemCategory,
    MerchantOffer,
    Rarity,
    RARITY_ORDER,
    SpecialEffect,
)

logger = logging.getLogger(__name__)


# =============================================================================
# RARITY TABLES
# =============================================================================

# Percent weights, in roll order
BASE_RARITY_WEIGHTS: Dict[Rarity, float] = {
    Rarity.COMMON: 55,
    Rarity.UNCOMMON: 30,
    Rarity.RARE: 10,
    Rarity.EPIC: 4,
    Rarity.LEGENDARY: 1,
    Rarity.MYTHIC: 0,
}

TREASURE_RARITY_WEIGHTS: Dict[Rarity, float] = {
    Rarity.COMMON: 20,
    Rarity.UNCOMMON: 40,
    Rarity.RARE: 25,
    Rarity.EPIC: 10,
    Rarity.LEGENDARY: 4,
    Rarity.MYTHIC: 1,
}

MYTHIC_MIN_DIFFICULTY = 10

# Stat multiplier applied to weapon attack / armor defense
RARITY_MULTIPLIERS: Dict[Rarity, float] = {
    Rarity.COMMON: 1.0,
    Rarity.UNCOMMON: 1.3,
    Rarity.RARE: 1.8,
    Rarity.EPIC: 2.5,
    Rarity.LEGENDARY: 3.5,
    Rarity.MYTHIC: 5.0,
}

PRICE_MULTIPLIERS: Dict[Rarity, float] = {
    Rarity.COMMON: 1,
    Rarity.UNCOMMON: 2,
    Rarity.RARE: 5,
    Rarity.EPIC: 15,
    Rarity.LEGENDARY: 50,
    Rarity.MYTHIC: 200,
}

STAT_JITTER = (0.9, 1.1)
ATTRIBUTE_JITTER = (0.8, 1.2)
PRICE_JITTER = (0.8, 1.2)


def rarity_weights(difficulty: int, treasure: bool = False) -> List[Tuple[Rarity, float]]:
    """
    Build the difficulty-shifted rarity table.

    Higher difficulty moves weight out of common and into the upper
    tiers. Mythic stays at zero below difficulty 10 whatever the table.

    Args:
        difficulty: Dungeon difficulty
        treasure: Use the treasure-room table (flatter, higher tiers)

    Returns:
        Ordered (rarity, weight) buckets for RandomProvider.weighted_choice
    """
    base = TREASURE_RARITY_WEIGHTS if treasure else BASE_RARITY_WEIGHTS
    weights = {
        Rarity.COMMON: max(10, base[Rarity.COMMON] - difficulty * 2),
        Rarity.UNCOMMON: base[Rarity.UNCOMMON] + difficulty,
        Rarity.RARE: base[Rarity.RARE] + difficulty,
        Rarity.EPIC: base[Rarity.EPIC] + difficulty // 2,
        Rarity.LEGENDARY: base[Rarity.LEGENDARY] + difficulty // 5,
        Rarity.MYTHIC: min(5, base[Rarity.MYTHIC] + difficulty // 10),
    }
    if difficulty < MYTHIC_MIN_DIFFICULTY:
        weights[Rarity.MYTHIC] = 0

    return [(rarity, weights[rarity]) for rarity in RARITY_ORDER]


def base_attack(difficulty: int) -> int:
    """Weapon attack before rarity and jitter."""
    return 5 + difficulty * 2


def base_defense(difficulty: int) -> int:
    """Armor defense before rarity and jitter."""
    return 3 + difficulty


def expected_attack(difficulty: int, rarity: Rarity) -> float:
    """Jitter-free weapon attack."""
    return base_attack(difficulty) * RARITY_MULTIPLIERS[rarity]


def expected_defense(difficulty: int, rarity: Rarity) -> float:
    """Jitter-free armor defense."""
    return base_defense(difficulty) * RARITY_MULTIPLIERS[rarity]


def base_price(difficulty: int) -> int:
    return 10 + difficulty * 5


# =============================================================================
# EQUIPMENT TABLES
# =============================================================================

WEAPON_NAMES: Dict[str, List[str]] = {
    "sword": ["Sword", "Longsword", "Greatsword", "Blade"],
    "axe": ["Axe", "Battleaxe", "Double Axe"],
    "mace": ["Mace", "Cudgel", "War Maul"],
    "spear": ["Spear", "Pike", "Javelin"],
    "bow": ["Bow", "Longbow", "Composite Bow"],
    "staff": ["Staff", "Rod", "Runestaff"],
    "dagger": ["Dagger", "Dirk", "Stiletto"],
    "wand": ["Wand", "Spellwand", "Focus"],
    "hammer": ["Hammer", "Warhammer", "Crusher"],
    "fist": ["Gauntlets", "Knuckles", "Fighting Wraps"],
}

ARMOR_NAMES: Dict[str, List[str]] = {
    "helmet": ["Helm", "Helmet", "Coif"],
    "chest": ["Armor", "Breastplate", "Robe"],
    "gloves": ["Gloves", "Gauntlets", "Bracers"],
    "boots": ["Boots", "Greaves", "Shoes"],
    "shield": ["Shield", "Buckler", "Targe"],
}

ACCESSORY_NAMES: Dict[str, List[str]] = {
    "ring": ["Ring", "Band", "Loop"],
    "amulet": ["Necklace", "Amulet", "Pendant"],
    "bracelet": ["Bracelet", "Bangle", "Wristband"],
    "belt": ["Belt", "Girdle", "Sash"],
    "cloak": ["Cloak", "Mantle", "Shroud"],
}

NAME_ADJECTIVES: Dict[ItemCategory, List[str]] = {
    ItemCategory.WEAPON: [
        "Mighty", "Keen", "Sharp", "Sturdy", "Mysterious", "Enchanted", "Ancient",
        "Crimson", "Azure", "Verdant", "Golden", "Silver", "Shadow", "Shining",
        "Blazing", "Frozen", "Thundering", "Soulbound", "Demonic", "Celestial",
        "Cursed", "Blessed",
    ],
    ItemCategory.ARMOR: [
        "Sturdy", "Hardened", "Reinforced", "Heavy", "Light", "Soulbound",
        "Enchanted", "Ancient", "Legendary", "Valiant", "Warding", "Unyielding",
        "Guardian's", "Knight's", "Warrior's", "Blazing", "Icy", "Thundering",
        "Earthen", "Tidal", "Windswept",
    ],
    ItemCategory.ACCESSORY: [
        "Mysterious", "Enchanted", "Mighty", "Guardian's", "Sage's", "King's",
        "Queen's", "Dragon's", "Demon's", "Angel's", "Ancient", "Holy", "Cursed",
        "Blessed", "Soulbound", "Spirit", "Earthen", "Heavenly", "Blazing", "Icy",
        "Shadow",
    ],
}

# Id prefix per rarity
RARITY_PREFIXES: Dict[ItemCategory, Dict[Rarity, str]] = {
    ItemCategory.WEAPON: {
        Rarity.COMMON: "basic",
        Rarity.UNCOMMON: "fine",
        Rarity.RARE: "superior",
        Rarity.EPIC: "exceptional",
        Rarity.LEGENDARY: "mythical",
        Rarity.MYTHIC: "divine",
    },
    ItemCategory.ARMOR: {
        Rarity.COMMON: "basic",
        Rarity.UNCOMMON: "reinforced",
        Rarity.RARE: "superior",
        Rarity.EPIC: "exceptional",
        Rarity.LEGENDARY: "mythical",
        Rarity.MYTHIC: "divine",
    },
    ItemCategory.ACCESSORY: {
        Rarity.COMMON: "simple",
        Rarity.UNCOMMON: "ornate",
        Rarity.RARE: "superior",
        Rarity.EPIC: "exceptional",
        Rarity.LEGENDARY: "mythical",
        Rarity.MYTHIC: "divine",
    },
}

COMMON_NAME_PREFIX: Dict[ItemCategory, str] = {
    ItemCategory.WEAPON: "Basic",
    ItemCategory.ARMOR: "Basic",
    ItemCategory.ACCESSORY: "Plain",
}

# (min, max) attribute count per rarity. Each tier's max never exceeds
# the next tier's min.
EQUIPMENT_ATTRIBUTE_COUNTS: Dict[Rarity, Tuple[int, int]] = {
    Rarity.COMMON: (0, 0),
    Rarity.UNCOMMON: (1, 2),
    Rarity.RARE: (2, 3),
    Rarity.EPIC: (3, 4),
    Rarity.LEGENDARY: (4, 5),
    Rarity.MYTHIC: (5, 6),
}

ACCESSORY_ATTRIBUTE_COUNTS: Dict[Rarity, Tuple[int, int]] = {
    Rarity.COMMON: (0, 0),
    Rarity.UNCOMMON: (2, 3),
    Rarity.RARE: (3, 4),
    Rarity.EPIC: (4, 5),
    Rarity.LEGENDARY: (5, 6),
    Rarity.MYTHIC: (6, 7),
}

COMMON_ATTRIBUTES = ["hp_bonus", "mp_bonus", "hp_regen", "mp_regen"]

CATEGORY_ATTRIBUTES: Dict[ItemCategory, List[str]] = {
    ItemCategory.WEAPON: [
        "attack_bonus", "critical_chance", "critical_damage", "attack_speed", "elemental_damage",
    ],
    ItemCategory.ARMOR: [
        "defense_bonus", "damage_reduction", "elemental_resistance", "status_resistance",
        "max_hp_percent",
    ],
    ItemCategory.ACCESSORY: [
        "gold_find", "item_find", "experience_bonus", "skill_cooldown", "dodge_chance",
        "movement_speed",
    ],
}


def attribute_base_value(attribute: str, difficulty: int) -> float:
    """Difficulty-scaled base magnitude of an attribute."""
    d = difficulty
    values = {
        "hp_bonus": 10 + d * 2,
        "mp_bonus": 8 + d * 1.5,
        "hp_regen": 1 + d * 0.3,
        "mp_regen": 1 + d * 0.2,
        "attack_bonus": 3 + d,
        "critical_chance": 3 + math.floor(d * 0.5),
        "critical_damage": 10 + d * 2,
        "attack_speed": 5 + math.floor(d * 0.7),
        "elemental_damage": 5 + d,
        "defense_bonus": 2 + d * 0.8,
        "damage_reduction": 2 + math.floor(d * 0.3),
        "elemental_resistance": 5 + d * 0.7,
        "status_resistance": 5 + d * 0.7,
        "max_hp_percent": 3 + math.floor(d * 0.5),
        "gold_find": 5 + d,
        "item_find": 5 + d * 0.8,
        "experience_bonus": 5 + d * 0.8,
        "skill_cooldown": 3 + math.floor(d * 0.4),
        "dodge_chance": 2 + math.floor(d * 0.3),
        "movement_speed": 3 + math.floor(d * 0.4),
    }
    return values.get(attribute, 5)


SPECIAL_EFFECT_POOLS: Dict[ItemCategory, Dict[str, List[str]]] = {
    ItemCategory.WEAPON: {
        "sword": ["bleeding", "stun", "knockback"],
        "axe": ["critical_cleave", "armor_break", "execute_damage"],
        "mace": ["stun", "knockback", "defense_break"],
        "spear": ["pierce", "bleed", "reach_attack"],
        "bow": ["multishot", "pierce", "mark_target"],
        "staff": ["elemental_burst", "mana_leech", "spell_amplify"],
        "dagger": ["backstab_bonus", "poison", "quick_strike"],
        "wand": ["spell_critical", "element_convert", "mana_restore"],
        "hammer": ["stun", "armor_break", "earthquake"],
        "fist": ["combo_attack", "counter", "dodge_bonus"],
    },
    ItemCategory.ARMOR: {
        "helmet": ["magic_resist", "perception", "concentration"],
        "chest": ["damage_reflect", "thorns", "last_stand"],
        "gloves": ["attack_speed", "critical_bonus", "spell_haste"],
        "boots": ["movement_speed", "dodge_chance", "falling_damage_immune"],
        "shield": ["block_chance", "counter_attack", "projectile_reflect"],
    },
    ItemCategory.ACCESSORY: {
        "ring": ["skill_enhance", "element_affinity", "resource_restore"],
        "amulet": ["life_leech", "damage_convert", "status_immune"],
        "bracelet": ["cooldown_reduction", "attack_speed", "spell_haste"],
        "belt": ["potion_enhance", "gold_find", "inventory_space"],
        "cloak": ["stealth", "evasion", "trap_detection"],
    },
}

SPECIAL_EFFECT_BASE: Dict[str, int] = {
    "bleeding": 5, "bleed": 5, "stun": 1, "knockback": 3,
    "critical_cleave": 30, "armor_break": 20, "execute_damage": 15,
    "defense_break": 15, "pierce": 20, "reach_attack": 1, "multishot": 2,
    "mark_target": 10, "elemental_burst": 25, "mana_leech": 10,
    "spell_amplify": 15, "backstab_bonus": 50, "poison": 10, "quick_strike": 15,
    "spell_critical": 20, "element_convert": 100, "mana_restore": 5,
    "earthquake": 25, "combo_attack": 10, "counter": 20, "dodge_bonus": 10,
    "magic_resist": 15, "perception": 20, "concentration": 15,
    "damage_reflect": 15, "thorns": 5, "last_stand": 30, "attack_speed": 10,
    "critical_bonus": 20, "spell_haste": 10, "movement_speed": 15,
    "dodge_chance": 8, "falling_damage_immune": 100, "block_chance": 15,
    "counter_attack": 20, "projectile_reflect": 30, "skill_enhance": 15,
    "element_affinity": 25, "resource_restore": 5, "life_leech": 10,
    "damage_convert": 20, "status_immune": 1, "cooldown_reduction": 10,
    "potion_enhance": 20, "gold_find": 15, "inventory_space": 5, "stealth": 1,
    "evasion": 15, "trap_detection": 100,
}

# Flags and fixed counts; these never scale
FLAT_EFFECTS = {
    "stun", "reach_attack", "multishot", "element_convert", "falling_damage_immune",
    "status_immune", "stealth", "trap_detection",
}

SPECIAL_EFFECT_COUNTS: Dict[Rarity, int] = {
    Rarity.RARE: 1,
    Rarity.EPIC: 1,
    Rarity.LEGENDARY: 2,
    Rarity.MYTHIC: 2,
}

EFFECT_RARITY_MULTIPLIERS: Dict[Rarity, float] = {
    Rarity.RARE: 1.0,
    Rarity.EPIC: 1.5,
    Rarity.LEGENDARY: 2.2,
    Rarity.MYTHIC: 3.0,
}


# =============================================================================
# CONSUMABLE TABLES
# =============================================================================

CONSUMABLE_TYPES = ["potion", "scroll", "food", "bomb"]

POTION_TYPES = ["health", "mana", "strength", "defense", "speed", "agility"]
MERCHANT_POTION_TYPES = ["health", "mana", "strength", "defense", "speed"]
POTION_QUALITIES = ["minor", "normal", "greater", "superior"]

POTION_QUALITY_MULTIPLIERS = {"minor": 0.5, "normal": 1.0, "greater": 1.5, "superior": 2.5}

POTION_QUALITY_RARITY = {
    "minor": Rarity.COMMON,
    "normal": Rarity.COMMON,
    "greater": Rarity.UNCOMMON,
    "superior": Rarity.RARE,
}

SCROLL_TYPES = [
    "teleport", "identify", "enchant", "fireball", "frost", "lightning", "healing", "protection",
]

SCROLL_RARITY = {
    "teleport": Rarity.UNCOMMON,
    "identify": Rarity.UNCOMMON,
    "enchant": Rarity.RARE,
    "protection": Rarity.RARE,
}

FOOD_TYPES = ["bread", "meat", "fruit", "fish", "stew"]
FOOD_ADJECTIVES = ["Fresh", "Tasty", "Hearty", "Special", "Fine"]
FOOD_BUFFS = ["strength", "defense", "speed", "health_regen"]

# Bomb type -> seconds of its status effect
BOMB_STATUS_DURATIONS = {"fire": 3, "ice": 2, "poison": 5, "shock": 1, "light": 3}

LEGACY_ITEMS = [
    "soul_guardian_stone", "golden_key", "ancient_compass", "philosopher_stone",
    "kings_crown", "dragon_heart", "time_hourglass", "dimensional_pocket",
    "alchemist_pendant", "book_of_secrets",
]

# Chest rarity -> (gold range, item count range)
CHEST_CONTENTS: Dict[Rarity, Tuple[Tuple[int, int], Tuple[int, int]]] = {
    Rarity.COMMON: ((10, 30), (1, 2)),
    Rarity.UNCOMMON: ((30, 60), (1, 2)),
    Rarity.RARE: ((50, 100), (1, 3)),
    Rarity.EPIC: ((100, 200), (2, 3)),
    Rarity.LEGENDARY: ((200, 500), (2, 4)),
    Rarity.MYTHIC: ((400, 800), (3, 5)),
}

EQUIPMENT_CATEGORIES = [ItemCategory.WEAPON, ItemCategory.ARMOR, ItemCategory.ACCESSORY]
ALL_CATEGORIES = EQUIPMENT_CATEGORIES + [ItemCategory.CONSUMABLE]


@dataclass
class ChestContents:
    """What a chest yields when opened."""
    gold: int
    items: List[Item] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"gold": self.gold, "items": [i.to_dict() for i in self.items]}


# =============================================================================
# RESOLVER
# =============================================================================

class LootTableResolver:
    """
    Turns (difficulty, category, treasure flag) into item records.

    All draws come from the injected RandomProvider, so the same stream
    position and inputs always produce the same item.
    """

    def __init__(self, rng: RandomProvider):
        self.rng = rng

    def roll_rarity(self, difficulty: int, treasure: bool = False) -> Rarity:
        """Roll a rarity tier for the given difficulty."""
        return self.rng.weighted_choice(rarity_weights(difficulty, treasure))

    def create_item(
        self,
        difficulty: int,
        category: Optional[ItemCategory] = None,
        treasure: bool = False,
        rarity: Optional[Rarity] = None,
    ) -> Item:
        """
        Generate one item.

        Args:
            difficulty: Dungeon difficulty driving stats and rarity
            category: Force a category (None picks one uniformly)
            treasure: Use the treasure-room rarity table
            rarity: Force a rarity instead of rolling one

        Returns:
            A fully specified Item. Consumables derive their rarity
            from their own quality.
        """
        if rarity is None:
            rarity = self.roll_rarity(difficulty, treasure)
        if category is None:
            category = self.rng.choice(ALL_CATEGORIES)

        if category == ItemCategory.WEAPON:
            return self.create_weapon(rarity, difficulty)
        if category == ItemCategory.ARMOR:
            return self.create_armor(rarity, difficulty)
        if category == ItemCategory.ACCESSORY:
            return self.create_accessory(rarity, difficulty)
        return self.create_consumable(difficulty)

    # -------------------------------------------------------------------------
    # Equipment
    # -------------------------------------------------------------------------

    def create_weapon(self, rarity: Rarity, difficulty: int) -> Item:
        """Generate a weapon with a jittered attack stat."""
        sub_type = self.rng.choice(list(WEAPON_NAMES))
        name = self._equipment_name(ItemCategory.WEAPON, WEAPON_NAMES[sub_type], rarity)
        attack = math.floor(expected_attack(difficulty, rarity) * self.rng.jitter(*STAT_JITTER))

        return self._finish_equipment(
            Item(
                id=f"{RARITY_PREFIXES[ItemCategory.WEAPON][rarity]}_{sub_type}",
                name=name,
                category=ItemCategory.WEAPON,
                rarity=rarity,
                sub_type=sub_type,
                attack=attack,
            ),
            difficulty,
        )

    def create_armor(self, rarity: Rarity, difficulty: int) -> Item:
        """Generate an armor piece with a jittered defense stat."""
        sub_type = self.rng.choice(list(ARMOR_NAMES))
        name = self._equipment_name(ItemCategory.ARMOR, ARMOR_NAMES[sub_type], rarity)
        defense = math.floor(expected_defense(difficulty, rarity) * self.rng.jitter(*STAT_JITTER))

        return self._finish_equipment(
            Item(
                id=f"{RARITY_PREFIXES[ItemCategory.ARMOR][rarity]}_{sub_type}",
                name=name,
                category=ItemCategory.ARMOR,
                rarity=rarity,
                sub_type=sub_type,
                defense=defense,
            ),
            difficulty,
        )

    def create_accessory(self, rarity: Rarity, difficulty: int) -> Item:
        """Generate an accessory; accessories carry attributes only."""
        sub_type = self.rng.choice(list(ACCESSORY_NAMES))
        name = self._equipment_name(ItemCategory.ACCESSORY, ACCESSORY_NAMES[sub_type], rarity)

        return self._finish_equipment(
            Item(
                id=f"{RARITY_PREFIXES[ItemCategory.ACCESSORY][rarity]}_{sub_type}",
                name=name,
                category=ItemCategory.ACCESSORY,
                rarity=rarity,
                sub_type=sub_type,
            ),
            difficulty,
        )

    def _equipment_name(self, category: ItemCategory, names: List[str], rarity: Rarity) -> str:
        if rarity == Rarity.COMMON:
            return f"{COMMON_NAME_PREFIX[category]} {names[0]}"
        adjective = self.rng.choice(NAME_ADJECTIVES[category])
        return f"{adjective} {self.rng.choice(names)}"

    def _finish_equipment(self, item: Item, difficulty: int) -> Item:
        """Add attributes, special effects and level requirement."""
        counts = (
            ACCESSORY_ATTRIBUTE_COUNTS
            if item.category == ItemCategory.ACCESSORY
            else EQUIPMENT_ATTRIBUTE_COUNTS
        )
        low, high = counts[item.rarity]
        if high > 0:
            item.attributes = self.generate_attributes(
                self.rng.between(low, high), item.category, difficulty
            )

        if item.rarity in SPECIAL_EFFECT_COUNTS:
            item.special_effects = self.generate_special_effects(
                item.category, item.sub_type, item.rarity, difficulty
            )

        if item.rarity != Rarity.COMMON:
            item.required_level = max(1, difficulty // 2)

        return item

    def generate_attributes(
        self,
        count: int,
        category: ItemCategory,
        difficulty: int
    ) -> List[ItemAttribute]:
        """
        Draw distinct attributes from the category pool.

        Args:
            count: Number of attributes wanted
            category: Item category selecting the pool
            difficulty: Scales each attribute's magnitude

        Returns:
            List of ItemAttribute
        """
        pool = COMMON_ATTRIBUTES + CATEGORY_ATTRIBUTES.get(category, [])
        attributes = []
        for attribute in self.rng.sample_unique(pool, count):
            base = attribute_base_value(attribute, difficulty)
            value = math.floor(base * self.rng.jitter(*ATTRIBUTE_JITTER))
            attributes.append(ItemAttribute(type=attribute, value=max(1, value)))
        return attributes

    def generate_special_effects(
        self,
        category: ItemCategory,
        sub_type: str,
        rarity: Rarity,
        difficulty: int
    ) -> List[SpecialEffect]:
        """Draw distinct special effects for a rare-or-better item."""
        pool = SPECIAL_EFFECT_POOLS.get(category, {}).get(sub_type, [])
        count = SPECIAL_EFFECT_COUNTS.get(rarity, 0)

        effects = []
        for effect in self.rng.sample_unique(pool, count):
            effects.append(SpecialEffect(type=effect, value=special_effect_value(effect, rarity, difficulty)))
        return effects

    # -------------------------------------------------------------------------
    # Consumables
    # -------------------------------------------------------------------------

    def create_consumable(self, difficulty: int) -> Item:
        """Generate a potion, scroll, food or bomb with a stack count."""
        sub_type = self.rng.choice(CONSUMABLE_TYPES)

        if sub_type == "potion":
            item = self.create_potion(difficulty)
        elif sub_type == "scroll":
            item = self._create_scroll(difficulty)
        elif sub_type == "food":
            item = self._create_food(difficulty)
        else:
            item = self._create_bomb(difficulty)

        item.stack_count = self.rng.between(1, 3)
        return item

    def create_potion(self, difficulty: int, potion_type: Optional[str] = None) -> Item:
        """Generate a potion whose quality tracks difficulty."""
        if potion_type is None:
            potion_type = self.rng.choice(POTION_TYPES)

        quality_index = 0
        if difficulty >= 5:
            quality_index = 1
        if difficulty >= 10:
            quality_index = 2
        if difficulty >= 15:
            quality_index = 3
        if self.rng.chance(0.3) and quality_index < 3:
            quality_index += 1

        quality = POTION_QUALITIES[quality_index]
        return _potion_item(potion_type, quality, difficulty)

    def _create_scroll(self, difficulty: int) -> Item:
        scroll_type = self.rng.choice(SCROLL_TYPES)
        value = math.floor((15 + difficulty * 3) * self.rng.jitter(*STAT_JITTER))

        return Item(
            id=f"{scroll_type}_scroll",
            name=f"Scroll of {scroll_type.title()}",
            category=ItemCategory.CONSUMABLE,
            rarity=SCROLL_RARITY.get(scroll_type, Rarity.COMMON),
            sub_type="scroll",
            consumable=ConsumableEffect(effect_type=scroll_type, effect_value=value),
        )

    def _create_food(self, difficulty: int) -> Item:
        food_type = self.rng.choice(FOOD_TYPES)
        adjective = self.rng.choice(FOOD_ADJECTIVES) + " " if self.rng.chance(0.5) else ""

        effect = ConsumableEffect(
            effect_type="heal",
            effect_value=math.floor(5 + difficulty * 1.5),
        )
        rarity = Rarity.COMMON
        if self.rng.chance(0.3):
            effect.buff_type = self.rng.choice(FOOD_BUFFS)
            effect.buff_value = 5 + difficulty // 2
            effect.buff_duration = 60
            rarity = Rarity.UNCOMMON

        return Item(
            id=f"{food_type}_food",
            name=f"{adjective}{food_type.title()}",
            category=ItemCategory.CONSUMABLE,
            rarity=rarity,
            sub_type="food",
            consumable=effect,
        )

    def _create_bomb(self, difficulty: int) -> Item:
        bomb_type = self.rng.choice(list(BOMB_STATUS_DURATIONS))

        return Item(
            id=f"{bomb_type}_bomb",
            name=f"{bomb_type.title()} Bomb",
            category=ItemCategory.CONSUMABLE,
            rarity=Rarity.RARE if difficulty >= 10 else Rarity.UNCOMMON,
            sub_type="bomb",
            consumable=ConsumableEffect(
                effect_type=bomb_type,
                effect_value=15 + difficulty * 3,
                radius=3,
                status_duration=BOMB_STATUS_DURATIONS[bomb_type],
            ),
        )

    # -------------------------------------------------------------------------
    # Pricing and containers
    # -------------------------------------------------------------------------

    def price_item(self, item: Item, difficulty: int) -> int:
        """Merchant price: base(difficulty) x rarity multiplier x jitter."""
        multiplier = PRICE_MULTIPLIERS[item.rarity]
        return math.floor(base_price(difficulty) * multiplier * self.rng.jitter(*PRICE_JITTER))

    def create_merchant_stock(self, difficulty: int) -> List[MerchantOffer]:
        """
        Build a merchant inventory: 4-8 priced items plus 2-4 potions.

        Potions sell at fixed prices by quality.
        """
        offers = []
        for _ in range(self.rng.between(4, 8)):
            item = self.create_item(difficulty)
            offers.append(MerchantOffer(item=item, price=self.price_item(item, difficulty)))

        for _ in range(self.rng.between(2, 4)):
            potion_type = self.rng.choice(MERCHANT_POTION_TYPES)
            greater = self.rng.chance(0.3)
            quality = "greater" if greater else "normal"
            price = 30 + difficulty * 2 if greater else 15 + difficulty
            potion = _potion_item(potion_type, quality, difficulty)
            potion.stack_count = 1
            offers.append(MerchantOffer(item=potion, price=price))

        return offers

    def roll_legacy_item(self, chance: float = 0.01) -> Optional[str]:
        """Very rarely return a unique legacy item id."""
        if self.rng.chance(chance):
            return self.rng.choice(LEGACY_ITEMS)
        return None

    def open_chest(self, chest: Chest, difficulty: int) -> ChestContents:
        """
        Resolve a chest's contents.

        Gold comes from the chest rarity's range, raised 10% per
        difficulty level. Items are equipment rolled on the treasure
        table, raised to the chest's own tier when they roll below it.

        Args:
            chest: The chest being opened
            difficulty: Dungeon difficulty

        Returns:
            ChestContents with gold and items
        """
        (gold_min, gold_max), (items_min, items_max) = CHEST_CONTENTS[chest.rarity]
        gold = math.floor(self.rng.between(gold_min, gold_max) * (1 + 0.1 * difficulty))

        items = []
        for _ in range(self.rng.between(items_min, items_max)):
            rarity = self.roll_rarity(difficulty, treasure=True)
            if rarity.rank < chest.rarity.rank:
                rarity = chest.rarity
            category = self.rng.choice(EQUIPMENT_CATEGORIES)
            items.append(self.create_item(difficulty, category=category, rarity=rarity))

        logger.debug("Opened %s chest: %d gold, %d items", chest.rarity.value, gold, len(items))
        return ChestContents(gold=gold, items=items)


def special_effect_value(effect: str, rarity: Rarity, difficulty: int) -> int:
    """Magnitude of a special effect; flag-like effects never scale."""
    base = SPECIAL_EFFECT_BASE.get(effect, 10)
    if effect in FLAT_EFFECTS:
        return base
    multiplier = EFFECT_RARITY_MULTIPLIERS.get(rarity, 1.0)
    return math.floor(base * multiplier * (1 + 0.02 * difficulty))


def _potion_item(potion_type: str, quality: str, difficulty: int) -> Item:
    value = math.floor((10 + difficulty * 2) * POTION_QUALITY_MULTIPLIERS[quality])
    return Item(
        id=f"{quality}_{potion_type}_potion",
        name=f"{quality.title()} {potion_type.title()} Potion",
        category=ItemCategory.CONSUMABLE,
        rarity=POTION_QUALITY_RARITY[quality],
        sub_type="potion",
        consumable=ConsumableEffect(effect_type=potion_type, effect_value=value, quality=quality),
    )
