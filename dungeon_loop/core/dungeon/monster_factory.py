"""
Monster Factory.

Builds normal, elite and boss stat blocks for a biome and difficulty.
Placement (x, y) is left to the population engine.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
import math

from ..random_provider import RandomProvider
from .biomes import Biome
from .models import (
    AttackStyle,
    BossPhase,
    Element,
    Monster,
    MonsterAbility,
    MonsterLoot,
)


ELITE_CHANCE = 0.05

MONSTER_POOLS: Dict[Biome, List[str]] = {
    Biome.FOREST: ["goblin", "wolf", "spider", "treant", "fairy", "centaur"],
    Biome.CAVE: ["bat", "slime", "spider", "troll", "golem", "drake"],
    Biome.RUINS: ["skeleton", "ghost", "zombie", "mummy", "wraith", "gargoyle"],
    Biome.TOWER: ["imp", "construct", "elemental", "cultist", "harpy", "minotaur"],
    Biome.CASTLE: ["guard", "knight", "archer", "mage", "assassin", "demon"],
    Biome.LIBRARY: ["living_book", "ink_elemental", "paper_golem", "knowledge_eater", "archivist"],
    Biome.MINE: ["kobold", "miner_zombie", "crystal_elemental", "rockworm", "earth_guardian"],
    Biome.CITY: ["thief", "cultist", "guard", "merchant_ghost", "sewer_beast"],
}

GENERIC_MONSTER_POOL = ["goblin", "slime", "skeleton", "bat", "rat"]

# Monster types whose element never varies
FIXED_ELEMENTS: Dict[str, Element] = {
    "fire_elemental": Element.FIRE,
    "ice_drake": Element.ICE,
    "lightning_construct": Element.LIGHTNING,
    "ghost": Element.LIGHT,
    "wraith": Element.DARK,
    "water_nymph": Element.WATER,
    "earth_golem": Element.EARTH,
}

ELEMENT_TABLES: Dict[Biome, List[Tuple[Element, float]]] = {
    Biome.FOREST: [
        (Element.NEUTRAL, 0.6), (Element.EARTH, 0.2), (Element.WATER, 0.1), (Element.LIGHT, 0.1),
    ],
    Biome.CAVE: [(Element.NEUTRAL, 0.5), (Element.EARTH, 0.3), (Element.DARK, 0.2)],
    Biome.RUINS: [
        (Element.NEUTRAL, 0.4), (Element.DARK, 0.4), (Element.FIRE, 0.1), (Element.ICE, 0.1),
    ],
    Biome.TOWER: [
        (Element.NEUTRAL, 0.3), (Element.FIRE, 0.2), (Element.LIGHTNING, 0.2),
        (Element.DARK, 0.1), (Element.LIGHT, 0.2),
    ],
    Biome.CASTLE: [
        (Element.NEUTRAL, 0.5), (Element.FIRE, 0.2), (Element.ICE, 0.1), (Element.LIGHT, 0.2),
    ],
}

GENERIC_ELEMENT_TABLE = [
    (Element.NEUTRAL, 0.7), (Element.FIRE, 0.1), (Element.ICE, 0.1), (Element.LIGHTNING, 0.1),
]

ATTACK_STYLES: Dict[str, AttackStyle] = {
    "goblin": AttackStyle.MELEE,
    "wolf": AttackStyle.MELEE,
    "spider": AttackStyle.MELEE,
    "bat": AttackStyle.MELEE,
    "slime": AttackStyle.MELEE,
    "treant": AttackStyle.MELEE,
    "troll": AttackStyle.MELEE,
    "golem": AttackStyle.MELEE,
    "skeleton": AttackStyle.MELEE,
    "zombie": AttackStyle.MELEE,
    "guard": AttackStyle.MELEE,
    "knight": AttackStyle.MELEE,
    "minotaur": AttackStyle.MELEE,
    "fairy": AttackStyle.RANGED,
    "imp": AttackStyle.RANGED,
    "harpy": AttackStyle.RANGED,
    "archer": AttackStyle.RANGED,
    "centaur": AttackStyle.RANGED,
    "ghost": AttackStyle.MAGIC,
    "wraith": AttackStyle.MAGIC,
    "mage": AttackStyle.MAGIC,
    "cultist": AttackStyle.MAGIC,
    "elemental": AttackStyle.MAGIC,
    "construct": AttackStyle.MAGIC,
    "drake": AttackStyle.MAGIC,
}

ELITE_ABILITIES: Dict[AttackStyle, List[str]] = {
    AttackStyle.MELEE: ["knockback", "stun", "bleed", "multi_attack", "charge"],
    AttackStyle.RANGED: ["poison", "snare", "multi_shot", "piercing_shot", "mark_target"],
    AttackStyle.MAGIC: [
        "fireball", "frost_nova", "lightning_chain", "teleport", "summon_minion", "life_drain",
    ],
}


@dataclass(frozen=True)
class BossTemplate:
    """Fixed identity of a biome's boss."""
    monster_type: str
    name: str
    element: Element
    attack_style: AttackStyle
    abilities: Tuple[str, ...]


BOSS_TEMPLATES: Dict[Biome, BossTemplate] = {
    Biome.FOREST: BossTemplate(
        "ancient_treant", "Ancient Treant", Element.EARTH, AttackStyle.MAGIC,
        ("root_trap", "nature_fury", "healing_sap", "thorn_armor"),
    ),
    Biome.CAVE: BossTemplate(
        "cave_troll", "Lord of the Caves", Element.EARTH, AttackStyle.MELEE,
        ("boulder_throw", "ground_slam", "regeneration", "enrage"),
    ),
    Biome.RUINS: BossTemplate(
        "lich_lord", "Lich Lord", Element.DARK, AttackStyle.MAGIC,
        ("death_bolt", "summon_undead", "life_drain", "curse"),
    ),
    Biome.TOWER: BossTemplate(
        "archmage", "Archmage", Element.LIGHTNING, AttackStyle.MAGIC,
        ("arcane_barrage", "mirror_image", "teleport", "time_warp"),
    ),
    Biome.CASTLE: BossTemplate(
        "dark_knight", "Dark Knight", Element.DARK, AttackStyle.MELEE,
        ("soul_strike", "shadow_step", "fear_aura", "life_leech"),
    ),
    Biome.LIBRARY: BossTemplate(
        "knowledge_guardian", "Guardian of Knowledge", Element.LIGHT, AttackStyle.MAGIC,
        ("word_of_power", "book_storm", "forbidden_knowledge", "reality_warp"),
    ),
    Biome.MINE: BossTemplate(
        "crystal_golem", "Crystal Golem", Element.EARTH, AttackStyle.MELEE,
        ("crystal_spray", "reflective_shield", "crystal_growth", "earth_tremor"),
    ),
    Biome.CITY: BossTemplate(
        "assassin_master", "Assassin Guildmaster", Element.NEUTRAL, AttackStyle.MELEE,
        ("shadow_strike", "vanish", "poison_daggers", "smoke_bomb"),
    ),
}

GENERIC_BOSS = BossTemplate(
    "chaos_guardian", "Guardian of Chaos", Element.NEUTRAL, AttackStyle.MELEE,
    ("chaos_strike", "reality_warp", "summon_minion", "enrage"),
)

BOSS_PHASES = (
    BossPhase(threshold=0.7, stat_boost=1.2, message="The boss flies into a rage!"),
    BossPhase(threshold=0.3, stat_boost=1.5, message="The boss unleashes its ultimate power!"),
)

SUMMON_ABILITIES = {"summon_undead", "summon_minion"}
BLINK_ABILITIES = {"teleport", "shadow_step", "vanish"}
HEAL_ABILITIES = {"healing_sap", "regeneration"}


# =============================================================================
# STAT FORMULAS
# =============================================================================

def monster_stats(difficulty: int, is_elite: bool) -> Dict[str, int]:
    """Floored hp/attack/defense/speed for a normal or elite monster."""
    d = difficulty
    if is_elite:
        stats = {"hp": 30 + d * 5, "attack": 8 + d * 1.5, "defense": 5 + d, "speed": 100 + d * 5}
    else:
        stats = {"hp": 15 + d * 3, "attack": 5 + d, "defense": 3 + d * 0.5, "speed": 80 + d * 3}
    return {k: math.floor(v) for k, v in stats.items()}


def boss_stats(difficulty: int) -> Dict[str, int]:
    """Floored hp/attack/defense/speed for a boss."""
    d = difficulty
    stats = {"hp": 100 + d * 20, "attack": 15 + d * 2, "defense": 10 + d * 1.5, "speed": 120 + d * 5}
    return {k: math.floor(v) for k, v in stats.items()}


def monster_loot(difficulty: int, is_elite: bool = False, is_boss: bool = False) -> MonsterLoot:
    """Loot hints handed to the combat collaborator."""
    d = difficulty
    if is_boss:
        return MonsterLoot(100 + d * 10, 150 + d * 20, 100 + d * 15, 1.0)
    if is_elite:
        return MonsterLoot(10 + d * 3, 20 + d * 5, 15 + d * 3, 0.7)
    return MonsterLoot(5 + d, 10 + d * 2, 10 + d, 0.3)


def display_name(monster_type: str) -> str:
    return monster_type.replace("_", " ").title()


# =============================================================================
# FACTORY
# =============================================================================

class MonsterFactory:
    """Creates monsters from the biome tables using an injected stream."""

    def __init__(self, rng: RandomProvider):
        self.rng = rng

    def create_monster(
        self,
        biome: Biome,
        difficulty: int,
        is_elite: Optional[bool] = None
    ) -> Monster:
        """
        Create a normal or elite monster.

        Args:
            biome: Selects the monster pool and element table
            difficulty: Scales stats and loot
            is_elite: Force elite status; None rolls the flat elite chance

        Returns:
            Monster with position (0, 0)
        """
        monster_type = self.rng.choice(MONSTER_POOLS.get(biome, GENERIC_MONSTER_POOL))
        if is_elite is None:
            is_elite = self.rng.chance(ELITE_CHANCE)

        stats = monster_stats(difficulty, is_elite)
        element = self.roll_element(monster_type, biome)
        attack_style = self.attack_style_for(monster_type)
        abilities = self._elite_abilities(attack_style, difficulty) if is_elite else []

        name = display_name(monster_type)
        return Monster(
            monster_type=monster_type,
            name=f"Elite {name}" if is_elite else name,
            level=difficulty,
            hp=stats["hp"],
            max_hp=stats["hp"],
            attack=stats["attack"],
            defense=stats["defense"],
            speed=stats["speed"],
            element=element,
            attack_style=attack_style,
            loot=monster_loot(difficulty, is_elite=is_elite),
            is_elite=is_elite,
            abilities=abilities,
        )

    def create_boss(self, biome: Biome, difficulty: int) -> Monster:
        """
        Create the biome's boss.

        Bosses are three levels above the dungeon difficulty, carry their
        full ability set and gain stat boosts at 70% and 30% health.
        """
        template = BOSS_TEMPLATES.get(biome, GENERIC_BOSS)
        stats = boss_stats(difficulty)

        return Monster(
            monster_type=template.monster_type,
            name=template.name,
            level=difficulty + 3,
            hp=stats["hp"],
            max_hp=stats["hp"],
            attack=stats["attack"],
            defense=stats["defense"],
            speed=stats["speed"],
            element=template.element,
            attack_style=template.attack_style,
            loot=monster_loot(difficulty, is_boss=True),
            is_boss=True,
            abilities=[self._boss_ability(a, difficulty) for a in template.abilities],
            phases=list(BOSS_PHASES),
        )

    def roll_element(self, monster_type: str, biome: Biome) -> Element:
        """Fixed element for some types, otherwise a biome-weighted roll."""
        if monster_type in FIXED_ELEMENTS:
            return FIXED_ELEMENTS[monster_type]
        return self.rng.weighted_choice(ELEMENT_TABLES.get(biome, GENERIC_ELEMENT_TABLE))

    def attack_style_for(self, monster_type: str) -> AttackStyle:
        if monster_type in ATTACK_STYLES:
            return ATTACK_STYLES[monster_type]
        return self.rng.choice(list(AttackStyle))

    def _elite_abilities(self, attack_style: AttackStyle, difficulty: int) -> List[MonsterAbility]:
        count = 2 if difficulty >= 10 else 1
        return [
            MonsterAbility(
                type=ability,
                cooldown=self.rng.between(5, 10),
                damage=math.floor(5 + difficulty * 1.5),
                chance=0.3,
            )
            for ability in self.rng.sample_unique(ELITE_ABILITIES[attack_style], count)
        ]

    def _boss_ability(self, ability: str, difficulty: int) -> MonsterAbility:
        if ability in SUMMON_ABILITIES:
            return MonsterAbility(
                type=ability,
                cooldown=20,
                count=1 + difficulty // 5,
                minion_level=max(1, difficulty - 2),
            )
        if ability in BLINK_ABILITIES:
            return MonsterAbility(type=ability, cooldown=12, chance=0.6)
        if ability == "enrage":
            return MonsterAbility(
                type=ability,
                cooldown=30,
                threshold=0.3,
                damage_boost=1.5,
                speed_boost=1.3,
                duration=10,
            )
        if ability in HEAL_ABILITIES:
            return MonsterAbility(
                type=ability,
                cooldown=25,
                heal_amount=5 + difficulty * 2,
                duration=5,
            )
        return MonsterAbility(
            type=ability,
            cooldown=self.rng.between(8, 15),
            damage=10 + difficulty * 3,
            duration=5,
            chance=0.8,
        )
