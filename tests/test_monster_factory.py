"""Tests for monster and boss creation."""
import pytest

from dungeon_loop.core.random_provider import RandomProvider
from dungeon_loop.core.dungeon.biomes import Biome
from dungeon_loop.core.dungeon.models import AttackStyle, Element
from dungeon_loop.core.dungeon.monster_factory import (
    ELITE_ABILITIES,
    GENERIC_MONSTER_POOL,
    MONSTER_POOLS,
    MonsterFactory,
    boss_stats,
    monster_loot,
    monster_stats,
)


class TestStatFormulas:
    """Tests for stat scaling."""

    def test_normal_stats_difficulty_one(self):
        """Normal monster at difficulty 1."""
        assert monster_stats(1, False) == {"hp": 18, "attack": 6, "defense": 3, "speed": 83}

    def test_elite_stats_difficulty_one(self):
        """Elite monster at difficulty 1, floored."""
        assert monster_stats(1, True) == {"hp": 35, "attack": 9, "defense": 6, "speed": 105}

    @pytest.mark.parametrize("difficulty", range(1, 31))
    def test_elite_at_least_normal(self, difficulty):
        """Elites are never weaker than normal monsters on any stat."""
        normal = monster_stats(difficulty, False)
        elite = monster_stats(difficulty, True)
        for stat in normal:
            assert elite[stat] >= normal[stat]

    def test_boss_stats(self):
        """Boss formula at difficulty 3."""
        assert boss_stats(3) == {"hp": 160, "attack": 21, "defense": 14, "speed": 135}

    def test_loot_hints(self):
        """Loot hints scale by tier."""
        normal = monster_loot(4)
        elite = monster_loot(4, is_elite=True)
        boss = monster_loot(4, is_boss=True)
        assert (normal.gold_min, normal.gold_max, normal.experience) == (9, 18, 14)
        assert (elite.gold_min, elite.gold_max, elite.experience) == (22, 40, 27)
        assert (boss.gold_min, boss.gold_max, boss.experience) == (140, 230, 160)
        assert (normal.drop_chance, elite.drop_chance, boss.drop_chance) == (0.3, 0.7, 1.0)


class TestCreateMonster:
    """Tests for normal and elite monsters."""

    def test_type_from_biome_pool(self):
        """Monster types come from the biome's pool."""
        factory = MonsterFactory(RandomProvider(1))
        for _ in range(50):
            monster = factory.create_monster(Biome.CAVE, 2)
            assert monster.monster_type in MONSTER_POOLS[Biome.CAVE]

    def test_generic_pool_fallback(self):
        """Biomes without a pool use the generic one."""
        factory = MonsterFactory(RandomProvider(1))
        for _ in range(20):
            assert factory.create_monster(Biome.GENERIC, 2).monster_type in GENERIC_MONSTER_POOL

    def test_forced_normal(self):
        """A forced normal monster has no abilities."""
        monster = MonsterFactory(RandomProvider(1)).create_monster(Biome.FOREST, 5, is_elite=False)
        assert not monster.is_elite
        assert monster.abilities == []
        assert monster.level == 5
        assert monster.hp == monster.max_hp == 30

    def test_elite_has_one_ability_below_ten(self):
        """Elites get one ability at low difficulty."""
        factory = MonsterFactory(RandomProvider(2))
        monster = factory.create_monster(Biome.RUINS, 9, is_elite=True)
        assert monster.is_elite
        assert monster.name.startswith("Elite ")
        assert len(monster.abilities) == 1
        ability = monster.abilities[0]
        assert ability.type in ELITE_ABILITIES[monster.attack_style]
        assert 5 <= ability.cooldown <= 10
        assert ability.damage == 18
        assert ability.chance == 0.3

    def test_elite_has_two_distinct_abilities_at_ten(self):
        """Elites get two different abilities from difficulty 10."""
        factory = MonsterFactory(RandomProvider(3))
        for _ in range(20):
            monster = factory.create_monster(Biome.TOWER, 10, is_elite=True)
            types = [a.type for a in monster.abilities]
            assert len(types) == 2
            assert len(set(types)) == 2

    def test_elite_rate_is_low(self):
        """Unforced elites are rare."""
        factory = MonsterFactory(RandomProvider(4))
        elites = sum(factory.create_monster(Biome.CASTLE, 1).is_elite for _ in range(2000))
        assert 40 <= elites <= 170

    def test_deterministic(self):
        """Same seed, same monster."""
        a = MonsterFactory(RandomProvider(9)).create_monster(Biome.MINE, 6)
        b = MonsterFactory(RandomProvider(9)).create_monster(Biome.MINE, 6)
        assert a.to_dict() == b.to_dict()


class TestElementsAndStyles:
    """Tests for element and attack style resolution."""

    def test_fixed_elements(self):
        """Some monster types always have the same element."""
        factory = MonsterFactory(RandomProvider(1))
        assert factory.roll_element("ghost", Biome.RUINS) == Element.LIGHT
        assert factory.roll_element("wraith", Biome.FOREST) == Element.DARK

    def test_biome_element_table(self):
        """Cave monsters only roll cave elements."""
        factory = MonsterFactory(RandomProvider(1))
        elements = {factory.roll_element("bat", Biome.CAVE) for _ in range(500)}
        assert elements <= {Element.NEUTRAL, Element.EARTH, Element.DARK}
        assert Element.NEUTRAL in elements

    def test_fixed_attack_styles(self):
        """Known types have a fixed attack style."""
        factory = MonsterFactory(RandomProvider(1))
        assert factory.attack_style_for("fairy") == AttackStyle.RANGED
        assert factory.attack_style_for("mage") == AttackStyle.MAGIC
        assert factory.attack_style_for("goblin") == AttackStyle.MELEE

    def test_unknown_attack_style_is_random(self):
        """Other types get a random style."""
        factory = MonsterFactory(RandomProvider(1))
        styles = {factory.attack_style_for("rockworm") for _ in range(100)}
        assert styles == set(AttackStyle)


class TestCreateBoss:
    """Tests for bosses."""

    def test_forest_boss(self):
        """The forest boss is the ancient treant."""
        boss = MonsterFactory(RandomProvider(1)).create_boss(Biome.FOREST, 4)
        assert boss.monster_type == "ancient_treant"
        assert boss.is_boss
        assert boss.level == 7
        assert boss.hp == boss.max_hp == 180
        assert boss.element == Element.EARTH
        assert boss.loot.drop_chance == 1.0
        assert [(p.threshold, p.stat_boost) for p in boss.phases] == [(0.7, 1.2), (0.3, 1.5)]

        abilities = {a.type: a for a in boss.abilities}
        assert abilities["healing_sap"].heal_amount == 13
        assert abilities["healing_sap"].cooldown == 25
        assert abilities["root_trap"].damage == 22
        assert 8 <= abilities["root_trap"].cooldown <= 15
        assert abilities["root_trap"].chance == 0.8

    def test_generic_boss(self):
        """Unknown biomes get the chaos guardian."""
        boss = MonsterFactory(RandomProvider(1)).create_boss(Biome.GENERIC, 10)
        assert boss.monster_type == "chaos_guardian"
        abilities = {a.type: a for a in boss.abilities}
        assert abilities["summon_minion"].count == 3
        assert abilities["summon_minion"].minion_level == 8
        enrage = abilities["enrage"]
        assert (enrage.threshold, enrage.damage_boost, enrage.speed_boost) == (0.3, 1.5, 1.3)

    def test_blink_abilities(self):
        """Teleport-style abilities have a fixed cooldown and chance."""
        boss = MonsterFactory(RandomProvider(1)).create_boss(Biome.TOWER, 2)
        teleport = next(a for a in boss.abilities if a.type == "teleport")
        assert (teleport.cooldown, teleport.chance) == (12, 0.6)
        assert teleport.damage is None
