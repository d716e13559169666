"""Tests for full dungeon assembly."""
import copy
import itertools

import pytest

from conftest import reachable_from_start
from dungeon_loop.core.errors import InvalidDifficultyError
from dungeon_loop.core.dungeon import Biome, DungeonGenerator, generate_dungeon
from dungeon_loop.core.dungeon.models import EntityKind, RoomPurpose
from dungeon_loop.core.dungeon.room_layout import ROOM_PADDING


class TestSwordForestScenario:
    """End-to-end scenario for the forest dungeon."""

    @pytest.mark.parametrize("seed", range(10))
    def test_eight_room_forest(self, seed):
        """One entrance, one boss room, all rooms reachable, one boss."""
        dungeon = generate_dungeon("sword_forest", 1, seed=seed, room_count=8)

        assert dungeon.biome == Biome.FOREST
        assert 1 <= len(dungeon.rooms) <= 8
        assert len(dungeon.rooms_with_purpose(RoomPurpose.ENTRANCE)) == 1
        boss_rooms = dungeon.rooms_with_purpose(RoomPurpose.BOSS)
        assert len(boss_rooms) == 1
        assert reachable_from_start(dungeon) == set(range(len(dungeon.rooms)))

        bosses = [m for m in boss_rooms[0].entities_of(EntityKind.MONSTER) if m.is_boss]
        assert len(bosses) == 1
        assert bosses[0].monster_type == "ancient_treant"

    def test_eight_rooms_usually_fit(self):
        """Forest rooms almost always all fit."""
        counts = [
            len(generate_dungeon("sword_forest", 1, seed=seed, room_count=8).rooms)
            for seed in range(10)
        ]
        assert counts.count(8) >= 8


class TestLayoutProperties:
    """Tests that hold for every generated dungeon."""

    @pytest.mark.parametrize("dungeon_id,seed", itertools.product(
        ["sword_forest", "crystal_caves", "staff_tower", "abandoned_mine", "unknown"],
        range(4),
    ))
    def test_layout_properties(self, dungeon_id, seed):
        """No overlap, non-negative coordinates, consistent extents."""
        dungeon = generate_dungeon(dungeon_id, 6, seed=seed)
        for a, b in itertools.combinations(dungeon.rooms, 2):
            assert not a.rect.intersects(b.rect, ROOM_PADDING)
        assert all(r.rect.x >= 0 and r.rect.y >= 0 for r in dungeon.rooms)
        assert dungeon.width == max(r.rect.right for r in dungeon.rooms)
        assert dungeon.height == max(r.rect.bottom for r in dungeon.rooms)

    @pytest.mark.parametrize("seed", range(10))
    def test_start_and_end(self, seed):
        """Room 0 is the start entrance and the end room holds the boss."""
        dungeon = generate_dungeon("temple_ruins", 3, seed=seed)
        assert dungeon.start_room == 0
        assert dungeon.rooms[0].purpose == RoomPurpose.ENTRANCE
        end = dungeon.get_room(dungeon.end_room)
        assert end.purpose == RoomPurpose.BOSS
        assert end.id == len(dungeon.rooms) - 1

    def test_deterministic(self):
        """Same id, difficulty and seed give an identical dungeon."""
        a = generate_dungeon("dark_castle", 7, seed=555)
        b = generate_dungeon("dark_castle", 7, seed=555)
        assert a.to_dict() == b.to_dict()

    def test_different_seeds_differ(self):
        """Different seeds give different layouts."""
        a = generate_dungeon("dark_castle", 7, seed=1)
        b = generate_dungeon("dark_castle", 7, seed=2)
        assert a.to_dict() != b.to_dict()

    def test_seed_recorded(self):
        """The dungeon records the seed that rebuilds it."""
        dungeon = generate_dungeon("staff_tower", 2)
        replay = generate_dungeon("staff_tower", 2, seed=dungeon.seed)
        assert replay.to_dict() == dungeon.to_dict()

    def test_unknown_id_uses_generic_tables(self):
        """Unknown dungeon ids fall back to the generic biome and boss."""
        dungeon = generate_dungeon("mystery_vault", 2, seed=8)
        assert dungeon.biome == Biome.GENERIC
        boss_room = dungeon.get_room(dungeon.end_room)
        boss = next(m for m in boss_room.entities_of(EntityKind.MONSTER) if m.is_boss)
        assert boss.monster_type == "chaos_guardian"

    def test_floor(self):
        """A new floor every three difficulty levels."""
        assert generate_dungeon("sword_forest", 1, seed=1, room_count=2).floor == 1
        assert generate_dungeon("sword_forest", 3, seed=1, room_count=2).floor == 1
        assert generate_dungeon("sword_forest", 4, seed=1, room_count=2).floor == 2


class TestValidation:
    """Tests for invalid input."""

    @pytest.mark.parametrize("difficulty", [0, -3, 1.5, True, "2"])
    def test_invalid_difficulty(self, difficulty):
        """Difficulty must be an integer of at least 1."""
        with pytest.raises(InvalidDifficultyError) as exc_info:
            generate_dungeon("sword_forest", difficulty, seed=1)
        assert exc_info.value.http_status == 400


class TestStartAndEnd:
    """Tests for start/end assignment and fallbacks."""

    def test_idempotent(self):
        """Re-running assignment on a valid dungeon changes nothing."""
        generator = DungeonGenerator(seed=21)
        dungeon = generator.generate("crystal_caves", 4)
        before = copy.deepcopy(dungeon.to_dict())

        generator.assign_start_and_end(dungeon)
        generator.assign_start_and_end(dungeon)

        assert dungeon.to_dict() == before

    def test_missing_boss_is_promoted(self):
        """Without a boss room the last room becomes one and gets a boss."""
        generator = DungeonGenerator(seed=5)
        dungeon = generator.generate("sword_forest", 2, room_count=5)
        last = dungeon.rooms[-1]
        last.purpose = RoomPurpose.NORMAL
        last.entities = []
        last.reward = None

        generator.assign_start_and_end(dungeon)

        assert last.purpose == RoomPurpose.BOSS
        assert dungeon.end_room == last.id
        assert any(m.is_boss for m in last.entities_of(EntityKind.MONSTER))

    def test_missing_entrance_retags_room_zero(self):
        """Without an entrance room 0 becomes the start."""
        generator = DungeonGenerator(seed=6)
        dungeon = generator.generate("sword_forest", 2, room_count=4)
        dungeon.rooms[0].purpose = RoomPurpose.NORMAL

        generator.assign_start_and_end(dungeon)

        assert dungeon.start_room == 0
        assert dungeon.rooms[0].purpose == RoomPurpose.ENTRANCE

    def test_empty_layout_falls_back_to_single_room(self, monkeypatch):
        """If no room can be placed a single room is both start and end."""
        generator = DungeonGenerator(seed=9)
        monkeypatch.setattr(generator.layout, "generate_rooms", lambda config, count: [])

        dungeon = generator.generate("sword_forest", 3)

        assert len(dungeon.rooms) == 1
        assert dungeon.start_room == 0
        assert dungeon.end_room == 0
        assert dungeon.connections == []
        room = dungeon.rooms[0]
        assert any(m.is_boss for m in room.entities_of(EntityKind.MONSTER))

    def test_forced_single_room(self):
        """room_count=1 gives a one-room dungeon with start and end set."""
        dungeon = generate_dungeon("ancient_city", 2, seed=3, room_count=1)
        assert len(dungeon.rooms) == 1
        assert dungeon.start_room == dungeon.end_room == 0


class TestEncoding:
    """Tests for the structural encoding."""

    def test_to_dict_shape(self, forest_dungeon):
        """Encoded dungeon carries rooms, connections and metadata."""
        data = forest_dungeon.to_dict()
        assert data["biome"] == "forest"
        assert data["difficulty"] == 5
        assert data["floor"] == 2
        assert len(data["rooms"]) == len(forest_dungeon.rooms)
        assert len(data["connections"]) == len(forest_dungeon.connections)
        for room in data["rooms"]:
            assert {"id", "rect", "purpose", "neighbors", "doors", "entities"} <= set(room)
            for entity in room["entities"]:
                assert entity["kind"] in {k.value for k in EntityKind}

    def test_summary(self, forest_dungeon):
        """Summary counts match the rooms."""
        summary = forest_dungeon.summary()
        assert summary["total_rooms"] == len(forest_dungeon.rooms)
        assert sum(summary["room_purposes"].values()) == len(forest_dungeon.rooms)
        assert summary["room_purposes"]["entrance"] == 1
        assert summary["room_purposes"]["boss"] == 1
