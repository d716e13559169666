"""Tests for the dungeon HTTP routes."""
import pytest
from fastapi.testclient import TestClient

from dungeon_loop.main import app


@pytest.fixture
def client():
    return TestClient(app)


class TestHealth:
    """Tests for service endpoints."""

    def test_root(self, client):
        """Root reports the service online."""
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "online"

    def test_health(self, client):
        """Health check reports healthy."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestGenerateDungeon:
    """Tests for dungeon generation routes."""

    def test_post_generate(self, client):
        """POST returns a full dungeon and summary."""
        response = client.post("/api/dungeons/generate", json={
            "dungeon_id": "sword_forest",
            "difficulty": 2,
            "seed": 42,
            "room_count": 6,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["dungeon"]["biome"] == "forest"
        assert data["dungeon"]["seed"] == 42
        assert data["summary"]["total_rooms"] == len(data["dungeon"]["rooms"])

    def test_same_seed_same_dungeon(self, client):
        """Seeded requests are reproducible."""
        body = {"dungeon_id": "crystal_caves", "difficulty": 3, "seed": 7}
        first = client.post("/api/dungeons/generate", json=body).json()
        second = client.post("/api/dungeons/generate", json=body).json()
        assert first["dungeon"] == second["dungeon"]

    def test_get_generate(self, client):
        """GET accepts query parameters."""
        response = client.get("/api/dungeons/generate", params={
            "dungeon_id": "staff_tower", "difficulty": 1, "seed": 3,
        })
        assert response.status_code == 200
        assert response.json()["dungeon"]["biome"] == "tower"

    def test_difficulty_below_one_rejected(self, client):
        """Difficulty 0 fails request validation."""
        response = client.post("/api/dungeons/generate", json={"difficulty": 0})
        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert "error_id" in error

    def test_difficulty_above_max_rejected(self, client):
        """Difficulty above the configured maximum is a 400."""
        response = client.post("/api/dungeons/generate", json={"difficulty": 100000})
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"]["field"] == "difficulty"


class TestBiomes:
    """Tests for the biome listing."""

    def test_lists_known_dungeons(self, client):
        """Every known dungeon id is listed with its tuning."""
        response = client.get("/api/dungeons/biomes", params={"difficulty": 4})
        assert response.status_code == 200
        biomes = {b["dungeon_id"]: b["config"] for b in response.json()["biomes"]}
        assert biomes["sword_forest"]["biome"] == "forest"
        assert biomes["sword_forest"]["max_rooms"] == 17
        assert biomes[None]["biome"] == "generic"


class TestGenerateItem:
    """Tests for single item rolls."""

    def test_item_with_category(self, client):
        """A forced category is honoured."""
        response = client.post("/api/dungeons/items", json={
            "difficulty": 5, "category": "weapon", "seed": 11,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["item"]["category"] == "weapon"
        assert data["seed"] == 11

    def test_item_is_reproducible(self, client):
        """Same seed, same item."""
        body = {"difficulty": 8, "treasure": True, "seed": 19}
        first = client.post("/api/dungeons/items", json=body).json()
        second = client.post("/api/dungeons/items", json=body).json()
        assert first["item"] == second["item"]

    def test_unknown_category(self, client):
        """Unknown categories are rejected."""
        response = client.post("/api/dungeons/items", json={"category": "pet"})
        assert response.status_code == 400
        assert response.json()["error"]["details"]["field"] == "category"
