"""
Dungeon Loop - Test Configuration and Fixtures
Shared test utilities and fixtures for pytest.
"""
import pytest
from typing import List
import sys
import os

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dungeon_loop.core.random_provider import RandomProvider
from dungeon_loop.core.dungeon.biomes import Biome
from dungeon_loop.core.dungeon.connectivity import ConnectivityEngine
from dungeon_loop.core.dungeon.models import Dungeon, Rect, Room, RoomPurpose


# ==================== Random Fixtures ====================

@pytest.fixture
def rng() -> RandomProvider:
    """A provider with a fixed seed."""
    return RandomProvider(1234)


# ==================== Dungeon Fixtures ====================

def make_room(room_id: int, x: int, y: int, size: int = 12,
              purpose: RoomPurpose = RoomPurpose.NORMAL) -> Room:
    """Create a square room."""
    return Room(id=room_id, rect=Rect(x, y, size, size), purpose=purpose)


def make_dungeon(purposes: List[RoomPurpose], biome: Biome = Biome.GENERIC,
                 difficulty: int = 3, size: int = 12) -> Dungeon:
    """
    Build a connected dungeon with one room per purpose, laid out in a row.

    Rooms are unpopulated so tests can run a single population step.
    """
    rooms = [
        make_room(i, i * (size + 10), 0, size=size, purpose=purpose)
        for i, purpose in enumerate(purposes)
    ]
    dungeon = Dungeon(id="test_dungeon", difficulty=difficulty, biome=biome, rooms=rooms)
    dungeon.connections = ConnectivityEngine(RandomProvider(0)).connect(rooms)
    return dungeon


def reachable_from_start(dungeon: Dungeon) -> set:
    """Room ids reachable from room 0 over neighbours."""
    if not dungeon.rooms:
        return set()
    seen = {0}
    stack = [0]
    while stack:
        current = stack.pop()
        for neighbor in dungeon.rooms[current].neighbors:
            if neighbor not in seen:
                seen.add(neighbor)
                stack.append(neighbor)
    return seen


@pytest.fixture
def forest_dungeon():
    """A generated forest dungeon with a fixed seed."""
    from dungeon_loop.core.dungeon import generate_dungeon
    return generate_dungeon("sword_forest", 5, seed=42)
