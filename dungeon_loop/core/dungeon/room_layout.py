"""
Room Layout Engine.

Places rectangular rooms by rejection sampling, normalises them into
non-negative coordinates and tags each room with a purpose.
"""
from typing import List, Optional, Sequence, Tuple
import logging

from ..random_provider import RandomProvider
from .biomes import GenerationConfig
from .models import Rect, Room, RoomPurpose, SPECIAL_PURPOSES

logger = logging.getLogger(__name__)


MAX_PLACEMENT_ATTEMPTS = 20
ROOM_PADDING = 2
PLACEMENT_SPAN = 50     # Candidate corners lie in [-50, 50]

SPECIAL_PURPOSE_WEIGHTS = [(purpose, 1) for purpose in SPECIAL_PURPOSES]


class RoomLayoutEngine:
    """Generates the room rectangles of a dungeon."""

    def __init__(self, rng: RandomProvider):
        self.rng = rng

    def try_place_room(
        self,
        config: GenerationConfig,
        placed: Sequence[Room],
        room_id: int
    ) -> Optional[Room]:
        """
        Make one placement attempt.

        Args:
            config: Size tuning for the biome
            placed: Rooms already accepted
            room_id: Id to give the room if accepted

        Returns:
            The new Room, or None if the candidate overlaps a placed room
        """
        width = self.rng.between(config.room_size_min, config.room_size_max)
        height = self.rng.between(config.room_size_min, config.room_size_max)
        x = self.rng.between(-PLACEMENT_SPAN, PLACEMENT_SPAN)
        y = self.rng.between(-PLACEMENT_SPAN, PLACEMENT_SPAN)

        rect = Rect(x, y, width, height)
        for other in placed:
            if rect.intersects(other.rect, ROOM_PADDING):
                return None

        return Room(id=room_id, rect=rect)

    def generate_rooms(self, config: GenerationConfig, room_count: int) -> List[Room]:
        """
        Place up to ``room_count`` rooms and assign their purposes.

        A room that cannot be placed within the attempt cap is dropped,
        so fewer rooms than requested is a normal outcome. Surviving rooms
        get contiguous ids in placement order.

        Args:
            config: Difficulty-adjusted biome tuning
            room_count: Number of rooms to attempt

        Returns:
            Rooms translated so every coordinate is non-negative
        """
        rooms: List[Room] = []
        for index in range(room_count):
            room = None
            for _ in range(MAX_PLACEMENT_ATTEMPTS):
                room = self.try_place_room(config, rooms, len(rooms))
                if room is not None:
                    break

            if room is None:
                logger.debug(
                    "Dropped room %d/%d after %d attempts",
                    index + 1, room_count, MAX_PLACEMENT_ATTEMPTS
                )
                continue
            rooms.append(room)

        normalize_rooms(rooms)
        self.assign_purposes(rooms, config)
        return rooms

    def assign_purposes(self, rooms: List[Room], config: GenerationConfig) -> None:
        """
        Tag rooms: first is the entrance, last is the boss room, others
        roll the special-room chance.
        """
        last = len(rooms) - 1
        for index, room in enumerate(rooms):
            if index == 0:
                room.purpose = RoomPurpose.ENTRANCE
            elif index == last:
                room.purpose = RoomPurpose.BOSS
            elif self.rng.chance(config.special_room_chance):
                room.purpose = self.rng.weighted_choice(SPECIAL_PURPOSE_WEIGHTS)
            else:
                room.purpose = RoomPurpose.NORMAL


def normalize_rooms(rooms: List[Room]) -> None:
    """Shift all rooms so the smallest x and y are at least zero."""
    if not rooms:
        return
    min_x = min(0, min(r.rect.x for r in rooms))
    min_y = min(0, min(r.rect.y for r in rooms))
    if min_x == 0 and min_y == 0:
        return
    for room in rooms:
        room.rect = room.rect.translated(-min_x, -min_y)


def measure_extent(rooms: Sequence[Room]) -> Tuple[int, int]:
    """Dungeon (width, height): the furthest right and bottom room edges."""
    if not rooms:
        return 0, 0
    return max(r.rect.right for r in rooms), max(r.rect.bottom for r in rooms)
