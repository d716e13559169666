"""
Connectivity Engine.

Links rooms with a minimum spanning tree over centre distances, then
adds a few extra edges so the map has loops.
"""
from typing import List, Sequence, Tuple

from ..random_provider import RandomProvider
from .models import Connection, Door, Point, Room

EXTRA_EDGE_CHANCE = 0.2

# (distance, room_a, room_b)
Edge = Tuple[float, int, int]


def sorted_edges(rooms: Sequence[Room]) -> List[Edge]:
    """All room pairs ordered by centre distance; ties keep pair order."""
    edges = []
    for i in range(len(rooms)):
        for j in range(i + 1, len(rooms)):
            edges.append((rooms[i].center.distance_to(rooms[j].center), i, j))
    edges.sort(key=lambda edge: edge[0])
    return edges


def door_points(room_a: Room, room_b: Room) -> Tuple[Point, Point]:
    """
    Door positions on the facing edges of two rooms.

    Horizontal when the centres are at least as far apart in x as in y;
    each door then sits on its room's left or right edge at that room's
    centre y. Vertical doors mirror this on the y axis.
    """
    a, b = room_a.center, room_b.center
    ra, rb = room_a.rect, room_b.rect

    if abs(a.x - b.x) >= abs(a.y - b.y):
        a_is_left = a.x < b.x
        door_a = Point(ra.right if a_is_left else ra.x, a.y)
        door_b = Point(rb.x if a_is_left else rb.right, b.y)
    else:
        a_is_above = a.y < b.y
        door_a = Point(a.x, ra.bottom if a_is_above else ra.y)
        door_b = Point(b.x, rb.y if a_is_above else rb.bottom)

    return door_a, door_b


class ConnectivityEngine:
    """Builds the room graph."""

    def __init__(self, rng: RandomProvider):
        self.rng = rng

    def connect(self, rooms: List[Room]) -> List[Connection]:
        """
        Connect every room and record neighbours and doors on each room.

        Args:
            rooms: Rooms indexed by id

        Returns:
            Connections in the order they were made
        """
        connections: List[Connection] = []
        if len(rooms) < 2:
            return connections

        edges = sorted_edges(rooms)

        connected = {0}
        while len(connected) < len(rooms):
            for _, i, j in edges:
                if (i in connected) != (j in connected):
                    connections.append(self.link(rooms, i, j))
                    connected.update((i, j))
                    break

        for _, i, j in edges:
            if j not in rooms[i].neighbors and self.rng.chance(EXTRA_EDGE_CHANCE):
                connections.append(self.link(rooms, i, j))

        return connections

    @staticmethod
    def link(rooms: List[Room], i: int, j: int) -> Connection:
        """Create a bidirectional edge between rooms i and j."""
        room_a, room_b = rooms[i], rooms[j]
        door_a, door_b = door_points(room_a, room_b)

        room_a.neighbors.append(j)
        room_b.neighbors.append(i)
        room_a.doors.append(Door(door_a.x, door_a.y, to_room=j))
        room_b.doors.append(Door(door_b.x, door_b.y, to_room=i))

        return Connection(room_a=i, room_b=j, door_a=door_a, door_b=door_b)
