from typing import List, Tuple

import networkx as nx

from ..models import AllocationResult, ItineraryEntry, Room


def path_segments(itinerary: List[ItineraryEntry]) -> List[Tuple[Room, Room]]:
    return [(a.room, b.room) for a, b in zip(itinerary, itinerary[1:])]


def floor_movement(itinerary: List[ItineraryEntry]) -> int:
    return sum(abs(a.floor - b.floor) for a, b in path_segments(itinerary))


def build_itinerary_graph(result: AllocationResult) -> nx.MultiDiGraph:
    """Room-to-room movement graph, one edge per consecutive pair of a group.

    Nodes are room ids ``(floor, index)``; edges carry ``group`` and ``step``
    (1-based position of the segment in that group's itinerary).
    """
    G = nx.MultiDiGraph()
    for group, itinerary in result.itineraries.items():
        for entry in itinerary:
            room = entry.room
            G.add_node(room.id, floor=room.floor, index=room.index,
                       capacity=room.capacity, label=room.label)
        for step, (a, b) in enumerate(path_segments(itinerary), start=1):
            G.add_edge(a.id, b.id, group=group, step=step)
    return G
