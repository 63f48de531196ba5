import logging
import random
from typing import Dict, Iterator, List, Optional, Tuple

from .errors import ConfigurationError
from .models import BuildingConfig, Room

logger = logging.getLogger(__name__)


class RoomRegistry:
    """Fixed set of bookable rooms, floor-major ordered.

    Occupancy is tracked on each Room's ``occupied_slots``; the store and the
    allocator are the only callers expected to mark or free slots.
    """

    def __init__(self, config: Optional[BuildingConfig] = None):
        self.config = config or BuildingConfig()
        rng = random.Random(self.config.seed)
        self._rooms: List[Room] = []
        self._by_id: Dict[Tuple[int, int], Room] = {}
        for floor in range(self.config.floors):
            for index in range(self.config.rooms_per_floor):
                capacity = self.config.capacity_for(floor, index, rng)
                if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
                    raise ConfigurationError(
                        f"Capacity of room {(floor, index)} must be a positive integer, got {capacity!r}")
                room = Room(floor=floor, index=index, capacity=capacity)
                self._rooms.append(room)
                self._by_id[room.id] = room
        logger.debug("Built registry with %d rooms on %d floors",
                     len(self._rooms), self.config.floors)

    @property
    def floors(self) -> int:
        return self.config.floors

    def __len__(self) -> int:
        return len(self._rooms)

    def __iter__(self) -> Iterator[Room]:
        return iter(self._rooms)

    def list_rooms(self) -> List[Room]:
        return list(self._rooms)

    def rooms_on_floor(self, floor: int) -> List[Room]:
        return [r for r in self._rooms if r.floor == floor]

    def query_room(self, floor: int, index: int) -> Optional[Room]:
        return self._by_id.get((floor, index))

    def contains(self, room: Room) -> bool:
        return self._by_id.get(room.id) is room

    def is_free(self, room: Room, slot: str) -> bool:
        return slot not in room.occupied_slots

    def mark_occupied(self, room: Room, slot: str) -> None:
        room.occupied_slots.add(slot)

    def mark_free(self, room: Room, slot: str) -> None:
        room.occupied_slots.discard(slot)

    def clear(self) -> None:
        for room in self._rooms:
            room.occupied_slots.clear()
