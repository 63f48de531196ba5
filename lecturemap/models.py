import random
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple, Union

from .errors import ConfigurationError, NoRoomAvailableError, RoomConflictError

DEFAULT_SLOTS: Tuple[str, ...] = tuple(f"Lecture {i}" for i in range(1, 6))

# (floor, index, rng) -> capacity
CapacityRule = Callable[[int, int, random.Random], int]


@dataclass
class BuildingConfig:
    floors: int = 5
    rooms_per_floor: int = 4
    slots: Sequence[str] = DEFAULT_SLOTS
    group_count: int = 2
    capacity_min: int = 20
    capacity_max: int = 49
    capacity_rule: Optional[CapacityRule] = None
    seed: Optional[int] = None

    def __post_init__(self):
        if self.floors <= 0:
            raise ConfigurationError("Building must have at least one floor")
        if self.rooms_per_floor <= 0:
            raise ConfigurationError("Each floor must have at least one room")
        self.slots = tuple(self.slots)
        if not self.slots:
            raise ConfigurationError("At least one slot is required")
        if len(set(self.slots)) != len(self.slots):
            raise ConfigurationError("Slot identifiers must be unique")
        if self.group_count < 1:
            raise ConfigurationError("At least one group is required")
        if not 0 < self.capacity_min <= self.capacity_max:
            raise ConfigurationError(
                f"Invalid capacity range [{self.capacity_min}, {self.capacity_max}]"
            )

    def capacity_for(self, floor: int, index: int, rng: random.Random) -> int:
        if self.capacity_rule is not None:
            return self.capacity_rule(floor, index, rng)
        return rng.randint(self.capacity_min, self.capacity_max)


def group_names(count: int) -> List[str]:
    return [f"D{i}" for i in range(1, count + 1)]


@dataclass(eq=False)
class Room:
    floor: int
    index: int
    capacity: int
    occupied_slots: Set[str] = field(default_factory=set)

    @property
    def id(self) -> Tuple[int, int]:
        return (self.floor, self.index)

    @property
    def name(self) -> str:
        return f"Room {self.index + 1}"

    @property
    def label(self) -> str:
        return f"Floor {self.floor + 1}, {self.name}"


@dataclass(eq=False)
class Session:
    id: str
    subject: str
    group: str
    slot: str
    room: Optional[Room] = None
    pinned: bool = False  # operator-chosen room, never released by reassignment

    def describe(self) -> str:
        text = f"{self.subject} ({self.group}) - {self.slot}"
        if self.room is not None:
            text += f" - {self.room.label}"
        return text


@dataclass
class ItineraryEntry:
    session: Session
    room: Room
    sequence: int


@dataclass
class Conflict:
    session: Session
    error: Union[RoomConflictError, NoRoomAvailableError]

    @property
    def reason(self) -> str:
        return self.error.message


@dataclass
class AllocationResult:
    bindings: List[Session] = field(default_factory=list)
    # group -> entries in visiting order
    itineraries: Dict[str, List[ItineraryEntry]] = field(default_factory=dict)
    conflicts: List[Conflict] = field(default_factory=list)

    def paths(self, group: str) -> List[Tuple[Room, Room]]:
        entries = self.itineraries.get(group, [])
        return [(a.room, b.room) for a, b in zip(entries, entries[1:])]

    def discard(self, session: Session, drop_binding: bool = True) -> None:
        """Forget the itinerary entries and conflicts derived from ``session``."""
        if drop_binding:
            self.bindings = [s for s in self.bindings if s is not session]
        self.conflicts = [c for c in self.conflicts if c.session is not session]
        for group, entries in self.itineraries.items():
            self.itineraries[group] = [e for e in entries if e.session is not session]
