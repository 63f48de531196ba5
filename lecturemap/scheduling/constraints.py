from typing import Dict, Iterable, Optional, Set, Tuple

from ..models import Room, Session


def fits_slot_uniqueness(sessions: Iterable[Session], group: str, slot: str,
                         excluding_id: Optional[str] = None) -> bool:
    for s in sessions:
        if s.id != excluding_id and s.group == group and s.slot == slot:
            return False
    return True


def room_holder(sessions: Iterable[Session], room: Room, slot: str,
                excluding_id: Optional[str] = None) -> Optional[Session]:
    """Return the session occupying (room, slot), ignoring ``excluding_id``."""
    for s in sessions:
        if s.id != excluding_id and s.room is room and s.slot == slot:
            return s
    return None


def fits_room_availability(sessions: Iterable[Session], room: Room, slot: str,
                           excluding_id: Optional[str] = None) -> bool:
    return room_holder(sessions, room, slot, excluding_id) is None


def unique_slots_ok(sessions: Iterable[Session]) -> bool:
    seen: Set[Tuple[str, str]] = set()
    for s in sessions:
        key = (s.group, s.slot)
        if key in seen:
            return False
        seen.add(key)
    return True


def no_double_booking_ok(sessions: Iterable[Session]) -> bool:
    seen: Set[Tuple[int, str]] = set()
    for s in sessions:
        if s.room is None:
            continue
        key = (id(s.room), s.slot)
        if key in seen:
            return False
        seen.add(key)
    return True


def occupancy_consistent_ok(rooms: Iterable[Room], sessions: Iterable[Session]) -> bool:
    """Every room's occupied slots must match exactly the sessions bound to it."""
    booked: Dict[int, Set[str]] = {}
    for s in sessions:
        if s.room is not None:
            booked.setdefault(id(s.room), set()).add(s.slot)
    for room in rooms:
        if room.occupied_slots != booked.get(id(room), set()):
            return False
    return True
