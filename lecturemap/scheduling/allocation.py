import logging
from typing import Dict, List, Optional

from ..errors import EmptyScheduleError, NoRoomAvailableError, RoomConflictError
from ..models import AllocationResult, Conflict, ItineraryEntry, Room, Session
from ..store import SessionStore
from .constraints import fits_room_availability, room_holder

logger = logging.getLogger(__name__)


def group_sessions(store: SessionStore) -> Dict[str, List[Session]]:
    """Sessions per group (first-appearance order), each list in slot order."""
    by_group: Dict[str, List[Session]] = {}
    for s in store.sessions:
        by_group.setdefault(s.group, []).append(s)
    for sessions in by_group.values():
        sessions.sort(key=lambda s: store.slot_order(s.slot))
    return by_group


def nearest_room(candidates: List[Room], last_room: Optional[Room]) -> Room:
    # min() keeps the first of equal keys, so ties fall to registry order
    if last_room is None:
        return candidates[0]
    return min(candidates, key=lambda r: abs(r.floor - last_room.floor))


def allocate_rooms(store: SessionStore, reassign: bool = False) -> AllocationResult:
    """Greedily bind a room to every session lacking one.

    Sessions that already hold a room are re-validated and kept. With
    ``reassign`` every non-pinned binding is released first, so unpinned
    sessions are placed again against the pinned occupancy only.
    """
    if len(store) == 0:
        raise EmptyScheduleError()

    if reassign:
        for s in store.sessions:
            if not s.pinned:
                store.unbind(s)

    rooms = store.registry.list_rooms()
    result = AllocationResult()
    for group, sessions in group_sessions(store).items():
        last_room: Optional[Room] = None
        itinerary: List[ItineraryEntry] = []
        for seq, session in enumerate(sessions, start=1):
            current = store.sessions
            if session.room is not None:
                holder = room_holder(current, session.room, session.slot, excluding_id=session.id)
                if holder is not None:
                    err = RoomConflictError(session.room, session.slot, holder)
                    logger.warning("%s: %s", session.id, err.message)
                    result.conflicts.append(Conflict(session, err))
                    continue
                store.registry.mark_occupied(session.room, session.slot)
                best = session.room
            else:
                candidates = [r for r in rooms
                              if fits_room_availability(current, r, session.slot, excluding_id=session.id)]
                if not candidates:
                    err = NoRoomAvailableError(group, session.slot)
                    logger.warning("%s: %s", session.id, err.message)
                    result.conflicts.append(Conflict(session, err))
                    continue
                best = nearest_room(candidates, last_room)
                store.bind(session, best)
            last_room = best
            itinerary.append(ItineraryEntry(session=session, room=best, sequence=seq))
        result.itineraries[group] = itinerary

    result.bindings = list(store.sessions)
    logger.info("Allocated %d of %d sessions across %d groups (%d conflicts)",
                sum(len(v) for v in result.itineraries.values()), len(store),
                len(result.itineraries), len(result.conflicts))
    return result
