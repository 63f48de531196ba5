from typing import Optional

from ..models import AllocationResult
from ..store import SessionStore
from .constraints import no_double_booking_ok, occupancy_consistent_ok, unique_slots_ok
from .paths import floor_movement


def summary(store: SessionStore, result: Optional[AllocationResult] = None) -> str:
    sessions = store.sessions
    assigned = sum(1 for s in sessions if s.room is not None)
    pinned = sum(1 for s in sessions if s.pinned)
    ok_unique = unique_slots_ok(sessions)
    ok_rooms = no_double_booking_ok(sessions)
    ok_occ = occupancy_consistent_ok(store.registry, sessions)
    text = (
        f"Rooms: {len(store.registry)}  Floors: {store.registry.floors}\n"
        f"Sessions: {len(sessions)}  Assigned: {assigned}  Pinned: {pinned}  "
        f"Unassigned: {len(sessions) - assigned}\n"
        f"Valid (group slots): {ok_unique}  Valid (double booking): {ok_rooms}  "
        f"Valid (occupancy): {ok_occ}\n"
    )
    if result is not None:
        movement = sum(floor_movement(it) for it in result.itineraries.values())
        text += f"Groups: {len(result.itineraries)}  Floor changes: {movement}\n"
        for c in result.conflicts:
            text += f"Conflict [{c.session.id}] {c.session.describe()}: {c.reason}\n"
    return text
