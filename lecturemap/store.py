import itertools
import logging
from typing import Callable, Dict, List, Optional, Tuple

from .errors import (
    ConfigurationError, DuplicateSlotError, InvalidSessionError,
    RoomConflictError, SessionNotFoundError,
)
from .models import Room, Session, group_names
from .registry import RoomRegistry
from .scheduling.constraints import fits_slot_uniqueness, room_holder

logger = logging.getLogger(__name__)

# listener(event, session); event is "removed" or "reset"
Listener = Callable[[str, Optional[Session]], None]


class SessionStore:
    """Owns every Session and keeps room occupancy in step with them.

    All checks run before any mutation, so a rejected add or edit leaves the
    store and the registry untouched.
    """

    def __init__(self, registry: RoomRegistry):
        self.registry = registry
        self.config = registry.config
        self._sessions: Dict[str, Session] = {}
        self._ids = itertools.count(1)
        self._groups: List[str] = group_names(self.config.group_count)
        self._slot_rank = {slot: i for i, slot in enumerate(self.config.slots)}
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def sessions(self) -> Tuple[Session, ...]:
        return tuple(self._sessions.values())

    @property
    def groups(self) -> List[str]:
        return list(self._groups)

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def slot_order(self, slot: str) -> int:
        return self._slot_rank[slot]

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def set_group_count(self, count: int) -> List[str]:
        if count < 1:
            raise ConfigurationError("At least one group is required")
        self._groups = group_names(count)
        return self.groups

    def add_session(self, subject: str, group: str, slot: str,
                    room: Optional[Room] = None) -> Session:
        subject = self._validate(subject, group, slot, room)
        if not fits_slot_uniqueness(self._sessions.values(), group, slot):
            raise DuplicateSlotError(group, slot)
        if room is not None:
            self._check_room(room, slot)

        session = Session(id=f"L{next(self._ids)}", subject=subject, group=group,
                          slot=slot, room=room, pinned=room is not None)
        self._sessions[session.id] = session
        if room is not None:
            self.registry.mark_occupied(room, slot)
        logger.info("Added %s", session.describe())
        return session

    def edit_session(self, session_id: str, subject: str, group: str, slot: str,
                     room: Optional[Room] = None) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        subject = self._validate(subject, group, slot, room)
        if not fits_slot_uniqueness(self._sessions.values(), group, slot, excluding_id=session_id):
            raise DuplicateSlotError(group, slot)
        if room is not None:
            self._check_room(room, slot, excluding_id=session_id)

        if session.room is not None:
            self.registry.mark_free(session.room, session.slot)
        if room is not None:
            self.registry.mark_occupied(room, slot)
        session.subject = subject
        session.group = group
        session.slot = slot
        session.room = room
        session.pinned = room is not None
        logger.info("Edited %s: %s", session.id, session.describe())
        return session

    def remove_session(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return
        if session.room is not None:
            self.registry.mark_free(session.room, session.slot)
        logger.info("Removed %s", session.describe())
        self._notify("removed", session)

    def reset_all(self) -> None:
        self._sessions.clear()
        self.registry.clear()
        self._groups = group_names(self.config.group_count)
        logger.info("Schedule reset")
        self._notify("reset", None)

    def bind(self, session: Session, room: Room) -> None:
        """Attach an allocator-chosen room; the caller has checked availability."""
        session.room = room
        self.registry.mark_occupied(room, session.slot)

    def unbind(self, session: Session) -> None:
        if session.room is None:
            return
        self.registry.mark_free(session.room, session.slot)
        session.room = None
        session.pinned = False

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _validate(self, subject: str, group: str, slot: str, room: Optional[Room]) -> str:
        subject = (subject or "").strip()
        if not subject:
            raise InvalidSessionError("Subject must not be empty")
        if slot not in self._slot_rank:
            raise InvalidSessionError(f"Unknown slot {slot!r}", details={"slot": slot})
        if group not in self._groups:
            raise InvalidSessionError(f"Unknown group {group!r}", details={"group": group})
        if room is not None and not self.registry.contains(room):
            raise InvalidSessionError(f"Room {room.id} is not in the building",
                                      details={"room": room.id})
        return subject

    def _check_room(self, room: Room, slot: str, excluding_id: Optional[str] = None) -> None:
        holder = room_holder(self._sessions.values(), room, slot, excluding_id)
        if holder is not None:
            raise RoomConflictError(room, slot, holder)

    def _notify(self, event: str, session: Optional[Session]) -> None:
        for listener in self._listeners:
            listener(event, session)
