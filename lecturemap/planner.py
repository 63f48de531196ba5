import threading
from typing import List, Optional, Tuple

import pandas as pd

from .io_utils import timetable_frame
from .models import AllocationResult, BuildingConfig, Room, Session
from .registry import RoomRegistry
from .scheduling.allocation import allocate_rooms
from .scheduling.evaluation import summary
from .store import Listener, SessionStore


class LecturePlanner:
    """Entry point for hosts: one registry, one store, serialized commands."""

    def __init__(self, config: Optional[BuildingConfig] = None):
        self.config = config or BuildingConfig()
        self.registry = RoomRegistry(self.config)
        self.store = SessionStore(self.registry)
        self._lock = threading.RLock()
        self.last_result: Optional[AllocationResult] = None

    @property
    def slots(self) -> Tuple[str, ...]:
        return tuple(self.config.slots)

    @property
    def groups(self) -> List[str]:
        return self.store.groups

    @property
    def sessions(self) -> Tuple[Session, ...]:
        return self.store.sessions

    def list_rooms(self) -> List[Room]:
        return self.registry.list_rooms()

    def rooms_on_floor(self, floor: int) -> List[Room]:
        return self.registry.rooms_on_floor(floor)

    def query_room(self, floor: int, index: int) -> Optional[Room]:
        return self.registry.query_room(floor, index)

    def add_listener(self, listener: Listener) -> None:
        self.store.add_listener(listener)

    def set_group_count(self, count: int) -> List[str]:
        with self._lock:
            return self.store.set_group_count(count)

    def add_session(self, subject: str, group: str, slot: str,
                    room: Optional[Room] = None) -> Session:
        with self._lock:
            return self.store.add_session(subject, group, slot, room)

    def edit_session(self, session_id: str, subject: str, group: str, slot: str,
                     room: Optional[Room] = None) -> Session:
        with self._lock:
            session = self.store.edit_session(session_id, subject, group, slot, room)
            if self.last_result is not None:
                self.last_result.discard(session, drop_binding=False)
            return session

    def remove_session(self, session_id: str) -> None:
        with self._lock:
            session = self.store.get(session_id)
            self.store.remove_session(session_id)
            if session is not None and self.last_result is not None:
                self.last_result.discard(session)

    def reset_all(self) -> None:
        with self._lock:
            self.store.reset_all()
            self.last_result = None

    def run_allocation(self, reassign: bool = False) -> AllocationResult:
        with self._lock:
            self.last_result = allocate_rooms(self.store, reassign=reassign)
            return self.last_result

    def timetable(self) -> pd.DataFrame:
        return timetable_frame(self.store.sessions, self.slots, groups=self.groups)

    def summary(self) -> str:
        return summary(self.store, self.last_result)
