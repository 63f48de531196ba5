class LectureMapError(Exception):
    """Base class for all allocation engine errors."""
    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class DuplicateSlotError(LectureMapError):
    """Raised when a group already has a session in the requested slot."""
    def __init__(self, group: str, slot: str):
        super().__init__(
            f"{slot} for {group} already exists",
            details={"group": group, "slot": slot},
        )


class RoomConflictError(LectureMapError):
    """Raised when a room is already occupied for a slot by another session."""
    def __init__(self, room, slot: str, holder=None):
        details = {"room": room.id, "slot": slot}
        if holder is not None:
            details["session"] = holder.id
        super().__init__(f"{room.label} is already occupied for {slot}", details=details)


class NoRoomAvailableError(LectureMapError):
    """Raised when no room is free for a session's slot."""
    def __init__(self, group: str, slot: str):
        super().__init__(
            f"Not enough available rooms for {slot} in group {group}",
            details={"group": group, "slot": slot},
        )


class EmptyScheduleError(LectureMapError):
    """Raised when allocation is requested with no sessions."""
    def __init__(self):
        super().__init__("No lectures to schedule")


class InvalidSessionError(LectureMapError):
    """Raised when session fields are malformed or reference unknown entities."""


class SessionNotFoundError(LectureMapError):
    """Raised when a session id is not in the store."""
    def __init__(self, session_id: str):
        super().__init__(f"Session with id {session_id} not found", details={"id": session_id})


class ConfigurationError(LectureMapError):
    """Raised when building configuration is invalid."""
