import csv
import io
import os
from typing import Dict, IO, Iterable, List, Optional, Sequence, Union

import pandas as pd

from .models import AllocationResult, Session

TextOrPath = Union[str, os.PathLike, IO]

TIMETABLE_COLUMNS = ['group', 'slot', 'subject', 'floor', 'room', 'pinned']


def _open_text(src: TextOrPath):
    """Return a text-mode file handle and a flag indicating whether to close it.

    Accepts a filesystem path, a text IO object, or a BytesIO buffer.
    """
    if isinstance(src, (str, os.PathLike)):
        return open(src, 'r', newline=''), True
    if isinstance(src, io.BytesIO):
        src.seek(0)
        return io.TextIOWrapper(src, encoding='utf-8', newline=''), True
    if hasattr(src, 'read'):
        if hasattr(src, 'seek'):
            src.seek(0)
        return src, False
    raise TypeError("Unsupported input type; expected path or file-like object")


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or not str(value).strip():
        return None
    return int(value)


def load_sessions(src: TextOrPath) -> List[Dict]:
    """Read session rows ``subject,group,slot[,floor,room]``.

    Floor and room are 1-based in the file (as shown to operators) and
    returned 0-based; both blank means the session is left for allocation.
    """
    rows: List[Dict] = []
    f, should_close = _open_text(src)
    try:
        for row in csv.DictReader(f):
            floor = _optional_int(row.get('floor'))
            room = _optional_int(row.get('room'))
            if (floor is None) != (room is None):
                raise ValueError(f"Row {row!r} must give both floor and room or neither")
            rows.append({
                'subject': str(row['subject']).strip(),
                'group': str(row['group']).strip(),
                'slot': str(row['slot']).strip(),
                'floor': None if floor is None else floor - 1,
                'room': None if room is None else room - 1,
            })
    finally:
        if should_close:
            f.close()
    return rows


def _ordered_groups(sessions: List[Session], groups: Optional[Sequence[str]]) -> List[str]:
    """Configured groups first, then any others in first-appearance order."""
    names = list(groups or [])
    for s in sessions:
        if s.group not in names:
            names.append(s.group)
    return names


def save_timetable_csv(path: str, sessions: Iterable[Session], slots: Sequence[str],
                       groups: Optional[Sequence[str]] = None):
    sessions = list(sessions)
    group_rank = {g: i for i, g in enumerate(_ordered_groups(sessions, groups))}
    slot_rank = {slot: i for i, slot in enumerate(slots)}
    with open(path, 'w', newline='') as f:
        w = csv.writer(f)
        w.writerow(TIMETABLE_COLUMNS)
        for s in sorted(sessions, key=lambda s: (group_rank[s.group], slot_rank[s.slot])):
            if s.room is None:
                w.writerow([s.group, s.slot, s.subject, '', '', False])
            else:
                w.writerow([s.group, s.slot, s.subject, s.room.floor + 1, s.room.index + 1, s.pinned])


def save_itinerary_csv(path: str, result: AllocationResult):
    with open(path, 'w', newline='') as f:
        w = csv.writer(f)
        w.writerow(['group', 'sequence', 'session_id', 'slot', 'floor', 'room'])
        for group, itinerary in result.itineraries.items():
            for e in itinerary:
                w.writerow([group, e.sequence, e.session.id, e.session.slot,
                            e.room.floor + 1, e.room.index + 1])


def timetable_frame(sessions: Iterable[Session], slots: Sequence[str],
                    groups: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """Group x slot grid; each cell is "Subject (Floor f, Room r)" or "-"."""
    sessions = list(sessions)
    names = _ordered_groups(sessions, groups)
    frame = pd.DataFrame('-', index=pd.Index(names, name='Division'), columns=list(slots))
    for s in sessions:
        if s.room is not None:
            frame.loc[s.group, s.slot] = f"{s.subject} ({s.room.label})"
    return frame
