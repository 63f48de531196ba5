import sys, os
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import io
import csv

import pandas as pd
import streamlit as st

from lecturemap.errors import LectureMapError
from lecturemap.models import BuildingConfig
from lecturemap.planner import LecturePlanner
from lecturemap.scheduling.paths import build_itinerary_graph

AUTO = "Auto (allocator)"

# ---------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------
st.set_page_config(page_title="LectureMap – Scheduler", layout="wide")
st.title("LectureMap – Lecture Scheduler")


# ---------------------------------------------------------------------
# State
# ---------------------------------------------------------------------
def _drop_artifacts(event, session):
    """Forget drawn paths and conflicts that belong to removed sessions."""
    itineraries = st.session_state.get("itineraries", {})
    if event == "reset":
        itineraries.clear()
        st.session_state.conflicts = []
    elif event == "removed":
        if session.group in itineraries:
            itineraries[session.group] = [e for e in itineraries[session.group]
                                          if e.session.id != session.id]
        st.session_state.conflicts = [c for c in st.session_state.get("conflicts", [])
                                      if c.session.id != session.id]


def _new_planner(floors: int, rooms_per_floor: int, seed: int) -> LecturePlanner:
    planner = LecturePlanner(BuildingConfig(floors=floors, rooms_per_floor=rooms_per_floor, seed=seed))
    planner.add_listener(_drop_artifacts)
    st.session_state.itineraries = {}
    st.session_state.conflicts = []
    return planner


if "planner" not in st.session_state:
    st.session_state.planner = _new_planner(5, 4, 42)
planner: LecturePlanner = st.session_state.planner


def _room_options():
    return [AUTO] + [r.label for r in planner.list_rooms()]


def _room_from_label(label):
    if label == AUTO:
        return None
    return next(r for r in planner.list_rooms() if r.label == label)


def _report(action):
    try:
        action()
        return True
    except LectureMapError as e:
        st.error(e.message)
        return False


# ---------------------------------------------------------------------
# Sidebar: building and divisions
# ---------------------------------------------------------------------
with st.sidebar.form("building"):
    floors = st.number_input("Floors", 1, 50, planner.config.floors)
    per_floor = st.number_input("Rooms per floor", 1, 50, planner.config.rooms_per_floor)
    seed = st.number_input("Capacity seed", 0, 10_000, planner.config.seed or 0)
    if st.form_submit_button("Rebuild building"):
        st.session_state.planner = planner = _new_planner(int(floors), int(per_floor), int(seed))

with st.sidebar.form("divisions"):
    count = st.number_input("Divisions", 1, 50, len(planner.groups))
    if st.form_submit_button("Update divisions"):
        _report(lambda: planner.set_group_count(int(count)))

if st.sidebar.button("Reset"):
    planner.reset_all()
    st.session_state.conflicts = []

# ---------------------------------------------------------------------
# Lecture dock
# ---------------------------------------------------------------------
st.subheader("Add lecture")
with st.form("add", clear_on_submit=True):
    c1, c2, c3, c4 = st.columns(4)
    subject = c1.text_input("Subject")
    group = c2.selectbox("Division", planner.groups)
    slot = c3.selectbox("Lecture", planner.slots)
    room_label = c4.selectbox("Room", _room_options())
    if st.form_submit_button("Add Lecture"):
        _report(lambda: planner.add_session(subject, group, slot, _room_from_label(room_label)))

st.subheader("Lectures")
for s in planner.sessions:
    with st.expander(s.describe() + ("  [pinned]" if s.pinned else "")):
        with st.form(f"edit-{s.id}"):
            e1, e2, e3, e4 = st.columns(4)
            new_subject = e1.text_input("Subject", s.subject)
            groups = planner.groups
            new_group = e2.selectbox("Division", groups,
                                     index=groups.index(s.group) if s.group in groups else 0)
            new_slot = e3.selectbox("Lecture", planner.slots, index=planner.slots.index(s.slot))
            options = _room_options()
            new_room = e4.selectbox("Room", options,
                                    index=options.index(s.room.label) if s.room else 0)
            save, delete = st.columns(2)
            if save.form_submit_button("Save"):
                _report(lambda: planner.edit_session(s.id, new_subject, new_group, new_slot,
                                                     _room_from_label(new_room)))
            if delete.form_submit_button("Delete"):
                planner.remove_session(s.id)

# ---------------------------------------------------------------------
# Allocation
# ---------------------------------------------------------------------
reassign = st.checkbox("Re-place unpinned lectures", value=False)
if st.button("Schedule Lectures"):
    try:
        result = planner.run_allocation(reassign=reassign)
        st.session_state.itineraries = dict(result.itineraries)
        st.session_state.conflicts = list(result.conflicts)
        st.success("Scheduling complete.")
    except LectureMapError as e:
        st.error(e.message)

for c in st.session_state.get("conflicts", []):
    st.warning(f"{c.session.describe()}: {c.reason}")

# ---------------------------------------------------------------------
# Floor plan and paths
# ---------------------------------------------------------------------
st.subheader("Floor plan")
floor = st.selectbox("Floor", list(range(planner.registry.floors)), format_func=lambda f: f"Floor {f + 1}")
st.dataframe(pd.DataFrame([
    {"Room": r.name, "Capacity": r.capacity,
     "Occupied for": ", ".join(sorted(r.occupied_slots, key=planner.store.slot_order)) or "None",
     "Status": "occupied" if r.occupied_slots else "free"}
    for r in planner.rooms_on_floor(floor)
]), use_container_width=True)

itineraries = st.session_state.get("itineraries", {})
if itineraries:
    st.subheader("Paths")
    for group, itinerary in itineraries.items():
        st.text(f"{group}: " + " -> ".join(f"{e.sequence}. {e.room.label}" for e in itinerary))
    if planner.last_result is not None:
        G = build_itinerary_graph(planner.last_result)
        st.caption(f"Rooms on paths: {G.number_of_nodes()} · Moves: {G.number_of_edges()}")

# ---------------------------------------------------------------------
# Timetable
# ---------------------------------------------------------------------
st.subheader("Timetable")
table = planner.timetable()
st.dataframe(table, use_container_width=True)
buf = io.StringIO()
table.to_csv(buf, quoting=csv.QUOTE_MINIMAL)
st.download_button("Download timetable.csv", buf.getvalue(), file_name="timetable.csv", mime="text/csv")
st.text(planner.summary())
