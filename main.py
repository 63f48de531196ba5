import argparse
import logging

from lecturemap.errors import EmptyScheduleError, LectureMapError
from lecturemap.io_utils import load_sessions, save_itinerary_csv, save_timetable_csv
from lecturemap.models import BuildingConfig
from lecturemap.planner import LecturePlanner


def build_planner(args) -> LecturePlanner:
    slots = tuple(args.slots.split(',')) if args.slots else None
    config = BuildingConfig(
        floors=args.floors,
        rooms_per_floor=args.rooms_per_floor,
        group_count=args.groups,
        seed=args.seed,
        **({'slots': slots} if slots else {}),
    )
    return LecturePlanner(config)


def load_into(planner: LecturePlanner, rows) -> int:
    """Add every loaded session row, skipping rows the store rejects."""
    rejected = 0
    for row in rows:
        room = None
        if row['floor'] is not None:
            room = planner.query_room(row['floor'], row['room'])
            if room is None:
                print(f"Skipped {row['subject']} ({row['group']}) - {row['slot']}: "
                      f"no room {row['room'] + 1} on floor {row['floor'] + 1}")
                rejected += 1
                continue
        try:
            planner.add_session(row['subject'], row['group'], row['slot'], room)
        except LectureMapError as e:
            print(f"Skipped {row['subject']} ({row['group']}) - {row['slot']}: {e.message}")
            rejected += 1
    return rejected


def main():
    p = argparse.ArgumentParser(description="LectureMap – Floor-aware lecture room allocation")
    p.add_argument('--sessions', type=str, required=True,
                   help='sessions.csv with subject,group,slot[,floor,room] (floor/room 1-based)')

    # Building
    p.add_argument('--floors', type=int, default=5)
    p.add_argument('--rooms_per_floor', type=int, default=4)
    p.add_argument('--groups', type=int, default=2, help='Number of divisions D1..Dn')
    p.add_argument('--slots', type=str, default=None, help='Comma-separated slot ids (default Lecture 1..5)')
    p.add_argument('--seed', type=int, default=None, help='Seed for room capacities')

    # Allocation
    p.add_argument('--reassign', action='store_true', help='Release unpinned rooms before allocating')

    # Output
    p.add_argument('--out_timetable', type=str, default='timetable.csv')
    p.add_argument('--out_itinerary', type=str, default='itinerary.csv')
    p.add_argument('--log-level', type=str.upper, default='WARNING',
                   choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    args = p.parse_args()

    logging.basicConfig(level=args.log_level,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    try:
        planner = build_planner(args)
    except LectureMapError as e:
        raise SystemExit(e.message)

    try:
        rows = load_sessions(args.sessions)
    except OSError as e:
        raise SystemExit(f"Cannot read {args.sessions}: {e}")
    except KeyError as e:
        raise SystemExit(f"{args.sessions} is missing column {e}")
    except ValueError as e:
        raise SystemExit(f"Invalid row in {args.sessions}: {e}")

    rejected = load_into(planner, rows)
    if rejected:
        print(f"Rejected rows: {rejected}")

    try:
        result = planner.run_allocation(reassign=args.reassign)
    except EmptyScheduleError as e:
        raise SystemExit(e.message)

    print(planner.summary())
    print(planner.timetable().to_string())

    save_timetable_csv(args.out_timetable, planner.sessions, planner.slots, planner.groups)
    save_itinerary_csv(args.out_itinerary, result)
    print(f"Saved: {args.out_timetable}, {args.out_itinerary}")


if __name__ == '__main__':
    main()
