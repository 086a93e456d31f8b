"""
Command-line interface for the heat scheduler.
"""

import argparse
import logging
import sys
import yaml
from .config import SchedulerConfig, load_config
from .ingest import load_roster, load_results, load_schedule
from .engine import InsufficientParticipants, generate_schedule, validate_lane_balance, validate_schedule
from .regenerate import regenerate_after_removal, regenerate_after_late_arrival, insert_catch_up_heats
from .export import write_excel, write_json


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="heat-scheduler",
        description="Heat Scheduler - lane-balanced heats for multi-lane racing events"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(sub, needs_roster=True):
        sub.add_argument("--config", help="Path to YAML configuration file (optional)")
        sub.add_argument("--lanes", type=int, help="Lane count, overrides the configuration")
        if needs_roster:
            sub.add_argument("--roster", required=True, help="Path to CSV or Excel roster")
        sub.add_argument("--results", help="Path to JSON file with heat results (optional)")
        sub.add_argument("--no-speed-matching", action="store_true", help="Never group cars by speed")
        sub.add_argument("--out", required=True, help="Path to output JSON schedule")
        sub.add_argument("--excel", help="Also export the schedule to this Excel file")

    generate = subparsers.add_parser("generate", help="Generate a new schedule")
    add_common(generate)

    remove = subparsers.add_parser("remove", help="Regenerate after cars leave")
    add_common(remove)
    remove.add_argument("--schedule", required=True, help="Path to current JSON schedule")
    remove.add_argument("--car", type=int, action="append", required=True, help="Car number leaving (repeatable)")
    remove.add_argument("--completed", type=int, required=True, help="Last completed heat number")

    arrive = subparsers.add_parser("arrive", help="Regenerate after late arrivals")
    add_common(arrive)
    arrive.add_argument("--schedule", required=True, help="Path to current JSON schedule")
    arrive.add_argument("--completed", type=int, required=True, help="Last completed heat number")
    arrive.add_argument("--car", type=int, help="Late car to give solo catch-up heats")
    arrive.add_argument("--catch-up", type=int, default=0, help="Number of solo catch-up heats for --car")

    validate = subparsers.add_parser("validate", help="Validate an existing schedule")
    validate.add_argument("--schedule", required=True, help="Path to JSON schedule")
    validate.add_argument("--lanes", type=int, help="Lane count for lane range checks")

    return parser


def _load_context(args):
    """Load configuration, roster and results shared by the scheduling commands."""
    config = load_config(args.config) if args.config else SchedulerConfig()
    if args.lanes is not None:
        config = config.model_copy(update={'lane_count': args.lanes})
    if args.no_speed_matching:
        config = config.model_copy(update={'options': config.options.model_copy(update={'speed_matching': False})})

    print("Loading roster...")
    participants = load_roster(args.roster, config)
    print(f"Loaded {len(participants)} participants")

    results = []
    if args.results:
        print("Loading results...")
        results = load_results(args.results)
        print(f"Loaded {len(results)} results")

    return config, participants, results


def _report(schedule, lane_count):
    """Print validation findings for a schedule, return True when clean."""
    balance = validate_lane_balance(schedule)
    structure = validate_schedule(schedule, lane_count)

    errors = balance['errors'] + structure['errors']
    if errors:
        print("ERRORS found in schedule:")
        for error in errors:
            print(f"  - {error}")
    else:
        print("No errors found in schedule!")

    if structure['warnings']:
        print("WARNINGS found in schedule:")
        for warning in structure['warnings']:
            print(f"  - {warning}")

    return not errors


def _write(schedule, config, args):
    print(f"\nWriting schedule to {args.out}...")
    write_json(schedule, args.out)
    if args.excel:
        print(f"Exporting schedule to {args.excel}...")
        write_excel(schedule, config, args.excel)

    print("\n" + "=" * 50)
    print("SCHEDULING COMPLETE")
    print("=" * 50)
    stats = schedule.get_summary_stats()
    print(f"Algorithm: {stats.get('algorithm', 'N/A')}")
    print(f"Total heats: {stats.get('total_heats', 0)}")
    print(f"Participants: {stats.get('total_participants', 0)}")


def run(args) -> int:
    """Execute a parsed command, return the exit status."""
    if args.command == "validate":
        print(f"Loading schedule from {args.schedule}...")
        schedule = load_schedule(args.schedule)
        return 0 if _report(schedule, args.lanes) else 1

    config, participants, results = _load_context(args)

    if args.command == "generate":
        print("Generating schedule...")
        schedule = generate_schedule(participants, config.lane_count, results, config.options)

    elif args.command == "remove":
        current = load_schedule(args.schedule)
        leaving = set(args.car)
        remaining = [p for p in participants if p.car_number not in leaving]
        print(f"Removing cars {sorted(leaving)} after heat {args.completed}...")
        schedule = regenerate_after_removal(current, remaining, args.completed,
                                            config.lane_count, results, config.options)

    else:
        current = load_schedule(args.schedule)
        print(f"Adding late arrivals after heat {args.completed}...")
        schedule = regenerate_after_late_arrival(current, participants, args.completed,
                                                 config.lane_count, results, config.options)
        if args.car is not None and args.catch_up > 0:
            late = next((p for p in participants if p.car_number == args.car), None)
            if late is None:
                raise ValueError(f"Car {args.car} is not on the roster")
            print(f"Inserting {args.catch_up} catch-up heats for car {args.car}...")
            lanes = list(range(1, config.lane_count + 1))
            schedule = insert_catch_up_heats(schedule, late, args.catch_up, lanes, args.completed)

    print(f"Scheduled {len(schedule.heats)} heats")
    _report(schedule, config.lane_count)
    _write(schedule, config, args)
    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        sys.exit(run(args))
    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}")
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"ERROR: Invalid YAML configuration: {e}")
        sys.exit(1)
    except InsufficientParticipants as e:
        print(f"ERROR: {e}")
        sys.exit(1)
    except Exception as e:
        print(f"ERROR: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
