"""
Data ingestion for the heat scheduler.
"""

import json
import pandas as pd
from pathlib import Path
from typing import List, Dict
from .models import Participant, Schedule, RaceResult, result_from_dict
from .config import SchedulerConfig


ROSTER_READERS = {
    '.csv': pd.read_csv,
    '.xlsx': pd.read_excel,
    '.xls': pd.read_excel,
}


def load_roster(roster_path: str, config: SchedulerConfig) -> List[Participant]:
    """
    Load participants from a CSV or Excel roster.

    Args:
        roster_path: Path to the roster file
        config: Scheduler configuration (column names)

    Returns:
        List[Participant]: Participants in file order
    """
    path = Path(roster_path)
    reader = ROSTER_READERS.get(path.suffix.lower())
    if reader is None:
        raise ValueError(f"Unsupported file type: {path.suffix}. Use CSV or Excel (.xlsx, .xls).")
    if not path.exists():
        raise FileNotFoundError(roster_path)

    df = reader(path)

    car_col = config.columns.car_number
    name_col = config.columns.name
    missing_columns = [col for col in (car_col, name_col) if col not in df.columns]
    if missing_columns:
        raise ValueError(f"Missing required columns: {missing_columns}. Found columns: {list(df.columns)}")

    participants = []
    for _, row in df.iterrows():
        if pd.isna(row[car_col]) or str(row[car_col]).strip() == '':
            continue

        try:
            car_number = int(float(row[car_col]))
        except (TypeError, ValueError):
            raise ValueError(f"Row {row.name}: invalid car number {row[car_col]!r}")

        name = '' if pd.isna(row[name_col]) else str(row[name_col]).strip()
        participants.append(Participant(car_number=car_number, name=name))

    validate_roster(participants)
    return participants


def validate_roster(participants: List[Participant]) -> None:
    """
    Check roster invariants the scheduler relies on.

    Raises:
        ValueError: Non-positive or duplicate car numbers
    """
    seen = set()
    for participant in participants:
        if participant.car_number < 1:
            raise ValueError(f"Car numbers must be positive, got {participant.car_number}")
        if participant.car_number in seen:
            raise ValueError(f"Duplicate car number: {participant.car_number}")
        seen.add(participant.car_number)


def load_results(results_path: str) -> List[RaceResult]:
    """Load heat results from a JSON list of result records."""
    with open(results_path, 'r') as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError("Results file must contain a JSON list")

    return [result_from_dict(record) for record in data]


def load_schedule(schedule_path: str) -> Schedule:
    """Load a schedule previously written with ``write_json``."""
    with open(schedule_path, 'r') as f:
        data = json.load(f)

    return Schedule.from_dict(data)


def get_roster_summary(participants: List[Participant]) -> Dict:
    """
    Get summary statistics for a roster.

    Args:
        participants: List of participants

    Returns:
        Dict: Summary statistics
    """
    if not participants:
        return {}

    car_numbers = [p.car_number for p in participants]
    return {
        'total_participants': len(participants),
        'lowest_car_number': min(car_numbers),
        'highest_car_number': max(car_numbers),
        'unnamed': sum(1 for p in participants if not p.name),
    }
