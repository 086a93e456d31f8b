"""
Lane usage bookkeeping shared by the engine, validator and exporters.
"""

from typing import Dict, Iterable
import pandas as pd

from .models import Heat, Schedule


def build_lane_usage_matrix(heats: Iterable[Heat]) -> Dict[int, Dict[int, int]]:
    """
    Count how often each car raced in each lane.

    Args:
        heats: Heats to count (a Schedule's ``heats``)

    Returns:
        Dict[int, Dict[int, int]]: car_number -> {lane: count}, lanes never used are absent
    """
    matrix: Dict[int, Dict[int, int]] = {}
    for heat in heats:
        for entry in heat.lanes:
            lanes = matrix.setdefault(entry.car_number, {})
            lanes[entry.lane] = lanes.get(entry.lane, 0) + 1
    return matrix


def count_heats_per_participant(heats: Iterable[Heat]) -> Dict[int, int]:
    """Total heats raced per car."""
    counts: Dict[int, int] = {}
    for heat in heats:
        for car_number in heat.car_numbers:
            counts[car_number] = counts.get(car_number, 0) + 1
    return counts


def get_lane_spread(lane_counts: Dict[int, int]) -> int:
    """
    Spread between a car's most and least used lane.

    Only lanes present in ``lane_counts`` take part, so pass zero entries
    explicitly when unused lanes should count.
    """
    if not lane_counts:
        return 0
    counts = list(lane_counts.values())
    return max(counts) - min(counts)


def lane_usage_dataframe(schedule: Schedule) -> pd.DataFrame:
    """Car-by-lane usage table with a spread column."""
    df = schedule.to_dataframe()
    if df.empty:
        return pd.DataFrame()

    usage = pd.crosstab(df['Car Number'], df['Lane'])
    usage.columns = [f"Lane {lane}" for lane in usage.columns]
    names = df.drop_duplicates('Car Number').set_index('Car Number')['Name']
    usage.insert(0, 'Name', names.reindex(usage.index))
    lane_columns = [col for col in usage.columns if col.startswith('Lane ')]
    usage['Total'] = usage[lane_columns].sum(axis=1)
    usage['Spread'] = usage[lane_columns].max(axis=1) - usage[lane_columns].min(axis=1)
    return usage.reset_index()
