"""
Heat Scheduler - lane-balanced heat scheduling for multi-lane racing events.
"""

__version__ = "0.1.0"

from .config import SchedulerConfig, ScheduleOptions
from .models import (
    Algorithm,
    Participant,
    LaneAssignment,
    Heat,
    Schedule,
    ScheduleMetadata,
    TimedResult,
    RankedResult,
    Ranking,
)
from .circle import is_known_solvable, circle_method
from .speed import calculate_average_times, group_by_speed
from .greedy import greedy_heuristic
from .engine import (
    InsufficientParticipants,
    select_algorithm,
    generate_schedule,
    validate_lane_balance,
)
from .regenerate import regenerate_after_removal, regenerate_after_late_arrival
from .export import write_excel

__all__ = [
    "SchedulerConfig",
    "ScheduleOptions",
    "Algorithm",
    "Participant",
    "LaneAssignment",
    "Heat",
    "Schedule",
    "ScheduleMetadata",
    "TimedResult",
    "RankedResult",
    "Ranking",
    "is_known_solvable",
    "circle_method",
    "calculate_average_times",
    "group_by_speed",
    "greedy_heuristic",
    "InsufficientParticipants",
    "select_algorithm",
    "generate_schedule",
    "validate_lane_balance",
    "regenerate_after_removal",
    "regenerate_after_late_arrival",
    "write_excel",
]
