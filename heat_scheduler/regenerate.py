"""
Schedule regeneration for mid-event roster changes.

Completed heats are frozen. The remaining heats are generated fresh for the
updated roster and numbered to continue after the last completed heat.
"""

import logging
from typing import List, Dict, Optional, Union, Any, Sequence
from .models import Participant, LaneAssignment, Heat, Schedule, RaceResult
from .config import ScheduleOptions
from .engine import generate_schedule, build_metadata, require_participants

logger = logging.getLogger(__name__)


def _continue_schedule(schedule: Schedule, participants: List[Participant], current_heat_number: int,
                       lane_count: int, results: Optional[Sequence[RaceResult]],
                       options: Optional[Union[ScheduleOptions, Dict[str, Any]]]) -> Schedule:
    completed = [heat for heat in schedule.heats if heat.heat_number <= current_heat_number]
    fresh = generate_schedule(participants, lane_count, results, options)

    renumbered = [
        heat.renumbered(current_heat_number + i + 1)
        for i, heat in enumerate(fresh.heats)
    ]
    heats = completed + renumbered

    logger.debug("Kept %d completed heats, regenerated %d heats from heat %d",
                 len(completed), len(renumbered), current_heat_number + 1)

    return Schedule(heats=tuple(heats), metadata=build_metadata(heats, fresh.metadata.algorithm_used))


def regenerate_after_removal(schedule: Schedule, remaining_participants: List[Participant],
                             current_heat_number: int, lane_count: int,
                             results: Optional[Sequence[RaceResult]] = None,
                             options: Optional[Union[ScheduleOptions, Dict[str, Any]]] = None) -> Schedule:
    """
    Regenerate the remaining heats after cars leave the event.

    Args:
        schedule: Current schedule
        remaining_participants: Participants still racing
        current_heat_number: Last completed heat
        lane_count: Number of lanes on the track
        results: Accepted heat results so far
        options: Scheduling options

    Returns:
        Schedule: Completed heats unchanged followed by the regenerated heats

    Raises:
        InsufficientParticipants: Fewer than two participants remain
    """
    require_participants(remaining_participants)
    return _continue_schedule(schedule, remaining_participants, current_heat_number,
                              lane_count, results, options)


def regenerate_after_late_arrival(schedule: Schedule, all_participants: List[Participant],
                                  current_heat_number: int, lane_count: int,
                                  results: Optional[Sequence[RaceResult]] = None,
                                  options: Optional[Union[ScheduleOptions, Dict[str, Any]]] = None) -> Schedule:
    """
    Regenerate the remaining heats after cars check in late.

    Args:
        schedule: Current schedule
        all_participants: Full roster including the new arrivals
        current_heat_number: Last completed heat
        lane_count: Number of lanes on the track
        results: Accepted heat results so far
        options: Scheduling options

    Returns:
        Schedule: Completed heats unchanged followed by the regenerated heats
    """
    return _continue_schedule(schedule, all_participants, current_heat_number,
                              lane_count, results, options)


def generate_catch_up_heats(participant: Participant, catch_up_count: int,
                            available_lanes: Sequence[int], start_heat_number: int) -> List[Heat]:
    """
    Solo heats letting a late arrival make up missed races.

    Args:
        participant: The late arrival
        catch_up_count: Number of solo heats
        available_lanes: Working lanes, cycled in the given order
        start_heat_number: Number of the first catch-up heat

    Returns:
        List[Heat]: Heats flagged ``catch_up`` with one lane entry each
    """
    if catch_up_count <= 0:
        return []
    if not available_lanes:
        raise ValueError("Catch-up heats need at least one available lane")

    heats = []
    for i in range(catch_up_count):
        lane = available_lanes[i % len(available_lanes)]
        entry = LaneAssignment(lane=lane, car_number=participant.car_number, name=participant.name)
        heats.append(Heat(heat_number=start_heat_number + i, lanes=(entry,), catch_up=True))

    return heats


def insert_catch_up_heats(schedule: Schedule, participant: Participant, catch_up_count: int,
                          available_lanes: Sequence[int], current_heat_number: int) -> Schedule:
    """
    Insert catch-up heats right after the completed heats.

    Heats after ``current_heat_number`` are shifted back so numbering stays
    contiguous.
    """
    catch_ups = generate_catch_up_heats(participant, catch_up_count, available_lanes,
                                        current_heat_number + 1)
    if not catch_ups:
        return schedule

    completed = [heat for heat in schedule.heats if heat.heat_number <= current_heat_number]
    upcoming = [
        heat.renumbered(heat.heat_number + len(catch_ups))
        for heat in schedule.heats if heat.heat_number > current_heat_number
    ]
    heats = completed + catch_ups + upcoming

    return Schedule(heats=tuple(heats), metadata=build_metadata(heats, schedule.metadata.algorithm_used))
