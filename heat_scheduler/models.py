"""
Data models for the heat scheduler.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Dict, Optional, Tuple, Union, Any
import pandas as pd


class Algorithm(Enum):
    """Scheduling strategies."""
    CIRCLE_METHOD = "circle_method"
    GREEDY_HEURISTIC = "greedy_heuristic"
    SPEED_MATCHED_GREEDY = "speed_matched_greedy"


@dataclass(frozen=True)
class Participant:
    """A car on the roster. ``car_number`` is the identity key."""
    car_number: int
    name: str


@dataclass(frozen=True)
class LaneAssignment:
    """One car placed in one lane of a heat."""
    lane: int
    car_number: int
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {'lane': self.lane, 'car_number': self.car_number, 'name': self.name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LaneAssignment':
        return cls(lane=int(data['lane']), car_number=int(data['car_number']), name=str(data.get('name', '')))


@dataclass(frozen=True)
class Heat:
    """A single heat, lanes ordered by lane number."""
    heat_number: int
    lanes: Tuple[LaneAssignment, ...]
    catch_up: bool = False

    @property
    def car_numbers(self) -> List[int]:
        """Car numbers racing in this heat, in lane order."""
        return [entry.car_number for entry in self.lanes]

    def renumbered(self, heat_number: int) -> 'Heat':
        """Copy of this heat under a new heat number."""
        return Heat(heat_number=heat_number, lanes=self.lanes, catch_up=self.catch_up)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'heat_number': self.heat_number,
            'lanes': [entry.to_dict() for entry in self.lanes],
        }
        if self.catch_up:
            data['catch_up'] = True
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Heat':
        lanes = tuple(sorted((LaneAssignment.from_dict(entry) for entry in data['lanes']), key=lambda x: x.lane))
        return cls(heat_number=int(data['heat_number']), lanes=lanes, catch_up=bool(data.get('catch_up', False)))


@dataclass(frozen=True)
class ScheduleMetadata:
    """Descriptive information about how a schedule was produced."""
    algorithm_used: Algorithm
    total_heats: int
    cars_per_heat: Tuple[int, ...]
    lane_balance_perfect: bool
    speed_matched: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            'algorithm_used': self.algorithm_used.value,
            'total_heats': self.total_heats,
            'cars_per_heat': list(self.cars_per_heat),
            'lane_balance_perfect': self.lane_balance_perfect,
            'speed_matched': self.speed_matched,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScheduleMetadata':
        return cls(
            algorithm_used=Algorithm(data['algorithm_used']),
            total_heats=int(data['total_heats']),
            cars_per_heat=tuple(int(n) for n in data.get('cars_per_heat', [])),
            lane_balance_perfect=bool(data.get('lane_balance_perfect', False)),
            speed_matched=bool(data.get('speed_matched', False)),
        )


@dataclass(frozen=True)
class Schedule:
    """A complete heat schedule."""
    heats: Tuple[Heat, ...]
    metadata: ScheduleMetadata

    def get_participant_heats(self, car_number: int) -> List[Heat]:
        """Get all heats a specific car races in."""
        return [heat for heat in self.heats if car_number in heat.car_numbers]

    def get_heat(self, heat_number: int) -> Optional[Heat]:
        """Get a heat by number."""
        for heat in self.heats:
            if heat.heat_number == heat_number:
                return heat
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'heats': [heat.to_dict() for heat in self.heats],
            'metadata': self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Schedule':
        return cls(
            heats=tuple(Heat.from_dict(heat) for heat in data['heats']),
            metadata=ScheduleMetadata.from_dict(data['metadata']),
        )

    def to_dataframe(self) -> pd.DataFrame:
        """Convert schedule to pandas DataFrame, one row per lane assignment."""
        if not self.heats:
            return pd.DataFrame(columns=['Heat', 'Lane', 'Car Number', 'Name', 'Catch Up'])

        data = []
        for heat in self.heats:
            for entry in heat.lanes:
                data.append({
                    'Heat': heat.heat_number,
                    'Lane': entry.lane,
                    'Car Number': entry.car_number,
                    'Name': entry.name,
                    'Catch Up': heat.catch_up,
                })

        df = pd.DataFrame(data)
        return df.sort_values(['Heat', 'Lane']).reset_index(drop=True)

    def get_summary_stats(self) -> Dict[str, Any]:
        """Get summary statistics for the schedule."""
        if not self.heats:
            return {}

        df = self.to_dataframe()

        stats = {
            'algorithm': self.metadata.algorithm_used.value,
            'total_heats': len(self.heats),
            'total_participants': int(df['Car Number'].nunique()),
            'races_per_participant': {int(k): int(v) for k, v in df['Car Number'].value_counts().sort_index().items()},
            'cars_per_heat_distribution': {int(k): int(v) for k, v in df.groupby('Heat').size().value_counts().sort_index().items()},
            'catch_up_heats': sum(1 for heat in self.heats if heat.catch_up),
            'lane_balance_perfect': self.metadata.lane_balance_perfect,
            'speed_matched': self.metadata.speed_matched,
        }

        return stats


@dataclass(frozen=True)
class Ranking:
    """A manually entered finishing place."""
    car_number: int
    place: int


@dataclass(frozen=True)
class TimedResult:
    """Electronically timed heat result.

    ``times_ms`` maps lane number to elapsed milliseconds. ``lanes`` is the
    staging of the heat and is needed to know which car ran which lane.
    """
    heat_number: int
    times_ms: Dict[int, float]
    timestamp: float = 0
    lanes: Optional[Tuple[LaneAssignment, ...]] = None


@dataclass(frozen=True)
class RankedResult:
    """Finish order entered by hand when timing was unavailable."""
    heat_number: int
    rankings: Tuple[Ranking, ...]
    timestamp: float = 0


RaceResult = Union[TimedResult, RankedResult]

TIMED_RESULT_TYPES = ('timed', 'RaceCompleted')
RANKED_RESULT_TYPES = ('ranked', 'ResultManuallyEntered')


def result_from_dict(data: Dict[str, Any]) -> RaceResult:
    """
    Build a race result from its dictionary form.

    Args:
        data: Result record with a ``type`` key

    Returns:
        RaceResult: TimedResult or RankedResult
    """
    kind = data.get('type')
    heat_number = int(data['heat_number'] if 'heat_number' in data else data['heat'])
    timestamp = data.get('timestamp', 0) or 0

    if kind in TIMED_RESULT_TYPES:
        lanes = data.get('lanes')
        if isinstance(lanes, list):
            # Entries without an explicit lane are positional (index 0 is lane 1)
            try:
                lanes = tuple(
                    LaneAssignment.from_dict({'lane': position + 1, **entry})
                    for position, entry in enumerate(lanes)
                    if isinstance(entry, dict) and entry.get('car_number') is not None
                )
            except (TypeError, ValueError):
                # Unreadable staging, the times cannot be attributed
                lanes = None
        else:
            lanes = None
        return TimedResult(
            heat_number=heat_number,
            times_ms=dict(data.get('times_ms') or {}),
            timestamp=timestamp,
            lanes=lanes,
        )

    if kind in RANKED_RESULT_TYPES:
        rankings = tuple(
            Ranking(car_number=int(r['car_number']), place=int(r['place']))
            for r in data.get('rankings') or []
        )
        return RankedResult(heat_number=heat_number, rankings=rankings, timestamp=timestamp)

    raise ValueError(f"Unknown result type: {kind!r}")


def result_to_dict(result: RaceResult) -> Dict[str, Any]:
    """Dictionary form of a race result."""
    if isinstance(result, TimedResult):
        data = {
            'type': 'timed',
            'heat_number': result.heat_number,
            'times_ms': {str(k): v for k, v in result.times_ms.items()},
            'timestamp': result.timestamp,
        }
        if result.lanes is not None:
            data['lanes'] = [entry.to_dict() for entry in result.lanes]
        return data
    return {
        'type': 'ranked',
        'heat_number': result.heat_number,
        'rankings': [{'car_number': r.car_number, 'place': r.place} for r in result.rankings],
        'timestamp': result.timestamp,
    }
