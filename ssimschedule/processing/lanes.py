"""Greedy interval colouring of occurrences into non-overlapping display lanes."""
import logging
from collections import defaultdict
from typing import Iterable, Literal

from ..models import Lane, ScheduledOccurrence

logger = logging.getLogger(__name__)

GroupBy = Literal['aircraft_type', 'aircraft_id']
UNKNOWN_GROUP = 'Unknown'


def _group_key(occurrence: ScheduledOccurrence, group_by: GroupBy) -> str:
    return getattr(occurrence, group_by) or UNKNOWN_GROUP


def _pack(occurrences: list[ScheduledOccurrence]) -> list[list[ScheduledOccurrence]]:
    # Within a lane every arrival is <= the next departure, so checking the last one suffices.
    lanes: list[list[ScheduledOccurrence]] = []
    for occurrence in sorted(occurrences, key=lambda o: (o.departure_instant, o.full_flight_number)):
        for lane in lanes:
            if lane[-1].arrival_instant <= occurrence.departure_instant:
                lane.append(occurrence)
                break
        else:
            lanes.append([occurrence])
    return lanes


def assign_lanes(occurrences: Iterable[ScheduledOccurrence], group_by: GroupBy = 'aircraft_type') -> list[Lane]:
    """Split occurrences per aircraft type (or synthetic tail) into overlap-free lanes.

    Intervals are half-open, a flight departing exactly when the previous one
    arrives shares its lane. Lanes come back ordered by group then index.
    """
    if group_by not in ('aircraft_type', 'aircraft_id'):
        raise ValueError(f'Unsupported lane grouping: {group_by!r}')

    groups: dict[str, list[ScheduledOccurrence]] = defaultdict(list)
    for occurrence in occurrences:
        groups[_group_key(occurrence, group_by)].append(occurrence)

    result: list[Lane] = []
    for group in sorted(groups):
        packed = _pack(groups[group])
        logger.debug('%s: %d occurrences in %d lanes', group, len(groups[group]), len(packed))
        result.extend(Lane(group=group, index=i, occurrences=tuple(lane)) for i, lane in enumerate(packed, start=1))
    return result
