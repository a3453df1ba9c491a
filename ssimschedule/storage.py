"""JSON-compatible (de)serialization of parsed records and expanded occurrences.

Where the payload ends up (file, browser storage, database) is the caller's
business; this module only fixes the shape: ISO dates, ``HH:MM`` times and
operating days as a sorted list of ISO weekday numbers.
"""
import json
from dataclasses import asdict
from datetime import date, datetime, time
from typing import Any, Iterable

import dacite

from .models import FlightLegRecord, Lane, ScheduledOccurrence

_DACITE_CONFIG = dacite.Config(
    type_hooks={
        date: date.fromisoformat,
        time: time.fromisoformat,
        frozenset[int]: frozenset,
    },
)


class StorageError(ValueError):
    """Persisted payload cannot be turned back into records."""


def _to_json_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat(timespec='minutes')
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, time):
        return value.strftime('%H:%M')
    if isinstance(value, (frozenset, set)):
        return sorted(value)
    if isinstance(value, dict):
        return {key: _to_json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json_value(item) for item in value]
    return value


def record_to_dict(record: FlightLegRecord) -> dict[str, Any]:
    return _to_json_value(asdict(record))


def record_from_dict(data: dict[str, Any]) -> FlightLegRecord:
    try:
        return dacite.from_dict(data_class=FlightLegRecord, data=data, config=_DACITE_CONFIG)
    except (dacite.DaciteError, ValueError, TypeError) as e:
        raise StorageError(f'Invalid flight leg payload: {e}') from e


def records_to_json(records: Iterable[FlightLegRecord], indent: int | None = None) -> str:
    return json.dumps([record_to_dict(r) for r in records], indent=indent, ensure_ascii=False)


def records_from_json(text: str) -> list[FlightLegRecord]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise StorageError(f'Stored records are not valid JSON: {e}') from e
    if not isinstance(payload, list):
        raise StorageError(f'Expected a JSON list of records, got {type(payload).__name__}')
    return [record_from_dict(item) for item in payload]


def occurrence_to_dict(occurrence: ScheduledOccurrence) -> dict[str, Any]:
    data = record_to_dict(occurrence.leg)
    data.pop('raw_line', None)
    data.update(
        departure_instant=_to_json_value(occurrence.departure_instant),
        arrival_instant=_to_json_value(occurrence.arrival_instant),
        duration_minutes=occurrence.duration_minutes,
        duration=occurrence.duration,
    )
    return data


def lane_to_dict(lane: Lane) -> dict[str, Any]:
    return {
        'lane_id': lane.lane_id,
        'group': lane.group,
        'index': lane.index,
        'flights': [
            {
                'full_flight_number': o.full_flight_number,
                'departure_instant': _to_json_value(o.departure_instant),
                'arrival_instant': _to_json_value(o.arrival_instant),
            }
            for o in lane.occurrences
        ],
    }
