import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime, time, timedelta
from typing import Iterator

from ..dates import as_date, iter_dates, minutes_between
from ..models import FlightLegRecord, ScheduledOccurrence, StationTime, ValidityPeriod

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


class ScheduleExpander:
    """Turns recurring flight legs into dated occurrences inside a display window.

    The window is inclusive on both ends. An inverted window is a caller error
    and yields nothing. Output is sorted by departure then flight number, so two
    runs over the same input are equal.
    """

    def __init__(self, window_start: date | datetime, window_end: date | datetime):
        self.window_start = as_date(window_start)
        self.window_end = as_date(window_end)

    @property
    def is_empty_window(self) -> bool:
        return self.window_start > self.window_end

    # ---------------- validation helpers -----------------
    @staticmethod
    def _is_expandable(record: object) -> bool:
        if not isinstance(record, FlightLegRecord):
            return False
        if not isinstance(record.validity_period, ValidityPeriod):
            return False
        for station in (record.departure, record.arrival):
            if not isinstance(station, StationTime) or not isinstance(station.time, time):
                return False
        return isinstance(record.operating_days, (frozenset, set)) and bool(record.operating_days)

    def effective_period(self, record: FlightLegRecord) -> ValidityPeriod | None:
        if self.is_empty_window:
            return None
        return record.validity_period.intersection(ValidityPeriod(self.window_start, self.window_end))

    # ---------------- core steps -----------------
    @staticmethod
    def build_occurrence(record: FlightLegRecord, day: date) -> ScheduledOccurrence | None:
        departure = datetime.combine(day, record.departure.time)
        arrival_day = day + ONE_DAY if record.is_overnight else day
        arrival = datetime.combine(arrival_day, record.arrival.time)
        if arrival <= departure:
            arrival += ONE_DAY
        duration = minutes_between(departure, arrival)
        if duration <= 0:
            logger.warning('Skipping %s on %s: non-positive duration', record.full_flight_number, day)
            return None
        return ScheduledOccurrence(
            leg=record,
            departure_instant=departure,
            arrival_instant=arrival,
            duration_minutes=duration,
        )

    def occurrences_for(self, record: FlightLegRecord) -> Iterator[ScheduledOccurrence]:
        period = self.effective_period(record)
        if period is None:
            logger.debug('Skipping %s: %s - %s is outside the window',
                         record.full_flight_number, record.validity_period.start_date,
                         record.validity_period.end_date)
            return
        for day in iter_dates(period.start_date, period.end_date):
            if day.isoweekday() not in record.operating_days:
                continue
            if (occurrence := self.build_occurrence(record, day)) is not None:
                yield occurrence

    # ---------------- public API -----------------
    def expand(self, records: Iterable[FlightLegRecord]) -> list[ScheduledOccurrence]:
        if isinstance(records, (str, bytes, Mapping)) or not isinstance(records, Iterable):
            raise TypeError(f'records must be an iterable of FlightLegRecord, got {type(records).__name__}')
        if self.is_empty_window:
            logger.warning('Window start %s is after window end %s', self.window_start, self.window_end)
            return []

        occurrences: list[ScheduledOccurrence] = []
        skipped = 0
        for record in records:
            if not self._is_expandable(record):
                skipped += 1
                continue
            occurrences.extend(self.occurrences_for(record))
        if skipped:
            logger.warning('Skipped %d incomplete records', skipped)

        occurrences.sort(key=lambda o: (o.departure_instant, o.full_flight_number))
        logger.info('Expanded into %d occurrences for %s - %s',
                    len(occurrences), self.window_start, self.window_end)
        return occurrences


def expand(records: Iterable[FlightLegRecord], window_start: date | datetime,
           window_end: date | datetime) -> list[ScheduledOccurrence]:
    """Enumerate every dated occurrence of records within [window_start, window_end]."""
    return ScheduleExpander(window_start, window_end).expand(records)
