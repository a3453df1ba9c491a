from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta

from .dates import format_duration, parse_utc_offset


@dataclass(frozen=True, slots=True)
class StationTime:
    """One end of a leg: station code, local clock time, raw UTC variation and terminal."""
    airport: str
    time: time
    utc_offset: str = ''
    terminal: str = ''

    @property
    def utc_offset_delta(self) -> timedelta | None:
        return parse_utc_offset(self.utc_offset)


@dataclass(frozen=True, slots=True)
class ValidityPeriod:
    """Inclusive date range in which a leg's weekly pattern applies."""
    start_date: date
    end_date: date

    def __post_init__(self) -> None:
        if self.start_date > self.end_date:
            raise ValueError(f'Period start {self.start_date} is after end {self.end_date}')

    def intersection(self, other: 'ValidityPeriod') -> 'ValidityPeriod | None':
        start = max(self.start_date, other.start_date)
        end = min(self.end_date, other.end_date)
        if start > end:
            return None
        return ValidityPeriod(start, end)


@dataclass(frozen=True, slots=True)
class FlightLegRecord:
    """Single type 3 SSIM line: a city pair flown on some weekdays within a period.

    operating_days uses ISO numbering (Mon=1, Sun=7), the same digits SSIM writes.
    is_overnight is only a hint that the local arrival clock reads earlier than
    the departure one; the expander re-checks chronology on concrete dates.
    """
    airline_code: str
    flight_number: str
    full_flight_number: str
    departure: StationTime
    arrival: StationTime
    validity_period: ValidityPeriod
    operating_days: frozenset[int]
    aircraft_type: str
    is_overnight: bool
    service_type: str = ''
    aircraft_id: str = ''
    is_fixed: bool = False
    raw_line: str | None = None


@dataclass(frozen=True, slots=True)
class ScheduledOccurrence:
    """A leg pinned to a calendar date. Instants are naive local times."""
    leg: FlightLegRecord
    departure_instant: datetime
    arrival_instant: datetime
    duration_minutes: int

    @property
    def full_flight_number(self) -> str:
        return self.leg.full_flight_number

    @property
    def airline_code(self) -> str:
        return self.leg.airline_code

    @property
    def flight_number(self) -> str:
        return self.leg.flight_number

    @property
    def aircraft_type(self) -> str:
        return self.leg.aircraft_type

    @property
    def aircraft_id(self) -> str:
        return self.leg.aircraft_id

    @property
    def departure(self) -> StationTime:
        return self.leg.departure

    @property
    def arrival(self) -> StationTime:
        return self.leg.arrival

    @property
    def validity_period(self) -> ValidityPeriod:
        return self.leg.validity_period

    @property
    def operating_days(self) -> frozenset[int]:
        return self.leg.operating_days

    @property
    def is_overnight(self) -> bool:
        return self.leg.is_overnight

    @property
    def flight_date(self) -> date:
        return self.departure_instant.date()

    @property
    def duration(self) -> str:
        return format_duration(self.duration_minutes)

    @property
    def departure_utc(self) -> datetime | None:
        offset = self.leg.departure.utc_offset_delta
        return None if offset is None else self.departure_instant - offset

    @property
    def arrival_utc(self) -> datetime | None:
        offset = self.leg.arrival.utc_offset_delta
        return None if offset is None else self.arrival_instant - offset


@dataclass(frozen=True, slots=True)
class Lane:
    """Display row of occurrences that never overlap in time."""
    group: str
    index: int
    occurrences: tuple[ScheduledOccurrence, ...]

    @property
    def lane_id(self) -> str:
        return f'{self.group}-{self.index}'


@dataclass(frozen=True, slots=True)
class HeaderRecord:
    title: str


@dataclass(frozen=True, slots=True)
class CarrierRecord:
    time_mode: str
    airline_code: str
    season: str
    period_start: date | None
    period_end: date | None
    creation_date: date | None


@dataclass(frozen=True, slots=True)
class ParseIssue:
    line_number: int
    code: str
    message: str


@dataclass(slots=True)
class ParseStats:
    total_lines: int = 0
    valid_count: int = 0
    fixed_count: int = 0
    invalid_count: int = 0
    errors: dict[str, int] = field(default_factory=dict)


@dataclass(slots=True)
class ParseResult:
    records: list[FlightLegRecord]
    stats: ParseStats
    global_period: ValidityPeriod
    issues: list[ParseIssue] = field(default_factory=list)
    header: HeaderRecord | None = None
    carriers: list[CarrierRecord] = field(default_factory=list)

    @property
    def total_lines(self) -> int:
        return self.stats.total_lines

    @property
    def fixed_count(self) -> int:
        return self.stats.fixed_count
