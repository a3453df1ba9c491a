"""IATA SSIM (Standard Schedules Information Manual) flight leg parser.

Only type 3 records carry schedule data. Header (1) and carrier (2) records are
read for metadata and never block processing. The parser prefers showing a
plausible leg over rejecting it: bad dates fall back to the file's global
period, bad times to 00:00 and unreadable days of operation to "every day".
Every repair is counted and reported as a ParseIssue, none of them raise.
"""
import hashlib
import logging
import re
from dataclasses import dataclass
from datetime import date, time, timedelta

from ..dates import ALL_WEEKDAYS, parse_operating_days, parse_ssim_date, parse_ssim_time
from ..models import (
    CarrierRecord,
    FlightLegRecord,
    HeaderRecord,
    ParseResult,
    ParseStats,
    StationTime,
    ValidityPeriod,
)
from .base import (
    CARRIER_LAYOUT,
    CARRIER_RECORD,
    FLIGHT_LEG_LAYOUT,
    FLIGHT_LEG_MIN_LENGTH,
    FLIGHT_LEG_RECORD,
    HEADER_LAYOUT,
    HEADER_RECORD,
    BaseFixedWidthParser,
    extract_field,
    iter_lines,
)

logger = logging.getLogger(__name__)

DEFAULT_PERIOD_DAYS = 30
MIDNIGHT = time(0, 0)

_AIRLINE_RE = re.compile(r'[A-Z0-9]{2,3}')
_STATION_RE = re.compile(r'[A-Z]{3}')


@dataclass(frozen=True, slots=True)
class ParserOptions:
    """Parser switches.

    strict_mode rejects short lines and legs whose designators are malformed or,
    when reference sets are given, unknown. auto_fix lets short lines through
    with their missing trailing fields read as blanks.
    """
    strict_mode: bool = False
    auto_fix: bool = True
    preserve_raw: bool = False
    airline_designators: frozenset[str] | None = None
    airports: frozenset[str] | None = None
    aircraft_types: frozenset[str] | None = None


def derive_aircraft_id(airline_code: str, aircraft_type: str, flight_number: str) -> str:
    """Stable synthetic tail identity, e.g. ``'320 - SU417'``."""
    digest = hashlib.sha1(f'{airline_code}|{aircraft_type}|{flight_number}'.encode('utf-8')).digest()
    tail = 100 + int.from_bytes(digest[:8], 'big') % 900
    return f'{aircraft_type} - {airline_code}{tail}'


class SSIMParser(BaseFixedWidthParser):
    def __init__(self, options: ParserOptions | None = None):
        super().__init__()
        self.options = options or ParserOptions()

    # ---------------- public API -----------------
    def parse(self, content: str, today: date | None = None) -> ParseResult:
        if not isinstance(content, str):
            raise TypeError(f'SSIM content must be str, got {type(content).__name__}')
        self.reset()
        stats = ParseStats()
        header: HeaderRecord | None = None
        carriers: list[CarrierRecord] = []
        records: list[FlightLegRecord] = []

        global_period = self.detect_global_period(content, today)

        for line_number, line in iter_lines(content):
            record_type = line[0]
            if record_type == FLIGHT_LEG_RECORD:
                stats.total_lines += 1
                record = self.parse_flight_leg(line_number, line, global_period)
                if record is None:
                    stats.invalid_count += 1
                    continue
                if record.is_fixed:
                    stats.fixed_count += 1
                else:
                    stats.valid_count += 1
                records.append(record)
            elif record_type == HEADER_RECORD:
                if header is None:
                    header = self.parse_header(line)
            elif record_type == CARRIER_RECORD:
                carriers.append(self.parse_carrier(line))

        stats.errors = dict(self.error_counts)
        logger.info(
            'Parsed %d flight leg lines: %d valid, %d fixed, %d rejected',
            stats.total_lines, stats.valid_count, stats.fixed_count, stats.invalid_count,
        )
        if stats.errors:
            logger.warning('SSIM data issues: %s', stats.errors)
        return ParseResult(
            records=records,
            stats=stats,
            global_period=global_period,
            issues=list(self.issues),
            header=header,
            carriers=carriers,
        )

    def detect_global_period(self, content: str, today: date | None = None) -> ValidityPeriod:
        """Union of all well-formed leg periods, or [today, today + 30 days] when there are none."""
        min_start: date | None = None
        max_end: date | None = None
        for _, line in iter_lines(content):
            if line[0] != FLIGHT_LEG_RECORD:
                continue
            start = parse_ssim_date(extract_field(line, FLIGHT_LEG_LAYOUT['period_start']))
            end = parse_ssim_date(extract_field(line, FLIGHT_LEG_LAYOUT['period_end']))
            if start is None or end is None or start > end:
                continue
            if min_start is None or start < min_start:
                min_start = start
            if max_end is None or end > max_end:
                max_end = end

        if min_start is None or max_end is None:
            today = today or date.today()
            logger.warning('No valid period found in SSIM data, defaulting to %d days from %s',
                           DEFAULT_PERIOD_DAYS, today)
            return ValidityPeriod(today, today + timedelta(days=DEFAULT_PERIOD_DAYS))
        logger.debug('Global period %s - %s', min_start, max_end)
        return ValidityPeriod(min_start, max_end)

    # ---------------- record parsers -----------------
    def parse_flight_leg(self, line_number: int, line: str,
                         global_period: ValidityPeriod) -> FlightLegRecord | None:
        fixed = False
        if len(line) < FLIGHT_LEG_MIN_LENGTH:
            self.report(line_number, 'LENGTH_ERROR',
                        f'Line is {len(line)} characters long, at least {FLIGHT_LEG_MIN_LENGTH} required')
            if self.options.strict_mode or not self.options.auto_fix:
                return None
            fixed = True

        fields = self.read_fields(line, FLIGHT_LEG_LAYOUT)
        airline = fields['airline_designator']
        flight_number = fields['flight_number']
        full_flight_number = f'{airline}{flight_number}'

        if self.options.strict_mode and not self._passes_strict_checks(line_number, fields):
            return None

        period, period_fixed = self._resolve_period(line_number, full_flight_number, fields, global_period)
        departure_time, departure_fixed = self._resolve_time(
            line_number, 'INVALID_DEP_TIME', full_flight_number, fields['departure_time'])
        arrival_time, arrival_fixed = self._resolve_time(
            line_number, 'INVALID_ARR_TIME', full_flight_number, fields['arrival_time'])
        operating_days, days_fixed = self._resolve_days(line_number, full_flight_number,
                                                        fields['days_of_operation'])
        fixed = fixed or period_fixed or departure_fixed or arrival_fixed or days_fixed

        aircraft_type = fields['aircraft_type']
        return FlightLegRecord(
            airline_code=airline,
            flight_number=flight_number,
            full_flight_number=full_flight_number,
            departure=StationTime(fields['departure_station'], departure_time, fields['departure_utc'],
                                  fields['departure_terminal']),
            arrival=StationTime(fields['arrival_station'], arrival_time, fields['arrival_utc'],
                                fields['arrival_terminal']),
            validity_period=period,
            operating_days=operating_days,
            aircraft_type=aircraft_type,
            is_overnight=arrival_time < departure_time,
            service_type=fields['service_type'],
            aircraft_id=derive_aircraft_id(airline, aircraft_type, flight_number),
            is_fixed=fixed,
            raw_line=line if self.options.preserve_raw else None,
        )

    @staticmethod
    def parse_header(line: str) -> HeaderRecord:
        return HeaderRecord(title=extract_field(line, HEADER_LAYOUT['title']))

    def parse_carrier(self, line: str) -> CarrierRecord:
        fields = self.read_fields(line, CARRIER_LAYOUT)
        return CarrierRecord(
            time_mode=fields['time_mode'],
            airline_code=fields['airline_designator'],
            season=fields['season'],
            period_start=parse_ssim_date(fields['period_start']),
            period_end=parse_ssim_date(fields['period_end']),
            creation_date=parse_ssim_date(fields['creation_date']),
        )

    # ---------------- field repair -----------------
    def _resolve_period(self, line_number: int, flight: str, fields: dict[str, str],
                        global_period: ValidityPeriod) -> tuple[ValidityPeriod, bool]:
        raw_start, raw_end = fields['period_start'], fields['period_end']
        start = parse_ssim_date(raw_start)
        end = parse_ssim_date(raw_end)
        if start is None:
            self.report(line_number, 'INVALID_START_DATE', f'{flight}: bad period start {raw_start!r}')
        if end is None:
            self.report(line_number, 'INVALID_END_DATE', f'{flight}: bad period end {raw_end!r}')
        if start is None or end is None:
            return global_period, True
        if start > end:
            self.report(line_number, 'INVALID_PERIOD', f'{flight}: period {raw_start}-{raw_end} is inverted')
            return ValidityPeriod(end, start), True
        return ValidityPeriod(start, end), False

    def _resolve_time(self, line_number: int, code: str, flight: str, raw: str) -> tuple[time, bool]:
        if (parsed := parse_ssim_time(raw)) is not None:
            return parsed, False
        self.report(line_number, code, f'{flight}: bad time {raw!r}, using 00:00')
        return MIDNIGHT, True

    def _resolve_days(self, line_number: int, flight: str, raw: str) -> tuple[frozenset[int], bool]:
        if days := parse_operating_days(raw):
            return days, False
        self.report(line_number, 'INVALID_DAYS', f'{flight}: no operating days in {raw!r}, assuming daily')
        return ALL_WEEKDAYS, True

    def _passes_strict_checks(self, line_number: int, fields: dict[str, str]) -> bool:
        options = self.options
        passed = True
        airline = fields['airline_designator']
        if not _AIRLINE_RE.fullmatch(airline) or (
                options.airline_designators is not None and airline not in options.airline_designators):
            self.report(line_number, 'INVALID_AIRLINE', f'Unknown airline designator {airline!r}')
            passed = False
        for key, code in (('departure_station', 'INVALID_DEP_AIRPORT'), ('arrival_station', 'INVALID_ARR_AIRPORT')):
            station = fields[key]
            if not _STATION_RE.fullmatch(station) or (
                    options.airports is not None and station not in options.airports):
                self.report(line_number, code, f'Unknown station {station!r}')
                passed = False
        aircraft = fields['aircraft_type']
        if not aircraft or (options.aircraft_types is not None and aircraft not in options.aircraft_types):
            self.report(line_number, 'INVALID_AIRCRAFT', f'Unknown aircraft type {aircraft!r}')
            passed = False
        return passed


def parse(content: str, options: ParserOptions | None = None, *, today: date | None = None) -> ParseResult:
    """Parse SSIM text into flight leg records plus aggregate statistics."""
    return SSIMParser(options).parse(content, today=today)
