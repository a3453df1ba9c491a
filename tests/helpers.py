"""Builders for SSIM lines and flight leg records used across the test modules."""

from datetime import date, time

from ssimschedule.models import FlightLegRecord, StationTime, ValidityPeriod

LINE_LENGTH = 200


def _put(buffer: list[str], start: int, value: str) -> None:
    for offset, char in enumerate(value):
        buffer[start + offset] = char


def build_leg_line(
        airline: str = "SU",
        flight_number: str = "0060",
        service_type: str = "J",
        period_start: str = "10JAN25",
        period_end: str = "10JAN25",
        days: str = "1234567",
        departure: str = "SVO",
        departure_time: str = "0420",
        departure_utc: str = "+0300",
        departure_terminal: str = "",
        arrival: str = "LED",
        arrival_time: str = "0600",
        arrival_utc: str = "+0300",
        arrival_terminal: str = "",
        aircraft: str = "320",
        length: int = LINE_LENGTH,
) -> str:
    buffer = [" "] * LINE_LENGTH
    _put(buffer, 0, "3")
    _put(buffer, 2, airline.ljust(3)[:3])
    _put(buffer, 5, flight_number.rjust(4)[:4])
    _put(buffer, 9, service_type[:1])
    _put(buffer, 10, "0101")
    _put(buffer, 14, period_start.ljust(7)[:7])
    _put(buffer, 21, period_end.ljust(7)[:7])
    _put(buffer, 28, days.ljust(7)[:7])
    _put(buffer, 36, departure.ljust(3)[:3])
    _put(buffer, 39, departure_time.ljust(4)[:4])
    _put(buffer, 43, departure_utc.ljust(5)[:5])
    _put(buffer, 48, departure_terminal[:1])
    _put(buffer, 54, arrival.ljust(3)[:3])
    _put(buffer, 57, arrival_time.ljust(4)[:4])
    _put(buffer, 61, arrival_utc.ljust(5)[:5])
    _put(buffer, 66, arrival_terminal[:1])
    _put(buffer, 71, aircraft.ljust(4)[:4])
    return "".join(buffer)[:length]


def make_record(
        flight_number: str = "0060",
        start: date = date(2025, 1, 1),
        end: date = date(2025, 1, 31),
        days: frozenset[int] = frozenset(range(1, 8)),
        departure_time: time = time(4, 20),
        arrival_time: time = time(6, 0),
        is_overnight: bool | None = None,
        aircraft_type: str = "320",
) -> FlightLegRecord:
    if is_overnight is None:
        is_overnight = arrival_time < departure_time
    return FlightLegRecord(
        airline_code="SU",
        flight_number=flight_number,
        full_flight_number=f"SU{flight_number}",
        departure=StationTime("SVO", departure_time, "+0300"),
        arrival=StationTime("LED", arrival_time, "+0300"),
        validity_period=ValidityPeriod(start, end),
        operating_days=days,
        aircraft_type=aircraft_type,
        is_overnight=is_overnight,
    )
