import logging
from abc import ABC, abstractmethod
from collections import Counter
from typing import Iterator, TypeAlias

from ..models import ParseIssue

FieldSpan: TypeAlias = tuple[int, int]
Layout: TypeAlias = dict[str, FieldSpan]

logger = logging.getLogger(__name__)

# IATA SSIM Chapter 7, 0-based and end-exclusive.
FLIGHT_LEG_LAYOUT: Layout = {
    'record_type': (0, 1),
    'airline_designator': (2, 5),
    'flight_number': (5, 9),
    'service_type': (9, 10),
    'period_start': (14, 21),
    'period_end': (21, 28),
    'days_of_operation': (28, 35),
    'departure_station': (36, 39),
    'departure_time': (39, 43),
    'departure_utc': (43, 48),
    'departure_terminal': (48, 49),
    'arrival_station': (54, 57),
    'arrival_time': (57, 61),
    'arrival_utc': (61, 66),
    'arrival_terminal': (66, 67),
    'aircraft_type': (71, 75),
}
FLIGHT_LEG_MIN_LENGTH = 75

HEADER_LAYOUT: Layout = {
    'title': (1, 35),
}

CARRIER_LAYOUT: Layout = {
    'time_mode': (1, 2),
    'airline_designator': (2, 5),
    'season': (10, 13),
    'period_start': (14, 21),
    'period_end': (21, 28),
    'creation_date': (28, 35),
}

HEADER_RECORD = '1'
CARRIER_RECORD = '2'
FLIGHT_LEG_RECORD = '3'


def extract_field(line: str, span: FieldSpan) -> str:
    """Slice a fixed-width field; columns past the end of a short line read as ''."""
    start, end = span
    return line[start:end].strip()


def iter_lines(content: str) -> Iterator[tuple[int, str]]:
    """Yield (1-based line number, line) for non-blank lines, without copying the text."""
    line_number = 0
    position = 0
    length = len(content)
    while position < length:
        newline = content.find('\n', position)
        if newline == -1:
            newline = length
        line_number += 1
        line = content[position:newline].rstrip('\r')
        position = newline + 1
        if line.strip():
            yield line_number, line


class BaseFixedWidthParser(ABC):
    """Common bookkeeping for parsers of fixed-width record files."""

    def __init__(self) -> None:
        self.issues: list[ParseIssue] = []
        self.error_counts: Counter[str] = Counter()

    def reset(self) -> None:
        self.issues = []
        self.error_counts = Counter()

    def report(self, line_number: int, code: str, message: str) -> None:
        self.issues.append(ParseIssue(line_number, code, message))
        self.error_counts[code] += 1
        logger.debug('line %d: %s - %s', line_number, code, message)

    @staticmethod
    def read_fields(line: str, layout: Layout) -> dict[str, str]:
        return {name: extract_field(line, span) for name, span in layout.items()}

    @abstractmethod
    def parse(self, content: str):  # pragma: no cover
        raise NotImplementedError
