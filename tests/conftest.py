"""Shared fixtures."""

import pytest

from helpers import build_leg_line


@pytest.fixture
def leg_line():
    """Return the SSIM type 3 line builder."""
    return build_leg_line


@pytest.fixture
def january_file(leg_line):
    """Three legs whose periods together cover 01JAN25 - 31JAN25."""
    lines = [
        "1AIRLINE STANDARD SCHEDULE DATA SET",
        "2LSU" + " " * 6 + "W24 01JAN2531JAN2520DEC24",
        leg_line(flight_number="0060", period_start="01JAN25", period_end="15JAN25"),
        leg_line(flight_number="0061", period_start="10JAN25", period_end="31JAN25",
                 departure="LED", arrival="SVO", departure_time="0800", arrival_time="0930"),
        leg_line(flight_number="0100", period_start="05JAN25", period_end="20JAN25",
                 days="1 3 5  ", aircraft="321"),
    ]
    return "\n".join(lines) + "\n"
