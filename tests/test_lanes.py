"""Unit tests for overlap-free lane assignment."""

from datetime import date, time

import pytest

from helpers import make_record
from ssimschedule.parsing.ssim import parse
from ssimschedule.processing.expander import expand
from ssimschedule.processing.lanes import assign_lanes


def _overlaps(a, b) -> bool:
    return a.departure_instant < b.arrival_instant and b.departure_instant < a.arrival_instant


class TestAssignLanes:
    """Tests for assign_lanes."""

    def test_sequential_flights_share_lane(self):
        records = [
            make_record("0001", departure_time=time(6, 0), arrival_time=time(8, 0)),
            make_record("0002", departure_time=time(8, 0), arrival_time=time(10, 0)),
        ]
        lanes = assign_lanes(expand(records, date(2025, 1, 10), date(2025, 1, 10)))
        assert len(lanes) == 1
        assert lanes[0].lane_id == "320-1"
        assert [o.full_flight_number for o in lanes[0].occurrences] == ["SU0001", "SU0002"]

    def test_overlapping_flights_split(self):
        records = [
            make_record("0001", departure_time=time(6, 0), arrival_time=time(9, 0)),
            make_record("0002", departure_time=time(7, 0), arrival_time=time(8, 0)),
            make_record("0003", departure_time=time(9, 30), arrival_time=time(11, 0)),
        ]
        lanes = assign_lanes(expand(records, date(2025, 1, 10), date(2025, 1, 10)))
        assert [lane.lane_id for lane in lanes] == ["320-1", "320-2"]
        assert [o.full_flight_number for o in lanes[0].occurrences] == ["SU0001", "SU0003"]
        assert [o.full_flight_number for o in lanes[1].occurrences] == ["SU0002"]

    def test_grouped_by_aircraft_type(self):
        records = [
            make_record("0001", aircraft_type="321"),
            make_record("0002", aircraft_type="320"),
        ]
        lanes = assign_lanes(expand(records, date(2025, 1, 10), date(2025, 1, 10)))
        assert [lane.group for lane in lanes] == ["320", "321"]

    def test_missing_type_goes_to_unknown(self):
        lanes = assign_lanes(expand([make_record(aircraft_type="")], date(2025, 1, 10), date(2025, 1, 10)))
        assert lanes[0].lane_id == "Unknown-1"

    def test_no_overlap_within_lane(self, january_file):
        records = parse(january_file).records + [
            make_record(f"{n:04d}", departure_time=time(n % 24, 0), arrival_time=time((n * 7) % 24, 15))
            for n in range(1, 30)
        ]
        occurrences = expand(records, date(2025, 1, 1), date(2025, 1, 14))
        lanes = assign_lanes(occurrences)
        assert sum(len(lane.occurrences) for lane in lanes) == len(occurrences)
        for lane in lanes:
            for i, first in enumerate(lane.occurrences):
                for second in lane.occurrences[i + 1:]:
                    assert not _overlaps(first, second)

    def test_group_by_aircraft_id(self, leg_line):
        records = parse(leg_line()).records
        lanes = assign_lanes(expand(records, date(2025, 1, 10), date(2025, 1, 10)), group_by="aircraft_id")
        assert lanes[0].group == records[0].aircraft_id

    def test_unknown_grouping_raises(self):
        with pytest.raises(ValueError):
            assign_lanes([], group_by="tail")

    def test_empty_input(self):
        assert assign_lanes([]) == []
