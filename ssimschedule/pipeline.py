"""High-level orchestration: SSIM files -> flight legs -> dated occurrences -> lanes -> JSON export.

Usage patterns:

1. One-off export for the coming week:
   run_pipeline(["schedule.ssim"])

2. Explicit window, strict validation:
   run_pipeline(["a.ssim", "b.ssim"], date(2025, 1, 1), date(2025, 1, 31),
                options=ParserOptions(strict_mode=True))
"""
import argparse
import json
import logging
import time
from dataclasses import asdict, dataclass, field
from datetime import date, timedelta
from pathlib import Path
from typing import Sequence

import schedule
from tqdm import tqdm

from ssimschedule.config import settings
from ssimschedule.logging_config import setup_logging
from ssimschedule.models import FlightLegRecord, Lane, ParseStats, ScheduledOccurrence
from ssimschedule.parsing.ssim import ParserOptions, SSIMParser
from ssimschedule.processing.expander import expand
from ssimschedule.processing.lanes import GroupBy, assign_lanes
from ssimschedule.storage import lane_to_dict, occurrence_to_dict, record_to_dict

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PipelineReport:
    window_start: date
    window_end: date
    records: list[FlightLegRecord] = field(default_factory=list)
    occurrences: list[ScheduledOccurrence] = field(default_factory=list)
    lanes: list[Lane] = field(default_factory=list)
    stats: ParseStats = field(default_factory=ParseStats)
    output: Path | None = None

    def to_dict(self) -> dict:
        return {
            'window': {'start': self.window_start.isoformat(), 'end': self.window_end.isoformat()},
            'stats': asdict(self.stats),
            'records': [record_to_dict(r) for r in self.records],
            'occurrences': [occurrence_to_dict(o) for o in self.occurrences],
            'lanes': [lane_to_dict(lane) for lane in self.lanes],
        }


def _merge_stats(total: ParseStats, part: ParseStats) -> None:
    total.total_lines += part.total_lines
    total.valid_count += part.valid_count
    total.fixed_count += part.fixed_count
    total.invalid_count += part.invalid_count
    for code, count in part.errors.items():
        total.errors[code] = total.errors.get(code, 0) + count


def resolve_window(window_start: date | None, window_end: date | None,
                   window_days: int, today: date | None = None) -> tuple[date, date]:
    """Fill in a missing window end from window_days and a missing start from today.

    Raises ValueError when the resulting window is inverted, e.g. a fixed end
    that today has already passed.
    """
    start = window_start or today or date.today()
    end = window_end or start + timedelta(days=max(window_days, 1) - 1)
    if start > end:
        raise ValueError(f'Window start {start} is after window end {end}')
    return start, end


def run_pipeline(
        paths: Sequence[str | Path],
        window_start: date | None = None,
        window_end: date | None = None,
        options: ParserOptions | None = None,
        group_by: GroupBy | None = None,
        output: Path | None = None,
        window_days: int | None = None,
        today: date | None = None,
        write: bool = True,
) -> PipelineReport:
    start, end = resolve_window(window_start, window_end, window_days or settings.window_days, today)
    parser = SSIMParser(options or settings.parser_options())
    report = PipelineReport(window_start=start, window_end=end)

    for path in tqdm([Path(p) for p in paths], desc='Parsing SSIM files', leave=False):
        logger.info('Parsing %s', path)
        result = parser.parse(path.read_text(encoding='utf-8'), today=today)
        report.records.extend(result.records)
        _merge_stats(report.stats, result.stats)

    report.occurrences = expand(report.records, start, end)
    report.lanes = assign_lanes(report.occurrences, group_by or settings.lane_group_by)
    logger.info('%d flights in %d lanes for %s - %s', len(report.occurrences), len(report.lanes), start, end)

    if write:
        report.output = output or settings.output_json
        report.output.write_text(json.dumps(report.to_dict(), indent=2, ensure_ascii=False), encoding='utf-8')
        logger.info('Output written to %s', report.output)
    return report


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Expand SSIM schedules into dated flights")
    p.add_argument("paths", nargs="+", help="SSIM files to parse")
    p.add_argument("--start", type=date.fromisoformat, help="Window start YYYY-MM-DD (default: today)")
    p.add_argument("--end", type=date.fromisoformat, help="Window end YYYY-MM-DD (default: start + days - 1)")
    p.add_argument("--days", type=int, default=settings.window_days, help="Window length when --end is not given")
    # Parser switches
    p.add_argument("--strict", action="store_true", default=settings.strict_mode,
                   help="Reject short lines and malformed designators")
    p.add_argument("--no-auto-fix", dest="auto_fix", action="store_false", default=settings.auto_fix,
                   help="Drop short lines instead of padding them")
    p.add_argument("--preserve-raw", action="store_true", default=settings.preserve_raw)
    # Output
    p.add_argument("--group-by", choices=["aircraft_type", "aircraft_id"], default=settings.lane_group_by)
    p.add_argument("--output", type=Path, default=settings.output_json)
    p.add_argument("--log-level", default=settings.log_level)
    p.add_argument(
        "--schedule-at",
        metavar="HH:MM",
        default=None,
        help="Re-run every day at the given time with a --days window starting that day. "
             "Cannot be combined with --start or --end. "
             "Without this flag the pipeline runs once and exits.",
    )
    return p


def main_cli(argv: Sequence[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.schedule_at and (args.start or args.end):
        parser.error("--schedule-at uses a rolling window, use --days instead of --start/--end")

    setup_logging(args.log_level)

    options = ParserOptions(strict_mode=args.strict, auto_fix=args.auto_fix, preserve_raw=args.preserve_raw)
    pipeline_kwargs = dict(
        paths=args.paths,
        options=options,
        group_by=args.group_by,
        output=args.output,
        window_days=args.days,
    )

    def _run() -> None:
        try:
            run_pipeline(**pipeline_kwargs)
        except Exception:  # noqa: BLE001
            logger.exception("Pipeline failed")

    if args.schedule_at:
        logger.info('Scheduler started - pipeline will run every day at %s', args.schedule_at)
        _run()
        schedule.every().day.at(args.schedule_at).do(_run)
        while True:
            try:
                schedule.run_pending()
            except Exception:  # noqa: BLE001
                logger.exception("Scheduler error:")
                time.sleep(60 * 60)
            time.sleep(1)
    else:
        try:
            run_pipeline(window_start=args.start, window_end=args.end, **pipeline_kwargs)
        except Exception:  # noqa: BLE001
            logger.exception("Pipeline failed")
            return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main_cli())
