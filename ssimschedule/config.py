"""Configuration utilities.

Central place for environment driven settings (parser switches, display window,
export path). Only the pipeline reads them, parse() and expand() take explicit
arguments.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .parsing.ssim import ParserOptions

# Load .env once on module import
load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {'1', 'true', 'yes', 'on'}


@dataclass(slots=True)
class Settings:
    strict_mode: bool = _env_flag("SSIM_STRICT_MODE", False)
    auto_fix: bool = _env_flag("SSIM_AUTO_FIX", True)
    preserve_raw: bool = _env_flag("SSIM_PRESERVE_RAW", False)
    window_days: int = int(os.getenv("WINDOW_DAYS", "7"))
    lane_group_by: str = os.getenv("LANE_GROUP_BY", "aircraft_type")
    output_json: Path = Path(os.getenv("OUTPUT_JSON", "schedule.json"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    def parser_options(self) -> ParserOptions:
        return ParserOptions(
            strict_mode=self.strict_mode,
            auto_fix=self.auto_fix,
            preserve_raw=self.preserve_raw,
        )


settings = Settings()
