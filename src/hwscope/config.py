"""Runtime settings for hwscope, read from environment variables."""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from hwscope.memory import PROC_MEMINFO

logger = logging.getLogger(__name__)

DEFAULT_EDID_GLOB = "/sys/class/drm/*/edid"
DEFAULT_POLL_RATE = 2.0
MIN_POLL_RATE = 0.1


@dataclass(slots=True, frozen=True)
class Settings:
    """hwscope settings."""

    meminfo_path: str = PROC_MEMINFO
    edid_glob: str = DEFAULT_EDID_GLOB
    poll_rate: float = DEFAULT_POLL_RATE
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """
        Build settings from HWSCOPE_* environment variables.

        Unset variables keep their defaults. An unparsable poll rate is
        logged and ignored, and the poll rate never drops below 0.1s.
        """
        env = os.environ if environ is None else environ

        poll_rate = DEFAULT_POLL_RATE
        raw_rate = env.get("HWSCOPE_POLL_RATE")
        if raw_rate:
            try:
                poll_rate = max(MIN_POLL_RATE, float(raw_rate))
            except ValueError:
                logger.warning("Ignoring invalid HWSCOPE_POLL_RATE=%r", raw_rate)

        log_level = env.get("HWSCOPE_LOG_LEVEL", "WARNING").upper()
        if not isinstance(logging.getLevelName(log_level), int):
            logger.warning("Ignoring invalid HWSCOPE_LOG_LEVEL=%r", log_level)
            log_level = "WARNING"

        return cls(
            meminfo_path=env.get("HWSCOPE_MEMINFO_PATH") or PROC_MEMINFO,
            edid_glob=env.get("HWSCOPE_EDID_GLOB") or DEFAULT_EDID_GLOB,
            poll_rate=poll_rate,
            log_level=log_level,
        )
