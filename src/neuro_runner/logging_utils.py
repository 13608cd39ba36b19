"""Logging helpers: root logger setup and the optional per-request JSONL log."""

from __future__ import annotations

import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Dict, Optional

__all__ = ["configure_logging", "JsonlLogger"]


def configure_logging(level: str = "INFO", log_dir: Optional[Path] = None) -> Path:
    """Send runner logs to the console and ``<log_dir>/neuro_runner.log``.

    ``log_dir`` defaults to ``NEURO_RUNNER_LOG_DIR`` or ``./logs``. Calling this
    again replaces the handlers installed by the previous call.
    """

    target_directory = Path(
        log_dir or os.environ.get("NEURO_RUNNER_LOG_DIR") or "logs"
    ).expanduser()
    target_directory.mkdir(parents=True, exist_ok=True)
    log_path = target_directory / "neuro_runner.log"

    numeric_level = logging.getLevelName(str(level).upper())
    logging.basicConfig(
        level=numeric_level if isinstance(numeric_level, int) else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_path, encoding="utf-8"),
        ],
        force=True,
    )
    return log_path


class JsonlLogger:
    """Append-only request log, one JSON object per line, rotated by size."""

    def __init__(self, path: str, max_bytes: int = 25_000_000):
        self.path = path
        self.max_bytes = max_bytes
        log_dir = os.path.dirname(path)
        if log_dir:
            try:
                os.makedirs(log_dir, exist_ok=True)
            except OSError:
                # Read-only volume; log() will fail quietly as well.
                pass

    def _rotate_if_needed(self):
        try:
            if (
                os.path.exists(self.path)
                and os.path.getsize(self.path) > self.max_bytes
            ):
                ts = time.strftime("%Y%m%d-%H%M%S")
                os.rename(self.path, f"{self.path}.{ts}")
        except OSError:
            pass

    def log(self, record: Dict[str, Any]):
        self._rotate_if_needed()
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(json.dumps(record, ensure_ascii=False) + "\n")
        except (OSError, TypeError, ValueError):
            pass
