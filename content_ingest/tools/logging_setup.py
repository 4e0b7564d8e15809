from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from content_ingest.config.settings import Settings


def run_log_path(settings: Settings, now: datetime | None = None) -> Path:
    now = now or datetime.now(timezone.utc)
    return Path(settings.log_dir) / f"ingest-{now.date().isoformat()}.log"


def setup_logging(settings: Settings) -> Path:
    log_path = run_log_path(settings)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(message)s",
        handlers=[
            logging.FileHandler(log_path, mode="a", encoding="utf-8"),
            logging.StreamHandler(),
        ],
    )
    return log_path
