from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler

from ramp_ctf.core.config import AppConfig


def configure_logging(config: AppConfig) -> None:
    root = logging.getLogger()
    root.setLevel(config.logging_level)

    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(fmt)

    root.handlers.clear()
    root.addHandler(console)

    if config.log_path is not None:
        config.log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            config.log_path,
            maxBytes=2_000_000,
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)
