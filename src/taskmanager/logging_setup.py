from __future__ import annotations

import logging
import sys
from typing import Union


class _ThirdPartyNoiseFilter(logging.Filter):
    """
    Keep console output readable:
    - taskmanager logs pass at the configured level
    - uvicorn access/error logs pass
    - any other third party (httpx, google_genai, ...) only WARNING+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith("taskmanager") or name.startswith("uvicorn"):
            return True
        return record.levelno >= logging.WARNING


# PUBLIC_INTERFACE
def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """
    Configure root logging with a single console handler.

    Call once, early, from the process entry point. Safe to call again:
    existing handlers are replaced rather than duplicated.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)

    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(fmt)
    ch.addFilter(_ThirdPartyNoiseFilter())
    root.addHandler(ch)

    logging.captureWarnings(True)
