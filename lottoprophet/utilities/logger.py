# lottoprophet/utilities/logger.py
from __future__ import annotations
import csv
import logging
from pathlib import Path
from typing import Dict, List, Union

PACKAGE_LOGGER = "lottoprophet"

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """Attach a stderr handler to the package logger (CLI use)."""
    root = logging.getLogger(PACKAGE_LOGGER)
    if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, logging.NullHandler)
               for h in root.handlers):
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        root.addHandler(h)
    root.setLevel(level)


def ensure_csv(path: Union[str, Path], headers: List[str]) -> None:
    """Create the file with a header row when it is missing or empty."""
    p = Path(path)
    if not p.exists() or p.stat().st_size == 0:
        p.parent.mkdir(parents=True, exist_ok=True)
        with p.open("w", newline="", encoding="utf-8") as f:
            csv.writer(f).writerow(headers)


def append_row(path: Union[str, Path], row: Dict[str, Union[str, int, float]]) -> None:
    p = Path(path)
    # header order follows the row keys when the file is new or empty
    ensure_csv(p, list(row.keys()))
    with p.open("a", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=list(row.keys()))
        w.writerow(row)
