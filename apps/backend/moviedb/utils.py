"""
Shared helpers for MovieDB.

Component loggers for the core modules, and the terminal output used by
the admin CLI.
"""

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Iterable, Optional, Sequence

from tqdm import tqdm

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
RULE_WIDTH = 60


def daily_log_handler(log_dir: Path, name: str, fmt: str = LOG_FORMAT) -> logging.FileHandler:
    """File handler writing to <log_dir>/<name>_YYYYMMDD.log."""
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_dir / f"{name}_{date.today():%Y%m%d}.log")
    handler.setFormatter(logging.Formatter(fmt, datefmt=LOG_DATE_FORMAT))
    return handler


def setup_logger(name: str, log_dir: Optional[Path] = None, level: int = logging.INFO) -> logging.Logger:
    """
    Get the logger of a core component ("database", "identity", "approval").

    Records go to the component's daily file under log_dir (./logs when
    not given). Warnings are echoed to stdout for CLI users.
    """
    logger = logging.getLogger(f"moviedb.{name}")
    if logger.handlers:
        return logger

    logger.setLevel(level)
    logger.addHandler(daily_log_handler(log_dir or Path.cwd() / "logs", name))

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.WARNING)
    console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(console)
    return logger


# ============ CLI OUTPUT ============

def import_progress(movies: Sequence[dict]) -> Iterable[dict]:
    """Progress bar over the movies of an import file."""
    return tqdm(movies, total=len(movies), desc="Importing", unit="movies", ncols=100)


def format_count(n: int) -> str:
    """1234567 -> '1,234,567'."""
    return f"{n:,}"


def clip(text: Optional[str], width: int) -> str:
    """Fit a title into a fixed-width column."""
    text = text or ""
    return text if len(text) <= width else text[: width - 3] + "..."


def banner(title: str) -> None:
    rule = "=" * RULE_WIDTH
    print(f"{rule}\n{title.center(RULE_WIDTH)}\n{rule}")


def print_table(rows: dict, title: str) -> None:
    """Print label/value rows under a title."""
    print(f"\n{title}\n{'-' * 40}")
    width = max((len(str(label)) for label in rows), default=0) + 2
    for label, value in rows.items():
        print(f"  {label:<{width}}: {value}")
    print()


def ask_yes_no(question: str) -> bool:
    """Anything but y/yes is a no."""
    return input(f"{question} [y/N]: ").strip().lower() in ("y", "yes")
