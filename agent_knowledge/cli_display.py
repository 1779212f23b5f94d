import logging
import os
from datetime import datetime

LOGGER_NAME = "agent_knowledge"


def setup_logger(log_dir: str = ".agent_knowledge/logs",
                 level: int = logging.DEBUG) -> logging.Logger:
    """Attach a file handler to the package logger. All verbose output goes here."""
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"agent_{timestamp}.log")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # File handler, DEBUG and up
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(level)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(fh)

    return logger


def print_kv(title: str, rows: dict) -> None:
    """Print a small aligned key/value table."""
    print(f"\n{title}")
    print("=" * 40)
    for k, v in rows.items():
        print(f"  {k:<20} {v}")
    print()


# Package logger; handlers are attached by setup_logger() (called by the CLI)
log = logging.getLogger(LOGGER_NAME)
