import logging
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

LOGGER_NAME = "vtc"
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

def setup_logging(log_file: Optional[Path] = None, debug: bool = False) -> logging.Logger:
    """
    Setup logging configuration for VTC.

    Always logs to the console; additionally appends to ``log_file`` when given
    (the batch runner passes its timestamped log here).
    Returns configured logger instance.

    Args:
        log_file: Optional path to a log file; parent directories are created
        debug: If True, enable DEBUG level logging (ffmpeg command lines etc.)
    """
    handlers: list = [logging.StreamHandler()]
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True  # Override any existing configuration
    )

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    if log_file is not None:
        logger.debug(f"Logging initialized: {log_file} (debug={'ON' if debug else 'OFF'})")
    return logger

def batch_log_path(log_dir: Path, output_tag: str, now: Optional[datetime] = None) -> Path:
    """One log per batch run: ``<log_dir>/<YYYYmmdd-HHMMSS>.<tag>.log``."""
    stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return Path(log_dir) / f"{stamp}.{output_tag}.log"

@contextmanager
def job_log(log_file: Path) -> Iterator[logging.Handler]:
    """Mirrors everything logged under ``vtc`` into a per-file log while active.

    The file is opened lazily, so nothing is written to disk unless a record
    is emitted.
    """
    handler = logging.FileHandler(log_file, delay=True)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger = logging.getLogger(LOGGER_NAME)
    logger.addHandler(handler)
    try:
        yield handler
    finally:
        logger.removeHandler(handler)
        handler.close()
