import asyncio
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, TypeVar, Union

from pydantic import BaseModel

from gigz_scraper.config import Settings, settings

T = TypeVar("T")

# --- Logger Setup ---
_loggers: Dict[str, logging.Logger] = {}


def setup_logger(
    logger_name: str,
    log_file_prefix: str,
    level: Optional[int] = None,
    app_settings: Optional[Settings] = None,
) -> logging.Logger:
    """Configures and returns a logger that outputs to console and a timestamped file."""
    if logger_name in _loggers:
        return _loggers[logger_name]

    app_settings = app_settings or settings
    if level is None:
        level = logging.getLevelName(app_settings.log_level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.propagate = False

    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s"
    )

    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(formatter)
    logger.addHandler(ch)

    if app_settings.file_outputs.enable_file_logging:
        log_dir = app_settings.file_outputs.log_output_directory
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_file_path = log_dir / f"{log_file_prefix}_{timestamp}.log"
            fh = logging.FileHandler(log_file_path)
            fh.setLevel(level)
            fh.setFormatter(formatter)
            logger.addHandler(fh)
        except OSError as e:
            logger.error(f"Failed to create file handler for logger {logger_name} at {log_dir}: {e}", exc_info=True)

    _loggers[logger_name] = logger
    logger.debug(f"Logger '{logger_name}' initialized.")
    return logger


# --- Retry ---

async def retry_async(
    operation: Callable[[], Awaitable[T]],
    retries: int,
    delay_seconds: float,
    description: str = "operation",
    logger_obj: Optional[logging.Logger] = None,
) -> T:
    """Await ``operation`` up to ``retries`` times, sleeping ``delay_seconds`` between attempts.

    The first successful result is returned. When every attempt fails the
    error from the last attempt is re-raised as is. ``retries`` below one
    still gets a single attempt. The operation must be safe to repeat.
    """
    current_logger = logger_obj or logging.getLogger(__name__)
    attempts = max(retries, 1)
    for attempt in range(1, attempts):
        try:
            return await operation()
        except Exception as e:
            current_logger.warning(f"Error on attempt {attempt}/{attempts} for {description}: {e}")
            await asyncio.sleep(delay_seconds)

    try:
        return await operation()
    except Exception as e:
        current_logger.error(f"Failed to perform {description} after {attempts} attempts: {e}")
        raise


# --- File Output Utilities ---

def save_events_to_json_file(
    events: Sequence[Union[BaseModel, Dict]],
    filepath: Union[str, Path],
    logger_obj: Optional[logging.Logger] = None,
) -> Optional[Path]:
    """Write ``events`` as a JSON array. Returns the path written, or None when there was nothing to write."""
    current_logger = logger_obj or logging.getLogger(__name__)
    if not events:
        current_logger.info("No data to save.")
        return None

    payload: List[Dict] = [
        event.model_dump(by_alias=True) if isinstance(event, BaseModel) else event
        for event in events
    ]
    path = Path(filepath)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
    current_logger.info(f"Data saved to {path} ({len(payload)} events).")
    return path
