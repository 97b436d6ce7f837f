from __future__ import annotations
import sys
from typing import Optional
from loguru import logger
from .paths import logs_dir
from .settings import AppSettings, load_settings

CONSOLE_FORMAT = "{time:HH:mm:ss} | {level:<8} | {extra[tool_id]} | {message}"

def configure_logging(settings: Optional[AppSettings] = None) -> None:
    s = settings or load_settings()
    logger.remove()
    logger.configure(extra={"tool_id": "-", "input_hash": ""})
    logger.add(sys.stderr, level=s.log_level, format=CONSOLE_FORMAT)
    if s.log_to_file:
        log_path = logs_dir(s.data_dir) / "toolbox.log"
        logger.add(str(log_path), level="DEBUG", rotation="5 MB", retention=10, enqueue=True, backtrace=False, diagnose=False)
