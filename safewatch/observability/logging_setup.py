from __future__ import annotations
import logging
import sys
from loguru import logger

# ---- stdlib logging -> loguru ----
class InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).log(level, record.getMessage())

def _hook_stdlib_logging() -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for noisy in ("uvicorn", "asyncio", "aiohttp", "aiosqlite"):
        l = logging.getLogger(noisy)
        l.handlers = [InterceptHandler()]
        l.propagate = False

# ---- console format (extra fields rendered at the end) ----
DEV_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level:<7}</level> | "
    "<cyan>{extra[name]}</cyan> | "
    "<cyan>{file}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level> {extra}"
)

def setup_logging(log_level: str = "INFO", *, colorize: bool = True) -> None:
    """
    Initialize loguru for console use.
    - writes to stderr so stdout stays reserved for JSON reports
    - absorbs stdlib logging
    """
    logger.remove()
    logger.configure(extra={"name": "safewatch"})
    logger.add(
        sink=sys.stderr,
        format=DEV_FORMAT,
        colorize=colorize,
        backtrace=False,
        diagnose=False,
        level=log_level.upper(),
        enqueue=False,
    )
    _hook_stdlib_logging()

def get_logger(name: str = "safewatch", **ctx):
    """Return a logger with optional bound context."""
    return logger.bind(name=name, **ctx)

def with_context(**ctx):
    """Context manager that temporarily binds context."""
    return logger.contextualize(**ctx)
