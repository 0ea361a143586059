"""
AI context logger.

Provides logging interface for the AI context with automatic [ai] prefix.
All AI modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path

from loguru import logger

from scribe.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[ai]"


def setup_ai_logger(log_dir: Path, operation: str = "ai") -> Path:
    """
    Setup logger for the AI context.

    Args:
        log_dir: Directory for this session's log file
        operation: Operation name recorded in provenance (e.g. "review")

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="ai",
        log_dir=log_dir,
        extra_provenance={"Operation": operation},
    )


# Wrapper functions with automatic [ai] prefix


def _log_info(message: str) -> None:
    """Log info message with [ai] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [ai] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [ai] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [ai] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [ai] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level AI logging helpers


def log_generation_start(task: str, provider_name: str) -> None:
    """Log start of a generation call."""
    _log_debug(f"Generating {task} with {provider_name}")


def log_generation_result(task: str, elapsed_time: float, success: bool, detail: str = "") -> None:
    """
    Log the outcome of one AI operation.

    Args:
        task: Operation name (e.g. "batch_improve")
        elapsed_time: Seconds spent waiting on the generator
        success: Whether a usable result came back
        detail: Extra context (error message, item counts)
    """
    if success:
        _log_success(f"{task} succeeded ({elapsed_time:.2f}s)")
        if detail:
            _log_debug(f"  {detail}")
    else:
        _log_warning(f"{task} produced no result ({elapsed_time:.2f}s)")
        if detail:
            _log_warning(f"  {detail}")
