from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Generator, TypeAlias, TypeVar

from loguru import logger
from tqdm import tqdm

JSONValue: TypeAlias = (
    str | int | float | bool | None | dict[str, "JSONValue"] | list["JSONValue"]
)

T = TypeVar("T")

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def chunked(items: Sequence[T], size: int) -> Generator[Sequence[T], None, None]:
    """
    Split a sequence into contiguous slices of at most ``size`` items.

    Args:
        items (Sequence[T]): The sequence to split
        size (int): Maximum slice length, must be >= 1

    Returns:
        Generator[Sequence[T], None, None]: Slices in order; the last may be shorter
    """
    if size < 1:
        raise ValueError(f"Chunk size must be at least 1, got {size}")
    for start in range(0, len(items), size):
        yield items[start : start + size]


def is_valid_date(value: str) -> bool:
    """Check that ``value`` is written as YYYY-MM-DD."""
    return bool(_DATE_PATTERN.match(value or ""))


def setup_logger(logging_level: int = 20) -> None:
    """
    Configure loguru with a clean format.

    Output goes through tqdm.write so log lines do not break progress bars.

    Args:
        logging_level (int): Loguru logging level (20=INFO, 10=DEBUG)
    """
    logger.remove()

    # Show module info only at DEBUG level (10 or lower)
    if logging_level <= 10:
        log_format = (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        )
    else:
        log_format = (
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<level>{message}</level>"
        )

    logger.add(
        lambda msg: tqdm.write(msg, end=""),
        format=log_format,
        colorize=True,
        level=logging_level,
    )
