"""Fixed-size batching of id lists."""

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")

BATCH_CHUNK_SIZE = 100


def chunk_list(items: Sequence[T], size: int = BATCH_CHUNK_SIZE) -> list[list[T]]:
    """Split items into consecutive slices of at most ``size`` elements.

    Order is preserved and concatenating the slices gives back the input.
    """
    if size <= 0:
        raise ValueError("chunk size must be positive")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]
