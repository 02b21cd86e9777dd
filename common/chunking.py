"""Chunking helpers for splitting messages into DATA segments."""

from typing import Iterable, Tuple


def iter_chunks(data: bytes, chunk_size: int) -> Iterable[Tuple[int, bytes]]:
    """
    Yield ``(offset, chunk)`` pairs of at most chunk_size bytes.

    Empty data yields nothing; a length that is an exact multiple of
    chunk_size yields no trailing empty chunk.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    for offset in range(0, len(data), chunk_size):
        yield offset, data[offset:offset + chunk_size]
