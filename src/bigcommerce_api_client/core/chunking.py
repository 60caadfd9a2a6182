"""Splitting filter values into URL-length-bounded chunks."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from .urls import MAX_URL_LENGTH


def chunk_str_length(
    items: Sequence[str],
    *,
    max_length: int = MAX_URL_LENGTH,
    chunk_length: int = 250,
    offset: int = 0,
    separator_size: int = 1,
    measure: Callable[[str], int] = len,
) -> list[list[str]]:
    """Group items so each chunk's ``offset + sum(measure(item) + separator)`` fits.

    A chunk also never holds more than ``chunk_length`` items. An item that
    cannot fit even in an empty chunk raises ValueError.
    """

    if chunk_length <= 0:
        raise ValueError("chunk_length must be > 0")

    chunks: list[list[str]] = []
    current: list[str] = []
    current_length = offset

    for item in items:
        item_length = measure(item) + separator_size
        if offset + item_length > max_length:
            raise ValueError(
                f"value of length {item_length} cannot fit in max length {max_length} "
                f"with offset {offset}: {item[:50]}"
            )
        if current and (
            current_length + item_length > max_length or len(current) == chunk_length
        ):
            chunks.append(current)
            current = []
            current_length = offset
        current.append(item)
        current_length += item_length

    if current:
        chunks.append(current)
    return chunks


__all__ = [
    "chunk_str_length",
]
