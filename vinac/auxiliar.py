"""Helpers for moving member data inside an archive."""

from __future__ import annotations

import os
from typing import BinaryIO

from vinac.directory import Directory

__all__ = ["max_buffer_size", "move_data", "shift_offsets", "unique_name"]


def max_buffer_size(directory: Directory, current_size: int) -> int:
    """Largest of ``current_size`` and every member's stored size."""
    return max([current_size, *(member.disk_size for member in directory)])


def shift_offsets(directory: Directory, start: int, stop: int, delta: int) -> None:
    """Add ``delta`` to the offsets of members ``start`` up to ``stop``."""
    for member in directory.members[start:stop]:
        member.offset += delta


def unique_name(original: str) -> str:
    """Return ``original``, or ``base(n)ext`` with the first n that names no file."""
    base, dot, extension = original.rpartition(".")
    if not dot:
        base, extension = original, ""
    else:
        extension = dot + extension

    candidate = original
    counter = 1
    while os.path.exists(candidate):
        candidate = f"{base}({counter}){extension}"
        counter += 1
    return candidate


def move_data(
    archive: BinaryIO, origin: int, delta: int, size: int, buffer_size: int
) -> None:
    """Move ``size`` bytes starting at ``origin`` by ``delta`` bytes.

    The copy goes in blocks of at most ``buffer_size`` bytes and in the
    direction that never overwrites bytes not yet copied.
    """
    if size == 0 or delta == 0:
        return
    if buffer_size <= 0:
        raise ValueError("buffer size must be positive")

    remaining = size
    if delta > 0:
        read_at = origin + size
        while remaining > 0:
            block = min(remaining, buffer_size)
            read_at -= block
            archive.seek(read_at)
            chunk = archive.read(block)
            archive.seek(read_at + delta)
            archive.write(chunk)
            remaining -= block
    else:
        read_at = origin
        while remaining > 0:
            block = min(remaining, buffer_size)
            archive.seek(read_at)
            chunk = archive.read(block)
            archive.seek(read_at + delta)
            archive.write(chunk)
            read_at += block
            remaining -= block