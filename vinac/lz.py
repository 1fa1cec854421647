"""LZ77 block coder.

A repeated string is stored as a reference to an earlier occurrence of
the same bytes. A reference is the marker byte followed by the match
length and offset, both as variable-length integers. The marker is the
least common byte of the input and is written as the first output byte.
A literal occurrence of the marker is written as the marker followed by
a zero byte.

The worst-case output size is ``(257/256) * len(data) + 1`` bytes.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

__all__ = ["MAX_OFFSET", "compress", "compress_fast", "uncompress"]

MAX_OFFSET = 100000
"""Largest distance back that a reference may point."""

_MASK32 = 0xFFFFFFFF
_MIN_MATCH_OFFSET = 3


def _write_varsize(value: int) -> bytes:
    """Encode ``value`` in 7-bit groups, high bit set on all but the last."""
    probe = (value >> 3) & _MASK32
    count = 5
    while count >= 2:
        if probe & 0xFE000000:
            break
        probe = (probe << 7) & _MASK32
        count -= 1
    return bytes(
        ((value >> (7 * shift)) & 0x7F) | (0x80 if shift else 0)
        for shift in range(count - 1, -1, -1)
    )


def _read_varsize(data: bytes, pos: int) -> tuple[int, int]:
    """Decode a variable-length integer at ``pos``; return it and the next position."""
    value = 0
    while True:
        try:
            byte = data[pos]
        except IndexError:
            raise ValueError("truncated length or offset in compressed data") from None
        pos += 1
        value = ((value << 7) | (byte & 0x7F)) & _MASK32
        if not byte & 0x80:
            return value, pos


def _worth_encoding(length: int, offset: int) -> bool:
    """Whether a reference is shorter than the literal bytes it replaces."""
    return (
        length >= 8
        or (length == 4 and offset <= 0x0000007F)
        or (length == 5 and offset <= 0x00003FFF)
        or (length == 6 and offset <= 0x001FFFFF)
        or (length == 7 and offset <= 0x0FFFFFFF)
    )


def _match_length(data: bytes, here: int, there: int, limit: int) -> int:
    """Length of the common run at ``here`` and ``there``, whose first two bytes agree."""
    if data[here:here + limit] == data[there:there + limit]:
        return limit
    length = 2
    while length < limit and data[here + length] == data[there + length]:
        length += 1
    return length


def _pick_marker(data: bytes) -> int:
    counts = Counter(data)
    return min(range(256), key=lambda symbol: counts.get(symbol, 0))


def _literal(symbol: int, marker: int) -> Iterable[int]:
    return (marker, 0) if symbol == marker else (symbol,)


def _encode(data: bytes, max_offset: int) -> bytes:
    size = len(data)
    if size == 0:
        return b""

    marker = _pick_marker(data)
    out = bytearray([marker])

    # Earlier positions of each byte pair, registered as they come into range.
    seen: dict[tuple[int, int], list[int]] = {}
    registered = 0

    inpos = 0
    remaining = size
    while True:
        best_len, best_off = 3, 0

        limit = inpos - _MIN_MATCH_OFFSET
        while registered <= limit and registered + 1 < size:
            pair = (data[registered], data[registered + 1])
            seen.setdefault(pair, []).append(registered)
            registered += 1

        if inpos + 1 < size:
            for there in reversed(seen.get((data[inpos], data[inpos + 1]), ())):
                offset = inpos - there
                if offset > max_offset or best_len >= remaining:
                    break
                longest = min(remaining, offset)
                if longest <= best_len:
                    continue
                if data[there + best_len] != data[inpos + best_len]:
                    continue
                length = _match_length(data, inpos, there, longest)
                if length > best_len:
                    best_len, best_off = length, offset

        if _worth_encoding(best_len, best_off):
            out.append(marker)
            out += _write_varsize(best_len)
            out += _write_varsize(best_off)
            inpos += best_len
            remaining -= best_len
        else:
            out.extend(_literal(data[inpos], marker))
            inpos += 1
            remaining -= 1

        if remaining <= 3:
            break

    for symbol in data[inpos:]:
        out.extend(_literal(symbol, marker))
    return bytes(out)


def compress(data: bytes) -> bytes:
    """Compress ``data``, searching back up to and including ``MAX_OFFSET`` bytes."""
    return _encode(bytes(data), MAX_OFFSET)


def compress_fast(data: bytes) -> bytes:
    """Compress ``data`` using a pair index, with references shorter than ``MAX_OFFSET``."""
    return _encode(bytes(data), MAX_OFFSET - 1)


def uncompress(data: bytes) -> bytes:
    """Restore the bytes that ``compress`` or ``compress_fast`` produced.

    Raises ValueError when the input is truncated or refers outside the
    data decoded so far.
    """
    data = bytes(data)
    size = len(data)
    if size == 0:
        return b""

    marker = data[0]
    out = bytearray()
    pos = 1
    while True:
        if pos >= size:
            raise ValueError("compressed data ends after its marker byte")
        symbol = data[pos]
        pos += 1
        if symbol != marker:
            out.append(symbol)
        elif pos >= size:
            raise ValueError("compressed data ends inside a reference")
        elif data[pos] == 0:
            out.append(marker)
            pos += 1
        else:
            length, pos = _read_varsize(data, pos)
            offset, pos = _read_varsize(data, pos)
            if offset == 0 or offset > len(out):
                raise ValueError(f"reference offset {offset} is out of range")
            pattern = out[-offset:]
            repeats = -(-length // offset)
            out += (pattern * repeats)[:length]
        if pos >= size:
            break
    return bytes(out)