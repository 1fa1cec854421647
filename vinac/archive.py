"""Archive operations: insert, remove, extract, move and list members.

Each function works on an archive opened in binary read/write mode. A
member is named by the path of the file it was taken from, and that
same path is where it is extracted to.
"""

from __future__ import annotations

import os
import sys
import time
from typing import BinaryIO, TextIO

from vinac.auxiliar import max_buffer_size, move_data, shift_offsets, unique_name
from vinac.directory import MEMBER_SIZE, ArchiveError, Directory
from vinac.lz import compress, uncompress

__all__ = [
    "extract_member",
    "format_members",
    "insert_member",
    "insert_member_compressed",
    "list_members",
    "move_member",
    "remove_member",
]

_RULE = "-" * 104


def _file_size(archive: BinaryIO) -> int:
    return archive.seek(0, os.SEEK_END)


def _open_directory(archive: BinaryIO) -> tuple[Directory, int]:
    """Read the directory, writing an empty one first if the archive is empty."""
    size = _file_size(archive)
    if size == 0:
        Directory().write(archive)
        size = _file_size(archive)
    return Directory.read(archive), size


def _require(directory: Directory, name: str) -> int:
    index = directory.find(name)
    if index is None:
        raise ArchiveError(f"no member named {name!r}")
    return index


def format_members(directory: Directory) -> str:
    """Render the metadata of every member as a listing."""
    if len(directory) == 0:
        raise ArchiveError("archive is empty")
    lines = ["=== Conteúdo do Archive ===", ""]
    for member in directory:
        lines += [
            _RULE,
            f"Membro #{member.order}",
            f"  Nome:                {member.name}",
            f"  UID:                 {member.uid}",
            f"  Tamanho Original:    {member.original_size} bytes",
            f"  Tamanho em Disco:    {member.disk_size} bytes",
            f"  Data de Modificação: {time.ctime(member.mtime)}",
            f"  Offset:              {member.offset}",
            "",
        ]
    lines.append(_RULE)
    return "\n".join(lines) + "\n"


def list_members(directory: Directory, stream: TextIO | None = None) -> None:
    """Write the listing of ``directory`` to ``stream`` (standard output by default)."""
    (stream if stream is not None else sys.stdout).write(format_members(directory))


def _put(
    archive: BinaryIO, name: str, original_size: int, payload: bytes, compressed: bool
) -> None:
    """Store ``payload`` as member ``name``, replacing a member of that name."""
    directory, archive_size = _open_directory(archive)
    stored_size = len(payload)
    buffer_size = max_buffer_size(directory, original_size)
    index = directory.find(name) if len(directory) else None

    if index is None:
        if len(directory) == 0:
            offset = directory.end_offset + MEMBER_SIZE
        else:
            origin = directory.end_offset
            move_data(archive, origin, MEMBER_SIZE, archive_size - origin, buffer_size)
            shift_offsets(directory, 0, len(directory), MEMBER_SIZE)
            offset = archive_size + MEMBER_SIZE
        directory.insert(name, original_size, stored_size, offset, compressed)
        new_size = archive_size + MEMBER_SIZE + stored_size
    else:
        old = directory[index]
        delta = stored_size - old.disk_size
        origin = old.offset + old.disk_size
        if origin != archive_size and delta != 0:
            move_data(archive, origin, delta, archive_size - origin, buffer_size)
            shift_offsets(directory, index + 1, len(directory), delta)
        offset = old.offset
        info = os.stat(name)
        directory.set_member(
            index,
            name,
            info.st_uid,
            original_size,
            stored_size,
            int(info.st_mtime),
            old.order,
            offset,
            compressed,
        )
        new_size = archive_size + delta

    directory.write(archive)
    archive.seek(offset)
    archive.write(payload)
    archive.truncate(new_size)


def _read_file(name: str) -> bytes:
    with open(name, "rb") as source:
        return source.read()


def insert_member(archive: BinaryIO, name: str) -> None:
    """Store file ``name`` uncompressed, replacing a member of the same name."""
    data = _read_file(name)
    _put(archive, name, len(data), data, False)


def insert_member_compressed(archive: BinaryIO, name: str) -> None:
    """Store file ``name`` compressed, unless compression does not make it smaller."""
    data = _read_file(name)
    packed = compress(data)
    if len(packed) < len(data):
        _put(archive, name, len(data), packed, True)
    else:
        _put(archive, name, len(data), data, False)


def remove_member(archive: BinaryIO, name: str) -> None:
    """Delete member ``name`` and close the gap it leaves."""
    directory = Directory.read(archive)
    index = _require(directory, name)

    member = directory[index]
    removed = member.disk_size
    origin = member.offset + removed
    total = _file_size(archive)
    buffer_size = max_buffer_size(directory, removed)

    if total - origin > 0:
        move_data(archive, origin, -removed, total - origin, buffer_size)
        shift_offsets(directory, index + 1, len(directory), -removed)

    directory.remove(name)
    old_end = directory.end_offset
    move_data(archive, old_end, -MEMBER_SIZE, total - old_end, buffer_size)
    shift_offsets(directory, 0, len(directory), -MEMBER_SIZE)
    directory.write(archive)

    if len(directory) == 0:
        archive.truncate(directory.end_offset)
    else:
        archive.truncate(total - removed - MEMBER_SIZE)


def extract_member(archive: BinaryIO, name: str) -> str:
    """Write member ``name`` to disk and return the path written.

    If a file of that name already exists, the first free ``base(n)ext``
    name is used instead.
    """
    directory = Directory.read(archive)
    member = directory[_require(directory, name)]

    archive.seek(member.offset)
    if member.compressed:
        data = uncompress(archive.read(member.disk_size))
    else:
        data = archive.read(member.original_size)

    path = unique_name(name)
    with open(path, "wb") as target:
        target.write(data)
    return path


def move_member(archive: BinaryIO, name: str, target: str | None = None) -> None:
    """Place member ``name`` right after member ``target``, or first if no target."""
    directory = Directory.read(archive)
    index = _require(directory, name)

    to_front = target is None
    target_index = 0 if to_front else _require(directory, target)

    if index == target_index or (not to_front and index == target_index + 1):
        return

    file_size = _file_size(archive)
    member = directory[index]
    member_size = member.disk_size
    origin = member.offset + member_size
    buffer_size = max_buffer_size(directory, member_size)

    archive.seek(member.offset)
    data = archive.read(member_size)

    move_data(archive, origin, -member_size, file_size - origin, buffer_size)
    shift_offsets(directory, index + 1, len(directory), -member_size)

    if to_front:
        start = directory.end_offset
        move_data(archive, start, member_size, file_size - start, buffer_size)
        shift_offsets(directory, 0, len(directory), member_size)
        archive.seek(start)
        archive.write(data)
        directory[index].offset = start
        directory.move(index, -1)
    else:
        anchor = directory[target_index]
        anchor_end = anchor.offset + anchor.disk_size
        move_data(archive, anchor_end, member_size, file_size - anchor_end, buffer_size)
        shift_offsets(directory, target_index + 1, len(directory), member_size)
        anchor_end = anchor.offset + anchor.disk_size
        archive.seek(anchor_end)
        archive.write(data)
        directory[index].offset = anchor_end
        directory.move(index, target_index)

    directory.write(archive)
    archive.truncate(file_size)