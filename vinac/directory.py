"""The archive directory: member metadata stored at the start of an archive.

The directory begins at ``DIRECTORY_START`` with an 8-byte little-endian
offset of its own end, followed by one fixed-size record per member.
Member data follows the directory in member order.
"""

from __future__ import annotations

import os
import struct
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import BinaryIO

__all__ = [
    "ArchiveError",
    "DIRECTORY_START",
    "HEADER_SIZE",
    "MAX_NAME_LEN",
    "MEMBER_SIZE",
    "Directory",
    "MemberInfo",
]

MAX_NAME_LEN = 128
"""Size of the name field, including the terminating NUL byte."""

DIRECTORY_START = 0
"""Position of the directory inside the archive."""

_HEADER = struct.Struct("<Q")
_MEMBER = struct.Struct(f"<{MAX_NAME_LEN}sI4xQQqI4xQi4x")

HEADER_SIZE = _HEADER.size
"""Bytes taken by the end-of-directory offset."""

MEMBER_SIZE = _MEMBER.size
"""Bytes taken by one member record."""


class ArchiveError(Exception):
    """Raised when an archive or its directory cannot be used as asked."""


@dataclass
class MemberInfo:
    """Metadata of one archive member."""

    name: str
    uid: int
    original_size: int
    disk_size: int
    mtime: int
    order: int
    offset: int
    compressed: bool = False

    def pack(self) -> bytes:
        """Encode this record in its on-disk form."""
        raw_name = os.fsencode(self.name)[: MAX_NAME_LEN - 1]
        return _MEMBER.pack(
            raw_name,
            self.uid,
            self.original_size,
            self.disk_size,
            self.mtime,
            self.order,
            self.offset,
            int(bool(self.compressed)),
        )

    @classmethod
    def unpack(cls, raw: bytes) -> MemberInfo:
        """Decode a record written by ``pack``."""
        if len(raw) != MEMBER_SIZE:
            raise ArchiveError(
                f"member record has {len(raw)} bytes, expected {MEMBER_SIZE}"
            )
        name, uid, original, disk, mtime, order, offset, compressed = _MEMBER.unpack(raw)
        return cls(
            name=os.fsdecode(name.split(b"\0", 1)[0]),
            uid=uid,
            original_size=original,
            disk_size=disk,
            mtime=mtime,
            order=order,
            offset=offset,
            compressed=compressed == 1,
        )


@dataclass
class Directory:
    """All member records of an archive, in archive order."""

    members: list[MemberInfo] = field(default_factory=list)
    end_offset: int = DIRECTORY_START + HEADER_SIZE

    def __len__(self) -> int:
        return len(self.members)

    def __iter__(self) -> Iterator[MemberInfo]:
        return iter(self.members)

    def __getitem__(self, index: int) -> MemberInfo:
        return self.members[index]

    @classmethod
    def read(cls, archive: BinaryIO) -> Directory:
        """Read the directory from the start of ``archive``."""
        archive.seek(DIRECTORY_START)
        header = archive.read(HEADER_SIZE)
        if len(header) != HEADER_SIZE:
            raise ArchiveError("archive has no directory")
        (end_offset,) = _HEADER.unpack(header)

        body = end_offset - DIRECTORY_START - HEADER_SIZE
        members = []
        if body > 0:
            count = body // MEMBER_SIZE
            for _ in range(count):
                members.append(MemberInfo.unpack(archive.read(MEMBER_SIZE)))
        return cls(members=members, end_offset=end_offset)

    def write(self, archive: BinaryIO) -> None:
        """Write the directory to the start of ``archive``, updating ``end_offset``."""
        self.end_offset = DIRECTORY_START + HEADER_SIZE + len(self.members) * MEMBER_SIZE
        archive.seek(DIRECTORY_START)
        archive.write(_HEADER.pack(self.end_offset))
        archive.write(b"".join(member.pack() for member in self.members))

    def set_member(
        self,
        index: int,
        name: str,
        uid: int,
        original_size: int,
        disk_size: int,
        mtime: int,
        order: int,
        offset: int,
        compressed: bool,
    ) -> MemberInfo:
        """Replace the record at ``index``; the name is cut to fit its field."""
        raw_name = os.fsencode(name)[: MAX_NAME_LEN - 1]
        member = MemberInfo(
            name=os.fsdecode(raw_name),
            uid=uid,
            original_size=original_size,
            disk_size=disk_size,
            mtime=int(mtime),
            order=order,
            offset=offset,
            compressed=bool(compressed),
        )
        self.members[index] = member
        return member

    def find(self, name: str) -> int | None:
        """Index of the member called ``name``, or None."""
        return next(
            (index for index, member in enumerate(self.members) if member.name == name),
            None,
        )

    def _renumber(self) -> None:
        for number, member in enumerate(self.members, start=1):
            member.order = number

    def move(self, index_member: int, index_target: int) -> None:
        """Place the member at ``index_member`` right after ``index_target``.

        A target of -1 moves the member to the front.
        """
        if index_member == index_target:
            return
        member = self.members.pop(index_member)
        if index_member < index_target:
            self.members.insert(index_target, member)
        else:
            self.members.insert(index_target + 1, member)
        self._renumber()

    def remove(self, name: str) -> MemberInfo:
        """Drop the member called ``name`` and return its record."""
        index = self.find(name)
        if index is None:
            raise ArchiveError(f"no member named {name!r}")
        member = self.members.pop(index)
        self._renumber()
        return member

    def insert(
        self,
        name: str,
        original_size: int,
        disk_size: int,
        offset: int,
        compressed: bool,
    ) -> MemberInfo:
        """Append a record for file ``name``, taking owner and time from the file."""
        info = os.stat(name)
        self.members.append(
            MemberInfo(name="", uid=0, original_size=0, disk_size=0, mtime=0, order=0, offset=0)
        )
        return self.set_member(
            len(self.members) - 1,
            name,
            info.st_uid,
            original_size,
            disk_size,
            int(info.st_mtime),
            len(self.members),
            offset,
            compressed,
        )