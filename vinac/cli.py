"""Command-line front end for the archiver."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Sequence
from typing import BinaryIO

from vinac.archive import (
    extract_member,
    insert_member,
    insert_member_compressed,
    list_members,
    move_member,
    remove_member,
)
from vinac.directory import ArchiveError, Directory

__all__ = ["main"]

_PROG = "vina"
_FAILURES = (ArchiveError, OSError, ValueError)


def _error(message: str) -> int:
    print(message, file=sys.stderr)
    return 1


def _missing(exc: OSError) -> int:
    return _error(f"Aquivo não existe: {exc.strerror or exc}")


def _open_or_create(path: str) -> BinaryIO:
    try:
        return open(path, "rb+")
    except FileNotFoundError:
        return open(path, "wb+")


def _insert(archive_path: str, members: Sequence[str], compressed: bool) -> int:
    action: Callable[[BinaryIO, str], None]
    if compressed:
        action = insert_member_compressed
        failure = "Erro ao tentar inserir com compressão"
    else:
        action = insert_member
        failure = "Erro ao tentar inserir sem compressão"
    try:
        archive = _open_or_create(archive_path)
    except OSError:
        return 1
    with archive:
        for name in members:
            try:
                action(archive, name)
            except _FAILURES:
                return _error(failure)
    return 0


def _move(archive_path: str, args: Sequence[str]) -> int:
    if len(args) not in (1, 2):
        return _error(f"Uso: {_PROG} -m <archive> <membro> <membro_target>")
    try:
        archive = open(archive_path, "rb+")
    except OSError as exc:
        return _missing(exc)
    with archive:
        target = args[1] if len(args) == 2 else None
        try:
            move_member(archive, args[0], target)
        except _FAILURES:
            return _error("Erro ao tentar mover")
    return 0


def _extract(archive_path: str, members: Sequence[str]) -> int:
    try:
        archive = open(archive_path, "rb")
    except OSError as exc:
        return _missing(exc)
    with archive:
        if not members:
            try:
                directory = Directory.read(archive)
            except _FAILURES:
                return _error("Erro ao tentar ler o diretório")
            members = [member.name for member in directory]
        for name in members:
            try:
                extract_member(archive, name)
            except _FAILURES:
                return _error("Erro ao tentar extrair")
    return 0


def _remove(archive_path: str, members: Sequence[str]) -> int:
    try:
        archive = open(archive_path, "rb+")
    except OSError as exc:
        return _missing(exc)
    with archive:
        for name in members:
            try:
                remove_member(archive, name)
            except _FAILURES:
                return _error("Erro ao tentar remover")
    return 0


def _list(archive_path: str) -> int:
    try:
        archive = open(archive_path, "rb")
    except OSError as exc:
        return _missing(exc)
    with archive:
        try:
            directory = Directory.read(archive)
        except _FAILURES:
            return _error("Erro ao tentar ler o diretório")
    try:
        list_members(directory, sys.stdout)
    except ArchiveError:
        return _error("Archive vazio")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run one archive command and return the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2:
        return _error(f"Uso: {_PROG} <opção> <archive> [membro1 membro2 ...]")

    option, archive_path, rest = args[0], args[1], args[2:]
    letter = option[1:2]

    if letter == "p":
        return _insert(archive_path, rest, compressed=False)
    if letter == "i":
        return _insert(archive_path, rest, compressed=True)
    if letter == "m":
        return _move(archive_path, rest)
    if letter == "x":
        return _extract(archive_path, rest)
    if letter == "r":
        return _remove(archive_path, rest)
    if letter == "c":
        return _list(archive_path)
    return _error(f"Opção inválida: {option}")


if __name__ == "__main__":
    sys.exit(main())