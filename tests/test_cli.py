import os

import pytest

from vinac.cli import main
from vinac.directory import Directory


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _make(path, data):
    path.write_bytes(data)
    return data


def _names(archive_path):
    with open(archive_path, "rb") as archive:
        return [member.name for member in Directory.read(archive)]


def test_too_few_arguments(workdir, capsys):
    assert main(["-p"]) == 1
    assert "Uso:" in capsys.readouterr().err


def test_invalid_option(workdir, capsys):
    assert main(["-z", "arq.vc"]) == 1
    assert "Opção inválida: -z" in capsys.readouterr().err


def test_insert_and_list(workdir, capsys):
    _make(workdir / "a.txt", b"hello")
    _make(workdir / "b.txt", b"world!")
    assert main(["-p", "arq.vc", "a.txt", "b.txt"]) == 0
    assert _names("arq.vc") == ["a.txt", "b.txt"]

    assert main(["-c", "arq.vc"]) == 0
    out = capsys.readouterr().out
    assert "=== Conteúdo do Archive ===" in out
    assert "Nome:                a.txt" in out
    assert "Nome:                b.txt" in out
    assert out.index("a.txt") < out.index("b.txt")


def test_insert_missing_file_fails(workdir, capsys):
    assert main(["-p", "arq.vc", "nope.txt"]) == 1
    assert "Erro ao tentar inserir sem compressão" in capsys.readouterr().err


def test_insert_compressed_missing_file_fails(workdir, capsys):
    assert main(["-i", "arq.vc", "nope.txt"]) == 1
    assert "Erro ao tentar inserir com compressão" in capsys.readouterr().err


def test_compressed_round_trip_extract_all(workdir):
    first = _make(workdir / "a.txt", b"abcdefgh" * 200)
    second = _make(workdir / "b.bin", bytes(range(256)))
    assert main(["-i", "arq.vc", "a.txt", "b.bin"]) == 0
    os.remove("a.txt")
    os.remove("b.bin")

    assert main(["-x", "arq.vc"]) == 0
    assert (workdir / "a.txt").read_bytes() == first
    assert (workdir / "b.bin").read_bytes() == second


def test_extract_existing_file_gets_new_name(workdir):
    data = _make(workdir / "a.txt", b"contents")
    assert main(["-p", "arq.vc", "a.txt"]) == 0
    assert main(["-x", "arq.vc", "a.txt"]) == 0
    assert (workdir / "a(1).txt").read_bytes() == data
    assert (workdir / "a.txt").read_bytes() == data


def test_extract_unknown_member_fails(workdir, capsys):
    _make(workdir / "a.txt", b"x")
    assert main(["-p", "arq.vc", "a.txt"]) == 0
    assert main(["-x", "arq.vc", "ghost.txt"]) == 1
    assert "Erro ao tentar extrair" in capsys.readouterr().err


def test_extract_missing_archive(workdir, capsys):
    assert main(["-x", "missing.vc"]) == 1
    assert "Aquivo não existe" in capsys.readouterr().err


def test_remove_member(workdir):
    _make(workdir / "a.txt", b"aaaa")
    kept = _make(workdir / "b.txt", b"bbbbbb")
    assert main(["-p", "arq.vc", "a.txt", "b.txt"]) == 0
    assert main(["-r", "arq.vc", "a.txt"]) == 0
    assert _names("arq.vc") == ["b.txt"]

    os.remove("b.txt")
    assert main(["-x", "arq.vc"]) == 0
    assert (workdir / "b.txt").read_bytes() == kept


def test_remove_all_then_list_reports_empty(workdir, capsys):
    _make(workdir / "a.txt", b"aaaa")
    assert main(["-p", "arq.vc", "a.txt"]) == 0
    assert main(["-r", "arq.vc", "a.txt"]) == 0
    capsys.readouterr()
    assert main(["-c", "arq.vc"]) == 1
    assert "Archive vazio" in capsys.readouterr().err


def test_remove_unknown_member_fails(workdir, capsys):
    _make(workdir / "a.txt", b"aaaa")
    assert main(["-p", "arq.vc", "a.txt"]) == 0
    assert main(["-r", "arq.vc", "ghost.txt"]) == 1
    assert "Erro ao tentar remover" in capsys.readouterr().err


def test_move_wrong_argument_count(workdir, capsys):
    assert main(["-m", "arq.vc"]) == 1
    assert "-m <archive> <membro> <membro_target>" in capsys.readouterr().err


def test_move_missing_archive(workdir, capsys):
    assert main(["-m", "missing.vc", "a.txt"]) == 1
    assert "Aquivo não existe" in capsys.readouterr().err


def test_move_to_front_and_after_target(workdir):
    contents = {
        "a.txt": _make(workdir / "a.txt", b"first member"),
        "b.txt": _make(workdir / "b.txt", b"second"),
        "c.txt": _make(workdir / "c.txt", b"third one here"),
    }
    assert main(["-p", "arq.vc", "a.txt", "b.txt", "c.txt"]) == 0

    assert main(["-m", "arq.vc", "c.txt"]) == 0
    assert _names("arq.vc") == ["c.txt", "a.txt", "b.txt"]

    assert main(["-m", "arq.vc", "c.txt", "b.txt"]) == 0
    assert _names("arq.vc") == ["a.txt", "b.txt", "c.txt"]

    for name in contents:
        os.remove(name)
    assert main(["-x", "arq.vc"]) == 0
    for name, data in contents.items():
        assert (workdir / name).read_bytes() == data


def test_move_unknown_target_fails(workdir, capsys):
    _make(workdir / "a.txt", b"aaaa")
    assert main(["-p", "arq.vc", "a.txt"]) == 0
    assert main(["-m", "arq.vc", "a.txt", "ghost.txt"]) == 1
    assert "Erro ao tentar mover" in capsys.readouterr().err


def test_list_missing_archive(workdir, capsys):
    assert main(["-c", "missing.vc"]) == 1
    assert "Aquivo não existe" in capsys.readouterr().err


def test_reinsert_updates_member(workdir):
    _make(workdir / "a.txt", b"short")
    assert main(["-p", "arq.vc", "a.txt"]) == 0
    updated = _make(workdir / "a.txt", b"a much longer replacement body")
    assert main(["-p", "arq.vc", "a.txt"]) == 0
    assert _names("arq.vc") == ["a.txt"]

    os.remove("a.txt")
    assert main(["-x", "arq.vc", "a.txt"]) == 0
    assert (workdir / "a.txt").read_bytes() == updated