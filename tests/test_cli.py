import io
import logging
import sys

import pytest

from srcnorm import cli
from srcnorm.errors import (
    ERR_CONFIG,
    ERR_READ,
    ERR_WRITE,
    OK,
    ConfigError,
    NormalizerError,
    OutputWriteError,
    SourceReadError,
)
from srcnorm import walker


@pytest.fixture(autouse=True)
def restore_logger():
    # main() installs its own stderr handler on the package logger
    logger = logging.getLogger("srcnorm")
    saved = logger.handlers[:], logger.level, logger.propagate
    yield
    logger.handlers[:], logger.level, logger.propagate = saved


def _stdin(data):
    return io.TextIOWrapper(io.BytesIO(data))


def test_stdin_to_stdout(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", _stdin(b"foo   \n   \n\tif(x){\n"))
    assert cli.main(["--expand"]) == OK
    assert capsys.readouterr().out == "foo\n\n    if (x) {\n"


def test_tab_width_option(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", _stdin(b"        foo\n"))
    assert cli.main(["-u", "-t", "8"]) == OK
    assert capsys.readouterr().out == "\tfoo\n"


def test_stdin_keeps_non_utf8_bytes(monkeypatch, capsysbinary):
    raw = "/* café, déjà, garçon */  \nint x;\t\n".encode("latin-1")
    monkeypatch.setattr(sys, "stdin", _stdin(raw))

    assert cli.main([]) == OK
    captured = capsysbinary.readouterr()
    assert captured.out == "/* café, déjà, garçon */\nint x;\n".encode("latin-1")
    assert b"error" not in captured.err


def test_stdin_binary_passes_through(monkeypatch, capsysbinary):
    raw = b"\x7fELF\x02\x01\x00\x00  \n"
    monkeypatch.setattr(sys, "stdin", _stdin(raw))

    assert cli.main([]) == OK
    assert capsysbinary.readouterr().out == raw


@pytest.mark.parametrize("width", ["0", "-2"])
def test_invalid_tab_width_touches_nothing(tmp_path, capsys, width):
    src = tmp_path / "a.c"
    src.write_text("int x;   \n")

    assert cli.main(["--tab-width", width, str(src)]) == ERR_CONFIG
    assert src.read_text() == "int x;   \n"
    assert "tab width" in capsys.readouterr().err


def test_non_integer_tab_width_is_usage_error(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--tab-width", "four"])
    assert excinfo.value.code == ERR_CONFIG


def test_error_codes_are_distinct():
    codes = [ConfigError("x").code, SourceReadError("x").code, OutputWriteError("x").code]
    assert codes == [ERR_CONFIG, ERR_READ, ERR_WRITE]
    assert len(set(codes)) == 3
    assert OK not in codes
    assert NormalizerError("x").code == ERR_CONFIG


def test_help_and_man(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--help"])
    assert excinfo.value.code == 0
    assert "--tab-width" in capsys.readouterr().out

    assert cli.main(["--man"]) == OK
    out = capsys.readouterr().out
    assert out.startswith("source-normalizer")
    assert "Exit status:" in out


def test_in_place_with_backup(tmp_path, capsys):
    src = tmp_path / "a.m"
    src.write_text("if(x){  \n")

    assert cli.main(["--backup", str(tmp_path)]) == OK
    assert src.read_text() == "if (x) {\n"
    assert (tmp_path / "a.m.bak").read_text() == "if(x){  \n"
    assert capsys.readouterr().out == ""


def test_preview_writes_stdout_only(tmp_path, capsys):
    src = tmp_path / "a.cpp"
    src.write_text("while(1){}   \n")

    assert cli.main(["-p", str(src)]) == OK
    out = capsys.readouterr().out
    assert "==> begin {} <==".format(src) in out
    assert "while (1) {}\n" in out
    assert src.read_text() == "while(1){}   \n"
    assert not (tmp_path / "a.cpp.bak").exists()


def test_missing_path_exit_code(tmp_path, capsys):
    missing = tmp_path / "gone.c"
    assert cli.main([str(missing)]) == ERR_READ
    err = capsys.readouterr().err
    assert err.startswith("error: ")
    assert str(missing) in err


def test_write_failure_exit_code(tmp_path, monkeypatch, capsys):
    src = tmp_path / "a.h"
    src.write_text("int x;  \n")

    def broken_replace(src, dst):
        raise OSError(30, "Read-only file system")

    monkeypatch.setattr(walker.os, "replace", broken_replace)
    assert cli.main([str(src)]) == ERR_WRITE
    assert str(src) in capsys.readouterr().err
    assert src.read_text() == "int x;  \n"
