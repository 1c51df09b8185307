# tests/test_cli.py
"""
lc3_tracer.cliモジュールのテスト。
"""
import io
import sys

import pytest

from lc3_tracer.cli import main, build_parser, EXIT_HALTED, EXIT_FATAL, EXIT_USAGE, EXIT_STOPPED

# @intent:test_suite コマンドラインからの実行と終了コードを検証します。

def _write_obj(path, origin, words):
    data = origin.to_bytes(2, "big") + b"".join(w.to_bytes(2, "big") for w in words)
    path.write_bytes(data)
    return str(path)

def test_run_halts(tmp_path, capsys):
    image = _write_obj(tmp_path / "add.obj", 0x3000, [0x1025, 0xF025])
    assert main(["run", image]) == EXIT_HALTED
    assert capsys.readouterr().out == "HALT\n"

def test_run_hello(tmp_path, capsys):
    image = _write_obj(tmp_path / "hello.obj", 0x3000, [0xE002, 0xF022, 0xF025, ord("H"), ord("I"), 0])
    assert main(["run", "-q", image]) == EXIT_HALTED
    assert capsys.readouterr().out == "HIHALT\n"

# @intent:test_case GETCは標準入力のバイトを読み込むことを検証します。
def test_run_reads_stdin(tmp_path, capsys, monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(b"Q")))
    image = _write_obj(tmp_path / "echo.obj", 0x3000, [0xF020, 0xF021, 0xF025])
    assert main(["run", image]) == EXIT_HALTED
    assert capsys.readouterr().out == "QHALT\n"

def test_run_fatal(tmp_path):
    image = _write_obj(tmp_path / "rti.obj", 0x3000, [0x8000])
    assert main(["run", image]) == EXIT_FATAL

def test_run_missing_file(tmp_path):
    assert main(["run", str(tmp_path / "missing.obj")]) == EXIT_USAGE

def test_run_without_image():
    assert main(["run"]) == EXIT_USAGE

def test_run_step_limit(tmp_path):
    image = _write_obj(tmp_path / "loop.obj", 0x3000, [0x0FFF])
    assert main(["run", "--max-steps", "50", image]) == EXIT_STOPPED

def test_run_breakpoint(tmp_path, capsys):
    image = _write_obj(tmp_path / "add.obj", 0x3000, [0x1025, 0xF025])
    assert main(["run", "--break", "x3001", image]) == EXIT_STOPPED
    assert capsys.readouterr().out == ""

# @intent:test_case --originを指定すると、オリジンワードの無い生イメージとしてロードすることを検証します。
def test_run_raw_image_with_origin(tmp_path, capsys):
    raw = tmp_path / "prog.bin"
    raw.write_bytes(bytes([0xF0, 0x25]))
    assert main(["run", "--origin", "0x3000", str(raw)]) == EXIT_HALTED
    assert capsys.readouterr().out == "HALT\n"

def test_run_with_config(tmp_path, capsys):
    (tmp_path / "system.yaml").write_text(
        "programs:\n"
        "  - origin: x3000\n"
        "    words: [0x1025, 0xF025]\n"
        "console:\n"
        "  halt_message: \"done\\n\"\n"
    )
    assert main(["run", "--config", str(tmp_path / "system.yaml")]) == EXIT_HALTED
    assert capsys.readouterr().out == "done\n"

def test_parser_rejects_trace_with_quiet():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["run", "--trace", "-q", "prog.obj"])

def test_parser_rejects_bad_address():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["run", "--break", "zz", "prog.obj"])

# @intent:test_case_error 16ビットに収まらないアドレスは使用法エラーとして拒否されることを検証します。
@pytest.mark.parametrize("option, value", [
    ("--origin", "0x10000"),
    ("--break", "x10000"),
    ("--origin", "-1"),
])
def test_parser_rejects_out_of_range_address(option, value):
    with pytest.raises(SystemExit) as excinfo:
        build_parser().parse_args(["run", option, value, "prog.obj"])
    assert excinfo.value.code == EXIT_USAGE

def test_run_rejects_out_of_range_origin(tmp_path):
    raw = tmp_path / "prog.bin"
    raw.write_bytes(bytes([0xF0, 0x25]))
    with pytest.raises(SystemExit) as excinfo:
        main(["run", "--origin", "0x10000", str(raw)])
    assert excinfo.value.code == EXIT_USAGE
