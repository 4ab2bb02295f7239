"""
Tests for the command-line interface.
"""

import io
import json
from pathlib import Path

import pytest

from minilang.__main__ import main
from minilang.config import MINILANG_CONFIG, MINILANG_MAX_STEPS

FIZZBUZZ = Path(__file__).resolve().parent.parent / "examples" / "fizzbuzz.mini"


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv(MINILANG_CONFIG, raising=False)
    monkeypatch.delenv(MINILANG_MAX_STEPS, raising=False)


@pytest.fixture
def program(tmp_path):
    """Write a program to a temp file and return its path as a string."""
    def _write(source, name="prog.mini"):
        path = tmp_path / name
        path.write_text(source)
        return str(path)
    return _write


class TestRun:
    """Test the run command."""

    def test_fizzbuzz(self, capsys):
        assert main(["run", str(FIZZBUZZ)]) == 0
        out = capsys.readouterr().out.splitlines()
        assert out[:5] == ["1", "2", "Fizz", "4", "Buzz"]
        assert out[-1] == "FizzBuzz"

    def test_runtime_error(self, program, capsys):
        path = program('print "start";\nx = 1 / 0;\n')
        assert main(["run", path]) == 1
        captured = capsys.readouterr()
        assert captured.out.splitlines() == ["start"]
        assert "error[E401]" in captured.err
        assert "x = 1 / 0;" in captured.err
        assert "1 error(s)" in captured.err

    def test_syntax_error(self, program, capsys):
        path = program("x = ;")
        assert main(["run", path]) == 1
        assert "E103" in capsys.readouterr().err

    def test_recover_reports_all(self, program, capsys):
        path = program("x = ;\ny = 1 2;\nz = @;\n")
        assert main(["run", path, "--recover"]) == 1
        err = capsys.readouterr().err
        assert "E103" in err and "E101" in err and "E001" in err
        assert "3 error(s)" in err

    def test_max_steps(self, program, capsys):
        path = program("while (1) { }")
        assert main(["run", path, "--max-steps", "50"]) == 1
        assert "E403" in capsys.readouterr().err

    def test_max_steps_must_be_positive(self, program, capsys):
        path = program("print;")
        with pytest.raises(SystemExit) as exc_info:
            main(["run", path, "--max-steps", "0"])
        assert exc_info.value.code == 2

    def test_json_output(self, program, capsys):
        path = program("x = 3; print x;")
        assert main(["run", path, "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["success"] is True
        assert data["output"] == ["3"]
        assert data["variables"] == {"x": 3}
        assert data["diagnostics"] == []
        assert data["error_count"] == 0

    def test_json_error(self, program, capsys):
        path = program("x = 1 % 0;")
        assert main(["run", path, "--json"]) == 1
        data = json.loads(capsys.readouterr().out)
        assert data["success"] is False
        assert data["diagnostics"][0]["code"] == "E402"
        assert data["error_count"] == 1

    def test_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO('print "piped";'))
        assert main(["run", "-"]) == 0
        assert capsys.readouterr().out == "piped\n"

    def test_missing_file(self, tmp_path, capsys):
        assert main(["run", str(tmp_path / "missing.mini")]) == 1
        assert "File not found" in capsys.readouterr().err

    def test_config_file(self, program, tmp_path, capsys):
        cfg = tmp_path / "cfg.yaml"
        cfg.write_text("max_steps: 20\nshow_source: false\n")
        path = program("while (1) { }")
        assert main(["run", path, "--config", str(cfg)]) == 1
        err = capsys.readouterr().err
        assert "step budget of 20 exceeded" in err
        assert " | " not in err

    def test_bad_config(self, program, tmp_path, capsys):
        cfg = tmp_path / "cfg.yaml"
        cfg.write_text("max_steps: -1\n")
        assert main(["run", program("print;"), "--config", str(cfg)]) == 1
        assert "max_steps must be positive" in capsys.readouterr().err

    def test_trace_logs_to_stderr(self, program, capsys):
        path = program("x = 1;")
        assert main(["run", path, "--trace"]) == 0
        err = capsys.readouterr().err
        assert "minilang.trace" in err
        assert "assign x = 1" in err


class TestCheck:
    """Test the check command."""

    def test_ok(self, capsys):
        assert main(["check", str(FIZZBUZZ)]) == 0
        out = capsys.readouterr().out
        assert out.strip() == f"OK: {FIZZBUZZ} - 2 statement(s)"

    def test_does_not_execute(self, program, capsys):
        path = program('print "side effect"; x = 1 / 0;')
        assert main(["check", path]) == 0
        assert "side effect" not in capsys.readouterr().out

    def test_error(self, program, capsys):
        path = program("if (x < 1) { }")
        assert main(["check", path]) == 1
        err = capsys.readouterr().err
        assert "E003" in err
        assert "hint" in err

    def test_recover(self, program, capsys):
        path = program("a = ;\nb = ;\n")
        assert main(["check", path, "--recover"]) == 1
        assert "2 error(s)" in capsys.readouterr().err


class TestTokens:
    """Test the tokens command."""

    def test_listing(self, program, capsys):
        path = program("x = 10;")
        assert main(["tokens", path]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "1:1\tIDENTIFIER\t'x'"
        assert lines[2] == "1:5\tINT_LITERAL\t'10'"
        assert lines[-1].split("\t")[1] == "EOF"

    def test_unknown_token(self, program, capsys):
        path = program("x = $;")
        assert main(["tokens", path]) == 1
        captured = capsys.readouterr()
        assert "UNKNOWN" in captured.out
        assert "E001" in captured.err


class TestAst:
    """Test the ast command."""

    def test_dump(self, program, capsys):
        path = program("while (i <= 3) { i = i + 1; }")
        assert main(["ast", path]) == 0
        out = capsys.readouterr().out
        assert out.startswith("Program")
        assert "WhileStatement" in out
        assert "operator: LE" in out

    def test_error(self, program, capsys):
        path = program("while (1) {")
        assert main(["ast", path]) == 1
        assert "E102" in capsys.readouterr().err


class TestArguments:
    """Test argument parsing."""

    def test_subcommand_required(self, capsys):
        with pytest.raises(SystemExit):
            main([])


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
