from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from dvrandao.cli import build_parser, configure_logging, main
from dvrandao.core.config import LoggingConfig
from dvrandao.core.hashchain import chain


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    # no config/default.yaml under cwd: the CLI falls back to built-in defaults
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_cli_help_includes_subcommands(capsys: pytest.CaptureFixture[str]) -> None:
    rc = main([])
    assert rc == 2
    out = capsys.readouterr().out
    assert "chain" in out
    assert "problem" in out


def test_cli_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(["--version"])
    assert rc == 0
    assert capsys.readouterr().out.strip().startswith("dvrandao v")


def test_cli_rejects_bad_seed() -> None:
    parser = build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["chain", "--seed", "nope"])
    with pytest.raises(SystemExit):
        parser.parse_args(["chain", "--seed", hex(1 << 256)])


def test_chain_json_output(capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(["chain", "--seed", "0x1", "--steps", "2", "--json"])
    assert rc == 0
    steps = json.loads(capsys.readouterr().out)

    first = chain(1)
    assert steps[0] == {"random_value": hex(first.random_value), "next_seed": hex(first.next_seed)}
    assert int(steps[1]["random_value"], 16) == chain(first.next_seed).random_value


def test_chain_rejects_zero_steps(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["chain", "--seed", "1", "--steps", "0"]) == 2


def test_problem_requires_action(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["problem"]) == 2


def test_problem_generate_writes_snapshot(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    out = tmp_path / "snapshots" / "field.json"
    rc = main(["problem", "generate", "--seed", "7", "--circles", "3", "--iterations", "500", "--out", str(out), "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert rc == (0 if payload["circle_count"] == 3 else 1)
    assert payload["disjoint"] is True
    assert len(payload["circles"]) == payload["circle_count"]

    snap = json.loads(out.read_text())
    assert len(snap) == 4
    assert snap[0] == hex(0x80000000000)
    assert len(snap[3]) == payload["circle_count"]


def test_problem_solve_against_snapshot(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    snap = tmp_path / "field.json"
    main(["problem", "generate", "--seed", "7", "--circles", "4", "--out", str(snap), "--json"])
    capsys.readouterr()

    rc = main(["problem", "solve", "--snapshot", str(snap), "--seed", "0x2a", "--count", "2", "--json"])
    payload = json.loads(capsys.readouterr().out)

    assert len(payload["solutions"]) == 2
    assert rc == (0 if all(s["valid"] for s in payload["solutions"]) else 1)
    assert payload["seed"] == payload["solutions"][-1]["seed"]


def test_problem_solve_missing_snapshot(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(["problem", "solve", "--snapshot", str(tmp_path / "nope.json"), "--seed", "1"])
    assert rc == 2
    assert "snapshot not found" in capsys.readouterr().err


def test_problem_solve_malformed_snapshot(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    snap = tmp_path / "bad.json"
    snap.write_text("[1, 2]")
    rc = main(["problem", "solve", "--snapshot", str(snap), "--seed", "1"])
    assert rc == 2
    assert "Malformed problem snapshot" in capsys.readouterr().err


def test_missing_config_file_is_usage_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(["--config", str(tmp_path / "missing.yaml"), "chain", "--seed", "1"])
    assert rc == 2
    assert "Config file not found" in capsys.readouterr().err


def test_config_file_drives_defaults(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cfg = tmp_path / "cfg.yaml"
    cfg.write_text("generation:\n  static_circles: 2\n  max_iterations: 1\n")
    rc = main(["--config", str(cfg), "problem", "generate", "--seed", "3", "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["target"] == 2
    assert payload["iterations"] == 1
    assert rc == 1


def test_json_logging_emits_structured_lines(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(LoggingConfig(level="INFO", json_output=True))
    logging.getLogger("dvrandao.test").info("static_field_generated", extra={"circles": 3})

    line = capsys.readouterr().err.strip().splitlines()[-1]
    doc = json.loads(line)
    assert doc["event"] == "static_field_generated"
    assert doc["circles"] == 3
    assert doc["level"] == "INFO"
