"""Tests for the run.py scenario runner."""

import json
from pathlib import Path

import pytest

import run
from src.registry.ledger import StoryLedger


SCRIPT = """
steps:
  - op: register_author
    caller: "0xA11CE"
    args: [Alice]
  - op: create_universe
    caller: "0xA11CE"
    args: [Eldoria, High fantasy, false]
  - op: add_story
    caller: "0xA11CE"
    args: [1, Dawn, It began.]
  - op: add_story
    caller: "0xB0B"
    args: [1, Intruder, text]
  - op: like_story
    caller: "0xB0B"
    args: [1]
  - op: get_story
    args: [1]
"""


@pytest.fixture
def script_file(tmp_path: Path) -> Path:
    path = tmp_path / "scenario.yaml"
    path.write_text(SCRIPT)
    return path


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text("logging:\n  output_file: ''\n")
    return path


class TestLoadScript:
    """Script parsing."""

    def test_steps_loaded(self, script_file: Path) -> None:
        steps = run.load_script(str(script_file))
        assert [s["op"] for s in steps] == [
            "register_author", "create_universe", "add_story",
            "add_story", "like_story", "get_story",
        ]

    def test_step_without_op(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("steps:\n  - caller: x\n")
        with pytest.raises(ValueError, match="op"):
            run.load_script(str(path))


class TestRunScript:
    """Step execution."""

    def test_failures_do_not_stop_run(self, script_file: Path) -> None:
        ledger = StoryLedger()
        responses = run.run_script(ledger, run.load_script(str(script_file)), verbose=False)

        assert [r["success"] for r in responses] == [True, True, True, False, True, True]
        assert responses[3]["code"] == "not_registered"
        assert responses[5]["result"]["likes"] == 1


class TestMain:
    """Command line entry point."""

    def test_prints_totals(
        self, script_file: Path, config_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        exit_code = run.main(
            ["--script", str(script_file), "--config", str(config_file), "--quiet"]
        )
        assert exit_code == 0

        totals = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert totals == {
            "total_authors": 1,
            "total_universes": 1,
            "total_stories": 1,
            "steps": 6,
            "failed": 1,
        }

    def test_checkpoint_and_resume(
        self, script_file: Path, config_file: Path, tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        checkpoint = tmp_path / "state.json"
        run.main([
            "--script", str(script_file), "--config", str(config_file),
            "--checkpoint", str(checkpoint), "--quiet",
        ])
        assert checkpoint.exists()

        follow_up = tmp_path / "more.yaml"
        follow_up.write_text(
            "steps:\n"
            "  - op: add_story\n"
            "    caller: '0xA11CE'\n"
            "    args: [1, Dusk, It ended.]\n"
        )
        capsys.readouterr()
        run.main([
            "--script", str(follow_up), "--config", str(config_file),
            "--resume", str(checkpoint), "--quiet",
        ])
        totals = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert totals["total_stories"] == 2
        assert totals["failed"] == 0


def test_resume_appends_to_event_log(
    script_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    log_path = tmp_path / "events.jsonl"
    config = tmp_path / "with_log.yaml"
    config.write_text(f"logging:\n  output_file: '{log_path}'\n")
    checkpoint = tmp_path / "state.json"

    run.main([
        "--script", str(script_file), "--config", str(config),
        "--checkpoint", str(checkpoint), "--quiet",
    ])
    first_run = [json.loads(line) for line in log_path.read_text().splitlines()]
    assert [e["sequence"] for e in first_run] == [1, 2, 3, 4]

    follow_up = tmp_path / "more.yaml"
    follow_up.write_text(
        "steps:\n"
        "  - op: like_story\n"
        "    caller: '0xCA501'\n"
        "    args: [1]\n"
    )
    run.main([
        "--script", str(follow_up), "--config", str(config),
        "--resume", str(checkpoint), "--quiet",
    ])

    events = [json.loads(line) for line in log_path.read_text().splitlines()]
    assert events[:4] == first_run
    assert events[4]["sequence"] == 5
    assert events[4]["event_type"] == "StoryLiked"
