#!/usr/bin/env python3
"""
Story Universe Registry - scenario runner

Replays a YAML list of operations against a ledger and prints the outcome
of each step followed by the final totals.

Usage:
    python run.py --script scenario.yaml                 # Fresh ledger, default config
    python run.py --script s.yaml --checkpoint out.json  # Save state afterwards
    python run.py --script s.yaml --resume out.json      # Continue from a checkpoint

Script format:
    steps:
      - op: register_author
        caller: alice
        args: [Alice]
      - op: create_universe
        caller: alice
        args: [Eldoria, "High fantasy", false]
      - op: get_universe
        args: [1]
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, TypedDict

import yaml

# Make the src package importable when run from a checkout
sys.path.insert(0, str(Path(__file__).parent))

from src.config import configure_logging, get_validated_config, load_config
from src.registry import StoryLedger, load_checkpoint, save_checkpoint
from src.registry.logger import EventLogger


class ScriptStep(TypedDict, total=False):
    """One operation in a scenario script."""

    op: str
    caller: str
    args: list[Any]


def load_script(script_path: str) -> list[ScriptStep]:
    """Load scenario steps from YAML file"""
    with open(script_path) as f:
        loaded: Any = yaml.safe_load(f) or {}
    steps = loaded.get("steps", []) if isinstance(loaded, dict) else loaded
    if not isinstance(steps, list):
        raise ValueError(f"{script_path}: 'steps' must be a list")
    for index, step in enumerate(steps):
        if not isinstance(step, dict) or "op" not in step:
            raise ValueError(f"{script_path}: step {index} needs an 'op' key")
    return steps


def run_script(
    ledger: StoryLedger,
    steps: list[ScriptStep],
    verbose: bool = True,
) -> list[dict[str, Any]]:
    """Run each step through ``ledger.invoke`` and collect the responses.

    Failed steps do not stop the run; their error dicts are returned in
    place like any other response.
    """
    responses: list[dict[str, Any]] = []
    for index, step in enumerate(steps, start=1):
        response = ledger.invoke(step["op"], list(step.get("args", [])), step.get("caller"))
        responses.append(response)
        if verbose:
            who = step.get("caller", "-")
            if response["success"]:
                print(f"  [{index}] {step['op']} by {who}: OK {json.dumps(response['result'])}")
            else:
                print(f"  [{index}] {step['op']} by {who}: FAILED {response['code']}: {response['error']}")
    return responses


def main(argv: list[str] | None = None) -> int:
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        description="Replay a story registry scenario"
    )
    parser.add_argument("--script", required=True, help="Path to scenario YAML")
    parser.add_argument(
        "--config", default=None, help="Path to config file (default: config/config.yaml)"
    )
    parser.add_argument(
        "--checkpoint",
        type=str,
        nargs="?",
        const="",
        default=None,
        help="Save state after the run (default path: checkpoint.file from config)",
    )
    parser.add_argument(
        "--resume", type=str, default=None, help="Start from this checkpoint file"
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress per-step output")
    args: argparse.Namespace = parser.parse_args(argv)

    config: dict[str, Any] = load_config(args.config)
    configure_logging()
    app_config = get_validated_config()

    if args.resume:
        output_file = app_config.logging.output_file
        event_logger = (
            EventLogger(output_file=output_file, append=True)
            if output_file
            else EventLogger(in_memory=True)
        )
        ledger = load_checkpoint(args.resume, app_config.registry, event_logger)
    else:
        ledger = StoryLedger.from_config(config)

    steps = load_script(args.script)
    verbose = not args.quiet
    if verbose:
        print(f"=== Running {len(steps)} steps from {args.script} ===")
    responses = run_script(ledger, steps, verbose=verbose)

    failed = sum(1 for r in responses if not r["success"])
    print(json.dumps({**ledger.get_totals(), "steps": len(steps), "failed": failed}))

    if args.checkpoint is not None:
        path = save_checkpoint(ledger, args.checkpoint or None)
        if verbose:
            print(f"Checkpoint saved to: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
