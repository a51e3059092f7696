"""Command‑line interface for Folder Tidy.

Three subcommands delegate to :class:`folder_tidy.engine.FolderTidyEngine`:

* ``analyze ROOT`` prints the proposed moves as JSON.
* ``execute PLAN`` reads a JSON file produced by ``analyze --json-out``
  (or any list of moves) and executes every move in it.
* ``organize ROOT`` analyzes, asks for confirmation and executes.

Run ``python -m folder_tidy.cli --help`` for usage.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config_service import ConfigService
from .engine import FolderTidyEngine


def _parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="folder-tidy",
        description="Folder Tidy – sort a folder's files into category folders",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("command", choices=["analyze", "execute", "organize"], help="Action to perform")
    parser.add_argument("target", help="Root directory (analyze/organize) or plan JSON file (execute)")
    parser.add_argument("--portable", "-p", action="store_true", help="Force portable mode")
    parser.add_argument("--workers", type=int, default=None, help="Hash/sniff worker threads (overrides config)")
    parser.add_argument("--json-out", type=Path, default=None, help="Also write the JSON result to this file")
    parser.add_argument("--yes", "-y", action="store_true", help="Do not ask before executing (organize)")
    parser.add_argument("--quiet", "-q", action="store_true", help="Suppress progress lines on stderr")
    return parser.parse_args(argv)


def _load_plan(plan_path: Path) -> List[Dict[str, Any]]:
    data = json.loads(plan_path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("proposedMoves", [])
    if not isinstance(data, list):
        raise ValueError("plan must be a list of moves or an analysis result")
    return data


def _emit(result: Dict[str, Any], json_out: Optional[Path]) -> None:
    text = json.dumps(result, indent=2)
    print(text)
    if json_out is not None:
        json_out.parent.mkdir(parents=True, exist_ok=True)
        json_out.write_text(text, encoding="utf-8")


def _confirm(count: int) -> bool:
    try:
        answer = input(f"Move {count} file(s)? [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_arguments(argv)
    config_service = ConfigService(app_dir=Path.cwd())
    config = config_service.load_config(cli_portable=bool(args.portable))
    if args.workers is not None:
        config["workers"] = max(1, args.workers)

    def _progress(msg: str) -> None:
        print(msg, file=sys.stderr)

    target = Path(args.target).expanduser()
    engine_root = target if args.command != "execute" else Path.cwd()
    try:
        engine = FolderTidyEngine(
            root_dir=engine_root.resolve(),
            config=config,
            log_callback=None if args.quiet else _progress,
            log_to_console=False,
        )
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.command == "execute":
        try:
            moves = _load_plan(target)
        except (OSError, ValueError) as exc:
            print(f"Error: could not read plan {target}: {exc}", file=sys.stderr)
            return 1
        try:
            outcome = engine.execute_moves(moves)
        except (KeyError, TypeError) as exc:
            print(f"Error: malformed move in plan: {exc}", file=sys.stderr)
            return 1
        _emit(outcome.to_dict(), args.json_out)
        return 2 if outcome.failed else 0

    analysis = engine.analyze()
    if args.command == "analyze" or analysis.error:
        _emit(analysis.to_dict(), args.json_out)
        return 1 if analysis.error else 0

    # organize
    if not analysis.proposed_moves:
        _emit({"analysis": analysis.to_dict(), "outcome": None}, args.json_out)
        return 0
    if not args.yes and not _confirm(len(analysis.proposed_moves)):
        print("Aborted; no files were moved.", file=sys.stderr)
        return 0
    outcome = engine.execute_moves(analysis.proposed_moves)
    _emit({"analysis": analysis.to_dict(), "outcome": outcome.to_dict()}, args.json_out)
    return 2 if outcome.failed else 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
