"""Execution of approved moves.

Moves are attempted one by one; a failure is recorded in the returned
:class:`MoveOutcome` and the batch continues.  Directory creation and the
collision check that picks a free destination name are a check-then-act
sequence on the shared filesystem, so all execution goes through
:data:`_EXECUTION_LOCK`.
"""

from __future__ import annotations

import shutil
import threading
from pathlib import Path
from typing import Callable, Iterable, Optional, Set

from .models import MoveOutcome, ProposedMove


_EXECUTION_LOCK = threading.Lock()


def unique_destination(path: Path) -> Path:
    """Return ``path`` or the first free ``<stem>_<n><suffix>`` sibling (n >= 1)."""
    if not path.exists():
        return path
    counter = 1
    while True:
        candidate = path.with_name(f"{path.stem}_{counter}{path.suffix}")
        if not candidate.exists():
            return candidate
        counter += 1


def _move_file(src: Path, dst: Path) -> None:
    shutil.move(str(src), str(dst))


def execute_move_batch(
    moves: Iterable[ProposedMove],
    log: Optional[Callable[[str], None]] = None,
    move_file: Callable[[Path, Path], None] = _move_file,
) -> MoveOutcome:
    """Perform ``moves`` and return the aggregated outcome.

    The destination recorded in each move is treated as a request: when a
    file already exists there, the next free ``_n`` suffix is used.  The
    caller's move objects are not modified.
    """
    outcome = MoveOutcome()
    created: Set[str] = set()

    def _log(msg: str) -> None:
        if log is not None:
            log(msg)

    with _EXECUTION_LOCK:
        for move in moves:
            requested = Path(move.destination_path)
            dest_dir = requested.parent
            if not dest_dir.exists():
                try:
                    dest_dir.mkdir(parents=True, exist_ok=True)
                except OSError as exc:
                    outcome.failed += 1
                    outcome.failed_files.append(f"{move.file_name}: failed to create directory - {exc}")
                    _log(f"Failed: {move.file_name} (directory {dest_dir}): {exc}")
                    continue
                if str(dest_dir) not in created:
                    created.add(str(dest_dir))
                    outcome.created_folders.append(str(dest_dir))

            destination = unique_destination(requested)
            try:
                move_file(Path(move.source_path), destination)
            except OSError as exc:
                outcome.failed += 1
                outcome.failed_files.append(f"{move.file_name}: {exc}")
                _log(f"Failed: {move.file_name}: {exc}")
                continue
            outcome.success += 1
            _log(f"Moved: {move.source_path} -> {destination}")
    return outcome

