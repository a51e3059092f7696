"""Core engine for Folder Tidy.

The :class:`FolderTidyEngine` scans a root directory, classifies every
visible regular file into a category, proposes moves for files that do
not already sit in a matching folder, and executes approved moves.

A run is a sequence of phases: walk, hash and sniff (optionally on a
thread pool), build the directory context from the complete file list,
classify, plan.  The context needs every file, so no classification
happens until all reads have finished.  Nothing from a scan is kept
between runs.

The engine does not depend on any user interface.  Callers use the two
boundary functions :func:`analyze_directory` and :func:`execute_moves`,
which return the JSON-shaped dictionaries described in
:mod:`folder_tidy.models`, or drive the engine directly.
"""

from __future__ import annotations

import datetime
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from .categories import merge_extensions
from .classifier import Classifier, is_in_category, category_parts
from .config_service import validate_config
from .content_service import enrich_descriptors
from .executor import execute_move_batch
from .models import AnalysisResult, FileDescriptor, MoveOutcome, ProposedMove
from .walker import ScanError, walk_directory


MoveLike = Union[ProposedMove, Dict[str, Any]]


@dataclass
class FolderTidyEngine:
    """Folder Tidy engine responsible for analysis and move execution."""

    root_dir: Path
    config: Dict[str, Any] = field(default_factory=dict)
    log_callback: Optional[Callable[[str], None]] = None
    log_to_console: Optional[bool] = None

    classifier: Classifier = field(init=False)

    def __post_init__(self) -> None:
        self.root_dir = Path(self.root_dir)
        self.config = validate_config(self.config)
        if self.log_to_console is None:
            self.log_to_console = bool(self.config.get("log_to_console", True))
        self.classifier = Classifier(
            extension_table=merge_extensions(self.config.get("extra_extensions")),
            affinity_min_files=int(self.config.get("affinity_min_files", 3)),
        )

    def _emit_log(self, msg: str) -> None:
        if self.log_to_console:
            print(msg)
        if self.log_callback is not None:
            try:
                self.log_callback(msg)
            except Exception:
                pass

    def _new_run_id(self) -> str:
        return datetime.datetime.now().strftime("%Y%m%d_%H%M%S_") + uuid.uuid4().hex[:8]

    # ------------------------------------------------------------------
    # Scan
    def scan(self) -> List[FileDescriptor]:
        """Walk the root and enrich every descriptor with digest and content type.

        Raises :class:`folder_tidy.walker.ScanError` when the root is
        missing or cannot be read.
        """
        files = walk_directory(self.root_dir)
        self._emit_log(f"Files discovered: {len(files)}")
        return enrich_descriptors(
            files,
            algorithm=str(self.config.get("hash_algorithm", "sha256")),
            workers=int(self.config.get("workers", 1) or 1),
        )

    def plan_moves(self, files: List[FileDescriptor]) -> List[ProposedMove]:
        """Classify ``files`` and return moves for those not yet in place."""
        context = self.classifier.build_context(files)
        moves: List[ProposedMove] = []
        for descriptor in files:
            result = self.classifier.classify(descriptor, context)
            if is_in_category(descriptor, result.category):
                continue
            destination = self.root_dir.joinpath(*category_parts(result.category), descriptor.name)
            moves.append(ProposedMove(
                source_path=descriptor.path,
                destination_path=str(destination),
                file_name=descriptor.name,
                reason=result.reason,
                category=result.category,
            ))
        return moves

    def analyze(self) -> AnalysisResult:
        """Scan the root and propose moves.

        Scan failures are reported through ``error`` with no proposed
        moves rather than raised.
        """
        self._emit_log(f"Folder Tidy run_id={self._new_run_id()} mode=analyze")
        self._emit_log(f"Root: {self.root_dir}")
        result = AnalysisResult()
        try:
            files = self.scan()
        except ScanError as exc:
            result.error = str(exc)
            self._emit_log(f"Error: {exc}")
            return result
        result.total_files = len(files)
        result.proposed_moves = self.plan_moves(files)
        self._emit_log(
            f"Done. files={result.total_files} proposed_moves={len(result.proposed_moves)}"
        )
        return result

    # ------------------------------------------------------------------
    # Execute
    def execute_moves(self, moves: Iterable[MoveLike]) -> MoveOutcome:
        """Execute approved moves; per-move failures are reported, not raised."""
        batch = [m if isinstance(m, ProposedMove) else ProposedMove.from_dict(m) for m in moves]
        self._emit_log(f"Folder Tidy run_id={self._new_run_id()} mode=execute")
        self._emit_log(f"Moves requested: {len(batch)}")
        outcome = execute_move_batch(batch, log=self._emit_log)
        self._emit_log(
            f"Done. success={outcome.success} failed={outcome.failed} "
            f"created_folders={len(outcome.created_folders)}"
        )
        return outcome


def analyze_directory(root_path: Union[str, Path], config: Optional[Dict[str, Any]] = None,
                      **engine_options: Any) -> Dict[str, Any]:
    """Analyze ``root_path`` and return the ``AnalysisResult`` JSON shape."""
    try:
        engine = FolderTidyEngine(root_dir=Path(root_path), config=config or {}, **engine_options)
    except ValueError as exc:
        return AnalysisResult(error=str(exc)).to_dict()
    return engine.analyze().to_dict()


def execute_moves(moves: Iterable[MoveLike], config: Optional[Dict[str, Any]] = None,
                  **engine_options: Any) -> Dict[str, Any]:
    """Execute ``moves`` and return the ``MoveOutcome`` JSON shape.

    An invalid ``config`` raises ``ValueError`` before any move is attempted.
    """
    engine = FolderTidyEngine(root_dir=Path("."), config=config or {}, **engine_options)
    return engine.execute_moves(moves).to_dict()
