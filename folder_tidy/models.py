"""Data types shared by the scanner, classifier and move executor.

Each type carries a ``to_dict`` method producing the camelCase JSON
shape consumed by callers (the CLI, or any presentation layer that
invokes :func:`folder_tidy.engine.analyze_directory` and
:func:`folder_tidy.engine.execute_moves`).
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


# Sparse per-file attachment; no classification rule reads it yet.
FileMetadata = Dict[str, str]

MODIFIED_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class FileDescriptor:
    """One regular file discovered during a scan."""

    path: str
    name: str
    size: int
    extension: str
    modified_time: datetime.datetime
    parent_dir: str
    content_hash: str = ""
    content_type: str = ""
    metadata: Optional[FileMetadata] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "path": self.path,
            "name": self.name,
            "size": self.size,
            "isDir": False,
            "extension": self.extension,
            "modifiedTime": self.modified_time.strftime(MODIFIED_TIME_FORMAT),
            "contentHash": self.content_hash,
            "mimeType": self.content_type,
            "parentDir": self.parent_dir,
        }
        if self.metadata:
            data["metadata"] = dict(self.metadata)
        return data


@dataclass(frozen=True)
class Classification:
    category: str
    reason: str


@dataclass(frozen=True)
class ProposedMove:
    """A candidate move of one file into its category folder."""

    source_path: str
    destination_path: str
    file_name: str
    reason: str
    category: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "sourcePath": self.source_path,
            "destinationPath": self.destination_path,
            "fileName": self.file_name,
            "reason": self.reason,
            "category": self.category,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProposedMove":
        """Build a move from its JSON shape.

        Missing ``fileName`` is derived from the source path; missing
        ``reason``/``category`` default to empty strings.  A missing
        source or destination raises ``KeyError``.
        """
        source = str(data["sourcePath"])
        file_name = data.get("fileName") or source.replace("\\", "/").rsplit("/", 1)[-1]
        return cls(
            source_path=source,
            destination_path=str(data["destinationPath"]),
            file_name=str(file_name),
            reason=str(data.get("reason", "")),
            category=str(data.get("category", "")),
        )


@dataclass
class AnalysisResult:
    total_files: int = 0
    proposed_moves: List[ProposedMove] = field(default_factory=list)
    error: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "totalFiles": self.total_files,
            "proposedMoves": [m.to_dict() for m in self.proposed_moves],
        }
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class MoveOutcome:
    """Aggregate result of one executed batch.

    ``success + failed`` always equals the number of moves attempted.
    """

    success: int = 0
    failed: int = 0
    failed_files: List[str] = field(default_factory=list)
    created_folders: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "failed": self.failed,
            "failedFiles": list(self.failed_files),
            "createdFolders": list(self.created_folders),
        }
