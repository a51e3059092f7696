"""Per-scan directory context used by the classifier.

:func:`build_directory_context` is the only constructor: it groups the
complete descriptor list by containing directory and by content digest
in a single pass, then derives each directory's dominant category.  The
resulting :class:`DirectoryContext` exposes read-only mappings and is
not updated afterwards.
"""

from __future__ import annotations

import os
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Mapping, Tuple

from .models import FileDescriptor


# Returns (category, reason) from the extension alone
BaseCategorizer = Callable[[FileDescriptor], Tuple[str, str]]


@dataclass(frozen=True)
class DirectoryContext:
    files_by_dir: Mapping[str, Tuple[FileDescriptor, ...]]
    files_by_hash: Mapping[str, Tuple[FileDescriptor, ...]]
    dominant_types: Mapping[str, str]
    dominant_counts: Mapping[str, int]

    def duplicates_of(self, descriptor: FileDescriptor) -> Tuple[FileDescriptor, ...]:
        if not descriptor.content_hash:
            return ()
        return self.files_by_hash.get(descriptor.content_hash, ())


def directory_of(descriptor: FileDescriptor) -> str:
    return os.path.dirname(descriptor.path)


def _dominant_category(categories: List[str]) -> Tuple[str, int]:
    """Return the most common category and its count, or ``("", 0)``.

    A category is dominant only when it holds a strict majority.
    """
    if not categories:
        return "", 0
    category, count = Counter(categories).most_common(1)[0]
    if count * 2 > len(categories):
        return category, count
    return "", 0


def build_directory_context(
    files: Iterable[FileDescriptor], categorize: BaseCategorizer
) -> DirectoryContext:
    by_dir: Dict[str, List[FileDescriptor]] = {}
    by_hash: Dict[str, List[FileDescriptor]] = {}
    for descriptor in files:
        by_dir.setdefault(directory_of(descriptor), []).append(descriptor)
        if descriptor.content_hash:
            by_hash.setdefault(descriptor.content_hash, []).append(descriptor)

    dominant_types: Dict[str, str] = {}
    dominant_counts: Dict[str, int] = {}
    for directory, members in by_dir.items():
        category, count = _dominant_category([categorize(d)[0] for d in members])
        if category:
            dominant_types[directory] = category
            dominant_counts[directory] = count

    return DirectoryContext(
        files_by_dir=MappingProxyType({k: tuple(v) for k, v in by_dir.items()}),
        files_by_hash=MappingProxyType({k: tuple(v) for k, v in by_hash.items()}),
        dominant_types=MappingProxyType(dominant_types),
        dominant_counts=MappingProxyType(dominant_counts),
    )
