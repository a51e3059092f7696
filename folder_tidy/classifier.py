"""File classification.

A :class:`Classifier` evaluates :data:`CLASSIFICATION_RULES` in order and
the first rule returning a :class:`Classification` decides the file's
category.  The extension rule always matches, so every file receives
exactly one ``(category, reason)`` pair.  To add a rule, insert it into
the tuple at the precedence it should have.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, Tuple

from .categories import (
    DUPLICATES,
    EXTENSION_CATEGORIES,
    categorize_by_content_type,
    categorize_by_extension,
)
from .context import DirectoryContext, build_directory_context, directory_of
from .models import Classification, FileDescriptor


DEFAULT_AFFINITY_MIN_FILES = 3
DIGEST_PREFIX_LENGTH = 8


@dataclass(frozen=True)
class Classifier:
    """Apply the ordered classification rules to one descriptor."""

    extension_table: Mapping[str, str] = field(default_factory=lambda: EXTENSION_CATEGORIES)
    affinity_min_files: int = DEFAULT_AFFINITY_MIN_FILES

    def base_category(self, descriptor: FileDescriptor) -> Tuple[str, str]:
        """Category and reason from the extension alone."""
        return categorize_by_extension(descriptor.extension, self.extension_table)

    def build_context(self, files) -> DirectoryContext:
        return build_directory_context(files, self.base_category)

    def classify(self, descriptor: FileDescriptor, context: DirectoryContext) -> Classification:
        base = Classification(*self.base_category(descriptor))
        for _name, rule in CLASSIFICATION_RULES:
            result = rule(self, descriptor, context, base)
            if result is not None:
                return result
        return base


Rule = Callable[[Classifier, FileDescriptor, DirectoryContext, Classification], Optional[Classification]]


def duplicate_rule(
    classifier: Classifier, descriptor: FileDescriptor, context: DirectoryContext, base: Classification
) -> Optional[Classification]:
    if len(context.duplicates_of(descriptor)) > 1:
        prefix = descriptor.content_hash[:DIGEST_PREFIX_LENGTH]
        return Classification(DUPLICATES, f"Duplicate file (hash: {prefix}...)")
    return None


def content_type_rule(
    classifier: Classifier, descriptor: FileDescriptor, context: DirectoryContext, base: Classification
) -> Optional[Classification]:
    category = categorize_by_content_type(descriptor.content_type)
    if category and category != base.category:
        return Classification(category, f"{base.reason} (MIME: {descriptor.content_type})")
    return None


def affinity_rule(
    classifier: Classifier, descriptor: FileDescriptor, context: DirectoryContext, base: Classification
) -> Optional[Classification]:
    directory = directory_of(descriptor)
    dominant = context.dominant_types.get(directory)
    if not dominant or dominant != base.category:
        return None
    count = context.dominant_counts.get(directory, 0)
    if count < classifier.affinity_min_files:
        return None
    reason = f"Related to {count - 1} other {dominant} files in same directory"
    # Already named after its category: no <category>/<category> nesting
    if descriptor.parent_dir == dominant:
        return Classification(dominant, reason)
    return Classification(f"{dominant}/{descriptor.parent_dir}", reason)


def extension_rule(
    classifier: Classifier, descriptor: FileDescriptor, context: DirectoryContext, base: Classification
) -> Optional[Classification]:
    return base


CLASSIFICATION_RULES: Tuple[Tuple[str, Rule], ...] = (
    ("duplicate", duplicate_rule),
    ("content-type", content_type_rule),
    ("directory-affinity", affinity_rule),
    ("extension", extension_rule),
)


def category_parts(category: str) -> Tuple[str, ...]:
    """Split a category (possibly ``"<dominant>/<dir>"``) into path parts."""
    return tuple(part for part in category.split("/") if part)


def is_in_category(descriptor: FileDescriptor, category: str) -> bool:
    """True when the file's directory already ends with the category path.

    For a plain category this compares the parent directory's base name;
    for an affinity category it compares the trailing components, so a
    file already at ``.../Images/shoot`` matches ``Images/shoot``.
    """
    parts = category_parts(category)
    directory_parts = tuple(os.path.normpath(directory_of(descriptor)).split(os.sep))
    if not parts or len(directory_parts) < len(parts):
        return False
    return directory_parts[-len(parts):] == parts
