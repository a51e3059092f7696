"""Category names and the fixed lookup tables used by the classifier.

The extension table maps a lowercase extension (with its leading dot)
to a category.  It is exposed as a read-only mapping so that the rule
data can be audited and tested on its own; user additions from
``config.json`` are merged into a new mapping by :func:`merge_extensions`
rather than mutating this one.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

IMAGES = "Images"
DOCUMENTS = "Documents"
VIDEOS = "Videos"
AUDIO = "Audio"
ARCHIVES = "Archives"
CODE = "Code"
APPLICATIONS = "Applications"
DUPLICATES = "Duplicates"
OTHER = "Other"

ALL_CATEGORIES: Tuple[str, ...] = (
    IMAGES, DOCUMENTS, VIDEOS, AUDIO, ARCHIVES, CODE, APPLICATIONS, DUPLICATES, OTHER,
)

# Label used in "<Kind> file (.ext)" reasons
_REASON_KIND: Mapping[str, str] = MappingProxyType({
    IMAGES: "Image",
    DOCUMENTS: "Document",
    VIDEOS: "Video",
    AUDIO: "Audio",
    ARCHIVES: "Archive",
    CODE: "Code",
    APPLICATIONS: "Application",
})

_EXTENSIONS_BY_CATEGORY: Dict[str, Tuple[str, ...]] = {
    IMAGES: (
        ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".svg", ".webp", ".ico",
        ".heic", ".raw", ".tiff",
    ),
    DOCUMENTS: (
        ".pdf", ".doc", ".docx", ".txt", ".rtf", ".odt", ".pages", ".tex",
        ".md", ".csv", ".xls", ".xlsx", ".ppt", ".pptx", ".key",
    ),
    VIDEOS: (
        ".mp4", ".avi", ".mov", ".mkv", ".wmv", ".flv", ".webm", ".m4v",
        ".mpg", ".mpeg",
    ),
    AUDIO: (".mp3", ".wav", ".flac", ".aac", ".m4a", ".wma", ".ogg", ".opus"),
    ARCHIVES: (".zip", ".rar", ".7z", ".tar", ".gz", ".bz2", ".xz", ".dmg"),
    CODE: (
        ".go", ".py", ".js", ".ts", ".java", ".c", ".cpp", ".h", ".cs", ".rb",
        ".php", ".swift", ".rs", ".kt", ".scala", ".sh", ".html", ".css",
        ".json", ".xml", ".yaml", ".yml", ".sql",
    ),
    APPLICATIONS: (".exe", ".app", ".deb", ".rpm", ".apk", ".msi"),
}

EXTENSION_CATEGORIES: Mapping[str, str] = MappingProxyType({
    ext: category
    for category, extensions in _EXTENSIONS_BY_CATEGORY.items()
    for ext in extensions
})

# Content-type labels without a telltale substring that still denote archives
ARCHIVE_CONTENT_TYPES = frozenset({
    "application/x-tar",
    "application/x-xz",
    "application/x-bzip2",
    "application/x-7z-compressed",
    "application/x-rar-compressed",
    "application/x-gzip",
    "application/zip",
})


def _is_document_type(label: str) -> bool:
    return (
        label == "application/pdf"
        or "word" in label
        or "document" in label
        or "sheet" in label
        or "excel" in label
        or "presentation" in label
        or "powerpoint" in label
    )


def _is_archive_type(label: str) -> bool:
    return label in ARCHIVE_CONTENT_TYPES or "zip" in label or "compressed" in label


def _is_application_type(label: str) -> bool:
    return "executable" in label or label.startswith("application/x-")


# Ordered decision table: first predicate that matches decides the category.
CONTENT_TYPE_RULES = (
    (lambda label: label.startswith("image/"), IMAGES),
    (lambda label: label.startswith("video/"), VIDEOS),
    (lambda label: label.startswith("audio/"), AUDIO),
    (lambda label: label.startswith("text/"), DOCUMENTS),
    (_is_document_type, DOCUMENTS),
    (_is_archive_type, ARCHIVES),
    (_is_application_type, APPLICATIONS),
)


def categorize_by_extension(
    extension: str, table: Mapping[str, str] = EXTENSION_CATEGORIES
) -> Tuple[str, str]:
    """Return ``(category, reason)`` for an extension using ``table``."""
    category = table.get(extension.lower())
    if category is None:
        return OTHER, f"Unknown file type ({extension or 'none'})"
    kind = _REASON_KIND.get(category, category)
    return category, f"{kind} file ({extension})"


def categorize_by_content_type(label: str) -> Optional[str]:
    """Return the category implied by a content-type label, or ``None``."""
    if not label:
        return None
    lowered = label.lower()
    for predicate, category in CONTENT_TYPE_RULES:
        if predicate(lowered):
            return category
    return None


def merge_extensions(extra: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    """Return a read-only table with ``extra`` entries layered on the defaults.

    Keys are normalised to lowercase with a leading dot.  Unknown category
    names raise ``ValueError``; ``Duplicates`` is reserved for the
    duplicate rule and may not be assigned to an extension.
    """
    if not extra:
        return EXTENSION_CATEGORIES
    merged = dict(EXTENSION_CATEGORIES)
    for ext, category in extra.items():
        if category not in ALL_CATEGORIES or category == DUPLICATES:
            raise ValueError(f"Unknown category '{category}' for extension '{ext}'")
        key = ext.lower()
        if not key.startswith("."):
            key = "." + key
        merged[key] = category
    return MappingProxyType(merged)
