from __future__ import annotations

import datetime
import os
from typing import List, Optional

import pytest

from folder_tidy.categories import (
    EXTENSION_CATEGORIES,
    categorize_by_content_type,
    categorize_by_extension,
    merge_extensions,
)
from folder_tidy.classifier import CLASSIFICATION_RULES, Classifier, is_in_category
from folder_tidy.models import FileDescriptor


ROOT = os.path.join(os.sep, "data", "root")


def _fd(directory: str, name: str, content_hash: str = "", content_type: str = "") -> FileDescriptor:
    path = os.path.join(ROOT, directory, name) if directory else os.path.join(ROOT, name)
    return FileDescriptor(
        path=path,
        name=name,
        size=1,
        extension=os.path.splitext(name)[1].lower(),
        modified_time=datetime.datetime(2024, 1, 1),
        parent_dir=os.path.basename(os.path.dirname(path)),
        content_hash=content_hash,
        content_type=content_type,
    )


def _classify(files: List[FileDescriptor], target: FileDescriptor, classifier: Optional[Classifier] = None):
    classifier = classifier or Classifier()
    return classifier.classify(target, classifier.build_context(files))


# --- tables ---------------------------------------------------------------------


def test_extension_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        EXTENSION_CATEGORIES[".foo"] = "Code"  # type: ignore[index]


@pytest.mark.parametrize(
    "ext, category",
    [(".jpg", "Images"), (".pdf", "Documents"), (".mkv", "Videos"), (".flac", "Audio"),
     (".7z", "Archives"), (".py", "Code"), (".msi", "Applications"), (".xyz", "Other")],
)
def test_extension_categories(ext: str, category: str) -> None:
    assert categorize_by_extension(ext)[0] == category


def test_extension_reasons() -> None:
    assert categorize_by_extension(".png") == ("Images", "Image file (.png)")
    assert categorize_by_extension(".xyz") == ("Other", "Unknown file type (.xyz)")


def test_default_classifier_uses_builtin_table() -> None:
    classifier = Classifier()
    assert classifier.extension_table is EXTENSION_CATEGORIES
    assert classifier.affinity_min_files == 3
    assert Classifier().extension_table is Classifier().extension_table
    assert categorize_by_extension("") == ("Other", "Unknown file type (none)")


@pytest.mark.parametrize(
    "label, category",
    [
        ("image/png", "Images"),
        ("video/mp4", "Videos"),
        ("audio/mpeg", "Audio"),
        ("text/plain; charset=utf-8", "Documents"),
        ("application/pdf", "Documents"),
        ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", "Documents"),
        ("application/msword", "Documents"),
        ("application/zip", "Archives"),
        ("application/x-gzip", "Archives"),
        ("application/x-xz", "Archives"),
        ("application/x-tar", "Archives"),
        ("application/x-msdownload", "Applications"),
        ("application/x-executable", "Applications"),
        ("application/octet-stream", None),
        ("application/wasm", None),
        ("", None),
    ],
)
def test_content_type_table(label: str, category: Optional[str]) -> None:
    assert categorize_by_content_type(label) == category


def test_merge_extensions() -> None:
    table = merge_extensions({"psd": "Images", ".Sketch": "Images"})
    assert table[".psd"] == "Images"
    assert table[".sketch"] == "Images"
    assert ".psd" not in EXTENSION_CATEGORIES
    with pytest.raises(ValueError):
        merge_extensions({".foo": "Duplicates"})
    with pytest.raises(ValueError):
        merge_extensions({".foo": "Nonsense"})


# --- rules ----------------------------------------------------------------------


def test_rule_precedence_order() -> None:
    assert [name for name, _ in CLASSIFICATION_RULES] == [
        "duplicate", "content-type", "directory-affinity", "extension",
    ]


def test_duplicate_wins_over_everything() -> None:
    digest = "abcdef0123456789" * 4
    a = _fd("Pics", "a.jpg", digest, "image/jpeg")
    b = _fd("Other", "b.txt", digest, "text/plain; charset=utf-8")
    files = [a, b] + [_fd("Pics", f"p{i}.jpg", f"h{i}", "image/jpeg") for i in range(4)]
    result = _classify(files, a)
    assert result.category == "Duplicates"
    assert result.reason == "Duplicate file (hash: abcdef01...)"
    assert _classify(files, b).category == "Duplicates"


def test_single_hash_member_is_not_a_duplicate() -> None:
    a = _fd("", "a.jpg", "h1", "image/jpeg")
    assert _classify([a], a).category == "Images"


def test_empty_hash_never_groups() -> None:
    a = _fd("", "a.txt")
    b = _fd("", "b.txt")
    assert _classify([a, b], a).category == "Documents"


def test_content_type_overrides_extension() -> None:
    fake = _fd("", "holiday.txt", "h1", "image/png")
    result = _classify([fake], fake)
    assert result.category == "Images"
    assert result.reason == "Document file (.txt) (MIME: image/png)"


def test_unknown_extension_with_known_content_type() -> None:
    mystery = _fd("", "mystery", "h1", "application/pdf")
    result = _classify([mystery], mystery)
    assert result.category == "Documents"
    assert result.reason == "Unknown file type (none) (MIME: application/pdf)"


def test_unmapped_content_type_falls_back_to_extension() -> None:
    code = _fd("", "main.py", "h1", "application/octet-stream")
    assert _classify([code], code).category == "Code"


def test_affinity_nests_under_dominant_category() -> None:
    files = [_fd("Shoot", f"img{i}.jpg", f"h{i}", "image/jpeg") for i in range(4)]
    files.append(_fd("Shoot", "notes.txt", "h9", "text/plain; charset=utf-8"))
    result = _classify(files, files[0])
    assert result.category == "Images/Shoot"
    assert result.reason == "Related to 3 other Images files in same directory"
    # Non-matching file in the same directory is unaffected
    assert _classify(files, files[-1]).category == "Documents"


def test_affinity_needs_strict_majority() -> None:
    files = [_fd("Mixed", f"img{i}.jpg", f"h{i}") for i in range(3)]
    files += [_fd("Mixed", f"doc{i}.pdf", f"d{i}") for i in range(3)]
    assert _classify(files, files[0]).category == "Images"


def test_affinity_needs_three_dominant_files() -> None:
    files = [_fd("Pair", "a.jpg", "h1"), _fd("Pair", "b.jpg", "h2"), _fd("Pair", "c.txt", "h3")]
    assert _classify(files, files[0]).category == "Images"


def test_affinity_threshold_is_configurable() -> None:
    files = [_fd("Pair", "a.jpg", "h1"), _fd("Pair", "b.jpg", "h2")]
    result = _classify(files, files[0], Classifier(affinity_min_files=2))
    assert result.category == "Images/Pair"


def test_affinity_directory_named_after_category_is_not_nested() -> None:
    files = [_fd("Images", f"img{i}.jpg", f"h{i}") for i in range(4)]
    files.append(_fd("Images", "notes.txt", "h9"))
    assert _classify(files, files[0]).category == "Images"


def test_extension_overrides_from_config() -> None:
    psd = _fd("", "art.psd", "h1")
    classifier = Classifier(extension_table=merge_extensions({".psd": "Images"}))
    assert _classify([psd], psd, classifier).category == "Images"


# --- placement ------------------------------------------------------------------


def test_is_in_category_plain_and_nested() -> None:
    assert is_in_category(_fd("Images", "a.jpg"), "Images")
    assert not is_in_category(_fd("Photos", "a.jpg"), "Images")
    assert is_in_category(_fd(os.path.join("Images", "Shoot"), "a.jpg"), "Images/Shoot")
    assert not is_in_category(_fd("Shoot", "a.jpg"), "Images/Shoot")
    assert not is_in_category(_fd(os.path.join("Other", "Shoot"), "a.jpg"), "Images/Shoot")
