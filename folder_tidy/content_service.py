"""Content hashing and content-type sniffing.

Both operations read file bytes only and never raise for I/O problems:
a file that disappears or cannot be opened gets an empty digest or an
empty content-type label, and the caller falls back to extension-based
classification.

The sniffer mirrors the web content-sniffing conventions: it inspects at
most :data:`SNIFF_BYTES` bytes, checks a fixed list of magic numbers and
markup markers in order, and otherwise decides between plain text and
``application/octet-stream`` by looking for binary control bytes.
"""

from __future__ import annotations

import hashlib
import struct
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from .models import FileDescriptor


SNIFF_BYTES = 512
HASH_CHUNK_SIZE = 1024 * 1024
SUPPORTED_HASH_ALGORITHMS = ("sha256", "sha1", "md5")

TEXT_UTF8 = "text/plain; charset=utf-8"
OCTET_STREAM = "application/octet-stream"


# --- hashing --------------------------------------------------------------------


def compute_digest(path: Path, algorithm: str = "sha256") -> str:
    """Return the hex digest of the full file contents, or ``""`` on failure."""
    if algorithm not in SUPPORTED_HASH_ALGORITHMS:
        raise ValueError(f"Unsupported hash algorithm: {algorithm}")
    digest = hashlib.new(algorithm)
    try:
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(HASH_CHUNK_SIZE), b""):
                digest.update(chunk)
    except OSError:
        return ""
    return digest.hexdigest()


# --- sniffers -------------------------------------------------------------------

# Bytes that never appear in text content
_BINARY_BYTES = frozenset(list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20)))
_WHITESPACE = b"\t\n\x0c\r "

_HTML_MARKERS = (
    b"<!DOCTYPE HTML", b"<HTML", b"<HEAD", b"<SCRIPT", b"<IFRAME", b"<H1", b"<DIV",
    b"<FONT", b"<TABLE", b"<A", b"<STYLE", b"<TITLE", b"<B", b"<BODY", b"<BR",
    b"<P", b"<!--",
)

# (prefix, label) checked with startswith, in order
_EXACT_SIGNATURES: Tuple[Tuple[bytes, str], ...] = (
    (b"%PDF-", "application/pdf"),
    (b"%!PS-Adobe-", "application/postscript"),
    (b"\xFE\xFF", "text/plain; charset=utf-16be"),
    (b"\xFF\xFE", "text/plain; charset=utf-16le"),
    (b"\xEF\xBB\xBF", TEXT_UTF8),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xFF\xD8\xFF", "image/jpeg"),
    (b"BM", "image/bmp"),
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b"\x00\x00\x02\x00", "image/x-icon"),
    (b"II*\x00", "image/tiff"),
    (b"MM\x00*", "image/tiff"),
    (b"OggS\x00", "application/ogg"),
    (b".snd", "audio/basic"),
    (b"MThd\x00\x00\x00\x06", "audio/midi"),
    (b"ID3", "audio/mpeg"),
    (b"fLaC", "audio/flac"),
    (b"\x1A\x45\xDF\xA3", "video/webm"),
    (b"\x1F\x8B\x08", "application/x-gzip"),
    (b"BZh", "application/x-bzip2"),
    (b"\xFD7zXZ\x00", "application/x-xz"),
    (b"7z\xBC\xAF\x27\x1C", "application/x-7z-compressed"),
    (b"Rar!\x1A\x07\x00", "application/x-rar-compressed"),
    (b"Rar!\x1A\x07\x01\x00", "application/x-rar-compressed"),
    (b"\xD0\xCF\x11\xE0\xA1\xB1\x1A\xE1", "application/msword"),
    (b"\x00asm", "application/wasm"),
    (b"MZ", "application/x-msdownload"),
    (b"\x7FELF", "application/x-executable"),
    (b"\xCF\xFA\xED\xFE", "application/x-mach-binary"),
    (b"\xCE\xFA\xED\xFE", "application/x-mach-binary"),
    (b"\xFE\xED\xFA\xCF", "application/x-mach-binary"),
    (b"\xFE\xED\xFA\xCE", "application/x-mach-binary"),
)

_RIFF_FORMATS = {
    b"WAVE": "audio/wave",
    b"AVI ": "video/avi",
    b"WEBP": "image/webp",
}

_ODF_PREFIX = b"application/vnd.oasis.opendocument."

_OOXML_MEMBERS = (
    (b"word/", "application/vnd.openxmlformats-officedocument.wordprocessingml.document"),
    (b"xl/", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"),
    (b"ppt/", "application/vnd.openxmlformats-officedocument.presentationml.presentation"),
)


def _read_prefix(path: Path, size: int = SNIFF_BYTES) -> bytes:
    with open(path, "rb") as f:
        return f.read(size)


def _sniff_markup(head: bytes) -> Optional[str]:
    body = head.lstrip(_WHITESPACE)
    upper = body[:16].upper()
    for marker in _HTML_MARKERS:
        if upper.startswith(marker):
            # Marker must be followed by a tag-terminating byte
            after = body[len(marker):len(marker) + 1]
            if after in (b" ", b">"):
                return "text/html; charset=utf-8"
    if body.startswith(b"<?xml"):
        return "text/xml; charset=utf-8"
    return None


def _sniff_riff(head: bytes) -> Optional[str]:
    if len(head) >= 12 and head[:4] == b"RIFF":
        return _RIFF_FORMATS.get(head[8:12])
    if len(head) >= 12 and head[:4] == b"FORM" and head[8:12] == b"AIFF":
        return "audio/aiff"
    return None


def _sniff_mp4(head: bytes) -> Optional[str]:
    """Detect ISO base media files (``ftyp`` box at offset 4)."""
    if len(head) < 12 or head[4:8] != b"ftyp":
        return None
    box_size = struct.unpack(">I", head[:4])[0]
    if box_size % 4 != 0 or box_size < 12 or len(head) < box_size:
        return None
    brands = [head[8:11]] + [head[i:i + 3] for i in range(16, box_size, 4)]
    if b"mp4" in brands or b"iso" in brands or b"M4V" in brands or b"qt " in brands:
        return "video/mp4"
    if b"M4A" in brands:
        return "audio/mp4"
    return None


def _sniff_mp3_frame(head: bytes) -> Optional[str]:
    if len(head) > 2 and head[0] == 0xFF and (head[1] & 0xE0) == 0xE0:
        return "audio/mpeg"
    return None


_ZIP_LOCAL_HEADER = b"PK\x03\x04"
_ZIP_DATA_DESCRIPTOR_FLAG = 0x08


def _zip_members(head: bytes) -> Iterator[Tuple[bytes, bytes]]:
    """Yield ``(name, data)`` for each local file header visible in ``head``.

    Stops at the first member whose sizes live in a trailing data
    descriptor, since the next header cannot be located from the prefix.
    """
    offset = 0
    while head[offset:offset + 4] == _ZIP_LOCAL_HEADER and offset + 30 <= len(head):
        flags = struct.unpack("<H", head[offset + 6:offset + 8])[0]
        compressed_size = struct.unpack("<I", head[offset + 18:offset + 22])[0]
        name_len, extra_len = struct.unpack("<HH", head[offset + 26:offset + 30])
        name_start = offset + 30
        data_start = name_start + name_len + extra_len
        yield head[name_start:name_start + name_len], head[data_start:data_start + compressed_size]
        if flags & _ZIP_DATA_DESCRIPTOR_FLAG:
            return
        offset = data_start + compressed_size


def _sniff_zip(head: bytes) -> Optional[str]:
    """Recognise zip archives and refine office documents by member names."""
    if not head.startswith(_ZIP_LOCAL_HEADER):
        return None
    generic_office = False
    for index, (name, data) in enumerate(_zip_members(head)):
        if index == 0 and name == b"mimetype":
            if data.startswith(_ODF_PREFIX) or data.startswith(b"application/epub+zip"):
                return data.decode("ascii", errors="ignore").strip()
        for member, label in _OOXML_MEMBERS:
            if name.startswith(member):
                return label
        if name == b"[Content_Types].xml":
            generic_office = True
    if generic_office:
        return "application/vnd.openxmlformats-officedocument"
    return "application/zip"


def _sniff_tar(head: bytes) -> Optional[str]:
    if len(head) >= 262 and head[257:262] == b"ustar":
        return "application/x-tar"
    return None


def _sniff_text(head: bytes) -> str:
    if any(b in _BINARY_BYTES for b in head):
        return OCTET_STREAM
    return TEXT_UTF8


# Structural sniffers run after the fixed-prefix signatures
_SNIFFERS: Tuple[Callable[[bytes], Optional[str]], ...] = (
    _sniff_riff,
    _sniff_mp4,
    _sniff_zip,
    _sniff_tar,
)


def sniff_bytes(head: bytes) -> str:
    """Return a content-type label for a byte prefix (empty for no bytes)."""
    head = head[:SNIFF_BYTES]
    if not head:
        return ""
    markup = _sniff_markup(head)
    if markup:
        return markup
    for prefix, label in _EXACT_SIGNATURES:
        if head.startswith(prefix):
            return label
    for sniffer in _SNIFFERS:
        label = sniffer(head)
        if label:
            return label
    frame = _sniff_mp3_frame(head)
    if frame:
        return frame
    return _sniff_text(head)


def detect_content_type(path: Path) -> str:
    """Sniff the first :data:`SNIFF_BYTES` of ``path``; ``""`` on failure."""
    try:
        head = _read_prefix(path)
    except OSError:
        return ""
    return sniff_bytes(head)


# --- enrichment -----------------------------------------------------------------


def enrich_descriptor(descriptor: FileDescriptor, algorithm: str = "sha256") -> FileDescriptor:
    """Fill in digest and content type for one descriptor, in place."""
    path = Path(descriptor.path)
    descriptor.content_hash = compute_digest(path, algorithm)
    descriptor.content_type = detect_content_type(path)
    return descriptor


def enrich_descriptors(
    descriptors: Sequence[FileDescriptor],
    algorithm: str = "sha256",
    workers: int = 1,
) -> List[FileDescriptor]:
    """Hash and sniff every descriptor, preserving input order.

    With ``workers > 1`` the per-file reads run on a thread pool; the
    call returns only once every file has been processed.
    """
    worker_count = max(1, int(workers))
    if worker_count <= 1 or len(descriptors) <= 1:
        return [enrich_descriptor(d, algorithm) for d in descriptors]

    with ThreadPoolExecutor(max_workers=worker_count) as executor:
        return list(executor.map(lambda d: enrich_descriptor(d, algorithm), descriptors))
