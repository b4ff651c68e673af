# sniff.py
# TeXplorer – Sniff subsystem: decide the container format of a fetched payload

import gzip
import io
import zipfile
import zlib
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


# ============================================================
# Exceptions
# ============================================================

class DecompressionError(Exception):
    """The gzip or zip primitive could not decode a buffer."""
    pass


# ============================================================
# Output Format
# ============================================================

class ArchiveKind(Enum):
    """Container formats a source payload can arrive in."""
    GZIP_TAR = "gzip_tar"
    GZIP_SINGLE_FILE = "gzip_single_file"
    PLAIN_TAR = "plain_tar"
    PLAIN_TEXT = "plain_text"
    ZIP = "zip"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class SniffResult:
    """
    Sniffing outcome.

    `data` is the buffer the matching decoder should read (the decompressed
    bytes for gzip variants). `members` is only set for ZIP.
    """
    kind: ArchiveKind
    data: bytes
    members: Optional[Dict[str, bytes]] = None


# ============================================================
# Signatures
# ============================================================

GZIP_MAGIC = b"\x1f\x8b"

TAR_MAGIC = b"ustar"
TAR_MAGIC_OFFSET = 257
TAR_MIN_LENGTH = 263

TAR_CONTENT_TYPES = ("application/x-eprint-tar", "application/x-tar")
TEXT_CONTENT_TYPES = ("text/", "application/x-tex")


def is_gzip(data: bytes) -> bool:
    return data[:2] == GZIP_MAGIC


def is_tar_archive(data: bytes) -> bool:
    """Check for the ustar magic at offset 257. Short buffers are never tar."""
    if len(data) < TAR_MIN_LENGTH:
        return False
    return data[TAR_MAGIC_OFFSET:TAR_MAGIC_OFFSET + len(TAR_MAGIC)] == TAR_MAGIC


# ============================================================
# Decompression Primitives
# ============================================================

def decompress_gzip(data: bytes) -> bytes:
    """Inflate a gzip stream. Raises DecompressionError on bad input."""
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        raise DecompressionError(f"Invalid gzip stream: {e}") from e


def decompress_zip(data: bytes) -> Dict[str, bytes]:
    """
    Read every file of a ZIP container into memory.

    Directory entries are skipped. Raises DecompressionError if the buffer
    is not a readable ZIP. zipfile raises a wide range of exception
    types on damaged containers, so any failure while reading counts.
    """
    members = {}
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as z:
            for info in z.infolist():
                if info.is_dir() or not info.filename.strip():
                    continue
                members[info.filename] = z.read(info)
    except Exception as e:
        raise DecompressionError(f"Invalid ZIP: {e}") from e
    return members


# ============================================================
# Sniffing
# ============================================================

def _content_type_matches(content_type: str, markers) -> bool:
    return any(marker in content_type for marker in markers)


def sniff_payload(data: bytes, content_type: Optional[str] = None) -> SniffResult:
    """
    Classify a payload by magic bytes and declared media type.

    Checks run in a fixed order and the first match wins:
    gzip magic, tar media type, text media type, ZIP, then UNKNOWN
    (read as raw text).

    Args:
        data: Complete payload
        content_type: Declared Content-Type header, if any

    Returns:
        SniffResult
    """
    ctype = (content_type or "").lower()

    if is_gzip(data):
        try:
            inflated = decompress_gzip(data)
        except DecompressionError:
            return SniffResult(ArchiveKind.UNKNOWN, data)
        if is_tar_archive(inflated):
            return SniffResult(ArchiveKind.GZIP_TAR, inflated)
        return SniffResult(ArchiveKind.GZIP_SINGLE_FILE, inflated)

    if _content_type_matches(ctype, TAR_CONTENT_TYPES):
        return SniffResult(ArchiveKind.PLAIN_TAR, data)

    if _content_type_matches(ctype, TEXT_CONTENT_TYPES):
        return SniffResult(ArchiveKind.PLAIN_TEXT, data)

    try:
        members = decompress_zip(data)
    except DecompressionError:
        return SniffResult(ArchiveKind.UNKNOWN, data)
    return SniffResult(ArchiveKind.ZIP, data, members)
