"""
Sniff subsystem for TeXplorer.

Purpose: Decide how a fetched source payload is packaged.

Responsibilities:
- Recognise gzip, tar, ZIP and plain text payloads
- Wrap the stdlib gzip/zipfile primitives behind DecompressionError

Non-responsibilities:
- No tar parsing (see tarball)
- No file classification
"""

from .sniff import (
    sniff_payload,
    is_gzip,
    is_tar_archive,
    decompress_gzip,
    decompress_zip,
    ArchiveKind,
    SniffResult,
    DecompressionError,
)

__all__ = [
    "sniff_payload",
    "is_gzip",
    "is_tar_archive",
    "decompress_gzip",
    "decompress_zip",
    "ArchiveKind",
    "SniffResult",
    "DecompressionError",
]
