"""
Extract subsystem for TeXplorer.

Purpose: Turn a fetched source payload into the ordered list of files a
viewer shows.

Responsibilities:
- Dispatch each ArchiveKind to its decoder
- Name single-file payloads after the document id
- Run fetch -> decode -> order and report the DONE phase

Non-responsibilities:
- No rendering
- No writing to disk (see export)
"""

from .extract import (
    extract_payload,
    decode_payload,
    decode_raw_payload,
    done_progress,
    load_source,
    single_file_name,
    DECODERS,
)

__all__ = [
    "extract_payload",
    "decode_payload",
    "decode_raw_payload",
    "done_progress",
    "load_source",
    "single_file_name",
    "DECODERS",
]
