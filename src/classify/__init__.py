"""
Classify subsystem for TeXplorer.

Purpose: Label every decoded archive member and order the result for display.

Responsibilities:
- Map a file name to text/image/pdf/other, MIME type and language tag
- Decode text members (strict UTF-8, binary on failure)
- Stable primary-source-first ordering

Non-responsibilities:
- No archive parsing
- No rendering
"""

from .classify import (
    classify_name,
    classify_file,
    text_entry,
    language_for,
    sort_entries,
    first_primary_source,
    Classification,
    FileEntry,
    PRIMARY_EXTENSION,
    TEXT_EXTENSIONS,
    IMAGE_EXTENSIONS,
)

__all__ = [
    "classify_name",
    "classify_file",
    "text_entry",
    "language_for",
    "sort_entries",
    "first_primary_source",
    "Classification",
    "FileEntry",
    "PRIMARY_EXTENSION",
    "TEXT_EXTENSIONS",
    "IMAGE_EXTENSIONS",
]
