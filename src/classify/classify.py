# classify.py
# TeXplorer – Classify subsystem: label decoded files and order them for display

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Iterable, List, Optional


# ============================================================
# Lookup Tables
# ============================================================

PRIMARY_EXTENSION = "tex"

# TeX sources, bibliographies, style/class files and LaTeX auxiliaries
TEXT_EXTENSIONS = frozenset({
    "tex",
    "bib",
    "sty",
    "cls",
    "bst",
    "txt",
    "md",
    "cfg",
    "def",
    "fd",
    "ins",
    "dtx",
    "ltx",
    "bbl",
    "clo",
})

IMAGE_EXTENSIONS = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "eps": "application/postscript",
    "ps": "application/postscript",
    "svg": "image/svg+xml",
}

PDF_MIME_TYPE = "application/pdf"
DEFAULT_BINARY_MIME_TYPE = "application/octet-stream"

TEXT_MIME_TYPES = {
    "tex": "text/x-tex",
    "ltx": "text/x-tex",
    "sty": "text/x-tex",
    "cls": "text/x-tex",
    "dtx": "text/x-tex",
    "bib": "text/x-bibtex",
    "bst": "text/x-bibtex",
}
DEFAULT_TEXT_MIME_TYPE = "text/plain"

LANGUAGE_MAP = {
    "tex": "latex",
    "sty": "latex",
    "cls": "latex",
    "ltx": "latex",
    "dtx": "latex",
    "bib": "bibtex",
    "bst": "bibtex",
}
DEFAULT_LANGUAGE = "plaintext"


# ============================================================
# Output Format
# ============================================================

@dataclass(frozen=True)
class Classification:
    """Name-derived labels for a file inside a source archive."""
    is_tex_source: bool
    is_text: bool
    is_image: bool
    is_pdf: bool
    mime_type: str
    language: str


@dataclass(frozen=True)
class FileEntry:
    """
    A decoded file from a source archive.

    Exactly one of `content` (text files) or `binary_payload` (everything
    else) is set. Entries are frozen once produced. Without an explicit
    mime_type, text entries are text/plain and binary ones octet-stream.
    """
    name: str
    content: Optional[str] = None
    binary_payload: Optional[bytes] = None
    mime_type: Optional[str] = None
    is_primary_source: bool = False
    language: str = DEFAULT_LANGUAGE

    def __post_init__(self):
        if not self.name:
            raise ValueError("FileEntry name must not be empty")
        if (self.content is None) == (self.binary_payload is None):
            raise ValueError(
                f"FileEntry {self.name!r} needs exactly one of content or binary_payload"
            )
        if self.mime_type is None:
            default = DEFAULT_TEXT_MIME_TYPE if self.content is not None else DEFAULT_BINARY_MIME_TYPE
            object.__setattr__(self, "mime_type", default)

    @property
    def is_text(self) -> bool:
        return self.content is not None

    @property
    def is_binary(self) -> bool:
        return self.binary_payload is not None

    @property
    def size(self) -> int:
        """Size in bytes (UTF-8 length for text entries)."""
        if self.binary_payload is not None:
            return len(self.binary_payload)
        return len(self.content.encode("utf-8"))


# ============================================================
# Classification
# ============================================================

def get_extension(name: str) -> str:
    """Lowercased extension without the dot, or '' if there is none."""
    return PurePosixPath(name).suffix.lower().lstrip(".")


def language_for(name: str) -> str:
    """Display language tag used by editors to pick a grammar."""
    return LANGUAGE_MAP.get(get_extension(name), DEFAULT_LANGUAGE)


def classify_name(name: str) -> Classification:
    """
    Classify a file purely from its name.

    Args:
        name: Archive-relative path

    Returns:
        Classification (total: every name maps to exactly one result)
    """
    ext = get_extension(name)

    if ext in TEXT_EXTENSIONS:
        return Classification(
            is_tex_source=ext == PRIMARY_EXTENSION,
            is_text=True,
            is_image=False,
            is_pdf=False,
            mime_type=TEXT_MIME_TYPES.get(ext, DEFAULT_TEXT_MIME_TYPE),
            language=language_for(name),
        )

    if ext in IMAGE_EXTENSIONS:
        return Classification(
            is_tex_source=False,
            is_text=False,
            is_image=True,
            is_pdf=False,
            mime_type=IMAGE_EXTENSIONS[ext],
            language=DEFAULT_LANGUAGE,
        )

    is_pdf = ext == "pdf"
    return Classification(
        is_tex_source=False,
        is_text=False,
        is_image=False,
        is_pdf=is_pdf,
        mime_type=PDF_MIME_TYPE if is_pdf else DEFAULT_BINARY_MIME_TYPE,
        language=DEFAULT_LANGUAGE,
    )


def classify_file(name: str, data: bytes) -> FileEntry:
    """
    Turn a named blob into a FileEntry.

    Text-extension files are decoded as strict UTF-8; if that fails the file
    is kept as an opaque binary instead.
    """
    labels = classify_name(name)

    if labels.is_text:
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            return FileEntry(
                name=name,
                binary_payload=data,
                mime_type=DEFAULT_BINARY_MIME_TYPE,
            )
        return FileEntry(
            name=name,
            content=text,
            mime_type=labels.mime_type,
            is_primary_source=labels.is_tex_source,
            language=labels.language,
        )

    return FileEntry(
        name=name,
        binary_payload=data,
        mime_type=labels.mime_type,
    )


def text_entry(name: str, data: bytes) -> FileEntry:
    """Build the synthetic single-file entry for an uncontained payload."""
    return FileEntry(
        name=name,
        content=data.decode("utf-8", errors="replace"),
        mime_type=TEXT_MIME_TYPES[PRIMARY_EXTENSION],
        is_primary_source=True,
        language=language_for(name),
    )


# ============================================================
# Ordering
# ============================================================

def sort_entries(entries: Iterable[FileEntry]) -> List[FileEntry]:
    """
    Order entries for display: primary sources first, then by name.

    Names compare case-sensitively by code point. The sort is stable.
    """
    return sorted(entries, key=lambda e: (not e.is_primary_source, e.name))


def first_primary_source(entries: List[FileEntry]) -> Optional[FileEntry]:
    """Entry a viewer should open first."""
    for entry in entries:
        if entry.is_primary_source:
            return entry
    return entries[0] if entries else None
