# tarball.py
# TeXplorer – Tarball subsystem: best-effort decoder for ustar/v7 tar streams

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from classify.classify import FileEntry, classify_file


# ============================================================
# Header Layout
# ============================================================

BLOCK_SIZE = 512

NAME_FIELD = slice(0, 100)
SIZE_FIELD = slice(124, 136)
TYPEFLAG_OFFSET = 156
MAGIC_FIELD = slice(257, 263)
PREFIX_FIELD = slice(345, 500)

# GNU headers ("ustar  ") reuse the prefix area for other fields
POSIX_MAGIC = b"ustar\x00"

# NUL (old v7 archives) or ASCII '0'
REGULAR_FILE_FLAGS = (0, ord("0"))


# ============================================================
# Output Format
# ============================================================

@dataclass(frozen=True)
class TarHeader:
    """Fields of one 512-byte header block that the decoder uses."""
    name: str
    size: int
    typeflag: int

    @property
    def is_regular_file(self) -> bool:
        return self.typeflag in REGULAR_FILE_FLAGS


@dataclass(frozen=True)
class TarMember:
    """A regular file extracted from the archive, not yet classified."""
    name: str
    data: bytes


# ============================================================
# Field Decoding
# ============================================================

def decode_name(field: bytes) -> str:
    """NUL-terminated name field to text."""
    return field.split(b"\0", 1)[0].decode("utf-8", errors="replace").strip()


def parse_octal(field: bytes) -> int:
    """
    Parse an ASCII octal numeric field.

    Anything that is not a plain non-negative octal number (base-256 sizes,
    garbage, empty fields) reads as 0.
    """
    text = field.split(b"\0", 1)[0].decode("ascii", errors="replace").strip()
    try:
        value = int(text, 8)
    except ValueError:
        return 0
    return value if value > 0 else 0


def padded_size(size: int) -> int:
    """Content size rounded up to the next block boundary."""
    return -(-size // BLOCK_SIZE) * BLOCK_SIZE


# ============================================================
# Cursor Scan
# ============================================================

def read_header(data: bytes, offset: int) -> Optional[TarHeader]:
    """
    Decode the header block at `offset`.

    Returns None at end of archive: fewer than one block left, or an empty
    name (the first zero block is taken as the end marker).
    """
    if len(data) - offset < BLOCK_SIZE:
        return None

    block = data[offset:offset + BLOCK_SIZE]
    name = decode_name(block[NAME_FIELD])
    if not name:
        return None

    if block[MAGIC_FIELD] == POSIX_MAGIC:
        prefix = decode_name(block[PREFIX_FIELD])
        if prefix:
            name = f"{prefix.rstrip('/')}/{name}"

    return TarHeader(
        name=name,
        size=parse_octal(block[SIZE_FIELD]),
        typeflag=block[TYPEFLAG_OFFSET],
    )


def read_member(data: bytes, offset: int) -> Tuple[Optional[TarMember], Optional[int]]:
    """
    Advance the scan by one header.

    Args:
        data: Whole tar stream
        offset: Offset of a header block

    Returns:
        (member, next_offset). member is None for skipped headers
        (directories, links, extended headers, empty files).
        next_offset is None once the end of the archive is reached.
    """
    header = read_header(data, offset)
    if header is None:
        return None, None

    content_offset = offset + BLOCK_SIZE
    next_offset = content_offset + padded_size(header.size)

    if not header.is_regular_file or header.size == 0:
        return None, next_offset

    # A truncated final member keeps whatever bytes are present
    content = data[content_offset:content_offset + header.size]
    return TarMember(name=header.name, data=content), next_offset


def iter_tar_members(data: bytes) -> Iterator[TarMember]:
    """Yield every regular, non-empty file in the stream, in archive order."""
    offset: Optional[int] = 0
    while offset is not None:
        member, offset = read_member(data, offset)
        if member is not None:
            yield member


def decode_tar(data: bytes) -> List[FileEntry]:
    """
    Decode a tar stream into classified file entries.

    Never raises on malformed structure; bad headers degrade to zero-length
    or skipped members and the scan continues.
    """
    return [classify_file(m.name, m.data) for m in iter_tar_members(data)]
