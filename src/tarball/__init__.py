# tarball/__init__.py
# TeXplorer – Tarball subsystem

from .tarball import (
    decode_tar,
    iter_tar_members,
    read_member,
    read_header,
    parse_octal,
    TarHeader,
    TarMember,
    BLOCK_SIZE,
)

__all__ = [
    "decode_tar",
    "iter_tar_members",
    "read_member",
    "read_header",
    "parse_octal",
    "TarHeader",
    "TarMember",
    "BLOCK_SIZE",
]
