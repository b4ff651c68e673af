# extract.py
# TeXplorer – Extract subsystem: payload bytes -> ordered, classified file entries

import threading
from typing import Callable, Dict, List, Optional, Tuple

from classify.classify import FileEntry, PRIMARY_EXTENSION, classify_file, sort_entries, text_entry
from fetch.fetch import (
    DEFAULT_BASE_URL,
    DownloadProgress,
    Phase,
    ProgressSink,
    RawPayload,
    fetch_source,
    sanitize_id,
)
from sniff.sniff import ArchiveKind, SniffResult, sniff_payload
from tarball.tarball import decode_tar


# ============================================================
# Decoders
# ============================================================

def single_file_name(source_id: str) -> str:
    """Name given to a payload that is one bare TeX file."""
    return f"{sanitize_id(source_id)}.{PRIMARY_EXTENSION}"


def _decode_tar(result: SniffResult, source_id: str) -> List[FileEntry]:
    return decode_tar(result.data)


def _decode_single_file(result: SniffResult, source_id: str) -> List[FileEntry]:
    return [text_entry(single_file_name(source_id), result.data)]


def _decode_zip(result: SniffResult, source_id: str) -> List[FileEntry]:
    return [classify_file(name, data) for name, data in result.members.items()]


# Every ArchiveKind must have an entry here
DECODERS: Dict[ArchiveKind, Callable[[SniffResult, str], List[FileEntry]]] = {
    ArchiveKind.GZIP_TAR: _decode_tar,
    ArchiveKind.GZIP_SINGLE_FILE: _decode_single_file,
    ArchiveKind.PLAIN_TAR: _decode_tar,
    ArchiveKind.PLAIN_TEXT: _decode_single_file,
    ArchiveKind.ZIP: _decode_zip,
    ArchiveKind.UNKNOWN: _decode_single_file,
}


# ============================================================
# Core Extraction Functions
# ============================================================

def extract_payload(
    data: bytes,
    source_id: str,
    content_type: Optional[str] = None,
) -> Tuple[ArchiveKind, List[FileEntry]]:
    """
    Decode a fetched payload into display-ordered file entries.

    Args:
        data: Complete payload bytes
        source_id: Document identifier, used to name single-file payloads
        content_type: Declared Content-Type, if any

    Returns:
        (detected ArchiveKind, list of FileEntry with primary sources first)
    """
    result = sniff_payload(data, content_type)
    return result.kind, sort_entries(DECODERS[result.kind](result, source_id))


def decode_payload(
    data: bytes,
    source_id: str,
    content_type: Optional[str] = None,
) -> List[FileEntry]:
    return extract_payload(data, source_id, content_type)[1]


def decode_raw_payload(payload: RawPayload, source_id: str) -> List[FileEntry]:
    return decode_payload(payload.data, source_id, payload.content_type)


def done_progress(payload: RawPayload) -> DownloadProgress:
    """Final DONE event for a payload that has been decoded."""
    return DownloadProgress(
        phase=Phase.DONE,
        bytes_loaded=len(payload.data),
        bytes_total=payload.declared_length or len(payload.data),
        percent=100,
    )


def load_source(
    arxiv_id: str,
    base_url: str = DEFAULT_BASE_URL,
    on_progress: Optional[ProgressSink] = None,
    cancel: Optional[threading.Event] = None,
    **fetch_kwargs,
) -> List[FileEntry]:
    """
    Fetch and decode the sources of a paper.

    Either the full entry list is returned or FetchError is raised; nothing
    partial is ever handed back.

    Args:
        arxiv_id: Paper identifier
        base_url: Endpoint root
        on_progress: Receives DOWNLOADING..., EXTRACTING, DONE
        cancel: Set to abandon the download
        **fetch_kwargs: Forwarded to fetch_url (session, chunk_size, timeout, ...)

    Returns:
        List of FileEntry, primary sources first
    """
    payload = fetch_source(
        arxiv_id,
        base_url=base_url,
        on_progress=on_progress,
        cancel=cancel,
        **fetch_kwargs,
    )
    entries = decode_raw_payload(payload, arxiv_id)

    if on_progress is not None:
        on_progress(done_progress(payload))

    return entries
