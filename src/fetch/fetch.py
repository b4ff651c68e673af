# fetch.py
# TeXplorer – Fetch subsystem: stream a paper's source payload with progress events

import re
import threading
import requests
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional


# ============================================================
# Exceptions
# ============================================================

class FetchError(Exception):
    pass


class FetchCancelled(FetchError):
    pass


# ============================================================
# Output Format
# ============================================================

class Phase(Enum):
    """Progress phases, always emitted in this order."""
    DOWNLOADING = "downloading"
    EXTRACTING = "extracting"
    DONE = "done"


@dataclass(frozen=True)
class DownloadProgress:
    """One progress update. Transient; every event replaces the previous one."""
    phase: Phase
    bytes_loaded: int
    bytes_total: int
    percent: int


@dataclass(frozen=True)
class RawPayload:
    """Bytes returned by the source endpoint plus the transport's hints."""
    data: bytes
    declared_length: Optional[int] = None
    content_type: Optional[str] = None


ProgressSink = Callable[[DownloadProgress], None]


# ============================================================
# Configuration
# ============================================================

DEFAULT_BASE_URL = "https://arxiv.org"
DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_TIMEOUT = 60  # seconds, passed straight to requests
DEFAULT_USER_AGENT = "texplorer/1.0"


# ============================================================
# arXiv Identifiers
# ============================================================

# abs/, pdf/, src/ and e-print/ pages all end in the paper id
ARXIV_URL_PATTERN = re.compile(r"arxiv\.org/(?:abs|pdf|src|e-print)/([^?#]+)", re.IGNORECASE)


def parse_arxiv_id(text: str) -> str:
    """
    Extract an arXiv identifier from an id or an arxiv.org URL.

    Supports formats:
    - 2301.01234 / 2301.01234v2
    - hep-th/9901001
    - https://arxiv.org/abs/2301.01234
    - https://arxiv.org/pdf/2301.01234v1.pdf

    Args:
        text: Identifier or URL

    Returns:
        The identifier
    """
    text = (text or "").strip()

    match = ARXIV_URL_PATTERN.search(text)
    if match:
        text = match.group(1)
        if text.lower().endswith(".pdf"):
            text = text[:-4]
    elif "://" in text or "arxiv.org" in text.lower():
        raise FetchError(f"Not an arXiv paper URL: {text}")

    text = text.strip("/")
    if not text:
        raise FetchError("Empty arXiv identifier")
    return text


def sanitize_id(arxiv_id: str) -> str:
    """Turn an identifier into a safe file-name stem (hep-th/9901001 -> hep-th_9901001)."""
    stem = re.sub(r"[^A-Za-z0-9._-]", "_", arxiv_id.strip())
    stem = stem.strip(".")
    return stem or "source"


def source_url(arxiv_id: str, base_url: str = DEFAULT_BASE_URL) -> str:
    """Document-source endpoint for an identifier."""
    return f"{base_url.rstrip('/')}/src/{arxiv_id}"


# ============================================================
# Progress Accounting
# ============================================================

def compute_percent(loaded: int, total: Optional[int]) -> int:
    """Whole-number percentage rounded half up, 0 when the total is unknown."""
    if not total:
        return 0
    return int(loaded * 100 / total + 0.5)


def read_stream(
    chunks: Iterable[bytes],
    declared_total: Optional[int] = None,
    on_progress: Optional[ProgressSink] = None,
    cancel: Optional[threading.Event] = None,
) -> bytes:
    """
    Accumulate a chunked byte stream, reporting progress per chunk.

    Emits one DOWNLOADING event per non-empty chunk and a single EXTRACTING
    event (100%) once the stream is exhausted.

    Args:
        chunks: Incremental byte source
        declared_total: Content-Length, if the transport announced one
        on_progress: Callback receiving DownloadProgress events
        cancel: Event checked before each chunk is accepted

    Returns:
        All chunks joined into one buffer
    """
    buffer: List[bytes] = []
    loaded = 0

    for chunk in chunks:
        if cancel is not None and cancel.is_set():
            raise FetchCancelled("Download cancelled")
        if not chunk:
            continue

        buffer.append(chunk)
        loaded += len(chunk)

        if on_progress is not None:
            on_progress(DownloadProgress(
                phase=Phase.DOWNLOADING,
                bytes_loaded=loaded,
                bytes_total=declared_total or loaded,
                percent=compute_percent(loaded, declared_total),
            ))

    if cancel is not None and cancel.is_set():
        raise FetchCancelled("Download cancelled")

    data = b"".join(buffer)

    if on_progress is not None:
        on_progress(DownloadProgress(
            phase=Phase.EXTRACTING,
            bytes_loaded=len(data),
            bytes_total=declared_total or len(data),
            percent=100,
        ))

    return data


# ============================================================
# Core Fetch Functions
# ============================================================

def _declared_length(headers) -> Optional[int]:
    value = headers.get("Content-Length")
    if value is None:
        return None
    try:
        length = int(value)
    except ValueError:
        return None
    return length if length > 0 else None


def fetch_url(
    url: str,
    session: Optional[requests.Session] = None,
    on_progress: Optional[ProgressSink] = None,
    cancel: Optional[threading.Event] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
) -> RawPayload:
    """
    Download a URL as a RawPayload, streaming it chunk by chunk.

    Raises:
        FetchError: non-success status, connection or read failure
        FetchCancelled: `cancel` was set before the body was complete
    """
    http = session or requests
    try:
        resp = http.get(url, stream=True, timeout=timeout, headers={"User-Agent": user_agent})
    except requests.RequestException as e:
        raise FetchError(f"Failed to fetch TeX source: {e}") from e

    with resp:
        if not resp.ok:
            raise FetchError(f"Failed to fetch TeX source: {resp.status_code} {resp.reason}")

        declared = _declared_length(resp.headers)
        try:
            data = read_stream(
                resp.iter_content(chunk_size=chunk_size),
                declared_total=declared,
                on_progress=on_progress,
                cancel=cancel,
            )
        except requests.RequestException as e:
            raise FetchError(f"Failed to read TeX source: {e}") from e

        return RawPayload(
            data=data,
            declared_length=declared,
            content_type=resp.headers.get("Content-Type"),
        )


def fetch_source(
    arxiv_id: str,
    base_url: str = DEFAULT_BASE_URL,
    **kwargs,
) -> RawPayload:
    """
    Fetch the source payload of an arXiv paper.

    Args:
        arxiv_id: Paper identifier (see parse_arxiv_id)
        base_url: Endpoint root (default: https://arxiv.org)
        **kwargs: Forwarded to fetch_url (session, on_progress, cancel, ...)

    Returns:
        RawPayload
    """
    return fetch_url(source_url(arxiv_id, base_url), **kwargs)
