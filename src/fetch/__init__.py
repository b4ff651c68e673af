"""
Fetch subsystem for TeXplorer.

Purpose: Retrieve the source payload of a paper from the document-source
endpoint without writing anything to disk.

Responsibilities:
- Resolve arXiv ids and URLs to the /src/ endpoint
- Stream the response body, emitting DownloadProgress events per chunk
- Surface transport failures as FetchError

Non-responsibilities:
- No format detection
- No retries
"""

from .fetch import (
    fetch_source,
    fetch_url,
    read_stream,
    compute_percent,
    parse_arxiv_id,
    sanitize_id,
    source_url,
    DownloadProgress,
    RawPayload,
    Phase,
    FetchError,
    FetchCancelled,
)

__all__ = [
    "fetch_source",
    "fetch_url",
    "read_stream",
    "compute_percent",
    "parse_arxiv_id",
    "sanitize_id",
    "source_url",
    "DownloadProgress",
    "RawPayload",
    "Phase",
    "FetchError",
    "FetchCancelled",
]
