#!/usr/bin/env python3
"""
main.py
TeXplorer – Main orchestrator

Fetches the TeX source of an arXiv paper, unpacks it and lists (or prints,
or exports) the files it contains.
Runs all subsystems sequentially: fetch → extract → report/export

Usage:
    python main.py <arxiv_id>
    python main.py <arxiv_url>
    python main.py --file <payload> --id <arxiv_id>

Examples:
    python main.py 2301.01234
    python main.py https://arxiv.org/abs/hep-th/9901001 --show main.tex
    python main.py 2301.01234 --output sources --zip
    python main.py --file 2301.01234.tar.gz --id 2301.01234
"""

import argparse
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from classify import FileEntry, first_primary_source
from export import ExportConfig, ExportError, export_entries
from extract import done_progress, extract_payload
from fetch import DownloadProgress, FetchError, Phase, RawPayload, fetch_source, parse_arxiv_id, source_url
from fetch.fetch import DEFAULT_BASE_URL, DEFAULT_CHUNK_SIZE, DEFAULT_TIMEOUT, DEFAULT_USER_AGENT


# ============================================================
# Configuration
# ============================================================

@dataclass
class PipelineConfig:
    """Configuration for the pipeline."""
    # Fetch settings
    base_url: str = DEFAULT_BASE_URL
    chunk_size: int = DEFAULT_CHUNK_SIZE
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT

    # Export settings
    output_dir: Optional[str] = None
    write_manifest: bool = True
    compress_to_zip: bool = False

    # Reporting
    show_progress: bool = True
    verbose: bool = True


# ============================================================
# Pipeline Statistics
# ============================================================

@dataclass
class PipelineStats:
    """Statistics collected during pipeline execution."""
    # Stage timings
    fetch_time: float = 0.0
    extract_time: float = 0.0
    export_time: float = 0.0
    total_time: float = 0.0

    # Stage outputs
    bytes_fetched: int = 0
    archive_kind: str = ""
    files_found: int = 0
    text_files: int = 0
    binary_files: int = 0
    files_exported: int = 0
    export_path: Optional[str] = None

    def print_summary(self):
        """Print a formatted summary of pipeline statistics."""
        print("\n" + "=" * 70)
        print("PIPELINE SUMMARY")
        print("=" * 70)

        print("\nStage Timings:")
        print(f"  Fetch:      {self.fetch_time:>8.2f}s  ({self.bytes_fetched/1024:.1f} KB)")
        print(f"  Extract:    {self.extract_time:>8.2f}s  ({self.files_found} files, {self.archive_kind})")
        if self.export_path:
            print(f"  Export:     {self.export_time:>8.2f}s  ({self.files_exported} files)")
        print(f"  {'─' * 40}")
        print(f"  Total:      {self.total_time:>8.2f}s")

        print(f"\nFiles: {self.text_files} text, {self.binary_files} binary")
        if self.export_path:
            print(f"Exported to: {self.export_path}")

        print("\nPipeline Status: ✓ Complete")
        print("=" * 70)


# ============================================================
# Progress Reporting
# ============================================================

def print_progress(progress: DownloadProgress):
    """Progress sink that redraws a single terminal line."""
    if progress.phase is Phase.DOWNLOADING:
        if progress.percent:
            line = f"  Downloading... {progress.percent:3d}%  ({progress.bytes_loaded/1024:.1f} KB)"
        else:
            line = f"  Downloading... {progress.bytes_loaded/1024:.1f} KB"
        print("\r" + line, end="", flush=True)
    elif progress.phase is Phase.EXTRACTING:
        print(f"\r  Downloaded {progress.bytes_loaded/1024:.1f} KB, extracting...", flush=True)
    else:
        print("  ✓ Done")


# ============================================================
# Pipeline Stages
# ============================================================

def stage_fetch(arxiv_id: Optional[str], file: Optional[str], config: PipelineConfig):
    """
    Stage 1: Fetch the source payload from arXiv or read it from disk.

    Returns:
        (RawPayload, elapsed)
    """
    print("\n" + "=" * 70)
    print("STAGE 1: FETCH")
    print("=" * 70)

    start_time = time.time()

    if file:
        print(f"\nReading local payload: {file}")
        try:
            payload = RawPayload(data=Path(file).read_bytes())
        except OSError as e:
            raise FetchError(f"Failed to read {file}: {e}") from e
    else:
        print(f"\nFetching TeX source for {arxiv_id}")
        print(f"  Endpoint: {source_url(arxiv_id, config.base_url)}")
        payload = fetch_source(
            arxiv_id,
            base_url=config.base_url,
            on_progress=print_progress if config.show_progress else None,
            chunk_size=config.chunk_size,
            timeout=config.timeout,
            user_agent=config.user_agent,
        )
        if payload.content_type:
            print(f"  Content-Type: {payload.content_type}")

    elapsed = time.time() - start_time
    print(f"\n✓ Fetched {len(payload.data)/1024:.1f} KB in {elapsed:.2f}s")

    return payload, elapsed


def stage_extract(payload: RawPayload, arxiv_id: str, config: PipelineConfig):
    """
    Stage 2: Detect the container format and decode the files.

    Returns:
        (entries, archive kind name, elapsed)
    """
    print("\n" + "=" * 70)
    print("STAGE 2: EXTRACT")
    print("=" * 70)

    start_time = time.time()

    kind, entries = extract_payload(payload.data, arxiv_id, payload.content_type)
    print(f"\nDetected format: {kind.value}")

    elapsed = time.time() - start_time
    print(f"\n✓ Extracted {len(entries)} files in {elapsed:.2f}s")

    if config.show_progress:
        print_progress(done_progress(payload))

    return entries, kind.value, elapsed


def stage_export(entries: List[FileEntry], arxiv_id: str, config: PipelineConfig):
    """
    Stage 3: Write the sources to the output directory.

    Returns:
        (ExportResult, elapsed)
    """
    print("\n" + "=" * 70)
    print("STAGE 3: EXPORT")
    print("=" * 70)

    start_time = time.time()

    result = export_entries(entries, ExportConfig(
        output_dir=config.output_dir,
        source_id=arxiv_id,
        write_manifest=config.write_manifest,
        compress_to_zip=config.compress_to_zip,
        verbose=config.verbose,
    ))

    elapsed = time.time() - start_time
    print(f"\n✓ Export complete in {elapsed:.2f}s")
    if result.skipped:
        print(f"  Skipped {len(result.skipped)} unsafe paths")

    return result, elapsed


# ============================================================
# Reporting
# ============================================================

def print_file_list(entries: List[FileEntry]):
    """Print the file list the way a viewer sidebar would show it."""
    selected = first_primary_source(entries)

    print("\nFiles:")
    for entry in entries:
        marker = "*" if entry is selected else " "
        kind = entry.language if entry.is_text else entry.mime_type
        print(f" {marker} {entry.name:50s} {entry.size:>10,d} B  {kind}")


def show_file(entries: List[FileEntry], name: str) -> bool:
    """Print one file to stdout. Returns False if no entry has that name."""
    for entry in entries:
        if entry.name == name:
            if entry.is_binary:
                print(f"[Binary file: {entry.name} ({entry.mime_type}, {entry.size} bytes)]")
            else:
                print(entry.content)
            return True
    return False


# ============================================================
# Main Pipeline
# ============================================================

def run_pipeline(
    arxiv_id: str,
    file: Optional[str] = None,
    config: Optional[PipelineConfig] = None,
):
    """
    Run fetch → extract → export.

    Args:
        arxiv_id: Paper identifier (also names single-file payloads)
        file: Local payload to use instead of downloading (optional)
        config: Pipeline configuration (optional, uses defaults if not provided)

    Returns:
        (entries, PipelineStats)
    """
    if config is None:
        config = PipelineConfig()

    stats = PipelineStats()
    pipeline_start = time.time()

    print("\n" + "╔" + "═" * 68 + "╗")
    print("║" + " " * 24 + "TEXPLORER PIPELINE" + " " * 26 + "║")
    print("╚" + "═" * 68 + "╝")

    # Stage 1: Fetch
    payload, fetch_time = stage_fetch(arxiv_id, file, config)
    stats.fetch_time = fetch_time
    stats.bytes_fetched = len(payload.data)

    # Stage 2: Extract
    entries, kind, extract_time = stage_extract(payload, arxiv_id, config)
    stats.extract_time = extract_time
    stats.archive_kind = kind
    stats.files_found = len(entries)
    stats.text_files = sum(1 for e in entries if e.is_text)
    stats.binary_files = sum(1 for e in entries if e.is_binary)

    print_file_list(entries)

    # Stage 3: Export
    if config.output_dir:
        result, export_time = stage_export(entries, arxiv_id, config)
        stats.export_time = export_time
        stats.files_exported = result.files_written
        stats.export_path = result.export_path

    stats.total_time = time.time() - pipeline_start

    if config.verbose:
        stats.print_summary()

    return entries, stats


# ============================================================
# CLI Interface
# ============================================================

PAYLOAD_SUFFIXES = (".tar.gz", ".tgz", ".tar", ".gz", ".zip", ".tex")


def id_from_filename(path: str) -> str:
    """Guess a document id from a payload file name (2301.01234.tar.gz -> 2301.01234)."""
    name = Path(path).name
    for suffix in PAYLOAD_SUFFIXES:
        if name.lower().endswith(suffix):
            return name[:-len(suffix)]
    return name


def main(argv: Optional[List[str]] = None):
    """Main entry point with CLI argument parsing."""
    parser = argparse.ArgumentParser(
        description="TeXplorer - browse the TeX source of arXiv papers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s 2301.01234
  %(prog)s https://arxiv.org/abs/hep-th/9901001 --show main.tex
  %(prog)s 2301.01234 --output sources --zip
  %(prog)s --file 2301.01234.tar.gz --id 2301.01234
        """
    )

    parser.add_argument(
        "source",
        nargs="?",
        help="arXiv identifier or arxiv.org URL"
    )
    parser.add_argument(
        "--id",
        dest="arxiv_id",
        help="arXiv identifier (names single-file payloads when used with --file)"
    )
    parser.add_argument(
        "--file",
        help="Decode a payload already on disk instead of downloading"
    )
    parser.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help=f"Source endpoint root (default: {DEFAULT_BASE_URL})"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Transport timeout in seconds (default: {DEFAULT_TIMEOUT})"
    )
    parser.add_argument(
        "--output", "-o",
        help="Write the extracted sources below this directory"
    )
    parser.add_argument(
        "--zip",
        action="store_true",
        help="Also compress the exported directory to a ZIP"
    )
    parser.add_argument(
        "--no-manifest",
        action="store_false",
        dest="manifest",
        help="Do not write files.json / metadata.json"
    )
    parser.add_argument(
        "--show",
        metavar="NAME",
        help="Print one file's content after extraction"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Hide the progress line and summary"
    )

    args = parser.parse_args(argv)

    raw_id = args.arxiv_id or args.source
    if not raw_id and args.file:
        raw_id = id_from_filename(args.file)
    if not raw_id:
        parser.print_help()
        print("\nError: Please provide an arXiv identifier or URL")
        sys.exit(1)

    config = PipelineConfig(
        base_url=args.base_url,
        timeout=args.timeout,
        output_dir=args.output,
        write_manifest=args.manifest,
        compress_to_zip=args.zip,
        show_progress=not args.quiet,
        verbose=not args.quiet,
    )

    try:
        arxiv_id = parse_arxiv_id(raw_id)
        entries, _ = run_pipeline(arxiv_id, file=args.file, config=config)
    except (FetchError, ExportError) as e:
        print(f"\n✗ Pipeline failed: {e}")
        sys.exit(1)

    if args.show:
        print("\n" + "=" * 70)
        print(args.show)
        print("=" * 70)
        if not show_file(entries, args.show):
            print(f"✗ No file named {args.show!r}")
            sys.exit(1)


if __name__ == "__main__":
    main()
