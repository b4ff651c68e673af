# export.py
# TeXplorer – Export subsystem: write decoded sources and a manifest to disk

import json
import shutil
import zipfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Optional

from classify.classify import FileEntry
from fetch.fetch import sanitize_id


# ============================================================
# Exceptions
# ============================================================

class ExportError(Exception):
    """Error while writing sources to disk."""
    pass


# ============================================================
# Configuration
# ============================================================

@dataclass
class ExportConfig:
    """Configuration for source export."""
    output_dir: str = "output"
    source_id: str = "source"

    # Options
    write_manifest: bool = True
    compress_to_zip: bool = False
    keep_uncompressed: bool = True
    verbose: bool = False


# ============================================================
# Output Format
# ============================================================

@dataclass
class ExportResult:
    """Result of an export."""
    export_path: str
    export_dir: str
    files_written: int
    total_size_bytes: int
    skipped: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)


# Written next to the sources when write_manifest is set
MANIFEST_NAMES = ("files.json", "metadata.json")


# ============================================================
# Path Sanitization (Zip Slip Prevention)
# ============================================================

def sanitize_path(raw: str) -> str:
    """
    Prevent:
      - ../ traversal
      - absolute paths
      - backslashes
      - empty components
    Returns a normalized forward-slash path.
    """
    if not raw or raw.strip() == "":
        raise ExportError(f"Invalid empty path {raw!r}")

    raw = raw.replace("\\", "/")
    p = PurePosixPath(raw)

    if p.is_absolute():
        raise ExportError(f"Absolute path not allowed: {raw}")

    for part in p.parts:
        if part == "..":
            raise ExportError(f"Traversal not allowed: {raw}")

    clean = "/".join(part for part in p.parts if part not in ("", "."))
    if not clean:
        raise ExportError(f"Invalid path {raw!r}")

    return clean


# ============================================================
# Manifest Generation
# ============================================================

def generate_files_json(entries: List[FileEntry]) -> list:
    """
    Generate files.json content.

    Args:
        entries: Entries in display order

    Returns:
        List of file metadata dictionaries
    """
    files = []
    for i, entry in enumerate(entries):
        files.append({
            "id": i,
            "name": entry.name,
            "kind": "text" if entry.is_text else "binary",
            "mime_type": entry.mime_type,
            "language": entry.language,
            "size_bytes": entry.size,
            "primary_source": entry.is_primary_source,
        })
    return files


def generate_metadata(config: ExportConfig, entries: List[FileEntry]) -> dict:
    """Generate metadata.json content."""
    return {
        "generator": "texplorer",
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "source": {
            "type": "arxiv",
            "id": config.source_id,
        },
        "stats": {
            "files": len(entries),
            "text_files": sum(1 for e in entries if e.is_text),
            "binary_files": sum(1 for e in entries if e.is_binary),
            "primary_sources": [e.name for e in entries if e.is_primary_source],
        },
    }


# ============================================================
# File Writing
# ============================================================

def write_json_file(path: Path, data: Any):
    """Write data to JSON file with pretty formatting."""
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def write_entry(base_dir: Path, entry: FileEntry) -> Path:
    """Write one entry below base_dir. Raises ExportError for unsafe names."""
    target = base_dir / sanitize_path(entry.name)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        if entry.is_text:
            with open(target, 'w', encoding='utf-8', newline='') as f:
                f.write(entry.content)
        else:
            target.write_bytes(entry.binary_payload)
    except OSError as e:
        raise ExportError(f"Cannot write {target}: {e}") from e

    return target


def compress_dir(export_dir: Path, zip_path: Path):
    """Zip export_dir, storing paths relative to its parent."""
    if zip_path.exists():
        zip_path.unlink()

    with zipfile.ZipFile(zip_path, 'w', zipfile.ZIP_DEFLATED) as zipf:
        for file_path in export_dir.rglob('*'):
            if file_path.is_file():
                zipf.write(file_path, file_path.relative_to(export_dir.parent))


# ============================================================
# Export
# ============================================================

def export_entries(
    entries: List[FileEntry],
    config: Optional[ExportConfig] = None,
) -> ExportResult:
    """
    Write decoded sources to `<output_dir>/<id>/`.

    Args:
        entries: Entries to write
        config: Export configuration (optional)

    Returns:
        ExportResult with paths and counts
    """
    if config is None:
        config = ExportConfig()

    export_dir = Path(config.output_dir) / sanitize_id(config.source_id)

    try:
        if export_dir.exists():
            shutil.rmtree(export_dir)
        export_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ExportError(f"Cannot create output directory {export_dir}: {e}") from e

    if config.verbose:
        print(f"\nExporting {len(entries)} files to {export_dir}")

    written = []
    skipped = []
    for entry in entries:
        try:
            if config.write_manifest and sanitize_path(entry.name).lower() in MANIFEST_NAMES:
                raise ExportError(f"{entry.name} is reserved for the export manifest")
            write_entry(export_dir, entry)
        except ExportError as e:
            print(f"Warning: Skipping {entry.name!r}: {e}")
            skipped.append(entry.name)
            continue
        written.append(entry)

    metadata = generate_metadata(config, written)
    try:
        if config.write_manifest:
            write_json_file(export_dir / "files.json", generate_files_json(written))
            write_json_file(export_dir / "metadata.json", metadata)

        total_size = sum(f.stat().st_size for f in export_dir.rglob('*') if f.is_file())
    except OSError as e:
        raise ExportError(f"Cannot write manifest in {export_dir}: {e}") from e

    if config.verbose:
        print(f"  ✓ Wrote {len(written)} files ({total_size / 1024:.1f} KB)")

    export_path = str(export_dir)
    if config.compress_to_zip:
        zip_path = export_dir.parent / f"{export_dir.name}.zip"
        try:
            compress_dir(export_dir, zip_path)
            if not config.keep_uncompressed:
                shutil.rmtree(export_dir)
        except OSError as e:
            raise ExportError(f"Cannot compress {export_dir}: {e}") from e

        if config.verbose:
            print(f"  ✓ Compressed: {zip_path}")

        export_path = str(zip_path)

    return ExportResult(
        export_path=export_path,
        export_dir=str(export_dir),
        files_written=len(written),
        total_size_bytes=total_size,
        skipped=skipped,
        metadata=metadata,
    )
