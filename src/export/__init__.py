# export/__init__.py
# TeXplorer – Export subsystem: write decoded sources to disk

from .export import (
    export_entries,
    sanitize_path,
    ExportConfig,
    ExportResult,
    ExportError,
)

__all__ = [
    "export_entries",
    "sanitize_path",
    "ExportConfig",
    "ExportResult",
    "ExportError",
]
