from __future__ import annotations
import csv
import logging
from datetime import datetime, tzinfo
from typing import Iterable, List, Optional
from .models import FileRecord

log = logging.getLogger(__name__)

HEADER = ["Path", "Modified On", "Size (MB)"]
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class FileMetaError(Exception):
    pass


class ReportWriteError(FileMetaError):
    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


def header(include_size: bool = True) -> List[str]:
    return HEADER[:] if include_size else HEADER[:2]

def format_timestamp(mtime: float, tz: Optional[tzinfo] = None) -> str:
    """Render ``mtime`` as ``YYYY-MM-DD HH:MM:SS``.

    With ``tz=None`` the system local zone is used at render time.
    """
    if tz is None:
        dt = datetime.fromtimestamp(mtime).astimezone()
    else:
        dt = datetime.fromtimestamp(mtime, tz)
    return dt.strftime(TIMESTAMP_FORMAT)

def format_size_mb(size_mb: float) -> str:
    return f"{size_mb:.2f}"

def display_path(path: str) -> str:
    # undecodable bytes arrive as surrogate escapes; swap them for U+FFFD
    try:
        path.encode("utf-8")
        return path
    except UnicodeEncodeError:
        return path.encode("utf-8", "surrogateescape").decode("utf-8", "replace")

def record_row(rec: FileRecord, include_size: bool = True, tz: Optional[tzinfo] = None) -> List[str]:
    row = [display_path(rec.path), format_timestamp(rec.mtime, tz)]
    if include_size:
        size_mb = rec.size_mb
        row.append(format_size_mb(size_mb) if size_mb is not None else "")
    return row

def export_csv(records: Iterable[FileRecord],
               output: str,
               include_size: bool = True,
               tz: Optional[tzinfo] = None) -> int:
    """Write ``records`` to ``output`` in the order given, header first.

    Returns the number of data rows. Raises ReportWriteError when the file
    cannot be created or written; a partially written file may remain.
    """
    rows = 0
    try:
        with open(output, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(header(include_size))
            for rec in records:
                w.writerow(record_row(rec, include_size=include_size, tz=tz))
                rows += 1
            f.flush()
    except (OSError, csv.Error, OverflowError, ValueError) as e:
        reason = e.strerror if isinstance(e, OSError) and e.strerror else str(e)
        raise ReportWriteError(str(output), reason) from e
    log.info("wrote %d rows to %s", rows, output)
    return rows
