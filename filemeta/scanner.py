from __future__ import annotations
import logging
import os
import stat as statmod
import time
from datetime import tzinfo
from typing import Callable, Iterator, List, Optional
from .models import FileRecord, ScanResult, WalkEntry, KIND_DIR, KIND_FILE, KIND_OTHER
from .report import format_timestamp

log = logging.getLogger(__name__)

DEFAULT_ROOT = "./"

ProgressCb = Callable[[int], None]  # (files processed so far)

def _classify(entry: os.DirEntry) -> str:
    # symlinks are never followed, so a link to a directory is "other"
    if entry.is_symlink():
        return KIND_OTHER
    if entry.is_dir(follow_symlinks=False):
        return KIND_DIR
    if entry.is_file(follow_symlinks=False):
        return KIND_FILE
    return KIND_OTHER

def iter_entries(root: str) -> Iterator[WalkEntry]:
    """Depth-first walk below ``root`` with an explicit stack of pending directories.

    Entries that cannot be listed or classified are skipped. A regular file
    given as root is yielded on its own.
    """
    try:
        st = os.stat(root)
    except (OSError, ValueError):
        log.debug("root not accessible: %s", root)
        return
    if statmod.S_ISREG(st.st_mode):
        yield WalkEntry(root, KIND_FILE)
        return
    if not statmod.S_ISDIR(st.st_mode):
        return

    pending: List[str] = [root]
    while pending:
        dir_path = pending.pop()
        try:
            with os.scandir(dir_path) as it:
                entries = list(it)
        except OSError as e:
            log.debug("cannot list %s: %s", dir_path, e)
            continue

        subdirs: List[str] = []
        for entry in entries:
            try:
                kind = _classify(entry)
            except OSError as e:
                log.debug("cannot classify %s: %s", entry.path, e)
                continue
            yield WalkEntry(entry.path, kind)
            if kind == KIND_DIR:
                subdirs.append(entry.path)
        # reversed so the first listed subdirectory is walked first
        pending.extend(reversed(subdirs))

def read_metadata(path: str, track_size: bool = True,
                  tz: Optional[tzinfo] = None) -> Optional[FileRecord]:
    try:
        st = os.stat(path, follow_symlinks=False)
    except OSError as e:
        log.debug("cannot stat %s: %s", path, e)
        return None

    mtime = getattr(st, "st_mtime", None)
    if mtime is None:
        return None
    try:
        format_timestamp(mtime, tz)  # must render in the zone the report uses
    except (OverflowError, OSError, ValueError):
        log.debug("unresolvable modification time for %s: %r", path, mtime)
        return None

    size = int(st.st_size) if track_size else None
    return FileRecord(path=path, mtime=float(mtime), size_bytes=size)

def collect_records(root: str,
                    progress: Optional[ProgressCb] = None,
                    track_size: bool = True,
                    tz: Optional[tzinfo] = None) -> ScanResult:
    t0 = time.time()
    root = root or DEFAULT_ROOT
    result = ScanResult(root=root)

    for entry in iter_entries(root):
        if entry.kind != KIND_FILE:
            continue
        rec = read_metadata(entry.path, track_size=track_size, tz=tz)
        if rec is not None:
            result.records.append(rec)
            result.bytes_scanned += rec.size_bytes or 0
        result.files += 1
        if progress:
            progress(result.files)

    result.elapsed_sec = time.time() - t0
    log.debug("collected %d records from %d files under %s",
              len(result.records), result.files, root)
    return result

def sort_records(records: List[FileRecord]) -> None:
    records.sort(key=lambda r: r.mtime)  # list.sort is stable

def scan(root: str,
         progress: Optional[ProgressCb] = None,
         track_size: bool = True,
         tz: Optional[tzinfo] = None) -> ScanResult:
    result = collect_records(root, progress=progress, track_size=track_size, tz=tz)
    sort_records(result.records)
    return result
