from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional

from .utils import bytes_to_mb

KIND_FILE = "file"
KIND_DIR = "dir"
KIND_OTHER = "other"  # symlink, device, fifo, socket

@dataclass(frozen=True)
class WalkEntry:
    path: str
    kind: str

@dataclass
class FileRecord:
    path: str
    mtime: float
    size_bytes: Optional[int] = None  # None when size tracking is off

    @property
    def size_mb(self) -> Optional[float]:
        if self.size_bytes is None:
            return None
        return bytes_to_mb(self.size_bytes)

@dataclass
class ScanResult:
    root: str
    records: List[FileRecord] = field(default_factory=list)
    files: int = 0           # regular files visited, readable or not
    bytes_scanned: int = 0   # sum of recorded sizes
    elapsed_sec: float = 0.0

@dataclass(frozen=True)
class Drive:
    mountpoint: str
    fstype: str
    total: int
    used: int
    free: int
