from __future__ import annotations
from dataclasses import dataclass
from datetime import timezone, tzinfo
from typing import Optional

from .scanner import DEFAULT_ROOT

DEFAULT_OUTPUT = "file_data.csv"


@dataclass
class ExportConfig:
    root: str = DEFAULT_ROOT
    output: str = DEFAULT_OUTPUT
    include_size: bool = True
    tz: Optional[tzinfo] = None  # None = system local zone


def resolve_root(text: Optional[str]) -> str:
    s = (text or "").strip()
    return s or DEFAULT_ROOT

def resolve_output(text: Optional[str]) -> str:
    s = (text or "").strip()
    return s or DEFAULT_OUTPUT

def resolve_timezone(utc: bool = False) -> Optional[tzinfo]:
    return timezone.utc if utc else None
