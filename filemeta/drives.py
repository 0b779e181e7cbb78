from __future__ import annotations
import logging
import os
from typing import List

import psutil

from .models import Drive

log = logging.getLogger(__name__)

def _usage(mountpoint: str, fstype: str):
    try:
        u = psutil.disk_usage(mountpoint)
    except OSError as e:
        log.debug("no usage for %s: %s", mountpoint, e)
        return None
    return Drive(mountpoint=mountpoint, fstype=fstype,
                 total=int(u.total), used=int(u.used), free=int(u.free))

def list_drives() -> List[Drive]:
    """Mounted volumes that can be offered as scan roots.

    Each mount point appears once; mounts whose usage cannot be read are left out.
    """
    by_mount = {}
    for p in psutil.disk_partitions(all=False):
        if not p.mountpoint:
            continue
        mp = os.path.abspath(p.mountpoint)
        if mp in by_mount:
            continue
        by_mount[mp] = _usage(mp, p.fstype)
    return sorted((d for d in by_mount.values() if d is not None),
                  key=lambda d: d.mountpoint.lower())
