"""Utility functions for detecting network mounts and filesystem characteristics."""
import logging
import os
from typing import Iterable, Optional

import psutil

from backup_space.config import settings

logger = logging.getLogger(__name__)


def _is_under(path: str, mountpoint: str) -> bool:
    mountpoint = os.path.normcase(os.path.normpath(mountpoint))
    path = os.path.normcase(path)
    if path == mountpoint:
        return True
    prefix = mountpoint if mountpoint.endswith(os.sep) else mountpoint + os.sep
    return path.startswith(prefix)


def find_mount(path: str):
    """
    Find the mounted partition that holds a path.

    The deepest mount point containing the resolved path wins, so a share
    mounted at /mnt/nas is preferred over the root filesystem for
    /mnt/nas/photos.

    Args:
        path: The path to look up

    Returns:
        The psutil partition entry, or None if no mount point matches
    """
    target = os.path.realpath(path)
    best = None
    for partition in psutil.disk_partitions(all=True):
        if not partition.mountpoint:
            continue
        if not _is_under(target, partition.mountpoint):
            continue
        # Stacked mounts (autofs then nfs4) list the topmost entry last
        if best is None or len(partition.mountpoint) >= len(best.mountpoint):
            best = partition
    return best


def get_filesystem_type(path: str) -> Optional[str]:
    """Return the filesystem type name of the mount holding ``path``, if known."""
    try:
        mount = find_mount(path)
    except (OSError, ValueError, psutil.Error) as e:
        logger.warning(f"Error reading mount table for {path}: {e}")
        return None

    if mount is None or not mount.fstype:
        return None
    return mount.fstype


def is_network_mount(path: str, network_types: Optional[Iterable[str]] = None) -> bool:
    """
    Detect if a path is on a network mount.

    Network mounts (NFS, SMB, AFP, WebDAV, CIFS) tend to report unreliable
    capacity through high-level volume APIs, so callers use this to pick a
    different probing order.

    Args:
        path: The path to check
        network_types: Filesystem type names treated as network filesystems.
            Defaults to ``settings.network_filesystem_types``.

    Returns:
        True if the path is on a network mount, False otherwise
    """
    fstype = get_filesystem_type(path)
    if fstype is None:
        return False

    if network_types is None:
        network_types = settings.network_filesystem_types
    return fstype.lower() in {t.lower() for t in network_types}
