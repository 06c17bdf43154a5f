"""Capacity probe - reads total/free/available bytes for a destination path.

Volumes report capacity inconsistently. Network shares often return zeroes
or stale figures through high-level volume APIs while their statvfs numbers
are fine; local volumes are better served by the volume-level figures. The
probe therefore tries a list of named strategies in order and keeps the first
result that passes that strategy's checks.
"""

import logging
import os
import shutil
from typing import Callable, List, NamedTuple, Optional, Tuple, Union

import psutil

from backup_space.schemas import CapacityInfo, ProbeFailure
from backup_space.utils.network_detection import is_network_mount

logger = logging.getLogger(__name__)

Strategy = Tuple[str, Callable[[str], Optional[CapacityInfo]]]

# ValueError covers paths the OS refuses outright (e.g. embedded NUL bytes)
_QUERY_ERRORS = (OSError, ValueError, psutil.Error)


class VolumeResources(NamedTuple):
    """Volume-level capacity figures. Any of them may be unavailable."""

    total_capacity: Optional[int]
    available_capacity_for_important_usage: Optional[int] = None
    available_capacity: Optional[int] = None


def read_volume_resources(path: str) -> VolumeResources:
    """Read volume-level capacity for ``path`` through psutil."""
    usage = psutil.disk_usage(path)
    return VolumeResources(total_capacity=usage.total, available_capacity=usage.free)


def probe_statvfs(path: str) -> Optional[CapacityInfo]:
    """
    Compute capacity from the low-level filesystem statistics.

    Rejects results with a zero total, which some network filesystems report
    while the share is still being mounted or when the server hides quotas.
    """
    if not hasattr(os, "statvfs"):
        return None

    stat = os.statvfs(path)
    block_size = stat.f_frsize or stat.f_bsize
    total = stat.f_blocks * block_size
    available = stat.f_bavail * block_size
    free = stat.f_bfree * block_size

    if total > 0 and available >= 0 and free >= 0:
        return CapacityInfo(
            path=path,
            source="statvfs",
            total_bytes=total,
            free_bytes=free,
            available_bytes=available,
        )

    logger.info(
        f"Volume {path} reported unreliable space values "
        f"(total={total}, free={free}, available={available}), trying alternate methods"
    )
    return None


def probe_volume_resources(
    path: str, reader: Callable[[str], VolumeResources] = None
) -> Optional[CapacityInfo]:
    """
    Compute capacity from volume-level resource values.

    Capacity available for important usage is preferred and plain available
    capacity is used when it is missing. Free and available are reported as
    the same figure at this level.
    """
    resources = (reader or read_volume_resources)(path)

    total = resources.total_capacity
    if total is None or total <= 0:
        return None

    if resources.available_capacity_for_important_usage is not None:
        available = resources.available_capacity_for_important_usage
    elif resources.available_capacity is not None:
        available = resources.available_capacity
    else:
        available = 0

    if available < 0:
        return None

    return CapacityInfo(
        path=path,
        source="volume_resources",
        total_bytes=total,
        free_bytes=available,
        available_bytes=available,
    )


def probe_filesystem_attributes(path: str) -> Optional[CapacityInfo]:
    """Compute capacity from the filesystem size/free attributes."""
    usage = shutil.disk_usage(path)
    total, free = usage.total, usage.free

    if total <= 0 or free < 0:
        return None

    return CapacityInfo(
        path=path,
        source="filesystem_attributes",
        total_bytes=total,
        free_bytes=free,
        available_bytes=free,
    )


def strategies_for(path: str) -> List[Strategy]:
    """
    Return the ordered strategies for a path.

    Network mounts get statvfs first; local volumes skip it.
    """
    strategies: List[Strategy] = [
        ("volume_resources", probe_volume_resources),
        ("filesystem_attributes", probe_filesystem_attributes),
    ]
    if is_network_mount(path):
        strategies.insert(0, ("statvfs", probe_statvfs))
    return strategies


def probe(path, strategies: Optional[List[Strategy]] = None) -> Union[CapacityInfo, ProbeFailure]:
    """
    Probe the capacity of the volume holding ``path``.

    Each strategy is tried at most once, in order, and the first accepted
    result is returned. Results with a zero total are never accepted.

    Args:
        path: Destination path (str or path-like)
        strategies: Override of the strategy list, mostly for tests

    Returns:
        CapacityInfo on success, ProbeFailure if every strategy failed.
        Never raises for OS-level errors.
    """
    path = os.fspath(path)
    if strategies is None:
        strategies = strategies_for(path)

    attempted = []
    for name, strategy in strategies:
        attempted.append(name)
        try:
            capacity = strategy(path)
        except _QUERY_ERRORS as e:
            logger.debug(f"Capacity strategy {name} failed for {path}: {e}")
            continue

        if capacity is None or capacity.total_bytes <= 0:
            continue

        logger.debug(
            f"Capacity for {path} from {name}: total={capacity.total_bytes} "
            f"free={capacity.free_bytes} available={capacity.available_bytes}"
        )
        return capacity

    logger.error(f"Failed to get disk space for {path} (tried: {', '.join(attempted) or 'none'})")
    return ProbeFailure(path=path, attempted=attempted)
