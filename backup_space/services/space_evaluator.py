"""Space evaluator - turns a probed capacity into a per-destination verdict."""

from typing import Optional, Union

from backup_space.config import settings
from backup_space.schemas import CapacityInfo, ProbeFailure, SpaceVerdict
from backup_space.utils.byte_format import format_bytes

UNKNOWN_SPACE_ERROR = "Unable to determine available disk space"


def evaluate(
    capacity: Union[CapacityInfo, ProbeFailure],
    required_bytes: int,
    buffer: Optional[int] = None,
    low_free_threshold: Optional[float] = None,
) -> SpaceVerdict:
    """
    Decide whether a destination can take a copy of ``required_bytes``.

    The copy needs ``required_bytes + buffer`` of available space. When it fits
    but the projected free space afterwards drops below the threshold
    percentage, a warning is attached instead. A failed probe always yields a
    blocking error. No I/O happens here.

    Args:
        capacity: Probe result for the destination
        required_bytes: Estimated size of the backup payload
        buffer: Safety margin added on top of ``required_bytes``. Defaults to
            ``settings.safety_buffer_bytes``.
        low_free_threshold: Post-copy free percentage below which a warning is
            raised. Defaults to ``settings.low_free_threshold_percent``.

    Returns:
        SpaceVerdict for the destination

    Raises:
        ValueError: If ``required_bytes`` or ``buffer`` is negative
    """
    if buffer is None:
        buffer = settings.safety_buffer_bytes
    if required_bytes < 0:
        msg = f"required_bytes must not be negative: {required_bytes}"
        raise ValueError(msg)
    if buffer < 0:
        msg = f"buffer must not be negative: {buffer}"
        raise ValueError(msg)
    if low_free_threshold is None:
        low_free_threshold = settings.low_free_threshold_percent

    total_required = required_bytes + buffer

    if isinstance(capacity, ProbeFailure):
        return SpaceVerdict(
            destination=capacity.path,
            capacity=CapacityInfo.empty(capacity.path),
            required_bytes=required_bytes,
            buffer_bytes=buffer,
            total_required_bytes=total_required,
            percent_free_after_copy=0.0,
            sufficient=False,
            low_free_after_copy=True,
            error_message=UNKNOWN_SPACE_ERROR,
        )

    sufficient = capacity.available_bytes >= total_required

    space_after_copy = capacity.free_bytes - required_bytes
    if capacity.total_bytes > 0:
        percent_free_after_copy = space_after_copy / capacity.total_bytes * 100
    else:
        percent_free_after_copy = 0.0
    low_free_after_copy = percent_free_after_copy < low_free_threshold

    warning = None
    error = None
    if not sufficient:
        error = (
            f"Insufficient space: Need {format_bytes(total_required)} "
            f"but only {format_bytes(capacity.available_bytes)} available"
        )
    elif low_free_after_copy:
        warning = (
            f"Low disk space warning: After backup, only "
            f"{percent_free_after_copy:.1f}% will remain free"
        )

    return SpaceVerdict(
        destination=capacity.path,
        capacity=capacity,
        required_bytes=required_bytes,
        buffer_bytes=buffer,
        total_required_bytes=total_required,
        percent_free_after_copy=percent_free_after_copy,
        sufficient=sufficient,
        low_free_after_copy=low_free_after_copy,
        warning_message=warning,
        error_message=error,
    )
