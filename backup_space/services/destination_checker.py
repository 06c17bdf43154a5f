"""Destination checker - runs space checks across all backup destinations."""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional

from backup_space.config import settings
from backup_space.schemas import AggregateDecision, ProbeFailure, SpaceVerdict
from backup_space.services.capacity_probe import probe
from backup_space.services.space_evaluator import evaluate
from backup_space.utils.byte_format import format_bytes

logger = logging.getLogger(__name__)


def check_destination(destination, required_bytes: int, buffer: Optional[int] = None) -> SpaceVerdict:
    """Probe one destination and evaluate it against ``required_bytes``."""
    if buffer is None:
        buffer = settings.safety_buffer_bytes
    return evaluate(probe(destination), required_bytes, buffer)


def _check_destination_safely(destination: str, required_bytes: int, buffer: int) -> SpaceVerdict:
    try:
        return check_destination(destination, required_bytes, buffer)
    except Exception as e:
        logger.exception(f"Error checking space for {destination}")
        return evaluate(ProbeFailure(path=destination, reason=str(e)), required_bytes, buffer)


def evaluate_all(
    destinations: Iterable, required_bytes: int, buffer: Optional[int] = None
) -> AggregateDecision:
    """
    Check every destination and reduce the verdicts into one decision.

    Destinations are probed independently, in parallel when more than one
    worker is configured. Verdicts, warnings and errors come back in the
    order the destinations were given.

    Args:
        destinations: Destination paths
        required_bytes: Estimated size of the backup payload
        buffer: Safety margin; defaults to ``settings.safety_buffer_bytes``

    Returns:
        AggregateDecision; ``can_proceed`` is False if any destination errored

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

    paths = [os.fspath(d) for d in destinations]
    max_workers = min(settings.probe_max_workers, len(paths))

    if max_workers <= 1:
        verdicts = [_check_destination_safely(p, required_bytes, buffer) for p in paths]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            # map() yields in submission order regardless of completion order
            verdicts = list(
                executor.map(lambda p: _check_destination_safely(p, required_bytes, buffer), paths)
            )

    decision = reduce_verdicts(verdicts)
    logger.info(
        f"Space check for {len(paths)} destination(s), {format_bytes(required_bytes)} required: "
        f"can_proceed={decision.can_proceed}, "
        f"{len(decision.errors)} error(s), {len(decision.warnings)} warning(s)"
    )
    return decision


def reduce_verdicts(verdicts: List[SpaceVerdict]) -> AggregateDecision:
    """Collect errors and warnings from verdicts; any error blocks the backup."""
    warnings = []
    errors = []

    for verdict in verdicts:
        if verdict.error_message is not None:
            errors.append(f"{verdict.short_name}: {verdict.error_message}")
        if verdict.warning_message is not None:
            warnings.append(f"{verdict.short_name}: {verdict.warning_message}")

    return AggregateDecision(
        can_proceed=not errors,
        warnings=warnings,
        errors=errors,
        verdicts=list(verdicts),
    )


def format_verdict(verdict: SpaceVerdict) -> str:
    """Render a verdict as a single status line for display."""
    if verdict.error_message is not None:
        return f"❌ {verdict.short_name}: {verdict.error_message}"
    if verdict.warning_message is not None:
        return f"⚠️ {verdict.short_name}: {verdict.warning_message}"
    return f"✅ {verdict.short_name}: {format_bytes(verdict.capacity.available_bytes)} available"
