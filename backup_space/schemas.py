"""Pydantic schemas for space checks and API validation."""
from pathlib import PurePath
from typing import List, Optional

from pydantic import BaseModel, Field, computed_field


def _percent(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return max(0.0, min(100.0, part / whole * 100))


class CapacityInfo(BaseModel):
    """Capacity of the volume holding a path, in bytes."""
    path: str
    source: str
    total_bytes: int = Field(..., ge=0)
    free_bytes: int = Field(..., ge=0)
    available_bytes: int = Field(..., ge=0)

    @computed_field
    @property
    def percent_free(self) -> float:
        return _percent(self.free_bytes, self.total_bytes)

    @computed_field
    @property
    def percent_available(self) -> float:
        return _percent(self.available_bytes, self.total_bytes)

    @classmethod
    def empty(cls, path: str) -> "CapacityInfo":
        """Zero-valued capacity reported for a path that could not be probed."""
        return cls(path=path, source="none", total_bytes=0, free_bytes=0, available_bytes=0)


class ProbeFailure(BaseModel):
    """Marker returned when no capacity strategy produced a usable result."""
    path: str
    attempted: List[str] = []
    reason: str = "all capacity strategies failed"


class SpaceVerdict(BaseModel):
    """Outcome of checking one destination against a required byte count."""
    destination: str
    capacity: CapacityInfo
    required_bytes: int
    buffer_bytes: int
    total_required_bytes: int
    percent_free_after_copy: float
    sufficient: bool
    low_free_after_copy: bool
    warning_message: Optional[str] = None
    error_message: Optional[str] = None

    @computed_field
    @property
    def blocks_copy(self) -> bool:
        return not self.sufficient or self.error_message is not None

    @computed_field
    @property
    def short_name(self) -> str:
        return PurePath(self.destination).name or self.destination


class AggregateDecision(BaseModel):
    """Go/no-go decision over all destinations of one backup."""
    can_proceed: bool
    warnings: List[str] = []
    errors: List[str] = []
    verdicts: List[SpaceVerdict] = []


class SpaceCheckRequest(BaseModel):
    """Schema for a multi-destination space check."""
    destinations: List[str] = Field(..., min_length=1)
    required_bytes: int = Field(..., ge=0)
    buffer_bytes: Optional[int] = Field(None, ge=0)


class SpaceCheckResponse(AggregateDecision):
    """Schema for space check response."""
    messages: List[str] = []
