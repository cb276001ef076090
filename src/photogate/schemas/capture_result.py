"""Pydantic schema for completed-capture-result records."""

from enum import IntEnum
from typing import Any, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AwbState(IntEnum):
    """Auto-white-balance state reported with each capture result."""

    INACTIVE = 0
    SEARCHING = 1
    CONVERGED = 2
    LOCKED = 3


class CaptureResultRecord(BaseModel):
    """One completed capture result, reduced to the fields the core reads."""

    model_config = ConfigDict(frozen=True)

    frame_number: Optional[int] = Field(None, ge=0, description="Sensor frame counter")
    awb_state: Optional[AwbState] = Field(None, description="Reported AWB state")
    color_correction_gains: Optional[Tuple[float, ...]] = Field(
        None, description="RGGB channel gains (R, G_even, G_odd, B)"
    )
    color_correction_transform: Optional[Tuple[float, ...]] = Field(
        None, description="Row-major 3x3 colour transform"
    )
    sensor_sensitivity: Optional[int] = Field(None, ge=0, description="ISO actually used")
    sensor_exposure_time_ns: Optional[int] = Field(None, ge=0, description="Exposure time (ns)")
    lens_focus_distance: Optional[float] = Field(None, ge=0, description="Focus distance (diopters)")

    @field_validator('color_correction_gains')
    @classmethod
    def validate_gains(cls, v):
        """Gains are either absent/empty or exactly four channels."""
        if v is not None and len(v) not in (0, 4):
            raise ValueError(f"Expected 4 colour-correction gains, got {len(v)}")
        return v

    @field_validator('color_correction_transform')
    @classmethod
    def validate_transform(cls, v):
        """Transform is either absent/empty or a full 3x3 matrix."""
        if v is not None and len(v) not in (0, 9):
            raise ValueError(f"Expected 9 colour-transform entries, got {len(v)}")
        return v

    @property
    def awb_settled(self) -> bool:
        return self.awb_state in (AwbState.CONVERGED, AwbState.LOCKED)

    @property
    def has_white_balance(self) -> bool:
        return bool(self.color_correction_gains) and bool(self.color_correction_transform)

    @classmethod
    def coerce(cls, record: Union["CaptureResultRecord", Mapping[str, Any]]) -> "CaptureResultRecord":
        """Accept an existing record or a plain mapping from the camera layer."""
        if isinstance(record, cls):
            return record
        return cls.model_validate(dict(record))
