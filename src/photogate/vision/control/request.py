"""Capture-request value types shared by the mapper, tiers and negotiator."""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Tuple

from .capabilities import ValueRange


class AeMode(Enum):
    OFF = "off"
    ON = "on"


class AfMode(Enum):
    OFF = "off"
    CONTINUOUS_PICTURE = "continuous_picture"


class AwbMode(Enum):
    OFF = "off"
    AUTO = "auto"


class ColorCorrectionMode(Enum):
    TRANSFORM_MATRIX = "transform_matrix"


class FlashMode(Enum):
    OFF = "off"


class CaptureTier(IntEnum):
    """Fallback ladder, from strictest to most broadly accepted."""

    FULL_MANUAL = 1
    FOCUS_ONLY_MANUAL = 2
    FULL_AUTO = 3

    @property
    def is_terminal(self) -> bool:
        return self is CaptureTier.FULL_AUTO

    def next(self) -> Optional["CaptureTier"]:
        if self.is_terminal:
            return None
        return CaptureTier(self.value + 1)


@dataclass(frozen=True)
class ManualControlRequest:
    """Normalized ``[0, 1]`` requests coming from the calibration sliders."""

    iso: float = 0.0
    shutter: float = 0.0
    focus: float = 0.0


@dataclass(frozen=True)
class Readback:
    """Values the sensor actually used, from a completed capture result."""

    iso: Optional[int] = None
    exposure_time_ns: Optional[int] = None
    focus_distance_diopters: Optional[float] = None

    @property
    def exposure_time_ms(self) -> Optional[float]:
        if self.exposure_time_ns is None:
            return None
        return self.exposure_time_ns / 1_000_000.0


@dataclass(frozen=True)
class CaptureRequestOptions:
    """Concrete set of capture-request controls; ``None`` means "leave unset"."""

    ae_mode: AeMode
    af_mode: AfMode
    awb_mode: AwbMode
    control_mode: str = "auto"
    awb_lock: Optional[bool] = None
    flash_mode: Optional[FlashMode] = None
    sensor_sensitivity: Optional[int] = None
    sensor_exposure_time_ns: Optional[int] = None
    sensor_frame_duration_ns: Optional[int] = None
    lens_focus_distance: Optional[float] = None
    ae_target_fps_range: Optional[ValueRange] = None
    color_correction_mode: Optional[ColorCorrectionMode] = None
    color_correction_gains: Optional[Tuple[float, ...]] = None
    color_correction_transform: Optional[Tuple[float, ...]] = None

    def __post_init__(self) -> None:
        # Some HALs reject AE off together with a forced AE fps range
        if self.ae_mode is AeMode.OFF and self.ae_target_fps_range is not None:
            raise ValueError("AE target fps range cannot be combined with AE off")

    @property
    def uses_frozen_white_balance(self) -> bool:
        return self.awb_mode is AwbMode.OFF and self.color_correction_gains is not None

    def without_fps_range(self) -> "CaptureRequestOptions":
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values["ae_target_fps_range"] = None
        return CaptureRequestOptions(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Set controls only, with enums and ranges flattened to plain values."""
        result: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, ValueRange):
                value = list(value.as_tuple())
            elif isinstance(value, tuple):
                value = list(value)
            result[f.name] = value
        return result
