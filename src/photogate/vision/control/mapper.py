"""Normalized-request to device-unit mapping.

Everything in this module is pure: the same inputs always give the same
native values, so it can run on every slider change.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence, Union

from .capabilities import HardwareCapabilities, ValueRange
from .config import ControlConfig
from .request import ManualControlRequest, Readback

Number = Union[int, float]

NANOS_PER_SECOND = 1_000_000_000
DEFAULT_EXPOSURE_MARGIN_NS = 1_000_000


class ParameterKind(Enum):
    ISO = "iso"
    EXPOSURE_NS = "exposure_ns"
    FOCUS_DIOPTERS = "focus_diopters"

    @property
    def integral(self) -> bool:
        return self is not ParameterKind.FOCUS_DIOPTERS


def _coerce(value: float, kind: ParameterKind) -> Number:
    # Truncate toward zero like the device-side integer conversions
    return int(value) if kind.integral else float(value)


def map_normalized_to_native(t: float,
                             hardware_range: Optional[ValueRange],
                             kind: ParameterKind) -> Optional[Number]:
    """Linearly interpolate ``t`` in ``[0, 1]`` onto ``hardware_range``.

    Returns ``None`` when the device did not report the range; the caller then
    leaves that control out of the request.
    """
    if hardware_range is None:
        return None
    t = min(max(float(t), 0.0), 1.0) if not math.isnan(t) else 0.0
    native = _coerce(hardware_range.lower + hardware_range.span * t, kind)
    return _coerce(hardware_range.clamp(native), kind)


def native_to_normalized(value: Number, hardware_range: Optional[ValueRange]) -> Optional[float]:
    """Inverse of :func:`map_normalized_to_native`, clamped to ``[0, 1]``."""
    if hardware_range is None:
        return None
    if hardware_range.span <= 0:
        return 0.0
    t = (float(value) - hardware_range.lower) / float(hardware_range.span)
    return min(max(t, 0.0), 1.0)


def clamp_native(value: Number, hardware_range: Optional[ValueRange], kind: ParameterKind) -> Number:
    """Clamp a native value; without a reported range it passes through unclamped."""
    if hardware_range is None:
        return _coerce(value, kind)
    return _coerce(hardware_range.clamp(value), kind)


def compute_max_shutter_for_fps(fps: float, margin_ns: int = DEFAULT_EXPOSURE_MARGIN_NS) -> int:
    """Longest exposure that still fits in one frame period at ``fps``."""
    if fps <= 0:
        raise ValueError(f"fps must be positive, got {fps}")
    frame_duration_ns = int(NANOS_PER_SECOND / fps)
    return max(0, frame_duration_ns - int(margin_ns))


def frame_duration_ns(fps: float) -> int:
    if fps <= 0:
        raise ValueError(f"fps must be positive, got {fps}")
    return int(NANOS_PER_SECOND / fps)


def map_shutter_for_fps(t: float,
                        exposure_range: Optional[ValueRange],
                        fps: float,
                        margin_ns: int = DEFAULT_EXPOSURE_MARGIN_NS) -> Optional[int]:
    """Exposure for slider value ``t`` capped so it fits a frame at ``fps``."""
    interpolated = map_normalized_to_native(t, exposure_range, ParameterKind.EXPOSURE_NS)
    if interpolated is None:
        return None
    capped = min(interpolated, compute_max_shutter_for_fps(fps, margin_ns))
    return int(exposure_range.clamp(capped))


def progress_to_normalized(progress: int, scale: int = 1000) -> float:
    return min(max(progress / float(scale), 0.0), 1.0)


def normalized_to_progress(t: float, scale: int = 1000) -> int:
    return min(max(int(t * scale), 0), scale)


def choose_fps_range(ranges: Sequence[ValueRange], target_fps: int) -> Optional[ValueRange]:
    """Narrowest range containing ``target_fps``, else the nearest upper bound."""
    if not ranges:
        return None
    containing = [r for r in ranges if r.contains(target_fps)]
    if containing:
        return min(containing, key=lambda r: r.span)
    return min(ranges, key=lambda r: abs(r.upper - target_fps))


def choose_auto_fps_range(ranges: Sequence[ValueRange], preferred_fps: int = 30) -> Optional[ValueRange]:
    """Fixed ``(preferred, preferred)`` range if offered, else the narrowest one."""
    if not ranges:
        return None
    for r in ranges:
        if r.lower == preferred_fps and r.upper == preferred_fps:
            return r
    return min(ranges, key=lambda r: r.span)


def format_focus_distance(diopters: Optional[float]) -> str:
    """Human-readable focus distance; 0 diopters is infinity."""
    if diopters is None:
        return "Focus: —"
    if diopters <= 0:
        return "Focus: ∞"
    return f"Focus: {100.0 / diopters:.1f} cm"


@dataclass
class CaptureParameterMapper:
    """Session-bound mapper using one hardware capability snapshot.

    Example:
        mapper = CaptureParameterMapper(capabilities)
        iso = mapper.iso(0.5)
        exposure_ns = mapper.exposure_ns(0.8, fps=30)
    """

    capabilities: HardwareCapabilities
    config: ControlConfig = field(default_factory=ControlConfig)

    def iso(self, t: float) -> Optional[int]:
        return map_normalized_to_native(t, self.capabilities.iso_range, ParameterKind.ISO)

    def exposure_ns(self, t: float, fps: Optional[float] = None) -> Optional[int]:
        if fps is None:
            return map_normalized_to_native(t, self.capabilities.exposure_range_ns, ParameterKind.EXPOSURE_NS)
        return map_shutter_for_fps(t, self.capabilities.exposure_range_ns, fps, self.config.exposure_margin_ns)

    def focus_diopters(self, t: float) -> Optional[float]:
        return map_normalized_to_native(t, self.capabilities.focus_range, ParameterKind.FOCUS_DIOPTERS)

    def max_shutter_ns(self, fps: float) -> int:
        """Shutter ceiling at ``fps``, also bounded by the sensor's own maximum."""
        limit = compute_max_shutter_for_fps(fps, self.config.exposure_margin_ns)
        exposure_range = self.capabilities.exposure_range_ns
        if exposure_range is None:
            return limit
        return int(min(exposure_range.upper, limit))

    def max_shutter_normalized(self, fps: float) -> Optional[float]:
        return native_to_normalized(self.max_shutter_ns(fps), self.capabilities.exposure_range_ns)

    def limit_request_for_fps(self, request: ManualControlRequest, fps: float) -> ManualControlRequest:
        """Pull the shutter request down if it no longer fits a frame at ``fps``."""
        ceiling = self.max_shutter_normalized(fps)
        if ceiling is None or request.shutter <= ceiling:
            return request
        return ManualControlRequest(iso=request.iso, shutter=ceiling, focus=request.focus)

    def shutter_limit_text(self, fps: float) -> str:
        return f"Max video shutter: {self.max_shutter_ns(fps) / 1_000_000.0:.2f} ms @ {fps} fps"

    def clamp_calibration(self, iso: int, exposure_ns: int, fps: float) -> Readback:
        """Clamp stored native calibration values against this device.

        The exposure is additionally capped by the frame period at ``fps``.
        Missing ranges pass values through unclamped.
        """
        safe_iso = clamp_native(iso, self.capabilities.iso_range, ParameterKind.ISO)
        safe_exposure = clamp_native(exposure_ns, self.capabilities.exposure_range_ns, ParameterKind.EXPOSURE_NS)
        if self.capabilities.exposure_range_ns is not None:
            safe_exposure = min(safe_exposure, self.max_shutter_ns(fps))
        return Readback(iso=int(safe_iso), exposure_time_ns=int(safe_exposure))

    def snap_to_readback(self, readback: Readback, fallback: ManualControlRequest) -> ManualControlRequest:
        """Convert sensor readback into slider positions; unknown values keep ``fallback``."""
        iso = shutter = focus = None
        if readback.iso is not None:
            iso = native_to_normalized(readback.iso, self.capabilities.iso_range)
        if readback.exposure_time_ns is not None:
            shutter = native_to_normalized(readback.exposure_time_ns, self.capabilities.exposure_range_ns)
        if readback.focus_distance_diopters is not None:
            focus = native_to_normalized(readback.focus_distance_diopters, self.capabilities.focus_range)
        return ManualControlRequest(
            iso=fallback.iso if iso is None else iso,
            shutter=fallback.shutter if shutter is None else shutter,
            focus=fallback.focus if focus is None else focus,
        )
