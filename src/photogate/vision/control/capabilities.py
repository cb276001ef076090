from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

Number = Union[int, float]


@dataclass(frozen=True)
class ValueRange:
    """Closed ``[lower, upper]`` range reported by the hardware."""

    lower: Number
    upper: Number

    def __post_init__(self) -> None:
        if self.upper < self.lower:
            raise ValueError(f"Invalid range [{self.lower}, {self.upper}]")

    @property
    def span(self) -> Number:
        return self.upper - self.lower

    def contains(self, value: Number) -> bool:
        return self.lower <= value <= self.upper

    def clamp(self, value: Number) -> Number:
        return min(max(value, self.lower), self.upper)

    def as_tuple(self) -> Tuple[Number, Number]:
        return (self.lower, self.upper)

    @classmethod
    def from_value(cls, value: Any) -> Optional["ValueRange"]:
        """Accept ``None``, a ``ValueRange`` or a 2-sequence."""
        if value is None:
            return None
        if isinstance(value, ValueRange):
            return value
        lower, upper = value
        return cls(lower, upper)


@dataclass(frozen=True)
class HardwareCapabilities:
    """Camera characteristics read once when the camera is bound.

    Any range may be ``None`` when the device omits the optional
    characteristic; consumers must then leave the parameter unclamped.
    """

    iso_range: Optional[ValueRange] = None
    exposure_range_ns: Optional[ValueRange] = None
    min_focus_distance: Optional[float] = None
    supports_manual_sensor: bool = False
    supports_awb_lock: bool = False
    fps_ranges: Tuple[ValueRange, ...] = ()

    @property
    def focus_range(self) -> Optional[ValueRange]:
        """``[0, min_focus_distance]`` in diopters; ``None`` for fixed-focus lenses."""
        if self.min_focus_distance is None or self.min_focus_distance <= 0:
            return None
        return ValueRange(0.0, float(self.min_focus_distance))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HardwareCapabilities":
        """Build a snapshot from plain data, e.g. a host-side characteristics dump."""
        fps: Sequence[Any] = data.get("fps_ranges") or ()
        return cls(
            iso_range=ValueRange.from_value(data.get("iso_range")),
            exposure_range_ns=ValueRange.from_value(data.get("exposure_range_ns")),
            min_focus_distance=data.get("min_focus_distance"),
            supports_manual_sensor=bool(data.get("supports_manual_sensor", False)),
            supports_awb_lock=bool(data.get("supports_awb_lock", False)),
            fps_ranges=tuple(ValueRange.from_value(r) for r in fps),
        )

    def summary(self) -> str:
        return (f"MANUAL_SENSOR={self.supports_manual_sensor} | minFocus={self.min_focus_distance} | "
                f"ISO={self.iso_range and self.iso_range.as_tuple()} | "
                f"EXP(ns)={self.exposure_range_ns and self.exposure_range_ns.as_tuple()}")
