"""Shared pytest configuration and fixtures for the photogate test suite."""

from typing import Iterable, List, Optional

import numpy as np
import pytest

from photogate.vision.control import (
    AeMode,
    AfMode,
    ApplyResult,
    CaptureRequestOptions,
    HardwareCapabilities,
    ValueRange,
)
from photogate.vision.quality import Frame


# =============================================================================
# Synthetic frames
# =============================================================================

def checkerboard(width: int = 160, height: int = 120, square: int = 10,
                 low: int = 90, high: int = 170, shift: int = 0) -> np.ndarray:
    """Textured luma plane; ``shift`` moves the pattern horizontally."""
    ys, xs = np.mgrid[0:height, 0:width]
    cells = ((xs + shift) // square + ys // square) % 2
    return np.where(cells == 0, low, high).astype(np.uint8)


def uniform(width: int = 160, height: int = 120, value: int = 130) -> np.ndarray:
    return np.full((height, width), value, dtype=np.uint8)


@pytest.fixture
def textured_frame() -> Frame:
    return Frame.from_array(checkerboard())


@pytest.fixture
def shifted_frame() -> Frame:
    return Frame.from_array(checkerboard(shift=10))


@pytest.fixture
def flat_frame() -> Frame:
    return Frame.from_array(uniform())


# =============================================================================
# Fake hardware
# =============================================================================

def tier_of(options: CaptureRequestOptions) -> int:
    """Which ladder rung a request was built for."""
    if options.ae_mode is AeMode.OFF:
        return 1
    if options.af_mode is AfMode.OFF:
        return 2
    return 3


class FakeControl:
    """Camera binding that refuses selected tiers and records every attempt."""

    def __init__(self,
                 reject_tiers: Iterable[int] = (),
                 reject_fps_range: bool = False,
                 on_apply=None):
        self.reject_tiers = set(reject_tiers)
        self.reject_fps_range = reject_fps_range
        self.on_apply = on_apply
        self.attempts: List[CaptureRequestOptions] = []
        self.accepted: List[CaptureRequestOptions] = []

    @property
    def attempted_tiers(self) -> List[int]:
        return [tier_of(o) for o in self.attempts]

    @property
    def last_accepted(self) -> Optional[CaptureRequestOptions]:
        return self.accepted[-1] if self.accepted else None

    def apply(self, options: CaptureRequestOptions) -> ApplyResult:
        self.attempts.append(options)
        if self.on_apply is not None:
            self.on_apply(options)
        tier = tier_of(options)
        if tier in self.reject_tiers:
            return ApplyResult.rejected(f"tier {tier} unsupported")
        if self.reject_fps_range and options.ae_target_fps_range is not None:
            return ApplyResult.rejected("fps range unsupported")
        self.accepted.append(options)
        return ApplyResult.ok()


@pytest.fixture
def fake_control() -> FakeControl:
    return FakeControl()


# =============================================================================
# Capability snapshots
# =============================================================================

@pytest.fixture
def full_caps() -> HardwareCapabilities:
    return HardwareCapabilities(
        iso_range=ValueRange(100, 3200),
        exposure_range_ns=ValueRange(100_000, 100_000_000),
        min_focus_distance=10.0,
        supports_manual_sensor=True,
        supports_awb_lock=True,
        fps_ranges=(ValueRange(15, 30), ValueRange(30, 30), ValueRange(7, 60)),
    )


@pytest.fixture
def limited_caps() -> HardwareCapabilities:
    """Device without MANUAL_SENSOR and without optional ranges."""
    return HardwareCapabilities(
        min_focus_distance=8.0,
        supports_manual_sensor=False,
        supports_awb_lock=False,
        fps_ranges=(ValueRange(15, 30),),
    )


def settled_result(frame_number: int = 1, gain: float = 1.5) -> dict:
    return {
        "frame_number": frame_number,
        "awb_state": 2,
        "color_correction_gains": [gain, 1.0, 1.0, 1.8],
        "color_correction_transform": [1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0],
        "sensor_sensitivity": 400,
        "sensor_exposure_time_ns": 10_000_000,
        "lens_focus_distance": 2.5,
    }
