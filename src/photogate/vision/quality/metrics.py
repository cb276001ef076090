from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Final, Optional

import numpy as np

from .config import ExposureConfig, MotionConfig, SharpnessConfig
from .sampler import RoiBounds

_NAN: Final[float] = float("nan")


@dataclass(frozen=True)
class ExposureStats:
    """Brightness and clipping statistics over the sampled ROI.

    Percentages are relative to ``sample_count``. With zero samples every
    statistic is NaN.
    """

    mean: float
    white_pct: float
    black_pct: float
    specular_pct: float
    sample_count: int

    def is_ok(self, config: ExposureConfig) -> bool:
        if self.sample_count == 0:
            return False
        lo, hi = config.brightness_band
        return (
            lo <= self.mean <= hi
            and self.black_pct < config.max_clip_pct
            and self.white_pct < config.max_clip_pct
            and self.specular_pct < config.max_specular_pct
        )


@dataclass(frozen=True)
class SharpnessStats:
    """Laplacian variance normalized by a local noise estimate."""

    laplacian_variance: float
    noise_mad: float
    score: float
    sample_count: int

    def is_ok(self, config: SharpnessConfig) -> bool:
        # NaN compares False
        return self.sample_count > 0 and self.score > config.min_score


def _sample(luma: np.ndarray, roi: RoiBounds) -> np.ndarray:
    return luma[roi.top:roi.bottom:roi.step, roi.left:roi.right:roi.step]


def exposure_stats(luma: np.ndarray, roi: RoiBounds, config: ExposureConfig) -> ExposureStats:
    """Mean luma and clipped/specular fractions at the exposure stride."""
    samples = _sample(luma, roi.with_step(config.step))
    count = int(samples.size)
    if count == 0:
        return ExposureStats(_NAN, _NAN, _NAN, _NAN, 0)

    total = float(samples.sum(dtype=np.uint64))
    white = int(np.count_nonzero(samples >= config.high_clip))
    black = int(np.count_nonzero(samples <= config.low_clip))
    specular = int(np.count_nonzero(samples >= config.specular))

    scale = 100.0 / count
    return ExposureStats(
        mean=total / count,
        white_pct=white * scale,
        black_pct=black * scale,
        specular_pct=specular * scale,
        sample_count=count,
    )


def sharpness_stats(luma: np.ndarray, roi: RoiBounds, config: SharpnessConfig) -> SharpnessStats:
    """Noise-normalized variance of a lagged discrete Laplacian.

    For every sample point at least ``laplacian_lag`` pixels inside the ROI,
    ``L = 4*c - up - down - left - right`` with neighbours ``lag`` pixels away.
    Noise is the mean absolute difference to the right and lower neighbours
    ``noise_offset`` pixels away. ``score = var(L) / (noise + 1)**2``.
    """
    lag = max(1, int(config.laplacian_lag))
    off = max(1, int(config.noise_offset))
    # Noise neighbours must also stay inside the ROI
    inner = roi.inset(max(lag, off)).with_step(config.step)
    if inner.is_empty:
        return SharpnessStats(_NAN, _NAN, _NAN, 0)

    y0, y1, x0, x1, s = inner.top, inner.bottom, inner.left, inner.right, inner.step

    def shifted(dy: int, dx: int) -> np.ndarray:
        return luma[y0 + dy:y1 + dy:s, x0 + dx:x1 + dx:s].astype(np.int32)

    center = shifted(0, 0)
    up = shifted(-lag, 0)
    down = shifted(lag, 0)
    left = shifted(0, -lag)
    right = shifted(0, lag)

    lap = (4 * center - up - down - left - right).astype(np.float64)
    count = int(lap.size)
    mean = float(lap.sum()) / count
    mean_sq = float(np.square(lap).sum()) / count
    variance = max(0.0, mean_sq - mean * mean)

    noise_right = np.abs(center - shifted(0, off))
    noise_down = np.abs(center - shifted(off, 0))
    noise_mad = float(noise_right.sum() + noise_down.sum()) / (2 * count)

    score = variance / ((noise_mad + 1.0) ** 2)
    return SharpnessStats(
        laplacian_variance=variance,
        noise_mad=noise_mad,
        score=score,
        sample_count=count,
    )


def motion_signature(luma: np.ndarray, roi: RoiBounds, grid_step: int) -> np.ndarray:
    """Flat copy of the ROI sampled on a coarse grid."""
    grid = _sample(luma, roi.with_step(grid_step))
    return np.array(grid, dtype=np.uint8, copy=True).reshape(-1)


def signature_mad(current: np.ndarray, previous: Optional[np.ndarray]) -> float:
    """Mean absolute difference between two signatures, NaN when incomparable."""
    if previous is None or previous.shape != current.shape or current.size == 0:
        return _NAN
    diff = np.abs(current.astype(np.int16) - previous.astype(np.int16))
    return float(diff.mean())


class MotionEstimator:
    """Shake detector comparing consecutive coarse ROI signatures.

    Only the small signature is retained between calls, never the frame.
    """

    def __init__(self, config: MotionConfig):
        self.config = config
        self._previous: Optional[np.ndarray] = None

    def update(self, luma: np.ndarray, roi: RoiBounds) -> float:
        """Return MAD against the previous frame and store the new signature."""
        current = motion_signature(luma, roi, self.config.grid_step)
        mad = signature_mad(current, self._previous)
        self._previous = current
        return mad

    def is_ok(self, mad: float) -> bool:
        return not math.isnan(mad) and mad < self.config.max_mad

    def reset(self) -> None:
        self._previous = None
