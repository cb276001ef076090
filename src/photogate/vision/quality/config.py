"""Configuration for the frame quality gate.

Every threshold here was hand-tuned on a handful of phones; they are exposed
as configuration so they can be recalibrated per device.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Tuple


@dataclass
class ExposureConfig:
    """Brightness band and clipping limits on an 8-bit luma scale."""

    step: int = 4
    low_clip: int = 5
    high_clip: int = 250
    specular: int = 245
    brightness_band: Tuple[float, float] = (90.0, 180.0)
    max_clip_pct: float = 1.0
    max_specular_pct: float = 0.2


@dataclass
class SharpnessConfig:
    """Noise-normalized Laplacian sharpness parameters."""

    step: int = 8
    laplacian_lag: int = 10
    noise_offset: int = 2
    min_score: float = 8.0


@dataclass
class MotionConfig:
    """Coarse-grid frame-difference parameters."""

    grid_step: int = 16
    max_mad: float = 10.0


@dataclass
class QualityGateConfig:
    """Complete quality gate configuration."""

    roi_margin: float = 0.25
    streak_required: int = 12
    exposure: ExposureConfig = field(default_factory=ExposureConfig)
    sharpness: SharpnessConfig = field(default_factory=SharpnessConfig)
    motion: MotionConfig = field(default_factory=MotionConfig)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        # Plain lists so the dict stays YAML-safe
        data["exposure"]["brightness_band"] = list(self.exposure.brightness_band)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QualityGateConfig":
        config = cls()
        if 'exposure' in data:
            exposure = dict(data['exposure'])
            if 'brightness_band' in exposure:
                exposure['brightness_band'] = tuple(exposure['brightness_band'])
            config.exposure = ExposureConfig(**exposure)
        if 'sharpness' in data:
            config.sharpness = SharpnessConfig(**data['sharpness'])
        if 'motion' in data:
            config.motion = MotionConfig(**data['motion'])
        for key in ['roi_margin', 'streak_required']:
            if key in data:
                setattr(config, key, data[key])
        return config
