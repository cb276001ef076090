"""Aggregated configuration for the quality gate and capture control."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .utils.io import load_data, save_data
from .vision.control.config import ControlConfig
from .vision.quality.config import QualityGateConfig


@dataclass
class PhotogateConfig:
    """Complete photogate configuration."""

    quality: QualityGateConfig = field(default_factory=QualityGateConfig)
    control: ControlConfig = field(default_factory=ControlConfig)

    # Per-frame diagnostics CSV; None disables it
    diagnostics_path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "quality": self.quality.to_dict(),
            "control": self.control.to_dict(),
            "diagnostics_path": self.diagnostics_path,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PhotogateConfig":
        config = cls()
        if 'quality' in data:
            config.quality = QualityGateConfig.from_dict(data['quality'])
        if 'control' in data:
            config.control = ControlConfig.from_dict(data['control'])
        if 'diagnostics_path' in data:
            config.diagnostics_path = data['diagnostics_path']
        return config

    def save(self, path: Union[str, Path]) -> None:
        """Save configuration; JSON or YAML is picked from the file suffix."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        save_data(self.to_dict(), path)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "PhotogateConfig":
        """Load configuration from a JSON or YAML file."""
        return cls.from_dict(load_data(path) or {})

    @classmethod
    def create_default(cls) -> "PhotogateConfig":
        return cls()

    @classmethod
    def create_low_light(cls) -> "PhotogateConfig":
        """Configuration for dim interiors."""
        config = cls()

        # Accept darker frames and a little more sensor noise
        config.quality.exposure.brightness_band = (60.0, 180.0)
        config.quality.sharpness.min_score = 6.0

        # Leave more headroom for longer exposures
        config.control.video_fps = 24
        config.control.preferred_auto_fps = 24

        return config
