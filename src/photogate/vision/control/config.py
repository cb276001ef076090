from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict


@dataclass
class ControlConfig:
    """Configuration for capture-parameter mapping and tier negotiation."""

    # Slider resolution (progress 0..progress_scale)
    progress_scale: int = 1000

    # Shutter headroom below one frame period
    exposure_margin_ns: int = 1_000_000

    # Target video frame rate in lock mode
    video_fps: int = 30

    # Fixed AE fps range preferred in auto mode
    preferred_auto_fps: int = 30

    # Apply frozen WB in tier 2 as well as tier 1
    apply_frozen_wb_in_focus_tier: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ControlConfig":
        return cls(**data)
