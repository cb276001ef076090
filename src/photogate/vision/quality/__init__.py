"""Frame quality gate.

Real-time per-frame analysis of a luma plane: exposure and clipping,
noise-normalized sharpness, and frame-to-frame shake, debounced into a
stability signal that enables the shutter.
"""

from .config import ExposureConfig, MotionConfig, QualityGateConfig, SharpnessConfig
from .diagnostics import QualityDiagnosticsLogger
from .frame import Frame
from .gate import GateState, QualityGate, QualityStatus, QualityVerdict, RoiStats
from .metrics import (
    ExposureStats,
    MotionEstimator,
    SharpnessStats,
    exposure_stats,
    motion_signature,
    sharpness_stats,
    signature_mad,
)
from .sampler import RoiBounds, central_roi

__all__ = [
    # Frames and sampling
    "Frame",
    "RoiBounds",
    "central_roi",

    # Estimators
    "ExposureStats",
    "SharpnessStats",
    "MotionEstimator",
    "exposure_stats",
    "sharpness_stats",
    "motion_signature",
    "signature_mad",

    # Gate
    "QualityGate",
    "QualityVerdict",
    "QualityStatus",
    "GateState",
    "RoiStats",

    # Configuration and diagnostics
    "ExposureConfig",
    "SharpnessConfig",
    "MotionConfig",
    "QualityGateConfig",
    "QualityDiagnosticsLogger",
]
