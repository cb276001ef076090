"""Capture control.

Maps normalized calibration requests onto device units and applies them
through a three-tier fallback ladder, with a one-shot white-balance freeze
taken from a settled auto white balance.
"""

from .camera_interface import ApplyResult, CaptureControlInterface, ExceptionTranslatingControl
from .capabilities import HardwareCapabilities, ValueRange
from .config import ControlConfig
from .errors import CaptureConfigurationError, CaptureControlError
from .mapper import (
    CaptureParameterMapper,
    ParameterKind,
    choose_auto_fps_range,
    choose_fps_range,
    clamp_native,
    compute_max_shutter_for_fps,
    format_focus_distance,
    frame_duration_ns,
    map_normalized_to_native,
    map_shutter_for_fps,
    native_to_normalized,
    normalized_to_progress,
    progress_to_normalized,
)
from .negotiator import AppliedCaptureState, TieredControlNegotiator, TierRejection
from .request import (
    AeMode,
    AfMode,
    AwbMode,
    CaptureRequestOptions,
    CaptureTier,
    ColorCorrectionMode,
    FlashMode,
    ManualControlRequest,
    Readback,
)
from .session import CaptureControlSession
from .tiers import build_auto_mode, build_focus_only_manual, build_full_auto, build_full_manual, build_tier
from .white_balance import WhiteBalanceFreeze, WhiteBalanceFreezer

__all__ = [
    # Device description and interface
    "ValueRange",
    "HardwareCapabilities",
    "ApplyResult",
    "CaptureControlInterface",
    "ExceptionTranslatingControl",

    # Requests
    "AeMode",
    "AfMode",
    "AwbMode",
    "ColorCorrectionMode",
    "FlashMode",
    "CaptureTier",
    "CaptureRequestOptions",
    "ManualControlRequest",
    "Readback",

    # Mapping
    "ParameterKind",
    "CaptureParameterMapper",
    "map_normalized_to_native",
    "native_to_normalized",
    "clamp_native",
    "compute_max_shutter_for_fps",
    "map_shutter_for_fps",
    "frame_duration_ns",
    "progress_to_normalized",
    "normalized_to_progress",
    "choose_fps_range",
    "choose_auto_fps_range",
    "format_focus_distance",

    # Ladder and white balance
    "build_full_manual",
    "build_focus_only_manual",
    "build_full_auto",
    "build_auto_mode",
    "build_tier",
    "TieredControlNegotiator",
    "AppliedCaptureState",
    "TierRejection",
    "WhiteBalanceFreeze",
    "WhiteBalanceFreezer",
    "CaptureControlSession",

    # Configuration and errors
    "ControlConfig",
    "CaptureControlError",
    "CaptureConfigurationError",
]
