"""Capture-request builders for each rung of the fallback ladder."""

from __future__ import annotations

from typing import Any, Dict, Optional

from .mapper import CaptureParameterMapper, choose_auto_fps_range, choose_fps_range, frame_duration_ns
from .request import (
    AeMode,
    AfMode,
    AwbMode,
    CaptureRequestOptions,
    CaptureTier,
    ColorCorrectionMode,
    FlashMode,
    ManualControlRequest,
)
from .white_balance import WhiteBalanceFreeze


def _white_balance(mapper: CaptureParameterMapper,
                   wb: Optional[WhiteBalanceFreeze]) -> Dict[str, Any]:
    if wb is not None:
        return {
            "awb_mode": AwbMode.OFF,
            "color_correction_mode": ColorCorrectionMode.TRANSFORM_MATRIX,
            "color_correction_gains": tuple(wb.gains),
            "color_correction_transform": tuple(wb.transform),
        }
    # Keep AWB running until it has converged; never lock early
    return {
        "awb_mode": AwbMode.AUTO,
        "awb_lock": False if mapper.capabilities.supports_awb_lock else None,
    }


def build_full_manual(mapper: CaptureParameterMapper,
                      request: ManualControlRequest,
                      fps: float,
                      wb: Optional[WhiteBalanceFreeze] = None) -> CaptureRequestOptions:
    """Tier 1: AE and AF off with manual ISO, shutter and focus.

    AE is off, so the frame rate is pinned through the sensor frame duration
    rather than an AE target fps range.
    """
    return CaptureRequestOptions(
        ae_mode=AeMode.OFF,
        af_mode=AfMode.OFF,
        flash_mode=FlashMode.OFF,
        sensor_sensitivity=mapper.iso(request.iso),
        sensor_exposure_time_ns=mapper.exposure_ns(request.shutter, fps=fps),
        sensor_frame_duration_ns=frame_duration_ns(fps),
        lens_focus_distance=mapper.focus_diopters(request.focus),
        **_white_balance(mapper, wb),
    )


def build_focus_only_manual(mapper: CaptureParameterMapper,
                            request: ManualControlRequest,
                            fps: float,
                            wb: Optional[WhiteBalanceFreeze] = None) -> CaptureRequestOptions:
    """Tier 2: auto exposure (with a stable fps range) and manual focus."""
    return CaptureRequestOptions(
        ae_mode=AeMode.ON,
        af_mode=AfMode.OFF,
        lens_focus_distance=mapper.focus_diopters(request.focus),
        ae_target_fps_range=choose_fps_range(mapper.capabilities.fps_ranges, int(fps)),
        **_white_balance(mapper, wb),
    )


def build_full_auto(mapper: CaptureParameterMapper) -> CaptureRequestOptions:
    """Tier 3: only controls every compliant device accepts."""
    return CaptureRequestOptions(
        ae_mode=AeMode.ON,
        af_mode=AfMode.CONTINUOUS_PICTURE,
        awb_mode=AwbMode.AUTO,
        awb_lock=False if mapper.capabilities.supports_awb_lock else None,
    )


def build_auto_mode(mapper: CaptureParameterMapper) -> CaptureRequestOptions:
    """Request used outside lock mode: full auto with a stable fps range."""
    fps_range = choose_auto_fps_range(mapper.capabilities.fps_ranges, mapper.config.preferred_auto_fps)
    return CaptureRequestOptions(
        ae_mode=AeMode.ON,
        af_mode=AfMode.CONTINUOUS_PICTURE,
        awb_mode=AwbMode.AUTO,
        awb_lock=False if mapper.capabilities.supports_awb_lock else None,
        ae_target_fps_range=fps_range,
    )


def build_tier(tier: CaptureTier,
               mapper: CaptureParameterMapper,
               request: ManualControlRequest,
               fps: float,
               wb: Optional[WhiteBalanceFreeze] = None) -> CaptureRequestOptions:
    if tier is CaptureTier.FULL_MANUAL:
        return build_full_manual(mapper, request, fps, wb)
    if tier is CaptureTier.FOCUS_ONLY_MANUAL:
        if not mapper.config.apply_frozen_wb_in_focus_tier:
            wb = None
        return build_focus_only_manual(mapper, request, fps, wb)
    return build_full_auto(mapper)
