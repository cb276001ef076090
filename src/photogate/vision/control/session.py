from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Mapping, Optional, Union

from ...schemas.capture_result import CaptureResultRecord
from ...utils.log import get_logger
from .camera_interface import CaptureControlInterface
from .capabilities import HardwareCapabilities
from .config import ControlConfig
from .mapper import (
    CaptureParameterMapper,
    format_focus_distance,
    normalized_to_progress,
    progress_to_normalized,
)
from .negotiator import AppliedCaptureState, TieredControlNegotiator
from .request import ManualControlRequest, Readback
from .white_balance import WhiteBalanceFreeze, WhiteBalanceFreezer

logger = get_logger(__name__)


class CaptureControlSession:
    """One camera session's capture control: mapper, tier ladder and WB freeze.

    The session starts in auto mode. Entering lock mode snaps the manual
    requests to what the sensor is currently doing and negotiates the tier
    ladder; leaving it clears the WB freeze and goes back to auto.

    Example:
        session = CaptureControlSession(control, capabilities)
        session.start()
        session.set_lock_mode(True)
        session.update_request(focus=0.6)
        for record in results:
            session.on_capture_result(record)
    """

    def __init__(self,
                 control: CaptureControlInterface,
                 capabilities: HardwareCapabilities,
                 config: Optional[ControlConfig] = None):
        self.config = config or ControlConfig()
        self.capabilities = capabilities
        self.mapper = CaptureParameterMapper(capabilities, self.config)
        self.negotiator = TieredControlNegotiator(
            control=control,
            capabilities=capabilities,
            config=self.config,
            mapper=self.mapper,
        )
        self.freezer = WhiteBalanceFreezer()
        self.request = ManualControlRequest()
        self.video_fps = self.config.video_fps
        self._lock_mode = False
        logger.info(f"Capture session bound: {capabilities.summary()}")

    @property
    def lock_mode(self) -> bool:
        return self._lock_mode

    @property
    def applied_state(self) -> Optional[AppliedCaptureState]:
        return self.negotiator.applied_state

    @property
    def white_balance(self) -> Optional[WhiteBalanceFreeze]:
        return self.freezer.freeze

    def start(self) -> AppliedCaptureState:
        """Apply the auto request once the camera is bound."""
        return self.negotiator.apply_auto()

    def apply(self) -> Optional[AppliedCaptureState]:
        """Re-apply the current request for the current mode."""
        if not self._lock_mode:
            return self.negotiator.apply_auto()
        return self.negotiator.negotiate_and_apply(
            self.request, wb=self.freezer.freeze, fps=self.video_fps
        )

    def set_lock_mode(self, enabled: bool) -> Optional[AppliedCaptureState]:
        if enabled == self._lock_mode:
            return self.apply()

        if enabled:
            readback = self.negotiator.last_readback
            if readback is not None:
                self.request = self.mapper.snap_to_readback(readback, self.request)
            self.request = self.mapper.limit_request_for_fps(self.request, self.video_fps)
            self._lock_mode = True
            self.freezer.set_lock_mode(True)
            logger.info("Lock mode on")
            return self.apply()

        self.negotiator.cancel()
        self._lock_mode = False
        self.freezer.set_lock_mode(False)
        self.negotiator.reset()
        logger.info("Lock mode off")
        return self.apply()

    def update_request(self,
                       iso: Optional[float] = None,
                       shutter: Optional[float] = None,
                       focus: Optional[float] = None) -> Optional[AppliedCaptureState]:
        """Update normalized slider values and re-apply."""
        changes: Dict[str, float] = {}
        if iso is not None:
            changes["iso"] = iso
        if shutter is not None:
            changes["shutter"] = shutter
        if focus is not None:
            changes["focus"] = focus
        self.request = self.mapper.limit_request_for_fps(replace(self.request, **changes), self.video_fps)
        return self.apply()

    def update_progress(self,
                        iso: Optional[int] = None,
                        shutter: Optional[int] = None,
                        focus: Optional[int] = None) -> Optional[AppliedCaptureState]:
        """Same as :meth:`update_request` but with integer slider progress."""
        scale = self.config.progress_scale

        def to_t(progress: Optional[int]) -> Optional[float]:
            return None if progress is None else progress_to_normalized(progress, scale)

        return self.update_request(iso=to_t(iso), shutter=to_t(shutter), focus=to_t(focus))

    def set_video_fps(self, fps: int) -> Optional[AppliedCaptureState]:
        if fps <= 0:
            raise ValueError(f"fps must be positive, got {fps}")
        self.video_fps = fps
        self.request = self.mapper.limit_request_for_fps(self.request, fps)
        return self.apply()

    def on_capture_result(
        self, record: Union[CaptureResultRecord, Mapping[str, Any]]
    ) -> Optional[WhiteBalanceFreeze]:
        """Feed one completed capture result; returns the current WB freeze state.

        The first freeze triggers a re-apply so AWB is switched off with the
        frozen gains and transform.
        """
        record = CaptureResultRecord.coerce(record)
        self.negotiator.record_readback(Readback(
            iso=record.sensor_sensitivity,
            exposure_time_ns=record.sensor_exposure_time_ns,
            focus_distance_diopters=record.lens_focus_distance,
        ))

        was_frozen = self.freezer.is_frozen
        freeze = self.freezer.on_capture_result(record)
        if freeze is not None and not was_frozen and self._lock_mode:
            self.apply()
        return freeze

    def cancel(self) -> None:
        self.negotiator.cancel()

    def shutter_limit_text(self) -> str:
        return self.mapper.shutter_limit_text(self.video_fps)

    def focus_text(self) -> str:
        if self._lock_mode:
            return format_focus_distance(self.mapper.focus_diopters(self.request.focus))
        readback = self.negotiator.last_readback
        if readback is None or readback.focus_distance_diopters is None:
            return "Focus: AUTO"
        return format_focus_distance(readback.focus_distance_diopters)

    def metadata(self) -> Dict[str, Any]:
        """Snapshot for the external metadata/sidecar writer."""
        state = self.applied_state
        return {
            "photogrammetry_lock": self._lock_mode,
            "manual_sensor_supported": self.capabilities.supports_manual_sensor,
            "awb_lock_supported": self.capabilities.supports_awb_lock,
            "fps": self.video_fps,
            "ui_iso_progress": normalized_to_progress(self.request.iso, self.config.progress_scale),
            "ui_shutter_progress": normalized_to_progress(self.request.shutter, self.config.progress_scale),
            "ui_focus_progress": normalized_to_progress(self.request.focus, self.config.progress_scale),
            "applied": None if state is None else state.to_dict(),
            "white_balance": None if self.freezer.freeze is None else self.freezer.freeze.to_dict(),
        }
