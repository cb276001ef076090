from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from ...utils.log import get_logger
from .camera_interface import ApplyResult, CaptureControlInterface
from .capabilities import HardwareCapabilities
from .config import ControlConfig
from .errors import CaptureConfigurationError
from .mapper import CaptureParameterMapper
from .request import CaptureRequestOptions, CaptureTier, ManualControlRequest, Readback
from .tiers import build_auto_mode, build_tier
from .white_balance import WhiteBalanceFreeze

logger = get_logger(__name__)


@dataclass(frozen=True)
class TierRejection:
    """One refused apply attempt, kept for display and diagnostics."""

    tier: Optional[CaptureTier]
    reason: str


@dataclass(frozen=True)
class AppliedCaptureState:
    """Last request the hardware fully accepted, plus sensor readback.

    ``tier`` is ``None`` for the auto-mode request, which sits outside the
    fallback ladder.
    """

    tier: Optional[CaptureTier]
    options: CaptureRequestOptions
    requested: Optional[ManualControlRequest] = None
    readback: Optional[Readback] = None
    rejections: tuple = ()

    @property
    def is_auto_mode(self) -> bool:
        return self.tier is None

    def to_dict(self) -> Dict[str, Any]:
        readback = self.readback or Readback()
        return {
            "mode": "auto" if self.is_auto_mode else "lock",
            "tier": None if self.tier is None else int(self.tier),
            "tier_name": None if self.tier is None else self.tier.name.lower(),
            "options": self.options.to_dict(),
            "requested": None if self.requested is None else {
                "iso": self.requested.iso,
                "shutter": self.requested.shutter,
                "focus": self.requested.focus,
            },
            "result_iso": readback.iso,
            "result_exposure_time_ns": readback.exposure_time_ns,
            "result_exposure_time_ms": readback.exposure_time_ms,
            "result_focus_distance_diopters": readback.focus_distance_diopters,
            "rejections": [{"tier": None if r.tier is None else int(r.tier), "reason": r.reason}
                           for r in self.rejections],
        }


@dataclass
class TieredControlNegotiator:
    """Applies manual capture controls, degrading tier by tier on rejection.

    The ladder only moves forward within a session: a rejected tier is never
    tried again, even when the negotiation that rejected it was cancelled or
    ended in a configuration error. ``reset`` (leaving lock mode) returns to
    the initial tier.

    Example:
        negotiator = TieredControlNegotiator(control, capabilities)
        state = negotiator.negotiate_and_apply(ManualControlRequest(iso=0.2, shutter=0.4, focus=0.7))
        print(state.tier)
    """

    control: CaptureControlInterface
    capabilities: HardwareCapabilities
    config: ControlConfig = field(default_factory=ControlConfig)
    mapper: Optional[CaptureParameterMapper] = None

    _tier: CaptureTier = field(default=CaptureTier.FULL_MANUAL, init=False, repr=False)
    _applied: Optional[AppliedCaptureState] = field(default=None, init=False, repr=False)
    _readback: Optional[Readback] = field(default=None, init=False, repr=False)
    _rejections: List[TierRejection] = field(default_factory=list, init=False, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)
    _cancelled: threading.Event = field(default_factory=threading.Event, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.mapper is None:
            self.mapper = CaptureParameterMapper(self.capabilities, self.config)
        self._tier = self.initial_tier

    @property
    def initial_tier(self) -> CaptureTier:
        if self.capabilities.supports_manual_sensor:
            return CaptureTier.FULL_MANUAL
        return CaptureTier.FOCUS_ONLY_MANUAL

    @property
    def current_tier(self) -> CaptureTier:
        """Tier the next negotiation will try first."""
        return self._tier

    @property
    def applied_state(self) -> Optional[AppliedCaptureState]:
        return self._applied

    @property
    def last_readback(self) -> Optional[Readback]:
        return self._readback

    @property
    def rejections(self) -> List[TierRejection]:
        return list(self._rejections)

    def negotiate_and_apply(self,
                            request: ManualControlRequest,
                            wb: Optional[WhiteBalanceFreeze] = None,
                            fps: Optional[float] = None) -> Optional[AppliedCaptureState]:
        """Apply ``request`` at the current tier, escalating until accepted.

        Returns the new applied state, or the previous one if the negotiation
        was cancelled before any tier was accepted.

        Raises:
            CaptureConfigurationError: Tier 3 itself was rejected.
        """
        fps = self.config.video_fps if fps is None else fps
        with self._lock:
            try:
                return self._negotiate(request, wb, fps)
            finally:
                # A cancel only applies to the negotiation it interrupted
                self._cancelled.clear()

    def _negotiate(self,
                   request: ManualControlRequest,
                   wb: Optional[WhiteBalanceFreeze],
                   fps: float) -> Optional[AppliedCaptureState]:
        tier: Optional[CaptureTier] = self._tier
        while tier is not None:
            if self._cancelled.is_set():
                logger.info(f"Negotiation cancelled before tier {int(tier)}; keeping last accepted request")
                return self._applied

            options = build_tier(tier, self.mapper, request, fps, wb)
            result = self.control.apply(options)
            if result.accepted:
                logger.info(f"Tier {int(tier)} ({tier.name.lower()}) applied")
                self._tier = tier
                self._applied = AppliedCaptureState(
                    tier=tier,
                    options=options,
                    requested=request,
                    readback=self._readback,
                    rejections=tuple(self._rejections),
                )
                return self._applied

            self._record_rejection(tier, result)
            if tier.is_terminal:
                self._tier = tier
                logger.error(f"Tier {int(tier)} rejected: {result.reason}")
                raise CaptureConfigurationError(
                    "Fully automatic capture request was rejected", reason=result.reason
                )
            logger.warning(f"Tier {int(tier)} rejected: {result.reason}")
            # A refused tier is never retried within the session
            tier = tier.next()
            self._tier = tier
        return self._applied

    def apply_auto(self) -> AppliedCaptureState:
        """Apply the auto-mode request (outside the ladder).

        A rejection is retried once without the AE fps range.

        Raises:
            CaptureConfigurationError: the plain auto request was rejected too.
        """
        with self._lock:
            options = build_auto_mode(self.mapper)
            result = self.control.apply(options)
            if not result.accepted and options.ae_target_fps_range is not None:
                self._record_rejection(None, result)
                logger.warning(f"Auto request with fps range rejected: {result.reason}")
                options = options.without_fps_range()
                result = self.control.apply(options)
            if not result.accepted:
                self._record_rejection(None, result)
                logger.error(f"Auto request rejected: {result.reason}")
                raise CaptureConfigurationError("Auto capture request was rejected", reason=result.reason)

            logger.debug("Auto request applied")
            self._applied = AppliedCaptureState(
                tier=None,
                options=options,
                readback=self._readback,
                rejections=tuple(self._rejections),
            )
            return self._applied

    def record_readback(self, readback: Readback) -> Optional[AppliedCaptureState]:
        """Attach the latest sensor readback to the applied state."""
        with self._lock:
            self._readback = readback
            if self._applied is not None:
                self._applied = replace(self._applied, readback=readback)
            return self._applied

    def reset(self) -> None:
        """Return to the initial tier, e.g. when lock mode is left."""
        with self._lock:
            self._tier = self.initial_tier
            self._rejections.clear()
            self._cancelled.clear()

    def cancel(self) -> None:
        """Abandon the in-flight (or lock-waiting) negotiation at its next tier boundary."""
        self._cancelled.set()

    def _record_rejection(self, tier: Optional[CaptureTier], result: ApplyResult) -> None:
        self._rejections.append(TierRejection(tier=tier, reason=result.reason))
