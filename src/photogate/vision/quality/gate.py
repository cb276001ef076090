from __future__ import annotations

import math
import threading
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional

from ...utils.log import get_logger
from .config import QualityGateConfig
from .diagnostics import QualityDiagnosticsLogger
from .frame import Frame
from .metrics import ExposureStats, MotionEstimator, SharpnessStats, exposure_stats, sharpness_stats
from .sampler import central_roi

logger = get_logger(__name__)


class GateState(Enum):
    """Debounce state of the gate."""
    IDLE = "idle"
    ACCUMULATING = "accumulating"
    STABLE = "stable"


class QualityStatus(Enum):
    """Informational classification of the latest frame, worst problem first."""
    BAD_EXPOSURE = "bad_exposure"
    BAD_FOCUS = "bad_focus"
    SHAKE = "shake"
    STABILIZING = "stabilizing"
    GOOD = "good"


@dataclass(frozen=True)
class RoiStats:
    """Per-frame statistics; NaN marks insufficient data."""

    mean: float
    clip_white_pct: float
    clip_black_pct: float
    specular_pct: float
    laplacian_variance: float
    noise_estimate: float
    sharp_score: float
    motion_mad: float

    @classmethod
    def combine(cls, exposure: ExposureStats, sharpness: SharpnessStats, motion_mad: float) -> "RoiStats":
        return cls(
            mean=exposure.mean,
            clip_white_pct=exposure.white_pct,
            clip_black_pct=exposure.black_pct,
            specular_pct=exposure.specular_pct,
            laplacian_variance=sharpness.laplacian_variance,
            noise_estimate=sharpness.noise_mad,
            sharp_score=sharpness.score,
            motion_mad=motion_mad,
        )


@dataclass(frozen=True)
class QualityVerdict:
    """Result of analysing one frame."""

    exposure_ok: bool
    focus_ok: bool
    motion_ok: bool
    streak_count: int
    streak_required: int
    stats: RoiStats

    @property
    def quality_ok(self) -> bool:
        return self.exposure_ok and self.focus_ok and self.motion_ok

    @property
    def is_stable(self) -> bool:
        return self.streak_count >= self.streak_required

    @property
    def state(self) -> GateState:
        if self.is_stable:
            return GateState.STABLE
        if self.streak_count > 0:
            return GateState.ACCUMULATING
        return GateState.IDLE

    @property
    def status(self) -> QualityStatus:
        if not self.exposure_ok:
            return QualityStatus.BAD_EXPOSURE
        if not self.focus_ok:
            return QualityStatus.BAD_FOCUS
        if not self.motion_ok:
            return QualityStatus.SHAKE
        if not self.is_stable:
            return QualityStatus.STABILIZING
        return QualityStatus.GOOD

    @property
    def status_text(self) -> str:
        status = self.status
        if status is QualityStatus.BAD_EXPOSURE:
            return "Bad Exposure"
        if status is QualityStatus.BAD_FOCUS:
            return "Bad Focus"
        if status is QualityStatus.SHAKE:
            return "Hold Still"
        if status is QualityStatus.STABILIZING:
            return f"Stabilizing {self.streak_count}/{self.streak_required}"
        return "Good"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["is_stable"] = self.is_stable
        data["status"] = self.status.value
        # NaN is not valid JSON
        data["stats"] = {k: (None if isinstance(v, float) and math.isnan(v) else v)
                         for k, v in data["stats"].items()}
        return data


class QualityGate:
    """Per-frame exposure, focus and shake gate with a debounced stability signal.

    The only state carried between frames is the streak counter and the
    previous motion signature. ``analyze`` is synchronous and never keeps a
    reference to the frame buffer.

    Example:
        gate = QualityGate()
        verdict = gate.analyze(Frame.from_array(gray))
        shutter_button.enabled = verdict.is_stable
    """

    def __init__(self,
                 config: Optional[QualityGateConfig] = None,
                 diag: Optional[QualityDiagnosticsLogger] = None):
        self.config = config or QualityGateConfig()
        self.diag = diag
        self._motion = MotionEstimator(self.config.motion)
        self._streak = 0
        self._state = GateState.IDLE
        self._lock = threading.Lock()

    @property
    def streak_count(self) -> int:
        return self._streak

    @property
    def state(self) -> GateState:
        return self._state

    def analyze(self, frame: Frame) -> QualityVerdict:
        """Analyse one frame and advance the streak."""
        with self._lock:
            luma = frame.luma
            roi = central_roi(frame.width, frame.height, self.config.roi_margin)

            exposure = exposure_stats(luma, roi, self.config.exposure)
            sharpness = sharpness_stats(luma, roi, self.config.sharpness)
            mad = self._motion.update(luma, roi)

            exposure_ok = exposure.is_ok(self.config.exposure)
            focus_ok = sharpness.is_ok(self.config.sharpness)
            motion_ok = self._motion.is_ok(mad)

            if exposure_ok and focus_ok and motion_ok:
                self._streak += 1
            else:
                self._streak = 0

            verdict = QualityVerdict(
                exposure_ok=exposure_ok,
                focus_ok=focus_ok,
                motion_ok=motion_ok,
                streak_count=self._streak,
                streak_required=self.config.streak_required,
                stats=RoiStats.combine(exposure, sharpness, mad),
            )
            self._transition(verdict.state)

            if self.diag is not None:
                self.diag.log_verdict(verdict, width=frame.width, height=frame.height)
            return verdict

    def reset(self) -> None:
        """Drop the streak and motion history, e.g. around video recording."""
        with self._lock:
            self._streak = 0
            self._motion.reset()
            self._transition(GateState.IDLE)

    def _transition(self, new_state: GateState) -> None:
        if new_state is not self._state:
            logger.debug(f"Quality gate {self._state.value} -> {new_state.value} (streak={self._streak})")
            self._state = new_state
