from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from ...schemas.capture_result import CaptureResultRecord
from ...utils.log import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class WhiteBalanceFreeze:
    """Colour-correction values captured once AWB had converged."""

    gains: Tuple[float, ...]
    transform: Tuple[float, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"gains": list(self.gains), "transform": list(self.transform)}


class WhiteBalanceFreezer:
    """Captures AWB gains and transform exactly once per lock-mode entry.

    Forcing AWB off before the hardware has converged produces wrong colour on
    many devices, so AWB runs in auto until a result reports CONVERGED or
    LOCKED together with gains and a transform. Those values are then kept
    until lock mode is left or ``clear`` is called.
    """

    def __init__(self, lock_mode: bool = False):
        self._lock_mode = lock_mode
        self._freeze: Optional[WhiteBalanceFreeze] = None
        self._lock = threading.Lock()

    @property
    def lock_mode(self) -> bool:
        return self._lock_mode

    @property
    def freeze(self) -> Optional[WhiteBalanceFreeze]:
        return self._freeze

    @property
    def is_frozen(self) -> bool:
        return self._freeze is not None

    def set_lock_mode(self, enabled: bool) -> None:
        """Leaving lock mode drops the freeze so the next lock re-converges."""
        with self._lock:
            self._lock_mode = enabled
            if not enabled:
                self._clear_locked()

    def clear(self) -> None:
        with self._lock:
            self._clear_locked()

    def on_capture_result(
        self, record: Union[CaptureResultRecord, Mapping[str, Any]]
    ) -> Optional[WhiteBalanceFreeze]:
        """Inspect one result and return the current freeze state (possibly None)."""
        record = CaptureResultRecord.coerce(record)
        with self._lock:
            if not self._lock_mode or self._freeze is not None:
                return self._freeze
            if record.awb_settled and record.has_white_balance:
                self._freeze = WhiteBalanceFreeze(
                    gains=tuple(record.color_correction_gains),
                    transform=tuple(record.color_correction_transform),
                )
                logger.info(f"WB frozen (gains+transform captured) at frame {record.frame_number}")
            return self._freeze

    def _clear_locked(self) -> None:
        if self._freeze is not None:
            logger.debug("WB freeze cleared")
        self._freeze = None
