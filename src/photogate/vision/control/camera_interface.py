from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable

from .request import CaptureRequestOptions


@dataclass(frozen=True)
class ApplyResult:
    """Outcome of handing one capture request to the hardware layer."""

    accepted: bool
    reason: str = ""

    @classmethod
    def ok(cls) -> "ApplyResult":
        return cls(accepted=True)

    @classmethod
    def rejected(cls, reason: str) -> "ApplyResult":
        return cls(accepted=False, reason=reason)


@runtime_checkable
class CaptureControlInterface(Protocol):
    """Typed interface for the camera-binding layer that applies capture requests.

    ``apply`` blocks until the request is either installed as the repeating
    request or refused. A refused request must leave the previously accepted
    request in place.
    """

    def apply(self, options: CaptureRequestOptions) -> ApplyResult:
        """Install ``options`` and report whether the hardware accepted them."""


class ExceptionTranslatingControl:
    """Adapts a camera stack that signals rejection by raising.

    Example:
        control = ExceptionTranslatingControl(lambda opts: c2.set_options(opts.to_dict()))
    """

    def __init__(self, apply_fn: Callable[[CaptureRequestOptions], object]):
        self._apply_fn = apply_fn

    def apply(self, options: CaptureRequestOptions) -> ApplyResult:
        try:
            self._apply_fn(options)
        except Exception as e:
            return ApplyResult.rejected(f"{type(e).__name__}: {e}")
        return ApplyResult.ok()
