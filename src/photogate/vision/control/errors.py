"""Exceptions raised by the capture-control components."""


class CaptureControlError(RuntimeError):
    """Base class for capture-control failures."""


class CaptureConfigurationError(CaptureControlError):
    """The always-acceptable fallback request was rejected by the hardware.

    Tier 3 (and the auto-mode request) only use controls every compliant
    device supports, so a rejection here points at the integration layer.
    """

    def __init__(self, message: str, reason: str = ""):
        super().__init__(message)
        self.reason = reason
