"""Vision-related components for photogate.

This package groups the frame quality gate and the capture-control
negotiation modules.
"""

from . import control
from . import quality

__all__ = [
    "control",
    "quality",
]
