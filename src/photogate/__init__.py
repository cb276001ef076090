"""
Photogate: capture-quality gating and manual camera control for photogrammetry.

This package scores live preview frames for exposure, sharpness and shake,
and drives manual sensor controls through a tiered fallback so capture
settings stay consistent across a photogrammetry session.
"""

__version__ = "0.1.0"

from . import utils
from . import schemas
from . import vision
from .config import PhotogateConfig

__all__ = [
    "utils",
    "schemas",
    "vision",
    "PhotogateConfig",
]
