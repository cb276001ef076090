"""Single-channel luma frame view used by the quality gate."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

import cv2
import numpy as np

BufferLike = Union[bytes, bytearray, memoryview, np.ndarray]


@dataclass(frozen=True, eq=False)
class Frame:
    """Immutable view over a luma plane with an explicit row stride.

    The buffer stays owned by the caller. ``luma`` is a zero-copy strided view,
    so a frame must not outlive the analysis call it was created for.
    """

    buffer: BufferLike
    width: int
    height: int
    row_stride: int
    _plane: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Frame dimensions must be positive, got {self.width}x{self.height}")
        if self.row_stride < self.width:
            raise ValueError(f"Row stride {self.row_stride} is smaller than width {self.width}")

        flat = np.frombuffer(self.buffer, dtype=np.uint8) if not isinstance(self.buffer, np.ndarray) \
            else self.buffer.reshape(-1)
        if flat.dtype != np.uint8:
            raise ValueError(f"Luma buffer must be uint8, got {flat.dtype}")

        # The last row may be shorter than the stride (padded planes)
        required = (self.height - 1) * self.row_stride + self.width
        if flat.size < required:
            raise ValueError(f"Buffer holds {flat.size} bytes, need at least {required}")

        plane = np.lib.stride_tricks.as_strided(
            flat,
            shape=(self.height, self.width),
            strides=(self.row_stride * flat.itemsize, flat.itemsize),
            writeable=False,
        )
        object.__setattr__(self, "_plane", plane)

    @property
    def luma(self) -> np.ndarray:
        """``(height, width)`` uint8 read-only view of the plane."""
        return self._plane

    @classmethod
    def from_array(cls, gray: np.ndarray) -> "Frame":
        """Wrap a 2-D uint8 array (which may itself be a strided view)."""
        if gray.ndim != 2:
            raise ValueError(f"Expected a 2-D luma array, got shape {gray.shape}")
        if gray.dtype != np.uint8:
            raise ValueError(f"Luma array must be uint8, got {gray.dtype}")
        if not gray.flags.c_contiguous:
            gray = np.ascontiguousarray(gray)
        h, w = gray.shape
        return cls(buffer=gray, width=w, height=h, row_stride=w)

    @classmethod
    def from_image(cls, image: np.ndarray) -> "Frame":
        """Build a frame from a grayscale or BGR host image."""
        if image.ndim == 2:
            return cls.from_array(image)
        if image.ndim == 3 and image.shape[2] == 3:
            # Assume BGR (OpenCV convention)
            return cls.from_array(cv2.cvtColor(image, cv2.COLOR_BGR2GRAY))
        raise ValueError("Unsupported image shape for luma conversion: " + str(image.shape))
