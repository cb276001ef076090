"""Central region-of-interest sampling bounds."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RoiBounds:
    """Half-open pixel bounds ``[left, right) x [top, bottom)`` plus stride."""

    left: int
    top: int
    right: int
    bottom: int
    step: int

    @property
    def width(self) -> int:
        return max(0, self.right - self.left)

    @property
    def height(self) -> int:
        return max(0, self.bottom - self.top)

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def sample_count(self) -> int:
        """Number of points visited when walking the ROI at ``step``."""
        if self.is_empty:
            return 0
        cols = (self.width + self.step - 1) // self.step
        rows = (self.height + self.step - 1) // self.step
        return rows * cols

    def with_step(self, step: int) -> "RoiBounds":
        return RoiBounds(self.left, self.top, self.right, self.bottom, max(1, int(step)))

    def inset(self, margin: int) -> "RoiBounds":
        """Shrink by ``margin`` on every side; collapses to empty if too small."""
        left = self.left + margin
        top = self.top + margin
        right = max(left, self.right - margin)
        bottom = max(top, self.bottom - margin)
        return RoiBounds(left, top, right, bottom, self.step)


def central_roi(width: int, height: int, margin: float = 0.25, step: int = 1) -> RoiBounds:
    """Return the centered ROI left after trimming ``margin`` of each side.

    ``margin=0.25`` keeps the central half of each dimension. Bounds are always
    clamped inside the frame; a degenerate frame yields an empty ROI.
    """
    margin = min(max(float(margin), 0.0), 0.5)
    width = max(0, int(width))
    height = max(0, int(height))

    left = int(width * margin)
    top = int(height * margin)
    right = min(width, width - left)
    bottom = min(height, height - top)

    return RoiBounds(
        left=left,
        top=top,
        right=max(left, right),
        bottom=max(top, bottom),
        step=max(1, int(step)),
    )
