from __future__ import annotations

import csv
import os
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from .gate import QualityVerdict


@dataclass
class QualityDiagnosticsLogger:
    """Lightweight CSV logger for per-frame quality statistics.

    Each log_verdict() call appends one row with timestamp, the ROI statistics,
    the three pass flags and the streak, plus any extra metadata provided
    (e.g., device model, ISO readback).
    """

    csv_path: Optional[str] = None
    extras: Dict[str, Any] = field(default_factory=dict)
    _writer: Optional[csv.DictWriter] = field(default=None, init=False, repr=False)
    _fh: Optional[Any] = field(default=None, init=False, repr=False)

    FIELDS = [
        "ts", "width", "height",
        "mean", "clip_white_pct", "clip_black_pct", "specular_pct",
        "laplacian_variance", "noise_estimate", "sharp_score", "motion_mad",
        "exposure_ok", "focus_ok", "motion_ok", "streak_count", "status",
    ]

    def __post_init__(self) -> None:
        if self.csv_path is not None:
            dirname = os.path.dirname(self.csv_path)
            if dirname and not os.path.isdir(dirname):
                os.makedirs(dirname, exist_ok=True)
            new_file = not os.path.exists(self.csv_path)
            self._fh = open(self.csv_path, "a", newline="")
            fieldnames = self.FIELDS + sorted(self.extras.keys())
            self._writer = csv.DictWriter(self._fh, fieldnames=fieldnames, extrasaction='ignore')
            if new_file:
                self._writer.writeheader()

    def log_verdict(self, verdict: "QualityVerdict", **kwargs: Any) -> None:
        if self._writer is None:
            return
        stats = verdict.stats
        row = {
            "ts": f"{time.time():.6f}",
            "mean": stats.mean,
            "clip_white_pct": stats.clip_white_pct,
            "clip_black_pct": stats.clip_black_pct,
            "specular_pct": stats.specular_pct,
            "laplacian_variance": stats.laplacian_variance,
            "noise_estimate": stats.noise_estimate,
            "sharp_score": stats.sharp_score,
            "motion_mad": stats.motion_mad,
            "exposure_ok": int(verdict.exposure_ok),
            "focus_ok": int(verdict.focus_ok),
            "motion_ok": int(verdict.motion_ok),
            "streak_count": verdict.streak_count,
            "status": verdict.status.value,
        }
        # prefer per-call kwargs; fall back to global extras
        for k, v in {**self.extras, **kwargs}.items():
            row[k] = v
        self._writer.writerow(row)
        self._fh.flush()

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None
            self._writer = None
