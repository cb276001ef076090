#!/usr/bin/env python3
"""
Demonstration of the frame quality gate on synthetic preview frames.

This script demonstrates:
1. A still, textured scene settling into a stable verdict
2. Shake, defocus and over-exposure resetting the streak
3. Optional per-frame CSV diagnostics

Usage:
    python scripts/quality_gate_demo.py [--config CONFIG_PATH] [--diagnostics CSV_PATH]
"""

import argparse

import cv2
import numpy as np

from photogate import PhotogateConfig
from photogate.utils import setup_logging
from photogate.vision.quality import Frame, QualityDiagnosticsLogger, QualityGate


class MockPreview:
    """Synthetic camera preview producing NV21-like luma planes with row padding."""

    def __init__(self, width: int = 640, height: int = 480, row_padding: int = 64, seed: int = 0):
        self.width = width
        self.height = height
        self.row_stride = width + row_padding
        self._rng = np.random.default_rng(seed)
        self._scene = self._make_scene()

    def _make_scene(self) -> np.ndarray:
        scene = np.full((self.height, self.width), 120, dtype=np.uint8)
        for _ in range(120):
            cx = int(self._rng.integers(0, self.width))
            cy = int(self._rng.integers(0, self.height))
            r = int(self._rng.integers(6, 24))
            shade = int(self._rng.integers(70, 180))
            cv2.circle(scene, (cx, cy), r, shade, thickness=-1)
        return scene

    def frame(self, shake_px: int = 0, blur: int = 0, gain: float = 1.0) -> Frame:
        plane = np.roll(self._scene, shake_px, axis=1)
        if blur > 0:
            k = 2 * blur + 1
            plane = cv2.GaussianBlur(plane, (k, k), blur)
        noise = self._rng.normal(0, 1.5, plane.shape)
        plane = np.clip(plane.astype(np.float32) * gain + noise, 0, 255).astype(np.uint8)

        padded = np.zeros((self.height, self.row_stride), dtype=np.uint8)
        padded[:, :self.width] = plane
        return Frame(buffer=padded.tobytes(), width=self.width, height=self.height, row_stride=self.row_stride)


def run_sequence(gate: QualityGate, preview: MockPreview, label: str, frames: int, **kwargs) -> None:
    print(f"\n--- {label} ---")
    for i in range(frames):
        verdict = gate.analyze(preview.frame(**kwargs))
        stats = verdict.stats
        print(f"  frame {i:2d}: {verdict.status_text:<16} "
              f"mean={stats.mean:6.1f} sharp={stats.sharp_score:8.1f} mad={stats.motion_mad:5.1f} "
              f"shutter={'on' if verdict.is_stable else 'off'}")


def main():
    """Main demonstration function."""
    parser = argparse.ArgumentParser(description="Frame quality gate demonstration")
    parser.add_argument("--config", help="Path to configuration file (json or yaml)")
    parser.add_argument("--diagnostics", help="Write per-frame statistics to this CSV file")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    args = parser.parse_args()

    setup_logging(args.log_level)

    print("Frame Quality Gate Demonstration")
    print("=" * 50)

    config = PhotogateConfig.load(args.config) if args.config else PhotogateConfig.create_default()
    diag_path = args.diagnostics or config.diagnostics_path
    diag = QualityDiagnosticsLogger(csv_path=diag_path, extras={"source": "mock"}) if diag_path else None

    gate = QualityGate(config.quality, diag=diag)
    preview = MockPreview()

    try:
        run_sequence(gate, preview, "Still scene", 14)
        run_sequence(gate, preview, "Hand shake", 3, shake_px=12)
        run_sequence(gate, preview, "Defocus", 3, blur=6)
        run_sequence(gate, preview, "Over-exposed", 3, gain=2.2)
        gate.reset()
        run_sequence(gate, preview, "After reset", 14)
    finally:
        if diag is not None:
            diag.close()
            print(f"\nDiagnostics written to {diag_path}")

    print("\n=== Demonstration Complete ===")
    return 0


if __name__ == "__main__":
    exit(main())
