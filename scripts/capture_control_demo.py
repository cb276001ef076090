#!/usr/bin/env python3
"""
Demonstration of tiered capture control with a white-balance freeze.

This script demonstrates:
1. Auto mode with a stable AE fps range
2. Entering lock mode and falling back through the tier ladder
3. Freezing white balance once AWB converges
4. Capping the shutter when the video frame rate changes

Usage:
    python scripts/capture_control_demo.py [--reject-tiers 1 2] [--no-manual-sensor]
"""

import argparse
import json

from photogate import PhotogateConfig
from photogate.utils import setup_logging
from photogate.vision.control import (
    AeMode,
    AfMode,
    ApplyResult,
    CaptureConfigurationError,
    CaptureControlSession,
    CaptureRequestOptions,
    HardwareCapabilities,
)


class MockCameraControl:
    """Mock camera binding that refuses the configured tiers."""

    def __init__(self, reject_tiers=()):
        self.reject_tiers = set(reject_tiers)

    @staticmethod
    def _tier(options: CaptureRequestOptions) -> int:
        if options.ae_mode is AeMode.OFF:
            return 1
        if options.af_mode is AfMode.OFF:
            return 2
        return 3

    def apply(self, options: CaptureRequestOptions) -> ApplyResult:
        tier = self._tier(options)
        if tier in self.reject_tiers:
            return ApplyResult.rejected(f"mock HAL refused tier {tier}")
        print(f"  HAL <- {options.to_dict()}")
        return ApplyResult.ok()


def mock_results():
    """Capture results while AWB searches and then converges."""
    transform = [1.6, -0.4, -0.2, -0.3, 1.5, -0.2, 0.0, -0.6, 1.6]
    for frame_number in range(1, 7):
        converged = frame_number >= 4
        yield {
            "frame_number": frame_number,
            "awb_state": 2 if converged else 1,
            "color_correction_gains": [2.01, 1.0, 1.0, 1.73] if converged else [],
            "color_correction_transform": transform if converged else [],
            "sensor_sensitivity": 320,
            "sensor_exposure_time_ns": 16_000_000,
            "lens_focus_distance": 3.2,
        }


def main():
    """Main demonstration function."""
    parser = argparse.ArgumentParser(description="Tiered capture control demonstration")
    parser.add_argument("--config", help="Path to configuration file (json or yaml)")
    parser.add_argument("--reject-tiers", type=int, nargs="*", default=[1], help="Tiers the mock HAL refuses")
    parser.add_argument("--no-manual-sensor", action="store_true", help="Simulate a device without MANUAL_SENSOR")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    args = parser.parse_args()

    setup_logging(args.log_level)

    print("Tiered Capture Control Demonstration")
    print("=" * 50)

    config = PhotogateConfig.load(args.config) if args.config else PhotogateConfig.create_default()
    capabilities = HardwareCapabilities.from_dict({
        "iso_range": [50, 6400],
        "exposure_range_ns": [13_000, 250_000_000],
        "min_focus_distance": 10.0,
        "supports_manual_sensor": not args.no_manual_sensor,
        "supports_awb_lock": True,
        "fps_ranges": [[15, 30], [30, 30], [7, 60]],
    })

    session = CaptureControlSession(MockCameraControl(args.reject_tiers), capabilities, config.control)

    try:
        print("\n--- Auto mode ---")
        session.start()

        print("\n--- Lock mode ---")
        for record in list(mock_results())[:2]:
            session.on_capture_result(record)
        state = session.set_lock_mode(True)
        print(f"  Applied tier: {state.tier.name.lower()} ({len(state.rejections)} rejection(s))")

        print("\n--- AWB convergence ---")
        for record in mock_results():
            freeze = session.on_capture_result(record)
            print(f"  frame {record['frame_number']}: frozen={freeze is not None}")

        print("\n--- Video frame rate 60 fps ---")
        session.update_request(shutter=1.0)
        session.set_video_fps(60)
        print(f"  {session.shutter_limit_text()}")
        print(f"  {session.focus_text()}")

        print("\n--- Metadata ---")
        print(json.dumps(session.metadata(), indent=2))

        print("\n--- Back to auto ---")
        session.set_lock_mode(False)

    except CaptureConfigurationError as e:
        print(f"Configuration error: {e} ({e.reason})")
        return 1

    print("\n=== Demonstration Complete ===")
    return 0


if __name__ == "__main__":
    exit(main())
