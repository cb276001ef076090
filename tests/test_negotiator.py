import threading

import pytest

from photogate.vision.control import (
    AeMode,
    AfMode,
    AwbMode,
    CaptureConfigurationError,
    CaptureControlInterface,
    CaptureRequestOptions,
    CaptureTier,
    ColorCorrectionMode,
    ExceptionTranslatingControl,
    ManualControlRequest,
    Readback,
    TieredControlNegotiator,
    ValueRange,
    WhiteBalanceFreeze,
)

from conftest import FakeControl

REQUEST = ManualControlRequest(iso=0.5, shutter=1.0, focus=0.25)
FREEZE = WhiteBalanceFreeze(gains=(1.5, 1.0, 1.0, 1.8), transform=(1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0))


def test_fake_control_satisfies_interface(fake_control):
    assert isinstance(fake_control, CaptureControlInterface)


# =============================================================================
# Tier selection
# =============================================================================

def test_tier1_accepted_with_manual_sensor(fake_control, full_caps):
    negotiator = TieredControlNegotiator(fake_control, full_caps)
    state = negotiator.negotiate_and_apply(REQUEST, fps=30)

    assert state.tier is CaptureTier.FULL_MANUAL
    assert fake_control.attempted_tiers == [1]
    options = state.options
    assert options.ae_mode is AeMode.OFF
    assert options.af_mode is AfMode.OFF
    assert options.ae_target_fps_range is None
    assert options.sensor_sensitivity == 1650
    assert options.sensor_exposure_time_ns == 32_333_333
    assert options.sensor_frame_duration_ns == 33_333_333
    assert options.lens_focus_distance == pytest.approx(2.5)


def test_without_manual_sensor_tier1_is_never_tried(fake_control, limited_caps):
    negotiator = TieredControlNegotiator(fake_control, limited_caps)
    assert negotiator.current_tier is CaptureTier.FOCUS_ONLY_MANUAL

    state = negotiator.negotiate_and_apply(REQUEST, fps=30)
    assert state.tier is CaptureTier.FOCUS_ONLY_MANUAL
    assert fake_control.attempted_tiers == [2]
    assert state.options.ae_target_fps_range == ValueRange(15, 30)
    assert state.options.lens_focus_distance == pytest.approx(2.0)


def test_falls_through_to_full_auto(full_caps):
    control = FakeControl(reject_tiers={1, 2})
    negotiator = TieredControlNegotiator(control, full_caps)
    state = negotiator.negotiate_and_apply(REQUEST, wb=FREEZE, fps=30)

    assert state.tier is CaptureTier.FULL_AUTO
    assert control.attempted_tiers == [1, 2, 3]
    assert [r.tier for r in state.rejections] == [CaptureTier.FULL_MANUAL, CaptureTier.FOCUS_ONLY_MANUAL]
    assert state.rejections[0].reason == "tier 1 unsupported"
    # Full auto never carries manual values or a frozen WB
    assert state.options.awb_mode is AwbMode.AUTO
    assert state.options.color_correction_gains is None
    assert state.options.sensor_sensitivity is None
    assert state.options.awb_lock is False


def test_full_auto_rejection_is_a_configuration_error(full_caps):
    control = FakeControl(reject_tiers={1, 2, 3})
    negotiator = TieredControlNegotiator(control, full_caps)
    with pytest.raises(CaptureConfigurationError) as excinfo:
        negotiator.negotiate_and_apply(REQUEST, fps=30)
    assert excinfo.value.reason == "tier 3 unsupported"
    assert negotiator.applied_state is None


def test_full_auto_rejection_leaves_ladder_at_full_auto(full_caps):
    control = FakeControl(reject_tiers={1, 2, 3})
    negotiator = TieredControlNegotiator(control, full_caps)
    with pytest.raises(CaptureConfigurationError):
        negotiator.negotiate_and_apply(REQUEST, fps=30)
    assert negotiator.current_tier is CaptureTier.FULL_AUTO

    with pytest.raises(CaptureConfigurationError):
        negotiator.negotiate_and_apply(REQUEST, fps=30)
    assert control.attempted_tiers == [1, 2, 3, 3]


def test_ladder_does_not_climb_back_up(full_caps):
    control = FakeControl(reject_tiers={1})
    negotiator = TieredControlNegotiator(control, full_caps)

    negotiator.negotiate_and_apply(REQUEST, fps=30)
    assert control.attempted_tiers == [1, 2]
    assert negotiator.current_tier is CaptureTier.FOCUS_ONLY_MANUAL

    control.reject_tiers.clear()
    state = negotiator.negotiate_and_apply(REQUEST, fps=30)
    assert state.tier is CaptureTier.FOCUS_ONLY_MANUAL
    assert control.attempted_tiers == [1, 2, 2]


def test_reset_returns_to_initial_tier(full_caps):
    control = FakeControl(reject_tiers={1, 2})
    negotiator = TieredControlNegotiator(control, full_caps)
    negotiator.negotiate_and_apply(REQUEST, fps=30)
    assert negotiator.current_tier is CaptureTier.FULL_AUTO

    negotiator.reset()
    assert negotiator.current_tier is CaptureTier.FULL_MANUAL
    assert negotiator.rejections == []


# =============================================================================
# White balance and fps range per tier
# =============================================================================

def test_frozen_wb_applied_in_tier1(fake_control, full_caps):
    negotiator = TieredControlNegotiator(fake_control, full_caps)
    options = negotiator.negotiate_and_apply(REQUEST, wb=FREEZE, fps=30).options

    assert options.awb_mode is AwbMode.OFF
    assert options.color_correction_mode is ColorCorrectionMode.TRANSFORM_MATRIX
    assert options.color_correction_gains == FREEZE.gains
    assert options.color_correction_transform == FREEZE.transform
    assert options.uses_frozen_white_balance


def test_frozen_wb_applied_in_tier2(limited_caps, fake_control):
    negotiator = TieredControlNegotiator(fake_control, limited_caps)
    options = negotiator.negotiate_and_apply(REQUEST, wb=FREEZE, fps=30).options
    assert options.awb_mode is AwbMode.OFF
    assert options.color_correction_gains == FREEZE.gains


def test_awb_lock_left_unset_when_unsupported(limited_caps, fake_control):
    negotiator = TieredControlNegotiator(fake_control, limited_caps)
    options = negotiator.negotiate_and_apply(REQUEST, fps=30).options
    assert options.awb_mode is AwbMode.AUTO
    assert options.awb_lock is None


def test_ae_off_never_combined_with_fps_range():
    with pytest.raises(ValueError):
        CaptureRequestOptions(
            ae_mode=AeMode.OFF,
            af_mode=AfMode.OFF,
            awb_mode=AwbMode.AUTO,
            ae_target_fps_range=ValueRange(30, 30),
        )


# =============================================================================
# Auto mode
# =============================================================================

def test_apply_auto_uses_fixed_fps_range(fake_control, full_caps):
    state = TieredControlNegotiator(fake_control, full_caps).apply_auto()
    assert state.is_auto_mode
    assert state.options.ae_target_fps_range == ValueRange(30, 30)
    assert state.options.af_mode is AfMode.CONTINUOUS_PICTURE


def test_apply_auto_retries_without_fps_range(full_caps):
    control = FakeControl(reject_fps_range=True)
    state = TieredControlNegotiator(control, full_caps).apply_auto()
    assert len(control.attempts) == 2
    assert state.options.ae_target_fps_range is None
    assert state.rejections[0].tier is None


def test_apply_auto_rejected_twice_raises(full_caps):
    control = FakeControl(reject_tiers={3})
    with pytest.raises(CaptureConfigurationError):
        TieredControlNegotiator(control, full_caps).apply_auto()
    assert len(control.attempts) == 2


# =============================================================================
# Cancellation, readback and failure translation
# =============================================================================

def test_cancel_keeps_last_accepted_state(full_caps):
    negotiator = None

    def cancel_on_tier1(options):
        if options.ae_mode is AeMode.OFF:
            negotiator.cancel()

    control = FakeControl(reject_tiers={1}, on_apply=cancel_on_tier1)
    negotiator = TieredControlNegotiator(control, full_caps)
    auto_state = negotiator.apply_auto()

    state = negotiator.negotiate_and_apply(REQUEST, fps=30)
    assert state is auto_state
    assert control.attempted_tiers == [3, 1]
    # The rejection still counts even though the negotiation was cancelled
    assert negotiator.current_tier is CaptureTier.FOCUS_ONLY_MANUAL

    # The next negotiation is not affected by the earlier cancel and skips tier 1
    control.on_apply = None
    assert negotiator.negotiate_and_apply(REQUEST, fps=30).tier is CaptureTier.FOCUS_ONLY_MANUAL
    assert control.attempted_tiers == [3, 1, 2]


def test_cancel_while_waiting_for_lock_is_honoured(fake_control, full_caps):
    negotiator = TieredControlNegotiator(fake_control, full_caps)
    results = []

    with negotiator._lock:
        worker = threading.Thread(target=lambda: results.append(negotiator.negotiate_and_apply(REQUEST, fps=30)))
        worker.start()
        negotiator.cancel()
    worker.join(timeout=5)

    assert results == [None]
    assert fake_control.attempts == []

    # Cleared once that negotiation returned
    assert negotiator.negotiate_and_apply(REQUEST, fps=30).tier is CaptureTier.FULL_MANUAL


def test_readback_recorded_during_apply_is_kept(full_caps):
    negotiator = None

    def report_readback(options):
        negotiator.record_readback(Readback(iso=640, exposure_time_ns=8_000_000))

    control = FakeControl(on_apply=report_readback)
    negotiator = TieredControlNegotiator(control, full_caps)
    state = negotiator.negotiate_and_apply(REQUEST, fps=30)
    assert state.readback == Readback(iso=640, exposure_time_ns=8_000_000)


def test_readback_attached_to_applied_state(fake_control, full_caps):
    negotiator = TieredControlNegotiator(fake_control, full_caps)
    negotiator.negotiate_and_apply(REQUEST, fps=30)
    state = negotiator.record_readback(Readback(iso=800, exposure_time_ns=20_000_000, focus_distance_diopters=2.5))

    data = state.to_dict()
    assert data["mode"] == "lock"
    assert data["tier"] == 1
    assert data["result_iso"] == 800
    assert data["result_exposure_time_ms"] == 20.0
    assert data["options"]["ae_mode"] == "off"


def test_exception_translating_control():
    def explode(options):
        raise RuntimeError("boom")

    result = ExceptionTranslatingControl(explode).apply(None)
    assert not result.accepted
    assert result.reason == "RuntimeError: boom"
    assert ExceptionTranslatingControl(lambda options: None).apply(None).accepted
