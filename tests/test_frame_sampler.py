import numpy as np
import pytest

from photogate.vision.quality import Frame, RoiBounds, central_roi

from conftest import checkerboard


# =============================================================================
# Frame
# =============================================================================

def test_frame_from_padded_buffer_honours_row_stride():
    gray = checkerboard(width=20, height=6)
    stride = 32
    padded = np.full((6, stride), 255, dtype=np.uint8)
    padded[:, :20] = gray

    # Last row may stop right after the visible pixels
    buffer = padded.reshape(-1)[: 5 * stride + 20].tobytes()
    frame = Frame(buffer=buffer, width=20, height=6, row_stride=stride)

    assert frame.luma.shape == (6, 20)
    np.testing.assert_array_equal(frame.luma, gray)


def test_frame_rejects_short_buffer():
    with pytest.raises(ValueError):
        Frame(buffer=bytes(99), width=10, height=10, row_stride=10)


@pytest.mark.parametrize("width,height,stride", [(0, 10, 10), (10, 0, 10), (10, 10, 5)])
def test_frame_rejects_bad_geometry(width, height, stride):
    with pytest.raises(ValueError):
        Frame(buffer=bytes(200), width=width, height=height, row_stride=stride)


def test_frame_luma_is_read_only():
    frame = Frame.from_array(checkerboard())
    with pytest.raises(ValueError):
        frame.luma[0, 0] = 1


def test_frame_from_bgr_image():
    bgr = np.zeros((8, 12, 3), dtype=np.uint8)
    bgr[..., 1] = 200
    frame = Frame.from_image(bgr)
    assert frame.width == 12 and frame.height == 8
    # Pure green maps to ~0.587 * 200
    assert abs(int(frame.luma[0, 0]) - 117) <= 1


def test_frame_from_array_rejects_wrong_dtype():
    with pytest.raises(ValueError):
        Frame.from_array(np.zeros((4, 4), dtype=np.float32))


# =============================================================================
# ROI
# =============================================================================

def test_central_roi_keeps_central_half():
    roi = central_roi(160, 120)
    assert (roi.left, roi.top, roi.right, roi.bottom) == (40, 30, 120, 90)
    assert roi.width == 80 and roi.height == 60


@pytest.mark.parametrize("width,height", [(1, 1), (3, 2), (640, 480), (1, 1000)])
def test_central_roi_stays_inside_frame(width, height):
    roi = central_roi(width, height)
    assert 0 <= roi.left <= roi.right <= width
    assert 0 <= roi.top <= roi.bottom <= height


def test_roi_sample_count_and_inset():
    roi = RoiBounds(0, 0, 10, 10, step=4)
    assert roi.sample_count() == 9
    assert roi.inset(6).is_empty
    assert RoiBounds(0, 0, 0, 5, step=1).sample_count() == 0
