import pytest

from photogate import PhotogateConfig
from photogate.utils import load_data, save_data
from photogate.vision.control import ControlConfig
from photogate.vision.quality import QualityGateConfig


@pytest.mark.parametrize("suffix", ["json", "yaml", "yml"])
def test_config_round_trip(tmp_path, suffix):
    config = PhotogateConfig.create_low_light()
    config.diagnostics_path = "diag.csv"
    path = tmp_path / "nested" / f"photogate.{suffix}"

    config.save(path)
    loaded = PhotogateConfig.load(path)

    assert loaded == config
    assert loaded.quality.exposure.brightness_band == (60.0, 180.0)
    assert isinstance(loaded.quality.exposure.brightness_band, tuple)


def test_defaults_match_tuned_thresholds():
    config = PhotogateConfig.create_default()
    assert config.quality.streak_required == 12
    assert config.quality.exposure.brightness_band == (90.0, 180.0)
    assert config.quality.exposure.max_clip_pct == 1.0
    assert config.quality.sharpness.min_score == 8.0
    assert config.quality.motion.max_mad == 10.0
    assert config.control.exposure_margin_ns == 1_000_000
    assert config.diagnostics_path is None


def test_partial_dict_keeps_defaults():
    config = PhotogateConfig.from_dict({"quality": {"streak_required": 5, "motion": {"max_mad": 4.0}}})
    assert config.quality.streak_required == 5
    assert config.quality.motion.max_mad == 4.0
    assert config.quality.sharpness == QualityGateConfig().sharpness
    assert config.control == ControlConfig()


def test_unsupported_file_type(tmp_path):
    with pytest.raises(ValueError):
        save_data({"a": 1}, tmp_path / "config.txt")
    with pytest.raises(ValueError):
        load_data(tmp_path / "config.ini")
