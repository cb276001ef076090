import pytest
from pydantic import ValidationError

from photogate.schemas import AwbState, CaptureResultRecord

from conftest import settled_result


def test_record_from_mapping():
    record = CaptureResultRecord.coerce(settled_result())
    assert record.awb_state is AwbState.CONVERGED
    assert record.awb_settled
    assert record.has_white_balance
    assert CaptureResultRecord.coerce(record) is record


def test_empty_record_is_valid():
    record = CaptureResultRecord()
    assert not record.awb_settled
    assert not record.has_white_balance


@pytest.mark.parametrize("field,value", [
    ("color_correction_gains", [1.0, 1.0, 1.0]),
    ("color_correction_transform", [1.0] * 8),
    ("sensor_sensitivity", -1),
    ("awb_state", 9),
])
def test_malformed_record_rejected(field, value):
    with pytest.raises(ValidationError):
        CaptureResultRecord.coerce(dict(settled_result(), **{field: value}))


def test_record_is_immutable():
    record = CaptureResultRecord.coerce(settled_result())
    with pytest.raises(ValidationError):
        record.sensor_sensitivity = 100
