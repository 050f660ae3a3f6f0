import pytest

from letsfocus.utils.validation import (InputValidator, ValidationError,
                                        validate_duration_payload,
                                        validate_volume_payload)


@pytest.mark.parametrize("value,expected", [(25, 25), ("45", 45), (" 1 ", 1), (60, 60), (30.0, 30)])
def test_valid_durations(value, expected):
    result = InputValidator.validate_duration(value)
    assert result.is_valid, result.error
    assert result.value == expected


@pytest.mark.parametrize("value", [None, "", 0, 61, "abc", 2.5, True, "-3"])
def test_invalid_durations(value):
    result = InputValidator.validate_duration(value)
    assert not result.is_valid
    assert result.field_name == "minutes"
    assert result.error


@pytest.mark.parametrize("value,expected", [(0.5, 0.5), ("0.7", 0.7), (2, 1.0), (-1, 0.0)])
def test_volume_is_clamped(value, expected):
    result = InputValidator.validate_volume(value)
    assert result.is_valid
    assert result.value == expected


@pytest.mark.parametrize("value", [None, "", "loud", "nan", False])
def test_invalid_volume(value):
    assert not InputValidator.validate_volume(value).is_valid


def test_payload_helpers_raise_validation_error():
    assert validate_duration_payload({"minutes": "15"}) == 15
    assert validate_volume_payload({"volume": 0.2}) == 0.2

    with pytest.raises(ValidationError) as excinfo:
        validate_duration_payload({})
    assert excinfo.value.field_name == "minutes"

    with pytest.raises(ValidationError) as excinfo:
        validate_volume_payload({"volume": "x"})
    assert excinfo.value.field_name == "volume"
