import pytest

from fluidshape.config import FieldRange
from fluidshape.model.parameters import (
    DEFAULT_PARAMETERS, PARAMETER_KEYS, ParameterSet, parse_number, format_number
)


@pytest.mark.parametrize("text, expected", [
    ("100", 100.0),
    ("1121.7", 1121.7),
    ("  -3.5", -3.5),
    (".5", 0.5),
    ("2e3", 2000.0),
    ("12mm", 12.0),
    ("1.5.2", 1.5),
    ("", 0.0),
    ("abc", 0.0),
    ("-", 0.0),
    ("inf", 0.0),
    ("nan", 0.0),
])
def test_parse_number_uses_numeric_prefix_or_zero(text, expected):
    assert parse_number(text) == pytest.approx(expected)


def test_defaults_cover_all_keys():
    params = ParameterSet()
    assert set(params.text_view()) == set(PARAMETER_KEYS)
    assert params.text_view() == DEFAULT_PARAMETERS


def test_numeric_view_degrades_invalid_text_to_zero():
    params = ParameterSet()
    params.set_field("A", "not a number")
    params.set_field("rho", "")

    numeric = params.numeric_view()

    assert numeric["A"] == 0.0
    assert numeric["rho"] == 0.0
    assert numeric["B"] == 40.0
    # text is kept as typed
    assert params["A"] == "not a number"


def test_set_field_rejects_unknown_key():
    with pytest.raises(KeyError):
        ParameterSet().set_field("Z", "1")


@pytest.mark.parametrize("start, end, expected", [
    ("0.0", "1.0", 1.0),
    ("2", "0.5", 0.0),
    ("1", "1", 0.0),
    ("x", "3", 3.0),
])
def test_effective_length_is_never_negative(start, end, expected):
    params = ParameterSet({"L_start": start, "L_end": end})
    assert params.effective_length() == pytest.approx(expected)
    assert params.effective_length() >= 0.0


def test_set_value_clamps_to_configured_range():
    params = ParameterSet(ranges={"A": FieldRange(min_value=10.0, max_value=50.0)})

    assert params.set_value("A", 80) == "50"
    assert params.set_value("A", -4) == "10"
    assert params.set_value("A", 12.5) == "12.5"
    assert params["A"] == "12.5"


def test_set_value_uses_default_range_of_250():
    params = ParameterSet()
    params.set_value("E", 999)
    assert params.numeric_view()["E"] == 250.0


def test_format_number_drops_trailing_zero():
    assert format_number(42.0) == "42"
    assert format_number(0.25) == "0.25"


def test_snapshot_restore_is_byte_for_byte():
    original = ParameterSet({"A": " 07.50 ", "rho": "1e3", "L_end": "abc"})
    snapshot = original.snapshot()

    restored = ParameterSet()
    restored.restore(snapshot)

    assert restored.text_view() == original.text_view()
    assert restored["A"] == " 07.50 "


def test_snapshot_is_a_copy():
    params = ParameterSet()
    snapshot = params.snapshot()
    params.set_field("A", "1")
    assert snapshot["A"] == "100"


def test_restore_ignores_unknown_keys():
    params = ParameterSet()
    params.restore({"A": "5", "unknown": "1"})
    assert params["A"] == "5"
    assert "unknown" not in params.text_view()
