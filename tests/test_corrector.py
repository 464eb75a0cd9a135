# tests/test_corrector.py

import pytest

from fitai.services.corrector import (
    MIN_SCALE_EVIDENCE,
    bands_for_category,
    correct_fields,
    correct_value,
)
from fitai.services.nutrients import NUTRIENT_BANDS, NUTRIENT_FIELDS, Band
from fitai.services.ranges import macro_bands

SAMPLE_VALUES = [0.0004, 0.002, 0.5, 3, 47, 420, 999, 12345, 5e5, 2e6, 8e7]


def test_every_field_has_a_band():
    assert set(NUTRIENT_BANDS) == set(NUTRIENT_FIELDS)
    for field, band in NUTRIENT_BANDS.items():
        assert 0 <= band.low <= band.high, field
        assert band.unit


def test_value_inside_band_is_untouched():
    for field, band in NUTRIENT_BANDS.items():
        mid = (band.low + band.high) / 2 or band.high
        value, change = correct_value(field, mid)
        assert value == mid and change is None


@pytest.mark.parametrize("value", [None, 0, -5, float("nan")])
def test_missing_or_invalid_values_are_untouched(value):
    out, change = correct_value("sodium", value)
    assert change is None
    assert out is value


def test_micrograms_stored_as_milligrams():
    value, change = correct_value("vitamin_c", 25000)
    assert value == 250
    assert change.field == "vitamin_c"
    assert change.old_value == 25000
    assert change.reason == "/100 (above 0-250 mg)"
    assert change.to_dict() == {
        "field": "vitamin_c", "oldValue": 25000, "newValue": 250,
        "reason": "/100 (above 0-250 mg)",
    }


def test_tenfold_error():
    value, change = correct_value("sodium", 40000)
    assert value == 4000
    assert change.reason.startswith("/10 ")


def test_mild_outlier_is_not_a_unit_error():
    band = NUTRIENT_BANDS["iron"]
    value, change = correct_value("iron", band.high * (MIN_SCALE_EVIDENCE - 1))
    assert change is None


def test_no_power_of_ten_explains_it():
    value, change = correct_value("kcal", 1e7)
    assert value == 1e7 and change is None


def test_olive_oil_kcal_scaled_up_and_clamped():
    bands = bands_for_category(macro_bands("fat/oil"))
    value, change = correct_value("kcal", 9, bands["kcal"])
    assert value == 900
    assert change.reason == "x100 (below 700-900 kcal)"


def test_degenerate_band_never_corrects():
    value, change = correct_value("protein", 12, Band(0, 0))
    assert value == 12 and change is None


def test_non_numeric_value_raises():
    with pytest.raises(ValueError):
        correct_value("kcal", "abc")


def test_correction_is_idempotent():
    for field, band in NUTRIENT_BANDS.items():
        for v in SAMPLE_VALUES:
            once, _ = correct_value(field, v, band)
            twice, change = correct_value(field, once, band)
            assert twice == once, (field, v)
            if once != v:
                # un valor ya corregido no vuelve a generar cambio
                assert change is None


def test_corrected_values_land_inside_band():
    for field, band in NUTRIENT_BANDS.items():
        for v in SAMPLE_VALUES:
            out, change = correct_value(field, v, band)
            if change:
                assert band.low <= out <= band.high


def test_correct_fields_does_not_mutate_input():
    values = {"kcal": 165, "sodium": 40000, "iron": None}
    out, changes = correct_fields(values, NUTRIENT_BANDS)
    assert values["sodium"] == 40000
    assert out["sodium"] == 4000
    assert [c.field for c in changes] == ["sodium"]


def test_category_bands_override_macros_only():
    bands = bands_for_category(macro_bands("meat"))
    assert bands["kcal"].as_tuple() == (100, 280)
    assert bands["sodium"] == NUTRIENT_BANDS["sodium"]
