# ============================================
# Unit Tests for the Feature Contract
# ============================================
"""
Tests for patient parsing and the shared 8-feature encoding.
"""

import numpy as np
import pytest

from healthrisk.exceptions import DataValidationError, MalformedInputError
from healthrisk.features import (
    FEATURE_NAMES,
    N_FEATURES,
    encode_frame,
    encode_records,
    encode_vitals,
    feature_map,
    parse_patient_record,
    smoking_code,
)
from healthrisk.synthetic import generate_patient_vitals, records_to_frame


class TestParsePatientRecord:
    """Tests for loosely typed input parsing."""

    def test_string_numbers_are_parsed(self, sample_patient):
        vitals = parse_patient_record(sample_patient)
        assert vitals.age == 45.0
        assert vitals.systolic == 120.0
        assert vitals.bmi == 24.5
        assert vitals.gender == "female"

    def test_optional_defaults(self):
        vitals = parse_patient_record({
            "age": 50, "bloodPressureSystolic": 130,
            "bloodPressureDiastolic": 85, "heartRate": 70,
        })
        assert vitals.cholesterol == 200.0
        assert vitals.blood_sugar == 100.0
        assert vitals.bmi == 25.0
        assert vitals.smoking_status == "never"
        assert vitals.gender == "unspecified"

    def test_unparseable_optional_falls_back_to_default(self, sample_patient):
        sample_patient["cholesterol"] = "n/a"
        assert parse_patient_record(sample_patient).cholesterol == 200.0

    @pytest.mark.parametrize("field", ["age", "bloodPressureSystolic", "bloodPressureDiastolic", "heartRate"])
    def test_missing_mandatory_field(self, sample_patient, field):
        del sample_patient[field]
        with pytest.raises(MalformedInputError) as exc:
            parse_patient_record(sample_patient)
        assert exc.value.field == field

    @pytest.mark.parametrize("bad", ["abc", "", None, True, float("nan"), "inf"])
    def test_non_numeric_mandatory_field(self, sample_patient, bad):
        sample_patient["age"] = bad
        with pytest.raises(DataValidationError):
            parse_patient_record(sample_patient)

    def test_smoking_status_is_normalized(self, sample_patient):
        sample_patient["smokingStatus"] = "  Current "
        assert parse_patient_record(sample_patient).smoking_status == "current"


class TestEncoding:
    """Tests for the vitals -> vector mapping."""

    def test_sample_patient_vector(self, sample_patient):
        vec = encode_vitals(parse_patient_record(sample_patient))
        expected = [0.45, 0.6, 80 / 120, 72 / 150, 0.45, 95 / 300, 0.49, 0.0]
        np.testing.assert_allclose(vec, expected)

    @pytest.mark.parametrize("status,code", [("current", 1.0), ("former", 0.5), ("never", 0.0), ("unknown", 0.0), (None, 0.0)])
    def test_smoking_codes(self, status, code):
        assert smoking_code(status) == code

    def test_frame_and_row_encodings_agree(self):
        records = generate_patient_vitals(30, seed=5)
        matrix = encode_frame(records_to_frame(records))
        rows = np.vstack([encode_vitals(r) for r in records])
        np.testing.assert_allclose(matrix, rows)
        np.testing.assert_allclose(encode_records(records), rows)

    def test_empty_frame(self):
        assert encode_records([]).shape == (0, N_FEATURES)

    def test_feature_map_order(self):
        described = feature_map()
        assert [f["feature"] for f in described] == FEATURE_NAMES
        assert described[0]["divisor"] == 100.0
        assert described[-1]["encoding"] == "smoking code"
