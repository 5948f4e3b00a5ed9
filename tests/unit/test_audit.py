"""Tests for audit result normalization and log-normal scoring."""

import math

import pytest

from pageaudit.audits.audit import (
    AuditDefinition,
    AuditProduct,
    compute_log_normal_score,
    generate_audit_result,
    generate_error_audit_result,
    make_table_details,
)
from pageaudit.audits.statistics import get_log_normal_distribution
from pageaudit.errors import ScoreRangeError
from pageaudit.report_schema import ScoreDisplayMode

META = AuditDefinition(
    name="sample-audit",
    description="Sample passes",
    failure_description="Sample fails",
    help_text="Help.",
)


class TestScoreNormalization:
    """Tests for raw value → score conversion."""

    @pytest.mark.parametrize(
        "raw_value,expected",
        [(True, 1), (False, 0), (None, 0), (0.5, 0.5), (1, 1), (0.123, 0.12), (0.675, 0.68)],
    )
    def test_raw_value_coercion(self, raw_value, expected):
        result = generate_audit_result(META, AuditProduct(raw_value=raw_value))
        assert result.score == expected

    def test_explicit_score_wins_over_raw_value(self):
        result = generate_audit_result(META, AuditProduct(raw_value=4200, score=0.914))
        assert result.score == 0.91
        assert result.raw_value == 4200

    @pytest.mark.parametrize("score", [1.01, 2, -0.01, -5])
    def test_out_of_range_raises(self, score):
        with pytest.raises(ScoreRangeError, match="sample-audit"):
            generate_audit_result(META, AuditProduct(raw_value=1, score=score))

    @pytest.mark.parametrize("score", [math.nan, math.inf])
    def test_non_finite_raises(self, score):
        with pytest.raises(ScoreRangeError):
            generate_audit_result(META, AuditProduct(raw_value=1, score=score))

    def test_non_numeric_raw_value_raises(self):
        with pytest.raises(ScoreRangeError):
            generate_audit_result(META, AuditProduct(raw_value="fast"))

    @pytest.mark.parametrize("raw_value", ["", "  "])
    def test_blank_string_raw_value_scores_zero(self, raw_value):
        result = generate_audit_result(META, AuditProduct(raw_value=raw_value))
        assert result.score == 0
        assert result.description == "Sample fails"

    def test_failure_description_used_below_one(self):
        assert generate_audit_result(META, AuditProduct(raw_value=False)).description == "Sample fails"
        assert generate_audit_result(META, AuditProduct(raw_value=True)).description == "Sample passes"


class TestNotApplicable:
    """not_applicable overrides the audit's own outcome."""

    def test_forces_passing_informative_result(self):
        result = generate_audit_result(META, AuditProduct(raw_value=False, not_applicable=True))

        assert result.score == 1
        assert result.informative is True
        assert result.raw_value is True
        assert result.not_applicable is True

    def test_out_of_range_score_still_rejected(self):
        with pytest.raises(ScoreRangeError):
            generate_audit_result(META, AuditProduct(raw_value=1, score=3, not_applicable=True))


class TestErrorResult:
    def test_error_result_shape(self):
        result = generate_error_audit_result(META, "Audit error: boom")

        assert result.error is True
        assert result.score is None
        assert result.raw_value is None
        assert result.debug_string == "Audit error: boom"
        assert result.name == "sample-audit"

    def test_json_uses_camel_case(self):
        data = generate_error_audit_result(META, "x").to_json_dict()
        assert data["debugString"] == "x"
        assert data["scoreDisplayMode"] == "binary"
        assert "rawValue" in data


class TestLogNormalScore:
    """Tests for the log-normal scoring curve."""

    def test_median_scores_half(self):
        assert compute_log_normal_score(4000, 2900, 4000) == 0.5

    def test_podr_scores_about_ninety(self):
        assert 0.88 <= compute_log_normal_score(2900, 2900, 4000) <= 0.93

    def test_monotonically_non_increasing(self):
        previous = 1.0
        for measured in range(0, 20_000, 250):
            score = compute_log_normal_score(measured, 2900, 4000)
            assert 0 <= score <= 1
            assert score <= previous
            previous = score

    def test_zero_and_huge_values_clamp(self):
        assert compute_log_normal_score(0, 2900, 4000) == 1
        assert compute_log_normal_score(10**9, 2900, 4000) == 0

    def test_result_rounded_to_two_decimals(self):
        score = compute_log_normal_score(3333, 2900, 4000)
        assert score == round(score, 2)

    @pytest.mark.parametrize("median,falloff", [(0, 1), (100, 0), (100, 100), (100, 150)])
    def test_invalid_control_points(self, median, falloff):
        with pytest.raises(ValueError):
            get_log_normal_distribution(median, falloff)


class TestDetails:
    def test_empty_items_drop_headings(self):
        details = make_table_details([{"key": "url"}], [])
        assert details == {"type": "table", "headings": [], "items": [], "summary": None}

    def test_numeric_display_mode_preserved(self):
        meta = AuditDefinition(name="n", description="N", score_display_mode=ScoreDisplayMode.NUMERIC)
        result = generate_audit_result(meta, AuditProduct(raw_value=10, score=0.3))
        assert result.score_display_mode == ScoreDisplayMode.NUMERIC
