"""Tests for category score aggregation."""

import pytest

from pageaudit.audits.audit import AuditDefinition, generate_error_audit_result
from pageaudit.config import CategoryAuditRef, CategoryConfig
from pageaudit.report_schema import AuditResult
from pageaudit.scoring import arithmetic_mean, score_all_categories


def result(name, score):
    return AuditResult(name=name, description=name, score=score)


def category(*refs, category_id="performance"):
    return CategoryConfig(
        id=category_id,
        title=category_id.title(),
        audit_refs=[CategoryAuditRef(id=audit_id, weight=weight) for audit_id, weight in refs],
    )


class TestArithmeticMean:
    def test_weighted(self):
        assert arithmetic_mean([(1.0, 3), (0.0, 1)]) == pytest.approx(0.75)

    def test_zero_total_weight(self):
        assert arithmetic_mean([(1.0, 0), (0.5, 0)]) == 0
        assert arithmetic_mean([]) == 0


class TestScoreAllCategories:
    """Tests for weighted category aggregation."""

    def test_weighted_average(self):
        results = {"a": result("a", 1.0), "b": result("b", 0.5)}
        [scored] = score_all_categories({"performance": category(("a", 1), ("b", 3))}, results)

        assert scored.score == pytest.approx(0.625)
        assert scored.title == "Performance"
        assert [ref.id for ref in scored.audit_refs] == ["a", "b"]

    def test_zero_weight_reported_but_excluded(self):
        results = {"a": result("a", 0.2), "info": result("info", 1.0)}
        [scored] = score_all_categories({"performance": category(("a", 1), ("info", 0))}, results)

        assert scored.score == pytest.approx(0.2)
        info = scored.audit_refs[1]
        assert info.id == "info"
        assert info.score == 1.0
        assert info.included is False

    def test_error_results_excluded(self):
        meta = AuditDefinition(name="broken", description="broken")
        results = {"ok": result("ok", 0.8), "broken": generate_error_audit_result(meta, "Audit error: x")}
        [scored] = score_all_categories({"performance": category(("ok", 1), ("broken", 5))}, results)

        assert scored.score == pytest.approx(0.8)
        broken = scored.audit_refs[1]
        assert broken.error is True
        assert broken.included is False

    def test_missing_result_excluded(self):
        [scored] = score_all_categories(
            {"performance": category(("ok", 1), ("never-ran", 1))}, {"ok": result("ok", 0.4)}
        )
        assert scored.score == pytest.approx(0.4)

    def test_all_zero_weights_score_zero(self):
        [scored] = score_all_categories({"performance": category(("a", 0))}, {"a": result("a", 1.0)})
        assert scored.score == 0

    def test_categories_keep_configuration_order(self):
        categories = {
            "seo": category(("a", 1), category_id="seo"),
            "performance": category(("a", 1), category_id="performance"),
        }
        scored = score_all_categories(categories, {"a": result("a", 1.0)})
        assert [c.id for c in scored] == ["seo", "performance"]
