"""Category score aggregation."""

from __future__ import annotations

import logging

from .config import CategoryConfig
from .report_schema import AuditResult, CategoryAuditResult, CategoryResult

logger = logging.getLogger(__name__)


def arithmetic_mean(items: list[tuple[float, float]]) -> float:
    """
    Weighted mean of (score, weight) pairs.

    Returns 0 when the total weight is 0.
    """
    total_weight = sum(weight for _, weight in items)
    if total_weight == 0:
        return 0.0
    return sum(score * weight for score, weight in items) / total_weight


def score_category(category: CategoryConfig, results_by_id: dict[str, AuditResult]) -> CategoryResult:
    """
    Aggregate one category.

    Audits that errored or did not run are listed but excluded from the
    mean. Weight-0 audits are listed but do not affect the score.
    """
    breakdown: list[CategoryAuditResult] = []
    weighted: list[tuple[float, float]] = []

    for ref in category.audit_refs:
        result = results_by_id.get(ref.id)
        if result is None or result.error or result.score is None:
            breakdown.append(
                CategoryAuditResult(id=ref.id, weight=ref.weight, score=None, error=True, included=False)
            )
            continue
        included = ref.weight > 0
        breakdown.append(
            CategoryAuditResult(id=ref.id, weight=ref.weight, score=result.score, included=included)
        )
        if included:
            weighted.append((result.score, ref.weight))

    score = arithmetic_mean(weighted)
    logger.debug(f"Category {category.id} scored {score:.3f} from {len(weighted)} audits")
    return CategoryResult(
        id=category.id,
        title=category.title,
        description=category.description,
        score=score,
        audit_refs=breakdown,
    )


def score_all_categories(
    categories: dict[str, CategoryConfig], results_by_id: dict[str, AuditResult]
) -> list[CategoryResult]:
    """Score every category, preserving configuration order."""
    return [score_category(category, results_by_id) for category in categories.values()]


__all__ = ["arithmetic_mean", "score_all_categories", "score_category"]
