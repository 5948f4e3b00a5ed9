"""Audit Layer - audit definitions, execution and scoring helpers."""

from .audit import (
    Audit,
    AuditContext,
    AuditDefinition,
    AuditProduct,
    compute_log_normal_score,
    generate_audit_result,
    generate_error_audit_result,
)
from .content_width import ContentWidth
from .dom_size import DOMSize
from .executor import AuditExecutor
from .first_contentful_paint import FirstContentfulPaintAudit
from .metrics import Metrics
from .network_requests import NetworkRequests
from .statistics import LogNormalDistribution, get_log_normal_distribution

__all__ = [
    "Audit",
    "AuditContext",
    "AuditDefinition",
    "AuditExecutor",
    "AuditProduct",
    "compute_log_normal_score",
    "generate_audit_result",
    "generate_error_audit_result",
    "get_log_normal_distribution",
    "LogNormalDistribution",
    # Built-in audits
    "ContentWidth",
    "DOMSize",
    "FirstContentfulPaintAudit",
    "Metrics",
    "NetworkRequests",
]
