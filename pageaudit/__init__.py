"""
pageaudit: audit a web page over a browser remote-debugging protocol.

Collects raw artifacts across one or more page loads, derives metrics
from them, evaluates audits and aggregates weighted category scores.
"""

__version__ = "0.1.0"

from .config import (
    DEFAULT_PASS,
    AuditRef,
    CategoryAuditRef,
    CategoryConfig,
    PassConfig,
    RunConfig,
    Settings,
    ThrottlingProfile,
)
from .errors import (
    ArtifactError,
    AuditError,
    ConfigError,
    MissingArtifactError,
    PageAuditError,
    ProtocolError,
)
from .registry import Registry
from .report_schema import AuditResult, CategoryResult, RunResult
from .runner import Runner, validate_url

__all__ = [
    "__version__",
    "DEFAULT_PASS",
    # Config
    "AuditRef",
    "CategoryAuditRef",
    "CategoryConfig",
    "PassConfig",
    "RunConfig",
    "Settings",
    "ThrottlingProfile",
    # Errors
    "ArtifactError",
    "AuditError",
    "ConfigError",
    "MissingArtifactError",
    "PageAuditError",
    "ProtocolError",
    # Results
    "AuditResult",
    "CategoryResult",
    "RunResult",
    # Run
    "Registry",
    "Runner",
    "validate_url",
]
