"""Error taxonomy for page audit runs.

Only fatal errors stop a run. Everything else is converted into a
structured result (an error-valued artifact or an error audit result) so
the rest of the pipeline can still produce a best-effort report.
"""

from __future__ import annotations


class PageAuditError(Exception):
    """Base class for all run errors."""

    fatal: bool = False
    # Expected errors were already reported closer to their source.
    expected: bool = False
    friendly_message: str | None = None

    def __init__(
        self,
        message: str,
        *,
        fatal: bool | None = None,
        friendly_message: str | None = None,
    ):
        super().__init__(message)
        if fatal is not None:
            self.fatal = fatal
        if friendly_message is not None:
            self.friendly_message = friendly_message

    @property
    def message(self) -> str:
        return str(self)


class ConfigError(PageAuditError):
    """Run configuration is invalid or inconsistent."""

    fatal = True


class ProtocolError(PageAuditError):
    """A protocol command was rejected by the transport."""

    def __init__(self, message: str, *, method: str | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.method = method


class CommandTimeoutError(ProtocolError):
    """A protocol command did not get a response in time."""


class ConnectionFailedError(ProtocolError):
    """No target to attach to, attach refused, or transport lost."""

    fatal = True


class GathererError(PageAuditError):
    """A gatherer hook failed. Non-fatal unless flagged otherwise."""

    def __init__(self, message: str, *, gatherer: str | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.gatherer = gatherer


class TraceError(PageAuditError):
    """Trace recording or finalization failed."""

    fatal = True


class MissingArtifactError(PageAuditError):
    """An audit's required artifact is absent or its pass never ran."""

    def __init__(self, artifact_name: str, audit_name: str):
        super().__init__(
            f"Required {artifact_name} gatherer did not run "
            f"(required by audit {audit_name})."
        )
        self.artifact_name = artifact_name
        self.audit_name = audit_name


class AuditError(PageAuditError):
    """Raised from audit logic. Pass fatal=True to abort the whole run."""


class ScoreRangeError(PageAuditError):
    """An audit produced a non-finite score or one outside [0, 1]."""


class ComputedArtifactError(PageAuditError):
    """A computed artifact could not be derived from its input."""


class ArtifactError(PageAuditError):
    """
    Error marker stored in the artifact bag in place of a failed gatherer's output.

    Audits that require the artifact get an error result instead of running.
    """

    def __init__(self, message: str, *, artifact_name: str | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.artifact_name = artifact_name


__all__ = [
    "ArtifactError",
    "AuditError",
    "CommandTimeoutError",
    "ComputedArtifactError",
    "ConfigError",
    "ConnectionFailedError",
    "GathererError",
    "MissingArtifactError",
    "PageAuditError",
    "ProtocolError",
    "ScoreRangeError",
    "TraceError",
]
