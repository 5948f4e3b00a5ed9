"""Tests for sequential audit execution and error isolation."""

import pytest

from pageaudit.audits import ContentWidth, DOMSize, FirstContentfulPaintAudit, NetworkRequests
from pageaudit.audits.audit import AuditDefinition, AuditProduct
from pageaudit.audits.executor import AuditExecutor
from pageaudit.computed.computed_artifact import ComputedArtifactStore
from pageaudit.config import AuditRef, Settings
from pageaudit.errors import ArtifactError, AuditError
from pageaudit.registry import default_computed_registry
from pageaudit.run_context import RunContext


class RecordingReporter:
    def __init__(self):
        self.reports = []

    def capture_exception(self, error, tags=None, level="error"):
        self.reports.append((error, tags, level))


class ScriptedAudit:
    """Audit whose compute behavior is supplied by the test."""

    def __init__(self, name, behavior, required=(), calls=None):
        self.meta = AuditDefinition(name=name, description=name, required_artifacts=tuple(required))
        self.behavior = behavior
        self.calls = calls if calls is not None else []

    def compute(self, artifacts, context):
        self.calls.append(self.meta.name)
        return self.behavior(artifacts, context)


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def executor(reporter):
    store = ComputedArtifactStore(default_computed_registry())
    return AuditExecutor(store, RunContext(error_reporter=reporter))


def refs(*audits):
    return [(audit, AuditRef(id=audit.meta.name)) for audit in audits]


class TestRequiredArtifacts:
    """Tests for the pre-run artifact check."""

    @pytest.mark.asyncio
    async def test_missing_artifact_gives_error_result(self, executor, settings):
        results = await executor.run_audits(refs(ContentWidth()), {}, settings)

        result = results["content-width"]
        assert result.error is True
        assert result.score is None
        assert "ViewportDimensions" in result.debug_string

    @pytest.mark.asyncio
    async def test_missing_default_pass_trace(self, executor, settings):
        """A traces entry for another pass does not satisfy the requirement."""
        artifacts = {"traces": {"secondPass": {"traceEvents": []}}, "devtoolsLogs": {"defaultPass": []}}

        results = await executor.run_audits(refs(FirstContentfulPaintAudit()), artifacts, settings)

        assert results["first-contentful-paint"].error
        assert "traces" in results["first-contentful-paint"].debug_string

    @pytest.mark.asyncio
    async def test_error_marker_gives_expected_error(self, executor, reporter, settings):
        """A failed gatherer's marker is reported once, tagged with the gatherer."""
        artifacts = {"ViewportDimensions": ArtifactError("no window", artifact_name="ViewportDimensions")}

        results = await executor.run_audits(refs(ContentWidth()), artifacts, settings)

        result = results["content-width"]
        assert result.error
        assert "Required ViewportDimensions gatherer encountered an error: no window" in result.debug_string
        assert len(reporter.reports) == 1
        assert reporter.reports[0][1] == {"gatherer": "ViewportDimensions"}

    @pytest.mark.asyncio
    async def test_audit_not_called_when_artifact_missing(self, executor, settings):
        calls = []
        audit = ScriptedAudit("needs-x", lambda a, c: AuditProduct(raw_value=True), ["X"], calls)

        await executor.run_audits(refs(audit), {}, settings)
        assert calls == []


class TestErrorIsolation:
    """Non-fatal failures stay inside one audit."""

    @pytest.mark.asyncio
    async def test_non_fatal_throw_does_not_stop_later_audits(self, executor, reporter, settings):
        calls = []

        def boom(artifacts, context):
            raise ValueError("kaput")

        audits = [
            ScriptedAudit("first", lambda a, c: AuditProduct(raw_value=True), calls=calls),
            ScriptedAudit("broken", boom, calls=calls),
            ScriptedAudit("last", lambda a, c: AuditProduct(raw_value=0.4), calls=calls),
        ]

        results = await executor.run_audits(refs(*audits), {}, settings)

        assert calls == ["first", "broken", "last"]
        assert list(results) == ["first", "broken", "last"]
        assert results["broken"].error
        assert results["broken"].debug_string == "Audit error: kaput"
        assert results["last"].score == 0.4
        assert reporter.reports[0][1] == {"audit": "broken"}

    @pytest.mark.asyncio
    async def test_friendly_message_in_debug_string(self, executor, settings):
        def friendly(artifacts, context):
            raise AuditError("raw detail", friendly_message="Something understandable")

        results = await executor.run_audits(refs(ScriptedAudit("f", friendly)), {}, settings)
        assert results["f"].debug_string == "Something understandable (raw detail)"

    @pytest.mark.asyncio
    async def test_fatal_throw_propagates(self, executor, settings):
        calls = []

        def fatal(artifacts, context):
            raise AuditError("stop everything", fatal=True)

        audits = [
            ScriptedAudit("fatal", fatal, calls=calls),
            ScriptedAudit("never", lambda a, c: AuditProduct(raw_value=True), calls=calls),
        ]

        with pytest.raises(AuditError, match="stop everything"):
            await executor.run_audits(refs(*audits), {}, settings)
        assert calls == ["fatal"]

    @pytest.mark.asyncio
    async def test_invalid_score_becomes_error_result(self, executor, settings):
        audit = ScriptedAudit("bad-score", lambda a, c: AuditProduct(raw_value=1, score=1.5))

        results = await executor.run_audits(refs(audit), {}, settings)
        assert results["bad-score"].error
        assert "> 1" in results["bad-score"].debug_string

    @pytest.mark.asyncio
    async def test_async_compute_is_awaited(self, executor, settings):
        class AsyncAudit:
            meta = AuditDefinition(name="async", description="async")

            async def compute(self, artifacts, context):
                return AuditProduct(raw_value=True)

        results = await executor.run_audits(refs(AsyncAudit()), {}, settings)
        assert results["async"].score == 1


class TestOptions:
    @pytest.mark.asyncio
    async def test_ref_options_overlay_defaults(self, executor, settings):
        seen = {}

        class OptionAudit:
            meta = AuditDefinition(name="opts", description="opts", default_options={"a": 1, "b": 2})

            def compute(self, artifacts, context):
                seen.update(context.options)
                return AuditProduct(raw_value=True)

        audit = OptionAudit()
        await executor.run_audits([(audit, AuditRef(id="opts", options={"b": 3}))], {}, settings)
        assert seen == {"a": 1, "b": 3}


class TestBuiltinAudits:
    """Built-in audits against hand-made artifacts."""

    @pytest.mark.asyncio
    async def test_content_width_mismatch(self, executor, settings):
        artifacts = {"ViewportDimensions": {"innerWidth": 500, "outerWidth": 412}}
        result = (await executor.run_audits(refs(ContentWidth()), artifacts, settings))["content-width"]

        assert result.score == 0
        assert "412px" in result.debug_string

    @pytest.mark.asyncio
    async def test_content_width_not_applicable_on_desktop(self, executor):
        artifacts = {"ViewportDimensions": {"innerWidth": 500, "outerWidth": 412}}
        desktop = Settings(emulated_form_factor="desktop")
        result = (await executor.run_audits(refs(ContentWidth()), artifacts, desktop))["content-width"]

        assert result.not_applicable
        assert result.score == 1
        assert result.informative

    @pytest.mark.asyncio
    async def test_dom_size_scores_numeric(self, executor, settings):
        artifacts = {
            "DOMStats": {"totalDOMNodes": 3000, "depth": {"max": 10}, "width": {"max": 20}},
        }
        result = (await executor.run_audits(refs(DOMSize()), artifacts, settings))["dom-size"]

        assert result.score == 0.5
        assert result.raw_value == 3000
        assert result.display_value == "3,000 nodes"

    @pytest.mark.asyncio
    async def test_first_contentful_paint(self, executor, settings, trace_events):
        artifacts = {
            "traces": {"defaultPass": {"traceEvents": trace_events(fcp_ms=4000)}},
            "devtoolsLogs": {"defaultPass": []},
        }
        results = await executor.run_audits(refs(FirstContentfulPaintAudit()), artifacts, settings)

        assert results["first-contentful-paint"].raw_value == 4000
        assert results["first-contentful-paint"].score == 0.5

    @pytest.mark.asyncio
    async def test_network_requests_table(self, executor, settings):
        log = [
            {"method": "Network.requestWillBeSent",
             "params": {"requestId": "1", "request": {"url": "https://a.test/"}, "timestamp": 2.0}},
            {"method": "Network.loadingFinished", "params": {"requestId": "1", "timestamp": 2.5}},
        ]
        results = await executor.run_audits(
            refs(NetworkRequests()), {"devtoolsLogs": {"defaultPass": log}}, settings
        )

        result = results["network-requests"]
        assert result.raw_value == 1
        assert result.details["items"][0]["url"] == "https://a.test/"
        assert result.details["items"][0]["endTime"] == 500
