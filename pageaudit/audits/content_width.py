"""Checks that page content is sized to the viewport."""

from __future__ import annotations

from typing import Any

from .audit import AuditContext, AuditDefinition, AuditProduct


class ContentWidth:
    meta = AuditDefinition(
        name="content-width",
        description="Content is sized correctly for the viewport",
        failure_description="Content is not sized correctly for the viewport",
        help_text=(
            "If the width of your app's content doesn't match the width of the "
            "viewport, your app might not be optimized for mobile screens."
        ),
        required_artifacts=("ViewportDimensions",),
    )

    def compute(self, artifacts: dict[str, Any], context: AuditContext) -> AuditProduct:
        viewport = artifacts["ViewportDimensions"]
        inner_width = viewport["innerWidth"]
        outer_width = viewport["outerWidth"]
        matches = inner_width == outer_width

        if context.settings.emulated_form_factor == "desktop":
            return AuditProduct(raw_value=True, not_applicable=True)

        debug_string = None
        if not matches:
            debug_string = (
                f"The viewport size is {outer_width}px, whereas the window size is "
                f"{inner_width}px."
            )
        return AuditProduct(raw_value=matches, debug_string=debug_string)
