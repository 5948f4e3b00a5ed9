"""Viewport dimensions of the loaded page."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any

from ...errors import GathererError

if TYPE_CHECKING:
    from ..gatherer import LoadData, PassContext

_EXPRESSION = """
(() => ({
  innerWidth: window.innerWidth,
  outerWidth: window.outerWidth,
  innerHeight: window.innerHeight,
  outerHeight: window.outerHeight,
  devicePixelRatio: window.devicePixelRatio,
}))()
"""


class ViewportDimensions:
    """Reads window and viewport sizes after load."""

    name = "ViewportDimensions"

    async def after_pass(self, ctx: "PassContext", load_data: "LoadData") -> dict[str, Any]:
        dimensions = await ctx.driver.evaluate(_EXPRESSION)
        if not isinstance(dimensions, dict):
            raise GathererError("ViewportDimensions returned no data", gatherer=self.name)

        for key, value in dimensions.items():
            if not isinstance(value, (int, float)) or not math.isfinite(value):
                raise GathererError(
                    f"ViewportDimensions results were not numeric: {key}={value!r}",
                    gatherer=self.name,
                )
        return dimensions
