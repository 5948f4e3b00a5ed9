"""DOM size statistics: total nodes, maximum depth and maximum child count."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ...errors import GathererError

if TYPE_CHECKING:
    from ..gatherer import LoadData, PassContext

_EXPRESSION = """
(() => {
  let totalDOMNodes = 0;
  const depth = {max: 0, snippet: ''};
  const width = {max: 0, snippet: ''};
  const describe = el => el.tagName.toLowerCase() + (el.id ? '#' + el.id : '');
  const walk = (el, level) => {
    totalDOMNodes++;
    if (level > depth.max) {
      depth.max = level;
      depth.snippet = describe(el);
    }
    if (el.children.length > width.max) {
      width.max = el.children.length;
      width.snippet = describe(el);
    }
    for (const child of el.children) walk(child, level + 1);
  };
  if (document.documentElement) walk(document.documentElement, 1);
  return {totalDOMNodes, depth, width};
})()
"""


class DOMStats:
    name = "DOMStats"

    async def after_pass(self, ctx: "PassContext", load_data: "LoadData") -> dict[str, Any]:
        stats = await ctx.driver.evaluate(_EXPRESSION)
        if not isinstance(stats, dict) or "totalDOMNodes" not in stats:
            raise GathererError("DOMStats returned no data", gatherer=self.name)
        return stats
