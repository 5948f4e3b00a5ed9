"""Built-in gatherers."""

from .dom_stats import DOMStats
from .viewport_dimensions import ViewportDimensions

__all__ = ["DOMStats", "ViewportDimensions"]
