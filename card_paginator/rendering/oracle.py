"""
Measurement collaborator interfaces.

The paginator never lays text out itself. It asks a renderer for markup of a
page-shaped record and a measurer for the pixel height of one element in that
markup. Both are injected, so independent pagination runs can share a measurer or
use their own.
"""
import logging
from typing import Any, Dict, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class MarkupRenderer(Protocol):
    async def render_markup(self, template_name: str, data: Dict[str, Any]) -> str:
        """Render ``data`` with the named template. Must reflect every height-relevant field."""
        ...


@runtime_checkable
class HeightMeasurer(Protocol):
    async def measure_height(self, markup: str, selector: str) -> float:
        """Lay out ``markup`` and return the height of ``selector``, or 0 if absent."""
        ...


class MeasurementOracle:
    """Renders a record and measures one element of the result."""

    def __init__(self, renderer: MarkupRenderer, measurer: HeightMeasurer):
        self.renderer = renderer
        self.measurer = measurer

    async def measure(self, template_name: str, data: Dict[str, Any], selector: str) -> float:
        """
        Render ``data`` with ``template_name`` and measure ``selector``.

        Errors from either collaborator propagate; callers decide whether a failed
        measurement is fatal.
        """
        markup = await self.renderer.render_markup(template_name, data)
        height = await self.measurer.measure_height(markup, selector)
        logger.debug("Measured %s in %s: %.1fpx", selector, template_name, height)
        return height
