"""
HeightMeasurer backed by headless Chromium through Playwright's async API.

One browser is shared by every measurement; each measurement gets its own page,
which is always closed afterwards, so no layout state leaks between measurements or
between concurrent pagination runs.
"""
import asyncio
import logging
import re
from pathlib import Path
from typing import Optional

from playwright.async_api import Browser, Playwright, async_playwright

from card_paginator.config.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

_STYLESHEET_LINK = re.compile(r"<link\b[^>]*rel=[\"']stylesheet[\"'][^>]*>", re.IGNORECASE)

_HEIGHT_SCRIPT = """(selector) => {
    const element = document.querySelector(selector);
    return element ? element.getBoundingClientRect().height : 0;
}"""


class MeasurerNotStartedError(RuntimeError):
    """Raised when measuring before ``start()`` (or outside ``async with``)."""


class PlaywrightHeightMeasurer:
    """
    Measures rendered element heights in a fixed viewport.

    Usage::

        async with PlaywrightHeightMeasurer() as measurer:
            height = await measurer.measure_height(html, ".main-content")
    """

    def __init__(
        self,
        viewport_width: Optional[int] = None,
        viewport_height: Optional[int] = None,
        stylesheet_path: Optional[Path] = None,
        headless: Optional[bool] = None,
        settings: Settings = default_settings,
    ):
        self.viewport = {
            "width": viewport_width or settings.VIEWPORT_WIDTH,
            "height": viewport_height or settings.VIEWPORT_HEIGHT,
        }
        self.stylesheet_path = stylesheet_path or settings.STYLESHEET_PATH
        self.headless = settings.BROWSER_HEADLESS if headless is None else headless
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self._stylesheet: Optional[str] = None
        self._start_lock = asyncio.Lock()

    async def start(self) -> "PlaywrightHeightMeasurer":
        async with self._start_lock:
            if self.browser is not None:
                return self
            if self.stylesheet_path:
                self._stylesheet = Path(self.stylesheet_path).read_text(encoding="utf-8")
            self.playwright = await async_playwright().start()
            try:
                self.browser = await self.playwright.chromium.launch(
                    headless=self.headless,
                    args=["--no-sandbox", "--disable-dev-shm-usage", "--disable-gpu"],
                )
            except Exception:
                await self.playwright.stop()
                self.playwright = None
                raise
            logger.info("Chromium started for height measurement (viewport %sx%s)",
                        self.viewport["width"], self.viewport["height"])
        return self

    async def close(self) -> None:
        if self.browser is not None:
            await self.browser.close()
            self.browser = None
        if self.playwright is not None:
            await self.playwright.stop()
            self.playwright = None
            logger.info("Chromium for height measurement closed")

    async def __aenter__(self) -> "PlaywrightHeightMeasurer":
        return await self.start()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def inline_stylesheet(self, markup: str) -> str:
        """Replace the first stylesheet link with the configured CSS, or inject it before </head>."""
        if not self._stylesheet:
            return markup
        style = f"<style>{self._stylesheet}</style>"
        if _STYLESHEET_LINK.search(markup):
            return _STYLESHEET_LINK.sub(lambda _: style, markup, count=1)
        if "</head>" in markup:
            return markup.replace("</head>", f"{style}</head>", 1)
        return style + markup

    async def measure_height(self, markup: str, selector: str) -> float:
        if self.browser is None:
            raise MeasurerNotStartedError("PlaywrightHeightMeasurer.start() has not been awaited")

        page = await self.browser.new_page(viewport=self.viewport)
        try:
            await page.set_content(self.inline_stylesheet(markup), wait_until="networkidle")
            await page.evaluate("() => document.fonts.ready.then(() => true)")
            try:
                height = await page.evaluate(_HEIGHT_SCRIPT, selector)
            except Exception as e:
                logger.warning("Error measuring height for selector %s: %s", selector, e)
                return 0
            return float(height or 0)
        finally:
            await page.close()
