"""Playwright browser manager — shared async context manager for capture and inspection."""

from __future__ import annotations

import logging
from pathlib import Path
from types import TracebackType
from typing import Any

from playwright.async_api import async_playwright, Browser, Page, Playwright

logger = logging.getLogger(__name__)

DEFAULT_NAVIGATION_TIMEOUT_MS = 30_000

# Baseline checks only — one entry per rule, aggregating every offending node.
_A11Y_CHECKS_JS = r"""() => {
    const violations = [];

    const imagesWithoutAlt = document.querySelectorAll('img:not([alt])');
    if (imagesWithoutAlt.length > 0) {
        violations.push({
            id: 'image-alt',
            description: 'Images must have alternate text',
            nodes: Array.from(imagesWithoutAlt).map(el => ({ target: [el.tagName] })),
        });
    }

    const inputsWithoutLabels = document.querySelectorAll(
        'input:not([aria-label]):not([aria-labelledby])'
    );
    if (inputsWithoutLabels.length > 0) {
        violations.push({
            id: 'label',
            description: 'Form elements must have labels',
            nodes: Array.from(inputsWithoutLabels).map(el => ({ target: [el.tagName] })),
        });
    }

    return violations;
}"""


class BrowserManager:
    """Manages a Playwright Chromium instance for the duration of one stage.

    Usage::

        async with BrowserManager() as bm:
            await bm.save_screenshot("https://example.com", path, width=1366, height=900)
            violations = await bm.find_accessibility_violations("https://example.com")
    """

    def __init__(self, *, navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS) -> None:
        self._pw: Playwright | None = None
        self._browser: Browser | None = None
        self.navigation_timeout_ms = navigation_timeout_ms

    async def __aenter__(self) -> "BrowserManager":
        self._pw = await async_playwright().start()
        try:
            self._browser = await self._pw.chromium.launch(headless=True)
        except BaseException:
            await self._pw.stop()
            self._pw = None
            raise
        logger.info("Browser launched")
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        try:
            if self._browser:
                await self._browser.close()
        finally:
            self._browser = None
            if self._pw:
                await self._pw.stop()
                self._pw = None
        logger.info("Browser closed")

    async def _new_page(self, **kwargs: Any) -> Page:
        assert self._browser is not None, "BrowserManager not entered"
        return await self._browser.new_page(**kwargs)

    async def _goto(self, page: Page, url: str) -> None:
        await page.goto(url, wait_until="load", timeout=self.navigation_timeout_ms)

    async def save_screenshot(self, url: str, path: Path, *, width: int, height: int) -> Path:
        """Render ``url`` at the given viewport and write a full-page PNG to ``path``."""
        page = await self._new_page(viewport={"width": width, "height": height})
        try:
            await self._goto(page, url)
            await page.screenshot(path=str(path), full_page=True, type="png")
            logger.debug("Saved %dx%d screenshot of %s to %s", width, height, url, path)
            return path
        finally:
            await page.close()

    async def find_accessibility_violations(self, url: str) -> list[dict[str, Any]]:
        """Run the baseline DOM checks and return raw violation dicts.

        Each dict has ``id``, ``description`` and ``nodes`` (a list of
        ``{"target": [tagName]}``).
        """
        page = await self._new_page()
        try:
            await self._goto(page, url)
            return await page.evaluate(_A11Y_CHECKS_JS)
        finally:
            await page.close()
