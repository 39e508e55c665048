"""Screenshot capture — desktop and mobile renders of the target page."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import NamedTuple

from uxa.shared.browser import DEFAULT_NAVIGATION_TIMEOUT_MS, BrowserManager

logger = logging.getLogger(__name__)


class Viewport(NamedTuple):
    filename: str
    width: int
    height: int


DESKTOP = Viewport("desktop.png", 1366, 900)
MOBILE = Viewport("mobile.png", 412, 915)  # Pixel 7
VIEWPORTS: tuple[Viewport, ...] = (DESKTOP, MOBILE)


async def capture_screenshots(
    url: str,
    output_dir: Path,
    *,
    navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS,
) -> None:
    """Write ``desktop.png`` and ``mobile.png`` for ``url`` into ``output_dir``.

    Both viewports render concurrently in one browser.  The call returns only
    after both have settled; if either failed, the first failure is raised.
    """
    output_dir = Path(output_dir)
    async with BrowserManager(navigation_timeout_ms=navigation_timeout_ms) as browser:
        results = await asyncio.gather(
            *(
                browser.save_screenshot(
                    url, output_dir / vp.filename, width=vp.width, height=vp.height
                )
                for vp in VIEWPORTS
            ),
            return_exceptions=True,
        )

    errors = [r for r in results if isinstance(r, BaseException)]
    for vp, result in zip(VIEWPORTS, results):
        if isinstance(result, BaseException):
            logger.error("%s capture of %s failed: %s", vp.filename, url, result)
    if errors:
        raise errors[0]
    logger.info("Captured %d screenshots of %s", len(VIEWPORTS), url)
