"""Accessibility inspection — best-effort, never fatal to a run."""

from __future__ import annotations

import logging

from uxa.schemas.report import AccessibilityFinding
from uxa.shared.browser import DEFAULT_NAVIGATION_TIMEOUT_MS, BrowserManager

logger = logging.getLogger(__name__)


async def inspect_accessibility(
    url: str,
    *,
    navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS,
) -> list[AccessibilityFinding]:
    """Return the aggregated accessibility findings for ``url``.

    Any failure (browser launch, navigation, DOM evaluation, unexpected
    payload) is logged as a warning and yields an empty list.
    """
    try:
        async with BrowserManager(navigation_timeout_ms=navigation_timeout_ms) as browser:
            raw = await browser.find_accessibility_violations(url)
        return [AccessibilityFinding.model_validate(v) for v in raw]
    except Exception as exc:
        logger.warning("Accessibility audit failed for %s: %s", url, exc)
        return []
