"""Headless browser page loader with per-device emulation."""

from __future__ import annotations

from typing import Sequence

from playwright.sync_api import sync_playwright

from pagegen.log import get_logger
from pagegen.scraper.models import CapturedMarkup

logger = get_logger(__name__)


def load_page(url: str, devices: Sequence[str]) -> CapturedMarkup:
    """Render *url* once per device profile and capture the resulting HTML.

    A single Chromium instance is launched; each device gets its own short
    lived browser context, processed one after another in the given order.
    Device names are Playwright descriptor names (``"Desktop Chrome"``,
    ``"iPhone 13"``, ...).  An unknown name is rendered with a default
    context.

    Raises:
        playwright.sync_api.Error: If the browser cannot be launched or the
            page cannot be loaded.  Nothing is retried.
    """
    captured = CapturedMarkup(url=url)

    with sync_playwright() as pw:
        browser = pw.chromium.launch(headless=True)
        try:
            for device in devices:
                descriptor = pw.devices.get(device)
                if descriptor is None:
                    logger.warning("unknown_device", device=device)
                    descriptor = {}
                # Not a context option; it names the engine the device ships with.
                descriptor = {k: v for k, v in descriptor.items() if k != "default_browser_type"}

                context = browser.new_context(**descriptor)
                try:
                    page = context.new_page()
                    page.goto(url, wait_until="load")
                    html = page.content()
                finally:
                    context.close()

                logger.debug("page_loaded", url=url, device=device, size=len(html))
                captured.fragments.append((device, html))
        finally:
            browser.close()

    return captured
