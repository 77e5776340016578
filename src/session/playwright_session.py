"""Playwright implementation of the render session."""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from playwright.async_api import CDPSession, Page

from src.errors import ElementNotFoundError
from src.models.geometry import Axis, Size
from src.session.render_session import ScrollableSnapshot

logger = logging.getLogger(__name__)

# Shared by the query and refresh scripts: remaining scroll distance of an element on one axis
_EXTENT_JS = """
const extentAfter = (el, axis) => {
    if (el.hasAttribute('data-golden-infinite')) return null;
    if (axis === 'vertical') return Math.max(0, el.scrollHeight - el.clientHeight - el.scrollTop);
    return Math.max(0, el.scrollWidth - el.clientWidth - el.scrollLeft);
};
"""

_QUERY_SCROLLABLES_JS = """() => {
    %s
    const scroller = document.scrollingElement || document.documentElement;
    const scrolls = (value) => value === 'auto' || value === 'scroll' || value === 'overlay';
    window.__goldenScrollSeq = window.__goldenScrollSeq || 0;
    const selectorFor = (el) => {
        if (el === scroller) return ':root';
        if (!el.dataset.goldenScrollId) el.dataset.goldenScrollId = String(window.__goldenScrollSeq++);
        return `[data-golden-scroll-id="${el.dataset.goldenScrollId}"]`;
    };
    const found = [];
    const add = (el, axis) => found.push({selector: selectorFor(el), axis, extent: extentAfter(el, axis)});

    add(scroller, 'vertical');
    add(scroller, 'horizontal');
    for (const el of document.body ? document.body.querySelectorAll('*') : []) {
        const style = getComputedStyle(el);
        if (scrolls(style.overflowY)) add(el, 'vertical');
        if (scrolls(style.overflowX)) add(el, 'horizontal');
    }
    return found;
}""" % _EXTENT_JS

_REFRESH_SCROLLABLES_JS = """(items) => {
    %s
    return items.map(({selector, axis}) => {
        const el = document.querySelector(selector);
        if (!el) return {selector, axis, missing: true};
        return {selector, axis, extent: extentAfter(el, axis)};
    });
}""" % _EXTENT_JS

_PUMP_JS = "() => new Promise(resolve => requestAnimationFrame(() => requestAnimationFrame(resolve)))"

_TEXT_SCALE_JS = """(factor) => {
    document.documentElement.style.fontSize = factor === 1 ? '' : `${factor * 100}%`;
}"""


def _snapshot(item: dict) -> ScrollableSnapshot:
    extent = item.get("extent")
    return ScrollableSnapshot(
        selector=item["selector"],
        axis=Axis(item["axis"]),
        extent_after=math.inf if extent is None else float(extent),
    )


class PlaywrightSession:
    """Drives a Playwright page as the golden render surface."""

    def __init__(self, page: Page):
        self.page = page
        self._cdp: CDPSession | None = None
        self._locale: Optional[str] = None

    async def surface_size(self) -> Size:
        viewport = self.page.viewport_size
        if viewport is None:
            viewport = await self.page.evaluate("() => ({width: window.innerWidth, height: window.innerHeight})")
        return Size(width=viewport["width"], height=viewport["height"])

    async def set_surface_size(self, size: Size) -> None:
        width, height = math.ceil(size.width), math.ceil(size.height)
        logger.debug("Setting viewport to %dx%d", width, height)
        await self.page.set_viewport_size({"width": width, "height": height})

    async def pump(self) -> None:
        await self.page.evaluate(_PUMP_JS)

    async def set_content(self, html: str) -> None:
        await self.page.set_content(html)
        await self.pump()

    async def measure(self, selector: str) -> Size:
        box = await self.page.locator(selector).first.bounding_box()
        if box is None:
            raise ElementNotFoundError(selector)
        return Size(width=box["width"], height=box["height"])

    async def query_scrollables(self) -> list[ScrollableSnapshot]:
        items = await self.page.evaluate(_QUERY_SCROLLABLES_JS)
        snapshots = [_snapshot(item) for item in items]
        logger.debug("Found %d scrollable axes", len(snapshots))
        return snapshots

    async def refresh_scrollables(self, scrollables: Sequence[ScrollableSnapshot]) -> list[ScrollableSnapshot]:
        if not scrollables:
            return []
        items = await self.page.evaluate(
            _REFRESH_SCROLLABLES_JS,
            [{"selector": s.selector, "axis": s.axis.value} for s in scrollables],
        )
        for item in items:
            if item.get("missing"):
                raise ElementNotFoundError(item["selector"])
        return [_snapshot(item) for item in items]

    async def first_match(self, selector: str) -> str:
        if await self.page.locator(selector).count() == 0:
            raise ElementNotFoundError(selector)
        return f"{selector} >> nth=0"

    async def rasterize(self, selector: str) -> bytes:
        locator = self.page.locator(selector).first
        if await locator.count() == 0:
            raise ElementNotFoundError(selector)
        return await locator.screenshot(animations="disabled", caret="hide")

    async def apply_text_settings(self, text_scale_factor: float = 1.0, locale: Optional[str] = None) -> None:
        await self.page.evaluate(_TEXT_SCALE_JS, text_scale_factor)
        if locale == self._locale:
            return

        cdp = await self._cdp_session()
        if cdp is None:
            logger.warning("Locale emulation needs Chromium; locale %s not applied", locale)
            return
        await cdp.send("Emulation.setLocaleOverride", {"locale": locale} if locale else {})
        self._locale = locale

    async def apply_device(self, pixel_ratio: float, physical_size: Size) -> None:
        cdp = await self._cdp_session()
        if cdp is None:
            logger.warning("Device emulation needs Chromium; pixel ratio %s not applied", pixel_ratio)
            return

        logical = physical_size.scaled(1 / pixel_ratio)
        await cdp.send("Emulation.setDeviceMetricsOverride", {
            "width": round(logical.width),
            "height": round(logical.height),
            "deviceScaleFactor": pixel_ratio,
            "mobile": False,
        })

    async def _cdp_session(self) -> CDPSession | None:
        if self._cdp is None:
            browser = self.page.context.browser
            if browser is not None and browser.browser_type.name != "chromium":
                return None
            self._cdp = await self.page.context.new_cdp_session(self.page)
        return self._cdp
