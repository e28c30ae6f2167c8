"""Element capture — screenshots and computed styles from a live page.

The caller owns the browser and hands in an open Playwright ``Page``; this
module only reads from it. Opening, navigating and closing stay with the
caller::

    async with async_playwright() as pw:
        browser = await pw.chromium.launch()
        design, build = await browser.new_page(), await browser.new_page()
        await design.goto(design_url)
        await build.goto(build_url)

        result = compare(
            await capture_element(design, "button.primary"),
            await capture_element(build, "button.primary"),
            await extract_records(design, "button.primary"),
            await extract_records(build, "button.primary"),
        )
        await browser.close()

``compare`` is ``visual_parity.comparison.engine.compare``.
"""

from __future__ import annotations

import io
import logging
import re

from PIL import Image
from playwright.async_api import Page

from visual_parity.errors import CaptureError
from visual_parity.models.pixel_buffer import PixelBuffer
from visual_parity.models.property_record import RGBA, PropertyRecord

logger = logging.getLogger(__name__)

_COLOR_RE = re.compile(r"rgba?\((\d+),\s*(\d+),\s*(\d+)(?:,\s*(\d*\.?\d+))?\)")

_EXTRACT_JS = """(selector) => {
    const px = (v) => parseFloat(v) || 0;
    const sides = (cs, prefix, suffix) => ({
        top: px(cs[prefix + 'Top' + suffix]),
        right: px(cs[prefix + 'Right' + suffix]),
        bottom: px(cs[prefix + 'Bottom' + suffix]),
        left: px(cs[prefix + 'Left' + suffix]),
    });
    return Array.from(document.querySelectorAll(selector)).map((el, index) => {
        const cs = window.getComputedStyle(el);
        const rect = el.getBoundingClientRect();
        return {
            element: `${selector}[${index}]`,
            position: {x: rect.x, y: rect.y, width: rect.width, height: rect.height},
            colors: {
                color: cs.color,
                backgroundColor: cs.backgroundColor,
                borderColor: cs.borderTopColor,
            },
            typography: {
                fontSize: px(cs.fontSize),
                lineHeight: px(cs.lineHeight),
                fontWeight: cs.fontWeight,
                fontFamily: cs.fontFamily,
            },
            styling: {
                opacity: parseFloat(cs.opacity),
                borderRadius: px(cs.borderRadius),
                padding: sides(cs, 'padding', ''),
                margin: sides(cs, 'margin', ''),
                border: sides(cs, 'border', 'Width'),
            },
        };
    });
}"""


def parse_css_color(value: str) -> RGBA:
    """Parse ``rgb()``/``rgba()`` text into RGBA; anything else is opaque black."""
    match = _COLOR_RE.search(value or "")
    if not match:
        logger.debug("Unparseable color %r, using opaque black", value)
        return RGBA()
    r, g, b, a = match.groups()
    return RGBA(r=int(r), g=int(g), b=int(b), a=float(a) if a is not None else 1.0)


def _to_record(raw: dict) -> PropertyRecord:
    colors = {name: parse_css_color(text) for name, text in raw.get("colors", {}).items()}
    return PropertyRecord(**{**raw, "colors": colors})


async def extract_records(page: Page, selector: str) -> list[PropertyRecord]:
    """Computed style snapshot of every element matching ``selector``."""
    raw_elements = await page.evaluate(_EXTRACT_JS, selector)
    if not raw_elements:
        raise CaptureError(f"No elements found for selector '{selector}'")
    logger.debug("Extracted %d records for %s", len(raw_elements), selector)
    return [_to_record(raw) for raw in raw_elements]


async def capture_element(page: Page, selector: str, padding: int = 0) -> PixelBuffer:
    """Screenshot the first element matching ``selector`` as a PixelBuffer.

    ``padding`` widens the clip on every side to include surrounding context.
    """
    element = await page.query_selector(selector)
    if element is None:
        raise CaptureError(f"Selector not found: {selector}")
    box = await element.bounding_box()
    if not box:
        raise CaptureError(f"Element '{selector}' is not visible or has no bounding box")

    clip = {
        "x": max(box["x"] - padding, 0),
        "y": max(box["y"] - padding, 0),
        "width": box["width"] + padding * 2,
        "height": box["height"] + padding * 2,
    }
    png = await page.screenshot(clip=clip)
    buffer = PixelBuffer.from_image(Image.open(io.BytesIO(png)))
    logger.debug("Captured %s at %dx%d", selector, buffer.width, buffer.height)
    return buffer
