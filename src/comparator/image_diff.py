"""Pixel comparison of encoded images using Pillow."""

from __future__ import annotations

import io
from dataclasses import dataclass
from functools import reduce
from typing import Optional

from PIL import Image, ImageChops

# Colour used to highlight differing pixels in diff images
DIFF_COLOR = (255, 0, 255, 255)


@dataclass
class ImageComparison:
    passed: bool
    message: str
    diff_ratio: float = 0.0
    diff_pixels: int = 0
    isolated_diff: Optional[Image.Image] = None
    masked_diff: Optional[Image.Image] = None


def _decode(data: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(data))
    image.load()
    return image.convert("RGBA")


def encode_png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def compare_images(
    test_bytes: bytes,
    master_bytes: bytes,
    tolerance: float = 0.0,
    pixel_threshold: int = 0,
) -> ImageComparison:
    """Compare a rendered image against its master.

    A pixel differs when any RGBA channel deviates by more than
    ``pixel_threshold``. The comparison passes while the fraction of differing
    pixels is at most ``tolerance``.
    """
    if test_bytes == master_bytes:
        return ImageComparison(passed=True, message="Images are identical")

    test = _decode(test_bytes)
    master = _decode(master_bytes)

    if test.size != master.size:
        return ImageComparison(
            passed=False,
            message=(
                "Pixel test failed, image sizes do not match.\n"
                f"Master Image: {master.width} X {master.height}\n"
                f"Test Image: {test.width} X {test.height}"
            ),
            diff_ratio=1.0,
        )

    difference = ImageChops.difference(test, master)
    channel_max = reduce(ImageChops.lighter, difference.split())
    mask = channel_max.point(lambda v: 255 if v > pixel_threshold else 0)

    diff_pixels = mask.histogram()[255]
    total = test.width * test.height
    diff_ratio = diff_pixels / total if total else 0.0

    if diff_pixels == 0:
        return ImageComparison(passed=True, message="Images match within pixel threshold")

    highlight = Image.new("RGBA", test.size, DIFF_COLOR)
    isolated = Image.new("RGBA", test.size, (0, 0, 0, 0))
    isolated.paste(highlight, mask=mask)
    masked = test.copy()
    masked.paste(highlight, mask=mask)

    passed = diff_ratio <= tolerance
    return ImageComparison(
        passed=passed,
        message=f"Pixel test {'passed' if passed else 'failed'}, {diff_ratio:.2%} diff detected "
                f"(tolerance: {tolerance:.2%}).",
        diff_ratio=diff_ratio,
        diff_pixels=diff_pixels,
        isolated_diff=isolated,
        masked_diff=masked,
    )
