"""Pytest configuration and shared fixtures."""

import io
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Sequence

import pytest
from PIL import Image

from src.errors import ElementNotFoundError
from src.models.config import GoldensConfiguration
from src.models.geometry import Axis, BoxConstraints, Size
from src.models.golden_configuration import GoldenConfiguration
from src.registry import GoldensRegistry
from src.session.render_session import ScrollableSnapshot


def png_bytes(size: tuple[int, int], color=(0, 128, 0, 255)) -> bytes:
    """Encode a solid-colour PNG."""
    buffer = io.BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


# ============================================================================
# Fake render session
# ============================================================================


@dataclass
class FakeScrollRegion:
    """A viewport-filling scroll region with fixed content length."""
    selector: str
    axis: Axis
    content_extent: float = math.inf
    scales_with_text: bool = False

    def extent_after(self, surface: Size, text_scale_factor: float = 1.0) -> float:
        if math.isinf(self.content_extent):
            return math.inf
        content = self.content_extent * text_scale_factor if self.scales_with_text else self.content_extent
        viewport = surface.height if self.axis == Axis.VERTICAL else surface.width
        return max(0.0, content - viewport)


@dataclass
class FakeSession:
    """In-memory RenderSession with a trivial layout model."""
    surface: Size = field(default_factory=lambda: Size(width=800, height=600))
    elements: dict[str, Size] = field(default_factory=dict)
    regions: list[FakeScrollRegion] = field(default_factory=list)
    renderer: Optional[Callable[[Size], bytes]] = None
    calls: list[tuple] = field(default_factory=list)
    device: Optional[dict] = None
    text_scale_factor: float = 1.0
    locale: Optional[str] = None

    async def surface_size(self) -> Size:
        return self.surface

    async def set_surface_size(self, size: Size) -> None:
        self.calls.append(("set_surface_size", size))
        self.surface = size

    async def pump(self) -> None:
        self.calls.append(("pump",))

    async def set_content(self, html: str) -> None:
        self.calls.append(("set_content", html))

    async def measure(self, selector: str) -> Size:
        if selector not in self.elements:
            raise ElementNotFoundError(selector)
        return self.elements[selector]

    async def query_scrollables(self) -> list[ScrollableSnapshot]:
        return [
            ScrollableSnapshot(
                selector=r.selector,
                axis=r.axis,
                extent_after=r.extent_after(self.surface, self.text_scale_factor),
            )
            for r in self.regions
        ]

    async def refresh_scrollables(self, scrollables: Sequence[ScrollableSnapshot]) -> list[ScrollableSnapshot]:
        self.calls.append(("refresh_scrollables", [s.selector for s in scrollables]))
        by_selector = {r.selector: r for r in self.regions}
        return [
            ScrollableSnapshot(
                selector=s.selector,
                axis=s.axis,
                extent_after=by_selector[s.selector].extent_after(self.surface, self.text_scale_factor),
            )
            for s in scrollables
        ]

    async def first_match(self, selector: str) -> str:
        self.calls.append(("first_match", selector))
        return f"{selector} >> nth=0"

    async def rasterize(self, selector: str) -> bytes:
        self.calls.append(("rasterize", selector))
        if self.renderer is not None:
            return self.renderer(self.surface)
        return png_bytes((int(self.surface.width), int(self.surface.height)))

    async def apply_text_settings(self, text_scale_factor=1.0, locale=None) -> None:
        self.text_scale_factor = text_scale_factor
        self.locale = locale
        self.calls.append(("apply_text_settings", text_scale_factor, locale))

    async def apply_device(self, pixel_ratio, physical_size) -> None:
        self.device = {"pixel_ratio": pixel_ratio, "physical_size": physical_size}
        self.calls.append(("apply_device", pixel_ratio))


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def phone_unbound_height() -> GoldenConfiguration:
    return GoldenConfiguration(
        name="phone",
        pixel_ratio=3.0,
        constraints=BoxConstraints.tight_for(width=375),
    )


@pytest.fixture
def tablet_unbound_height() -> GoldenConfiguration:
    return GoldenConfiguration(
        name="tablet",
        pixel_ratio=3.0,
        constraints=BoxConstraints.tight_for(width=843),
    )


@pytest.fixture
def goldens_dir(tmp_path: Path) -> Path:
    return tmp_path / "goldens"


@pytest.fixture
def verify_config(goldens_dir: Path) -> GoldensConfiguration:
    return GoldensConfiguration(
        base_dir=goldens_dir,
        update_goldens=False,
        file_name_factory=lambda name, config: f"goldens/{name}_{config.name}.png",
    )


@pytest.fixture
def record_config(verify_config: GoldensConfiguration) -> GoldensConfiguration:
    return verify_config.model_copy(update={"update_goldens": True})


@pytest.fixture
def verify_registry(verify_config: GoldensConfiguration) -> GoldensRegistry:
    return GoldensRegistry(verify_config)


@pytest.fixture
def record_registry(record_config: GoldensConfiguration) -> GoldensRegistry:
    return GoldensRegistry(record_config)


# ============================================================================
# Helper Fixtures
# ============================================================================


@pytest.fixture
def make_png() -> Callable[..., bytes]:
    """Factory for solid-colour PNG bytes."""
    return png_bytes


@pytest.fixture
def make_region() -> Callable[..., FakeScrollRegion]:
    """Factory for scroll regions of the fake session."""
    return FakeScrollRegion
