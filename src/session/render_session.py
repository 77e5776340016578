"""Host-facing render session protocol and scrollable measurements."""

from __future__ import annotations

import math
from typing import Optional, Protocol, Sequence, runtime_checkable

from pydantic import BaseModel, ConfigDict

from src.models.geometry import Axis, Size


class ScrollableSnapshot(BaseModel):
    """Remaining scroll distance of one scrollable region along one axis."""
    model_config = ConfigDict(frozen=True, ser_json_inf_nan="constants")

    selector: str
    axis: Axis
    extent_after: float  # math.inf for unbounded/lazy content

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.extent_after)


@runtime_checkable
class RenderSession(Protocol):
    """Everything the golden helpers need from the rendering host."""

    async def surface_size(self) -> Size: ...

    async def set_surface_size(self, size: Size) -> None: ...

    async def pump(self) -> None:
        """Let the host finish layout and paint for the current state."""
        ...

    async def set_content(self, html: str) -> None: ...

    async def measure(self, selector: str) -> Size:
        """Natural size of the first element matching ``selector``."""
        ...

    async def query_scrollables(self) -> list[ScrollableSnapshot]: ...

    async def refresh_scrollables(self, scrollables: Sequence[ScrollableSnapshot]) -> list[ScrollableSnapshot]:
        """Re-measure previously queried scrollables against the current layout."""
        ...

    async def first_match(self, selector: str) -> str:
        """Selector addressing only the first element matching ``selector``."""
        ...

    async def rasterize(self, selector: str) -> bytes: ...

    async def apply_text_settings(self, text_scale_factor: float = 1.0, locale: Optional[str] = None) -> None:
        """Apply settings that change layout; callers pump before measuring."""
        ...

    async def apply_device(self, pixel_ratio: float, physical_size: Size) -> None: ...
