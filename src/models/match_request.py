"""Match requests: one golden configuration plus how to size the surface for it."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from src.models.golden_configuration import GoldenConfiguration
from src.session.render_session import RenderSession, ScrollableSnapshot


@dataclass(frozen=True)
class ShrinkTo:
    """Shrink the surface to the natural size of the element at ``selector``."""
    selector: str


@dataclass(frozen=True)
class ExpandAuto:
    """Expand the surface by every scrollable that currently has a finite extent."""


@dataclass(frozen=True)
class ExpandWith:
    """Expand the surface by exactly these scrollables."""
    scrollables: tuple[ScrollableSnapshot, ...] = field(default_factory=tuple)


SizingMode = Union[ShrinkTo, ExpandAuto, ExpandWith]


@dataclass(frozen=True)
class MatchRequest:
    session: RenderSession
    configuration: GoldenConfiguration
    sizing: SizingMode = field(default_factory=ExpandAuto)
    # Element to rasterize; defaults to the first golden boundary
    finder: Optional[str] = None

    def __str__(self) -> str:
        return f"MatchRequest({self.configuration.name}, sizing={self.sizing}, finder={self.finder})"
