"""Layout geometry: sizes, box constraints and scroll axes."""

from __future__ import annotations

import math
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Axis(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class Size(BaseModel):
    model_config = ConfigDict(frozen=True, ser_json_inf_nan="constants")

    width: float
    height: float

    @property
    def shortest_side(self) -> float:
        return min(self.width, self.height)

    @property
    def longest_side(self) -> float:
        return max(self.width, self.height)

    def scaled(self, factor: float) -> Size:
        return Size(width=self.width * factor, height=self.height * factor)

    def __str__(self) -> str:
        return f"{self.width:g}x{self.height:g}"


class BoxConstraints(BaseModel):
    """Immutable min/max bounds for both axes.

    Unbounded axes use ``math.inf`` as their maximum.
    """
    model_config = ConfigDict(frozen=True, ser_json_inf_nan="constants")

    min_width: float = Field(default=0.0, ge=0)
    max_width: float = Field(default=math.inf, ge=0)
    min_height: float = Field(default=0.0, ge=0)
    max_height: float = Field(default=math.inf, ge=0)

    @model_validator(mode="after")
    def _check_satisfiable(self) -> BoxConstraints:
        if self.min_width > self.max_width:
            raise ValueError(f"min_width {self.min_width} exceeds max_width {self.max_width}")
        if self.min_height > self.max_height:
            raise ValueError(f"min_height {self.min_height} exceeds max_height {self.max_height}")
        if math.isinf(self.min_width) or math.isinf(self.min_height):
            raise ValueError("Minimum bounds must be finite")
        return self

    @classmethod
    def tight(cls, size: Size) -> BoxConstraints:
        return cls(
            min_width=size.width,
            max_width=size.width,
            min_height=size.height,
            max_height=size.height,
        )

    @classmethod
    def tight_for(cls, width: Optional[float] = None, height: Optional[float] = None) -> BoxConstraints:
        """Tight on the given axes, fully unconstrained on the others."""
        return cls(
            min_width=width if width is not None else 0.0,
            max_width=width if width is not None else math.inf,
            min_height=height if height is not None else 0.0,
            max_height=height if height is not None else math.inf,
        )

    @property
    def is_tight(self) -> bool:
        return self.min_width >= self.max_width and self.min_height >= self.max_height

    @property
    def has_bounded_width(self) -> bool:
        return math.isfinite(self.max_width)

    @property
    def has_bounded_height(self) -> bool:
        return math.isfinite(self.max_height)

    @property
    def smallest(self) -> Size:
        return Size(width=self.min_width, height=self.min_height)

    @property
    def biggest(self) -> Size:
        return Size(width=self.max_width, height=self.max_height)

    def constrain_width(self, width: float) -> float:
        return max(self.min_width, min(self.max_width, width))

    def constrain_height(self, height: float) -> float:
        return max(self.min_height, min(self.max_height, height))

    def constrain(self, size: Size) -> Size:
        """Clamp each axis of ``size`` into these constraints independently."""
        return Size(width=self.constrain_width(size.width), height=self.constrain_height(size.height))

    def copy_with(self, **bounds: float) -> BoxConstraints:
        """Return new constraints with ``bounds`` overridden, re-validated."""
        return BoxConstraints(**{**self.model_dump(), **bounds})

    def __str__(self) -> str:
        if self.is_tight:
            return f"BoxConstraints(tight {self.smallest})"
        return (
            f"BoxConstraints({self.min_width:g}<=w<={self.max_width:g}, "
            f"{self.min_height:g}<=h<={self.max_height:g})"
        )
