"""Golden configuration: one rendering variant of a golden test."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.errors import ConfigurationError
from src.models.geometry import BoxConstraints, Size


class Orientation(str, Enum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


class ConfigurationKind(str, Enum):
    CONFIGURATION = "configuration"
    DEVICE = "device"  # tight constraints, supports orientation changes


class GoldenConfiguration(BaseModel):
    """Describes the configuration for a single golden test.

    The configuration includes the ``constraints`` which must be respected by
    the output file, plus device settings: the ``locale``, the device
    ``pixel_ratio`` and the ``text_scale_factor``.

    If a match expands infinite scrollables, the constraints must be bounded
    on the scroll axis.
    """
    model_config = ConfigDict(frozen=True, ser_json_inf_nan="constants")

    name: str
    constraints: BoxConstraints = Field(default_factory=BoxConstraints)
    pixel_ratio: float = Field(default=1.0, gt=0)
    text_scale_factor: float = Field(default=1.0, gt=0)
    locale: Optional[str] = None
    orientation: Optional[Orientation] = None
    kind: ConfigurationKind = ConfigurationKind.CONFIGURATION

    @classmethod
    def device(
        cls,
        name: str,
        width: float,
        height: float,
        pixel_ratio: float = 1.0,
        text_scale_factor: float = 1.0,
        locale: Optional[str] = None,
        orientation: Optional[Orientation] = None,
    ) -> GoldenConfiguration:
        """Build a device configuration with tight constraints."""
        return cls(
            name=name,
            constraints=BoxConstraints.tight(Size(width=width, height=height)),
            pixel_ratio=pixel_ratio,
            text_scale_factor=text_scale_factor,
            locale=locale,
            orientation=orientation,
            kind=ConfigurationKind.DEVICE,
        )

    @property
    def is_device(self) -> bool:
        return self.kind == ConfigurationKind.DEVICE

    def copy_with(self, **fields: Any) -> GoldenConfiguration:
        """Return a validated copy with ``fields`` overridden."""
        unknown = set(fields) - set(type(self).model_fields)
        if unknown:
            raise TypeError(f"Unknown configuration fields: {sorted(unknown)}")
        data = {name: getattr(self, name) for name in type(self).model_fields}
        data.update(fields)
        return GoldenConfiguration(**data)

    def loose_height(
        self, min_height: Optional[float] = None, max_height: Optional[float] = None
    ) -> GoldenConfiguration:
        """Let the height float between ``min_height`` (default 0) and ``max_height`` (default unbounded)."""
        return self.copy_with(
            constraints=self.constraints.copy_with(
                min_height=min_height if min_height is not None else 0.0,
                max_height=max_height if max_height is not None else float("inf"),
            )
        )

    def loose_width(
        self, min_width: Optional[float] = None, max_width: Optional[float] = None
    ) -> GoldenConfiguration:
        """Let the width float between ``min_width`` (default 0) and ``max_width`` (default unbounded)."""
        return self.copy_with(
            constraints=self.constraints.copy_with(
                min_width=min_width if min_width is not None else 0.0,
                max_width=max_width if max_width is not None else float("inf"),
            )
        )

    def portrait(self) -> GoldenConfiguration:
        return self._oriented(Orientation.PORTRAIT)

    def landscape(self) -> GoldenConfiguration:
        return self._oriented(Orientation.LANDSCAPE)

    def _oriented(self, orientation: Orientation) -> GoldenConfiguration:
        if not self.is_device:
            raise ConfigurationError(f"Configuration {self.name!r} is not a device, cannot set {orientation.value}")
        if not self.constraints.is_tight:
            raise ConfigurationError(
                f"Device {self.name!r} needs tight constraints for {orientation.value}, got {self.constraints}"
            )

        size = self.constraints.smallest
        if orientation == Orientation.PORTRAIT:
            width, height = size.shortest_side, size.longest_side
        else:
            width, height = size.longest_side, size.shortest_side

        return self.copy_with(
            constraints=BoxConstraints.tight(Size(width=width, height=height)),
            orientation=orientation,
        )

    def __str__(self) -> str:
        return f"{self.kind.value} {self.name!r} ({self.constraints}, x{self.pixel_ratio:g})"
