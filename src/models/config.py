"""Configuration models for golden assertions."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from pydantic import BaseModel, Field, field_validator

from src.models.golden_configuration import GoldenConfiguration

FileNameFactory = Callable[[str, GoldenConfiguration], str]
# Called with the RenderSession about to be rasterized
AssetPrimer = Callable[[Any], Awaitable[None]]

_TRUTHY = {"1", "true", "yes", "on"}


def _update_goldens_from_env() -> bool:
    return os.environ.get("UPDATE_GOLDENS", "").strip().lower() in _TRUTHY


class GoldensConfiguration(BaseModel):
    # Reference storage
    base_dir: Path = Path("goldens")
    failures_dir: Optional[Path] = None

    # Naming
    file_name_pattern: str = "{name}.{configuration}.png"
    file_name_factory: Optional[FileNameFactory] = Field(default=None, exclude=True)

    # Hook run before every rasterization
    prime_assets: Optional[AssetPrimer] = Field(default=None, exclude=True)

    # Record mode
    update_goldens: bool = Field(default_factory=_update_goldens_from_env)

    # Comparison
    tolerance: float = Field(default=0.0, ge=0.0, le=1.0)
    pixel_threshold: int = Field(default=0, ge=0, le=255)

    # Default rasterization target
    boundary_selector: str = "[data-golden-boundary]"

    @field_validator("file_name_pattern")
    @classmethod
    def check_pattern(cls, v: str) -> str:
        if "{name}" not in v or "{configuration}" not in v:
            raise ValueError("file_name_pattern must contain {name} and {configuration}")
        return v

    @property
    def effective_failures_dir(self) -> Path:
        return self.failures_dir if self.failures_dir is not None else self.base_dir / "failures"

    def file_name_for(self, name: str, configuration: GoldenConfiguration) -> str:
        """Relative reference path for a golden name and configuration."""
        if self.file_name_factory is not None:
            return self.file_name_factory(name, configuration)
        return self.file_name_pattern.format(name=name, configuration=configuration.name)

    @classmethod
    def load(cls, path: str | Path) -> "GoldensConfiguration":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2)
