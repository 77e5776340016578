"""Error definitions for golden image assertions."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel


class GoldensError(Exception):
    """Base class for all golden helper errors."""


class ConfigurationError(GoldensError):
    """A precondition of the golden helpers was violated.

    Raised for usage errors that cannot be recovered at runtime:
    - the registry was read before it was configured, or configured after a read
    - shrink and expand sizing were requested at the same time
    - an orientation was requested for a non-device or non-tight configuration
    - an infinite scrollable was expanded along an unbounded axis
    """


class MissingReferenceError(GoldensError, AssertionError):
    """No reference image exists for a golden in verify mode."""

    def __init__(self, golden: str, path: Path):
        self.golden = golden
        self.path = path
        super().__init__(f'Could not be compared against non-existent file: "{golden}" ({path})')


class ElementNotFoundError(GoldensError):
    """A selector did not resolve to a visible element."""

    def __init__(self, selector: str):
        self.selector = selector
        super().__init__(f"No visible element matches selector {selector!r}")


class MismatchFailure(BaseModel):
    """A failed pixel comparison, reported back to the caller."""
    golden: str
    description: str
    diff_ratio: Optional[float] = None
    failures_dir: Optional[Path] = None

    def __str__(self) -> str:
        if self.failures_dir is None:
            return self.description
        return f"{self.description}\nFailure artifacts written to {self.failures_dir}"


class GoldenMismatchError(GoldensError, AssertionError):
    """Raised by assertion helpers when a golden comparison fails."""

    def __init__(self, failure: MismatchFailure):
        self.failure = failure
        super().__init__(str(failure))
