"""Golden comparator: verifies rendered images against stored references."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional

from src.comparator.image_diff import ImageComparison, compare_images, encode_png
from src.errors import MismatchFailure, MissingReferenceError
from src.models.config import GoldensConfiguration

logger = logging.getLogger(__name__)

TEST_IMAGE_LABEL = "_testImage"


class GoldenComparator:
    """Reads, writes and diffs reference images under ``base_dir``.

    Failure artifacts mirror the golden's relative path inside the failures
    directory and keep its suffix: ``goldens/a/b.png`` fails into
    ``failures/a/b_testImage.png`` and siblings.
    """

    def __init__(self, config: GoldensConfiguration):
        self.config = config

    @property
    def failures_dir(self) -> Path:
        return self.config.effective_failures_dir

    def golden_path(self, golden: str) -> Path:
        return self.config.base_dir / Path(golden)

    def failure_path(self, golden: str, label: str) -> Path:
        relative = Path(golden)
        return self.failures_dir / relative.parent / f"{relative.stem}_{label}{relative.suffix}"

    def compare(self, image_bytes: bytes, golden: str) -> Optional[MismatchFailure]:
        """Compare ``image_bytes`` with the reference; return the failure or None."""
        path = self.golden_path(golden)
        if not path.exists():
            raise MissingReferenceError(golden, path)

        master_bytes = path.read_bytes()
        result = compare_images(
            image_bytes,
            master_bytes,
            tolerance=self.config.tolerance,
            pixel_threshold=self.config.pixel_threshold,
        )
        if result.passed:
            logger.debug("Golden %s matches (%s)", golden, result.message)
            self.discard_failure(golden)
            return None

        self._write_failure_output(golden, image_bytes, master_bytes, result)
        logger.info("Golden %s mismatch: %s", golden, result.message)
        return MismatchFailure(
            golden=golden,
            description=f'Golden "{golden}": {result.message}',
            diff_ratio=result.diff_ratio,
            failures_dir=self.failure_path(golden, "testImage").parent,
        )

    def update(self, golden: str, image_bytes: bytes) -> Path:
        """Write ``image_bytes`` as the new reference for ``golden``."""
        path = self.golden_path(golden)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(image_bytes)
        logger.info("Updated golden %s (%d bytes)", path, len(image_bytes))
        return path

    def compare_or_update(self, image_bytes: bytes, golden: str) -> Optional[MismatchFailure]:
        if self.config.update_goldens:
            self.update(golden, image_bytes)
            return None
        return self.compare(image_bytes, golden)

    def references(self) -> list[str]:
        """Relative names of all stored references, failure artifacts excluded."""
        base = self.config.base_dir
        if not base.exists():
            return []
        failures = self.failures_dir.resolve()
        names = []
        for path in base.rglob("*"):
            if not path.is_file() or path.name.startswith("."):
                continue
            if path.resolve().is_relative_to(failures):
                continue
            names.append(path.relative_to(base).as_posix())
        return sorted(names)

    def failures(self) -> list[str]:
        """Goldens that have failure artifacts waiting to be approved."""
        if not self.failures_dir.exists():
            return []
        names = []
        for path in self.failures_dir.rglob(f"*{TEST_IMAGE_LABEL}*"):
            relative = path.relative_to(self.failures_dir)
            stem, _, suffix = relative.name.rpartition(TEST_IMAGE_LABEL)
            names.append((relative.parent / f"{stem}{suffix}").as_posix())
        return sorted(names)

    def approve(self, golden: str) -> Path:
        """Promote the failing test image of ``golden`` to be its reference."""
        source = self.failure_path(golden, "testImage")
        if not source.exists():
            raise FileNotFoundError(f"No failure recorded for golden: {golden}")
        dest = self.golden_path(golden)
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, dest)
        self.discard_failure(golden)
        logger.info("Approved %s", golden)
        return dest

    def discard_failure(self, golden: str) -> None:
        for label in ("masterImage", "testImage", "isolatedDiff", "maskedDiff"):
            self.failure_path(golden, label).unlink(missing_ok=True)

    def clean_failures(self) -> int:
        """Remove all failure artifacts; returns the number of goldens cleaned."""
        failed = self.failures()
        if self.failures_dir.exists():
            shutil.rmtree(self.failures_dir)
        return len(failed)

    def _write_failure_output(
        self, golden: str, test_bytes: bytes, master_bytes: bytes, result: ImageComparison
    ) -> None:
        outputs = {
            "masterImage": master_bytes,
            "testImage": test_bytes,
        }
        if result.isolated_diff is not None:
            outputs["isolatedDiff"] = encode_png(result.isolated_diff)
        if result.masked_diff is not None:
            outputs["maskedDiff"] = encode_png(result.masked_diff)

        for label, data in outputs.items():
            target = self.failure_path(golden, label)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
            logger.debug("Wrote %s", target)
