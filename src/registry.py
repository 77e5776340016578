"""Configure-once holder for the golden configuration."""

from __future__ import annotations

import logging
from typing import Optional

from src.errors import ConfigurationError
from src.models.config import GoldensConfiguration

logger = logging.getLogger(__name__)


class GoldensRegistry:
    """Holds the GoldensConfiguration shared by comparators and orchestrators.

    Construct one per test session and pass it down. The configuration may be
    set exactly once and only before anyone has read it.
    """

    def __init__(self, configuration: Optional[GoldensConfiguration] = None):
        self._configuration: Optional[GoldensConfiguration] = None
        self._read = False
        if configuration is not None:
            self.configure(configuration)

    @property
    def is_configured(self) -> bool:
        return self._configuration is not None

    @property
    def configuration(self) -> GoldensConfiguration:
        if self._configuration is None:
            raise ConfigurationError(
                "Please first configure goldens using GoldensRegistry.configure before calling this."
            )
        self._read = True
        return self._configuration

    def configure(self, configuration: GoldensConfiguration) -> None:
        if self._read:
            raise ConfigurationError("Goldens configuration was already read and can no longer be changed.")
        if self._configuration is not None:
            logger.debug("Replacing unread goldens configuration")
        self._configuration = configuration
        logger.debug(
            "Goldens configured: base_dir=%s update_goldens=%s",
            configuration.base_dir, configuration.update_goldens,
        )
