"""Match orchestrator: sizes, renders and compares one tree across golden configurations."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from src.comparator.golden_comparator import GoldenComparator
from src.errors import ConfigurationError, GoldenMismatchError, MismatchFailure
from src.models.geometry import Size
from src.models.golden_configuration import GoldenConfiguration
from src.models.match_request import ExpandAuto, ExpandWith, MatchRequest, ShrinkTo, SizingMode
from src.registry import GoldensRegistry
from src.session.render_session import RenderSession, ScrollableSnapshot
from src.sizing.surface import (
    expand_surface_within_constraints,
    finite_scrollables,
    set_surface_and_pump,
    shrink_surface_within_constraints,
)

logger = logging.getLogger(__name__)

GOLDEN_SURFACE = Size(width=1000, height=1000)


async def pump_golden_content(session: RenderSession, html: str) -> None:
    """Load ``html`` wrapped in a golden boundary on a 1000x1000 surface."""
    await set_surface_and_pump(session, GOLDEN_SURFACE)
    await session.set_content(
        "<!DOCTYPE html><html><head><style>html, body { margin: 0; padding: 0; }</style></head>"
        f"<body><div data-golden-boundary>{html}</div></body></html>"
    )


def get_goldens(
    session: RenderSession,
    configurations: Sequence[GoldenConfiguration],
    *,
    expand: Optional[bool] = None,
    scrollables: Optional[Sequence[ScrollableSnapshot]] = None,
    shrink: Optional[str] = None,
    finder: Optional[str] = None,
) -> list[MatchRequest]:
    """Create one MatchRequest per configuration.

    ``shrink`` selects shrink-to-fit; otherwise the surface is expanded, either
    by the given ``scrollables`` or by every finite scrollable on the page.
    """
    if shrink is not None and expand:
        raise ConfigurationError("Shrinking and expanding at the same time makes no sense")

    sizing: SizingMode
    if shrink is not None:
        sizing = ShrinkTo(shrink)
    elif scrollables is not None:
        sizing = ExpandWith(tuple(scrollables))
    else:
        sizing = ExpandAuto()

    return [
        MatchRequest(session=session, configuration=configuration, sizing=sizing, finder=finder)
        for configuration in configurations
    ]


class MatchOrchestrator:
    """Runs match requests in order and reports the first failing golden."""

    def __init__(self, registry: GoldensRegistry):
        self.registry = registry

    async def match_async(self, name: str, requests: Sequence[MatchRequest]) -> Optional[MismatchFailure]:
        """Match every request against the goldens of ``name``.

        Stops at the first failing request; later requests are not rendered.
        """
        config = self.registry.configuration
        comparator = GoldenComparator(config)

        for index, request in enumerate(requests):
            configuration = request.configuration
            session = request.session
            logger.debug("Matching %s [%d/%d]: %s", name, index + 1, len(requests), configuration)

            # Applied before sizing: text scale and locale change layout
            await session.apply_text_settings(configuration.text_scale_factor, configuration.locale)
            await session.pump()

            await self._apply_sizing(session, request.sizing, configuration)

            surface = await session.surface_size()
            await session.apply_device(
                pixel_ratio=configuration.pixel_ratio,
                physical_size=surface.scaled(configuration.pixel_ratio),
            )

            if config.prime_assets is not None:
                await config.prime_assets(session)
            await session.pump()

            file_name = config.file_name_for(name, configuration)
            finder = request.finder or await session.first_match(config.boundary_selector)
            image_bytes = await session.rasterize(finder)

            failure = await asyncio.to_thread(comparator.compare_or_update, image_bytes, file_name)
            if failure is not None:
                logger.info("Golden %s failed for %s, skipping %d remaining configuration(s)",
                            name, configuration.name, len(requests) - index - 1)
                return failure

        return None

    async def assert_matches_goldens(self, name: str, requests: Sequence[MatchRequest]) -> None:
        failure = await self.match_async(name, requests)
        if failure is not None:
            raise GoldenMismatchError(failure)

    async def _apply_sizing(
        self, session: RenderSession, sizing: SizingMode, configuration: GoldenConfiguration
    ) -> Size:
        constraints = configuration.constraints
        match sizing:
            case ShrinkTo(selector=selector):
                return await shrink_surface_within_constraints(session, selector, constraints)
            case ExpandWith(scrollables=scrollables):
                return await expand_surface_within_constraints(session, scrollables, constraints)
            case ExpandAuto():
                scrollables = await finite_scrollables(session)
                return await expand_surface_within_constraints(session, scrollables, constraints)
            case _:
                raise ConfigurationError(f"Unknown sizing mode: {sizing!r}")
