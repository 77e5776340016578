"""Surface sizing: shrink to an element or expand to fit scrollable content."""

from __future__ import annotations

import logging
import math
from typing import Sequence

from src.errors import ConfigurationError
from src.models.geometry import Axis, BoxConstraints, Size
from src.session.render_session import RenderSession, ScrollableSnapshot

logger = logging.getLogger(__name__)

# Used for the first layout pass when the constraints allow a zero-sized axis
SEED_FALLBACK_EXTENT = 100.0


async def set_surface_and_pump(session: RenderSession, size: Size) -> None:
    await session.set_surface_size(size)
    await session.pump()


async def shrink_surface_within_constraints(
    session: RenderSession, selector: str, constraints: BoxConstraints
) -> Size:
    """Shrink the surface as near as possible to the element's size while staying inside ``constraints``."""
    natural = await session.measure(selector)
    size = constraints.constrain(natural)
    logger.debug("Shrinking surface to %s (natural %s of %r, %s)", size, natural, selector, constraints)
    await set_surface_and_pump(session, size)
    return size


def seed_size(constraints: BoxConstraints) -> Size:
    smallest = constraints.smallest
    return Size(
        width=smallest.width or SEED_FALLBACK_EXTENT,
        height=smallest.height or SEED_FALLBACK_EXTENT,
    )


def expansion_delta(scrollables: Sequence[ScrollableSnapshot]) -> Size:
    """Sum remaining scroll extents per axis; horizontal grows width, vertical grows height."""
    width = 0.0
    height = 0.0
    for scrollable in scrollables:
        if scrollable.axis == Axis.VERTICAL:
            height += scrollable.extent_after
        else:
            width += scrollable.extent_after
    return Size(width=width, height=height)


def expanded_size(seed: Size, delta: Size, constraints: BoxConstraints) -> Size:
    if math.isinf(delta.width) and not constraints.has_bounded_width:
        raise ConfigurationError(
            "An infinite horizontal scrollable needs a bounded max_width, got %s" % constraints
        )
    if math.isinf(delta.height) and not constraints.has_bounded_height:
        raise ConfigurationError(
            "An infinite vertical scrollable needs a bounded max_height, got %s" % constraints
        )
    return constraints.constrain(Size(width=seed.width + delta.width, height=seed.height + delta.height))


async def expand_surface_within_constraints(
    session: RenderSession,
    scrollables: Sequence[ScrollableSnapshot],
    constraints: BoxConstraints,
) -> Size:
    """Expand the surface to contain all the ``scrollables``.

    Starts with the smallest size accepted by ``constraints``, measures how far
    each scrollable can still scroll, then grows the surface by that amount and
    clamps the result back into ``constraints``.
    """
    seed = seed_size(constraints)
    await set_surface_and_pump(session, seed)

    measured = await session.refresh_scrollables(scrollables)
    delta = expansion_delta(measured)
    size = expanded_size(seed, delta, constraints)

    logger.debug("Expanding surface from %s by %s to %s (%s)", seed, delta, size, constraints)
    await set_surface_and_pump(session, size)
    return size


async def finite_scrollables(session: RenderSession) -> list[ScrollableSnapshot]:
    return [s for s in await session.query_scrollables() if s.is_finite]


async def infinite_scrollables(session: RenderSession) -> list[ScrollableSnapshot]:
    return [s for s in await session.query_scrollables() if not s.is_finite]
