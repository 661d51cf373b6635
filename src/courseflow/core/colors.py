"""Course color assignment.

Colors come from a fixed palette, preferring ones no other course uses.
When the palette is exhausted a random hex color is drawn, re-checked
against the colors in use a bounded number of times.
"""

from __future__ import annotations

import random
from typing import Iterable, Protocol

import structlog

logger = structlog.get_logger(__name__)

PALETTE = [
    "#4285f4",
    "#ea4335",
    "#fbbc04",
    "#34a853",
    "#ff6d01",
    "#46bdc6",
    "#7b1fa2",
    "#e67c73",
    "#d50000",
    "#e65100",
]

MAX_RANDOM_ATTEMPTS = 50


class Colored(Protocol):
    """Anything carrying a mutable color attribute."""

    color: str


def _random_hex(rng: random.Random) -> str:
    return f"#{rng.randrange(0x1000000):06x}"


def generate_random_color(
    used_colors: Iterable[str] = (),
    rng: random.Random | None = None,
) -> str:
    """Pick a color not in ``used_colors`` when possible.

    Args:
        used_colors: Colors already taken by other courses
        rng: Random source (tests pass a seeded one)

    Returns:
        A palette color, or a random hex color once the palette is used up.
    """
    rng = rng or random.Random()
    used = {c.lower() for c in used_colors if c}

    available = [c for c in PALETTE if c not in used]
    if available:
        return rng.choice(available)

    for _ in range(MAX_RANDOM_ATTEMPTS):
        candidate = _random_hex(rng)
        if candidate not in used:
            return candidate

    # Astronomically unlikely; accept a possible duplicate rather than loop
    logger.warning("colors.random_fallback_exhausted", used=len(used))
    return _random_hex(rng)


def fix_duplicate_colors(
    courses: list[Colored],
    rng: random.Random | None = None,
) -> int:
    """Reassign colors so that no two courses share one.

    The first course holding a color keeps it; later holders get a fresh one.

    Args:
        courses: Courses in ledger order (mutated in place)
        rng: Random source

    Returns:
        Number of courses whose color changed.
    """
    rng = rng or random.Random()
    taken = {(c.color or "").lower() for c in courses}
    seen: set[str] = set()
    fixed = 0

    for course in courses:
        color = (course.color or "").lower()
        if color and color not in seen:
            seen.add(color)
            continue
        new_color = generate_random_color(seen | taken, rng)
        logger.info("colors.duplicate_fixed", old=course.color, new=new_color)
        course.color = new_color
        seen.add(new_color.lower())
        fixed += 1

    return fixed
