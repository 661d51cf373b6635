"""Tests for course color assignment."""

import random
import re
from types import SimpleNamespace

from courseflow.core.colors import PALETTE, fix_duplicate_colors, generate_random_color

HEX_RE = re.compile(r"^#[0-9a-f]{6}$")


class TestGenerateRandomColor:
    """Tests for generate_random_color."""

    def test_prefers_palette(self):
        color = generate_random_color([], random.Random(1))

        assert color in PALETTE

    def test_skips_used_colors(self):
        """The only free palette entry is chosen."""
        color = generate_random_color(PALETTE[:-1], random.Random(1))

        assert color == PALETTE[-1]

    def test_used_colors_case_insensitive(self):
        used = [c.upper() for c in PALETTE[:-1]]

        assert generate_random_color(used, random.Random(2)) == PALETTE[-1]

    def test_random_hex_when_palette_exhausted(self):
        color = generate_random_color(PALETTE, random.Random(3))

        assert HEX_RE.match(color)
        assert color not in PALETTE


class TestFixDuplicateColors:
    """Tests for fix_duplicate_colors."""

    def test_reassigns_duplicates(self):
        courses = [
            SimpleNamespace(color="#4285f4"),
            SimpleNamespace(color="#4285F4"),
            SimpleNamespace(color="#ea4335"),
        ]

        fixed = fix_duplicate_colors(courses, random.Random(0))

        assert fixed == 1
        assert courses[0].color == "#4285f4"
        colors = {c.color.lower() for c in courses}
        assert len(colors) == 3

    def test_missing_color_is_filled(self):
        courses = [SimpleNamespace(color="")]

        assert fix_duplicate_colors(courses, random.Random(0)) == 1
        assert courses[0].color in PALETTE

    def test_unique_colors_untouched(self):
        courses = [SimpleNamespace(color=c) for c in PALETTE[:3]]

        assert fix_duplicate_colors(courses) == 0
        assert [c.color for c in courses] == PALETTE[:3]
