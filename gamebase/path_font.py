"""Line-based font data: glyphs described by strokes of coordinates."""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence


@dataclass
class PathFont:
    """A font whose glyphs are paths through a table of coordinates.

    ``glyph_char_starts`` indexes into ``chars`` and ``glyph_coord_starts``
    into ``coords``; both hold one more entry than there are glyphs, so
    glyph ``i`` spans ``starts[i]`` to ``starts[i + 1]``.
    """

    glyph_widths: Sequence[float]
    glyph_char_starts: Sequence[int]
    chars: bytes
    glyph_coord_starts: Sequence[int]
    coords: Sequence[float]
    glyph_map: Dict[str, int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.glyph_widths = tuple(self.glyph_widths)
        self.glyph_char_starts = tuple(self.glyph_char_starts)
        self.chars = bytes(self.chars)
        self.glyph_coord_starts = tuple(self.glyph_coord_starts)
        self.coords = tuple(self.coords)

        count = self.glyphs
        if len(self.glyph_char_starts) < count + 1:
            raise ValueError("glyph_char_starts needs one entry more than there are glyphs")
        if len(self.glyph_coord_starts) < count + 1:
            raise ValueError("glyph_coord_starts needs one entry more than there are glyphs")

        self.glyph_map = {}
        for index, (begin, end) in enumerate(
            zip(self.glyph_char_starts[:count], self.glyph_char_starts[1:count + 1])
        ):
            text = self.chars[begin:end].decode("utf-8", errors="surrogateescape")
            if text in self.glyph_map:
                warnings.warn(f"ignoring duplicate glyph for '{text}'.", stacklevel=2)
                continue
            self.glyph_map[text] = index

    @property
    def glyphs(self) -> int:
        """Number of glyphs in the font."""
        return len(self.glyph_widths)

    def lookup(self, text: str) -> Optional[int]:
        """Return the index of the glyph drawn for ``text``, or None."""
        return self.glyph_map.get(text)