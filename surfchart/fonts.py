from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from surfchart.errors import TextMeasureError


LOGGER = logging.getLogger(__name__)

DEFAULT_FONT_FAMILY = "sans"
DEFAULT_FONT_SIZE_PX = 12.0
FONT_FAMILY_ALIASES = {
    "sans": ("dejavusans", "liberationsans", "arial", "helvetica", "notosans"),
    "sans-serif": ("dejavusans", "liberationsans", "arial", "helvetica", "notosans"),
    "serif": ("dejavuserif", "liberationserif", "times new roman", "times", "notoserif"),
    "monospace": ("dejavusansmono", "liberationmono", "menlo", "courier new", "courier"),
}
FONT_FALLBACK_PATTERNS = (
    "dejavusans",
    "dejavu sans",
    "liberationsans",
    "arial",
    "helvetica",
)
FONT_DIRS = (
    Path.home() / "Library" / "Fonts",
    Path("/Library/Fonts"),
    Path("/System/Library/Fonts"),
    Path("/System/Library/Fonts/Supplemental"),
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
    Path.home() / ".fonts",
)

LoadedFont = ImageFont.FreeTypeFont | ImageFont.ImageFont


@dataclass(frozen=True)
class FontSpec:
    family: str = DEFAULT_FONT_FAMILY
    size_px: float = DEFAULT_FONT_SIZE_PX

    def __post_init__(self) -> None:
        if not self.size_px > 0:
            raise ValueError("font size must be > 0")

    def resized(self, size_px: float) -> "FontSpec":
        return FontSpec(family=self.family, size_px=size_px)


class FontService:
    """Resolves, loads and measures fonts for one owner.

    Not reentrant: a service instance belongs to one render pass at a time.
    Font files are resolved once per family and loaded fonts are cached per
    (family, size).
    """

    def __init__(self, font_dirs: tuple[Path, ...] = FONT_DIRS) -> None:
        self._font_dirs = font_dirs
        self._candidates: list[Path] | None = None
        self._paths: dict[str, Path | None] = {}
        self._fonts: dict[tuple[str, int], LoadedFont] = {}
        self._masks: dict[tuple[str, int, str], np.ndarray] = {}

    def measure(self, text: str, font: FontSpec) -> tuple[int, int]:
        loaded = self.load(font)
        try:
            if not text:
                ascent, descent = loaded.getmetrics()
                return (0, max(1, int(ascent + descent)))
            left, top, right, bottom = loaded.getbbox(text)
        except (OSError, ValueError, UnicodeError) as exc:
            raise TextMeasureError(f"cannot measure {text!r} with {font}") from exc
        return (max(0, int(right - left)), max(1, int(bottom - top)))

    def render_mask(self, text: str, font: FontSpec) -> np.ndarray:
        """Coverage mask (H, W) uint8 of ``text`` cropped to its ink box."""
        loaded = self.load(font)
        key = (font.family, _pixel_size(font), text)
        cached = self._masks.get(key)
        if cached is not None:
            return cached
        if not text:
            mask = np.zeros((1, 1), dtype=np.uint8)
        else:
            try:
                left, top, right, bottom = loaded.getbbox(text)
                width = max(1, int(right - left))
                height = max(1, int(bottom - top))
                image = Image.new("L", (width, height), 0)
                draw = ImageDraw.Draw(image)
                draw.text((-left, -top), text, fill=255, font=loaded)
            except (OSError, ValueError, UnicodeError) as exc:
                raise TextMeasureError(f"cannot render {text!r} with {font}") from exc
            mask = np.asarray(image, dtype=np.uint8)
        self._masks[key] = mask
        return mask

    def load(self, font: FontSpec) -> LoadedFont:
        size = _pixel_size(font)
        key = (font.family, size)
        loaded = self._fonts.get(key)
        if loaded is not None:
            return loaded
        path = self.resolve_path(font.family)
        if path is None:
            LOGGER.debug("no font file for family %r; using Pillow default font", font.family)
            loaded = ImageFont.load_default(size=size)
        else:
            try:
                loaded = ImageFont.truetype(str(path), size=size)
            except OSError:
                LOGGER.warning("failed to load font %s; using Pillow default font", path)
                loaded = ImageFont.load_default(size=size)
        self._fonts[key] = loaded
        return loaded

    def resolve_path(self, family: str) -> Path | None:
        wanted = family.strip().lower() if family.strip() else DEFAULT_FONT_FAMILY
        if wanted in self._paths:
            return self._paths[wanted]
        patterns = (wanted,) + FONT_FAMILY_ALIASES.get(wanted, ()) + FONT_FALLBACK_PATTERNS
        found: Path | None = None
        candidates = self._font_candidates()
        stems = [(path, path.stem.lower().replace(" ", "")) for path in candidates]
        for pattern in patterns:
            p = pattern.replace(" ", "")
            exact = [path for path, stem in stems if stem == p]
            styled = [path for path, stem in stems if stem.startswith(p + "-") or stem.startswith(p + "_")]
            if exact or styled:
                found = (exact or styled)[0]
                break
        self._paths[wanted] = found
        return found

    def _font_candidates(self) -> list[Path]:
        if self._candidates is None:
            candidates: list[Path] = []
            for base in self._font_dirs:
                if not base.exists():
                    continue
                for ext in ("*.ttf", "*.otf", "*.ttc"):
                    candidates.extend(sorted(base.rglob(ext)))
            self._candidates = candidates
        return self._candidates


def _pixel_size(font: FontSpec) -> int:
    return max(1, int(round(font.size_px)))
