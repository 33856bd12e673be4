from __future__ import annotations

from dataclasses import dataclass


RGBA = tuple[int, int, int, int]

BLACK: RGBA = (0, 0, 0, 255)
WHITE: RGBA = (255, 255, 255, 255)
RED: RGBA = (255, 0, 0, 255)
GREEN: RGBA = (0, 255, 0, 255)
BLUE: RGBA = (0, 0, 255, 255)
CYAN: RGBA = (0, 255, 255, 255)
MAGENTA: RGBA = (255, 0, 255, 255)
YELLOW: RGBA = (255, 255, 0, 255)
TRANSPARENT: RGBA = (0, 0, 0, 0)


def blend(color: tuple[int, int, int] | RGBA, alpha: float) -> RGBA:
    if len(color) == 3:
        r, g, b = color
        a = int(round(max(0.0, min(1.0, alpha)) * 255))
        return (r, g, b, a)
    r, g, b, a = color
    out_a = int(round(max(0.0, min(1.0, alpha)) * a))
    return (r, g, b, out_a)


mix = blend


def parse_color(value: str | tuple[int, ...] | list[int]) -> RGBA:
    if isinstance(value, str):
        text = value.strip().lstrip("#")
        if len(text) not in (6, 8):
            raise ValueError(f"color must be #rrggbb or #rrggbbaa, got {value!r}")
        try:
            channels = [int(text[i : i + 2], 16) for i in range(0, len(text), 2)]
        except ValueError as exc:
            raise ValueError(f"invalid hex color: {value!r}") from exc
    else:
        channels = [int(c) for c in value]
    if len(channels) == 3:
        channels.append(255)
    if len(channels) != 4 or any(c < 0 or c > 255 for c in channels):
        raise ValueError(f"color channels must be 3 or 4 values in 0..255, got {value!r}")
    return (channels[0], channels[1], channels[2], channels[3])


@dataclass(frozen=True)
class Style:
    stroke_color: RGBA | None = None
    fill_color: RGBA | None = None
    alpha: float = 1.0
    filled: bool = False
    stroke_width: int = 1

    def __post_init__(self) -> None:
        if not 0.0 <= self.alpha <= 1.0:
            raise ValueError("alpha must be in [0, 1]")
        if self.stroke_width < 1:
            raise ValueError("stroke_width must be >= 1")

    @classmethod
    def fill(cls, color: RGBA, alpha: float = 1.0) -> "Style":
        return cls(fill_color=color, alpha=alpha, filled=True)

    @classmethod
    def stroke(cls, color: RGBA, width: int = 1, alpha: float = 1.0) -> "Style":
        return cls(stroke_color=color, alpha=alpha, stroke_width=width)

    @classmethod
    def outlined(cls, fill: RGBA, stroke: RGBA, alpha: float = 1.0, width: int = 1) -> "Style":
        return cls(stroke_color=stroke, fill_color=fill, alpha=alpha, filled=True, stroke_width=width)

    def resolved_fill(self) -> RGBA | None:
        if not self.filled or self.fill_color is None:
            return None
        return blend(self.fill_color, self.alpha)

    def resolved_stroke(self) -> RGBA | None:
        if self.stroke_color is None:
            return None
        return blend(self.stroke_color, self.alpha)

    def legend_color(self) -> RGBA:
        """Base color shown by a default legend swatch."""
        if self.fill_color is not None:
            return self.fill_color
        if self.stroke_color is not None:
            return self.stroke_color
        return BLACK
