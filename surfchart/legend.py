from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging

from surfchart.fonts import FontSpec
from surfchart.raster.base import DrawingBackend
from surfchart.style import BLACK, RGBA, WHITE, Style, blend


LOGGER = logging.getLogger(__name__)


class SwatchKind(Enum):
    FILLED_RECT = "filled_rect"
    STROKE_PATH = "stroke_path"


class SeriesLabelPosition(Enum):
    UPPER_LEFT = "upper_left"
    UPPER_RIGHT = "upper_right"
    LOWER_LEFT = "lower_left"
    LOWER_RIGHT = "lower_right"
    MIDDLE_RIGHT = "middle_right"


@dataclass(frozen=True)
class Swatch:
    kind: SwatchKind
    style: Style


@dataclass(frozen=True)
class LegendEntry:
    label: str
    swatch: Swatch


@dataclass(frozen=True)
class LegendStyle:
    border: RGBA | None = BLACK
    background: RGBA | None = blend(WHITE, 0.8)
    label_font: FontSpec = field(default_factory=lambda: FontSpec(size_px=13.0))
    label_color: RGBA = BLACK
    position: SeriesLabelPosition = SeriesLabelPosition.UPPER_RIGHT
    position_px: tuple[int, int] | None = None
    swatch_size: tuple[int, int] = (20, 10)
    padding: int = 6
    row_gap: int = 4
    swatch_gap: int = 6
    margin: int = 10


@dataclass(frozen=True)
class LegendRow:
    entry: LegendEntry
    swatch_box: tuple[int, int, int, int]
    label_pos: tuple[int, int]


@dataclass(frozen=True)
class LegendLayout:
    box: tuple[int, int, int, int]
    rows: tuple[LegendRow, ...]


class LegendRenderer:
    def __init__(self, style: LegendStyle | None = None) -> None:
        self.style = style if style is not None else LegendStyle()
        self._entries: list[LegendEntry] = []

    @property
    def entries(self) -> tuple[LegendEntry, ...]:
        return tuple(self._entries)

    def register(self, entry: LegendEntry) -> None:
        self._entries.append(entry)

    def layout(self, backend: DrawingBackend, area: tuple[int, int, int, int]) -> LegendLayout | None:
        if not self._entries:
            return None
        st = self.style
        sw_w, sw_h = st.swatch_size
        sizes = [backend.measure_text(entry.label, st.label_font) for entry in self._entries]
        row_hs = [max(sw_h, h) for _, h in sizes]
        text_w = max((w for w, _ in sizes), default=0)
        box_w = st.padding * 2 + sw_w + st.swatch_gap + text_w
        box_h = st.padding * 2 + sum(row_hs) + st.row_gap * (len(row_hs) - 1)
        x, y = self._anchor(area, box_w, box_h)

        rows: list[LegendRow] = []
        row_y = y + st.padding
        for entry, (_, text_h), row_h in zip(self._entries, sizes, row_hs, strict=True):
            sw_y = row_y + (row_h - sw_h) // 2
            rows.append(
                LegendRow(
                    entry=entry,
                    swatch_box=(x + st.padding, sw_y, sw_w, sw_h),
                    label_pos=(x + st.padding + sw_w + st.swatch_gap, row_y + (row_h - text_h) // 2),
                )
            )
            row_y += row_h + st.row_gap
        return LegendLayout(box=(x, y, box_w, box_h), rows=tuple(rows))

    def draw(self, backend: DrawingBackend, area: tuple[int, int, int, int]) -> LegendLayout | None:
        layout = self.layout(backend, area)
        if layout is None:
            return None
        st = self.style
        x, y, w, h = layout.box
        if st.background is not None:
            backend.draw_polygon(_rect(x, y, w, h), Style.fill(st.background))
        if st.border is not None:
            border = _rect(x, y, w - 1, h - 1)
            backend.draw_line(border + [border[0]], Style.stroke(st.border))
        for row in layout.rows:
            self._draw_swatch(backend, row.entry.swatch, row.swatch_box)
            backend.draw_text(row.label_pos, row.entry.label, st.label_font, st.label_color)
        LOGGER.debug("legend drawn with %d entries at %s", len(layout.rows), layout.box)
        return layout

    def _draw_swatch(self, backend: DrawingBackend, swatch: Swatch, box: tuple[int, int, int, int]) -> None:
        x, y, w, h = box
        if swatch.kind is SwatchKind.FILLED_RECT:
            backend.draw_polygon(_rect(x, y, w, h), swatch.style)
            return
        if swatch.kind is SwatchKind.STROKE_PATH:
            mid = y + h // 2
            backend.draw_line([(x, mid), (x + w - 1, mid)], swatch.style)
            return
        raise ValueError(f"unsupported swatch kind: {swatch.kind!r}")

    def _anchor(self, area: tuple[int, int, int, int], box_w: int, box_h: int) -> tuple[int, int]:
        st = self.style
        ax, ay, aw, ah = area
        if st.position_px is not None:
            return (int(st.position_px[0]), int(st.position_px[1]))
        left = ax + st.margin
        right = ax + aw - box_w - st.margin
        top = ay + st.margin
        bottom = ay + ah - box_h - st.margin
        if st.position is SeriesLabelPosition.UPPER_LEFT:
            return (left, top)
        if st.position is SeriesLabelPosition.LOWER_LEFT:
            return (left, bottom)
        if st.position is SeriesLabelPosition.LOWER_RIGHT:
            return (right, bottom)
        if st.position is SeriesLabelPosition.MIDDLE_RIGHT:
            return (right, ay + (ah - box_h) // 2)
        return (right, top)


def _rect(x: int, y: int, w: int, h: int) -> list[tuple[float, float]]:
    return [(x, y), (x + w, y), (x + w, y + h), (x, y + h)]
