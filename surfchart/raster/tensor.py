from __future__ import annotations

import math

import numpy as np
import torch

from surfchart.errors import SurfaceInitError
from surfchart.fonts import FontService
from surfchart.raster.base import DrawingBackend
from surfchart.raster.draw_lines import brush_coverage, line_pixels
from surfchart.style import RGBA, WHITE


class TensorBackend(DrawingBackend):
    """Backend whose surface is a torch uint8 (H, W, 4) tensor on ``device``.

    Polygon coverage and compositing run as tensor ops on the device; line
    rasterization and glyph masks are produced on the host and uploaded.
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        device: str | torch.device = "cpu",
        fonts: FontService | None = None,
        background: RGBA = WHITE,
    ) -> None:
        super().__init__(width, height, fonts=fonts, background=background)
        try:
            self.device = torch.device(device)
            bg = torch.tensor(background, dtype=torch.uint8, device=self.device).view(1, 1, 4)
        except (RuntimeError, TypeError) as exc:
            raise SurfaceInitError(f"cannot allocate tensor surface on {device!r}") from exc
        self._surface = bg.expand(self.height, self.width, 4).clone()
        self._staged: torch.Tensor | None = None

    def snapshot(self) -> np.ndarray:
        return self._surface.detach().cpu().numpy().copy()

    def to_tensor(self) -> torch.Tensor:
        return self._surface.clone()

    def _begin(self) -> None:
        self._staged = self._surface.clone()

    def _commit(self) -> None:
        if self._staged is not None:
            self._surface = self._staged
        self._staged = None

    def _abort(self) -> None:
        self._staged = None

    def _target(self) -> torch.Tensor:
        assert self._staged is not None
        return self._staged

    def _fill(self, color: RGBA) -> None:
        self._target()[:, :] = torch.tensor(color, dtype=torch.uint8, device=self.device)

    def _draw_pixel(self, x: int, y: int, color: RGBA) -> None:
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            return
        self._composite(x, y, torch.ones((1, 1), dtype=torch.float32, device=self.device), color)

    def _draw_line(self, xs: np.ndarray, ys: np.ndarray, color: RGBA, width: int) -> None:
        coverage = brush_coverage(line_pixels(xs, ys), width, self.width, self.height)
        if coverage is None:
            return
        x0, y0, mask = coverage
        self._composite(x0, y0, torch.from_numpy(mask).to(self.device), color)

    def _fill_polygon(self, xs: np.ndarray, ys: np.ndarray, color: RGBA) -> None:
        xmin = max(0, int(math.ceil(float(xs.min()))))
        xmax = min(self.width - 1, int(math.ceil(float(xs.max()))) - 1)
        ymin = max(0, int(math.ceil(float(ys.min()))))
        ymax = min(self.height - 1, int(math.ceil(float(ys.max()))) - 1)
        if xmin > xmax or ymin > ymax:
            return
        yy = torch.arange(ymin, ymax + 1, dtype=torch.float64, device=self.device).view(-1, 1)
        xx = torch.arange(xmin, xmax + 1, dtype=torch.float64, device=self.device).view(1, -1)
        inside = torch.zeros((yy.shape[0], xx.shape[1]), dtype=torch.bool, device=self.device)
        n = xs.size
        for i in range(n):
            ax, ay = float(xs[i]), float(ys[i])
            bx, by = float(xs[(i + 1) % n]), float(ys[(i + 1) % n])
            if ay == by:
                continue
            lo, hi = min(ay, by), max(ay, by)
            on_row = (yy >= lo) & (yy < hi)
            crossing = ax + (yy - ay) / (by - ay) * (bx - ax)
            # Even-odd: toggle pixels left of each crossing on the rows it spans.
            inside ^= on_row & (xx < crossing)
        self._composite(xmin, ymin, inside.to(torch.float32), color)

    def _blend_mask(self, x: int, y: int, mask: np.ndarray, color: RGBA) -> None:
        cov = torch.from_numpy(mask.astype(np.float32) / 255.0).to(self.device)
        self._composite(x, y, cov, color)

    def _composite(self, x0: int, y0: int, coverage: torch.Tensor, color: RGBA) -> None:
        target = self._target()
        h, w = coverage.shape
        xa, ya = max(0, x0), max(0, y0)
        xb, yb = min(self.width, x0 + w), min(self.height, y0 + h)
        if xa >= xb or ya >= yb:
            return
        cov = coverage[ya - y0 : yb - y0, xa - x0 : xb - x0]
        touched = cov > 0
        if not bool(touched.any()):
            return
        a = (color[3] / 255.0) * cov.unsqueeze(-1)
        patch = target[ya:yb, xa:xb]
        src = torch.tensor(color[:3], dtype=torch.float32, device=self.device).view(1, 1, 3)
        out = torch.clamp(torch.round(src * a + patch[:, :, :3].to(torch.float32) * (1.0 - a)), 0, 255).to(torch.uint8)
        patch[:, :, :3] = torch.where(touched.unsqueeze(-1), out, patch[:, :, :3])
        patch[:, :, 3] = torch.where(touched, torch.full_like(patch[:, :, 3], 255), patch[:, :, 3])
