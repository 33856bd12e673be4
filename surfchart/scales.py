from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import math

import numpy as np

from surfchart.errors import DegenerateBoundsError


# Relative float drift in (max - min) / step treated as an exact count, e.g. 6.0 / 0.1.
_COUNT_REL_TOL = 1e-12


@dataclass(frozen=True)
class AxisRange:
    min: float
    max: float
    step: float | None = None

    def __post_init__(self) -> None:
        if not (math.isfinite(self.min) and math.isfinite(self.max)):
            raise ValueError("axis range bounds must be finite")
        if self.min == self.max:
            raise DegenerateBoundsError(f"axis range has zero extent: {self.min}..{self.max}")
        if self.max < self.min:
            raise ValueError(f"axis range max must be > min, got {self.min}..{self.max}")
        if self.step is not None and not (math.isfinite(self.step) and self.step > 0):
            raise ValueError("axis range step must be > 0")

    @property
    def span(self) -> float:
        return self.max - self.min

    def sample_count(self) -> int:
        if self.step is None:
            raise ValueError("axis range has no step")
        ratio = self.span / self.step
        nearest = round(ratio)
        if math.isclose(ratio, nearest, rel_tol=_COUNT_REL_TOL):
            return max(1, int(nearest))
        return max(1, int(math.ceil(ratio)))

    def samples(self) -> np.ndarray:
        n = self.sample_count()
        return self.min + np.arange(n, dtype=np.float64) * float(self.step)

    def as_limits(self) -> tuple[float, float]:
        return (float(self.min), float(self.max))


def sample_axis(axis: AxisRange) -> np.ndarray:
    return axis.samples()


def generate_nice_ticks(vmin: float, vmax: float, target: int) -> np.ndarray:
    if target <= 0:
        raise ValueError("target must be > 0")
    if vmin == vmax:
        return np.asarray([vmin], dtype=np.float64)

    span = _nice_number(vmax - vmin, round_result=False)
    step = _nice_number(span / max(target - 1, 1), round_result=True)
    tick_min = np.floor(vmin / step) * step
    tick_max = np.ceil(vmax / step) * step

    ticks = np.arange(tick_min, tick_max + 0.5 * step, step, dtype=np.float64)
    # Normalize floating-point drift so values like -4.44e-16 become 0.
    ticks = np.rint(ticks / step) * step
    ticks[np.isclose(ticks, 0.0, rtol=0.0, atol=step * 1e-9)] = 0.0
    return ticks


def ticks_within_range(ticks: np.ndarray, *, vmin: float, vmax: float) -> np.ndarray:
    if ticks.size == 0:
        return ticks
    span = max(abs(vmax - vmin), 1e-12)
    tol = span * 1e-9
    keep = (ticks >= vmin - tol) & (ticks <= vmax + tol)
    return ticks[keep]


def format_tick(value: float, *, step: float | None = None) -> str:
    if not np.isfinite(value):
        return str(value)
    if step is not None and np.isfinite(step) and step > 0 and abs(value) <= step * 1e-9:
        value = 0.0
    abs_v = abs(value)
    decimals = _decimals_from_step(step) if step is not None else 6
    if abs_v != 0 and (abs_v >= 1e6 or (step is not None and abs(step) < 1e-4) or abs_v < 1e-6):
        return f"{value:.4e}"

    d = Decimal(str(value))
    quant = Decimal("1").scaleb(-decimals)
    try:
        q = d.quantize(quant)
    except InvalidOperation:
        q = d
    out = format(q, "f")
    # Only trim trailing zeros for fractional values (preserve integer zeros like 30, 40).
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    if out == "-0":
        out = "0"
    return out


def format_ticks_for_axis(ticks: np.ndarray) -> list[str]:
    if ticks.size == 0:
        return []
    if ticks.size == 1:
        return [format_tick(float(ticks[0]))]
    step = float(abs(ticks[1] - ticks[0]))
    return [format_tick(float(v), step=step) for v in ticks]


def _nice_number(value: float, *, round_result: bool) -> float:
    exp = np.floor(np.log10(value))
    frac = value / (10**exp)

    if round_result:
        if frac < 1.5:
            nice_frac = 1.0
        elif frac < 3.0:
            nice_frac = 2.0
        elif frac < 7.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0
    else:
        if frac <= 1.0:
            nice_frac = 1.0
        elif frac <= 2.0:
            nice_frac = 2.0
        elif frac <= 5.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0

    return float(nice_frac * (10**exp))


def _decimals_from_step(step: float) -> int:
    if step <= 0 or not np.isfinite(step):
        return 6
    d = Decimal(str(step)).normalize()
    exp = d.as_tuple().exponent
    decimals = max(0, -int(exp))
    return min(12, decimals)
