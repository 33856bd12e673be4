from __future__ import annotations

from collections.abc import Callable
import math

import numpy as np

from surfchart.errors import ConfigError


def ripple(x: float, z: float) -> float:
    return math.cos(x * x + z * z)


def saddle(x: float, z: float) -> float:
    return 0.3 * (x * x - z * z)


def paraboloid(x: float, z: float) -> float:
    return 0.25 * (x * x + z * z) - 1.5


def helix(samples: int = 200) -> np.ndarray:
    ys = (np.arange(samples, dtype=np.float64) - samples // 2) / 40.0
    return np.stack([np.sin(ys * 10.0), ys, np.cos(ys * 10.0)], axis=1)


def spiral(samples: int = 200) -> np.ndarray:
    t = np.linspace(0.0, 6.0 * math.pi, samples, dtype=np.float64)
    r = t / (6.0 * math.pi) * 2.5
    return np.stack([r * np.cos(t), t / (3.0 * math.pi) - 1.0, r * np.sin(t)], axis=1)


SURFACES: dict[str, Callable[[float, float], float]] = {
    "ripple": ripple,
    "saddle": saddle,
    "paraboloid": paraboloid,
}
CURVES: dict[str, Callable[[int], np.ndarray]] = {
    "helix": helix,
    "spiral": spiral,
}


def surface(name: str) -> Callable[[float, float], float]:
    try:
        return SURFACES[name]
    except KeyError:
        raise ConfigError(f"unknown surface function: {name!r} (known: {', '.join(sorted(SURFACES))})") from None


def curve(name: str, samples: int) -> np.ndarray:
    if samples < 1:
        raise ConfigError("curve samples must be >= 1")
    try:
        fn = CURVES[name]
    except KeyError:
        raise ConfigError(f"unknown curve: {name!r} (known: {', '.join(sorted(CURVES))})") from None
    return fn(samples)
