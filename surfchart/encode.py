from __future__ import annotations

from io import BytesIO
import logging
from pathlib import Path

import numpy as np
from PIL import Image

from surfchart.errors import EncodingError


LOGGER = logging.getLogger(__name__)


def encode_png(frame_rgba: np.ndarray) -> bytes:
    if frame_rgba.dtype != np.uint8:
        raise EncodingError("frame_rgba must be uint8")
    if frame_rgba.ndim != 3 or frame_rgba.shape[2] != 4:
        raise EncodingError(f"frame_rgba must have shape (H, W, 4), got {frame_rgba.shape}")
    buf = BytesIO()
    try:
        Image.fromarray(np.ascontiguousarray(frame_rgba), mode="RGBA").save(buf, format="PNG")
    except (OSError, ValueError) as exc:
        raise EncodingError(f"PNG encoding failed: {exc}") from exc
    return buf.getvalue()


def write_png(path: str | Path, frame_rgba: np.ndarray) -> Path:
    path = Path(path)
    data = encode_png(frame_rgba)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    LOGGER.info("wrote %d bytes to %s", len(data), path)
    return path
