from .base import DrawingBackend
from .canvas import new_canvas
from .draw_lines import draw_polyline
from .draw_polygon import fill_polygon
from .software import SoftwareBackend
from .tensor import TensorBackend

__all__ = [
    "DrawingBackend",
    "SoftwareBackend",
    "TensorBackend",
    "draw_polyline",
    "fill_polygon",
    "new_canvas",
]
