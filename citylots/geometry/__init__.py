"""
Geometry primitives: polygon utilities and camera state
"""

from .polygon_utils import PolygonUtils, Point, Polygon
from .camera import CameraState

__all__ = [
    "PolygonUtils",
    "Point",
    "Polygon",
    "CameraState",
]
