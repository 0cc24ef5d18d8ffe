"""
Camera state for world-to-screen transforms

A plain value passed into projection calls. Screen space has its origin at
the top-left corner of the viewport; world units are scaled by zoom.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

Point = Tuple[float, float]


@dataclass
class CameraState:
    """Viewport and camera description"""
    zoom: float = 1.0

    # World-space point shown at the screen's top-left corner
    origin: Point = (0.0, 0.0)

    # Screen-space camera location for perspective projection
    # (None = centre of the screen)
    position: Optional[Point] = None

    # Screen-space lean of roofs in orthographic mode
    direction: Point = (0.0, 1.0)

    orthographic: bool = False
    screen_dimensions: Point = (800.0, 600.0)

    # Distance of the camera above the ground at zoom 1
    base_distance: float = 1000.0

    def world_to_screen(self, point: Point) -> Point:
        return (
            (point[0] - self.origin[0]) * self.zoom,
            (point[1] - self.origin[1]) * self.zoom,
        )

    def camera_position(self) -> Point:
        if self.position is not None:
            return self.position
        return (self.screen_dimensions[0] / 2, self.screen_dimensions[1] / 2)

    @property
    def projection_distance(self) -> float:
        """Camera height above the ground in screen units"""
        return self.base_distance / self.zoom
