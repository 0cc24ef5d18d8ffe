"""
Pseudo-3D building projection

Each lot gets a random height. Roofs are drawn by scaling the screen-space
lot away from the camera (perspective) or shifting it along the camera
direction (orthographic); the walls are the quads between lot and roof.
"""

import random
from typing import List, Optional, Sequence

import numpy as np
from loguru import logger

from ..geometry.camera import CameraState
from ..geometry.polygon_utils import Point, Polygon
from ..models import Building


class BuildingProjector:
    """Builds and projects pseudo-3D buildings"""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self._buildings: List[Building] = []

    @property
    def buildings(self) -> List[Building]:
        return self._buildings

    def project(
        self,
        lots: Sequence[Polygon],
        min_height: float,
        height_range: float
    ) -> List[Building]:
        """
        Create one building per lot, ordered by ascending height

        Heights are uniform in [min_height, min_height + height_range).
        Projections are left empty until set_projections() is called.
        """
        buildings = [
            Building(
                height=min_height + self.rng.random() * height_range,
                lot_world=[(float(x), float(y)) for x, y in lot]
            )
            for lot in lots
        ]
        # Stable, so equal heights keep lot order
        buildings.sort(key=lambda b: b.height)
        self._buildings = buildings
        return buildings

    def set_projections(self, camera: CameraState) -> List[Building]:
        """Recompute lot_screen, roof and sides for the current camera"""
        d = camera.projection_distance
        camera_pos = np.asarray(camera.camera_position(), dtype=float)
        direction = np.asarray(camera.direction, dtype=float)

        if self._buildings and self._buildings[-1].height >= d:
            logger.warning(
                f"Building height {self._buildings[-1].height:.1f} reaches camera distance {d:.1f}; "
                "roofs will be distorted"
            )

        for building in self._buildings:
            lot_screen = np.array(
                [camera.world_to_screen(v) for v in building.lot_world], dtype=float
            ).reshape(-1, 2)
            roof = self.height_vector_to_screen(
                lot_screen, building.height, d, camera_pos, direction, camera.orthographic
            )
            building.lot_screen = _to_points(lot_screen)
            building.roof = _to_points(roof)
            building.sides = self.building_sides(building.lot_screen, building.roof)

        return self._buildings

    @staticmethod
    def height_vector_to_screen(
        vertices: np.ndarray,
        h: float,
        d: float,
        camera: np.ndarray,
        direction: np.ndarray,
        orthographic: bool
    ) -> np.ndarray:
        """Lift screen-space ground vertices to height h"""
        # Undefined for h >= d
        with np.errstate(divide="ignore", invalid="ignore"):
            scale = np.float64(d) / (d - h)
            if orthographic:
                return vertices + direction * (-h * scale)
            return (vertices - camera) * scale + camera

    @staticmethod
    def building_sides(lot_screen: List[Point], roof: List[Point]) -> List[List[Point]]:
        """One quad per lot edge, following the edge direction"""
        sides = []
        n = len(lot_screen)
        for i in range(n):
            nxt = (i + 1) % n
            sides.append([lot_screen[i], lot_screen[nxt], roof[nxt], roof[i]])
        return sides


def _to_points(array: np.ndarray) -> List[Point]:
    return [(float(x), float(y)) for x, y in array]
