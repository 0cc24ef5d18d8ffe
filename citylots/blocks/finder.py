"""
Block finder

Finds blocks in the street graph and runs the shrink and divide passes over
them. Both passes are resumable: started with animate=True they advance one
block per step() so a driver can redraw between steps; otherwise they run to
completion immediately. Either way the same per-block operation is applied.
"""

import random
from collections import deque
from typing import Deque, List, Optional

from loguru import logger

from ..config import LotParams
from ..geometry.polygon_utils import Polygon, PolygonUtils
from .graph import StreetGraph


class BlockFinder:
    """Finds, shrinks and divides blocks"""

    def __init__(
        self,
        graph: Optional[StreetGraph],
        params: LotParams,
        rng: Optional[random.Random] = None
    ):
        self.graph = graph
        self.params = params
        self.rng = rng or random.Random()
        self._polygons: List[Polygon] = []

        # In-flight pass state
        self._operation: Optional[str] = None
        self._pending: Deque[Polygon] = deque()
        self._output: List[Polygon] = []

    @property
    def polygons(self) -> List[Polygon]:
        """Current blocks; during an animated pass, processed blocks then pending ones"""
        if self._operation:
            return self._output + list(self._pending)
        return self._polygons

    def find_polygons(self) -> List[Polygon]:
        """Collect the bounded faces of the street graph as blocks"""
        if self.graph is None:
            self._polygons = []
            return self._polygons

        faces = self.graph.find_faces()
        self._polygons = [
            face for face in faces
            if len(face) <= self.params.max_lot_edge_length
        ]
        dropped = len(faces) - len(self._polygons)
        if dropped:
            logger.debug(f"Dropped {dropped} faces with more than {self.params.max_lot_edge_length} edges")
        logger.info(f"Found {len(self._polygons)} blocks")
        return self._polygons

    def shrink(self, animate: bool = False):
        """Inset every block by the street setback"""
        self._begin("shrink", animate)

    def divide(self, animate: bool = False):
        """Subdivide every block into lots"""
        self._begin("divide", animate)

    def update(self) -> bool:
        """True while a shrink or divide is in flight"""
        return self._operation is not None

    def step(self) -> bool:
        """
        Process one pending block

        Returns True while more blocks remain.
        """
        if not self._operation:
            return False

        if self._pending:
            polygon = self._pending.popleft()
            if self._operation == "shrink":
                self._output.extend(self._shrink_polygon(polygon))
            else:
                self._output.extend(self._divide_polygon(polygon))

        if not self._pending:
            self._finish()
            return False
        return True

    def reset(self):
        self._polygons = []
        self._operation = None
        self._pending.clear()
        self._output = []

    def _begin(self, operation: str, animate: bool):
        if self._operation:
            raise RuntimeError(f"Cannot start {operation} while {self._operation} is in progress")

        self._operation = operation
        self._pending = deque(self._polygons)
        self._output = []
        logger.debug(f"Starting {operation} over {len(self._pending)} blocks (animate={animate})")

        if not self._pending:
            self._finish()
            return

        if not animate:
            while self.step():
                pass

    def _finish(self):
        logger.debug(f"Finished {self._operation}: {len(self._polygons)} -> {len(self._output)} polygons")
        self._polygons = self._output
        self._output = []
        self._operation = None

    def _shrink_polygon(self, polygon: Polygon) -> List[Polygon]:
        if self.params.shrink_spacing == 0:
            return [polygon]
        shrunk = PolygonUtils.resize_geometry(polygon, -self.params.shrink_spacing)
        return [shrunk] if shrunk else []

    def _divide_polygon(self, polygon: Polygon) -> List[Polygon]:
        if self.rng.random() < self.params.chance_no_subdivide:
            return [polygon]
        return PolygonUtils.subdivide_polygon(polygon, self.params.min_area, self.rng)
