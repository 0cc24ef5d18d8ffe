"""
Street graph

Nodes the street polylines at their intersections and exposes the enclosed
faces as candidate blocks.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Set, Tuple

from loguru import logger
from shapely.geometry import LineString, MultiLineString
from shapely.ops import polygonize, unary_union

from ..geometry.polygon_utils import Point, Polygon, PolygonUtils


@dataclass
class Node:
    """Street graph node"""
    value: Point
    neighbors: Set[Point] = field(default_factory=set)

    @property
    def degree(self) -> int:
        return len(self.neighbors)


class StreetGraph:
    """
    Planar graph built from street polylines

    Points are snapped to a dstep grid so streamlines that nearly meet are
    joined, then the network is noded so every crossing becomes a node.
    """

    def __init__(
        self,
        streamlines: Sequence[Sequence[Point]],
        dstep: float,
        delete_dangling: bool = False
    ):
        self.dstep = dstep
        self.nodes: Dict[Point, Node] = {}
        self._build(streamlines)
        if delete_dangling:
            self._delete_dangling()

    def _snap(self, point: Sequence[float]) -> Point:
        return (
            round(point[0] / self.dstep) * self.dstep,
            round(point[1] / self.dstep) * self.dstep,
        )

    def _build(self, streamlines: Sequence[Sequence[Point]]):
        lines = []
        for streamline in streamlines:
            snapped = []
            for point in streamline:
                p = self._snap(point)
                if not snapped or snapped[-1] != p:
                    snapped.append(p)
            if len(snapped) >= 2:
                lines.append(LineString(snapped))

        if not lines:
            return

        noded = unary_union(MultiLineString(lines))
        parts = getattr(noded, "geoms", [noded])
        for part in parts:
            coords = [self._snap(c) for c in part.coords]
            for a, b in zip(coords, coords[1:]):
                if a == b:
                    continue
                self.nodes.setdefault(a, Node(a)).neighbors.add(b)
                self.nodes.setdefault(b, Node(b)).neighbors.add(a)

        logger.debug(f"Street graph: {len(self.nodes)} nodes from {len(lines)} streamlines")

    def _delete_dangling(self):
        """Repeatedly remove dead-end nodes"""
        dangling = [p for p, n in self.nodes.items() if n.degree < 2]
        while dangling:
            point = dangling.pop()
            node = self.nodes.pop(point, None)
            if node is None:
                continue
            for neighbor in node.neighbors:
                other = self.nodes.get(neighbor)
                if other is None:
                    continue
                other.neighbors.discard(point)
                if other.degree < 2:
                    dangling.append(neighbor)

    @property
    def edges(self) -> List[Tuple[Point, Point]]:
        """Each undirected edge once"""
        edges = []
        for point, node in self.nodes.items():
            for neighbor in node.neighbors:
                if point < neighbor:
                    edges.append((point, neighbor))
        return edges

    def find_faces(self) -> List[Polygon]:
        """Bounded faces of the graph, as open point lists"""
        segments = [LineString(edge) for edge in self.edges]
        faces = []
        for face in polygonize(segments):
            points = PolygonUtils.from_shapely(face)
            if points:
                faces.append(points)
        return faces
