"""
Polygon utilities for block and lot geometry

Polygons are lists of (x, y) tuples, implicitly closed and of either winding.
Shapely carries the offset and slicing operations; the measures that drive
carving decisions (area, average point, containment) are computed directly
so they stay winding-agnostic and cheap.
"""

import math
import random
from typing import List, Optional, Sequence, Tuple

from loguru import logger
from shapely.errors import GEOSException
from shapely.geometry import LineString, MultiPolygon
from shapely.geometry import Polygon as ShapelyPolygon
from shapely.ops import split


Point = Tuple[float, float]
Polygon = List[Point]


class PolygonUtils:
    """Pure functions on polygons"""

    # Pieces below this compactness (4*pi*A / P^2) are discarded by subdivision
    MIN_SHAPE_INDEX = 0.5

    @staticmethod
    def open_ring(coords: Sequence[Sequence[float]]) -> Polygon:
        """Drop a duplicated closing vertex and normalise points to tuples"""
        points = [(float(c[0]), float(c[1])) for c in coords]
        if len(points) > 1 and points[0] == points[-1]:
            points = points[:-1]
        return points

    @staticmethod
    def to_shapely(polygon: Sequence[Point]) -> Optional[ShapelyPolygon]:
        """Convert to a valid shapely polygon, or None"""
        if len(polygon) < 3:
            return None
        try:
            poly = ShapelyPolygon(polygon)
            if not poly.is_valid:
                poly = poly.buffer(0)
        except (GEOSException, ValueError) as e:
            logger.debug(f"Could not build polygon from {len(polygon)} points: {e}")
            return None
        return PolygonUtils._largest_part(poly)

    @staticmethod
    def from_shapely(poly: ShapelyPolygon) -> Optional[Polygon]:
        """Exterior ring as an open point list, or None if degenerate"""
        if poly is None or poly.is_empty:
            return None
        points = PolygonUtils.open_ring(poly.exterior.coords)
        if len(points) < 3:
            return None
        return points

    @staticmethod
    def _largest_part(geom) -> Optional[ShapelyPolygon]:
        if geom is None or geom.is_empty:
            return None
        if isinstance(geom, ShapelyPolygon):
            return geom
        if isinstance(geom, MultiPolygon):
            return max(geom.geoms, key=lambda g: g.area)
        polygons = [g for g in getattr(geom, "geoms", []) if isinstance(g, ShapelyPolygon)]
        if not polygons:
            return None
        return max(polygons, key=lambda g: g.area)

    @staticmethod
    def polygon_area(polygon: Sequence[Point]) -> float:
        """Shoelace area, always non-negative"""
        if len(polygon) < 3:
            return 0.0

        n = len(polygon)
        area = 0.0
        for i in range(n):
            j = (i + 1) % n
            area += polygon[i][0] * polygon[j][1]
            area -= polygon[j][0] * polygon[i][1]

        return abs(area) / 2.0

    @staticmethod
    def polygon_perimeter(polygon: Sequence[Point]) -> float:
        """Sum of edge lengths including the closing edge"""
        if len(polygon) < 2:
            return 0.0

        perimeter = 0.0
        n = len(polygon)
        for i in range(n):
            j = (i + 1) % n
            dx = polygon[j][0] - polygon[i][0]
            dy = polygon[j][1] - polygon[i][1]
            perimeter += math.sqrt(dx*dx + dy*dy)

        return perimeter

    @staticmethod
    def average_point(polygon: Sequence[Point]) -> Point:
        """Mean of the vertices"""
        if not polygon:
            return (0.0, 0.0)

        n = len(polygon)
        sum_x = sum(p[0] for p in polygon)
        sum_y = sum(p[1] for p in polygon)

        return (sum_x / n, sum_y / n)

    @staticmethod
    def edge_midpoints(polygon: Sequence[Point]) -> List[Point]:
        """Midpoint of every edge, closing edge last"""
        n = len(polygon)
        midpoints = []
        for i in range(n):
            j = (i + 1) % n
            midpoints.append((
                (polygon[i][0] + polygon[j][0]) * 0.5,
                (polygon[i][1] + polygon[j][1]) * 0.5,
            ))
        return midpoints

    @staticmethod
    def inside_polygon(point: Point, polygon: Sequence[Point]) -> bool:
        """Ray casting (even-odd) point-in-polygon test"""
        x, y = point
        n = len(polygon)
        inside = False

        j = n - 1
        for i in range(n):
            xi, yi = polygon[i]
            xj, yj = polygon[j]

            if ((yi > y) != (yj > y)) and (x < (xj - xi) * (y - yi) / (yj - yi) + xi):
                inside = not inside
            j = i

        return inside

    @staticmethod
    def resize_geometry(polygon: Sequence[Point], distance: float) -> Optional[Polygon]:
        """
        Offset a polygon by a signed distance (negative shrinks)

        Uses a mitred buffer so straight-edged blocks keep their corners.
        Returns None when the result is empty or has fewer than 3 vertices;
        when the offset splits the polygon the largest part is kept.
        """
        poly = PolygonUtils.to_shapely(polygon)
        if poly is None:
            return None

        try:
            buffered = poly.buffer(distance, cap_style=2, join_style=2)
        except (GEOSException, ValueError) as e:
            logger.debug(f"Offset by {distance} failed: {e}")
            return None

        return PolygonUtils.from_shapely(PolygonUtils._largest_part(buffered))

    @staticmethod
    def slice_polygon(
        polygon: Sequence[Point],
        line_start: Point,
        line_end: Point
    ) -> List[Polygon]:
        """Split a polygon by an infinite-enough cutting segment"""
        poly = PolygonUtils.to_shapely(polygon)
        if poly is None:
            return []

        try:
            pieces = split(poly, LineString([line_start, line_end]))
        except (GEOSException, ValueError) as e:
            logger.debug(f"Slice failed: {e}")
            return []

        sliced = []
        for piece in pieces.geoms:
            if isinstance(piece, ShapelyPolygon):
                points = PolygonUtils.from_shapely(piece)
                if points:
                    sliced.append(points)
        return sliced

    @staticmethod
    def subdivide_polygon(
        polygon: Sequence[Point],
        min_area: float,
        rng: Optional[random.Random] = None
    ) -> List[Polygon]:
        """
        Recursively bisect a polygon into lots

        Pieces under half of min_area, or too skinny, are discarded. Pieces
        under twice min_area are kept as lots. Anything larger is cut
        perpendicular to its longest side, at 40-60% along it, and each half
        is subdivided again.
        """
        rng = rng or random
        polygon = list(polygon)
        if len(polygon) < 3:
            return []

        area = PolygonUtils.polygon_area(polygon)
        if area < 0.5 * min_area:
            return []

        longest_length = 0.0
        longest_side = (polygon[0], polygon[1])
        perimeter = 0.0
        n = len(polygon)
        for i in range(n):
            a = polygon[i]
            b = polygon[(i + 1) % n]
            length = math.hypot(b[0] - a[0], b[1] - a[1])
            perimeter += length
            if length > longest_length:
                longest_length = length
                longest_side = (a, b)

        if perimeter == 0 or 4 * math.pi * area / (perimeter * perimeter) < PolygonUtils.MIN_SHAPE_INDEX:
            return []

        if area < 2 * min_area:
            return [polygon]

        (ax, ay), (bx, by) = longest_side
        deviation = rng.random() * 0.2 + 0.4
        cut_x = ax + (bx - ax) * deviation
        cut_y = ay + (by - ay) * deviation

        # Cutting line perpendicular to the longest side, long enough to cross
        # the whole polygon
        xs = [p[0] for p in polygon]
        ys = [p[1] for p in polygon]
        reach = math.hypot(max(xs) - min(xs), max(ys) - min(ys)) + 1.0
        perp_x = (by - ay) / longest_length * reach
        perp_y = -(bx - ax) / longest_length * reach

        sliced = PolygonUtils.slice_polygon(
            polygon,
            (cut_x + perp_x, cut_y + perp_y),
            (cut_x - perp_x, cut_y - perp_y)
        )
        if len(sliced) < 2:
            # Cut missed (e.g. a reflex corner); keep the piece whole
            return [polygon]

        divided = []
        for piece in sliced:
            divided.extend(PolygonUtils.subdivide_polygon(piece, min_area, rng))
        return divided
