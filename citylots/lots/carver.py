"""
Lot carving

Turns shrunk blocks into building lots, either by plain subdivision or by
carving a ring of perimeter lots around an open interior courtyard.

Courtyard mode, per block:
1. Estimate block size from its perimeter (radius = perimeter / 2pi) and cap
   the courtyard depth at a fraction of it.
2. Blocks that are too small or too thin for a courtyard are just
   subdivided (or kept whole when subdivision yields nothing).
3. Otherwise inset the block by the depth to get the courtyard boundary,
   subdivide the whole block, and drop every lot that reaches into the
   courtyard.
"""

import math
import random
from typing import List, Optional, Sequence

from loguru import logger

from ..config import CourtyardParams
from ..geometry.polygon_utils import Polygon, PolygonUtils
from ..models import BlockCarving


class LotCarver:
    """Carves blocks into perimeter lots or plain subdivided lots"""

    def __init__(
        self,
        params: Optional[CourtyardParams] = None,
        rng: Optional[random.Random] = None
    ):
        self.params = params or CourtyardParams()
        self.rng = rng or random.Random()
        self.last_carvings: List[BlockCarving] = []

    def subdivide(self, blocks: Sequence[Polygon], min_area: float) -> List[Polygon]:
        """Divide mode: subdivide every block, dropping blocks that yield nothing"""
        lots = []
        for block in blocks:
            lots.extend(PolygonUtils.subdivide_polygon(block, min_area, self.rng))
        return lots

    def carve(
        self,
        blocks: Sequence[Polygon],
        min_area: float,
        courtyard_depth: float
    ) -> List[Polygon]:
        """
        Courtyard mode: carve every block and concatenate the lots

        Args:
            blocks: Shrunk blocks in world space
            min_area: Target lot area passed to subdivision
            courtyard_depth: Upper bound on courtyard depth

        Returns:
            Perimeter lots and fallback lots, in block order
        """
        self.last_carvings = [
            self.carve_block(block, min_area, courtyard_depth)
            for block in blocks
        ]

        lots = []
        for carving in self.last_carvings:
            lots.extend(carving.kept)

        with_courtyards = sum(1 for c in self.last_carvings if c.has_courtyard)
        logger.info(f"Blocks with courtyards: {with_courtyards}")
        logger.info(f"Blocks without courtyards: {len(self.last_carvings) - with_courtyards}")
        logger.info(f"Total perimeter lots: {len(lots)}")

        return lots

    def courtyard_depth(self, block: Polygon, courtyard_depth: float) -> float:
        """Depth capped by the block's size"""
        if self.params.depth_basis == "sqrt_area":
            size = math.sqrt(PolygonUtils.polygon_area(block))
        else:
            size = PolygonUtils.polygon_perimeter(block) / (2 * math.pi)
        return min(courtyard_depth, size * self.params.depth_fraction)

    def carve_block(
        self,
        block: Polygon,
        min_area: float,
        courtyard_depth: float
    ) -> BlockCarving:
        """Carve a single block, recording the decision"""
        area = PolygonUtils.polygon_area(block)
        depth = self.courtyard_depth(block, courtyard_depth)

        if area < min_area * self.params.skip_area_factor or depth < self.params.min_depth:
            logger.debug(f"Block of area {area:.1f} too small for a courtyard (depth {depth:.2f})")
            return self._without_courtyard(block, area, depth, min_area)

        courtyard = PolygonUtils.resize_geometry(block, -depth)
        if not courtyard or len(courtyard) < 3:
            logger.debug(f"Courtyard inset of {depth:.2f} collapsed for block of area {area:.1f}")
            return self._without_courtyard(block, area, depth, min_area)

        candidates = PolygonUtils.subdivide_polygon(block, min_area, self.rng) or [list(block)]

        kept = []
        discarded = []
        for lot in candidates:
            if self.is_interior(lot, courtyard):
                discarded.append(lot)
            else:
                kept.append(lot)

        logger.debug(f"Courtyard block: {len(kept)} perimeter lots, {len(discarded)} interior lots discarded")

        return BlockCarving(
            block=block,
            area=area,
            depth=depth,
            courtyard=courtyard,
            candidates=candidates,
            kept=kept,
            discarded=discarded
        )

    def _without_courtyard(
        self,
        block: Polygon,
        area: float,
        depth: float,
        min_area: float
    ) -> BlockCarving:
        lots = PolygonUtils.subdivide_polygon(block, min_area, self.rng) or [list(block)]
        return BlockCarving(
            block=block,
            area=area,
            depth=depth,
            candidates=lots,
            kept=lots
        )

    @staticmethod
    def is_interior(lot: Polygon, courtyard: Polygon) -> bool:
        """
        True if a lot reaches into the courtyard

        Any one of: its average point is inside, more than half its vertices
        are inside, or any edge midpoint is inside.
        """
        if PolygonUtils.inside_polygon(PolygonUtils.average_point(lot), courtyard):
            return True

        inside = sum(1 for v in lot if PolygonUtils.inside_polygon(v, courtyard))
        if inside * 2 > len(lot):
            return True

        return any(
            PolygonUtils.inside_polygon(m, courtyard)
            for m in PolygonUtils.edge_midpoints(lot)
        )
