"""
Pydantic models for generated lots and buildings
"""

from typing import List, Optional, Tuple
from pydantic import BaseModel, Field


Point = Tuple[float, float]


# ============================================================
# Building Models
# ============================================================

class Building(BaseModel):
    """
    Pseudo-3D building on a single lot

    lot_screen, roof and sides are a projection cache: they are rebuilt from
    lot_world and the camera by BuildingProjector.set_projections().
    """
    height: float = Field(ge=0)
    lot_world: List[Point]
    lot_screen: List[Point] = Field(default_factory=list)
    roof: List[Point] = Field(default_factory=list)
    sides: List[List[Point]] = Field(default_factory=list)


# ============================================================
# Carving Models
# ============================================================

class BlockCarving(BaseModel):
    """Outcome of carving one block"""
    block: List[Point]
    area: float
    depth: float
    courtyard: Optional[List[Point]] = None
    candidates: List[List[Point]] = Field(default_factory=list)
    kept: List[List[Point]] = Field(default_factory=list)
    discarded: List[List[Point]] = Field(default_factory=list)

    @property
    def has_courtyard(self) -> bool:
        return self.courtyard is not None


class GenerationSummary(BaseModel):
    """Counts reported after a generation pass"""
    mode: str
    blocks: int
    lots: int
    buildings: int
    blocks_with_courtyards: int = 0
    blocks_without_courtyards: int = 0
    min_height: Optional[float] = None
    max_height: Optional[float] = None
