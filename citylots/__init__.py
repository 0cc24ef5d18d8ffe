"""
City lot carving and pseudo-3D building generation
"""

from .config import GeneratorConfig, LotParams, CourtyardParams, HeightParams, get_config, validate_config
from .geometry import CameraState, PolygonUtils
from .lots import LotCarver
from .buildings import BuildingProjector
from .models import Building, BlockCarving, GenerationSummary
from .pipeline import BuildingsOrchestrator, GenerationInProgressError, Stage

__all__ = [
    "GeneratorConfig",
    "LotParams",
    "CourtyardParams",
    "HeightParams",
    "get_config",
    "validate_config",
    "CameraState",
    "PolygonUtils",
    "LotCarver",
    "BuildingProjector",
    "Building",
    "BlockCarving",
    "GenerationSummary",
    "BuildingsOrchestrator",
    "GenerationInProgressError",
    "Stage",
]
