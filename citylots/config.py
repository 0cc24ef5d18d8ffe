"""
Configuration settings for the lot carving and building generator
"""

from dataclasses import dataclass, field
from typing import Dict, Literal, Optional


CarvingMode = Literal["divide", "courtyard"]
DepthBasis = Literal["perimeter", "sqrt_area"]


@dataclass
class LotParams:
    """Block discovery and subdivision parameters (world units)"""
    # Lots smaller than this are not subdivided further
    min_area: float = 50.0

    # Blocks with more edges than this are dropped after discovery
    max_lot_edge_length: int = 20

    # Inward setback applied to every block from the street centreline
    shrink_spacing: float = 4.0

    # Probability a block is kept whole in divide mode
    chance_no_subdivide: float = 0.05


@dataclass
class CourtyardParams:
    """Courtyard carving parameters"""
    # Upper bound on the depth of the building ring (world units)
    courtyard_depth: float = 20.0

    # "perimeter": depth scales from perimeter / 2pi
    # "sqrt_area": alternative scaling from sqrt(area)
    depth_basis: DepthBasis = "perimeter"

    # Blocks thinner than this never get a courtyard
    min_depth: float = 5.0

    # Fraction of the size proxy usable as depth, and the skip area factor,
    # per depth basis
    depth_fractions: Dict[str, float] = field(default_factory=lambda: {
        "perimeter": 0.45,
        "sqrt_area": 0.3,
    })
    skip_area_factors: Dict[str, float] = field(default_factory=lambda: {
        "perimeter": 2.0,
        "sqrt_area": 3.0,
    })

    @property
    def depth_fraction(self) -> float:
        return self.depth_fractions[self.depth_basis]

    @property
    def skip_area_factor(self) -> float:
        return self.skip_area_factors[self.depth_basis]


@dataclass
class HeightParams:
    """Building height distribution"""
    min_height: float = 20.0
    height_range: float = 20.0


@dataclass
class GeneratorConfig:
    """Generator configuration"""
    mode: CarvingMode = "divide"

    # Snap distance used when building the street graph
    dstep: float = 1.0

    # Seed for subdivision cuts and building heights (None = nondeterministic)
    seed: Optional[int] = None

    lots: LotParams = field(default_factory=LotParams)
    courtyard: CourtyardParams = field(default_factory=CourtyardParams)
    heights: HeightParams = field(default_factory=HeightParams)


# Global config instance
config = GeneratorConfig()


def get_config() -> GeneratorConfig:
    """Get global configuration"""
    return config


def validate_config(config: GeneratorConfig) -> None:
    """
    Validate generator configuration.
    Raises ValueError listing every invalid value.
    """
    errors = []

    if config.mode not in ("divide", "courtyard"):
        errors.append(f"mode must be 'divide' or 'courtyard', got {config.mode!r}")

    if config.dstep is None or config.dstep <= 0:
        errors.append(f"dstep must be positive, got {config.dstep}")

    lots = config.lots
    if lots is None:
        errors.append("lots configuration is required but not set")
    else:
        if lots.min_area is None or lots.min_area <= 0:
            errors.append(f"lots.min_area must be positive, got {lots.min_area}")
        if lots.max_lot_edge_length is None or lots.max_lot_edge_length < 3:
            errors.append(f"lots.max_lot_edge_length must be at least 3, got {lots.max_lot_edge_length}")
        if lots.shrink_spacing is None or lots.shrink_spacing < 0:
            errors.append(f"lots.shrink_spacing must be non-negative, got {lots.shrink_spacing}")
        if lots.chance_no_subdivide is None or not 0 <= lots.chance_no_subdivide <= 1:
            errors.append(f"lots.chance_no_subdivide must be between 0 and 1, got {lots.chance_no_subdivide}")

    courtyard = config.courtyard
    if courtyard is None:
        errors.append("courtyard configuration is required but not set")
    else:
        if courtyard.depth_basis not in ("perimeter", "sqrt_area"):
            errors.append(f"courtyard.depth_basis must be 'perimeter' or 'sqrt_area', got {courtyard.depth_basis!r}")
        elif courtyard.depth_basis not in courtyard.depth_fractions or courtyard.depth_basis not in courtyard.skip_area_factors:
            errors.append(f"courtyard constants missing for depth basis {courtyard.depth_basis!r}")
        if courtyard.courtyard_depth is None or courtyard.courtyard_depth <= 0:
            errors.append(f"courtyard.courtyard_depth must be positive, got {courtyard.courtyard_depth}")
        if courtyard.min_depth is None or courtyard.min_depth < 0:
            errors.append(f"courtyard.min_depth must be non-negative, got {courtyard.min_depth}")

    heights = config.heights
    if heights is None:
        errors.append("heights configuration is required but not set")
    else:
        if heights.min_height is None or heights.min_height < 0:
            errors.append(f"heights.min_height must be non-negative, got {heights.min_height}")
        if heights.height_range is None or heights.height_range < 0:
            errors.append(f"heights.height_range must be non-negative, got {heights.height_range}")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ValueError(error_msg)
