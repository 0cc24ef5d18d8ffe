"""
Buildings Orchestrator

Runs a generation pass over the street network:

  1. IDLE -> BLOCKS_FOUND: find blocks in the street graph
  2. BLOCKS_FOUND -> SHRUNK: inset blocks away from the streets
  3. SHRUNK -> CARVED: carve courtyards or subdivide into lots
  4. CARVED -> PROJECTED: assign heights and publish buildings

The pass is a resumable state machine. generate() drives it to completion;
an animated driver calls start() and then step() once per frame. Lots and
buildings from a pass are only published when it reaches PROJECTED, so
readers see either the previous result or the new one, never a mix.
"""

import dataclasses
import random
from enum import Enum
from typing import Callable, List, Optional, Sequence

from loguru import logger

from .blocks import BlockFinder, StreetGraph
from .buildings import BuildingProjector
from .config import GeneratorConfig, get_config, validate_config
from .geometry import CameraState, Point, Polygon
from .lots import LotCarver
from .models import Building, GenerationSummary


class Stage(str, Enum):
    IDLE = "idle"
    BLOCKS_FOUND = "blocks_found"
    SHRUNK = "shrunk"
    CARVED = "carved"
    PROJECTED = "projected"


class GenerationInProgressError(RuntimeError):
    """A generation pass was started while another is in flight"""


class BuildingsOrchestrator:
    """
    Finds building lots and pseudo-3D buildings from street polylines

    Usage:
        orchestrator = BuildingsOrchestrator(config)
        orchestrator.set_streets(streamlines)
        orchestrator.generate()
        buildings = orchestrator.buildings(camera)
    """

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        redraw: Optional[Callable[[], None]] = None
    ):
        self.config = config or get_config()
        validate_config(self.config)

        self.rng = random.Random(self.config.seed)
        self.redraw = redraw or (lambda: None)
        self.pre_generate_callback: Callable[[], None] = lambda: None
        self.post_generate_callback: Callable[[], None] = lambda: None

        self.streamlines: List[List[Point]] = []
        self.stage = Stage.IDLE
        self.last_summary: Optional[GenerationSummary] = None

        # In-flight pass
        self._in_flight = False
        self._animate = False
        self._stage_started = False
        self._block_count = 0
        self._finder: Optional[BlockFinder] = None
        self._carver: Optional[LotCarver] = None
        self._pending_lots: List[Polygon] = []
        self._pending_projector: Optional[BuildingProjector] = None

        # Published results
        self._lots: List[Polygon] = []
        self._projector = BuildingProjector(self.rng)

    def set_streets(self, streamlines: Sequence[Sequence[Point]]):
        self.streamlines = [list(s) for s in streamlines]

    def set_pre_generate_callback(self, callback: Callable[[], None]):
        self.pre_generate_callback = callback

    def set_post_generate_callback(self, callback: Callable[[], None]):
        self.post_generate_callback = callback

    # ============================================================
    # Generation
    # ============================================================

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def generate(self, animate: bool = False) -> GenerationSummary:
        """Run a full pass and publish its lots and buildings"""
        self.start(animate)
        while self.step():
            pass
        return self.last_summary

    def start(self, animate: bool = False):
        """Begin a pass without running it"""
        if self._in_flight:
            raise GenerationInProgressError("A generation pass is already in progress")
        validate_config(self.config)

        self.pre_generate_callback()
        logger.info(f"Starting building generation ({self.config.mode} mode, {len(self.streamlines)} streets)")

        graph = StreetGraph(self.streamlines, self.config.dstep, delete_dangling=True)
        self._finder = BlockFinder(graph, self.config.lots, self.rng)
        self._carver = LotCarver(self.config.courtyard, self.rng)
        self._pending_lots = []
        self._pending_projector = BuildingProjector(self.rng)
        self._animate = animate
        self._stage_started = False
        self._block_count = 0
        self._in_flight = True
        self.stage = Stage.IDLE

    def step(self) -> bool:
        """
        Advance the in-flight pass by one unit of work

        Returns True while the pass has more work to do.
        """
        if not self._in_flight:
            return False

        try:
            done = self._run_stage()
        except Exception as e:
            logger.error(f"Generation failed at stage {self.stage.value}: {e}")
            self._clear_pass()
            raise
        if done:
            return False

        if self._animate:
            self.redraw()
        return True

    def _run_stage(self) -> bool:
        """Run one unit of work for the current stage; True once published"""
        if self.stage == Stage.IDLE:
            self._finder.find_polygons()
            self._advance(Stage.BLOCKS_FOUND)

        elif self.stage == Stage.BLOCKS_FOUND:
            if self._run_finder_stage(self._finder.shrink):
                self._block_count = len(self._finder.polygons)
                self._advance(Stage.SHRUNK)

        elif self.stage == Stage.SHRUNK:
            if self.config.mode == "courtyard":
                self._pending_lots = self._carver.carve(
                    self._finder.polygons,
                    self.config.lots.min_area,
                    self.config.courtyard.courtyard_depth
                )
                self._advance(Stage.CARVED)
            elif self._run_finder_stage(self._finder.divide):
                self._pending_lots = list(self._finder.polygons)
                self._advance(Stage.CARVED)

        elif self.stage == Stage.CARVED:
            heights = self.config.heights
            self._pending_projector.project(self._pending_lots, heights.min_height, heights.height_range)
            self._advance(Stage.PROJECTED)
            self._publish()
            return True

        return False

    def _run_finder_stage(self, begin: Callable[[bool], None]) -> bool:
        """Start or continue a shrink/divide; True once it has completed"""
        if not self._stage_started:
            begin(self._animate)
            self._stage_started = True
        elif self._finder.update():
            self._finder.step()
        return not self._finder.update()

    def _advance(self, stage: Stage):
        logger.debug(f"Generation stage: {self.stage.value} -> {stage.value}")
        self.stage = stage
        self._stage_started = False

    def _publish(self):
        self._lots = self._pending_lots
        self._projector = self._pending_projector
        with_courtyards = sum(1 for c in self._carver.last_carvings if c.has_courtyard)
        heights = [b.height for b in self._projector.buildings]

        self.last_summary = GenerationSummary(
            mode=self.config.mode,
            blocks=self._block_count,
            lots=len(self._lots),
            buildings=len(heights),
            blocks_with_courtyards=with_courtyards,
            blocks_without_courtyards=len(self._carver.last_carvings) - with_courtyards,
            min_height=min(heights) if heights else None,
            max_height=max(heights) if heights else None
        )

        self._clear_pass()

        logger.info(f"Generated {self.last_summary.lots} lots and {self.last_summary.buildings} buildings")
        self.redraw()
        self.post_generate_callback()

    def reset(self):
        """Drop any in-flight pass and clear published results"""
        if self._finder is not None:
            self._finder.reset()
        self._clear_pass()
        self._lots = []
        self._projector = BuildingProjector(self.rng)
        self.last_summary = None
        self.stage = Stage.IDLE

    def _clear_pass(self):
        self._in_flight = False
        self._finder = None
        self._carver = None
        self._pending_lots = []
        self._pending_projector = None

    def update(self) -> bool:
        """True while a shrink or divide is mid-flight"""
        return self._finder is not None and self._finder.update()

    # ============================================================
    # Renderer access
    # ============================================================

    @property
    def world_lots(self) -> List[Polygon]:
        """Published lots in world space"""
        return [list(lot) for lot in self._lots]

    def lots(self, camera: CameraState) -> List[Polygon]:
        """Published lots in screen space, without height"""
        return [[camera.world_to_screen(v) for v in lot] for lot in self._lots]

    def buildings(self, camera: CameraState) -> List[Building]:
        """Published buildings, projected for this camera, in ascending height"""
        return self._projector.set_projections(camera)

    def get_blocks(self, camera: CameraState) -> List[Polygon]:
        """Blocks shrunk by half the lot setback, in screen space"""
        params = dataclasses.replace(
            self.config.lots,
            shrink_spacing=self.config.lots.shrink_spacing / 2
        )
        graph = StreetGraph(self.streamlines, self.config.dstep, delete_dangling=True)
        finder = BlockFinder(graph, params, self.rng)
        finder.find_polygons()
        finder.shrink(False)
        return [[camera.world_to_screen(v) for v in p] for p in finder.polygons]
