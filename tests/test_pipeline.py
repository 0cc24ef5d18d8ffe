import pytest

from citylots import BuildingsOrchestrator, CameraState, GeneratorConfig
from citylots.config import CourtyardParams, LotParams
from citylots.geometry import PolygonUtils
from citylots.pipeline import GenerationInProgressError, Stage


def make_orchestrator(streets, count=2, spacing=100.0, **kwargs):
    orchestrator = BuildingsOrchestrator(GeneratorConfig(seed=42, **kwargs))
    orchestrator.set_streets(streets(count, spacing))
    return orchestrator


def test_generate_divide_mode(streets):
    orchestrator = make_orchestrator(streets, lots=LotParams(chance_no_subdivide=0.0))

    summary = orchestrator.generate()

    assert orchestrator.stage == Stage.PROJECTED
    assert summary.mode == "divide"
    assert summary.blocks == 4
    assert summary.lots == len(orchestrator.world_lots) > 4
    assert summary.buildings == summary.lots

    buildings = orchestrator.buildings(CameraState())
    heights = [b.height for b in buildings]
    assert heights == sorted(heights)
    assert all(20.0 <= h < 40.0 for h in heights)
    assert all(len(b.sides) == len(b.lot_world) for b in buildings)


def test_generate_courtyard_mode(streets):
    orchestrator = make_orchestrator(
        streets, count=1, spacing=200.0,
        mode="courtyard",
        courtyard=CourtyardParams(courtyard_depth=20.0)
    )

    summary = orchestrator.generate()

    assert summary.blocks == 1
    assert summary.blocks_with_courtyards == 1
    assert summary.blocks_without_courtyards == 0

    # Block is the street loop inset by 4; courtyard is a further 20 in
    courtyard = [(24.0, 24.0), (176.0, 24.0), (176.0, 176.0), (24.0, 176.0)]
    for lot in orchestrator.world_lots:
        assert not PolygonUtils.inside_polygon(PolygonUtils.average_point(lot), courtyard)


def test_courtyard_mode_small_blocks_fall_back(streets):
    orchestrator = make_orchestrator(streets, count=2, spacing=20.0, mode="courtyard")

    summary = orchestrator.generate()

    assert summary.blocks == 4
    assert summary.blocks_with_courtyards == 0
    assert summary.lots >= 4


def test_results_are_published_only_at_the_end(streets):
    orchestrator = make_orchestrator(streets)
    orchestrator.generate()
    published = orchestrator.world_lots

    orchestrator.set_streets(streets(3, 100.0))
    orchestrator.start(animate=True)
    orchestrator.step()
    orchestrator.step()

    assert orchestrator.in_flight
    assert orchestrator.world_lots == published

    while orchestrator.step():
        pass

    assert not orchestrator.in_flight
    assert orchestrator.last_summary.blocks == 9
    assert orchestrator.world_lots != published


def test_second_pass_in_flight_is_rejected(streets):
    orchestrator = make_orchestrator(streets)
    orchestrator.start(animate=True)

    with pytest.raises(GenerationInProgressError):
        orchestrator.start()
    with pytest.raises(GenerationInProgressError):
        orchestrator.generate()


def test_update_reports_shrink_in_flight(streets):
    orchestrator = make_orchestrator(streets)
    orchestrator.start(animate=True)

    assert not orchestrator.update()
    orchestrator.step()  # find blocks
    orchestrator.step()  # begin shrink
    assert orchestrator.stage == Stage.BLOCKS_FOUND
    assert orchestrator.update()

    while orchestrator.step():
        pass
    assert not orchestrator.update()


@pytest.mark.parametrize("mode", ["divide", "courtyard"])
def test_animated_and_blocking_passes_agree(streets, mode):
    blocking = make_orchestrator(streets, count=2, spacing=150.0, mode=mode)
    blocking.generate()

    animated = make_orchestrator(streets, count=2, spacing=150.0, mode=mode)
    redraws = []
    animated.redraw = lambda: redraws.append(animated.stage)
    animated.start(animate=True)
    while animated.step():
        pass

    assert animated.world_lots == blocking.world_lots
    assert len(redraws) > 4


def test_callbacks_wrap_the_pass(streets):
    orchestrator = make_orchestrator(streets)
    calls = []
    orchestrator.set_pre_generate_callback(lambda: calls.append("pre"))
    orchestrator.set_post_generate_callback(lambda: calls.append("post"))

    orchestrator.generate()

    assert calls == ["pre", "post"]


def test_reset_clears_published_results(streets):
    orchestrator = make_orchestrator(streets)
    orchestrator.generate()

    orchestrator.reset()

    assert orchestrator.stage == Stage.IDLE
    assert orchestrator.world_lots == []
    assert orchestrator.buildings(CameraState()) == []
    assert orchestrator.last_summary is None


def test_reset_abandons_an_in_flight_pass(streets):
    orchestrator = make_orchestrator(streets)
    orchestrator.start(animate=True)
    orchestrator.step()

    orchestrator.reset()

    assert not orchestrator.in_flight
    assert not orchestrator.step()
    orchestrator.generate()
    assert orchestrator.world_lots


def test_lots_are_returned_in_screen_space(streets):
    orchestrator = make_orchestrator(streets)
    orchestrator.generate()
    camera = CameraState(zoom=2.0, origin=(10.0, 10.0))

    screen_lots = orchestrator.lots(camera)

    assert len(screen_lots) == len(orchestrator.world_lots)
    x, y = orchestrator.world_lots[0][0]
    assert screen_lots[0][0] == ((x - 10.0) * 2.0, (y - 10.0) * 2.0)


def test_get_blocks_uses_half_the_setback(streets):
    orchestrator = make_orchestrator(streets, count=1, lots=LotParams(shrink_spacing=4.0))

    blocks = orchestrator.get_blocks(CameraState())

    assert len(blocks) == 1
    assert PolygonUtils.polygon_area(blocks[0]) == pytest.approx(96.0 * 96.0)


def test_invalid_config_is_rejected():
    with pytest.raises(ValueError, match="min_area"):
        BuildingsOrchestrator(GeneratorConfig(lots=LotParams(min_area=0.0)))


def test_config_changed_after_construction_is_validated(streets):
    orchestrator = make_orchestrator(streets)
    orchestrator.config.heights.min_height = -50.0

    with pytest.raises(ValueError, match="min_height"):
        orchestrator.generate()

    assert not orchestrator.in_flight
    orchestrator.config.heights.min_height = 20.0
    assert orchestrator.generate().buildings > 0


def test_failed_stage_clears_the_in_flight_pass(streets):
    orchestrator = make_orchestrator(streets)
    orchestrator.start()
    orchestrator.config.heights.min_height = -50.0

    with pytest.raises(ValueError):
        while orchestrator.step():
            pass

    assert not orchestrator.in_flight
    assert not orchestrator.update()
    assert orchestrator.world_lots == []
    orchestrator.config.heights.min_height = 20.0
    summary = orchestrator.generate()
    assert summary.buildings == len(orchestrator.world_lots) > 0
