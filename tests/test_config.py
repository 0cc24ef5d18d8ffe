import pytest

from citylots.config import (
    CourtyardParams,
    GeneratorConfig,
    HeightParams,
    LotParams,
    get_config,
    validate_config,
)


def test_default_config_is_valid():
    validate_config(get_config())
    validate_config(GeneratorConfig())


def test_courtyard_defaults_use_perimeter_formulation():
    params = CourtyardParams()

    assert params.depth_basis == "perimeter"
    assert params.depth_fraction == 0.45
    assert params.skip_area_factor == 2.0
    assert params.min_depth == 5.0


def test_all_errors_are_reported_together():
    config = GeneratorConfig(
        mode="rings",
        lots=LotParams(min_area=-1.0, chance_no_subdivide=1.5),
        heights=HeightParams(height_range=-2.0)
    )

    with pytest.raises(ValueError) as excinfo:
        validate_config(config)

    message = str(excinfo.value)
    assert "mode" in message
    assert "lots.min_area" in message
    assert "lots.chance_no_subdivide" in message
    assert "heights.height_range" in message


def test_unknown_depth_basis_is_rejected():
    config = GeneratorConfig(courtyard=CourtyardParams(depth_basis="diagonal"))

    with pytest.raises(ValueError, match="depth_basis"):
        validate_config(config)


def test_non_positive_dstep_is_rejected():
    with pytest.raises(ValueError, match="dstep"):
        validate_config(GeneratorConfig(dstep=0.0))
