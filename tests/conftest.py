import random

import pytest


def grid_streets(count, spacing):
    """Square street grid with count x count blocks"""
    extent = count * spacing
    streets = []
    for i in range(count + 1):
        offset = i * spacing
        streets.append([(0.0, offset), (extent, offset)])
        streets.append([(offset, 0.0), (offset, extent)])
    return streets


@pytest.fixture
def small_block():
    return [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0)]


@pytest.fixture
def large_block():
    return [(0.0, 0.0), (100.0, 0.0), (100.0, 100.0), (0.0, 100.0)]


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def streets():
    return grid_streets
