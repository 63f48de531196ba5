import pytest

from lecturemap.models import BuildingConfig
from lecturemap.planner import LecturePlanner

SLOTS = ("L1", "L2", "L3")


@pytest.fixture()
def planner():
    # 2 floors x 2 rooms, registry order (0,0) (0,1) (1,0) (1,1)
    return LecturePlanner(BuildingConfig(floors=2, rooms_per_floor=2, slots=SLOTS, seed=7))


@pytest.fixture()
def store(planner):
    return planner.store


@pytest.fixture()
def registry(planner):
    return planner.registry
