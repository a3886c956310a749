import numpy as np
import pytest

from kidnapped_vehicle.particle import Landmark


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def map_landmarks():
    return [
        Landmark(1, 0.0, 0.0),
        Landmark(2, 10.0, 0.0),
        Landmark(3, 0.0, 10.0),
        Landmark(4, 10.0, 10.0),
        Landmark(5, 25.0, -5.0),
        Landmark(6, -15.0, 20.0),
    ]
