import random

import numpy as np
import pytest

SQUARE_EDGES = [(0, 1), (1, 2), (2, 3), (3, 0), (0, 2), (1, 3)]


@pytest.fixture
def square():
    """Four corners of a square, all sides plus both diagonals: exactly one crossing."""
    pos = np.array([[100.0, 100.0], [500.0, 100.0], [500.0, 500.0], [100.0, 500.0]])
    return pos, list(SQUARE_EDGES)


@pytest.fixture
def rng():
    return random.Random(1234)
