import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pytest


@pytest.fixture
def vertices():
    return [(-1, -1), (0, 1), (1, -1)]


@pytest.fixture
def right_triangle():
    return [(0.0, 0.0), (1.0, 0.0), (0.0, 1.0)]


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")
