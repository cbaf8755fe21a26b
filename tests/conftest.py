import pytest

from juliaviewer.gradient import Gradient


WHITE = (255, 255, 255, 255)
RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)


@pytest.fixture
def classic_gradient():
    """White -> red -> green -> blue over [0, 100]."""
    max_iter = 100
    gradient = Gradient((0.0, float(max_iter)))
    gradient.add_key(0, WHITE)
    gradient.add_key(max_iter / 3, RED)
    gradient.add_key(2 * max_iter / 3, GREEN)
    gradient.add_key(max_iter, BLUE)
    return gradient


def assert_color_close(actual, expected, tolerance=1):
    assert len(actual) == len(expected)
    for a, e in zip(actual, expected):
        assert abs(int(a) - int(e)) <= tolerance, f"{tuple(actual)} != {tuple(expected)}"
