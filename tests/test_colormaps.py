import pytest

from juliaviewer.colormaps import (
    COLORMAPS,
    DEFAULT_COLORMAP,
    get_default_gradient,
    get_gradient,
    list_colormap_names,
)


def test_list_colormap_names():
    names = list_colormap_names()
    assert names == list(COLORMAPS.keys())
    assert DEFAULT_COLORMAP in names


@pytest.mark.parametrize("name", list(COLORMAPS.keys()))
def test_presets_span_the_iteration_cap(name):
    stops = COLORMAPS[name]
    gradient = get_gradient(name, 250)

    assert gradient.get_domain() == (0.0, 250.0)
    assert gradient.get_num_keys() == len(stops)
    assert gradient.get_color(0) == stops[0][1]
    assert gradient.get_color(250) == stops[-1][1]


def test_default_gradient_is_classic_with_four_keys():
    gradient = get_default_gradient(100)

    assert gradient.get_num_keys() == 4
    assert gradient.get_color(0) == (255, 255, 255, 255)
    assert gradient.get_color(100) == (0, 0, 255, 255)


def test_unknown_colormap():
    with pytest.raises(KeyError):
        get_gradient('Nope', 100)
