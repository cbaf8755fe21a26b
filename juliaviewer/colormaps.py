"""
Color scheme definitions for Julia set visualization.

Each scheme is a list of (fraction, color) stops. A fraction is relative
to the iteration cap, so get_gradient() can build a Gradient spanning
[0, max_iter] for any cap. Changing the cap later only needs a
non-renormalizing Gradient.set_domain, which keeps the same shape.

To add a new color scheme:
1. Define a list of (fraction, (r, g, b, a)) stops below
2. Add it to the COLORMAPS dictionary at the bottom of this file
"""

from .gradient import Gradient


WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)
RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)


# Classic: white -> red -> green -> blue, evenly spaced
CLASSIC_STOPS = [
    (0.0, WHITE),
    (1 / 3, RED),
    (2 / 3, GREEN),
    (1.0, BLUE),
]

# Hot: black -> red -> orange -> yellow -> white ("fire" look)
HOT_STOPS = [
    (0.0, BLACK),
    (0.25, (200, 0, 0, 255)),
    (0.45, (255, 120, 0, 255)),
    (0.7, (255, 230, 40, 255)),
    (1.0, WHITE),
]

# Ocean: deep blue -> cyan -> white
OCEAN_STOPS = [
    (0.0, (0, 0, 50, 255)),
    (0.5, (0, 128, 180, 255)),
    (0.8, (0, 255, 255, 255)),
    (1.0, WHITE),
]

# Forest: dark green -> lime -> yellow
FOREST_STOPS = [
    (0.0, (0, 80, 0, 255)),
    (0.5, (80, 200, 40, 255)),
    (1.0, (255, 255, 100, 255)),
]

# Purple: deep purple -> magenta -> pink -> white
PURPLE_STOPS = [
    (0.0, (100, 0, 80, 255)),
    (0.4, (180, 30, 160, 255)),
    (0.75, (255, 150, 220, 255)),
    (1.0, WHITE),
]

# Grayscale: black -> white, shows the raw iteration structure
GRAYSCALE_STOPS = [
    (0.0, BLACK),
    (1.0, WHITE),
]


# Registry of all available color schemes.
# Keys are display names, values are stop lists.
# Add new schemes here to make them available in the UI.
COLORMAPS = {
    'Classic': CLASSIC_STOPS,
    'Hot': HOT_STOPS,
    'Ocean': OCEAN_STOPS,
    'Forest': FOREST_STOPS,
    'Purple': PURPLE_STOPS,
    'Grayscale': GRAYSCALE_STOPS,
}

DEFAULT_COLORMAP = 'Classic'


def get_gradient(name, max_iter):
    """
    Build a gradient for a color scheme spanning [0, max_iter].

    Args:
        name: Key from COLORMAPS dictionary
        max_iter: Iteration cap; the last stop is placed on it

    Returns:
        A new Gradient

    Raises:
        KeyError if name not found
    """
    stops = COLORMAPS[name]
    gradient = Gradient((0.0, float(max_iter)))
    for fraction, color in stops:
        gradient.add_key(fraction * max_iter, color)
    return gradient


def get_default_gradient(max_iter):
    """Get the default gradient (Classic) spanning [0, max_iter]."""
    return get_gradient(DEFAULT_COLORMAP, max_iter)


def list_colormap_names():
    """Get list of available color scheme names."""
    return list(COLORMAPS.keys())
