"""
Tuning settings for the viewer, loaded from settings.json.

The packaged settings.json sits next to this module. Values found in the
file override DEFAULT_SETTINGS; anything missing falls back to the
default. Settings are only read at startup.
"""

import json
import os

from .colormaps import COLORMAPS
from .logging_setup import get_logger


logger = get_logger("settings")

SETTINGS_PATH = os.path.join(os.path.dirname(__file__), 'settings.json')

DEFAULT_SETTINGS = {
    'num_workers': 16,
    'max_iter': 100,
    'max_iter_range': [1, 1000],
    'constant': [-0.8, 0.4],
    'smoothing': True,
    'colormap': 'Classic',
    'window_size': [1200, 800],
    'frame_rate_limit': 30,
    'poll_interval': 0.01,
    'zoom_step': 0.1,
}


def load_settings(path=None):
    """
    Load settings from a JSON file on top of the defaults.

    Args:
        path: Settings file. None uses the packaged settings.json, and a
            missing packaged file only logs a warning.

    Returns:
        Validated settings dict

    Raises:
        ValueError if an explicit file cannot be read or a value is invalid
    """
    settings = dict(DEFAULT_SETTINGS)

    if path is None:
        try:
            with open(SETTINGS_PATH, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
        except (FileNotFoundError, json.JSONDecodeError) as e:
            logger.warning("Could not load settings.json: %s", e)
            loaded = {}
    else:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ValueError(f"Could not load settings from {path}: {e}") from e

    if not isinstance(loaded, dict):
        raise ValueError("Settings JSON must be an object.")

    unknown = sorted(set(loaded) - set(DEFAULT_SETTINGS))
    if unknown:
        logger.warning("Ignoring unknown settings: %s", ", ".join(unknown))
    settings.update({k: v for k, v in loaded.items() if k in DEFAULT_SETTINGS})

    return normalise_settings(settings)


def _pair(settings, name, cast):
    value = settings[name]
    if not (isinstance(value, (list, tuple)) and len(value) == 2):
        raise ValueError(f"{name} must be a pair, got {value!r}")
    return [cast(value[0]), cast(value[1])]


def normalise_settings(settings):
    """Check types and ranges, returning a cleaned copy."""
    out = dict(settings)

    out['num_workers'] = int(settings['num_workers'])
    if out['num_workers'] <= 0:
        raise ValueError("num_workers must be positive.")

    low, high = _pair(settings, 'max_iter_range', int)
    if low <= 0 or high < low:
        raise ValueError("max_iter_range must be [low, high] with 0 < low <= high.")
    out['max_iter_range'] = [low, high]

    out['max_iter'] = int(settings['max_iter'])
    if not low <= out['max_iter'] <= high:
        raise ValueError(f"max_iter must lie in max_iter_range {out['max_iter_range']}.")

    out['constant'] = _pair(settings, 'constant', float)
    out['smoothing'] = bool(settings['smoothing'])

    if settings['colormap'] not in COLORMAPS:
        raise ValueError(f"Unknown colormap: {settings['colormap']!r}")

    width, height = _pair(settings, 'window_size', int)
    if width <= 0 or height <= 0:
        raise ValueError("window_size must be positive.")
    out['window_size'] = [width, height]

    out['frame_rate_limit'] = int(settings['frame_rate_limit'])
    if out['frame_rate_limit'] < 0:
        raise ValueError("frame_rate_limit must not be negative.")

    out['poll_interval'] = float(settings['poll_interval'])
    if out['poll_interval'] <= 0:
        raise ValueError("poll_interval must be positive.")

    out['zoom_step'] = float(settings['zoom_step'])
    if not 0 < out['zoom_step'] < 1:
        raise ValueError("zoom_step must be between 0 and 1.")

    return out
