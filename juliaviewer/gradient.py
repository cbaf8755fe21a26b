"""
Color gradient used to turn (smoothed) iteration counts into RGBA colors.

A Gradient holds an ordered list of color keys. Key positions are stored
normalized against the gradient's domain (low, high), so the same set of
keys can be stretched over a new range by replacing the domain without
touching the keys (see Gradient.set_domain).

Lookups in the render loop go through compute.gradient_lookup, which works
on the packed arrays returned by Gradient.to_arrays().
"""

from bisect import bisect_right
from collections import namedtuple

import numpy as np


GradientKey = namedtuple('GradientKey', ['position', 'color'])


def _as_rgba(color):
    """Coerce an (r, g, b) or (r, g, b, a) sequence to an RGBA int tuple."""
    channels = [int(v) for v in color]
    if len(channels) == 3:
        channels.append(255)
    if len(channels) != 4:
        raise ValueError(f"Expected 3 or 4 color channels, got {len(channels)}")
    for v in channels:
        if not 0 <= v <= 255:
            raise ValueError(f"Color channel out of range 0-255: {v}")
    return tuple(channels)


class Gradient:
    """
    Ordered table mapping positions to colors.

    Keys are always kept sorted by ascending normalized position. Several
    keys may share a position; the one inserted first comes first.

    Usage:
        gradient = Gradient((0.0, 100.0))
        gradient.add_key(0, (255, 255, 255))
        gradient.add_key(100, (0, 0, 255))
        gradient.get_color(50)   # -> (127, 127, 255, 255)
    """

    def __init__(self, domain=(0.0, 1.0)):
        self._keys = []
        self._positions = []  # Parallel list of key positions for bisect
        self._domain = (0.0, 1.0)
        self.set_domain(domain, renormalize=False)

    def _normalize(self, value):
        low, high = self._domain
        return (value - low) / (high - low)

    def _unnormalize(self, value):
        low, high = self._domain
        return value * (high - low) + low

    def _rebuild_positions(self):
        self._positions = [key.position for key in self._keys]

    def add_key(self, position, color):
        """
        Insert a color key at an absolute position within the current domain.

        The key lands right before the first existing key with a strictly
        greater normalized position, or at the end if there is none.

        Args:
            position: Absolute position (same units as the domain)
            color: (r, g, b) or (r, g, b, a) with 0-255 channels
        """
        normalized = self._normalize(float(position))
        index = bisect_right(self._positions, normalized)
        self._keys.insert(index, GradientKey(normalized, _as_rgba(color)))
        self._positions.insert(index, normalized)

    def get_key(self, index):
        """Return the key at index (position is normalized)."""
        if not 0 <= index < len(self._keys):
            raise IndexError(f"Gradient key index out of range: {index}")
        return self._keys[index]

    def modify_key_color(self, index, color):
        """Replace the color of an existing key, keeping its position."""
        key = self.get_key(index)
        self._keys[index] = key._replace(color=_as_rgba(color))

    def get_num_keys(self):
        return len(self._keys)

    def __len__(self):
        return len(self._keys)

    def get_domain(self):
        return self._domain

    def set_domain(self, domain, renormalize=True):
        """
        Replace the domain keys are normalized against.

        Args:
            domain: (low, high) pair; low and high must differ
            renormalize: If True, keys keep the absolute values they
                represent. If False, keys keep their normalized positions,
                so the gradient's shape stretches over the new domain.
        """
        low, high = float(domain[0]), float(domain[1])
        if high == low:
            raise ValueError(f"Gradient domain must have a non-zero span, got {domain}")

        if renormalize:
            absolute = [self._unnormalize(key.position) for key in self._keys]
            self._domain = (low, high)
            self._keys = [
                key._replace(position=self._normalize(value))
                for key, value in zip(self._keys, absolute)
            ]
            self._rebuild_positions()
        else:
            self._domain = (low, high)

    def get_color(self, value):
        """
        Get the interpolated RGBA color for a value.

        Values before the first key clamp to the first key's color, values
        at or past the last key clamp to the last key's color. In between,
        each channel is linearly interpolated and truncated to an int.
        A gradient with no keys gives transparent black, like the kernel.

        Args:
            value: Absolute value (same units as the domain)

        Returns:
            (r, g, b, a) tuple of ints
        """
        if not self._keys:
            return (0, 0, 0, 0)
        normalized = self._normalize(value)
        index = bisect_right(self._positions, normalized)

        if index == 0:
            return self._keys[0].color
        if index == len(self._keys):
            return self._keys[-1].color

        key0 = self._keys[index - 1]
        key1 = self._keys[index]
        t = (normalized - key0.position) / (key1.position - key0.position)
        return tuple(
            int((1 - t) * c0 + t * c1)
            for c0, c1 in zip(key0.color, key1.color)
        )

    def to_arrays(self):
        """
        Pack the gradient for the compute kernels.

        Returns:
            (positions, colors, low, high) where positions is a float64
            array of normalized key positions and colors an (n, 4) uint8
            array.
        """
        positions = np.array(self._positions, dtype=np.float64)
        colors = np.array([key.color for key in self._keys], dtype=np.uint8).reshape(-1, 4)
        low, high = self._domain
        return positions, colors, low, high

    def __repr__(self):
        return f"Gradient(domain={self._domain}, keys={len(self._keys)})"
