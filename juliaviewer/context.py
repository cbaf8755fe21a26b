"""
Shared render state: viewport, frame buffer and fractal parameters.

The RenderContext is mutated by the orchestrator (the app) between frames.
At the start of every frame the renderer takes an immutable FrameJob
snapshot of it, and the worker threads only ever read that snapshot, so
edits made while a frame is in flight land in the next frame.
"""

import threading
from collections import namedtuple
from contextlib import contextmanager

import numpy as np

from .colormaps import get_default_gradient


# Everything a worker needs for one frame
FrameJob = namedtuple('FrameJob', [
    'pixels',
    'view_left', 'view_top', 'view_width', 'view_height',
    'cr', 'ci', 'max_iter', 'smoothing',
    'positions', 'colors', 'low', 'high',
])


class Viewport:
    """
    Visible rectangle of the view plane, as a center and a size.

    View coordinates are in buffer pixels at zoom level 1: after
    reset(width, height) the viewport is exactly the buffer rectangle.
    zoom_level tracks the accumulated zoom factor so drags can be scaled
    to the current magnification.
    """

    def __init__(self, width, height):
        self.center = (0.0, 0.0)
        self.size = (1.0, 1.0)
        self.zoom_level = 1.0
        self.reset(width, height)

    @property
    def left(self):
        return self.center[0] - self.size[0] * 0.5

    @property
    def top(self):
        return self.center[1] - self.size[1] * 0.5

    def reset(self, width, height):
        """Show the whole (width x height) buffer rectangle at zoom 1."""
        self.set(center=(width * 0.5, height * 0.5), size=(float(width), float(height)))
        self.zoom_level = 1.0

    def set(self, center, size):
        if size[0] == 0 or size[1] == 0:
            raise ValueError(f"Viewport size must be non-zero, got {size}")
        self.center = (float(center[0]), float(center[1]))
        self.size = (float(size[0]), float(size[1]))

    def move(self, dx, dy):
        """Pan by (dx, dy) view units."""
        self.center = (self.center[0] + dx, self.center[1] + dy)

    def zoom(self, factor):
        """Scale the visible size by factor around the center (< 1 zooms in)."""
        if factor <= 0:
            raise ValueError(f"Zoom factor must be positive, got {factor}")
        self.size = (self.size[0] * factor, self.size[1] * factor)
        self.zoom_level *= factor

    def __repr__(self):
        return f"Viewport(center={self.center}, size={self.size})"


class FrameBuffer:
    """
    Row-major RGBA frame, a (height, width, 4) uint8 numpy array.

    While a frame is being computed the renderer holds the buffer through
    shared(); resize() refuses to reallocate while any such holder exists.
    """

    def __init__(self, width, height):
        self._lock = threading.Lock()
        self._holders = 0
        self.pixels = None
        self.width = 0
        self.height = 0
        self._allocate(width, height)

    def _allocate(self, width, height):
        width, height = int(width), int(height)
        if width <= 0 or height <= 0:
            raise ValueError(f"Frame buffer size must be positive, got {width}x{height}")
        self.pixels = np.zeros((height, width, 4), dtype=np.uint8)
        self.width = width
        self.height = height

    @contextmanager
    def shared(self):
        """Hold the current allocation for the duration of a frame."""
        with self._lock:
            self._holders += 1
            pixels = self.pixels
        try:
            yield pixels
        finally:
            with self._lock:
                self._holders -= 1

    @property
    def in_use(self):
        with self._lock:
            return self._holders > 0

    def resize(self, width, height):
        """Reallocate the frame. Only allowed between frames."""
        with self._lock:
            if self._holders:
                raise RuntimeError("Cannot resize the frame buffer while a frame is being computed")
            self._allocate(width, height)

    def tobytes(self):
        return self.pixels.tobytes()


class RenderContext:
    """
    Shared render state read by the worker pool every frame.

    Attributes:
        viewport: Visible rectangle (Viewport)
        frame: Output pixels (FrameBuffer)
        gradient: Color gradient over [0, max_iter]
        constant: Julia constant c as (real, imag)
        max_iter: Iteration cap
        smoothing: Use the continuous iteration count
    """

    def __init__(self, width, height, max_iter=100, constant=(-0.8, 0.4),
                 smoothing=True, gradient=None):
        if max_iter <= 0:
            raise ValueError(f"max_iter must be positive, got {max_iter}")
        self.frame = FrameBuffer(width, height)
        self.viewport = Viewport(width, height)
        self.max_iter = int(max_iter)
        self.constant = (float(constant[0]), float(constant[1]))
        self.smoothing = bool(smoothing)
        self.gradient = gradient if gradient is not None else get_default_gradient(self.max_iter)

    @property
    def width(self):
        return self.frame.width

    @property
    def height(self):
        return self.frame.height

    def set_max_iter(self, max_iter):
        """
        Change the iteration cap.

        The gradient domain follows the cap without renormalizing, so the
        gradient keeps its shape relative to the cap.
        """
        if max_iter <= 0:
            raise ValueError(f"max_iter must be positive, got {max_iter}")
        self.max_iter = int(max_iter)
        self.gradient.set_domain((0.0, float(self.max_iter)), renormalize=False)

    def set_constant(self, real, imag):
        self.constant = (float(real), float(imag))

    def set_gradient(self, gradient):
        self.gradient = gradient

    def resize(self, width, height):
        """Reallocate the frame buffer and show the whole new rectangle."""
        self.frame.resize(width, height)
        self.viewport.reset(width, height)

    def snapshot(self, pixels):
        """Freeze the current parameters into a FrameJob writing to pixels."""
        positions, colors, low, high = self.gradient.to_arrays()
        viewport = self.viewport
        return FrameJob(
            pixels=pixels,
            view_left=viewport.left,
            view_top=viewport.top,
            view_width=viewport.size[0],
            view_height=viewport.size[1],
            cr=self.constant[0],
            ci=self.constant[1],
            max_iter=self.max_iter,
            smoothing=self.smoothing,
            positions=positions,
            colors=colors,
            low=low,
            high=high,
        )
