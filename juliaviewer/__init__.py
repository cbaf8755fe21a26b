"""
Julia Set Viewer Package

An interactive Julia set (z -> z^2 + c) explorer using Pygame for display
and Numba for JIT-compiled computation on a fixed pool of worker threads.

Quick Start:
    from juliaviewer import run
    run()

Or from command line:
    python -m juliaviewer

Package Structure:
    - gradient.py: Color gradient with normalized, sorted keys
    - colormaps.py: Named gradient presets (Classic, Hot, Ocean, ...)
    - compute.py: JIT-compiled per-pixel functions and the row kernel
    - context.py: Viewport, frame buffer and shared render state
    - renderer.py: Worker pool and the per-frame barrier
    - settings.py: settings.json loading and validation
    - menu.py: Interactive control panel
    - app.py: Main application and event loop

Controls:
    - Scroll: Zoom in/out toward the mouse position
    - Drag: Pan around
    - Space: Toggle smoothing
    - R: Reset to default view
    - ESC: Quit
"""

from .gradient import Gradient, GradientKey
from .colormaps import COLORMAPS, get_gradient, get_default_gradient, list_colormap_names
from .context import FrameBuffer, FrameJob, RenderContext, Viewport
from .renderer import CycleBarrier, JuliaRenderer, partition_rows, row_range
from .settings import load_settings
from .app import run, JuliaApp

__version__ = "1.0.0"
__all__ = [
    "run",
    "JuliaApp",
    "JuliaRenderer",
    "CycleBarrier",
    "partition_rows",
    "row_range",
    "RenderContext",
    "FrameBuffer",
    "FrameJob",
    "Viewport",
    "Gradient",
    "GradientKey",
    "COLORMAPS",
    "get_gradient",
    "get_default_gradient",
    "list_colormap_names",
    "load_settings",
]
