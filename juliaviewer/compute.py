"""
Julia set computation functions using Numba JIT compilation.

This module contains all the performance-critical per-pixel code. Every
function is compiled in nopython mode and can be called from plain Python
as well (the tests do). The row kernel is compiled with nogil=True so the
worker threads in renderer.py really run in parallel.

Pipeline for one pixel:
    pixel (x, y) --map_range--> view coordinates --pixel_to_world-->
    z0 --escape_time--> (i, z) --smooth_iteration--> value
    --gradient_lookup--> RGBA bytes in the frame buffer

The recurrence is fixed: z <- z^2 + c, escape radius 2.
"""

import numpy as np
from numba import jit


ESCAPE_RADIUS_SQUARED = 4.0


@jit(nopython=True, cache=True)
def map_range(value, x0, y0, x1, y1):
    """
    Linearly remap value from the range [x0, y0] onto [x1, y1].

    map_range(x0, ...) == x1 and map_range(y0, ...) == y1.
    x0 == y0 is not allowed.
    """
    return x1 + (value - x0) / (y0 - x0) * (y1 - x1)


@jit(nopython=True, cache=True)
def pixel_to_world(px, py, width, height, view_left, view_top, view_width, view_height):
    """
    Convert a buffer pixel into a point of the complex plane.

    The pixel is first mapped into the viewport rectangle, then centered on
    the buffer and scaled so the buffer's height spans 2 world units.

    Returns:
        (zr, zi): Real and imaginary parts of the starting point
    """
    vx = map_range(px, 0.0, width, view_left, view_left + view_width)
    vy = map_range(py, 0.0, height, view_top, view_top + view_height)
    scale = 2.0 / height
    return (vx - width * 0.5) * scale, (vy - height * 0.5) * scale


@jit(nopython=True, cache=True)
def escape_time(zr, zi, cr, ci, max_iter):
    """
    Iterate z <- z^2 + c until |z| >= 2 or max_iter is reached.

    Args:
        zr, zi: Starting point z0
        cr, ci: Julia constant c
        max_iter: Iteration cap

    Returns:
        (iteration, zr, zi): The stopping iteration count (max_iter if the
        point never escaped) and the final z.
    """
    iteration = 0
    while iteration < max_iter:
        zr, zi = zr * zr - zi * zi + cr, 2.0 * zr * zi + ci
        if zr * zr + zi * zi >= ESCAPE_RADIUS_SQUARED:
            break
        iteration += 1
    return iteration, zr, zi


@jit(nopython=True, cache=True)
def smooth_iteration(iteration, zr, zi):
    """
    Continuous (renormalized) iteration count, removes color banding.

    log2(|z|) is clamped to at least 1 so points that stopped inside the
    escape radius keep their integer count.
    """
    length = np.sqrt(zr * zr + zi * zi)
    return iteration - np.log2(max(np.log2(length), 1.0))


@jit(nopython=True, cache=True)
def gradient_lookup(value, positions, colors, low, high, out):
    """
    Write the gradient color for value into out (4 uint8 channels).

    Same rules as Gradient.get_color: clamp below the first key, clamp at
    or past the last key, linear interpolation truncated to int otherwise.

    Args:
        value: Absolute value in domain units
        positions: Sorted normalized key positions (float64)
        colors: (n, 4) uint8 key colors
        low, high: Gradient domain
        out: Output array of 4 uint8 channels (modified in place)
    """
    n = positions.shape[0]
    if n == 0:
        for ch in range(4):
            out[ch] = 0
        return

    v = (value - low) / (high - low)

    # First key with a position strictly greater than v
    lo = 0
    hi = n
    while lo < hi:
        mid = (lo + hi) // 2
        if v < positions[mid]:
            hi = mid
        else:
            lo = mid + 1

    if lo == 0:
        for ch in range(4):
            out[ch] = colors[0, ch]
    elif lo == n:
        for ch in range(4):
            out[ch] = colors[n - 1, ch]
    else:
        p0 = positions[lo - 1]
        p1 = positions[lo]
        t = (v - p0) / (p1 - p0)
        for ch in range(4):
            out[ch] = np.uint8(int((1 - t) * colors[lo - 1, ch] + t * colors[lo, ch]))


@jit(nopython=True, cache=True)
def shade_pixel(zr, zi, cr, ci, max_iter, smoothing, positions, colors, low, high, out):
    """Run the escape-time iteration for z0 and write its color into out."""
    iteration, zr, zi = escape_time(zr, zi, cr, ci, max_iter)
    if smoothing:
        value = smooth_iteration(iteration, zr, zi)
    else:
        value = float(iteration)
    gradient_lookup(value, positions, colors, low, high, out)


@jit(nopython=True, nogil=True, cache=True)
def render_rows(pixels, row_begin, row_end,
                view_left, view_top, view_width, view_height,
                cr, ci, max_iter, smoothing,
                positions, colors, low, high):
    """
    Compute every pixel in rows [row_begin, row_end) of the frame buffer.

    Releases the GIL, so several threads can call this concurrently as long
    as their row ranges do not overlap.

    Args:
        pixels: (height, width, 4) uint8 frame buffer (modified in place)
        row_begin, row_end: Row range owned by the caller
        view_left, view_top, view_width, view_height: Viewport rectangle
        cr, ci: Julia constant c
        max_iter: Iteration cap
        smoothing: Use the continuous iteration count
        positions, colors, low, high: Packed gradient (Gradient.to_arrays)
    """
    height = pixels.shape[0]
    width = pixels.shape[1]
    fw = float(width)
    fh = float(height)

    for py in range(row_begin, row_end):
        for px in range(width):
            zr, zi = pixel_to_world(float(px), float(py), fw, fh,
                                    view_left, view_top, view_width, view_height)
            shade_pixel(zr, zi, cr, ci, max_iter, smoothing,
                        positions, colors, low, high, pixels[py, px])


def warmup_jit():
    """
    Warm up JIT compilation with a tiny dummy frame.

    Call this once at startup so the first real frame does not stall on
    compilation.
    """
    pixels = np.zeros((4, 4, 4), dtype=np.uint8)
    positions = np.array([0.0, 1.0], dtype=np.float64)
    colors = np.array([[0, 0, 0, 255], [255, 255, 255, 255]], dtype=np.uint8)
    for smoothing in (True, False):
        render_rows(pixels, 0, 4, 0.0, 0.0, 4.0, 4.0, -0.8, 0.4, 10, smoothing,
                    positions, colors, 0.0, 10.0)
