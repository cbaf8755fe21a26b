import threading
import time

import numpy as np
import pytest

from juliaviewer.compute import escape_time, pixel_to_world, smooth_iteration
from juliaviewer.context import RenderContext
from juliaviewer.renderer import CycleBarrier, JuliaRenderer, partition_rows, row_range

from conftest import assert_color_close


@pytest.fixture
def make_renderer():
    renderers = []

    def factory(context, num_workers):
        renderer = JuliaRenderer(context, num_workers=num_workers, poll_interval=0.005)
        renderers.append(renderer)
        return renderer.start()

    yield factory
    for renderer in renderers:
        renderer.shutdown(timeout=5)


def test_partition_of_eight_rows_over_four_workers():
    assert partition_rows(8, 4) == [(0, 2), (2, 4), (4, 6), (6, 8)]


@pytest.mark.parametrize("height", [0, 1, 7, 8, 13, 64, 101])
@pytest.mark.parametrize("count", [1, 3, 4, 16])
def test_partition_covers_every_row_once(height, count):
    bands = partition_rows(height, count)
    rows = [row for begin, end in bands for row in range(begin, end)]

    assert len(bands) == count
    assert rows == list(range(height))
    assert all(begin <= end for begin, end in bands)


def test_partition_matches_floor_split_when_divisible():
    height, count = 96, 16
    step = height // count
    for k in range(count):
        assert row_range(height, count, k) == (step * k, step * (k + 1))


def test_remainder_goes_to_first_workers():
    assert partition_rows(10, 4) == [(0, 3), (3, 6), (6, 8), (8, 10)]


def test_partition_rejects_zero_workers():
    with pytest.raises(ValueError):
        partition_rows(10, 0)


def test_barrier_single_thread_protocol():
    barrier = CycleBarrier(2)
    assert barrier.wait_start(0, timeout=0) is None

    generation = barrier.start()
    assert generation == 1
    assert barrier.in_flight
    assert barrier.wait_start(0, timeout=0) == 1
    assert barrier.wait_start(1, timeout=0.01) is None

    with pytest.raises(RuntimeError):
        barrier.start()

    barrier.arrive()
    assert not barrier.wait_finished(timeout=0.01)
    barrier.arrive()
    assert barrier.wait_finished(timeout=0)
    assert not barrier.in_flight

    with pytest.raises(RuntimeError):
        barrier.arrive()


def test_barrier_each_worker_sees_each_cycle_once():
    parties, cycles = 4, 25
    barrier = CycleBarrier(parties)
    handled = [[] for _ in range(parties)]
    stop = threading.Event()

    def worker(index):
        seen = 0
        while True:
            generation = barrier.wait_start(seen, timeout=0.005)
            if generation is None:
                if stop.is_set():
                    return
                continue
            seen = generation
            handled[index].append(generation)
            barrier.arrive()

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(parties)]
    for t in threads:
        t.start()
    for _ in range(cycles):
        barrier.start()
        assert barrier.wait_finished(timeout=5)
    stop.set()
    for t in threads:
        t.join(timeout=5)

    for record in handled:
        assert record == list(range(1, cycles + 1))


def test_single_worker_frame_matches_direct_evaluation(make_renderer):
    context = RenderContext(2, 2, max_iter=100, constant=(-0.8, 0.4), smoothing=True)
    renderer = make_renderer(context, 1)

    frame = renderer.render_frame()

    gradient = context.gradient
    view = context.viewport
    cr, ci = context.constant
    for py in range(2):
        for px in range(2):
            zr, zi = pixel_to_world(float(px), float(py), 2.0, 2.0,
                                    view.left, view.top, view.size[0], view.size[1])
            iteration, zr, zi = escape_time(zr, zi, cr, ci, context.max_iter)
            expected = gradient.get_color(smooth_iteration(iteration, zr, zi))
            assert_color_close(frame.pixels[py, px], expected)


def test_many_workers_match_single_worker(make_renderer):
    # 13 rows do not divide evenly between 4 workers
    single = RenderContext(17, 13, max_iter=60, constant=(0.285, 0.01))
    parallel = RenderContext(17, 13, max_iter=60, constant=(0.285, 0.01))
    for context in (single, parallel):
        context.viewport.zoom(0.8)
        context.viewport.move(1.5, -2.0)

    expected = make_renderer(single, 1).render_frame().pixels.copy()
    actual = make_renderer(parallel, 4).render_frame().pixels

    assert np.array_equal(actual, expected)
    assert np.all(actual[:, :, 3] >= 254)


def test_more_workers_than_rows(make_renderer):
    context = RenderContext(5, 3, max_iter=30)
    frame = make_renderer(context, 8).render_frame()
    assert np.all(frame.pixels[:, :, 3] >= 254)


def test_parameter_changes_apply_on_next_frame(make_renderer):
    context = RenderContext(12, 12, max_iter=40)
    renderer = make_renderer(context, 3)

    first = renderer.render_frame().pixels.copy()
    context.set_constant(0.0, 0.0)
    context.smoothing = False
    second = renderer.render_frame().pixels.copy()
    third = renderer.render_frame().pixels.copy()

    assert not np.array_equal(first, second)
    assert np.array_equal(second, third)


def test_resize_between_frames(make_renderer):
    context = RenderContext(8, 8, max_iter=20)
    renderer = make_renderer(context, 4)
    renderer.render_frame()

    renderer.resize(6, 10)
    frame = renderer.render_frame()

    assert frame.pixels.shape == (10, 6, 4)
    assert np.all(frame.pixels[:, :, 3] >= 254)


def test_exclusive_blocks_frames(make_renderer):
    context = RenderContext(8, 8, max_iter=20)
    renderer = make_renderer(context, 2)
    done = threading.Event()

    def render():
        renderer.render_frame()
        done.set()

    with renderer.exclusive():
        t = threading.Thread(target=render)
        t.start()
        time.sleep(0.05)
        assert not done.is_set()
        assert not context.frame.in_use

    t.join(timeout=5)
    assert done.is_set()


def test_render_requires_running_pool():
    renderer = JuliaRenderer(RenderContext(4, 4), num_workers=2)
    with pytest.raises(RuntimeError):
        renderer.render_frame()


def test_shutdown_stops_workers_promptly(make_renderer):
    renderer = make_renderer(RenderContext(4, 4), 6)
    threads = list(renderer._threads)
    assert all(t.is_alive() for t in threads)

    started = time.perf_counter()
    renderer.shutdown()
    elapsed = time.perf_counter() - started

    assert not renderer.is_running
    assert not any(t.is_alive() for t in threads)
    assert elapsed < 2.0
    with pytest.raises(RuntimeError):
        renderer.render_frame()

    renderer.shutdown()  # second call is a no-op


def test_context_manager_starts_and_stops():
    with JuliaRenderer(RenderContext(4, 4), num_workers=2, poll_interval=0.005) as renderer:
        assert renderer.is_running
        renderer.render_frame()
    assert not renderer.is_running


def test_restart_after_shutdown_renders_again(make_renderer):
    context = RenderContext(12, 9, max_iter=30)
    renderer = make_renderer(context, 3)
    first = renderer.render_frame().pixels.copy()
    renderer.shutdown(timeout=5)

    renderer.start()
    # Give idle workers time to poll the barrier before the next frame
    time.sleep(0.05)
    assert renderer.is_running
    assert all(t.is_alive() for t in renderer._threads)

    context.frame.pixels[:] = 0
    second = renderer.render_frame().pixels
    np.testing.assert_array_equal(first, second)
    assert all(t.is_alive() for t in renderer._threads)


def test_worker_failure_is_raised_in_caller(make_renderer):
    context = RenderContext(8, 8, max_iter=20)
    renderer = make_renderer(context, 2)

    def broken(index, job):
        raise ValueError(f"worker {index} broke")

    renderer._render_band = broken
    with pytest.raises(RuntimeError) as excinfo:
        renderer.render_frame()
    assert isinstance(excinfo.value.__cause__, ValueError)

    del renderer._render_band
    frame = renderer.render_frame()
    assert np.all(frame.pixels[:, :, 3] >= 254)


def test_invalid_worker_count():
    with pytest.raises(ValueError):
        JuliaRenderer(RenderContext(4, 4), num_workers=0)
