import numpy as np
import pytest

from juliaviewer.context import FrameBuffer, FrameJob, RenderContext, Viewport


def test_viewport_reset_covers_buffer():
    view = Viewport(1200, 800)

    assert view.center == (600.0, 400.0)
    assert view.size == (1200.0, 800.0)
    assert (view.left, view.top) == (0.0, 0.0)
    assert view.zoom_level == 1.0


def test_viewport_move_and_zoom():
    view = Viewport(100, 50)
    view.move(10, -5)
    view.zoom(0.5)

    assert view.center == (60.0, 20.0)
    assert view.size == (50.0, 25.0)
    assert view.left == pytest.approx(35.0)
    assert view.top == pytest.approx(7.5)
    assert view.zoom_level == 0.5

    view.reset(100, 50)
    assert view.center == (50.0, 25.0)
    assert view.zoom_level == 1.0


def test_viewport_rejects_degenerate_sizes():
    view = Viewport(10, 10)
    with pytest.raises(ValueError):
        view.set(center=(0, 0), size=(0, 10))
    with pytest.raises(ValueError):
        view.zoom(0)
    with pytest.raises(ValueError):
        view.zoom(-1.5)
    assert view.size == (10.0, 10.0)


def test_frame_buffer_layout():
    frame = FrameBuffer(5, 3)

    assert frame.pixels.shape == (3, 5, 4)
    assert frame.pixels.dtype == np.uint8
    assert (frame.width, frame.height) == (5, 3)
    assert len(frame.tobytes()) == 5 * 3 * 4


def test_frame_buffer_resize():
    frame = FrameBuffer(5, 3)
    frame.resize(8, 2)

    assert frame.pixels.shape == (2, 8, 4)
    assert (frame.width, frame.height) == (8, 2)


@pytest.mark.parametrize("width, height", [(0, 3), (3, 0), (-1, 5)])
def test_frame_buffer_rejects_empty_sizes(width, height):
    with pytest.raises(ValueError):
        FrameBuffer(width, height)


def test_frame_buffer_cannot_resize_while_shared():
    frame = FrameBuffer(4, 4)

    with frame.shared() as pixels:
        assert frame.in_use
        assert pixels is frame.pixels
        with pytest.raises(RuntimeError):
            frame.resize(2, 2)

    assert not frame.in_use
    frame.resize(2, 2)
    assert frame.pixels.shape == (2, 2, 4)


def test_render_context_defaults():
    context = RenderContext(40, 30)

    assert (context.width, context.height) == (40, 30)
    assert context.max_iter == 100
    assert context.constant == (-0.8, 0.4)
    assert context.smoothing is True
    assert context.gradient.get_num_keys() == 4
    assert context.gradient.get_domain() == (0.0, 100.0)


def test_set_max_iter_stretches_gradient_domain():
    context = RenderContext(10, 10, max_iter=100)
    before = [context.gradient.get_key(i).position for i in range(4)]

    context.set_max_iter(250)

    assert context.max_iter == 250
    assert context.gradient.get_domain() == (0.0, 250.0)
    assert [context.gradient.get_key(i).position for i in range(4)] == before
    assert context.gradient.get_color(250) == (0, 0, 255, 255)


def test_set_max_iter_rejects_non_positive():
    context = RenderContext(10, 10)
    with pytest.raises(ValueError):
        context.set_max_iter(0)
    assert context.max_iter == 100


def test_resize_resets_viewport():
    context = RenderContext(10, 10)
    context.viewport.zoom(0.5)
    context.resize(30, 20)

    assert context.frame.pixels.shape == (20, 30, 4)
    assert context.viewport.size == (30.0, 20.0)
    assert context.viewport.center == (15.0, 10.0)


def test_snapshot_freezes_parameters():
    context = RenderContext(16, 8, max_iter=50, constant=(0.1, -0.2), smoothing=False)
    context.viewport.move(2, 1)

    job = context.snapshot(context.frame.pixels)

    assert isinstance(job, FrameJob)
    assert job.pixels is context.frame.pixels
    assert (job.view_left, job.view_top) == (2.0, 1.0)
    assert (job.view_width, job.view_height) == (16.0, 8.0)
    assert (job.cr, job.ci) == (0.1, -0.2)
    assert job.max_iter == 50
    assert job.smoothing is False
    assert (job.low, job.high) == (0.0, 50.0)

    context.set_constant(0.5, 0.5)
    context.gradient.add_key(25, (1, 2, 3))
    assert (job.cr, job.ci) == (0.1, -0.2)
    assert job.positions.shape == (4,)
