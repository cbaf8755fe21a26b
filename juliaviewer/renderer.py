"""
Parallel frame renderer: a fixed pool of worker threads behind a barrier.

The JuliaRenderer class handles:
- A fixed set of long-lived worker threads, each owning a contiguous band
  of rows of the frame buffer
- One full-frame compute pass per render_frame() call (start all workers,
  wait until every worker has finished its band)
- Cooperative shutdown: idle workers poll a running flag between waits
- Structural changes (resize) only while no frame is in flight

The per-pixel work runs in the nogil Numba kernel compute.render_rows, so
the threads run truly in parallel.
"""

import threading
from contextlib import contextmanager

from .compute import render_rows
from .logging_setup import get_logger
from .timing import Timer


logger = get_logger("renderer")


def row_range(height, count, index):
    """
    Rows [begin, end) owned by worker index out of count workers.

    Every worker gets height // count rows; the first height % count
    workers get one extra row each, so the bands cover [0, height) exactly
    once with no gaps.
    """
    base, extra = divmod(height, count)
    begin = base * index + min(index, extra)
    end = begin + base + (1 if index < extra else 0)
    return begin, end


def partition_rows(height, count):
    """Row bands for all count workers, in worker order."""
    if count <= 0:
        raise ValueError(f"Worker count must be positive, got {count}")
    return [row_range(height, count, index) for index in range(count)]


class CycleBarrier:
    """
    Reusable two-phase barrier between one coordinator and N workers.

    The coordinator opens a cycle with start(); every worker sees each cycle
    exactly once through wait_start() and reports back with arrive(). The
    coordinator blocks in wait_finished() until all N have arrived.

    Cycles are numbered. A worker passes in the last cycle number it
    handled, so it can never pick up the same cycle twice.
    """

    def __init__(self, parties):
        if parties <= 0:
            raise ValueError(f"Barrier needs at least one party, got {parties}")
        self.parties = parties
        self._cond = threading.Condition()
        self._generation = 0
        self._outstanding = 0

    @property
    def generation(self):
        with self._cond:
            return self._generation

    @property
    def in_flight(self):
        with self._cond:
            return self._outstanding > 0

    def start(self):
        """Open a new cycle. Returns its number."""
        with self._cond:
            if self._outstanding:
                raise RuntimeError("A cycle is already in flight")
            self._generation += 1
            self._outstanding = self.parties
            self._cond.notify_all()
            return self._generation

    def wait_start(self, last_generation, timeout=None):
        """
        Block until a cycle newer than last_generation opens.

        Returns:
            The new cycle number, or None if timeout expired first.
        """
        with self._cond:
            opened = self._cond.wait_for(
                lambda: self._generation != last_generation, timeout
            )
            return self._generation if opened else None

    def arrive(self):
        """Report that this worker finished the current cycle."""
        with self._cond:
            if self._outstanding <= 0:
                raise RuntimeError("arrive() called with no cycle in flight")
            self._outstanding -= 1
            if self._outstanding == 0:
                self._cond.notify_all()

    def wait_finished(self, timeout=None):
        """Block until every worker has arrived. Returns False on timeout."""
        with self._cond:
            return self._cond.wait_for(lambda: self._outstanding == 0, timeout)


class JuliaRenderer:
    """
    Owns the worker threads and drives one frame per render_frame() call.

    Usage:
        context = RenderContext(800, 600)
        with JuliaRenderer(context, num_workers=8) as renderer:
            # In your game loop:
            context.viewport.move(10, 0)
            frame = renderer.render_frame()
            display(frame.pixels)

    Attributes:
        context: The RenderContext read at the start of every frame
        num_workers: Number of worker threads (fixed)
        poll_interval: Seconds an idle worker waits before rechecking the
            running flag; bounds shutdown latency
    """

    def __init__(self, context, num_workers=16, poll_interval=0.01):
        if num_workers <= 0:
            raise ValueError(f"num_workers must be positive, got {num_workers}")
        self.context = context
        self.num_workers = int(num_workers)
        self.poll_interval = poll_interval

        self._running = threading.Event()
        self._barrier = CycleBarrier(self.num_workers)
        self._threads = []

        # Held for a whole frame, and for anything that must not overlap one
        self._cycle_lock = threading.Lock()
        self._job = None

        self._errors = []
        self._errors_lock = threading.Lock()

    @property
    def is_running(self):
        return self._running.is_set()

    def start(self):
        """Spawn the worker threads. Does nothing if already running."""
        with self._cycle_lock:
            if self._running.is_set():
                return self
            # New workers must not mistake the last finished cycle for a fresh one
            generation = self._barrier.generation
            self._running.set()
            self._threads = [
                threading.Thread(
                    target=self._worker_loop, args=(index, generation),
                    name=f"RenderWorker-{index}", daemon=True
                )
                for index in range(self.num_workers)
            ]
            for thread in self._threads:
                thread.start()
        logger.info("Started %d render workers", self.num_workers)
        return self

    def shutdown(self, timeout=None):
        """
        Stop the workers and wait for them to exit.

        Idle workers notice within poll_interval. A frame in flight is
        allowed to complete first.
        """
        with self._cycle_lock:
            if not self._running.is_set():
                return
            self._running.clear()
            for thread in self._threads:
                thread.join(timeout)
            self._threads = []
        logger.info("Render workers stopped")

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
        return False

    @contextmanager
    def exclusive(self):
        """
        Block frames for the duration of the with-block.

        Use this for edits to state the workers hold on to for a whole
        frame, such as the frame buffer allocation.
        """
        with self._cycle_lock:
            yield self.context

    def resize(self, width, height):
        """Reallocate the frame buffer between frames."""
        with self.exclusive() as context:
            with Timer("ResizeRenderTexture", logger):
                context.resize(width, height)
        logger.info("Resized frame buffer to %dx%d", width, height)

    def render_frame(self):
        """
        Compute one full frame and return the FrameBuffer.

        Takes a snapshot of the render context, releases every worker,
        and blocks until all of them finished their band. The buffer is
        safe to read once this returns.

        Raises:
            RuntimeError: If the renderer is not running, or a worker failed
        """
        with self._cycle_lock:
            if not self._running.is_set():
                raise RuntimeError("Renderer is not running; call start() first")

            frame = self.context.frame
            with frame.shared() as pixels:
                self._job = self.context.snapshot(pixels)
                self._barrier.start()
                self._barrier.wait_finished()
                self._job = None

            with self._errors_lock:
                errors, self._errors = self._errors, []
        if errors:
            raise RuntimeError(f"{len(errors)} render worker(s) failed") from errors[0]
        return frame

    def _worker_loop(self, index, seen):
        """Body of one worker thread: wait for a cycle, render the band, arrive."""
        while True:
            generation = self._barrier.wait_start(seen, self.poll_interval)
            if generation is None:
                if not self._running.is_set():
                    return
                continue

            seen = generation
            try:
                with Timer(f"RenderWorker: {index}", logger):
                    self._render_band(index, self._job)
            except Exception as exc:
                logger.exception("Render worker %d failed", index)
                with self._errors_lock:
                    self._errors.append(exc)
            finally:
                self._barrier.arrive()

    def _render_band(self, index, job):
        height = job.pixels.shape[0]
        begin, end = row_range(height, self.num_workers, index)
        if begin == end:
            return
        render_rows(
            job.pixels, begin, end,
            job.view_left, job.view_top, job.view_width, job.view_height,
            job.cr, job.ci, job.max_iter, job.smoothing,
            job.positions, job.colors, job.low, job.high
        )
