"""
Main application module for the Julia set viewer.

Contains the JuliaApp class which handles:
- Window setup and main loop
- User input (zoom, pan, resize, keyboard)
- Driving one renderer frame per displayed frame
- Applying control panel edits between frames
"""

import time

import pygame

from .colormaps import get_gradient
from .compute import warmup_jit
from .context import RenderContext
from .logging_setup import debug_output_enabled, get_logger, set_debug_output
from .menu import Menu
from .renderer import JuliaRenderer
from .settings import load_settings, normalise_settings
from .timing import Timer


logger = get_logger("app")


class JuliaApp:
    """
    Main application class for the Julia set viewer.

    Handles the pygame window and event loop, and is the only thread that
    mutates the render context: every edit happens between two
    render_frame() calls.
    """

    TITLE = "Fractal Renderer"
    DRAG_ZOOM_PULL = 0.2  # Fraction of the way the view moves toward the cursor on zoom-in
    MENU_WIDTH = 260

    def __init__(self, settings=None):
        """
        Initialize the application.

        Args:
            settings: Settings dict as returned by settings.load_settings
                (default: the packaged settings.json)
        """
        self.settings = settings or load_settings()
        self.width, self.height = self.settings['window_size']
        self.zoom_step = self.settings['zoom_step']

        # Pygame state (initialized in run())
        self.screen = None
        self.clock = None

        # Components
        self.context = None
        self.renderer = None
        self.menu = None

        # Input state
        self.dragging = False
        self.drag_pos = None

        # FPS counter
        self.fps = 0
        self.frames_this_second = 0
        self.fps_started = 0.0

        self.running = False

    def run(self):
        """Run the application main loop."""
        self._init_pygame()
        self._init_components()
        try:
            self.running = True
            while self.running:
                with Timer("Main Loop", logger):
                    self._handle_events()
                    if not self.running:
                        break
                    self._render()
                    self._draw()
                    self._update_fps()
                self.clock.tick(self.settings['frame_rate_limit'])
        finally:
            logger.info("Cleanup...")
            if self.renderer is not None:
                self.renderer.shutdown()
            pygame.quit()

    def _init_pygame(self):
        """Initialize pygame and create window."""
        logger.info("Creating window...")
        pygame.init()
        self.screen = pygame.display.set_mode((self.width, self.height), pygame.RESIZABLE)
        pygame.display.set_caption(self.TITLE)
        self.clock = pygame.time.Clock()

    def _init_components(self):
        """Build the render context, renderer and control panel."""
        s = self.settings
        self.context = RenderContext(
            self.width, self.height,
            max_iter=s['max_iter'],
            constant=s['constant'],
            smoothing=s['smoothing'],
            gradient=get_gradient(s['colormap'], s['max_iter']),
        )

        gradient = self.context.gradient
        for i in range(gradient.get_num_keys()):
            key = gradient.get_key(i)
            logger.info("Key %d: %f, %d, %d, %d", i, key.position, *key.color[:3])

        pygame.display.set_caption("Compiling (first run only)...")
        warmup_jit()
        pygame.display.set_caption(self.TITLE)

        logger.info("Parallel count: %d", s['num_workers'])
        self.renderer = JuliaRenderer(
            self.context, num_workers=s['num_workers'], poll_interval=s['poll_interval']
        )
        self.renderer.start()

        self.menu = Menu(
            self.width - self.MENU_WIDTH - 10, 10, width=self.MENU_WIDTH,
            max_iter=s['max_iter'], max_iter_range=s['max_iter_range'],
            constant=s['constant'], smoothing=s['smoothing'],
            debug_output=debug_output_enabled(), colormap_name=s['colormap'],
        )
        self.fps_started = time.perf_counter()
        logger.info("Starting rendering loop...")

    def _handle_events(self):
        """Process all pending pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
                continue

            if event.type == pygame.VIDEORESIZE:
                self._handle_resize(event.w, event.h)
                continue

            # Menu gets first crack at events
            menu_handled, changed = self.menu.handle_event(event)
            if changed:
                self._apply_menu_settings()
            if menu_handled:
                continue

            if event.type == pygame.MOUSEWHEEL:
                self._handle_zoom(event)
            elif event.type == pygame.MOUSEBUTTONDOWN:
                self._handle_mouse_down(event)
            elif event.type == pygame.MOUSEBUTTONUP:
                self._handle_mouse_up(event)
            elif event.type == pygame.MOUSEMOTION:
                self._handle_mouse_motion(event)
            elif event.type == pygame.KEYDOWN:
                self._handle_key(event)

    def _handle_resize(self, width, height):
        """Reallocate the frame buffer for the new window size."""
        if width <= 0 or height <= 0:
            return  # Minimized
        logger.info("Resizing...")
        self.width, self.height = width, height
        self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)
        self.renderer.resize(width, height)
        self.menu.move_to(width - self.MENU_WIDTH - 10, 10)

    def _apply_menu_settings(self):
        """Apply changed settings from the control panel."""
        context = self.context
        context.set_constant(*self.menu.constant)
        context.smoothing = self.menu.smoothing
        if self.menu.debug_output != debug_output_enabled():
            set_debug_output(self.menu.debug_output)

        if self.menu.max_iter != context.max_iter:
            context.set_max_iter(self.menu.max_iter)

        if self.menu.colormap_name != self.settings['colormap']:
            context.set_gradient(get_gradient(self.menu.colormap_name, context.max_iter))
            self.settings['colormap'] = self.menu.colormap_name

    def _mouse_in_view(self, pos):
        """Convert a window pixel into view coordinates."""
        view = self.context.viewport
        vx = view.left + pos[0] / self.width * view.size[0]
        vy = view.top + pos[1] / self.height * view.size[1]
        return vx, vy

    def _handle_zoom(self, event):
        """Handle mouse wheel zoom (scroll up = zoom in, toward the cursor)."""
        view = self.context.viewport
        mx, my = self._mouse_in_view(pygame.mouse.get_pos())
        dx = mx - view.center[0]
        dy = my - view.center[1]

        zoom = max(1.0 - event.y * self.zoom_step, self.zoom_step)
        if zoom < 1.0:
            view.move(dx * self.DRAG_ZOOM_PULL, dy * self.DRAG_ZOOM_PULL)
        view.zoom(zoom)

    def _handle_mouse_down(self, event):
        """Handle mouse button press."""
        if event.button == 1:
            self.dragging = True
            self.drag_pos = event.pos

    def _handle_mouse_up(self, event):
        """Handle mouse button release."""
        if event.button == 1:
            self.dragging = False

    def _handle_mouse_motion(self, event):
        """Pan while dragging, scaled by the current zoom."""
        if self.dragging and self.drag_pos:
            view = self.context.viewport
            dx = self.drag_pos[0] - event.pos[0]
            dy = self.drag_pos[1] - event.pos[1]
            view.move(dx * view.zoom_level, dy * view.zoom_level)
            self.drag_pos = event.pos

    def _handle_key(self, event):
        """Handle keyboard input."""
        if event.key == pygame.K_ESCAPE:
            self.running = False
        elif event.key == pygame.K_SPACE:
            self.context.smoothing = not self.context.smoothing
            self.menu.set_smoothing(self.context.smoothing)
        elif event.key == pygame.K_r:
            # Reset to default view
            self.context.viewport.reset(self.width, self.height)

    def _render(self):
        """Compute one frame with the worker pool."""
        self.renderer.render_frame()

    def _draw(self):
        """Draw the current frame."""
        with Timer("DrawRenderContext", logger):
            frame = self.context.frame
            surface = pygame.image.frombuffer(frame.tobytes(), (frame.width, frame.height), 'RGBA')
            self.screen.fill((0, 0, 0))
            self.screen.blit(surface, (0, 0))

        self.menu.set_view_info(self.context.viewport)
        self.menu.draw(self.screen)

        pygame.display.flip()

    def _update_fps(self):
        """Count frames; refresh the title once per second."""
        self.frames_this_second += 1
        now = time.perf_counter()
        if now - self.fps_started > 1.0:
            self.fps = self.frames_this_second
            pygame.display.set_caption(f"{self.TITLE} ({self.fps}FPS)")
            self.frames_this_second = 0
            self.fps_started = now


def run(width=None, height=None, max_iter=None, num_workers=None, settings=None):
    """
    Run the Julia set viewer.

    Args:
        width: Window width (default from settings.json)
        height: Window height (default from settings.json)
        max_iter: Iteration cap (default from settings.json)
        num_workers: Render worker threads (default from settings.json)
        settings: Settings dict to start from (default: load_settings())
    """
    settings = dict(settings or load_settings())
    if width:
        settings['window_size'] = [width, settings['window_size'][1]]
    if height:
        settings['window_size'] = [settings['window_size'][0], height]
    if max_iter:
        settings['max_iter'] = max_iter
    if num_workers:
        settings['num_workers'] = num_workers
    settings = normalise_settings(settings)

    app = JuliaApp(settings)
    try:
        app.run()
    except KeyboardInterrupt:
        logger.info("Interrupted")
