"""
Interactive control panel for the Julia set viewer.

Provides sliders for the Julia constant and the iteration cap, checkboxes
for smoothing and debug output, a color scheme dropdown, and a readout of
the current view.
"""

import sys

import pygame

from .colormaps import COLORMAPS, get_gradient


class Slider:
    """A horizontal drag slider for a float or int value."""

    def __init__(self, x, y, width, label, min_value, max_value, value, integer=False):
        self.x = x
        self.y = y
        self.width = width
        self.height = 16
        self.label = label
        self.min_value = min_value
        self.max_value = max_value
        self.integer = integer
        self.value = value
        self.dragging = False

    def get_rect(self):
        return pygame.Rect(self.x, self.y, self.width, self.height)

    def _value_at(self, mx):
        t = (mx - self.x) / self.width
        t = max(0.0, min(1.0, t))
        value = self.min_value + t * (self.max_value - self.min_value)
        return int(round(value)) if self.integer else value

    def handle_event(self, event):
        """Returns (handled, value_changed)."""
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.get_rect().collidepoint(event.pos):
                self.dragging = True
                old = self.value
                self.value = self._value_at(event.pos[0])
                return True, old != self.value

        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            if self.dragging:
                self.dragging = False
                return True, False

        elif event.type == pygame.MOUSEMOTION and self.dragging:
            old = self.value
            self.value = self._value_at(event.pos[0])
            return True, old != self.value

        return False, False

    def draw(self, screen, font, small_font):
        text = f'{self.label}: {self.value}' if self.integer else f'{self.label}: {self.value:.3f}'
        label = small_font.render(text, True, (180, 180, 180))
        screen.blit(label, (self.x, self.y - 16))

        rect = self.get_rect()
        pygame.draw.rect(screen, (55, 55, 55), rect)
        pygame.draw.rect(screen, (100, 100, 100), rect, 1)

        span = self.max_value - self.min_value
        t = (self.value - self.min_value) / span if span else 0.0
        thumb_x = int(self.x + t * self.width)
        pygame.draw.rect(screen, (200, 200, 200), (thumb_x - 3, self.y - 2, 6, self.height + 4))


class Checkbox:
    """A labelled on/off toggle."""

    def __init__(self, x, y, label, checked=False):
        self.x = x
        self.y = y
        self.size = 14
        self.label = label
        self.checked = checked

    def get_rect(self):
        return pygame.Rect(self.x, self.y, self.size, self.size)

    def handle_event(self, event):
        """Returns (handled, value_changed)."""
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.get_rect().inflate(4, 4).collidepoint(event.pos):
                self.checked = not self.checked
                return True, True
        return False, False

    def draw(self, screen, font, small_font):
        rect = self.get_rect()
        pygame.draw.rect(screen, (55, 55, 55), rect)
        pygame.draw.rect(screen, (120, 120, 120), rect, 1)
        if self.checked:
            pygame.draw.rect(screen, (120, 200, 120), rect.inflate(-6, -6))
        label = small_font.render(self.label, True, (200, 200, 200))
        screen.blit(label, (self.x + self.size + 6, self.y))


class Dropdown:
    """
    Closed, a single row showing the selection. Open, the option list
    hangs below it, one ITEM_HEIGHT row per option.
    """

    ITEM_HEIGHT = 22

    def __init__(self, x, y, width, options, selected_idx=0):
        self.x = x
        self.y = y
        self.width = width
        self.height = 24
        self.options = options
        self.selected_idx = selected_idx
        self.expanded = False
        self.hovered_idx = -1

    def get_value(self):
        return self.options[self.selected_idx]

    @property
    def list_height(self):
        """Extra height taken by the open option list (0 when closed)."""
        return len(self.options) * self.ITEM_HEIGHT if self.expanded else 0

    def button_rect(self):
        return pygame.Rect(self.x, self.y, self.width, self.height)

    def item_rect(self, index):
        top = self.y + self.height + index * self.ITEM_HEIGHT
        return pygame.Rect(self.x, top, self.width, self.ITEM_HEIGHT)

    def option_at(self, pos):
        """Index of the open-list row under pos, or -1."""
        if not self.expanded:
            return -1
        offset = pos[1] - self.y - self.height
        if not self.x <= pos[0] < self.x + self.width or offset < 0:
            return -1
        index = offset // self.ITEM_HEIGHT
        return index if index < len(self.options) else -1

    def handle_event(self, event):
        """Returns (handled, value_changed)."""
        if event.type == pygame.MOUSEMOTION:
            self.hovered_idx = self.option_at(event.pos)
            return False, False

        if event.type != pygame.MOUSEBUTTONDOWN or event.button != 1:
            return False, False

        if self.button_rect().collidepoint(event.pos):
            self.expanded = not self.expanded
            return True, False

        if not self.expanded:
            return False, False

        # Any click while open closes the list
        index = self.option_at(event.pos)
        self.expanded = False
        self.hovered_idx = -1
        if index < 0 or index == self.selected_idx:
            return True, False
        self.selected_idx = index
        return True, True

    def draw(self, screen, font, small_font):
        button = self.button_rect()
        pygame.draw.rect(screen, (55, 55, 55), button)
        pygame.draw.rect(screen, (100, 100, 100), button, 1)
        screen.blit(small_font.render(self.get_value(), True, (220, 220, 220)),
                    (button.x + 8, button.y + 5))
        screen.blit(small_font.render('^' if self.expanded else 'v', True, (150, 150, 150)),
                    (button.right - 18, button.y + 5))

        if not self.expanded:
            return
        for index, name in enumerate(self.options):
            rect = self.item_rect(index)
            if index == self.selected_idx:
                fill, ink = (70, 100, 70), (255, 255, 255)
            else:
                fill = (65, 65, 65) if index == self.hovered_idx else (50, 50, 50)
                ink = (180, 180, 180)
            pygame.draw.rect(screen, fill, rect)
            pygame.draw.rect(screen, (80, 80, 80), rect, 1)
            screen.blit(small_font.render(name, True, ink), (rect.x + 8, rect.y + 4))


class Menu:
    """
    Settings panel anchored to the top-right corner of the window.

    After handle_event reports a change, the app reads the public
    attributes (constant, max_iter, smoothing, debug_output,
    colormap_name) and applies them to the render context between frames.
    """

    def __init__(self, x, y, width=260, max_iter=100, max_iter_range=(1, 1000),
                 constant=(-0.8, 0.4), smoothing=True, debug_output=False,
                 colormap_name='Classic'):
        self.x = x
        self.y = y
        self.width = width
        self.expanded = True

        self.font = None
        self.small_font = None

        # Current settings
        self.max_iter = max_iter
        self.max_iter_range = max_iter_range
        self.constant = tuple(constant)
        self.smoothing = smoothing
        self.debug_output = debug_output
        self.colormap_name = colormap_name
        self.colormap_names = list(COLORMAPS.keys())

        # View readout, refreshed by the app every frame
        self.view_lines = []

        # (colormap_name, width) -> rendered preview strip
        self._preview_cache = {}

        self._build_widgets()

    def init_fonts(self):
        pygame.font.init()
        self.font = pygame.font.SysFont('Arial', 14)
        self.small_font = pygame.font.SysFont('Arial', 12)

    def _build_widgets(self):
        left = self.x + 8
        inner = self.width - 16
        top = self.y + 130

        self.debug_checkbox = Checkbox(left, top, 'Debug output', self.debug_output)
        self.smoothing_checkbox = Checkbox(left, top + 22, 'Apply smoothing', self.smoothing)
        self.cr_slider = Slider(left, top + 64, inner, 'C real', -1.0, 1.0, self.constant[0])
        self.ci_slider = Slider(left, top + 102, inner, 'C imag', -1.0, 1.0, self.constant[1])
        self.iter_slider = Slider(
            left, top + 140, inner, 'Max iterations',
            self.max_iter_range[0], self.max_iter_range[1], self.max_iter, integer=True
        )
        selected_color = (self.colormap_names.index(self.colormap_name)
                          if self.colormap_name in self.colormap_names else 0)
        self.color_dropdown = Dropdown(left, top + 182, inner, self.colormap_names, selected_color)

    def move_to(self, x, y):
        """Re-anchor the panel (after a window resize)."""
        self.x = x
        self.y = y
        self._build_widgets()

    def get_rect(self):
        """Get the bounding rectangle of the menu."""
        if not self.expanded:
            return pygame.Rect(self.x, self.y, 120, 24)
        return pygame.Rect(self.x, self.y, self.width, 370 + self.color_dropdown.list_height)

    def set_view_info(self, viewport):
        """Refresh the view readout lines from a Viewport."""
        self.view_lines = [
            f'Center: {viewport.center[0]:f}, {viewport.center[1]:f}',
            f'Size: {viewport.size[0]:f}, {viewport.size[1]:f}',
            f'Zoom: {viewport.zoom_level:.18f}',
            f'Double epsilon: {sys.float_info.epsilon:.18f}',
        ]

    def handle_event(self, event):
        """
        Handle a pygame event.
        Returns (handled, changed).
        """
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            toggle_rect = pygame.Rect(self.x, self.y, 120, 24)
            if toggle_rect.collidepoint(event.pos):
                self.expanded = not self.expanded
                return True, False

        if not self.expanded:
            return False, False

        # Dropdown first so its open list sits on top of everything else
        handled, changed = self.color_dropdown.handle_event(event)
        if handled:
            if changed:
                self.colormap_name = self.color_dropdown.get_value()
            return True, changed

        handled, changed = self.debug_checkbox.handle_event(event)
        if handled:
            self.debug_output = self.debug_checkbox.checked
            return True, changed

        handled, changed = self.smoothing_checkbox.handle_event(event)
        if handled:
            self.smoothing = self.smoothing_checkbox.checked
            return True, changed

        for slider in (self.cr_slider, self.ci_slider, self.iter_slider):
            handled, changed = slider.handle_event(event)
            if handled:
                self.constant = (self.cr_slider.value, self.ci_slider.value)
                self.max_iter = self.iter_slider.value
                return True, changed

        if event.type == pygame.MOUSEBUTTONDOWN and self.get_rect().collidepoint(event.pos):
            return True, False

        return False, False

    def set_smoothing(self, enabled):
        """Sync the checkbox when smoothing is toggled from the keyboard."""
        self.smoothing = enabled
        self.smoothing_checkbox.checked = enabled

    def draw(self, screen):
        if self.font is None:
            self.init_fonts()

        self._draw_toggle_button(screen)

        if self.expanded:
            self._draw_expanded_menu(screen)

    def _draw_toggle_button(self, screen):
        toggle_rect = pygame.Rect(self.x, self.y, 120, 24)
        pygame.draw.rect(screen, (60, 60, 60), toggle_rect)
        pygame.draw.rect(screen, (120, 120, 120), toggle_rect, 1)

        toggle_text = self.font.render('Toggle Settings', True, (200, 200, 200))
        screen.blit(toggle_text, (self.x + 8, self.y + 4))

    def _draw_expanded_menu(self, screen):
        menu_rect = self.get_rect()
        panel = pygame.Rect(menu_rect.x, menu_rect.y + 28, menu_rect.width, menu_rect.height - 28)
        pygame.draw.rect(screen, (40, 40, 40), panel)
        pygame.draw.rect(screen, (100, 100, 100), panel, 1)

        # ---- View ----
        current_y = panel.y + 8
        title = self.small_font.render('View', True, (220, 220, 220))
        screen.blit(title, (self.x + 8, current_y))
        current_y += 18
        for line in self.view_lines:
            text = self.small_font.render(line, True, (160, 160, 160))
            screen.blit(text, (self.x + 12, current_y))
            current_y += 16

        # ---- Controls ----
        self.debug_checkbox.draw(screen, self.font, self.small_font)
        self.smoothing_checkbox.draw(screen, self.font, self.small_font)
        self.cr_slider.draw(screen, self.font, self.small_font)
        self.ci_slider.draw(screen, self.font, self.small_font)
        self.iter_slider.draw(screen, self.font, self.small_font)

        # ---- Color Scheme ----
        label = self.small_font.render('Color Scheme:', True, (180, 180, 180))
        screen.blit(label, (self.x + 8, self.color_dropdown.y - 16))

        # Preview strip of the selected scheme (only if dropdown not expanded)
        if not self.color_dropdown.expanded:
            preview_x = self.x + 8
            preview_y = self.color_dropdown.y + self.color_dropdown.height + 6
            preview_w = self.width - 16
            screen.blit(self.preview_surface(preview_w), (preview_x, preview_y))

        self.color_dropdown.draw(screen, self.font, self.small_font)

    def preview_surface(self, width, height=12):
        """Strip showing the selected color scheme, built once per scheme and width."""
        key = (self.colormap_name, width)
        surface = self._preview_cache.get(key)
        if surface is None:
            gradient = get_gradient(self.colormap_name, width)
            surface = pygame.Surface((width, height))
            for px in range(width):
                color = gradient.get_color(px)
                pygame.draw.line(surface, color[:3], (px, 0), (px, height - 1))
            self._preview_cache[key] = surface
        return surface

    def point_in_menu(self, pos):
        """Check if a point is inside the menu."""
        return self.get_rect().collidepoint(pos)
