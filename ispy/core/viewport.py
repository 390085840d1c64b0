"""Viewport math: where a level image sits on the canvas and how to map points back.

Coordinates come in two spaces. *Image* space is the pixel grid of the
decoded source image; *canvas* space is the display surface the player sees.
The forward transform used for drawing is::

    canvas = origin + image * scale - pan

where ``origin`` centers an axis that fits inside the canvas and ``pan`` is the
scroll offset into the scaled image on an axis that does not fit. Hit tests
use the exact inverse, so nothing is fudged after the fact.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional, Tuple

from ispy.core.config import GameConfig
from ispy.core.geometry import Point, Rect, Size, is_degenerate

logger = logging.getLogger(__name__)

_DEFAULTS = GameConfig()
DEFAULT_DESKTOP_ZOOM = _DEFAULTS.default_desktop_zoom
DESKTOP_BREAKPOINT = _DEFAULTS.desktop_breakpoint
REFERENCE_SIZE: Size = (_DEFAULTS.reference_width, _DEFAULTS.reference_height)

# Overshoot below this (float noise from fitting) still counts as fitting.
_FIT_EPSILON = 1e-6


def _overflows(display: float, canvas: float) -> bool:
    return display - canvas > _FIT_EPSILON


@dataclass(frozen=True)
class Layout:
    """Result of fitting an image into a canvas."""

    scale: float
    display_size: Size
    origin: Point
    canvas_size: Size

    @property
    def pan_range(self) -> Size:
        """Largest valid pan per axis; 0 on an axis that fits inside the canvas."""
        can_x, can_y = self.pannable
        return (
            self.display_size[0] - self.canvas_size[0] if can_x else 0.0,
            self.display_size[1] - self.canvas_size[1] if can_y else 0.0,
        )

    @property
    def pannable(self) -> Tuple[bool, bool]:
        return (
            _overflows(self.display_size[0], self.canvas_size[0]),
            _overflows(self.display_size[1], self.canvas_size[1]),
        )


def compute_layout(
    image_size: Size,
    canvas_size: Size,
    zoom_factor: float = DEFAULT_DESKTOP_ZOOM,
    reference_size: Size = REFERENCE_SIZE,
    desktop_breakpoint: float = DESKTOP_BREAKPOINT,
) -> Optional[Layout]:
    """Fit ``image_size`` into ``canvas_size``.

    The image is fitted, aspect preserved, into the canvas capped at the
    reference desktop size. From ``desktop_breakpoint`` canvas width upward
    ``zoom_factor`` multiplies the result, which is what makes large windows
    pannable. Returns ``None`` when either size is degenerate.
    """
    if is_degenerate(image_size) or is_degenerate(canvas_size):
        return None

    image_w, image_h = float(image_size[0]), float(image_size[1])
    canvas_w, canvas_h = float(canvas_size[0]), float(canvas_size[1])
    fit_w = min(canvas_w, float(reference_size[0]))
    fit_h = min(canvas_h, float(reference_size[1]))

    scale = min(fit_w / image_w, fit_h / image_h)
    if canvas_w >= desktop_breakpoint and zoom_factor > 0:
        scale *= zoom_factor

    display_w = image_w * scale
    display_h = image_h * scale
    origin_x = 0.0 if _overflows(display_w, canvas_w) else (canvas_w - display_w) / 2.0
    origin_y = 0.0 if _overflows(display_h, canvas_h) else (canvas_h - display_h) / 2.0

    return Layout(
        scale=scale,
        display_size=(display_w, display_h),
        origin=(origin_x, origin_y),
        canvas_size=(canvas_w, canvas_h),
    )


def _clamp(value: float, upper: float) -> float:
    return max(0.0, min(float(value), upper))


class Viewport:
    """Layout plus pan state for one level image.

    The initial pan is randomized once per viewport. Resizes keep the current
    pan and only re-clamp it.
    """

    def __init__(
        self,
        image_size: Size,
        canvas_size: Size,
        zoom_factor: float = DEFAULT_DESKTOP_ZOOM,
        reference_size: Size = REFERENCE_SIZE,
        desktop_breakpoint: float = DESKTOP_BREAKPOINT,
    ) -> None:
        self._image_size: Size = (float(image_size[0]), float(image_size[1]))
        self._zoom_factor = zoom_factor
        self._reference_size = reference_size
        self._desktop_breakpoint = desktop_breakpoint
        self._canvas_size: Size = (0.0, 0.0)
        self._layout: Optional[Layout] = None
        self._pan: Point = (0.0, 0.0)
        self._randomized = False
        self._pending_rng: Optional[random.Random] = None
        self.resize(canvas_size)

    @property
    def layout(self) -> Optional[Layout]:
        return self._layout

    @property
    def image_size(self) -> Size:
        return self._image_size

    @property
    def canvas_size(self) -> Size:
        return self._canvas_size

    @property
    def zoom_factor(self) -> float:
        return self._zoom_factor

    @property
    def scale(self) -> float:
        return self._layout.scale if self._layout else 0.0

    @property
    def pan(self) -> Point:
        return self._pan

    @property
    def pan_range(self) -> Size:
        return self._layout.pan_range if self._layout else (0.0, 0.0)

    @property
    def pannable(self) -> Tuple[bool, bool]:
        return self._layout.pannable if self._layout else (False, False)

    def clamp_pan(self, offset: Point) -> Point:
        max_x, max_y = self.pan_range
        return (_clamp(offset[0], max_x), _clamp(offset[1], max_y))

    def set_pan(self, offset: Point) -> Point:
        """Clamp ``offset`` per axis into the valid range, store and return it."""
        self._pan = self.clamp_pan(offset)
        return self._pan

    def pan_by(self, dx: float, dy: float) -> Point:
        return self.set_pan((self._pan[0] + dx, self._pan[1] + dy))

    def randomize_initial_pan(self, rng: Optional[random.Random] = None) -> Point:
        """Pick a uniform starting pan within the valid range. Effective once."""
        if self._randomized or self._pending_rng is not None:
            logger.debug("randomize_initial_pan() ignored: already chosen")
            return self._pan
        rng = rng or random.Random()
        if self._layout is None:
            self._pending_rng = rng
            return self._pan
        self._randomized = True
        max_x, max_y = self.pan_range
        return self.set_pan((rng.uniform(0.0, max_x), rng.uniform(0.0, max_y)))

    def resize(self, canvas_size: Size) -> None:
        """Recompute the layout for a new canvas, keeping the current pan where valid."""
        layout = compute_layout(
            self._image_size,
            canvas_size,
            self._zoom_factor,
            self._reference_size,
            self._desktop_breakpoint,
        )
        if layout is None:
            logger.debug("resize to %s deferred: degenerate size", canvas_size)
            return
        self._canvas_size = (float(canvas_size[0]), float(canvas_size[1]))
        self._layout = layout
        self.set_pan(self._pan)
        if self._pending_rng is not None:
            rng, self._pending_rng = self._pending_rng, None
            self.randomize_initial_pan(rng)

    def contains_canvas_point(self, point: Point) -> bool:
        if self._layout is None:
            return False
        width, height = self._canvas_size
        return 0.0 <= point[0] <= width and 0.0 <= point[1] <= height

    def canvas_to_image(self, point: Point) -> Optional[Point]:
        layout = self._layout
        if layout is None:
            return None
        return (
            (point[0] - layout.origin[0] + self._pan[0]) / layout.scale,
            (point[1] - layout.origin[1] + self._pan[1]) / layout.scale,
        )

    def image_to_canvas(self, point: Point) -> Optional[Point]:
        layout = self._layout
        if layout is None:
            return None
        return (
            layout.origin[0] + point[0] * layout.scale - self._pan[0],
            layout.origin[1] + point[1] * layout.scale - self._pan[1],
        )

    def image_rect_to_canvas(self, rect: Rect) -> Optional[Rect]:
        top_left = self.image_to_canvas((rect.x, rect.y))
        if top_left is None:
            return None
        return Rect(top_left[0], top_left[1], rect.width * self.scale, rect.height * self.scale)

    def image_bounds(self) -> Optional[Rect]:
        """Canvas-space rectangle covered by the whole scaled image."""
        return self.image_rect_to_canvas(Rect(0.0, 0.0, self._image_size[0], self._image_size[1]))

    def visible_source_rect(self, shake_x: float = 0.0) -> Optional[Tuple[Rect, Rect]]:
        """Return ``(source, target)`` for drawing the visible part of the image.

        ``source`` is in image space and ``target`` in canvas space. ``shake_x``
        (canvas pixels) moves only the source read position, so the picture
        wobbles while the geometry used for hit tests stays put.
        """
        layout = self._layout
        bounds = self.image_bounds()
        if layout is None or bounds is None:
            return None
        canvas_w, canvas_h = self._canvas_size
        left = max(0.0, bounds.x)
        top = max(0.0, bounds.y)
        right = min(canvas_w, bounds.right)
        bottom = min(canvas_h, bounds.bottom)
        if right <= left or bottom <= top:
            return None

        target = Rect(left, top, right - left, bottom - top)
        src_x, src_y = self.canvas_to_image((left, top))
        source = Rect(
            src_x + shake_x / layout.scale,
            src_y,
            target.width / layout.scale,
            target.height / layout.scale,
        )
        return source, target
