"""Runtime state of the level being played."""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Callable, Optional

from ispy.core.config import GameConfig
from ispy.core.effects import Feedback, ParticleBurst, ShakeEffect, XMark
from ispy.core.errors import AssetLoadError
from ispy.core.geometry import Point, Rect, Size, is_degenerate
from ispy.core.levels import LevelDefinition
from ispy.core.viewport import Viewport

logger = logging.getLogger(__name__)

# Loads the image at a path and returns its decoded (width, height).
ImageLoader = Callable[[Path], Size]


class Level:
    """One level: its image, viewport and feedback state.

    A Level is built for a single play of a definition and thrown away when
    the game advances; it is never reused.
    """

    def __init__(
        self,
        definition: LevelDefinition,
        canvas_size: Size,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.definition = definition
        self._config = config or GameConfig()
        self._rng = rng or random.Random()
        self._canvas_size: Size = canvas_size
        self._image_size: Optional[Size] = None
        self._viewport: Optional[Viewport] = None
        self._resolved = False
        self.feedback: Optional[Feedback] = None
        self.shake: Optional[ShakeEffect] = None

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def target_region(self) -> Rect:
        return self.definition.click_region

    @property
    def loaded(self) -> bool:
        return self._viewport is not None

    @property
    def resolved(self) -> bool:
        """True once the target has been hit."""
        return self._resolved

    @property
    def image_size(self) -> Optional[Size]:
        return self._image_size

    @property
    def canvas_size(self) -> Size:
        return self._viewport.canvas_size if self._viewport else self._canvas_size

    @property
    def viewport(self) -> Optional[Viewport]:
        return self._viewport

    @property
    def zoom_factor(self) -> float:
        if self.definition.desktop_zoom_factor is not None:
            return self.definition.desktop_zoom_factor
        return self._config.default_desktop_zoom

    @property
    def shake_offset(self) -> float:
        return self.shake.offset if self.shake else 0.0

    def load(self, loader: ImageLoader) -> None:
        """Decode the image through ``loader`` and lay it out on the canvas."""
        path = self.definition.image
        try:
            size = loader(path)
        except AssetLoadError:
            raise
        except (OSError, ValueError) as e:
            raise AssetLoadError(f"Could not load image {path}: {e}") from e
        if size is None or is_degenerate(size):
            raise AssetLoadError(f"Image {path} has no usable size: {size!r}")

        self._image_size = (float(size[0]), float(size[1]))
        self._viewport = Viewport(
            self._image_size,
            self._canvas_size,
            self.zoom_factor,
            reference_size=(self._config.reference_width, self._config.reference_height),
            desktop_breakpoint=self._config.desktop_breakpoint,
        )
        self._viewport.randomize_initial_pan(self._rng)
        logger.info("Loaded level %r (%dx%d)", self.name, size[0], size[1])

    def resize(self, canvas_size: Size) -> None:
        """Safe in any state; before loading it only records the size."""
        if is_degenerate(canvas_size):
            return
        self._canvas_size = canvas_size
        if self._viewport is not None:
            self._viewport.resize(canvas_size)

    def pan_by(self, dx: float, dy: float) -> None:
        if self._viewport is not None:
            self._viewport.pan_by(dx, dy)

    def mark_resolved(self, point: Point) -> bool:
        """Start the correct-click episode. Returns False if one already ran."""
        if self._resolved:
            return False
        self._resolved = True
        self.feedback = ParticleBurst.at(point, self._rng)
        return True

    def mark_missed(self, point: Point) -> None:
        self.shake = ShakeEffect(rng=self._rng)
        self.feedback = XMark(x=point[0], y=point[1])

    def update(self, dt: float) -> None:
        if self.shake is not None and self.shake.update(dt):
            self.shake = None
        if self.feedback is not None and self.feedback.update(dt):
            self.feedback = None
