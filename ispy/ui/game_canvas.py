"""The play surface: draws the level image and effects, forwards pointer input."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Callable, Optional

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QBrush, QColor, QPainter, QPen, QPixmap
from PySide6.QtWidgets import QSizePolicy, QWidget

from ispy.core.effects import Celebration, FadeTransition, ParticleBurst, XMark
from ispy.core.geometry import Rect
from ispy.core.level import Level
from ispy.core.session import GameSession, GameState
from ispy.ui.colors import GameColors
from ispy.ui.dev_overlay import DevInspector

PixmapSource = Callable[[Path], Optional[QPixmap]]

_DRAWN_STATES = (GameState.PLAYING, GameState.TRANSITIONING)


def _qrect(rect: Rect) -> QRectF:
    return QRectF(rect.x, rect.y, rect.width, rect.height)


def _rgba(color, alpha: float) -> QColor:
    return QColor(color[0], color[1], color[2], max(0, min(255, int(alpha))))


class GameCanvas(QWidget):
    """Renders the current level of a :class:`GameSession`.

    The canvas never changes game state on its own: pointer events are passed
    to the session as canvas coordinates and every frame it just paints
    whatever the session reports.
    """

    def __init__(self, pixmap_for: PixmapSource, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._pixmap_for = pixmap_for
        self._session: Optional[GameSession] = None
        self.inspector = DevInspector()
        self.setMouseTracking(True)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setMinimumSize(1, 1)
        self.setCursor(Qt.CursorShape.CrossCursor)

    def set_session(self, session: GameSession) -> None:
        self._session = session
        session.resize((float(self.width()), float(self.height())))
        self.update()

    # ---- Qt events ----

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        if self._session is not None:
            self._session.resize((float(self.width()), float(self.height())))

    def mousePressEvent(self, event) -> None:
        if self._session is not None and event.button() == Qt.MouseButton.LeftButton:
            pos = event.position()
            self._session.pointer_pressed((pos.x(), pos.y()))
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event) -> None:
        pos = event.position()
        self.inspector.pointer = (pos.x(), pos.y())
        if self._session is not None:
            self._session.pointer_moved((pos.x(), pos.y()))
        if self.inspector.enabled:
            self.update()
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event) -> None:
        if self._session is not None and event.button() == Qt.MouseButton.LeftButton:
            pos = event.position()
            self._session.pointer_released((pos.x(), pos.y()))
        super().mouseReleaseEvent(event)

    def leaveEvent(self, event) -> None:
        self.inspector.pointer = None
        super().leaveEvent(event)

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        painter.setRenderHint(QPainter.SmoothPixmapTransform, True)
        painter.fillRect(self.rect(), QColor(GameColors.CANVAS_BG))

        session = self._session
        if session is None:
            return
        level = session.level
        if level is not None and level.loaded and session.state in _DRAWN_STATES:
            self._paint_level(painter, level)
            if isinstance(level.feedback, ParticleBurst):
                self._paint_burst(painter, level.feedback)
            elif isinstance(level.feedback, XMark):
                self._paint_xmark(painter, level.feedback)
            if self.inspector.enabled:
                self.inspector.paint(painter, level)
        if session.transition is not None:
            self._paint_fade(painter, session.transition)
        if session.celebration is not None:
            self._paint_celebration(painter, session.celebration)

    # ---- Painting ----

    def _paint_level(self, painter: QPainter, level: Level) -> None:
        pixmap = self._pixmap_for(level.definition.image)
        rects = level.viewport.visible_source_rect(level.shake_offset)
        if pixmap is None or pixmap.isNull() or rects is None:
            return
        source, target = rects
        painter.drawPixmap(_qrect(target), pixmap, _qrect(source))

    def _paint_burst(self, painter: QPainter, burst: ParticleBurst) -> None:
        center = QPointF(burst.x, burst.y)
        painter.setBrush(Qt.NoBrush)
        for i in range(3):
            radius = burst.radius - i * 20.0
            if radius <= 0:
                continue
            pen = QPen(QColor(255, 215, 0, max(0, int(burst.alpha) - i * 60)))
            pen.setWidthF(4.0 - i)
            painter.setPen(pen)
            painter.drawEllipse(center, radius, radius)

        painter.setPen(Qt.NoPen)
        for particle in burst.particles:
            if particle.alive:
                painter.setBrush(_rgba(particle.color, particle.life * 255))
                painter.drawEllipse(QPointF(particle.x, particle.y), particle.size, particle.size)
        for piece in burst.confetti:
            if not piece.alive:
                continue
            painter.save()
            painter.translate(piece.x, piece.y)
            painter.rotate(math.degrees(piece.rotation))
            painter.setBrush(_rgba(piece.color, piece.life * 255))
            painter.drawRect(QRectF(-piece.size / 2, -piece.size / 4, piece.size, piece.size / 2))
            painter.restore()
        for sparkle in burst.sparkles:
            if sparkle.alive:
                glow = 0.5 + 0.5 * math.sin(sparkle.twinkle)
                painter.setBrush(QColor(255, 255, 255, int(255 * sparkle.life * glow)))
                painter.drawEllipse(QPointF(sparkle.x, sparkle.y), sparkle.size, sparkle.size)

    def _paint_xmark(self, painter: QPainter, mark: XMark) -> None:
        painter.save()
        painter.translate(mark.x, mark.y)
        painter.rotate(math.degrees(mark.rotation))
        pen = QPen(QColor(231, 76, 60, max(0, int(mark.alpha))))
        pen.setWidthF(5.0)
        pen.setCapStyle(Qt.RoundCap)
        painter.setPen(pen)
        half = mark.size / 2
        painter.drawLine(QPointF(-half, -half), QPointF(half, half))
        painter.drawLine(QPointF(half, -half), QPointF(-half, half))
        painter.restore()

    def _paint_fade(self, painter: QPainter, fade: FadeTransition) -> None:
        painter.fillRect(self.rect(), QColor(255, 255, 255, int(fade.alpha)))

    def _paint_celebration(self, painter: QPainter, celebration: Celebration) -> None:
        painter.setPen(Qt.NoPen)
        for piece in celebration.pieces:
            if not piece.alive:
                continue
            painter.save()
            painter.translate(piece.x, piece.y)
            painter.rotate(math.degrees(piece.rotation))
            painter.setBrush(QBrush(_rgba(piece.color, piece.life * 255)))
            painter.drawRect(QRectF(-piece.size / 2, -piece.size / 2, piece.size, piece.size))
            painter.restore()
