"""Coordinate inspector for authoring level regions (F2)."""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QColor, QFont, QGuiApplication, QPainter, QPen

from ispy.core.geometry import Point
from ispy.core.level import Level
from ispy.core.levels import region_snippet
from ispy.ui.colors import GameColors

logger = logging.getLogger(__name__)


class DevInspector:
    """Crosshair, image bounds and target region, plus live canvas/image coordinates."""

    def __init__(self, enabled: bool = False) -> None:
        self.enabled = enabled
        self.pointer: Optional[Point] = None

    def toggle(self) -> bool:
        self.enabled = not self.enabled
        logger.info("Dev inspector %s", "on" if self.enabled else "off")
        return self.enabled

    def image_point(self, level: Optional[Level]) -> Optional[Point]:
        if level is None or level.viewport is None or self.pointer is None:
            return None
        return level.viewport.canvas_to_image(self.pointer)

    def copy_region(self, level: Optional[Level]) -> Optional[str]:
        """Put a region template at the pointer's image position on the clipboard."""
        point = self.image_point(level)
        if point is None:
            return None
        snippet = region_snippet(point)
        clipboard = QGuiApplication.clipboard()
        if clipboard is not None:
            clipboard.setText(snippet)
        logger.info("Copied region at image (%d, %d)", round(point[0]), round(point[1]))
        return snippet

    def paint(self, painter: QPainter, level: Level) -> None:
        viewport = level.viewport
        if viewport is None:
            return
        painter.save()
        painter.setBrush(Qt.NoBrush)

        bounds = viewport.image_bounds()
        if bounds is not None:
            pen = QPen(QColor(GameColors.AMBER))
            pen.setStyle(Qt.DashLine)
            painter.setPen(pen)
            painter.drawRect(QRectF(bounds.x, bounds.y, bounds.width, bounds.height))

        target = viewport.image_rect_to_canvas(level.target_region)
        if target is not None:
            pen = QPen(QColor(GameColors.TARGET_OUTLINE))
            pen.setWidthF(2.0)
            painter.setPen(pen)
            painter.fillRect(QRectF(target.x, target.y, target.width, target.height), QColor(0, 230, 118, 50))
            painter.drawRect(QRectF(target.x, target.y, target.width, target.height))

        if self.pointer is not None:
            x, y = self.pointer
            painter.setPen(QPen(QColor(255, 255, 255, 180)))
            painter.drawLine(QPointF(x, 0), QPointF(x, viewport.canvas_size[1]))
            painter.drawLine(QPointF(0, y), QPointF(viewport.canvas_size[0], y))

            image = viewport.canvas_to_image(self.pointer)
            lines = [f"canvas  {x:.0f}, {y:.0f}"]
            if image is not None:
                lines.append(f"image   {image[0]:.0f}, {image[1]:.0f}")
            lines.append(f"scale   {viewport.scale:.3f}")
            lines.append("Ctrl+C copies a region")

            font = QFont("monospace")
            font.setStyleHint(QFont.Monospace)
            font.setPointSize(10)
            painter.setFont(font)
            box = QRectF(10, 10, 230, 18 * len(lines) + 12)
            painter.fillRect(box, QColor(0, 0, 0, 170))
            painter.setPen(QColor(GameColors.TEXT_ON_DARK))
            for i, line in enumerate(lines):
                painter.drawText(QPointF(box.x() + 8, box.y() + 20 + i * 18), line)

        painter.restore()
