"""In-window overlays: loading/error, level start, countdown, game complete, penalty toast."""

from __future__ import annotations

import random
from typing import Callable, List, Optional

from PySide6.QtCore import QEvent, QPointF, QRectF, Qt, QTimer, Signal
from PySide6.QtGui import QColor, QPainter, QPolygonF
from PySide6.QtWidgets import (
    QFrame,
    QGraphicsDropShadowEffect,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)

from ispy.core.leaderboard import ScoreEntry, format_time
from ispy.ui.colors import (
    DecorativeShape,
    GameColors,
    blend_hex,
    colorful_screen,
    decorative_shapes,
    pick_palette,
    random_bright_color,
)


def _themed_card_container(radius: int = 20, object_name: str = "overlayContainer", accent: Optional[str] = None) -> QFrame:
    container = QFrame()
    container.setObjectName(object_name)
    container.setMinimumWidth(360)
    container.setMaximumWidth(480)
    top_border = f"border-top: 8px solid {accent};" if accent else ""
    container.setStyleSheet(
        f"""
        QFrame#{object_name} {{
            background: #ffffff;
            border: 1px solid rgba(108, 92, 231, 0.15);
            {top_border}
            border-radius: {radius}px;
        }}
        """
    )
    shadow = QGraphicsDropShadowEffect(container)
    shadow.setBlurRadius(24)
    shadow.setOffset(0, 8)
    shadow.setColor(QColor(0, 0, 0, 60))
    container.setGraphicsEffect(shadow)
    return container


def _overlay_background(parent: QWidget, color: str = "rgba(0, 0, 0, 0.45)") -> QWidget:
    overlay_bg = QWidget(parent)
    overlay_bg.setStyleSheet(f"background: {color};")
    overlay_bg.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
    overlay_bg.setCursor(Qt.CursorShape.ArrowCursor)
    overlay_bg.setMinimumSize(1, 1)
    return overlay_bg


def _secondary_button_style() -> str:
    return f"""
        QPushButton {{
            background: #fafafa;
            color: {GameColors.TEXT_PRIMARY};
            padding: 10px 16px;
            border: 1px solid #e0e0e0;
            border-radius: 12px;
            font-weight: 600;
            font-size: 13px;
        }}
        QPushButton:hover {{
            background: #f0f0f0;
            border-color: {GameColors.PRIMARY};
            color: {GameColors.PRIMARY};
        }}
    """


def _primary_button_style(start: str = GameColors.PRIMARY_LIGHT, stop: str = GameColors.PRIMARY) -> str:
    return f"""
        QPushButton {{
            background: qlineargradient(x1:0, y1:0, x2:1, y2:1,
                stop:0 {start}, stop:1 {stop});
            color: white;
            padding: 12px 18px;
            border: none;
            border-radius: 12px;
            font-weight: 700;
            font-size: 15px;
        }}
        QPushButton:hover {{ background: {stop}; }}
        QPushButton:disabled {{ background: #b2bec3; }}
    """


def _stat_row(caption: str, value: QLabel) -> QHBoxLayout:
    row = QHBoxLayout()
    label = QLabel(caption)
    label.setStyleSheet(f"color: {GameColors.TEXT_SECONDARY}; font-size: 14px;")
    value.setStyleSheet(f"color: {GameColors.TEXT_PRIMARY}; font-size: 15px; font-weight: 700;")
    value.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
    row.addWidget(label, 1)
    row.addWidget(value, 0)
    return row


def _button(text: str, style: str, on_click: Callable[[], None]) -> QPushButton:
    btn = QPushButton(text)
    btn.setStyleSheet(style)
    btn.setCursor(Qt.CursorShape.PointingHandCursor)
    btn.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Fixed)
    btn.clicked.connect(on_click)
    return btn


class _FullWindowOverlay(QWidget):
    """Child widget that always covers its parent."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._main_layout = QGridLayout(self)
        self._main_layout.setContentsMargins(0, 0, 0, 0)
        self._main_layout.setSpacing(0)
        self._main_layout.setRowStretch(0, 1)
        self._main_layout.setColumnStretch(0, 1)
        self.hide()

    def _update_geometry(self) -> None:
        parent = self.parentWidget()
        if parent is not None:
            self.setGeometry(parent.rect())

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        self._update_geometry()

    def eventFilter(self, obj: QWidget, event: QEvent) -> bool:
        if obj is self.parentWidget() and event.type() == QEvent.Type.Resize:
            self._update_geometry()
        return super().eventFilter(obj, event)

    def showEvent(self, event) -> None:
        super().showEvent(event)
        self._update_geometry()
        self.raise_()
        parent = self.parentWidget()
        if parent is not None:
            parent.installEventFilter(self)

    def hideEvent(self, event) -> None:
        parent = self.parentWidget()
        if parent is not None:
            parent.removeEventFilter(self)
        super().hideEvent(event)


class StatusOverlay(_FullWindowOverlay):
    """Loading screen, or the terminal error screen with a reload button."""

    reload_requested = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._main_layout.addWidget(_overlay_background(self, GameColors.BG_DARK), 0, 0)

        container = _themed_card_container(object_name="statusContainer")
        content = QVBoxLayout(container)
        content.setContentsMargins(28, 24, 28, 24)
        content.setSpacing(16)

        self._title = QLabel()
        self._title.setAlignment(Qt.AlignCenter)
        self._title.setStyleSheet(f"color: {GameColors.PRIMARY}; font-size: 22px; font-weight: 800;")
        content.addWidget(self._title)

        self._message = QLabel()
        self._message.setAlignment(Qt.AlignCenter)
        self._message.setWordWrap(True)
        self._message.setStyleSheet(f"color: {GameColors.TEXT_PRIMARY}; font-size: 14px;")
        content.addWidget(self._message)

        self._reload_btn = _button("Reload Game", _primary_button_style(), self.reload_requested.emit)
        content.addWidget(self._reload_btn)

        self._main_layout.addWidget(container, 0, 0, 1, 1, Qt.AlignCenter)

    def show_loading(self) -> None:
        self._title.setText("I Spy")
        self._message.setText("Loading game...")
        self._reload_btn.hide()
        self.show()

    def show_error(self, message: str) -> None:
        self._title.setText("Something went wrong")
        self._message.setText(message)
        self._reload_btn.show()
        self.show()


class _ColorfulOverlay(_FullWindowOverlay):
    """Full-screen random bright background with scattered palette shapes."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._background = QColor(GameColors.PRIMARY)
        self._shapes: List[DecorativeShape] = []

    def set_colors(self, background: str, shapes: List[DecorativeShape]) -> None:
        self._background = QColor(background)
        self._shapes = list(shapes)
        self.update()

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        painter.fillRect(self.rect(), self._background)
        painter.setPen(Qt.NoPen)
        w, h = self.width(), self.height()
        for shape in self._shapes:
            color = QColor(shape.color)
            color.setAlpha(150)
            painter.setBrush(color)
            x, y, s = shape.x * w, shape.y * h, shape.size
            if shape.kind == "circle":
                painter.drawEllipse(QRectF(x, y, s, s))
            elif shape.kind == "square":
                painter.drawRoundedRect(QRectF(x, y, s, s), 6, 6)
            else:
                painter.drawPolygon(QPolygonF([QPointF(x + s / 2, y), QPointF(x + s, y + s), QPointF(x, y + s)]))
        super().paintEvent(event)


class LevelStartOverlay(_ColorfulOverlay):
    """Level name, progress and running stats, with a GO button."""

    go_clicked = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._container = _themed_card_container(object_name="levelStartContainer")
        content = QVBoxLayout(self._container)
        content.setContentsMargins(28, 24, 28, 24)
        content.setSpacing(14)

        self._progress = QLabel()
        self._progress.setAlignment(Qt.AlignCenter)
        self._progress.setStyleSheet(f"color: {GameColors.TEXT_SECONDARY}; font-size: 13px; font-weight: 600;")
        content.addWidget(self._progress)

        self._title = QLabel()
        self._title.setAlignment(Qt.AlignCenter)
        self._title.setWordWrap(True)
        self._title.setStyleSheet(f"color: {GameColors.TEXT_PRIMARY}; font-size: 24px; font-weight: 800;")
        content.addWidget(self._title)

        self._total = QLabel()
        content.addLayout(_stat_row("Total time", self._total))
        self._penalties = QLabel()
        content.addLayout(_stat_row("Penalties", self._penalties))

        self._go_btn = _button("GO!", _primary_button_style(), self.go_clicked.emit)
        content.addWidget(self._go_btn)

        self._main_layout.addWidget(self._container, 0, 0, 1, 1, Qt.AlignCenter)

    def show_level(
        self,
        name: str,
        index: int,
        count: int,
        total_ms: float,
        penalty_ms: float,
        rng: Optional[random.Random] = None,
    ) -> str:
        """Fill in the level card, pick fresh colors and show. Returns the background color."""
        rng = rng or random.Random()
        background = random_bright_color(rng)
        palette = pick_palette(rng)
        self.set_colors(background, decorative_shapes(palette, rng))
        self._container.setStyleSheet(
            f"""
            QFrame#levelStartContainer {{
                background: #ffffff;
                border-top: 8px solid {palette[0]};
                border-radius: 20px;
            }}
            """
        )
        self._go_btn.setStyleSheet(_primary_button_style(palette[0], blend_hex(palette[1], "#000000", 0.15)))

        self._progress.setText(f"Level {index + 1} of {count}")
        self._title.setText(name)
        self._total.setText(format_time(total_ms))
        self._penalties.setText(f"+{format_time(penalty_ms)}")
        self.show()
        self._go_btn.setFocus()
        return background


class CountdownOverlay(_ColorfulOverlay):
    """3, 2, 1, GO! in large type."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._label = QLabel()
        self._label.setAlignment(Qt.AlignCenter)
        self._label.setStyleSheet(f"color: {GameColors.TEXT_ON_DARK}; font-size: 140px; font-weight: 900; background: transparent;")
        self._main_layout.addWidget(self._label, 0, 0, 1, 1, Qt.AlignCenter)

    def set_label(self, text: str, rng: Optional[random.Random] = None) -> None:
        """Show the next step; every new step gets its own background."""
        if self._label.text() != text:
            self._label.setText(text)
            self.set_colors(*colorful_screen(rng))


class GameCompleteOverlay(_FullWindowOverlay):
    """Final time breakdown, best times and the name entry."""

    save_requested = Signal(str)
    play_again = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._main_layout.addWidget(_overlay_background(self), 0, 0)

        container = _themed_card_container(object_name="completeContainer")
        content = QVBoxLayout(container)
        content.setContentsMargins(28, 24, 28, 24)
        content.setSpacing(12)

        title = QLabel("You found them all!")
        title.setAlignment(Qt.AlignCenter)
        title.setStyleSheet(f"color: {GameColors.PRIMARY}; font-size: 22px; font-weight: 800;")
        content.addWidget(title)

        self._final = QLabel()
        self._final.setAlignment(Qt.AlignCenter)
        self._final.setStyleSheet(f"color: {GameColors.TEXT_PRIMARY}; font-size: 36px; font-weight: 900;")
        content.addWidget(self._final)

        self._base = QLabel()
        content.addLayout(_stat_row("Time", self._base))
        self._penalty = QLabel()
        content.addLayout(_stat_row("Penalties", self._penalty))
        self._accuracy = QLabel()
        content.addLayout(_stat_row("Accuracy", self._accuracy))

        board_title = QLabel("Best times")
        board_title.setStyleSheet(f"color: {GameColors.TEXT_SECONDARY}; font-size: 13px; font-weight: 700; margin-top: 8px;")
        content.addWidget(board_title)
        self._scores = QLabel()
        self._scores.setTextFormat(Qt.PlainText)
        self._scores.setStyleSheet(f"color: {GameColors.TEXT_PRIMARY}; font-family: monospace; font-size: 13px;")
        content.addWidget(self._scores)

        name_row = QHBoxLayout()
        name_row.setSpacing(8)
        self._name_input = QLineEdit()
        self._name_input.setPlaceholderText("Your name")
        self._name_input.setMaxLength(20)
        self._name_input.setStyleSheet(
            "QLineEdit { padding: 10px; border: 1px solid #dfe6e9; border-radius: 10px; font-size: 14px; }"
        )
        self._name_input.returnPressed.connect(self._on_save)
        name_row.addWidget(self._name_input, 1)
        self._save_btn = _button("Save", _primary_button_style(), self._on_save)
        self._save_btn.setSizePolicy(QSizePolicy.Policy.Fixed, QSizePolicy.Policy.Fixed)
        name_row.addWidget(self._save_btn, 0)
        content.addLayout(name_row)

        content.addWidget(_button("Play Again", _secondary_button_style(), self.play_again.emit))

        self._main_layout.addWidget(container, 0, 0, 1, 1, Qt.AlignCenter)

    def show_result(
        self,
        final_ms: float,
        base_ms: float,
        penalty_ms: float,
        accuracy_percent: int,
        scores: List[ScoreEntry],
        qualifies: bool,
    ) -> None:
        self._final.setText(format_time(final_ms))
        self._base.setText(format_time(base_ms))
        self._penalty.setText(f"+{format_time(penalty_ms)}")
        self._accuracy.setText(f"{accuracy_percent}%")
        self.set_scores(scores)
        self._name_input.clear()
        self._name_input.setEnabled(qualifies)
        self._save_btn.setEnabled(qualifies)
        self.show()
        if qualifies:
            self._name_input.setFocus()

    def set_scores(self, scores: List[ScoreEntry]) -> None:
        if not scores:
            self._scores.setText("No scores yet.")
            return
        lines = [f"{i + 1}. {entry.name[:16]:<16} {format_time(entry.time)}" for i, entry in enumerate(scores)]
        self._scores.setText("\n".join(lines))

    def mark_saved(self) -> None:
        self._name_input.setEnabled(False)
        self._save_btn.setEnabled(False)

    def _on_save(self) -> None:
        if self._save_btn.isEnabled():
            self.save_requested.emit(self._name_input.text())


class PenaltyToast(QLabel):
    """Short-lived "+00:05.00 penalty!" notice near the top of the canvas."""

    DURATION_MS = 2000

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setAlignment(Qt.AlignCenter)
        self.setAttribute(Qt.WA_TransparentForMouseEvents, True)
        self.setStyleSheet(
            f"""
            QLabel {{
                background: {GameColors.PENALTY};
                color: white;
                padding: 8px 18px;
                border-radius: 16px;
                font-size: 16px;
                font-weight: 800;
            }}
            """
        )
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self.hide)
        self.hide()

    def show_penalty(self, penalty_ms: float) -> None:
        self.setText(f"+{format_time(penalty_ms)} penalty!")
        self.adjustSize()
        parent = self.parentWidget()
        if parent is not None:
            self.move((parent.width() - self.width()) // 2, 80)
        self.show()
        self.raise_()
        self._timer.start(self.DURATION_MS)
