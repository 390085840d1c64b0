from __future__ import annotations

import logging
import random
from typing import List, Optional

from PySide6.QtCore import QEasingCurve, QEvent, QPropertyAnimation, Qt, QTimer
from PySide6.QtGui import QCloseEvent, QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QGraphicsOpacityEffect,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QVBoxLayout,
    QWidget,
)

from ispy.core.config import GameConfig
from ispy.core.errors import IspyError
from ispy.core.leaderboard import Leaderboard, format_time
from ispy.core.level import ImageLoader
from ispy.core.levels import LevelDefinition
from ispy.core.session import GameSession, GameState
from ispy.ui.colors import GameColors
from ispy.ui.game_canvas import GameCanvas, PixmapSource
from ispy.ui.overlays import (
    CountdownOverlay,
    GameCompleteOverlay,
    LevelStartOverlay,
    PenaltyToast,
    StatusOverlay,
)

logger = logging.getLogger(__name__)

FRAME_INTERVAL_MS = 16


class MainWindow(QMainWindow):
    """Game window: header with instructions and timers above (or over) the canvas.

    A ~60 Hz QTimer drives :meth:`GameSession.tick`. After every tick the
    window compares the session state with what it last showed and swaps
    overlays accordingly; the session itself knows nothing about widgets.
    """

    def __init__(
        self,
        levels: List[LevelDefinition],
        config: GameConfig,
        leaderboard: Leaderboard,
        loader: ImageLoader,
        pixmap_for: PixmapSource,
        dev_mode: bool = False,
        startup_error: Optional[IspyError] = None,
    ) -> None:
        super().__init__()
        self._levels = levels
        self._config = config
        self._leaderboard = leaderboard
        self._loader = loader
        self._startup_error = startup_error
        self._rng = random.Random()

        self._session: Optional[GameSession] = None
        self._shown_state: Optional[GameState] = None
        self._shown_level_index: Optional[int] = None
        self._last_penalty = 0.0
        self._ui_above: Optional[bool] = None

        self.setWindowTitle("I Spy")
        self.setMinimumSize(480, 360)

        self._build_ui(pixmap_for)
        self._canvas.inspector.enabled = dev_mode

        self._instructions_timer = QTimer(self)
        self._instructions_timer.setSingleShot(True)
        self._instructions_timer.timeout.connect(self._fade_instructions)

        self._frame_timer = QTimer(self)
        self._frame_timer.setTimerType(Qt.PreciseTimer)
        self._frame_timer.timeout.connect(self._on_frame)

        QShortcut(QKeySequence(Qt.Key_F2), self).activated.connect(self._toggle_inspector)
        QShortcut(QKeySequence(QKeySequence.StandardKey.Copy), self).activated.connect(self._copy_region)

        # First session once the window has its real size, so the initial pan is chosen for it.
        QTimer.singleShot(0, self._start)

    # ---- UI construction ----

    def _build_ui(self, pixmap_for: PixmapSource) -> None:
        self._area = QWidget()
        self._area.setStyleSheet(f"background: {GameColors.BG_DARK};")
        self.setCentralWidget(self._area)

        self._canvas = GameCanvas(pixmap_for, self._area)

        self._header = QWidget(self._area)
        self._header.setObjectName("header")
        self._header.setStyleSheet(f"QWidget#header {{ background: {GameColors.HUD_BG}; }}")
        header_layout = QVBoxLayout(self._header)
        header_layout.setContentsMargins(16, 10, 16, 10)
        header_layout.setSpacing(6)

        top_row = QHBoxLayout()
        title = QLabel("I Spy")
        title.setStyleSheet(f"color: {GameColors.TEXT_ON_DARK}; font-size: 22px; font-weight: 900;")
        top_row.addWidget(title, 0)
        self._level_label = QLabel()
        self._level_label.setStyleSheet(f"color: {GameColors.AMBER}; font-size: 15px; font-weight: 700;")
        top_row.addWidget(self._level_label, 1)

        self._level_time_label = QLabel()
        self._total_time_label = QLabel()
        for label in (self._level_time_label, self._total_time_label):
            label.setStyleSheet(
                f"color: {GameColors.TEXT_ON_DARK}; font-family: monospace; font-size: 15px; font-weight: 700;"
            )
            top_row.addWidget(label, 0)
        header_layout.addLayout(top_row)

        self._instructions = QLabel(
            "Find the hidden object and click it. Drag to look around. Wrong clicks cost "
            f"{format_time(self._config.penalty_per_click_ms)}."
        )
        self._instructions.setWordWrap(True)
        self._instructions.setStyleSheet(f"color: {GameColors.TEXT_ON_DARK}; font-size: 13px;")
        self._instructions_effect = QGraphicsOpacityEffect(self._instructions)
        self._instructions_effect.setOpacity(1.0)
        self._instructions.setGraphicsEffect(self._instructions_effect)
        self._instructions_anim = QPropertyAnimation(self._instructions_effect, b"opacity", self)
        self._instructions_anim.setDuration(600)
        self._instructions_anim.setEasingCurve(QEasingCurve.InOutQuad)
        header_layout.addWidget(self._instructions)

        self._toast = PenaltyToast(self._area)

        self._status_overlay = StatusOverlay(self._area)
        self._status_overlay.reload_requested.connect(self._new_game)
        self._level_start_overlay = LevelStartOverlay(self._area)
        self._level_start_overlay.go_clicked.connect(self._on_go)
        self._countdown_overlay = CountdownOverlay(self._area)
        self._complete_overlay = GameCompleteOverlay(self._area)
        self._complete_overlay.save_requested.connect(self._on_save_score)
        self._complete_overlay.play_again.connect(self._new_game)

        self._area.installEventFilter(self)

    def eventFilter(self, obj, event) -> bool:
        if obj is self._area and event.type() == QEvent.Type.Resize:
            self._update_layout_mode()
        return super().eventFilter(obj, event)

    # ---- Layout modes ----

    def _update_layout_mode(self) -> None:
        """UI above the canvas when there is room for it, otherwise floating over the canvas."""
        width, height = self._area.width(), self._area.height()
        header_h = self._header.sizeHint().height()
        above = height - header_h >= self._config.min_canvas_height

        self._instructions_timer.stop()
        self._instructions_anim.stop()
        self._instructions_effect.setOpacity(1.0)

        self._header.setGeometry(0, 0, width, header_h)
        if above:
            self._canvas.setGeometry(0, header_h, width, height - header_h)
        else:
            self._canvas.setGeometry(0, 0, width, height)
            self._instructions_timer.start(int(self._config.instructions_fade_ms))

        if above != self._ui_above:
            logger.debug("Layout mode: %s", "ui above" if above else "overlay")
        self._ui_above = above

    def _fade_instructions(self) -> None:
        self._instructions_anim.setStartValue(self._instructions_effect.opacity())
        self._instructions_anim.setEndValue(0.0)
        self._instructions_anim.start()

    # ---- Session wiring ----

    def _start(self) -> None:
        self._update_layout_mode()
        self._new_game()
        self._frame_timer.start(FRAME_INTERVAL_MS)

    def _new_game(self) -> None:
        if self._session is not None:
            self._session = self._session.restart()
        else:
            self._session = GameSession(
                self._levels,
                self._loader,
                self._config,
                rng=self._rng,
                canvas_size=(float(max(1, self._canvas.width())), float(max(1, self._canvas.height()))),
            )
            self._session.start()
        self._shown_state = None
        self._shown_level_index = None
        self._last_penalty = 0.0
        self._toast.hide()
        self._canvas.set_session(self._session)
        self._sync_overlays()

    def _on_go(self) -> None:
        if self._session is not None and self._session.confirm_level_start():
            self._sync_overlays()

    def _on_frame(self) -> None:
        session = self._session
        if session is None:
            return
        session.tick()
        self._sync_overlays()
        self._update_hud()
        self._canvas.update()

    def _sync_overlays(self) -> None:
        session = self._session
        state = session.state
        if state is GameState.COUNTDOWN:
            self._countdown_overlay.set_label(session.countdown_label or "", self._rng)
        if state is self._shown_state and session.current_index == self._shown_level_index:
            return
        self._shown_state = state
        self._shown_level_index = session.current_index

        self._status_overlay.setVisible(state in (GameState.LOADING, GameState.ERROR))
        self._level_start_overlay.setVisible(state is GameState.LEVEL_START)
        self._countdown_overlay.setVisible(state is GameState.COUNTDOWN)
        self._complete_overlay.setVisible(state is GameState.COMPLETED)

        if state is GameState.LOADING:
            self._status_overlay.show_loading()
        elif state is GameState.ERROR:
            error = self._startup_error or session.error
            self._status_overlay.show_error(str(error) if error else "The game could not start.")
        elif state is GameState.LEVEL_START:
            level = session.level
            self._level_start_overlay.show_level(
                level.name if level else "",
                session.current_index,
                session.level_count,
                session.score_time,
                session.penalty_total,
                self._rng,
            )
        elif state is GameState.COUNTDOWN:
            self._countdown_overlay.show()
        elif state is GameState.COMPLETED:
            result = session.result
            self._complete_overlay.show_result(
                result.final_time,
                result.base_time,
                result.penalty_time,
                session.accuracy_percent,
                self._leaderboard.get_scores(),
                self._leaderboard.qualifies(result.final_time),
            )

    def _update_hud(self) -> None:
        session = self._session
        if session.level is not None:
            self._level_label.setText(f"  Level {session.current_index + 1}/{session.level_count}: {session.level.name}")
        self._level_time_label.setText(f"Level {format_time(session.level_elapsed)}")
        self._total_time_label.setText(f"  Total {format_time(session.score_time)}")

        if session.penalty_total > self._last_penalty:
            self._toast.show_penalty(self._config.penalty_per_click_ms)
        self._last_penalty = session.penalty_total

    def _on_save_score(self, name: str) -> None:
        scores = self._session.submit_score(name, self._leaderboard)
        if scores is None:
            return
        self._complete_overlay.set_scores(scores)
        self._complete_overlay.mark_saved()

    # ---- Developer inspector ----

    def _toggle_inspector(self) -> None:
        self._canvas.inspector.toggle()
        self._canvas.update()

    def _copy_region(self) -> None:
        if self._canvas.inspector.enabled and self._session is not None:
            self._canvas.inspector.copy_region(self._session.level)

    def closeEvent(self, event: QCloseEvent) -> None:
        self._frame_timer.stop()
        self._instructions_timer.stop()
        super().closeEvent(event)
