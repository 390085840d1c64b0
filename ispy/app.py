"""Application entry point and setup for the I Spy game."""

import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from PySide6.QtGui import QGuiApplication, QImageReader, QPixmap
from PySide6.QtWidgets import QApplication

from ispy.core.config import GameConfig
from ispy.core.errors import AssetLoadError, ConfigError
from ispy.core.leaderboard import Leaderboard
from ispy.core.levels import LevelDefinition, LevelRepository
from ispy.ui.main_window import MainWindow

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


class QtImageLoader:
    """Decodes level images with Qt and keeps one pixmap per path.

    Called by the game core to learn an image's size; the canvas asks for the
    cached pixmap when painting.
    """

    def __init__(self) -> None:
        self._cache: Dict[Path, QPixmap] = {}

    def __call__(self, path: Path) -> Tuple[int, int]:
        pixmap = self._cache.get(path)
        if pixmap is None:
            pixmap = self._decode(path)
            self._cache[path] = pixmap
        return pixmap.width(), pixmap.height()

    def pixmap(self, path: Path) -> Optional[QPixmap]:
        return self._cache.get(path)

    @staticmethod
    def _decode(path: Path) -> QPixmap:
        if not path.exists():
            raise AssetLoadError(f"Level image not found: {path}")
        reader = QImageReader(str(path))
        image = reader.read()
        if image.isNull():
            raise AssetLoadError(f"Could not decode {path.name}: {reader.errorString()}")
        return QPixmap.fromImage(image)


def load_levels(levels_dir: Optional[str]) -> Tuple[List[LevelDefinition], GameConfig, Optional[ConfigError]]:
    try:
        repo = LevelRepository(Path(levels_dir) if levels_dir else None)
    except ConfigError as e:
        logger.error("Could not load levels: %s", e)
        return [], GameConfig(), e
    return repo.all(), repo.config, None


def run() -> None:
    """Initialize the application, load levels, and start the main window."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("I Spy")
    app.setApplicationDisplayName("I Spy")

    levels, config, error = load_levels(os.environ.get("ISPY_LEVELS_DIR"))
    board_path = os.environ.get("ISPY_LEADERBOARD")
    leaderboard = Leaderboard(Path(board_path) if board_path else None, max_scores=config.leaderboard_size)
    loader = QtImageLoader()

    window = MainWindow(
        levels=levels,
        config=config,
        leaderboard=leaderboard,
        loader=loader,
        pixmap_for=loader.pixmap,
        dev_mode=os.environ.get("ISPY_DEV_MODE") == "1",
        startup_error=error,
    )
    screen = QGuiApplication.primaryScreen()
    if screen is not None:
        geometry = screen.availableGeometry()
        window.resize(int(geometry.width() * 0.8), int(geometry.height() * 0.8))
    window.show()

    sys.exit(app.exec())
