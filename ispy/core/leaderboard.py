from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

DEFAULT_MAX_SCORES = 5


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def format_time(milliseconds: float) -> str:
    """Format a duration as ``mm:ss.cc``, truncating (never rounding up)."""
    ms = max(0, int(milliseconds))
    total_seconds = ms // 1000
    minutes = total_seconds // 60
    seconds = total_seconds % 60
    centis = (ms % 1000) // 10
    return f"{minutes:02d}:{seconds:02d}.{centis:02d}"


@dataclass
class ScoreEntry:
    name: str
    time: float
    date: str = field(default_factory=_now_iso)


class Leaderboard:
    """Best times, fastest first. Persists to disk across app restarts.
    File: ~/.ispy/leaderboard.json unless another path is given."""

    def __init__(self, file_path: Optional[Path] = None, max_scores: int = DEFAULT_MAX_SCORES) -> None:
        self._file_path = Path(file_path) if file_path is not None else Path.home() / ".ispy" / "leaderboard.json"
        self._max_scores = max_scores
        self._scores = self._load()

    @property
    def file_path(self) -> Path:
        return self._file_path

    @property
    def max_scores(self) -> int:
        return self._max_scores

    def get_scores(self) -> List[ScoreEntry]:
        return list(self._scores)

    def add_score(self, name: str, time: float) -> List[ScoreEntry]:
        """Record a finished run and return the new top list."""
        entry = ScoreEntry(name=name.strip() or "Anonymous", time=float(time))
        scores = self._scores + [entry]
        scores.sort(key=lambda s: s.time)
        self._scores = scores[: self._max_scores]
        self._save()
        return self.get_scores()

    def qualifies(self, time: float) -> bool:
        """True if ``time`` would make it onto the board."""
        if len(self._scores) < self._max_scores:
            return True
        return time < self._scores[-1].time

    def _load(self) -> List[ScoreEntry]:
        if not self._file_path.exists():
            return []
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load leaderboard from %s: %s", self._file_path, e)
            return []
        if not isinstance(payload, list):
            logger.warning("Ignoring leaderboard %s: expected a list", self._file_path)
            return []

        scores: List[ScoreEntry] = []
        for value in payload:
            try:
                scores.append(
                    ScoreEntry(
                        name=str(value["name"]),
                        time=float(value["time"]),
                        date=str(value.get("date", "")),
                    )
                )
            except (KeyError, TypeError, ValueError, AttributeError):
                logger.warning("Skipping malformed leaderboard entry: %r", value)
        scores.sort(key=lambda s: s.time)
        return scores[: self._max_scores]

    def _save(self) -> None:
        payload = [asdict(score) for score in self._scores]
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save leaderboard to %s: %s", self._file_path, e)
