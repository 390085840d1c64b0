from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple

import yaml

from ispy.core.config import GameConfig
from ispy.core.errors import ConfigError
from ispy.core.geometry import Point, Rect

logger = logging.getLogger(__name__)

MANIFEST_NAMES = ("levels.yaml", "levels.yml", "levels.json")
DEFAULT_LEVELS_DIR = Path(__file__).resolve().parent.parent / "data" / "levels"


@dataclass(frozen=True)
class LevelDefinition:
    key: str
    name: str
    image: Path
    click_region: Rect
    desktop_zoom_factor: Optional[float] = None


class LevelRepository:
    """Ordered level definitions plus game settings read from a level manifest.

    The manifest is YAML (the original ``levels.json`` format parses too)::

        settings: {penalty_per_click_ms: 5000}
        levels:
          - name: Find the cat
            image: pic1.svg
            click_region: {x: 100, y: 100, width: 80, height: 100}
            desktop_zoom_factor: 1.5
    """

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = Path(base_dir) if base_dir is not None else DEFAULT_LEVELS_DIR
        self._levels, self._config = self._load_levels()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @property
    def config(self) -> GameConfig:
        return self._config

    def all(self) -> List[LevelDefinition]:
        return list(self._levels)

    def __len__(self) -> int:
        return len(self._levels)

    def _manifest_path(self) -> Path:
        if not self._base_dir.exists():
            raise ConfigError(f"Levels directory not found: {self._base_dir}")
        for name in MANIFEST_NAMES:
            candidate = self._base_dir / name
            if candidate.exists():
                return candidate
        raise ConfigError(f"No level manifest ({', '.join(MANIFEST_NAMES)}) in {self._base_dir}")

    def _load_levels(self) -> Tuple[List[LevelDefinition], GameConfig]:
        manifest = self._manifest_path()
        try:
            raw = yaml.safe_load(manifest.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"{manifest.name}: could not be read: {e}") from e
        if not raw or not isinstance(raw, dict):
            raise ConfigError(f"{manifest.name}: expected a mapping with a 'levels' list")

        config = GameConfig.from_mapping(raw.get("settings"))

        entries = raw.get("levels")
        if not isinstance(entries, list):
            raise ConfigError(f"{manifest.name}: 'levels' must be a list")

        levels: List[LevelDefinition] = []
        for index, entry in enumerate(entries):
            levels.append(self._parse_level(manifest, index, entry))

        if not levels:
            raise ConfigError(f"{manifest.name}: no levels defined")
        logger.info("Loaded %d levels from %s", len(levels), manifest)
        return levels, config

    def _parse_level(self, manifest: Path, index: int, entry: Any) -> LevelDefinition:
        where = f"{manifest.name}: level {index + 1}"
        if not isinstance(entry, dict):
            raise ConfigError(f"{where}: expected a mapping")

        name = entry.get("name")
        if not name or not isinstance(name, str):
            raise ConfigError(f"{where}: missing or invalid 'name'")
        image = entry.get("image")
        if not image or not isinstance(image, str):
            raise ConfigError(f"{where}: missing or invalid 'image'")

        region_raw = entry.get("click_region", entry.get("clickRegion"))
        region = _parse_region(where, region_raw)

        zoom = entry.get("desktop_zoom_factor", entry.get("desktopZoomFactor"))
        if zoom is not None:
            if not _is_number(zoom) or zoom <= 0:
                raise ConfigError(f"{where}: 'desktop_zoom_factor' must be a number greater than 0")
            zoom = float(zoom)

        return LevelDefinition(
            key=f"level{index + 1}",
            name=name.strip(),
            image=(manifest.parent / image).resolve(),
            click_region=region,
            desktop_zoom_factor=zoom,
        )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _parse_region(where: str, raw: Any) -> Rect:
    if not isinstance(raw, Mapping):
        raise ConfigError(f"{where}: missing 'click_region'")
    values = {}
    for key in ("x", "y", "width", "height"):
        value = raw.get(key)
        if not _is_number(value):
            raise ConfigError(f"{where}: click_region.{key} must be a number")
        values[key] = float(value)
    if values["width"] <= 0 or values["height"] <= 0:
        raise ConfigError(f"{where}: click_region width and height must be greater than 0")
    return Rect(**values)


def region_snippet(image_point: Point, width: int = 80, height: int = 100) -> str:
    """JSON region template at ``image_point``, for pasting into a level manifest."""
    region = {
        "x": int(round(image_point[0])),
        "y": int(round(image_point[1])),
        "width": width,
        "height": height,
    }
    return json.dumps(region, indent=2)
