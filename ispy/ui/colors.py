"""Theme colors and the random color helpers for the level-start screens."""

from __future__ import annotations

import colorsys
import random
from dataclasses import dataclass
from typing import List, Optional, Tuple


class GameColors:
    """Fixed palette for the HUD, cards and buttons."""

    BG_DARK = "#1b1b2f"
    CANVAS_BG = "#10101c"

    PRIMARY = "#6c5ce7"
    PRIMARY_LIGHT = "#a29bfe"
    PRIMARY_DARK = "#4834d4"

    CORAL = "#ff6b6b"
    AMBER = "#feca57"
    MINT = "#1dd1a1"

    CARD_BG = "rgba(255, 255, 255, 0.92)"
    HUD_BG = "rgba(20, 20, 40, 0.72)"

    TEXT_PRIMARY = "#2d3436"
    TEXT_SECONDARY = "#636e72"
    TEXT_ON_DARK = "#ffffff"

    PENALTY = "#e74c3c"
    TARGET_OUTLINE = "#00e676"


COLOR_PALETTES: List[List[str]] = [
    ["#FF6B6B", "#4ECDC4", "#FFE66D", "#95E1D3", "#F38181"],
    ["#A8E6CF", "#FFD93D", "#6BCB77", "#4D96FF", "#FF6B9D"],
    ["#C44569", "#F8B500", "#6C5CE7", "#00D2D3", "#FF6B81"],
    ["#10AC84", "#EE5A6F", "#5F27CD", "#00D2FF", "#FF9FF3"],
    ["#FF6348", "#2ED573", "#5352ED", "#FFA502", "#70A1FF"],
]

SHAPE_KINDS = ("circle", "square", "triangle")


@dataclass(frozen=True)
class DecorativeShape:
    kind: str
    color: str
    size: float
    # Position as a fraction of the screen, 0..1.
    x: float
    y: float


def hsl_to_hex(hue: float, saturation: float, lightness: float) -> str:
    """hue in degrees, saturation and lightness in percent."""
    r, g, b = colorsys.hls_to_rgb((hue % 360) / 360.0, lightness / 100.0, saturation / 100.0)
    return f"#{round(r * 255):02X}{round(g * 255):02X}{round(b * 255):02X}"


def random_bright_color(rng: Optional[random.Random] = None) -> str:
    """Saturated mid-lightness background color (hue 0-359, sat 80-99%, light 50-59%)."""
    rng = rng or random.Random()
    hue = rng.randrange(360)
    saturation = 80 + rng.randrange(20)
    lightness = 50 + rng.randrange(10)
    return hsl_to_hex(hue, saturation, lightness)


def pick_palette(rng: Optional[random.Random] = None) -> List[str]:
    rng = rng or random.Random()
    return list(rng.choice(COLOR_PALETTES))


def decorative_shapes(palette: List[str], rng: Optional[random.Random] = None) -> List[DecorativeShape]:
    """8 to 12 shapes in palette colors, 30-90 px, scattered over the screen."""
    rng = rng or random.Random()
    count = 8 + rng.randrange(5)
    return [
        DecorativeShape(
            kind=rng.choice(SHAPE_KINDS),
            color=rng.choice(palette),
            size=30.0 + rng.random() * 60.0,
            x=rng.random(),
            y=rng.random(),
        )
        for _ in range(count)
    ]


def colorful_screen(rng: Optional[random.Random] = None) -> Tuple[str, List[DecorativeShape]]:
    """A fresh bright background plus shapes from one random palette."""
    rng = rng or random.Random()
    background = random_bright_color(rng)
    return background, decorative_shapes(pick_palette(rng), rng)


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b. Anything else returns a unchanged."""
    a = a.strip()
    b = b.strip()
    if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
        return a
    t = max(0.0, min(1.0, float(t)))
    ar, ag, ab = int(a[1:3], 16), int(a[3:5], 16), int(a[5:7], 16)
    br, bg, bb = int(b[1:3], 16), int(b[3:5], 16), int(b[5:7], 16)
    r = int(ar + (br - ar) * t)
    g = int(ag + (bg - ag) * t)
    bl = int(ab + (bb - ab) * t)
    return f"#{r:02X}{g:02X}{bl:02X}"
