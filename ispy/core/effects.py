"""Cosmetic effects.

Each effect is a small state object with ``update(dt) -> done``. ``dt`` is in
milliseconds; per-frame rates are expressed for a 60 Hz frame and scaled by
``dt``. None of these touch hit testing, timers or scores.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import ClassVar, List, Optional, Tuple, Union

from ispy.core.geometry import Point

FRAME_MS = 1000.0 / 60.0

Color = Tuple[int, int, int]

PARTICLE_COLORS: List[Color] = [
    (255, 215, 0),
    (255, 165, 0),
    (255, 69, 0),
    (255, 20, 147),
    (138, 43, 226),
]

CONFETTI_COLORS: List[Color] = [
    (255, 0, 0),
    (0, 255, 0),
    (0, 0, 255),
    (255, 255, 0),
    (255, 0, 255),
    (0, 255, 255),
    (255, 165, 0),
    (128, 0, 128),
]


def _frames(dt: float) -> float:
    return max(0.0, dt) / FRAME_MS


@dataclass
class Particle:
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    life: float = 1.0
    decay: float = 0.015
    size: float = 4.0
    color: Color = (255, 255, 255)
    rotation: float = 0.0
    rotation_speed: float = 0.0
    friction: float = 1.0
    gravity: float = 0.0
    twinkle: float = 0.0

    @property
    def alive(self) -> bool:
        return self.life > 0.0

    def step(self, frames: float) -> None:
        self.x += self.vx * frames
        self.y += self.vy * frames
        self.vx *= self.friction ** frames
        self.vy *= self.friction ** frames
        self.vy += self.gravity * frames
        self.rotation += self.rotation_speed * frames
        self.life -= self.decay * frames


@dataclass
class ParticleBurst:
    """Correct-click feedback: expanding rings with particles, confetti and sparkles."""

    kind: ClassVar[str] = "burst"

    x: float
    y: float
    radius: float = 0.0
    max_radius: float = 150.0
    alpha: float = 255.0
    particles: List[Particle] = field(default_factory=list)
    confetti: List[Particle] = field(default_factory=list)
    sparkles: List[Particle] = field(default_factory=list)

    @classmethod
    def at(cls, point: Point, rng: Optional[random.Random] = None) -> "ParticleBurst":
        rng = rng or random.Random()
        x, y = point
        burst = cls(x=x, y=y)
        count = 20
        for i in range(count):
            angle = math.tau * i / count
            speed = 3.0 + rng.random() * 5.0
            burst.particles.append(
                Particle(
                    x=x,
                    y=y,
                    vx=math.cos(angle) * speed,
                    vy=math.sin(angle) * speed,
                    decay=0.015,
                    size=3.0 + rng.random() * 4.0,
                    color=rng.choice(PARTICLE_COLORS),
                    friction=0.98,
                )
            )
        for _ in range(15):
            burst.confetti.append(
                Particle(
                    x=x,
                    y=y,
                    vx=(rng.random() - 0.5) * 6.0,
                    vy=-rng.random() * 8.0 - 2.0,
                    decay=0.01,
                    size=4.0 + rng.random() * 6.0,
                    color=rng.choice(CONFETTI_COLORS),
                    rotation=rng.random() * math.tau,
                    rotation_speed=(rng.random() - 0.5) * 0.2,
                    gravity=0.2,
                )
            )
        for _ in range(12):
            burst.sparkles.append(
                Particle(
                    x=x + (rng.random() - 0.5) * 40.0,
                    y=y + (rng.random() - 0.5) * 40.0,
                    decay=0.03,
                    size=2.0 + rng.random() * 3.0,
                    twinkle=rng.random() * math.tau,
                )
            )
        return burst

    def update(self, dt: float) -> bool:
        frames = _frames(dt)
        self.radius += 4.0 * frames
        self.alpha -= 4.0 * frames
        for particle in self.particles:
            particle.step(frames)
        for piece in self.confetti:
            piece.step(frames)
        for sparkle in self.sparkles:
            sparkle.life -= sparkle.decay * frames
            sparkle.twinkle += 0.3 * frames
        return self.done

    @property
    def done(self) -> bool:
        return self.radius >= self.max_radius or self.alpha <= 0.0


@dataclass
class XMark:
    """Incorrect-click feedback: a red X that grows, spins and fades."""

    kind: ClassVar[str] = "xmark"

    x: float
    y: float
    size: float = 0.0
    max_size: float = 30.0
    alpha: float = 255.0
    rotation: float = 0.0

    def update(self, dt: float) -> bool:
        frames = _frames(dt)
        self.size += 2.0 * frames
        self.alpha -= 8.0 * frames
        self.rotation += 0.1 * frames
        return self.done

    @property
    def done(self) -> bool:
        return self.size >= self.max_size or self.alpha <= 0.0


@dataclass
class ShakeEffect:
    """Horizontal jitter with exponential decay after a wrong click."""

    kind: ClassVar[str] = "shake"

    intensity: float = 10.0
    decay: float = 0.9
    offset: float = 0.0
    cutoff: float = 0.1
    rng: random.Random = field(default_factory=random.Random, repr=False)

    def update(self, dt: float) -> bool:
        if self.done:
            self.offset = 0.0
            return True
        self.offset = (self.rng.random() - 0.5) * self.intensity
        self.intensity *= self.decay ** _frames(dt)
        if self.intensity < self.cutoff:
            self.intensity = 0.0
            self.offset = 0.0
        return self.done

    @property
    def done(self) -> bool:
        return self.intensity < self.cutoff


@dataclass
class FadeTransition:
    """White fade between levels; opacity follows a half sine over the duration."""

    kind: ClassVar[str] = "fade"

    duration: float = 800.0
    elapsed: float = 0.0
    max_alpha: float = 255.0

    @property
    def progress(self) -> float:
        if self.duration <= 0:
            return 1.0
        return min(self.elapsed / self.duration, 1.0)

    @property
    def alpha(self) -> float:
        return math.sin(self.progress * math.pi) * self.max_alpha

    def update(self, dt: float) -> bool:
        self.elapsed += max(0.0, dt)
        return self.done

    @property
    def done(self) -> bool:
        return self.progress >= 1.0


@dataclass
class Celebration:
    """Confetti rain shown when the last level is cleared."""

    kind: ClassVar[str] = "celebration"

    duration: float = 3000.0
    elapsed: float = 0.0
    pieces: List[Particle] = field(default_factory=list)

    @classmethod
    def across(cls, width: float, rng: Optional[random.Random] = None, count: int = 50) -> "Celebration":
        rng = rng or random.Random()
        celebration = cls()
        for _ in range(count):
            celebration.pieces.append(
                Particle(
                    x=rng.random() * width,
                    y=-10.0,
                    vx=(rng.random() - 0.5) * 4.0,
                    vy=rng.random() * 3.0 + 1.0,
                    decay=0.002,
                    size=4.0 + rng.random() * 6.0,
                    color=rng.choice(CONFETTI_COLORS),
                    rotation=rng.random() * math.tau,
                    rotation_speed=(rng.random() - 0.5) * 0.1,
                    gravity=0.1,
                )
            )
        return celebration

    def update(self, dt: float) -> bool:
        frames = _frames(dt)
        self.elapsed += max(0.0, dt)
        for piece in self.pieces:
            if piece.alive:
                piece.step(frames)
        return self.done

    @property
    def done(self) -> bool:
        return self.elapsed >= self.duration


Feedback = Union[ParticleBurst, XMark]
Effect = Union[ParticleBurst, XMark, ShakeEffect, FadeTransition, Celebration]
