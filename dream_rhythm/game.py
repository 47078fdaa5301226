import enum
import math
import uuid
import random
import logging
from dataclasses import dataclass, field
from typing import Callable

from .config import (
    GAME_LIVES,
    SPAWN_INTERVAL_SEC,
    TICK_SEC,
    FALL_DURATION_SEC,
    SPAWN_MARGIN,
    SPAWN_Y,
    MOON_RADIUS,
    BUBBLE_RADIUS,
    MOON_BOTTOM_OFFSET,
    MAX_TICKS_PER_ADVANCE,
)
from .stats import game_reward
from .utils import clamp


class GameState(enum.Enum):
    MENU = "menu"
    PLAYING = "playing"
    GAME_OVER = "game_over"


@dataclass
class Bubble:
    x: float
    y: float
    age: float = 0.0
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


class CatchTheZzz:
    def __init__(
        self,
        width: float,
        height: float,
        rng: random.Random | None = None,
        on_game_over: Callable[[int], None] | None = None,
        logger: logging.Logger | None = None,
    ):
        self.width = float(width)
        self.height = float(height)
        self._rng = rng or random.Random()
        self._on_game_over = on_game_over
        self._logger = logger or logging.getLogger("DreamRhythm")

        self.state = GameState.MENU
        self.score = 0
        self.lives = GAME_LIVES
        self.bubbles: list[Bubble] = []
        self.avatar_offset = 0.0
        self.last_reward: int | None = None

        self._spawn_clock = 0.0
        self._pending = 0.0

    # Geometry
    @property
    def fall_speed(self) -> float:
        return (self.bottom_edge - SPAWN_Y) / FALL_DURATION_SEC

    @property
    def bottom_edge(self) -> float:
        return self.height + abs(SPAWN_Y)

    @property
    def max_offset(self) -> float:
        return max(0.0, self.width / 2 - MOON_RADIUS)

    @property
    def avatar_position(self) -> tuple[float, float]:
        return self.width / 2 + self.avatar_offset, self.height - MOON_BOTTOM_OFFSET

    def resize(self, width: float, height: float) -> None:
        self.width = float(width)
        self.height = float(height)
        self.move_avatar(self.avatar_offset)

    # State transitions
    def start(self) -> None:
        if self.state == GameState.PLAYING:
            return
        self.state = GameState.PLAYING
        self.score = 0
        self.lives = GAME_LIVES
        self.bubbles = []
        self.avatar_offset = 0.0
        self.last_reward = None
        self._spawn_clock = 0.0
        self._pending = 0.0
        self._logger.info("GAME start")

    def back_to_menu(self) -> None:
        if self.state == GameState.GAME_OVER:
            self.state = GameState.MENU

    def abandon(self) -> None:
        if self.state == GameState.PLAYING:
            self._logger.info(f"GAME abandoned score={self.score}")
        self.state = GameState.MENU
        self.bubbles = []
        self._pending = 0.0
        self._spawn_clock = 0.0

    # Input
    def move_avatar(self, offset: float) -> None:
        limit = self.max_offset
        self.avatar_offset = clamp(float(offset), -limit, limit)

    # Simulation
    def advance(self, elapsed: float) -> int:
        """Run as many fixed ticks as ``elapsed`` covers. Returns ticks run."""
        if self.state != GameState.PLAYING or elapsed <= 0:
            return 0
        self._pending += elapsed
        ticks = 0
        while self._pending >= TICK_SEC and self.state == GameState.PLAYING:
            self._pending -= TICK_SEC
            self.tick()
            ticks += 1
            if ticks >= MAX_TICKS_PER_ADVANCE:
                self._pending = 0.0
                break
        return ticks

    def tick(self) -> None:
        if self.state != GameState.PLAYING:
            return

        self._spawn_clock += TICK_SEC
        # Small epsilon so float drift does not push a spawn one tick late
        if self._spawn_clock + 1e-9 >= SPAWN_INTERVAL_SEC:
            self._spawn_clock -= SPAWN_INTERVAL_SEC
            self.spawn()

        step = self.fall_speed * TICK_SEC
        for b in self.bubbles:
            b.y += step
            b.age += TICK_SEC

        self._scan()

    def spawn(self) -> Bubble:
        lo = SPAWN_MARGIN
        hi = max(lo, self.width - SPAWN_MARGIN)
        bubble = Bubble(x=self._rng.uniform(lo, hi), y=SPAWN_Y)
        self.bubbles.append(bubble)
        return bubble

    def _scan(self) -> None:
        ax, ay = self.avatar_position
        reach = MOON_RADIUS + BUBBLE_RADIUS

        for bubble in list(self.bubbles):
            if math.hypot(bubble.x - ax, bubble.y - ay) < reach:
                self.bubbles.remove(bubble)
                self.score += 1
                # One catch per tick
                return

            if bubble.age + 1e-9 >= FALL_DURATION_SEC:
                self.bubbles.remove(bubble)
                self.lives -= 1
                if self.lives <= 0:
                    self._game_over()
                    return

    def _game_over(self) -> None:
        self.state = GameState.GAME_OVER
        self.bubbles = []
        self.last_reward = game_reward(self.score)
        self._logger.info(f"GAME over score={self.score} stars={self.last_reward}")
        if self._on_game_over is not None:
            self._on_game_over(self.last_reward)
