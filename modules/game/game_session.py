"""
Round, timer and score state for the hand-sign game.

Each round asks for a random target sign. Showing it before the countdown
runs out scores points and starts the next round; running out of time
ends the game and a new one starts right away. The countdown shrinks by
one second every few rounds down to a floor.

State lives on the session object; the classifier only feeds it labels.
"""

import random
import time
import logging
from typing import Callable, Optional, Sequence

from core.events import EventBus, Events

logger = logging.getLogger(__name__)

DEFAULT_SIGNS = ("duim omhoog", "duim omlaag", "hand", "oke", "middlefinger", "peace", "vuist")


class GameSession:
    """Scores a player against randomly chosen target gestures."""

    def __init__(self, config: dict = None, signs: Sequence[str] = None,
                 rng: random.Random = None, clock: Callable[[], float] = time.monotonic,
                 event_bus: Optional[EventBus] = None):
        config = config or {}
        self._round_time = config.get("round_time_sec", 10)
        self._min_round_time = config.get("min_round_time_sec", 3)
        self._rounds_per_step = max(config.get("rounds_per_step", 10), 1)
        self._points_per_hit = config.get("points_per_hit", 10)

        self._signs = list(signs) if signs else list(DEFAULT_SIGNS)
        self._rng = rng or random.Random()
        self._clock = clock
        self._bus = event_bus

        self._score = 0
        self._round = 1
        self._target = None
        self._time_limit = 0
        self._deadline = None
        self._games_played = 0
        self._high_score = 0

    # --- state ---

    @property
    def score(self) -> int:
        return self._score

    @property
    def round(self) -> int:
        """Number of the next round to be played."""
        return self._round

    @property
    def target(self) -> Optional[str]:
        return self._target

    @property
    def time_limit(self) -> int:
        return self._time_limit

    @property
    def is_running(self) -> bool:
        return self._deadline is not None

    @property
    def high_score(self) -> int:
        return self._high_score

    @property
    def signs(self) -> list:
        return list(self._signs)

    def time_left(self, now: float = None) -> float:
        if self._deadline is None:
            return 0.0
        now = self._clock() if now is None else now
        return max(self._deadline - now, 0.0)

    def round_time_for(self, round_number: int) -> int:
        """Countdown length in seconds for the given round."""
        return max(self._round_time - (round_number - 1) // self._rounds_per_step,
                   self._min_round_time)

    # --- control ---

    def start(self, now: float = None):
        """Start a new game."""
        self._score = 0
        self._round = 1
        self._games_played += 1
        logger.info("Game #%d started", self._games_played)
        self.next_round(now)

    def next_round(self, now: float = None):
        """Pick a new target and restart the countdown at now (default: the clock)."""
        now = self._clock() if now is None else now
        self._target = self._rng.choice(self._signs)
        self._time_limit = self.round_time_for(self._round)
        self._deadline = now + self._time_limit
        logger.info("Round %d: make '%s' (%ds)", self._round, self._target, self._time_limit)

        if self._bus is not None:
            self._bus.emit(Events.ROUND_STARTED, round=self._round, target=self._target,
                           time_limit=self._time_limit, score=self._score)
        self._round += 1

    def submit(self, label: Optional[str]) -> bool:
        """Check a recognized label against the current target.

        Returns:
            True if it matched and the next round has started
        """
        if not self.is_running or label is None or label != self._target:
            return False

        self._score += self._points_per_hit
        logger.info("Target '%s' hit, score %d", label, self._score)
        if self._bus is not None:
            self._bus.emit(Events.TARGET_HIT, target=label, score=self._score)
        self.next_round()
        return True

    def update(self, now: float = None) -> bool:
        """Advance the countdown.

        Returns:
            True if time ran out; the finished game is reported and a new
            one has started
        """
        if not self.is_running or self.time_left(now) > 0:
            return False

        final_score = self._score
        self._high_score = max(self._high_score, final_score)
        logger.info("Time is up! Final score: %d", final_score)
        if self._bus is not None:
            self._bus.emit(Events.GAME_OVER, score=final_score, rounds=self._round - 1)
        self.start(now)
        return True

    def stop(self):
        """Stop the game without starting a new one."""
        self._high_score = max(self._high_score, self._score)
        self._deadline = None
        self._target = None
