from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Optional

from roleplay_coach.data_models import MAX_STARS
from roleplay_coach.learning.models import GameState, Level, ScenarioProgress

if TYPE_CHECKING:
    from roleplay_coach.storage.progress_store import ProgressStore

logger = logging.getLogger(__name__)


class ProgressTracker:
    """
    Keep the player's per-scenario best scores, experience points and level.

    The tracker holds the game state in memory and writes it through the injected
    `ProgressStore` after every recorded attempt. Best scores only ever go up; experience
    and level are derived from the sum of best scores, so replaying a scenario with a
    worse result changes nothing but the attempt count.

    Level thresholds are multiples of `stars_per_level` total stars:

    - Beginner below 1x
    - Competent from 1x
    - Proficient from 2x
    - Expert from 3x

    Attributes
    ----------
    store : ProgressStore
        Persistence backend; `JsonProgressStore` on disk or `InMemoryProgressStore` in tests.
    xp_per_star : int
        Experience points awarded per best-score star.
    stars_per_level : float
        Total stars needed per level step.

    Examples
    --------
    >>> tracker = ProgressTracker(InMemoryProgressStore())
    >>> tracker.record_attempt("volvo", 2.0).best_score
    2.0
    >>> tracker.record_attempt("volvo", 1.0).best_score
    2.0
    >>> tracker.total_xp()
    200
    >>> tracker.level()
    <Level.BEGINNER: 'Beginner'>
    """

    def __init__(
        self,
        store: ProgressStore,
        xp_per_star: int = 100,
        stars_per_level: float = 3.0,
        max_stars: float = MAX_STARS,
    ):
        self.store = store
        self.xp_per_star = xp_per_star
        self.stars_per_level = stars_per_level
        self.max_stars = max_stars
        self.state: GameState = store.load()

    def load(self) -> GameState:
        """Re-read the state from the store, discarding unsaved changes."""
        self.state = self.store.load()
        return self.state

    def save(self) -> None:
        self.store.save(self.state)

    def record_attempt(self, scenario_id: str, stars: float) -> ScenarioProgress:
        """
        Register a finished attempt and persist the updated state.

        Parameters
        ----------
        scenario_id : str
            Scenario the attempt belongs to.
        stars : float
            Star rating from the evaluator, within [0, max_stars].

        Returns
        -------
        ScenarioProgress
            The scenario's updated progress record.

        Raises
        ------
        ValueError
            If `stars` is outside [0, max_stars].
        """
        if not 0 <= stars <= self.max_stars:
            raise ValueError(f"stars must be between 0 and {self.max_stars}, got {stars}")

        progress = self.state.scenario_progress.get(scenario_id) or ScenarioProgress(scenario_id)
        progress.attempts += 1
        progress.best_score = max(progress.best_score, stars)
        progress.completed = progress.best_score == self.max_stars
        self.state.scenario_progress[scenario_id] = progress

        if progress.completed and scenario_id not in self.state.completed_scenarios:
            self.state.completed_scenarios.append(scenario_id)

        self.state.total_xp = self.total_xp()
        self.state.current_level = self.level()
        self.save()
        logger.info(
            "Recorded %s attempt %d: stars=%.1f best=%.1f xp=%d level=%s",
            scenario_id,
            progress.attempts,
            stars,
            progress.best_score,
            self.state.total_xp,
            self.state.current_level.value,
        )
        return progress

    def scenario_progress(self, scenario_id: str) -> Optional[ScenarioProgress]:
        return self.state.scenario_progress.get(scenario_id)

    def total_stars(self) -> float:
        return sum(progress.best_score for progress in self.state.scenario_progress.values())

    def total_xp(self) -> int:
        return int(self.total_stars() * self.xp_per_star)

    def level(self) -> Level:
        stars = self.total_stars()
        if stars >= self.stars_per_level * 3:
            return Level.EXPERT
        if stars >= self.stars_per_level * 2:
            return Level.PROFICIENT
        if stars >= self.stars_per_level:
            return Level.COMPETENT
        return Level.BEGINNER

    def stars_to_next_level(self) -> Optional[float]:
        """Stars still needed for the next level, or None at Expert."""
        stars = self.total_stars()
        if stars >= self.stars_per_level * 3:
            return None
        next_threshold = (math.floor(stars / self.stars_per_level) + 1) * self.stars_per_level
        return next_threshold - stars

    def reset(self) -> GameState:
        self.state = GameState()
        self.save()
        logger.info("Progress reset")
        return self.state
