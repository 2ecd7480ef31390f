from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from roleplay_coach.learning.models import GameState

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "up-simu-game-state"


class ProgressStore(ABC):
    """Where the game state lives between sessions."""

    @abstractmethod
    def load(self) -> GameState:
        """Return the stored state, or a fresh one when nothing is stored."""

    @abstractmethod
    def save(self, state: GameState) -> None:
        """Persist the given state, replacing what was stored."""


class InMemoryProgressStore(ProgressStore):
    def __init__(self, state: Optional[GameState] = None):
        self._data = state.to_dict() if state is not None else None

    def load(self) -> GameState:
        if self._data is None:
            return GameState()
        return GameState.from_dict(self._data)

    def save(self, state: GameState) -> None:
        self._data = state.to_dict()


class JsonProgressStore(ProgressStore):
    """
    Single JSON document holding the game state under a fixed storage key.

    File format::

        {"up-simu-game-state": {"currentLevel": "Beginner", "totalXP": 0,
                                "scenarioProgress": {}, "completedScenarios": []}}

    A file that cannot be parsed is logged and treated as empty, so a damaged save
    never blocks play. The next `save` overwrites it.
    """

    def __init__(self, path: Path, key: str = DEFAULT_STORAGE_KEY):
        """Ensure the backing directory exists and record the JSON filepath."""
        self.path = Path(path)
        self.key = key
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def load(self) -> GameState:
        if not self.path.exists():
            return GameState()
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                document = json.load(handle)
            return GameState.from_dict(document[self.key])
        except (json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.error("Failed to load game state from %s: %s", self.path, exc)
            return GameState()

    def save(self, state: GameState) -> None:
        with self.path.open("w", encoding="utf-8") as handle:
            json.dump({self.key: state.to_dict()}, handle, indent=2)
        logger.debug("Saved game state to %s", self.path)
