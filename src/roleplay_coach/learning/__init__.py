from .models import GameState, Level, ScenarioProgress
from .progress import ProgressTracker

__all__ = [
    "GameState",
    "Level",
    "ProgressTracker",
    "ScenarioProgress",
]
