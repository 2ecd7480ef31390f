from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class Level(str, Enum):
    BEGINNER = "Beginner"
    COMPETENT = "Competent"
    PROFICIENT = "Proficient"
    EXPERT = "Expert"


@dataclass
class ScenarioProgress:
    """Best result and attempt count for one scenario."""

    scenario_id: str
    best_score: float = 0.0
    attempts: int = 0
    completed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scenarioId": self.scenario_id,
            "bestScore": self.best_score,
            "attempts": self.attempts,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScenarioProgress":
        return cls(
            scenario_id=data["scenarioId"],
            best_score=float(data.get("bestScore", 0.0)),
            attempts=int(data.get("attempts", 0)),
            completed=bool(data.get("completed", False)),
        )


@dataclass
class GameState:
    """Whole-player record persisted between sessions."""

    current_level: Level = Level.BEGINNER
    total_xp: int = 0
    scenario_progress: Dict[str, ScenarioProgress] = field(default_factory=dict)
    completed_scenarios: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentLevel": self.current_level.value,
            "totalXP": self.total_xp,
            "scenarioProgress": {
                scenario_id: progress.to_dict()
                for scenario_id, progress in self.scenario_progress.items()
            },
            "completedScenarios": list(self.completed_scenarios),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameState":
        return cls(
            current_level=Level(data.get("currentLevel", Level.BEGINNER.value)),
            total_xp=int(data.get("totalXP", 0)),
            scenario_progress={
                scenario_id: ScenarioProgress.from_dict(progress)
                for scenario_id, progress in data.get("scenarioProgress", {}).items()
            },
            completed_scenarios=list(data.get("completedScenarios", [])),
        )
