from __future__ import annotations


class RoleplayCoachError(Exception):
    """Base class for errors raised by the conversation engine."""


class ScenarioConfigError(RoleplayCoachError, ValueError):
    """Raised when scenario configuration is malformed (empty rubric, overlapping keywords)."""


class ScenarioNotFoundError(RoleplayCoachError, KeyError):
    """Raised when a scenario id is not present in the catalog."""

    def __init__(self, scenario_id: str):
        super().__init__(scenario_id)
        self.scenario_id = scenario_id

    def __str__(self) -> str:
        return f"Unknown scenario: {self.scenario_id!r}"


class InvalidUtteranceError(RoleplayCoachError, ValueError):
    """Raised when an empty or whitespace-only utterance is submitted."""


class AttemptClosedError(RoleplayCoachError, RuntimeError):
    """Raised when a completed attempt receives another utterance."""
