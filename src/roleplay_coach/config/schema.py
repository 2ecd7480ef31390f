from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, validator


class MatchingConfig(BaseModel):
    """Lexical matching knobs shared by the dialogue engine and the evaluator."""

    proximity_window: int = Field(
        15, ge=1, description="Maximum character gap between consecutive words of a phrase keyword."
    )
    year_tolerance: int = Field(2, ge=0, description="Distance (in years) counted as a close answer.")


class ScoringConfig(BaseModel):
    """Star-tier parameters for the response evaluator."""

    bonus_weight: float = Field(
        0.5, ge=0, description="Weight of each bonus keyword in 2 + floor(count * weight * 2)."
    )


class DialogueConfig(BaseModel):
    """Turn handling for the multi-turn conversation engine."""

    max_user_turns: int = Field(6, ge=1, description="Hard cap on user turns per attempt.")
    follow_up_delay: float = Field(1.5, ge=0, description="Seconds before a follow-up is revealed.")
    completion_delay: float = Field(1.0, ge=0, description="Seconds before the result is revealed.")
    phrase_seed: Optional[int] = Field(
        None, description="Seed for cosmetic phrase variation; None draws from system entropy."
    )


class ProgressConfig(BaseModel):
    """Persistence and reward tiers for scenario progress."""

    storage_key: str = Field("up-simu-game-state")
    xp_per_star: int = Field(100, ge=0)
    stars_per_level: float = Field(3.0, gt=0)


class PathsConfig(BaseModel):
    """Filesystem layout for the scenario catalog and the progress file."""

    scenarios_file: Optional[Path] = Field(
        None, description="Custom scenario catalog; None uses the bundled catalog."
    )
    progress_file: Path = Field(Path("data/progress.json"))


class LoggingConfig(BaseModel):
    """Controls for logging output and format."""

    level: str = Field("INFO")
    use_json: bool = False

    @validator("level")
    def known_level(cls, value: str) -> str:
        """Reject level names the logging module does not define."""
        if value.upper() not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Unknown log level: {value}")
        return value.upper()


class Settings(BaseModel):
    """Top-level project configuration aggregating all sub-settings."""

    project_name: str = Field("Roleplay Coach")
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    dialogue: DialogueConfig = Field(default_factory=DialogueConfig)
    progress: ProgressConfig = Field(default_factory=ProgressConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
