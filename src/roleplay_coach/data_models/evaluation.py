from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, validator

MAX_STARS = 3.0


class DetailedFeedback(BaseModel):
    """Explanation artefacts for display; never fed back into scoring."""

    model_config = ConfigDict(frozen=True)

    required_found: List[str] = Field(default_factory=list)
    bonus_found: List[str] = Field(default_factory=list)
    forbidden_found: List[str] = Field(default_factory=list)
    missing_required: List[str] = Field(default_factory=list)
    numerical_hints: Optional[List[str]] = None
    specific_hints: Optional[List[str]] = None


class EvaluationResult(BaseModel):
    """Final score of one attempt: stars on the half-star grid plus feedback."""

    model_config = ConfigDict(frozen=True)

    stars: float = Field(..., ge=0, le=MAX_STARS)
    feedback: str
    summary_feedback: Optional[str] = None
    detailed_feedback: DetailedFeedback = Field(default_factory=DetailedFeedback)

    @validator("stars")
    def on_half_star_grid(cls, value: float) -> float:
        if (value * 2) % 1:
            raise ValueError("stars must be a multiple of 0.5")
        return value

    @property
    def is_perfect(self) -> bool:
        return self.stars >= MAX_STARS
