from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator, validator


class Character(BaseModel):
    """Roleplay counterpart the learner talks to."""

    model_config = ConfigDict(frozen=True)

    name: str
    role: str
    avatar: str = "👤"


class KeywordSets(BaseModel):
    """Rubric keywords for a scenario; categories must not share a keyword."""

    model_config = ConfigDict(frozen=True)

    required: Tuple[str, ...]
    bonus: Tuple[str, ...] = ()
    forbidden: Tuple[str, ...] = ()

    @validator("required", "bonus", "forbidden", pre=True)
    def strip_keywords(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return tuple(str(item).strip() for item in value)
        return value

    @validator("required")
    def required_not_empty(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if not value:
            raise ValueError("required keywords must not be empty")
        return value

    @model_validator(mode="after")
    def categories_are_disjoint(self) -> "KeywordSets":
        seen: Dict[str, str] = {}
        for category in ("required", "bonus", "forbidden"):
            for keyword in getattr(self, category):
                if not keyword:
                    raise ValueError(f"{category} contains an empty keyword")
                key = keyword.lower()
                if key in seen:
                    raise ValueError(
                        f"keyword {keyword!r} appears in both {seen[key]} and {category}"
                        if seen[key] != category
                        else f"keyword {keyword!r} is listed twice in {category}"
                    )
                seen[key] = category
        return self

    def year_keywords(self) -> Tuple[str, ...]:
        """Required keywords that look like four-digit years."""
        return tuple(keyword for keyword in self.required if len(keyword) == 4 and keyword.isdigit())


class FeedbackTemplates(BaseModel):
    """Messages selected by the final star tier."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    perfect: str
    good: str
    needs_work: str = Field(..., alias="needsWork")
    poor: str
    off_topic: Optional[str] = Field(None, alias="offTopic")


class Scenario(BaseModel):
    """Immutable definition of one roleplay exercise and its rubric."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str = ""
    character: Character
    questions: Tuple[str, ...]
    keywords: KeywordSets
    feedback: FeedbackTemplates
    concepts: Dict[str, str] = Field(
        default_factory=dict,
        description="Keyword to human-readable concept name used in summary feedback.",
    )
    briefing: str = ""
    intro: str = ""

    @model_validator(mode="before")
    @classmethod
    def accept_single_question(cls, data: Any) -> Any:
        if isinstance(data, dict) and "questions" not in data and "question" in data:
            data = dict(data)
            data["questions"] = [data.pop("question")]
        return data

    @validator("questions")
    def questions_not_empty(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if not value:
            raise ValueError("scenario needs at least one question")
        return value

    @model_validator(mode="after")
    def default_briefing(self) -> "Scenario":
        if not self.briefing:
            object.__setattr__(
                self,
                "briefing",
                f"You will be speaking with {self.character.name}, {self.character.role}.",
            )
        return self

    @property
    def opening_question(self) -> str:
        return self.questions[0]

    def concept_for(self, keyword: str) -> str:
        """Return the display name for a rubric keyword, defaulting to the keyword itself."""
        return self.concepts.get(keyword, keyword)
