from .conversation import (
    OFF_TOPIC_MARKER,
    Complete,
    CompletionReason,
    ConversationAttempt,
    DialogueAction,
    DialogueState,
    ShowFollowUp,
    Speaker,
    Turn,
    TurnResult,
)
from .evaluation import MAX_STARS, DetailedFeedback, EvaluationResult
from .scenario import Character, FeedbackTemplates, KeywordSets, Scenario

__all__ = [
    "Character",
    "Complete",
    "CompletionReason",
    "ConversationAttempt",
    "DetailedFeedback",
    "DialogueAction",
    "DialogueState",
    "EvaluationResult",
    "FeedbackTemplates",
    "KeywordSets",
    "MAX_STARS",
    "OFF_TOPIC_MARKER",
    "Scenario",
    "ShowFollowUp",
    "Speaker",
    "Turn",
    "TurnResult",
]
