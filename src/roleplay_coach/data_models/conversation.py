from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from roleplay_coach.data_models.scenario import Scenario

OFF_TOPIC_MARKER = "[OFF_TOPIC]"


class Speaker(str, enum.Enum):
    USER = "user"
    CHARACTER = "character"


class DialogueState(str, enum.Enum):
    """Phase of a single attempt. `COMPLETED` is terminal."""

    AWAITING_INPUT = "awaiting_input"
    EVALUATING = "evaluating"
    ASKING_FOLLOW_UP = "asking_follow_up"
    CONFIRMING_BEFORE_END = "confirming_before_end"
    COMPLETED = "completed"


class CompletionReason(str, enum.Enum):
    ALL_REQUIRED_COVERED = "all_required_covered"
    POLICY_SATISFIED = "policy_satisfied"
    FORCE_END = "force_end"
    OFF_TOPIC = "off_topic"
    NO_FOLLOW_UP = "no_follow_up"
    TURN_LIMIT = "turn_limit"


@dataclass(frozen=True)
class Turn:
    speaker: Speaker
    text: str


@dataclass
class ConversationAttempt:
    """
    Mutable state of one play-through of a scenario.

    `follow_up_attempts` is keyed by the scenario policy's coverage flag value, so asking the
    same follow-up twice for an unchanged coverage state can be detected without building
    string keys. The attempt is discarded once it is complete and has been evaluated.
    """

    scenario: Scenario
    transcript: List[Turn] = field(default_factory=list)
    force_end: bool = False
    follow_up_attempts: Dict[enum.Flag, int] = field(default_factory=dict)
    state: DialogueState = DialogueState.AWAITING_INPUT
    complete: bool = False
    last_follow_up: Optional[str] = None
    completion_reason: Optional[CompletionReason] = None
    final_transcript: Optional[str] = None
    evaluated: bool = False

    def user_turns(self) -> List[str]:
        return [turn.text for turn in self.transcript if turn.speaker is Speaker.USER]

    def combined_user_text(self, exclude_last: bool = False) -> str:
        """Join user utterances with single spaces, optionally leaving out the latest one."""
        turns = self.user_turns()
        if exclude_last:
            turns = turns[:-1]
        return " ".join(turns)

    def add_turn(self, speaker: Speaker, text: str) -> None:
        self.transcript.append(Turn(speaker=speaker, text=text))


@dataclass(frozen=True)
class ShowFollowUp:
    """Reveal another character line and wait for the next utterance."""

    text: str
    delay_seconds: float = 0.0
    escalated: bool = False


@dataclass(frozen=True)
class Complete:
    """The conversation is over; `final_transcript` goes to the evaluator once."""

    final_transcript: str
    reason: CompletionReason
    delay_seconds: float = 0.0
    closing_line: Optional[str] = None


DialogueAction = Union[ShowFollowUp, Complete]


@dataclass(frozen=True)
class TurnResult:
    attempt: ConversationAttempt
    action: DialogueAction

    @property
    def completed(self) -> bool:
        return isinstance(self.action, Complete)
