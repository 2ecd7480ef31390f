from __future__ import annotations

import logging
from typing import Optional

from roleplay_coach.config.schema import DialogueConfig
from roleplay_coach.data_models import (
    OFF_TOPIC_MARKER,
    Complete,
    CompletionReason,
    ConversationAttempt,
    DialogueState,
    Scenario,
    ShowFollowUp,
    Speaker,
    TurnResult,
)
from roleplay_coach.dialogue.phrasing import PhraseSelector
from roleplay_coach.dialogue.policies import PolicyRegistry, default_registry
from roleplay_coach.errors import AttemptClosedError, InvalidUtteranceError
from roleplay_coach.matching import KeywordMatcher

logger = logging.getLogger(__name__)


class DialogueEngine:
    """
    Multi-turn state machine for a single scenario attempt.

    Each submitted utterance is appended to the transcript and the combined user text is
    checked against the scenario's required keywords. The engine then either completes the
    attempt (all required covered, policy satisfied, confirmation already given, turn cap,
    off-topic reply, or nothing left to ask) or shows the policy's follow-up for the current
    coverage state. Asking the same coverage state twice escalates to a confirmation line
    and the next reply ends the attempt without being scored.

    Parameters
    ----------
    matcher : KeywordMatcher
        Shared lexical matcher; also used by the evaluator so both agree on coverage.
    policies : PolicyRegistry | None
        Scenario-specific follow-up scripts; defaults to the bundled registry.
    config : DialogueConfig | None
        Turn cap and presentation delays.
    phrases : PhraseSelector | None
        Cosmetic phrase variation. Inject `PhraseSelector.first()` for stable output.

    Examples
    --------
    >>> engine = DialogueEngine(KeywordMatcher(), phrases=PhraseSelector.first())
    >>> attempt = engine.start(catalog.get("volvo"))
    >>> result = engine.submit_utterance(attempt, "It was the ÖV4")
    >>> result.action.text
    'Good, you know the model! What year did we start production and who was it nicknamed after?'
    """

    def __init__(
        self,
        matcher: KeywordMatcher,
        policies: Optional[PolicyRegistry] = None,
        config: Optional[DialogueConfig] = None,
        phrases: Optional[PhraseSelector] = None,
    ):
        self.matcher = matcher
        self.policies = policies or default_registry()
        self.config = config or DialogueConfig()
        self.phrases = phrases or PhraseSelector(self.config.phrase_seed)

    def start(self, scenario: Scenario) -> ConversationAttempt:
        """Open an attempt with the scenario's first question as the character's turn."""
        attempt = ConversationAttempt(scenario=scenario)
        attempt.add_turn(Speaker.CHARACTER, scenario.opening_question)
        logger.info("Started attempt for scenario %s", scenario.id)
        return attempt

    def submit_utterance(self, attempt: ConversationAttempt, utterance: str) -> TurnResult:
        if attempt.complete:
            raise AttemptClosedError(f"Attempt for {attempt.scenario.id!r} is already complete")
        text = (utterance or "").strip()
        if not text:
            raise InvalidUtteranceError("Utterance must contain non-whitespace text")

        scenario = attempt.scenario
        policy = self.policies.get(scenario.id)
        attempt.state = DialogueState.EVALUATING
        attempt.add_turn(Speaker.USER, text)
        combined = attempt.combined_user_text()
        coverage = self.matcher.coverage(combined, scenario.keywords.required)
        logger.debug(
            "Scenario %s turn %d: covered=%s attempted=%s missing=%s",
            scenario.id,
            len(attempt.user_turns()),
            coverage.covered,
            sorted(coverage.attempted),
            coverage.missing,
        )

        if attempt.force_end:
            # The reply to the confirmation line is not scored.
            return self._complete(
                attempt, attempt.combined_user_text(exclude_last=True), CompletionReason.FORCE_END
            )
        if not coverage.missing:
            return self._complete(attempt, combined, CompletionReason.ALL_REQUIRED_COVERED)
        if policy.is_sufficient(scenario, coverage, combined):
            return self._complete(attempt, combined, CompletionReason.POLICY_SATISFIED)
        if len(attempt.user_turns()) >= self.config.max_user_turns:
            logger.warning(
                "Scenario %s hit the %d-turn cap; completing attempt",
                scenario.id,
                self.config.max_user_turns,
            )
            return self._complete(attempt, combined, CompletionReason.TURN_LIMIT)
        if policy.is_off_topic(text):
            attempt.add_turn(Speaker.CHARACTER, policy.confused_line)
            return self._complete(
                attempt,
                f"{combined} {OFF_TOPIC_MARKER}",
                CompletionReason.OFF_TOPIC,
                closing_line=policy.confused_line,
            )

        attempt.state = DialogueState.ASKING_FOLLOW_UP
        state = policy.coverage_state(scenario, coverage, combined)
        prompt = policy.follow_up(scenario, state, attempt)
        if prompt is None:
            return self._complete(attempt, combined, CompletionReason.NO_FOLLOW_UP)

        escalated = attempt.follow_up_attempts.get(state, 0) >= 1
        if escalated:
            prompt = policy.confirmation_line
            attempt.force_end = True
        else:
            attempt.follow_up_attempts[state] = attempt.follow_up_attempts.get(state, 0) + 1
            if coverage.attempted:
                prompt = self.phrases.prefixed(prompt)

        attempt.add_turn(Speaker.CHARACTER, prompt)
        attempt.last_follow_up = prompt
        attempt.state = (
            DialogueState.CONFIRMING_BEFORE_END if escalated else DialogueState.AWAITING_INPUT
        )
        logger.info(
            "Scenario %s follow-up for state %s%s",
            scenario.id,
            state,
            " (escalated)" if escalated else "",
        )
        return TurnResult(
            attempt=attempt,
            action=ShowFollowUp(
                text=prompt, delay_seconds=self.config.follow_up_delay, escalated=escalated
            ),
        )

    def _complete(
        self,
        attempt: ConversationAttempt,
        final_transcript: str,
        reason: CompletionReason,
        closing_line: Optional[str] = None,
    ) -> TurnResult:
        attempt.complete = True
        attempt.state = DialogueState.COMPLETED
        attempt.completion_reason = reason
        attempt.final_transcript = final_transcript
        logger.info("Scenario %s completed: %s", attempt.scenario.id, reason.value)
        return TurnResult(
            attempt=attempt,
            action=Complete(
                final_transcript=final_transcript,
                reason=reason,
                delay_seconds=self.config.completion_delay,
                closing_line=closing_line,
            ),
        )
