from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

from roleplay_coach.config.schema import ScoringConfig
from roleplay_coach.data_models import (
    MAX_STARS,
    OFF_TOPIC_MARKER,
    DetailedFeedback,
    EvaluationResult,
    Scenario,
)
from roleplay_coach.dialogue.policies import PolicyRegistry, ScenarioPolicy, default_registry
from roleplay_coach.evaluation.summary import build_summary
from roleplay_coach.matching import KeywordMatcher, NumericMatch

logger = logging.getLogger(__name__)


@dataclass
class _Matches:
    required: List[str]
    bonus: List[str]
    forbidden: List[str]
    missing: List[str]
    close: List[NumericMatch] = field(default_factory=list)
    artefacts: List[str] = field(default_factory=list)
    excused: List[str] = field(default_factory=list)

    @property
    def effective_forbidden(self) -> List[str]:
        return [kw for kw in self.forbidden if kw not in self.artefacts and kw not in self.excused]

    @property
    def hints(self) -> List[str]:
        return [match.hint for match in self.close if match.hint]


class ResponseEvaluator:
    """
    Score a finished transcript against a scenario rubric.

    `evaluate` is a pure function of its inputs: the same transcript and scenario always
    produce the same `EvaluationResult`. Star tiers are decided in priority order, first
    match wins:

    a. forbidden words (after excusals) and no close year      -> 0
    b. close year plus forbidden words                          -> 0.5
    c. every required keyword exact                             -> 2 + bonus, capped at 3
    d. one required keyword short (2 of 3 for three-keyword rubrics) -> 2
    e. some exact credit, a close year, or an acceptable refusal -> 1 (0.5 / 1.5 with a close year)
    f. scenario fallback acceptance                             -> 1
    g. otherwise                                                -> 0
    """

    def __init__(
        self,
        matcher: KeywordMatcher,
        policies: Optional[PolicyRegistry] = None,
        config: Optional[ScoringConfig] = None,
    ):
        self.matcher = matcher
        self.policies = policies or default_registry()
        self.config = config or ScoringConfig()

    def evaluate(self, transcript: str, scenario: Scenario) -> EvaluationResult:
        policy = self.policies.get(scenario.id)
        if OFF_TOPIC_MARKER in transcript:
            return self._off_topic(scenario, policy)

        matches = self._collect(transcript, scenario, policy)
        stars, feedback = self._decide(transcript, scenario, policy, matches)

        summary = None
        if stars > 0:
            summary = build_summary(
                covered=[scenario.concept_for(kw) for kw in matches.required],
                close=[scenario.concept_for(match.keyword) for match in matches.close],
                missed=[scenario.concept_for(kw) for kw in matches.missing],
                bonus=matches.bonus,
            )

        specific_hints = [
            f"'{keyword}' was not counted against you because you refused it explicitly."
            for keyword in matches.excused
        ]
        result = EvaluationResult(
            stars=stars,
            feedback=feedback,
            summary_feedback=summary,
            detailed_feedback=DetailedFeedback(
                required_found=matches.required,
                bonus_found=matches.bonus,
                forbidden_found=matches.effective_forbidden,
                missing_required=matches.missing,
                numerical_hints=matches.hints or None,
                specific_hints=specific_hints or None,
            ),
        )
        logger.info(
            "Evaluated scenario %s: stars=%.1f required=%d/%d bonus=%d forbidden=%d close=%d",
            scenario.id,
            stars,
            len(matches.required),
            len(scenario.keywords.required),
            len(matches.bonus),
            len(matches.effective_forbidden),
            len(matches.close),
        )
        return result

    def _collect(self, text: str, scenario: Scenario, policy: ScenarioPolicy) -> _Matches:
        keywords = scenario.keywords
        matches = _Matches(
            required=self.matcher.find(text, keywords.required),
            bonus=self.matcher.find(text, keywords.bonus),
            forbidden=self.matcher.find(text, keywords.forbidden),
            missing=[],
        )
        matches.missing = [kw for kw in keywords.required if kw not in matches.required]

        for keyword in keywords.year_keywords():
            if keyword in matches.required:
                continue
            near = self.matcher.closeness(text, keyword)
            if near is not None and not near.exact:
                matches.close.append(near)
                matches.missing.remove(keyword)

        # A near-miss year that is also listed as forbidden is already penalised by the miss.
        close_years = [match.keyword for match in matches.close]
        matches.artefacts = [
            kw for kw in matches.forbidden if self.matcher.is_near_year(kw, close_years)
        ]
        remaining = [kw for kw in matches.forbidden if kw not in matches.artefacts]
        matches.excused = policy.excused_forbidden(text, remaining)
        return matches

    def _decide(self, text: str, scenario: Scenario, policy: ScenarioPolicy, matches: _Matches):
        messages = scenario.feedback
        total = len(scenario.keywords.required)
        exact = len(matches.required)
        has_close = bool(matches.close)
        forbidden = matches.effective_forbidden

        if forbidden and not has_close:
            return 0.0, messages.poor
        if has_close and forbidden:
            return 0.5, self._with_hints(matches, messages.needs_work)
        if exact == total:
            bonus = math.floor(len(matches.bonus) * self.config.bonus_weight * 2)
            stars = min(MAX_STARS, 2.0 + bonus)
            return stars, messages.perfect if stars == MAX_STARS else messages.good
        if exact >= 1 and (total - exact == 1 or (total == 3 and exact >= 2)):
            return 2.0, self._with_hints(matches, messages.good)
        refusal = policy.acceptable_refusal(text)
        if exact >= 1 or has_close or refusal:
            if has_close and exact >= 1:
                stars = 1.5
            elif has_close and not refusal:
                stars = 0.5
            else:
                stars = 1.0
            return stars, self._with_hints(matches, messages.needs_work)
        if policy.fallback_acceptance(text):
            return 1.0, messages.needs_work
        return 0.0, messages.poor

    @staticmethod
    def _with_hints(matches: _Matches, message: str) -> str:
        hints = matches.hints
        return " ".join([*hints, message]) if hints else message

    def _off_topic(self, scenario: Scenario, policy: ScenarioPolicy) -> EvaluationResult:
        hint = policy.off_topic_hint
        feedback = scenario.feedback.off_topic or f"{hint} {scenario.feedback.poor}"
        logger.info("Evaluated scenario %s: off-topic termination", scenario.id)
        return EvaluationResult(
            stars=0.0,
            feedback=feedback,
            summary_feedback=None,
            detailed_feedback=DetailedFeedback(
                missing_required=list(scenario.keywords.required),
                specific_hints=[hint],
            ),
        )
