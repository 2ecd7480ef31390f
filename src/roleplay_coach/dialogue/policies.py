from __future__ import annotations

import enum
import re
from abc import ABC, abstractmethod
from functools import reduce
from typing import ClassVar, Dict, List, Mapping, Optional, Sequence, Tuple

from roleplay_coach.data_models import ConversationAttempt, Scenario, Speaker
from roleplay_coach.matching import RequiredCoverage, normalize

DEFAULT_CONFIRMATION = "Are you sure you remember that correctly? Have one more go"
DEFAULT_CONFUSED_LINE = "Sorry, I'm not sure what you mean. Let's talk another time."
DEFAULT_OFF_TOPIC_HINT = "Stay on topic and respond to what the character actually asked."


class ScenarioPolicy(ABC):
    """
    Bespoke rubric script for one scenario.

    The dialogue engine asks a policy which coverage state the conversation is in, which
    follow-up belongs to that state, and whether the latest reply is off topic. The
    evaluator asks it about scenario-specific credit (excused forbidden words, acceptable
    refusals, fallback acceptance). Everything shared lives in the engine and evaluator.
    """

    scenario_id: ClassVar[str] = ""
    confirmation_line: ClassVar[str] = DEFAULT_CONFIRMATION
    confused_line: ClassVar[str] = DEFAULT_CONFUSED_LINE
    off_topic_hint: ClassVar[str] = DEFAULT_OFF_TOPIC_HINT

    @abstractmethod
    def coverage_state(self, scenario: Scenario, coverage: RequiredCoverage, text: str) -> enum.Flag:
        """Collapse keyword coverage of the combined user text into a flag value."""

    @abstractmethod
    def follow_up(
        self, scenario: Scenario, state: enum.Flag, attempt: ConversationAttempt
    ) -> Optional[str]:
        """Prompt for the given coverage state, or None when nothing sensible is left to ask."""

    def is_sufficient(self, scenario: Scenario, coverage: RequiredCoverage, text: str) -> bool:
        """Whether the answer is complete enough to end early despite missing keywords."""
        return False

    def is_off_topic(self, utterance: str) -> bool:
        return False

    def excused_forbidden(self, text: str, forbidden_found: Sequence[str]) -> List[str]:
        """Forbidden keywords that should not be penalised in this text."""
        return []

    def acceptable_refusal(self, text: str) -> bool:
        return False

    def fallback_acceptance(self, text: str) -> bool:
        return False


class KeywordCategoryPolicy(ScenarioPolicy):
    """Policy whose coverage state is one flag per required keyword (or keyword group)."""

    categories: ClassVar[Mapping[enum.Flag, Tuple[str, ...]]] = {}
    flag_type: ClassVar[type]

    def coverage_state(self, scenario: Scenario, coverage: RequiredCoverage, text: str) -> enum.Flag:
        satisfied = [
            flag
            for flag, keywords in self.categories.items()
            if any(coverage.is_addressed(keyword) for keyword in keywords)
        ]
        return reduce(lambda left, right: left | right, satisfied, self.flag_type(0))


class VolvoTopic(enum.Flag):
    NONE = 0
    YEAR = enum.auto()
    MODEL = enum.auto()
    NAMESAKE = enum.auto()


class VolvoHistoryPolicy(KeywordCategoryPolicy):
    """Follow-ups for the Volvo history quiz: production year, model name and namesake."""

    scenario_id = "volvo"
    flag_type = VolvoTopic
    categories = {
        VolvoTopic.YEAR: ("1927",),
        VolvoTopic.MODEL: ("ÖV4",),
        VolvoTopic.NAMESAKE: ("Jakob",),
    }
    prompts: ClassVar[Dict[VolvoTopic, str]] = {
        VolvoTopic.NONE: (
            "Take your time. Do you remember when we started production, "
            "the model name, or who it was nicknamed after?"
        ),
        VolvoTopic.MODEL | VolvoTopic.NAMESAKE: "Good! But what year did we start production?",
        VolvoTopic.YEAR: (
            "Good, you know the year! But what was the model name and who was it nicknamed after?"
        ),
        VolvoTopic.YEAR | VolvoTopic.NAMESAKE: (
            "Great! You know the year and inspiration. What was the model name?"
        ),
        VolvoTopic.YEAR | VolvoTopic.MODEL: (
            "Excellent! You know the year and model. Who was it nicknamed after?"
        ),
        VolvoTopic.NAMESAKE: (
            "Good, you know about Jakob! What year did we start production and what was the model name?"
        ),
        VolvoTopic.MODEL: (
            "Good, you know the model! What year did we start production and who was it nicknamed after?"
        ),
    }

    def follow_up(
        self, scenario: Scenario, state: enum.Flag, attempt: ConversationAttempt
    ) -> Optional[str]:
        return self.prompts.get(state)


class ComplianceTopic(enum.Flag):
    NONE = 0
    REFUSAL = enum.auto()
    RULES = enum.auto()
    POLICY = enum.auto()
    SPECIFICS = enum.auto()


_REFUSAL_RE = re.compile(
    r"\b(no|nope|cannot|can't|can not|won't|unable|not allowed|not permitted|sorry)\b"
)
_REFUSAL_VERB_RE = re.compile(
    r"\b(cannot|can't|can not|won't|will not|unable|not allowed|not permitted|not able to)\b"
)
_NO_BEFORE_RE = re.compile(r"\bno\s+$")
_BARE_NO_RE = re.compile(r"^(?:(?:no thanks|no way|nope|no)\b[\s.!,]*)+$")
_YES_RE = re.compile(r"\b(yes|yeah|yep|sure|ok|okay)\b")
_NO_RE = re.compile(r"\b(no|nope|can't|cannot)\b")
_HEDGE_RE = re.compile(r"\b(don't know|do not know|not sure|maybe|dunno|i guess)\b")
_FINANCE_RE = re.compile(
    r"\b(money|tip|invest|stock|trad|complia|polic|regulat|insider|sec\b|legal|illegal|ethic)"
)
_RULES_RE = re.compile(r"\b(complia|regulat|polic)")
_SPECIFICS_RE = re.compile(r"\b(insider|illegal|legal|ethic|sec\b|trading)")
_COMPLIANCE_TERMS_RE = re.compile(r"\b(complia|polic|regulat|legal|illegal|ethic|insider|sec\b)")
_CLAUSE_BREAK_RE = re.compile(r"[.;!?,]")


def _agrees(text: str) -> bool:
    return bool(_YES_RE.search(text)) and not _HEDGE_RE.search(text)


class FinancialCompliancePolicy(ScenarioPolicy):
    """
    A client fishing for insider tips.

    Coverage is tracked as concept families (refusal, rules, policy, specifics) rather
    than individual keywords, because a good answer can refuse in many words. Forbidden
    words used inside an explicit refusal clause ("I cannot share tips") are excused.
    """

    scenario_id = "financial"
    confirmation_line = "Are you sure that's your final answer? Think about compliance requirements."
    confused_line = "Am I talking to the right person? I'm lost. Will call back later."
    off_topic_hint = "Your reply didn't address the client's request. Stay on topic and respond to what Ruth asked."
    refusal_window = 40

    prompts: ClassVar[Dict[ComplianceTopic, str]] = {
        ComplianceTopic.NONE: "So can you give me some tips or not?",
        ComplianceTopic.REFUSAL: (
            "How come? Why not? I thought you were supposed to help me make money!"
        ),
        ComplianceTopic.REFUSAL | ComplianceTopic.RULES | ComplianceTopic.POLICY: (
            "What about the policies makes this problematic? Can you be more specific?"
        ),
        ComplianceTopic.REFUSAL | ComplianceTopic.RULES: (
            "But what specific regulations prevent you from giving me tips? I don't understand."
        ),
        ComplianceTopic.RULES: "So is that a yes or a no? Can you help me or not?",
        ComplianceTopic.RULES | ComplianceTopic.POLICY: "So is that a yes or a no? Can you help me or not?",
    }

    def coverage_state(self, scenario: Scenario, coverage: RequiredCoverage, text: str) -> enum.Flag:
        lowered = normalize(text)
        state = ComplianceTopic.NONE
        if _REFUSAL_RE.search(lowered) or coverage.is_covered("cannot") or coverage.is_covered("not allowed"):
            state |= ComplianceTopic.REFUSAL
        if _RULES_RE.search(lowered) or any(
            coverage.is_covered(keyword) for keyword in ("compliance", "regulations", "policy")
        ):
            state |= ComplianceTopic.RULES
        if coverage.is_covered("policy"):
            state |= ComplianceTopic.POLICY
        if _SPECIFICS_RE.search(lowered):
            state |= ComplianceTopic.SPECIFICS
        return state

    def follow_up(
        self, scenario: Scenario, state: enum.Flag, attempt: ConversationAttempt
    ) -> Optional[str]:
        latest = attempt.user_turns()[-1] if attempt.user_turns() else ""
        if state == ComplianceTopic.NONE and _agrees(normalize(latest)):
            # Agreeing to share tips ends the call; the evaluator scores it.
            return None
        return self.prompts.get(state)

    def is_sufficient(self, scenario: Scenario, coverage: RequiredCoverage, text: str) -> bool:
        state = self.coverage_state(scenario, coverage, text)
        needed = ComplianceTopic.REFUSAL | ComplianceTopic.RULES | ComplianceTopic.SPECIFICS
        return state & needed == needed

    def is_off_topic(self, utterance: str) -> bool:
        lowered = normalize(utterance)
        on_topic = (
            _YES_RE.search(lowered)
            or _NO_RE.search(lowered)
            or _HEDGE_RE.search(lowered)
            or _FINANCE_RE.search(lowered)
        )
        return not on_topic and len(lowered) > 5

    def excused_forbidden(self, text: str, forbidden_found: Sequence[str]) -> List[str]:
        lowered = normalize(text)
        return [keyword for keyword in forbidden_found if self._only_refused(lowered, normalize(keyword))]

    def _only_refused(self, text: str, keyword: str) -> bool:
        """
        True when every occurrence of `keyword` is governed by a refusal in its clause.

        A refusal is a negated verb ahead of the keyword ("I cannot share tips") or `no`
        placed directly before it ("no tips"). A stray "no" elsewhere does not count.
        """
        positions = [match.start() for match in re.finditer(re.escape(keyword), text)]
        if not positions:
            return False
        for position in positions:
            window = text[max(0, position - self.refusal_window):position]
            breaks = list(_CLAUSE_BREAK_RE.finditer(window))
            clause = window[breaks[-1].end():] if breaks else window
            if not (_REFUSAL_VERB_RE.search(clause) or _NO_BEFORE_RE.search(clause)):
                return False
        return True

    def acceptable_refusal(self, text: str) -> bool:
        lowered = normalize(text)
        return bool(_REFUSAL_RE.search(lowered) and _COMPLIANCE_TERMS_RE.search(lowered))

    def fallback_acceptance(self, text: str) -> bool:
        return bool(_BARE_NO_RE.search(normalize(text)))


class DefaultPolicy(ScenarioPolicy):
    """
    Generic follow-ups for scenarios without a bespoke script.

    The coverage state has one flag per required keyword, built once per scenario. Follow-ups
    walk through the scenario's remaining authored questions, then name the missing concepts.
    """

    def __init__(self) -> None:
        self._flag_types: Dict[str, type] = {}

    def _flags_for(self, scenario: Scenario) -> type:
        if scenario.id not in self._flag_types:
            names = [f"KEYWORD_{index}" for index in range(len(scenario.keywords.required))]
            self._flag_types[scenario.id] = enum.Flag(f"Coverage_{scenario.id}", names)
        return self._flag_types[scenario.id]

    def coverage_state(self, scenario: Scenario, coverage: RequiredCoverage, text: str) -> enum.Flag:
        flags = self._flags_for(scenario)
        state = flags(0)
        for index, keyword in enumerate(scenario.keywords.required):
            if coverage.is_addressed(keyword):
                state |= flags[f"KEYWORD_{index}"]
        return state

    def follow_up(
        self, scenario: Scenario, state: enum.Flag, attempt: ConversationAttempt
    ) -> Optional[str]:
        asked = {turn.text for turn in attempt.transcript if turn.speaker is Speaker.CHARACTER}
        for question in scenario.questions[1:]:
            if question not in asked:
                return question
        flags = self._flags_for(scenario)
        missing = [
            scenario.concept_for(keyword)
            for index, keyword in enumerate(scenario.keywords.required)
            if not state & flags[f"KEYWORD_{index}"]
        ]
        if not missing:
            return None
        return f"Can you tell me more about {' and '.join(missing)}?"


class PolicyRegistry:
    """Scenario id to policy lookup, falling back to `DefaultPolicy`."""

    def __init__(self, policies: Sequence[ScenarioPolicy] = (), default: ScenarioPolicy | None = None):
        self._policies: Dict[str, ScenarioPolicy] = {}
        self.default = default or DefaultPolicy()
        for policy in policies:
            self.register(policy)

    def register(self, policy: ScenarioPolicy, scenario_id: str | None = None) -> None:
        key = scenario_id or policy.scenario_id
        if not key:
            raise ValueError("policy needs a scenario id to be registered")
        self._policies[key] = policy

    def get(self, scenario_id: str) -> ScenarioPolicy:
        return self._policies.get(scenario_id, self.default)

    def __contains__(self, scenario_id: object) -> bool:
        return scenario_id in self._policies


def default_registry() -> PolicyRegistry:
    return PolicyRegistry([VolvoHistoryPolicy(), FinancialCompliancePolicy()])
