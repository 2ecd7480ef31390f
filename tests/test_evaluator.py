"""Tests for star tiers, feedback selection and summaries of the response evaluator."""

from __future__ import annotations

import pytest

from roleplay_coach.config.schema import ScoringConfig
from roleplay_coach.data_models import OFF_TOPIC_MARKER
from roleplay_coach.evaluation import ResponseEvaluator, build_summary, join_concepts


def test_all_required_without_bonus_scores_two(evaluator, volvo):
    result = evaluator.evaluate("The ÖV4 was made in 1927 named after Jakob", volvo)
    assert result.stars == 2.0
    assert result.feedback == volvo.feedback.good
    assert result.detailed_feedback.required_found == ["ÖV4", "1927", "Jakob"]
    assert result.detailed_feedback.missing_required == []
    assert result.summary_feedback == (
        "You covered the model name, the year and who it was named after."
    )


def test_bonus_keyword_lifts_to_three_stars(evaluator, volvo):
    result = evaluator.evaluate("The ÖV4 was made in 1927 in Gothenburg, named after Jakob", volvo)
    assert result.stars == 3.0
    assert result.is_perfect
    assert result.feedback == volvo.feedback.perfect
    assert result.detailed_feedback.bonus_found == ["Gothenburg"]


def test_bonus_weight_is_configurable(matcher, volvo):
    evaluator = ResponseEvaluator(matcher, config=ScoringConfig(bonus_weight=0.1))
    result = evaluator.evaluate("The ÖV4 was made in 1927 in Gothenburg, named after Jakob", volvo)
    assert result.stars == 2.0


def test_close_year_alone_scores_half_star_with_direction(evaluator, volvo):
    result = evaluator.evaluate("I think it was 1929", volvo)
    assert result.stars == 0.5
    assert result.detailed_feedback.numerical_hints == ["Almost! A little bit earlier"]
    assert result.feedback.startswith("Almost! A little bit earlier")
    assert "1927" not in result.detailed_feedback.missing_required


def test_forbidden_adjacent_year_is_not_double_penalised(evaluator, volvo):
    result = evaluator.evaluate("I think it was 1928", volvo)
    assert result.stars == 0.5
    assert result.detailed_feedback.forbidden_found == []


def test_close_year_with_two_exact_keywords(evaluator, volvo):
    result = evaluator.evaluate("It was the ÖV4 in 1929, named after Jakob", volvo)
    assert result.stars == 2.0
    assert "earlier" in result.feedback
    assert "the year (nearly)" in result.summary_feedback


def test_close_year_with_one_exact_keyword_scores_one_and_a_half(evaluator, volvo):
    result = evaluator.evaluate("It was the ÖV4 in 1929", volvo)
    assert result.stars == 1.5
    assert result.feedback == f"Almost! A little bit earlier {volvo.feedback.needs_work}"
    assert result.detailed_feedback.required_found == ["ÖV4"]
    assert result.detailed_feedback.missing_required == ["Jakob"]


def test_forbidden_word_without_close_year_scores_zero(evaluator, volvo):
    result = evaluator.evaluate("It was the ÖV4 made by Ford, named after Jakob", volvo)
    assert result.stars == 0.0
    assert result.feedback == volvo.feedback.poor
    assert result.detailed_feedback.forbidden_found == ["Ford"]
    assert result.summary_feedback is None


def test_close_year_and_forbidden_word_scores_half_star(evaluator, volvo):
    result = evaluator.evaluate("Ford built it in 1926", volvo)
    assert result.stars == 0.5
    assert result.detailed_feedback.forbidden_found == ["Ford"]


def test_one_required_short_scores_two(evaluator, volvo):
    result = evaluator.evaluate("It was the ÖV4, named after Jakob", volvo)
    assert result.stars == 2.0
    assert result.detailed_feedback.missing_required == ["1927"]
    assert result.summary_feedback == (
        "You covered the model name and who it was named after, but missed the year."
    )


def test_single_required_keyword_scores_one(evaluator, volvo):
    result = evaluator.evaluate("Something about Jakob", volvo)
    assert result.stars == 1.0
    assert result.feedback == volvo.feedback.needs_work


def test_nothing_relevant_scores_zero(evaluator, volvo):
    result = evaluator.evaluate("I don't know", volvo)
    assert result.stars == 0.0
    assert result.feedback == volvo.feedback.poor


def test_refusal_naming_forbidden_word_is_excused(evaluator, financial):
    text = "Sorry, I cannot share tips, it's against compliance policy and regulations"
    result = evaluator.evaluate(text, financial)
    assert result.stars == 2.0
    assert result.feedback == financial.feedback.good
    assert result.detailed_feedback.forbidden_found == []
    assert any("tips" in hint for hint in result.detailed_feedback.specific_hints)


def test_agreeing_to_share_tips_scores_zero(evaluator, financial):
    result = evaluator.evaluate("Yes, sure, here are some tips", financial)
    assert result.stars == 0.0
    assert set(result.detailed_feedback.forbidden_found) == {"sure", "yes", "tips"}


def test_bare_no_gets_fallback_credit(evaluator, financial):
    result = evaluator.evaluate("No.", financial)
    assert result.stars == 1.0
    assert result.feedback == financial.feedback.needs_work


def test_refusal_with_compliance_reason_scores_one(evaluator, financial):
    result = evaluator.evaluate("No, that would be illegal", financial)
    assert result.stars == 1.0
    assert result.feedback == financial.feedback.needs_work
    assert result.detailed_feedback.required_found == []


@pytest.mark.parametrize(
    "text",
    [
        "I have no problem giving you tips",
        "No worries I will send you my best tips",
    ],
)
def test_stray_no_does_not_excuse_sharing_tips(evaluator, financial, text):
    result = evaluator.evaluate(text, financial)
    assert result.stars == 0.0
    assert result.feedback == financial.feedback.poor
    assert result.detailed_feedback.forbidden_found == ["tips"]
    assert result.detailed_feedback.specific_hints is None


def test_no_directly_before_forbidden_word_is_excused(evaluator, financial):
    result = evaluator.evaluate("No tips, that is against compliance policy", financial)
    assert result.detailed_feedback.forbidden_found == []
    assert result.stars > 0


def test_off_topic_marker_scores_zero_with_distinct_feedback(evaluator, financial):
    result = evaluator.evaluate(f"What's the weather like today? {OFF_TOPIC_MARKER}", financial)
    assert result.stars == 0.0
    assert result.feedback == financial.feedback.off_topic
    assert result.feedback != financial.feedback.poor
    assert result.detailed_feedback.missing_required == list(financial.keywords.required)
    assert result.summary_feedback is None


def test_off_topic_without_authored_message_uses_hint(evaluator, volvo):
    result = evaluator.evaluate(f"Nice weather {OFF_TOPIC_MARKER}", volvo)
    assert result.stars == 0.0
    assert result.feedback.endswith(volvo.feedback.poor)
    assert result.feedback != volvo.feedback.poor


@pytest.mark.parametrize(
    "text",
    [
        "",
        "The ÖV4 was made in 1927 in Gothenburg, named after Jakob",
        "1928",
        "Ford Ford Ford",
        "April safety Swedish Gothenburg ÖV4 1927 Jakob",
    ],
)
def test_evaluation_is_deterministic_and_bounded(evaluator, volvo, text):
    first = evaluator.evaluate(text, volvo)
    second = evaluator.evaluate(text, volvo)
    assert first == second
    assert 0.0 <= first.stars <= 3.0
    assert (first.stars * 2) % 1 == 0


def test_join_concepts():
    assert join_concepts([]) == ""
    assert join_concepts(["a"]) == "a"
    assert join_concepts(["a", "b", "c"]) == "a, b and c"


def test_summary_with_bonus_only_hits():
    summary = build_summary(covered=["the year"], close=[], missed=[], bonus=["April"])
    assert summary == "You covered the year. Bonus points for mentioning April."
