"""Tests for scenario catalog loading and rubric validation."""

from __future__ import annotations

import pytest

from roleplay_coach.catalog import ScenarioCatalog
from roleplay_coach.errors import ScenarioConfigError, ScenarioNotFoundError


def _record(**keywords):
    return {
        "title": "Test",
        "character": {"name": "Sam", "role": "Manager"},
        "question": "What happened?",
        "keywords": keywords,
        "feedback": {"perfect": "p", "good": "g", "needsWork": "n", "poor": "x"},
    }


def test_bundled_catalog_has_both_scenarios(catalog):
    assert catalog.ids() == ["financial", "volvo"]
    assert len(catalog) == 2
    assert "volvo" in catalog


def test_bundled_volvo_rubric(volvo):
    assert volvo.keywords.required == ("ÖV4", "1927", "Jakob")
    assert volvo.keywords.year_keywords() == ("1927",)
    assert volvo.character.name == "Gustav Larson"
    assert volvo.feedback.off_topic is None
    assert volvo.briefing == "You will be speaking with Gustav Larson, Co-founder."


def test_bundled_financial_rubric(financial):
    assert "not allowed" in financial.keywords.required
    assert financial.feedback.off_topic
    assert financial.concept_for("policy") == "company policy"
    assert financial.concept_for("unknown") == "unknown"


def test_single_question_field_is_accepted():
    catalog = ScenarioCatalog.from_mapping({"demo": _record(required=["alpha"])})
    assert catalog.get("demo").questions == ("What happened?",)


def test_unknown_scenario_raises():
    catalog = ScenarioCatalog.from_mapping({"demo": _record(required=["alpha"])})
    with pytest.raises(ScenarioNotFoundError) as excinfo:
        catalog.get("missing")
    assert isinstance(excinfo.value, KeyError)
    assert "missing" in str(excinfo.value)


def test_empty_required_keywords_are_rejected():
    with pytest.raises(ScenarioConfigError):
        ScenarioCatalog.from_mapping({"demo": _record(required=[])})


def test_keyword_in_two_categories_is_rejected():
    with pytest.raises(ScenarioConfigError):
        ScenarioCatalog.from_mapping({"demo": _record(required=["alpha"], forbidden=["Alpha"])})


def test_duplicate_keyword_is_rejected():
    with pytest.raises(ScenarioConfigError):
        ScenarioCatalog.from_mapping({"demo": _record(required=["alpha", "alpha"])})


def test_mismatched_id_is_rejected():
    record = _record(required=["alpha"])
    record["id"] = "other"
    with pytest.raises(ScenarioConfigError):
        ScenarioCatalog.from_mapping({"demo": record})


def test_empty_catalog_is_rejected():
    with pytest.raises(ScenarioConfigError):
        ScenarioCatalog.from_yaml_text("scenarios: {}")


def test_yaml_without_scenarios_mapping_is_rejected():
    with pytest.raises(ScenarioConfigError):
        ScenarioCatalog.from_yaml_text("- just\n- a list\n")


def test_from_yaml_reads_file(temp_dir):
    path = temp_dir / "scenarios.yaml"
    path.write_text(
        "scenarios:\n"
        "  demo:\n"
        "    title: Demo\n"
        "    character: {name: Sam, role: Manager}\n"
        "    question: What happened?\n"
        "    keywords: {required: [alpha], bonus: [beta]}\n"
        "    feedback: {perfect: p, good: g, needsWork: n, poor: x}\n",
        encoding="utf-8",
    )
    catalog = ScenarioCatalog.from_yaml(path)
    assert catalog.get("demo").keywords.bonus == ("beta",)


def test_from_yaml_missing_file(temp_dir):
    with pytest.raises(FileNotFoundError):
        ScenarioCatalog.from_yaml(temp_dir / "nope.yaml")
