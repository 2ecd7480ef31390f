"""Tests for progress tracking, XP/level derivation and persistence."""

from __future__ import annotations

import json

import pytest

from roleplay_coach.learning import GameState, Level, ProgressTracker
from roleplay_coach.storage import DEFAULT_STORAGE_KEY, InMemoryProgressStore, JsonProgressStore


@pytest.fixture
def tracker():
    return ProgressTracker(InMemoryProgressStore())


def test_new_tracker_starts_as_beginner(tracker):
    assert tracker.level() is Level.BEGINNER
    assert tracker.total_xp() == 0
    assert tracker.scenario_progress("volvo") is None
    assert tracker.stars_to_next_level() == 3.0


def test_best_score_never_decreases(tracker):
    tracker.record_attempt("volvo", 2.0)
    progress = tracker.record_attempt("volvo", 1.0)
    assert progress.best_score == 2.0
    assert progress.attempts == 2
    assert not progress.completed
    assert tracker.total_xp() == 200


def test_three_stars_completes_scenario(tracker):
    tracker.record_attempt("financial", 3.0)
    tracker.record_attempt("financial", 3.0)
    assert tracker.scenario_progress("financial").completed
    assert tracker.state.completed_scenarios == ["financial"]


def test_level_thresholds(tracker):
    tracker.record_attempt("volvo", 3.0)
    assert tracker.level() is Level.COMPETENT
    tracker.record_attempt("financial", 2.5)
    assert tracker.level() is Level.COMPETENT
    assert tracker.stars_to_next_level() == 0.5
    tracker.record_attempt("onboarding", 3.0)
    assert tracker.level() is Level.PROFICIENT
    assert tracker.state.current_level is Level.PROFICIENT
    assert tracker.state.total_xp == 850


def test_expert_has_no_next_level():
    tracker = ProgressTracker(InMemoryProgressStore(), stars_per_level=1)
    tracker.record_attempt("volvo", 3.0)
    assert tracker.level() is Level.EXPERT
    assert tracker.stars_to_next_level() is None


def test_out_of_range_stars_are_rejected(tracker):
    with pytest.raises(ValueError):
        tracker.record_attempt("volvo", 3.5)
    with pytest.raises(ValueError):
        tracker.record_attempt("volvo", -1)


def test_reset_clears_progress(tracker):
    tracker.record_attempt("volvo", 2.0)
    state = tracker.reset()
    assert state == GameState()
    assert tracker.store.load() == GameState()


def test_json_store_round_trip(temp_dir):
    path = temp_dir / "nested" / "progress.json"
    tracker = ProgressTracker(JsonProgressStore(path))
    tracker.record_attempt("volvo", 3.0)

    document = json.loads(path.read_text(encoding="utf-8"))
    record = document[DEFAULT_STORAGE_KEY]
    assert record["totalXP"] == 300
    assert record["currentLevel"] == "Competent"
    assert record["completedScenarios"] == ["volvo"]
    assert record["scenarioProgress"]["volvo"] == {
        "scenarioId": "volvo",
        "bestScore": 3.0,
        "attempts": 1,
        "completed": True,
    }

    reloaded = ProgressTracker(JsonProgressStore(path))
    assert reloaded.scenario_progress("volvo").best_score == 3.0
    assert reloaded.level() is Level.COMPETENT


def test_json_store_custom_key(temp_dir):
    path = temp_dir / "progress.json"
    JsonProgressStore(path, key="other").save(GameState(total_xp=100))
    assert json.loads(path.read_text(encoding="utf-8"))["other"]["totalXP"] == 100
    assert JsonProgressStore(path).load() == GameState()


def test_corrupt_file_starts_fresh(temp_dir, caplog):
    path = temp_dir / "progress.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonProgressStore(path)
    assert store.load() == GameState()
    assert "Failed to load game state" in caplog.text


@pytest.mark.parametrize("content", ['{"up-simu-game-state": []}', "[]", '{"up-simu-game-state": "x"}'])
def test_malformed_record_starts_fresh(temp_dir, caplog, content):
    path = temp_dir / "progress.json"
    path.write_text(content, encoding="utf-8")
    assert JsonProgressStore(path).load() == GameState()
    assert "Failed to load game state" in caplog.text


def test_explicit_load_discards_unsaved_changes(temp_dir):
    store = JsonProgressStore(temp_dir / "progress.json")
    tracker = ProgressTracker(store)
    tracker.record_attempt("volvo", 1.0)
    tracker.state.total_xp = 9999
    assert tracker.load().total_xp == 100
