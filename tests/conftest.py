"""Shared fixtures for the roleplay coach test suite."""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from roleplay_coach.catalog import ScenarioCatalog
from roleplay_coach.dialogue import DialogueEngine, PhraseSelector
from roleplay_coach.evaluation import ResponseEvaluator
from roleplay_coach.matching import KeywordMatcher


@pytest.fixture
def temp_dir():
    """Create a temporary directory for progress and config files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(scope="session")
def catalog() -> ScenarioCatalog:
    return ScenarioCatalog.default()


@pytest.fixture
def volvo(catalog):
    return catalog.get("volvo")


@pytest.fixture
def financial(catalog):
    return catalog.get("financial")


@pytest.fixture
def matcher() -> KeywordMatcher:
    return KeywordMatcher()


@pytest.fixture
def evaluator(matcher) -> ResponseEvaluator:
    return ResponseEvaluator(matcher)


@pytest.fixture
def engine(matcher) -> DialogueEngine:
    """Engine with stable phrasing so follow-up text can be asserted."""
    return DialogueEngine(matcher, phrases=PhraseSelector.first())
