from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from roleplay_coach.catalog import ScenarioCatalog
from roleplay_coach.config import Settings, load_settings
from roleplay_coach.data_models import (
    ConversationAttempt,
    DialogueState,
    EvaluationResult,
    Scenario,
    TurnResult,
)
from roleplay_coach.dialogue import DialogueEngine, PhraseSelector, PolicyRegistry, default_registry
from roleplay_coach.errors import AttemptClosedError
from roleplay_coach.evaluation import ResponseEvaluator
from roleplay_coach.learning import GameState, ProgressTracker
from roleplay_coach.matching import KeywordMatcher
from roleplay_coach.storage import JsonProgressStore, ProgressStore
from roleplay_coach.utils.logging import configure_logging

logger = logging.getLogger(__name__)


class TrainingSystem:
    """
    Main facade coordinating one player's roleplay training sessions.

    This class wires the scenario catalog, keyword matcher, scenario policies, dialogue
    engine, evaluator and progress tracker together. It is the entry point for the CLI
    and for any other front end; the components stay usable on their own.

    Architecture
    ------------
    - Catalog: YAML → validated `Scenario` records
    - Dialogue: utterance → coverage → follow-up or completion
    - Evaluation: final transcript → stars, feedback, summary
    - Progress: stars → best score, XP, level → JSON store

    Attributes
    ----------
    settings : Settings
        Configuration object loaded from YAML.
    catalog : ScenarioCatalog
        Scenarios available to play.
    matcher : KeywordMatcher
        Shared by engine and evaluator so coverage and scoring agree.
    policies : PolicyRegistry
        Scenario-specific follow-up scripts and scoring hooks.
    engine : DialogueEngine
        Multi-turn state machine.
    evaluator : ResponseEvaluator
        Deterministic star rating of a finished transcript.
    progress_tracker : ProgressTracker
        Best scores, XP and level, persisted through a `ProgressStore`.
    """

    def __init__(
        self,
        settings: Settings,
        catalog: Optional[ScenarioCatalog] = None,
        store: Optional[ProgressStore] = None,
        phrases: Optional[PhraseSelector] = None,
    ):
        """
        Initialize the training system with all required components.

        Parameters
        ----------
        settings : Settings
            Configuration object, typically from `load_settings()`.
        catalog : Optional[ScenarioCatalog], default=None
            Scenario catalog. If None, `paths.scenarios_file` is loaded when set, otherwise
            the bundled catalog.
        store : Optional[ProgressStore], default=None
            Progress persistence. If None, a `JsonProgressStore` at `paths.progress_file`.
        phrases : Optional[PhraseSelector], default=None
            Cosmetic phrase variation for follow-ups; seeded from `dialogue.phrase_seed`
            when None.

        Raises
        ------
        ScenarioConfigError
            If the scenario catalog is malformed.
        FileNotFoundError
            If `paths.scenarios_file` is set but doesn't exist.
        """
        self.settings = settings
        configure_logging(settings.logging.level, settings.logging.use_json)

        if catalog is None:
            scenarios_file = settings.paths.scenarios_file
            catalog = (
                ScenarioCatalog.from_yaml(scenarios_file) if scenarios_file else ScenarioCatalog.default()
            )
        self.catalog = catalog

        self.matcher = KeywordMatcher.from_settings(settings.matching)
        self.policies: PolicyRegistry = default_registry()
        self.engine = DialogueEngine(
            self.matcher,
            policies=self.policies,
            config=settings.dialogue,
            phrases=phrases,
        )
        self.evaluator = ResponseEvaluator(
            self.matcher, policies=self.policies, config=settings.scoring
        )

        if store is None:
            store = JsonProgressStore(settings.paths.progress_file, key=settings.progress.storage_key)
        self.progress_tracker = ProgressTracker(
            store,
            xp_per_star=settings.progress.xp_per_star,
            stars_per_level=settings.progress.stars_per_level,
        )
        logger.info("Training system ready with %d scenarios", len(self.catalog))

    @classmethod
    def from_config(
        cls,
        config_path: str | Path | None = None,
        store: Optional[ProgressStore] = None,
        phrases: Optional[PhraseSelector] = None,
    ) -> "TrainingSystem":
        """
        Factory method to construct a TrainingSystem from a configuration file.

        Parameters
        ----------
        config_path : str | Path | None, default=None
            Path to a YAML configuration file. If None, config/default.yaml is used when
            it exists, otherwise the built-in defaults.
        store : Optional[ProgressStore], default=None
            Progress persistence override, e.g. `InMemoryProgressStore()` in tests.
        phrases : Optional[PhraseSelector], default=None
            Phrase selector override, e.g. `PhraseSelector.first()` for stable output.

        Returns
        -------
        TrainingSystem
            Fully initialized system.

        Raises
        ------
        FileNotFoundError
            If config_path is specified but doesn't exist.
        ValueError
            If configuration fields are invalid.
        """
        settings = load_settings(config_path)
        return cls(settings, store=store, phrases=phrases)

    def scenario(self, scenario_id: str) -> Scenario:
        return self.catalog.get(scenario_id)

    def start(self, scenario_id: str) -> ConversationAttempt:
        """Begin a new attempt; raises `ScenarioNotFoundError` for unknown ids."""
        return self.engine.start(self.catalog.get(scenario_id))

    def respond(self, attempt: ConversationAttempt, utterance: str) -> TurnResult:
        return self.engine.submit_utterance(attempt, utterance)

    def finish(self, attempt: ConversationAttempt) -> EvaluationResult:
        """
        Score an attempt once and record the result.

        An attempt the player abandons before the engine completes it is scored on what
        was said so far; one with no answers at all is scored but not recorded. Finishing
        the same attempt twice raises `AttemptClosedError`.
        """
        if attempt.evaluated:
            raise AttemptClosedError(f"Attempt for {attempt.scenario.id!r} was already evaluated")
        if attempt.complete and attempt.final_transcript is not None:
            transcript = attempt.final_transcript
        else:
            transcript = attempt.combined_user_text()
            attempt.complete = True
            attempt.state = DialogueState.COMPLETED
            attempt.final_transcript = transcript

        result = self.evaluator.evaluate(transcript, attempt.scenario)
        attempt.evaluated = True
        if not attempt.user_turns():
            logger.info("Attempt for %s ended before any answer; not recorded", attempt.scenario.id)
            return result
        self.progress_tracker.record_attempt(attempt.scenario.id, result.stars)
        return result

    def evaluate_text(self, scenario_id: str, text: str) -> EvaluationResult:
        """Score a single answer without touching progress."""
        return self.evaluator.evaluate(text, self.catalog.get(scenario_id))

    def progress(self) -> GameState:
        return self.progress_tracker.state

    def reset_progress(self) -> GameState:
        return self.progress_tracker.reset()
