from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping

import yaml
from pydantic import ValidationError

from roleplay_coach.data_models import Scenario
from roleplay_coach.errors import ScenarioConfigError, ScenarioNotFoundError

logger = logging.getLogger(__name__)

BUNDLED_CATALOG = "scenarios.yaml"


class ScenarioCatalog:
    """
    Read-only mapping from scenario id to validated `Scenario` records.

    Every record is validated when the catalog is built, so a malformed rubric (empty
    required set, a keyword shared between categories, a mismatched id) fails at load
    time with `ScenarioConfigError` instead of producing nonsensical scores later.
    """

    def __init__(self, scenarios: Mapping[str, Scenario]):
        self._scenarios: Dict[str, Scenario] = dict(scenarios)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ScenarioCatalog":
        """Validate raw scenario records keyed by id."""
        scenarios: Dict[str, Scenario] = {}
        for scenario_id, record in data.items():
            if isinstance(record, Scenario):
                scenario = record
            else:
                if not isinstance(record, Mapping):
                    raise ScenarioConfigError(f"Scenario {scenario_id!r} must be a mapping")
                payload = dict(record)
                payload.setdefault("id", scenario_id)
                try:
                    scenario = Scenario.model_validate(payload)
                except ValidationError as exc:
                    raise ScenarioConfigError(f"Invalid scenario {scenario_id!r}: {exc}") from exc
            if scenario.id != scenario_id:
                raise ScenarioConfigError(
                    f"Scenario key {scenario_id!r} does not match its id {scenario.id!r}"
                )
            scenarios[scenario_id] = scenario
        if not scenarios:
            raise ScenarioConfigError("Scenario catalog is empty")
        logger.debug("Loaded %d scenarios: %s", len(scenarios), ", ".join(scenarios))
        return cls(scenarios)

    @classmethod
    def from_yaml_text(cls, text: str) -> "ScenarioCatalog":
        try:
            payload = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ScenarioConfigError(f"Scenario catalog is not valid YAML: {exc}") from exc
        if not isinstance(payload, Mapping) or not isinstance(payload.get("scenarios"), Mapping):
            raise ScenarioConfigError("Scenario catalog must define a 'scenarios' mapping")
        return cls.from_mapping(payload["scenarios"])

    @classmethod
    def from_yaml(cls, path: Path) -> "ScenarioCatalog":
        if not path.exists():
            raise FileNotFoundError(f"Scenario catalog not found: {path}")
        return cls.from_yaml_text(path.read_text(encoding="utf-8"))

    @classmethod
    def default(cls) -> "ScenarioCatalog":
        """Load the catalog bundled with the package."""
        text = resources.files("roleplay_coach.catalog").joinpath(BUNDLED_CATALOG).read_text(
            encoding="utf-8"
        )
        return cls.from_yaml_text(text)

    def get(self, scenario_id: str) -> Scenario:
        try:
            return self._scenarios[scenario_id]
        except KeyError:
            raise ScenarioNotFoundError(scenario_id) from None

    def ids(self) -> List[str]:
        return list(self._scenarios)

    def __contains__(self, scenario_id: object) -> bool:
        return scenario_id in self._scenarios

    def __iter__(self) -> Iterator[Scenario]:
        return iter(self._scenarios.values())

    def __len__(self) -> int:
        return len(self._scenarios)
