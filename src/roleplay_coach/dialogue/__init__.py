from .engine import DialogueEngine
from .phrasing import NEAR_MISS_PREFIXES, PhraseSelector
from .policies import (
    ComplianceTopic,
    DefaultPolicy,
    FinancialCompliancePolicy,
    PolicyRegistry,
    ScenarioPolicy,
    VolvoHistoryPolicy,
    VolvoTopic,
    default_registry,
)

__all__ = [
    "ComplianceTopic",
    "DefaultPolicy",
    "DialogueEngine",
    "FinancialCompliancePolicy",
    "NEAR_MISS_PREFIXES",
    "PhraseSelector",
    "PolicyRegistry",
    "ScenarioPolicy",
    "VolvoHistoryPolicy",
    "VolvoTopic",
    "default_registry",
]
