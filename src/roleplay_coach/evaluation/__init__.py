from .evaluator import ResponseEvaluator
from .summary import build_summary, join_concepts

__all__ = ["ResponseEvaluator", "build_summary", "join_concepts"]
