from .keywords import KeywordMatcher, NumericMatch, RequiredCoverage, is_year_keyword, normalize
from .variants import VariantTable, ascii_fold

__all__ = [
    "KeywordMatcher",
    "NumericMatch",
    "RequiredCoverage",
    "VariantTable",
    "ascii_fold",
    "is_year_keyword",
    "normalize",
]
