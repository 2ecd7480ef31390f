"""Tests for lexical keyword matching, variants and year closeness."""

from __future__ import annotations

from roleplay_coach.matching import KeywordMatcher, VariantTable, ascii_fold, normalize


def test_normalize_collapses_case_whitespace_and_apostrophes():
    assert normalize("  I   CAN’T\tdo that ") == "i can't do that"


def test_substring_match_is_case_insensitive(matcher):
    assert matcher.matches("We started in 1927 with the ÖV4", "öv4")
    assert matcher.matches("Compliance matters", "compliance")


def test_transliterated_keyword_matches_ascii_spelling(matcher):
    assert ascii_fold("öv4") == "ov4"
    assert matcher.matches("It was the OV4", "ÖV4")


def test_common_misspelling_counts(matcher):
    assert matcher.matches("It was named after Jacob", "Jakob")


def test_inflected_forms_count(matcher):
    assert matcher.matches("That is against our policies", "policy")
    assert matcher.matches("There is a regulation for this", "regulations")


def test_synonyms_count_for_refusals(matcher):
    assert matcher.matches("I can't do that", "cannot")
    assert matcher.matches("That is prohibited", "not allowed")


def test_phrase_with_interrupting_words_matches(matcher):
    assert matcher.matches("It is not really allowed here", "not allowed")


def test_phrase_words_too_far_apart_do_not_match(matcher):
    assert not matcher.matches("not something I think is ever allowed", "not allowed")


def test_phrase_words_in_reverse_order_match(matcher):
    assert matcher.matches("allowed? Surely not", "not allowed")


def test_find_preserves_keyword_order(matcher):
    text = "Jakob and the ÖV4"
    assert matcher.find(text, ["ÖV4", "1927", "Jakob"]) == ["ÖV4", "Jakob"]


def test_close_year_reports_direction(matcher):
    near = matcher.closeness("I think it was 1929", "1927")
    assert near is not None
    assert not near.exact
    assert near.direction == "earlier"
    assert "earlier" in near.hint

    early = matcher.closeness("Maybe 1925?", "1927")
    assert early.direction == "later"


def test_exact_year_wins_over_close_token(matcher):
    near = matcher.closeness("1928 or maybe 1927", "1927")
    assert near.exact
    assert near.hint is None


def test_year_outside_tolerance_is_not_close(matcher):
    assert matcher.closeness("It was 1930", "1927") is None
    assert matcher.closeness("It was 1927", "Jakob") is None


def test_year_tolerance_is_configurable():
    strict = KeywordMatcher(year_tolerance=0)
    assert strict.closeness("It was 1928", "1927") is None


def test_is_near_year(matcher):
    assert matcher.is_near_year("1928", ["1927"])
    assert not matcher.is_near_year("1927", ["1927"])
    assert not matcher.is_near_year("Ford", ["1927"])


def test_coverage_splits_covered_attempted_missing(matcher):
    coverage = matcher.coverage("The ÖV4 in 1929", ["ÖV4", "1927", "Jakob"])
    assert coverage.covered == ["ÖV4"]
    assert list(coverage.attempted) == ["1927"]
    assert coverage.missing == ["Jakob"]
    assert coverage.is_addressed("1927")
    assert not coverage.is_covered("1927")


def test_custom_variant_table():
    variants = VariantTable({"gothenburg": ["göteborg"]})
    custom = KeywordMatcher(variants=variants)
    assert custom.matches("Founded in Göteborg", "Gothenburg")
