# tests/unit/validation/test_unit_matching.py — v1
"""Tests for validation/matching.py."""

from __future__ import annotations

from toolfactory.validation.matching import SubstringMatcher, WholeWordMatcher, tail_segment


class TestSubstringMatcher:
    def test_case_insensitive(self):
        assert SubstringMatcher().matches("<label>Lever 1: Your Price</label>", "LEVER 1: YOUR PRICE")

    def test_partial_word_matches(self):
        assert SubstringMatcher().matches("Volumes", "volume")

    def test_blank_needle_never_matches(self):
        assert not SubstringMatcher().matches("anything", "   ")

    def test_absent(self):
        assert not SubstringMatcher().matches("price", "volume")


class TestWholeWordMatcher:
    def test_word_boundaries(self):
        matcher = WholeWordMatcher()
        assert matcher.matches("Your volume here", "Volume")
        assert not matcher.matches("Volumes", "volume")

    def test_punctuation_in_needle(self):
        assert WholeWordMatcher().matches("<b>LEVER 1: PRICE</b>", "lever 1: price")

    def test_blank_needle(self):
        assert not WholeWordMatcher().matches("x", "")


class TestTailSegment:
    def test_after_last_colon(self):
        assert tail_segment("LEVER 1: YOUR PRICE") == "YOUR PRICE"
        assert tail_segment("A: B: C") == "C"

    def test_no_colon(self):
        assert tail_segment("  Price ") == "Price"
