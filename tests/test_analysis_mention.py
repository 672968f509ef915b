"""Tests for mention detection."""

from llm_fingerprint.analysis.mention import (
    CONTEXTUAL_CONFIDENCE,
    EXACT_CONFIDENCE,
    MENTION_RULES,
    NOT_MENTIONED_CONFIDENCE,
    VARIANT_CONFIDENCE,
    analyze_mention,
)
from llm_fingerprint.analysis.types import MatchType


class TestMentionRules:
    def test_exact(self):
        result = analyze_mention("Test Business is a great place.", "Test Business")
        assert result.mentioned is True
        assert result.match_type == MatchType.EXACT
        assert result.confidence == EXACT_CONFIDENCE

    def test_exact_case_insensitive(self):
        assert analyze_mention("test business rocks", "Test Business").match_type == MatchType.EXACT

    def test_variant(self):
        result = analyze_mention("I had a good visit at acme dental.", "Acme Dental LLC")
        assert result.mentioned is True
        assert result.match_type == MatchType.VARIANT
        assert result.confidence == VARIANT_CONFIDENCE
        assert result.variants == ["Acme Dental"]

    def test_contextual(self):
        text = "This business is known for their services and its reputation."
        result = analyze_mention(text, "Acme Dental")
        assert result.mentioned is True
        assert result.match_type == MatchType.CONTEXTUAL
        assert result.confidence == CONTEXTUAL_CONFIDENCE

    def test_contextual_needs_two_business_words(self):
        result = analyze_mention("It is hard to say anything.", "Acme Dental")
        assert result.mentioned is False

    def test_contextual_needs_referential_phrase(self):
        result = analyze_mention("Good services, quality staff and a friendly team.", "Acme Dental")
        assert result.mentioned is False

    def test_not_mentioned(self):
        result = analyze_mention("Nothing relevant here.", "Test Business")
        assert result.mentioned is False
        assert result.match_type == MatchType.NONE
        assert result.confidence == NOT_MENTIONED_CONFIDENCE

    def test_exact_wins_over_contextual(self):
        text = "Test Business: this business has great services and quality staff."
        assert analyze_mention(text, "Test Business").match_type == MatchType.EXACT


class TestRuleList:
    def test_rule_order(self):
        assert [rule.name for rule in MENTION_RULES] == ["exact", "variant", "contextual"]

    def test_custom_rule_list(self):
        result = analyze_mention("Test Business is here.", "Test Business", rules=[])
        assert result.mentioned is False

    def test_single_rule(self):
        contextual_only = [rule for rule in MENTION_RULES if rule.name == "contextual"]
        result = analyze_mention("Test Business is here.", "Test Business", rules=contextual_only)
        assert result.mentioned is False


class TestGenericNames:
    LISTING = "Here are the best dentists in Austin:\n1. Family Dental - friendly\n2. Smile Center - modern"

    def test_competitor_line_is_not_a_mention(self):
        result = analyze_mention(self.LISTING, "The Dental Group")
        assert result.mentioned is False
        assert result.match_type == MatchType.NONE

    def test_stripped_name_still_matches(self):
        result = analyze_mention("Many patients choose Dental Group for implants.", "The Dental Group")
        assert result.mentioned is True
        assert result.match_type == MatchType.VARIANT
        assert result.variants == ["Dental Group"]
