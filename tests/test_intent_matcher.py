"""
Tests for the fuzzy intent matcher.

Tests that:
- Equality scores 1.0 and containment scores 0.9
- Strategies weight word overlap vs edit distance
- The best catalog pattern wins when it clears the threshold
- Fallback rules apply in order when nothing clears it
- Ranking is complete, sorted and stable

Run with: python -m pytest tests/test_intent_matcher.py -v
"""

import pytest

from nura.core.intent_matcher import (
    FALLBACK_RULES,
    STRATEGY_WEIGHTS,
    IntentMatcher,
    similarity,
    validate_strategy,
    validate_threshold,
)
from nura.intents import catalog
from nura.intents.catalog import DEFAULT_CATALOG, IntentPattern


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def matcher():
    return IntentMatcher(strategy="hybrid", threshold=0.7)


@pytest.fixture
def strict_matcher():
    """Threshold no fuzzy score reaches, so fallback rules decide."""
    return IntentMatcher(strategy="hybrid", threshold=0.95)


# ============================================================================
# SIMILARITY
# ============================================================================

class TestSimilarity:

    def test_equal(self):
        assert similarity("open orders menu", "open orders menu") == 1.0

    def test_equal_ignores_case_and_padding(self):
        assert similarity("  Open Orders Menu ", "open orders menu") == 1.0

    def test_contains(self):
        assert similarity("borra la orden 15", "borra la orden") == 0.9

    def test_hybrid_blend(self):
        score = similarity("abre el menu de ordenes", "abre el menú de órdenes", "hybrid")
        # 3 of 5 pattern words present; 2 substitutions over 23 characters
        assert score == pytest.approx(0.6 * 0.6 + 0.4 * (1 - 2 / 23))

    def test_damerau_is_edit_only(self):
        score = similarity("abre el menu de ordenes", "abre el menú de órdenes", "damerau")
        assert score == pytest.approx(1 - 2 / 23)

    @pytest.mark.parametrize("strategy", sorted(STRATEGY_WEIGHTS))
    def test_score_in_range(self, strategy):
        for text in ["", "x", "open the telemetry please", "zzzz zzzz zzzz"]:
            for entry in DEFAULT_CATALOG:
                assert 0.0 <= similarity(text, entry.pattern, strategy) <= 1.0


class TestValidation:

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            validate_strategy("jaro")
        with pytest.raises(ValueError):
            IntentMatcher(strategy="jaro")

    @pytest.mark.parametrize("value", [-0.1, 1.5])
    def test_threshold_out_of_range(self, value):
        with pytest.raises(ValueError):
            validate_threshold(value)

    def test_threshold_bounds_accepted(self):
        assert validate_threshold(0) == 0.0
        assert validate_threshold(1) == 1.0


# ============================================================================
# MATCHING
# ============================================================================

class TestPluginMatch:

    def test_exact_pattern(self, matcher):
        result = matcher.match("abre el menú de órdenes")
        assert result.intent == catalog.OPEN_ORDERS_MENU
        assert result.confidence == 1.0
        assert result.matched_by == "plugin"

    def test_contained_pattern(self, matcher):
        result = matcher.match("borra la orden 15")
        assert result.intent == catalog.DELETE_ORDER
        assert result.confidence == 0.9
        assert result.matched_by == "plugin"

    def test_score_equal_to_threshold_accepted(self):
        result = IntentMatcher(threshold=0.9).match("delete order 3")
        assert result.matched_by == "plugin"
        assert result.intent == catalog.DELETE_ORDER

    def test_ranking_complete_and_sorted(self, matcher):
        matcher.match("list tools")
        ranking = matcher.last_ranking
        assert len(ranking) == len(DEFAULT_CATALOG)
        scores = [c.score for c in ranking]
        assert scores == sorted(scores, reverse=True)
        assert ranking[0].intent == catalog.GATEWAY_LIST_TOOLS
        assert "hybrid" in ranking[0].reason

    def test_ties_keep_catalog_order(self):
        matcher = IntentMatcher(patterns=[IntentPattern("ping", "first"), IntentPattern("ping", "second")])
        assert matcher.match("ping").intent == "first"
        assert [c.intent for c in matcher.last_ranking] == ["first", "second"]


class TestFallbackRules:

    @pytest.mark.parametrize("text,intent,confidence", [
        ("open the orders menu", catalog.OPEN_ORDERS_MENU, 0.6),
        ("please delete that order", catalog.DELETE_ORDER, 0.6),
        ("add a new order", catalog.CREATE_ORDER, 0.58),
        ("could you update my order", catalog.UPDATE_ORDER, 0.58),
        ("i need help", catalog.SHOW_CAPABILITIES, 0.55),
        ("telemetria ahora", catalog.OPEN_TELEMETRY, 0.55),
        ("turn on explain please", catalog.EXPLAIN_ON, 0.55),
        ("desactiva el explain", catalog.EXPLAIN_OFF, 0.55),
        ("please connect to mcp", catalog.GATEWAY_CONNECT, 0.55),
        ("mcp resources now", catalog.GATEWAY_LIST_RESOURCES, 0.55),
        ("mcp tools now", catalog.GATEWAY_LIST_TOOLS, 0.55),
    ])
    def test_rule(self, strict_matcher, text, intent, confidence):
        result = strict_matcher.match(text)
        assert result.intent == intent
        assert result.confidence == confidence
        assert result.matched_by == "fallback"

    def test_first_rule_wins(self, strict_matcher):
        # both the open-menu and delete-order rules match
        assert strict_matcher.match("open menu and delete order").intent == catalog.OPEN_ORDERS_MENU

    def test_rule_order(self):
        assert [r.name for r in FALLBACK_RULES][:2] == ["open-menu", "delete-order"]

    def test_no_match(self, strict_matcher):
        result = strict_matcher.match("what time is it")
        assert result.intent == ""
        assert result.confidence == 0.0
        assert result.matched_by == "none"
        assert len(result.ranking) == len(DEFAULT_CATALOG)

    def test_empty_text(self, matcher):
        result = matcher.match("")
        assert result.matched_by == "none"
