"""
Tests for wake phrase stripping.

Tests that:
- Canonical phrases are stripped with confidence 1.0 (via "exact")
- Phonetic aliases are scored by edit similarity (via "phonetic")
- Aliases below the minimum confidence are reported but not accepted
- Utterances without a wake phrase pass through unchanged

Run with: python -m pytest tests/test_wake.py -v
"""

import pytest

from nura.core.event_bus import EventBus
from nura.voice.wake import VIA_EXACT, VIA_NONE, VIA_PHONETIC, WakeWordStripper


ALIASES = {
    "ok nura": ["ok nora", "okay nura", "hola nura"],
    "oye nura": ["oye nora"],
}


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def stripper(bus):
    return WakeWordStripper(
        wake_words=["ok nura", "oye nura"],
        aliases=ALIASES,
        min_confidence=0.6,
        event_bus=bus,
    )


class TestExactWake:
    """Canonical wake phrases."""

    def test_strips_canonical_phrase(self, stripper):
        result = stripper.strip("ok nura abre el menú de órdenes")
        assert result.matched is True
        assert result.via == VIA_EXACT
        assert result.confidence == 1.0
        assert result.command == "abre el menú de órdenes"
        assert result.wake_word == "ok nura"
        assert result.alias is None

    def test_case_and_punctuation_insensitive(self, stripper):
        result = stripper.strip("Ok Nura, abre el menú")
        assert result.matched is True
        assert result.command == "abre el menú"

    def test_second_wake_phrase(self, stripper):
        result = stripper.strip("oye nura delete order 3")
        assert result.matched is True
        assert result.wake_word == "oye nura"
        assert result.command == "delete order 3"

    def test_wake_phrase_only(self, stripper):
        result = stripper.strip("ok nura")
        assert result.matched is True
        assert result.command == ""

    def test_emits_wake_exact(self, stripper, bus):
        stripper.strip("ok nura open telemetry")
        events = bus.get_events("wake-exact")
        assert len(events) == 1
        assert events[0].data == {"wake": "ok nura", "confidence": 1.0}

    def test_longest_phrase_wins(self):
        stripper = WakeWordStripper(wake_words=["ok", "ok nura"], aliases={}, min_confidence=0.6)
        result = stripper.strip("ok nura list tools")
        assert result.wake_word == "ok nura"
        assert result.command == "list tools"


class TestPhoneticWake:
    """Aliases heard by the speech recognizer."""

    def test_alias_is_phonetic(self, stripper):
        result = stripper.strip("ok nora abre el menú de órdenes")
        assert result.matched is True
        assert result.via == VIA_PHONETIC
        assert result.wake_word == "ok nura"
        assert result.alias == "ok nora"
        assert result.command == "abre el menú de órdenes"
        # one substitution over seven characters
        assert result.confidence == pytest.approx(1 - 1 / 7)

    def test_alias_confidence_below_one(self, stripper):
        result = stripper.strip("okay nura open telemetry")
        assert result.matched is True
        assert 0.6 <= result.confidence < 1.0

    def test_low_confidence_alias_not_accepted(self, bus):
        stripper = WakeWordStripper(
            wake_words=["ok nura"], aliases=ALIASES, min_confidence=0.7, event_bus=bus
        )
        result = stripper.strip("hola nura abre el menú")
        assert result.matched is False
        assert result.via == VIA_NONE
        assert result.command == "hola nura abre el menú"
        assert result.alias == "hola nura"
        assert result.confidence == pytest.approx(2 / 3)

        events = bus.get_events("wake-phonetic")
        assert len(events) == 1
        assert events[0].data["accepted"] is False
        assert events[0].data["canonical"] == "ok nura"

    def test_accepted_alias_event(self, stripper, bus):
        stripper.strip("ok nora list tools")
        events = bus.get_events("wake-phonetic")
        assert events[0].data["wake"] == "ok nora"
        assert events[0].data["accepted"] is True


class TestNoWake:
    """Utterances that do not start with a wake phrase."""

    def test_passthrough(self, stripper):
        result = stripper.strip("abre el menú de órdenes")
        assert result.matched is False
        assert result.confidence == 0.0
        assert result.via == VIA_NONE
        assert result.command == "abre el menú de órdenes"

    def test_wake_phrase_not_at_start(self, stripper):
        result = stripper.strip("abre ok nura el menú")
        assert result.matched is False
        assert result.command == "abre ok nura el menú"

    def test_partial_word_is_not_wake(self, stripper):
        result = stripper.strip("ok nurarium")
        assert result.matched is False

    @pytest.mark.parametrize("utterance", ["", "   ", None])
    def test_empty_input(self, stripper, utterance):
        result = stripper.strip(utterance)
        assert result.matched is False
        assert result.command == ""

    def test_to_dict(self, stripper):
        data = stripper.strip("ok nura help panel").to_dict()
        assert data["matched"] is True
        assert data["via"] == "exact"
        assert data["command"] == "help panel"
