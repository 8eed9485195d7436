"""
Tests for pending action confirmation.

Tests the yes/no reply classification and the single-slot pending store:
- Spanish and English confirmations, with or without accents
- A slot is cleared on confirm or rejection, and kept otherwise
- A new save replaces the previous action for the same key
- The coordinator publishes the confirmation lifecycle on the event bus

Run with: python -m pytest tests/test_pending_confirmation.py -v
"""

import pytest

from nura.core.event_bus import EventBus
from nura.intents import catalog
from nura.policy.pending_confirmation import (
    DELETE_KEY,
    REASON_EMPTY_RESPONSE,
    REASON_MISSING_CONTEXT,
    REASON_REJECTED,
    REASON_UNRECOGNIZED,
    ContextManager,
    PendingAction,
    PendingActionCoordinator,
    is_confirmation_response,
    is_no,
    is_yes,
    normalize,
)


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def context():
    return ContextManager()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def coordinator(bus):
    return PendingActionCoordinator(event_bus=bus)


@pytest.fixture
def delete_action():
    return PendingAction(intent=catalog.DELETE_ORDER, description="Delete order 15", payload={"id": 15})


# ============================================================================
# PATTERN MATCHING TESTS
# ============================================================================

class TestNormalize:

    def test_lowercase_and_accents(self):
        assert normalize("Sí, Elimínala") == "si, eliminala"

    def test_empty(self):
        assert normalize("") == ""
        assert normalize(None) == ""


class TestIsYes:

    @pytest.mark.parametrize("text", [
        "sí", "si", "Sí, elimínala", "claro", "dale", "de acuerdo", "confírmalo",
        "yes", "yeah", "sure", "yes, delete it", "go ahead", "do it", "YES!",
    ])
    def test_affirmative(self, text):
        assert is_yes(text) is True

    @pytest.mark.parametrize("text", ["no", "nope", "maybe", "yesterday", "sigue", "", None])
    def test_not_affirmative(self, text):
        assert is_yes(text) is False

    def test_wake_phrase_is_not_a_yes(self):
        assert is_yes("ok nura borra la orden quince") is False


class TestIsNo:

    @pytest.mark.parametrize("text", [
        "no", "No, cancélala", "cancela", "mejor no", "olvídalo",
        "nope", "cancel", "never mind", "nevermind", "don't", "do not",
    ])
    def test_negative(self, text):
        assert is_no(text) is True

    @pytest.mark.parametrize("text", ["sí", "know", "nothing", "maybe", ""])
    def test_not_negative(self, text):
        assert is_no(text) is False

    def test_any_reply(self):
        assert is_confirmation_response("sí") is True
        assert is_confirmation_response("no") is True
        assert is_confirmation_response("abre el menú") is False


# ============================================================================
# CONTEXT MANAGER TESTS
# ============================================================================

class TestContextManager:

    def test_save_and_get(self, context, delete_action):
        saved = context.save_action(DELETE_KEY, delete_action)
        assert context.get_action(DELETE_KEY) is saved
        assert saved.intent == catalog.DELETE_ORDER
        assert saved.payload == {"id": 15}
        assert saved.saved_at > 0

    def test_save_accepts_mapping(self, context):
        saved = context.save_action("delete", {"intent": "delete::order", "payload": {"id": 2}})
        assert saved.intent == "delete::order"
        assert saved.description == ""
        assert saved.payload == {"id": 2}

    def test_new_save_replaces(self, context, delete_action):
        context.save_action(DELETE_KEY, delete_action)
        context.save_action(DELETE_KEY, PendingAction(catalog.DELETE_ORDER, "Delete order 3", {"id": 3}))
        assert context.get_action(DELETE_KEY).payload == {"id": 3}
        assert context.keys() == [DELETE_KEY]

    def test_keys_most_recent_first(self, context, delete_action):
        context.save_action("delete", delete_action)
        context.save_action("archive", PendingAction("archive::order"))
        assert context.keys() == ["archive", "delete"]
        context.save_action("delete", delete_action)
        assert context.keys() == ["delete", "archive"]

    def test_clear(self, context, delete_action):
        context.save_action(DELETE_KEY, delete_action)
        assert context.clear_action(DELETE_KEY).intent == catalog.DELETE_ORDER
        assert context.get_action(DELETE_KEY) is None
        assert context.clear_action(DELETE_KEY) is None

    def test_confirm_clears_slot(self, context, delete_action):
        context.save_action(DELETE_KEY, delete_action)
        result = context.maybe_confirm(DELETE_KEY, "sí, elimínala")
        assert result.confirmed is True
        assert result.reason is None
        assert result.action.payload == {"id": 15}
        assert context.get_action(DELETE_KEY) is None

    def test_rejection_clears_slot(self, context, delete_action):
        context.save_action(DELETE_KEY, delete_action)
        result = context.maybe_confirm(DELETE_KEY, "no")
        assert result.confirmed is False
        assert result.reason == REASON_REJECTED
        assert result.action.intent == catalog.DELETE_ORDER
        assert context.get_action(DELETE_KEY) is None

    def test_unrecognized_keeps_slot(self, context, delete_action):
        context.save_action(DELETE_KEY, delete_action)
        result = context.maybe_confirm(DELETE_KEY, "abre el menú")
        assert result.confirmed is False
        assert result.reason == REASON_UNRECOGNIZED
        assert context.get_action(DELETE_KEY) is not None

    @pytest.mark.parametrize("reply", ["", "   ", None])
    def test_empty_keeps_slot(self, context, delete_action, reply):
        context.save_action(DELETE_KEY, delete_action)
        result = context.maybe_confirm(DELETE_KEY, reply)
        assert result.reason == REASON_EMPTY_RESPONSE
        assert context.get_action(DELETE_KEY) is not None

    def test_missing_context(self, context):
        result = context.maybe_confirm(DELETE_KEY, "sí")
        assert result.confirmed is False
        assert result.reason == REASON_MISSING_CONTEXT
        assert result.action is None

    def test_confirm_only_once(self, context, delete_action):
        context.save_action(DELETE_KEY, delete_action)
        assert context.maybe_confirm(DELETE_KEY, "yes").confirmed is True
        assert context.maybe_confirm(DELETE_KEY, "yes").reason == REASON_MISSING_CONTEXT


# ============================================================================
# COORDINATOR TESTS
# ============================================================================

class TestPendingActionCoordinator:

    def test_register_publishes(self, coordinator, bus):
        coordinator.register(DELETE_KEY, catalog.DELETE_ORDER, {"id": 15}, "Delete order 15")
        assert coordinator.has_pending() is True
        assert coordinator.has_pending(DELETE_KEY) is True
        assert coordinator.active_key() == DELETE_KEY

        events = bus.get_events("pending-confirmation")
        assert len(events) == 1
        assert events[0].data == {
            "intent": catalog.DELETE_ORDER,
            "payload": {"id": 15},
            "description": "Delete order 15",
        }

    def test_resolve_yes_publishes_confirmed(self, coordinator, bus):
        coordinator.register(DELETE_KEY, catalog.DELETE_ORDER, {"id": 15}, "Delete order 15")
        result = coordinator.resolve(DELETE_KEY, "yes")
        assert result.confirmed is True
        assert coordinator.has_pending() is False
        assert bus.get_events("confirmed")[0].data == {"intent": catalog.DELETE_ORDER, "payload": {"id": 15}}

    def test_resolve_no_publishes_cancelled(self, coordinator, bus):
        coordinator.register(DELETE_KEY, catalog.DELETE_ORDER, {"id": 15}, "Delete order 15")
        coordinator.resolve(DELETE_KEY, "no, cancélala")
        assert coordinator.get_pending(DELETE_KEY) is None
        assert bus.get_events("cancelled")[0].data["description"] == "Delete order 15"

    def test_unrecognized_publishes_nothing(self, coordinator, bus):
        coordinator.register(DELETE_KEY, catalog.DELETE_ORDER, {"id": 15}, "Delete order 15")
        coordinator.resolve(DELETE_KEY, "hmm")
        assert bus.get_events("confirmed") == []
        assert bus.get_events("cancelled") == []

    def test_explicit_confirm(self, coordinator, bus):
        coordinator.register(DELETE_KEY, catalog.DELETE_ORDER, {"id": 4}, "Delete order 4")
        entry = coordinator.confirm(DELETE_KEY)
        assert entry.payload == {"id": 4}
        assert coordinator.confirm(DELETE_KEY) is None
        assert len(bus.get_events("confirmed")) == 1

    def test_explicit_cancel(self, coordinator, bus):
        coordinator.register(DELETE_KEY, catalog.DELETE_ORDER, {"id": 4}, "Delete order 4")
        assert coordinator.cancel(DELETE_KEY).intent == catalog.DELETE_ORDER
        assert coordinator.cancel(DELETE_KEY) is None
        assert len(bus.get_events("cancelled")) == 1

    def test_without_event_bus(self):
        coordinator = PendingActionCoordinator()
        coordinator.register(DELETE_KEY, catalog.DELETE_ORDER, {"id": 1})
        assert coordinator.resolve(DELETE_KEY, "sí").confirmed is True
