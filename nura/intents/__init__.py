"""nura.intents

Intent catalog for the order console and helpers that turn the remainder of
a command into an intent payload.
"""

from nura.intents.catalog import DEFAULT_CATALOG, DESTRUCTIVE_INTENTS, IntentPattern
from nura.intents.order_payload import format_order_text, parse_create_order, parse_update_order

__all__ = [
    "DEFAULT_CATALOG",
    "DESTRUCTIVE_INTENTS",
    "IntentPattern",
    "format_order_text",
    "parse_create_order",
    "parse_update_order",
]
