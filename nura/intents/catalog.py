"""nura.intents.catalog

Intent action names and the default pattern catalog.

Actions use the "<verb>::<target>" convention of the console UI. Each
catalog entry pairs an example phrase with the action it triggers; the fuzzy
matcher scores an utterance against every phrase.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

OPEN_ORDERS_MENU = "open::menu:orders"
DELETE_ORDER = "delete::order"
CREATE_ORDER = "create::order"
UPDATE_ORDER = "update::order"
SHOW_CAPABILITIES = "show::capabilities"
OPEN_TELEMETRY = "open::telemetry"
EXPLAIN_ON = "toggle::explain:on"
EXPLAIN_OFF = "toggle::explain:off"
GATEWAY_CONNECT = "mcp::connect"
GATEWAY_LIST_RESOURCES = "mcp::list:resources"
GATEWAY_LIST_TOOLS = "mcp::list:tools"
CONFIRM_LAST_ACTION = "confirm::last-action"
CANCEL_LAST_ACTION = "cancel::last-action"

# Intents that mutate data and must be confirmed before they run
DESTRUCTIVE_INTENTS = frozenset({DELETE_ORDER})


@dataclass(frozen=True)
class IntentPattern:
    pattern: str
    intent: str


DEFAULT_CATALOG: List[IntentPattern] = [
    IntentPattern("abre el menú de órdenes", OPEN_ORDERS_MENU),
    IntentPattern("abre el menú de pedidos", OPEN_ORDERS_MENU),
    IntentPattern("open orders menu", OPEN_ORDERS_MENU),
    IntentPattern("elimina la orden", DELETE_ORDER),
    IntentPattern("borra la orden", DELETE_ORDER),
    IntentPattern("delete order", DELETE_ORDER),
    IntentPattern("agrega la orden", CREATE_ORDER),
    IntentPattern("añade la orden", CREATE_ORDER),
    IntentPattern("add the order", CREATE_ORDER),
    IntentPattern("add order", CREATE_ORDER),
    IntentPattern("modifica la orden", UPDATE_ORDER),
    IntentPattern("actualiza la orden", UPDATE_ORDER),
    IntentPattern("update the order", UPDATE_ORDER),
    IntentPattern("update order", UPDATE_ORDER),
    IntentPattern("muestra capacidades", SHOW_CAPABILITIES),
    IntentPattern("ayuda nura", SHOW_CAPABILITIES),
    IntentPattern("show capabilities", SHOW_CAPABILITIES),
    IntentPattern("help panel", SHOW_CAPABILITIES),
    IntentPattern("abre telemetría", OPEN_TELEMETRY),
    IntentPattern("ver ranking", OPEN_TELEMETRY),
    IntentPattern("open telemetry", OPEN_TELEMETRY),
    IntentPattern("activa modo explain", EXPLAIN_ON),
    IntentPattern("activar explain", EXPLAIN_ON),
    IntentPattern("turn explain mode on", EXPLAIN_ON),
    IntentPattern("desactiva modo explain", EXPLAIN_OFF),
    IntentPattern("desactiva explain", EXPLAIN_OFF),
    IntentPattern("turn explain mode off", EXPLAIN_OFF),
    IntentPattern("conectar mcp", GATEWAY_CONNECT),
    IntentPattern("connect mcp", GATEWAY_CONNECT),
    IntentPattern("listar recursos", GATEWAY_LIST_RESOURCES),
    IntentPattern("list resources", GATEWAY_LIST_RESOURCES),
    IntentPattern("listar tools", GATEWAY_LIST_TOOLS),
    IntentPattern("listar herramientas", GATEWAY_LIST_TOOLS),
    IntentPattern("list tools", GATEWAY_LIST_TOOLS),
    IntentPattern("sí, confírmalo", CONFIRM_LAST_ACTION),
    IntentPattern("sí, elimínalo", CONFIRM_LAST_ACTION),
    IntentPattern("sí, elimínala", CONFIRM_LAST_ACTION),
    IntentPattern("yes, confirm", CONFIRM_LAST_ACTION),
    IntentPattern("si, eliminalo", CONFIRM_LAST_ACTION),
    IntentPattern("confirm it", CONFIRM_LAST_ACTION),
    IntentPattern("no, cancélala", CANCEL_LAST_ACTION),
    IntentPattern("cancel it", CANCEL_LAST_ACTION),
]
