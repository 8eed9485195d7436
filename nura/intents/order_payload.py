"""nura.intents.order_payload

Extracts order names and notes from create/update commands, e.g.

    "agrega la orden matcha latte con nota sin azúcar"
        -> {"name": "Matcha Latte", "notes": "Sin Azúcar"}
    "modifica la orden 2 con nota agrega canela"
        -> {"notes": "Agrega Canela"}
"""

from __future__ import annotations

import re
from typing import Dict

NOTE_SEPARATORS = [
    " con nota ",
    " con notas ",
    " con comentario ",
    " con comentarios ",
    " with note ",
    " with notes ",
    " nota:",
    " note:",
]

_CREATE_RE = re.compile(r"(?:agrega|añade|add)\s+(?:la\s+|the\s+)?(?:orden|order)\s+(.*)$", re.IGNORECASE)
_UPDATE_NOTES_RE = re.compile(r"(?:con notas?|with notes?|nota:|note:)\s+(.*)$", re.IGNORECASE)
_UPDATE_NAME_RE = re.compile(
    r"(?:modifica|actualiza|update)\s+(?:la\s+|the\s+)?(?:orden|order)(?:\s+\d+)?\s+(?:a|to)\s+(.*)$",
    re.IGNORECASE,
)


def format_order_text(text: str) -> str:
    """Collapse whitespace and capitalize each word."""
    words = (text or "").strip().split()
    return " ".join(w[0].upper() + w[1:] for w in words)


def parse_create_order(text: str) -> Dict[str, str]:
    match = _CREATE_RE.search(text or "")
    if not match:
        return {}
    rest = match.group(1).strip()
    if not rest:
        return {}

    lowered = rest.lower()
    for separator in NOTE_SEPARATORS:
        index = lowered.find(separator)
        if index != -1:
            name_part = rest[:index]
            notes_part = rest[index + len(separator):]
            details = {"name": format_order_text(name_part or rest)}
            notes = format_order_text(notes_part)
            if notes:
                details["notes"] = notes
            return details

    return {"name": format_order_text(rest)}


def parse_update_order(text: str) -> Dict[str, str]:
    # Notes take precedence over a rename
    notes_match = _UPDATE_NOTES_RE.search(text or "")
    if notes_match and notes_match.group(1).strip():
        return {"notes": format_order_text(notes_match.group(1))}

    name_match = _UPDATE_NAME_RE.search(text or "")
    if name_match and name_match.group(1).strip():
        return {"name": format_order_text(name_match.group(1))}

    return {}
