"""Command text normalization."""

from __future__ import annotations


def is_command(text: str, trigger: str = "/") -> bool:
    """True when the chat message starts with the command trigger."""
    return bool(trigger) and (text or "").lstrip().startswith(trigger)


def normalize_command(text: str, trigger: str = "/") -> str:
    """Strip one leading trigger token and surrounding whitespace.

    "/gera o pdf embarque da gramado " -> "gera o pdf embarque da gramado"
    Text without the trigger is only trimmed.
    """
    stripped = (text or "").strip()
    if trigger and stripped.startswith(trigger):
        stripped = stripped[len(trigger):]
    return stripped.strip()
