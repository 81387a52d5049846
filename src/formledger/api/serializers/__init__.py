from __future__ import annotations

from .forms import (
    entry_to_item,
    event_to_item,
    form_to_item,
    history_to_item,
    question_to_item,
    value_to_json,
)

__all__ = [
    "value_to_json",
    "question_to_item",
    "form_to_item",
    "history_to_item",
    "entry_to_item",
    "event_to_item",
]
