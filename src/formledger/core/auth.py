from __future__ import annotations

from typing import Any

from .forms import FormRecord


def normalize_identity(value: Any, *, field: str = "caller") -> str:
    if value is None:
        raise ValueError(f"Missing {field}")
    ident = str(value).strip()
    if not ident:
        raise ValueError(f"{field} cannot be empty")
    return ident


def is_owner(owner: str, caller: Any) -> bool:
    if caller is None:
        return False
    return str(caller).strip() == owner


def is_allowed_responder(form: FormRecord | None, caller: Any) -> bool:
    # Unknown forms and anonymous callers are simply not allowed.
    if form is None or caller is None:
        return False
    return str(caller).strip() in form.responders
