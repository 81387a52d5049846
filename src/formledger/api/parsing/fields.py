from __future__ import annotations

from typing import Any

import numpy as np

from ...core.codec import from_hex


def parse_bool(value: Any, *, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        raise ValueError(f"Missing {field}")
    s = str(value).strip().lower()
    if s in {"1", "true", "yes", "on"}:
        return True
    if s in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid {field}")


def parse_int(value: Any, *, field: str, minimum: int | None = None) -> int:
    if value is None:
        raise ValueError(f"Missing {field}")
    if isinstance(value, bool):
        raise ValueError(f"Invalid {field}")
    if isinstance(value, float):
        if not np.isfinite(value) or not float(value).is_integer():
            raise ValueError(f"Invalid {field}")
    try:
        v = int(value)
    except Exception as ex:
        raise ValueError(f"Invalid {field}") from ex
    if minimum is not None and v < minimum:
        raise ValueError(f"{field} must be >= {minimum}")
    return v


def parse_text(body: dict[str, Any], key: str, *, required: bool = True, default: str = "") -> str:
    raw = body.get(key)
    if raw is None:
        if required:
            raise ValueError(f"Missing {key}")
        return default
    if not isinstance(raw, str):
        raise ValueError(f"{key} must be a string")
    if required and not raw.strip():
        raise ValueError(f"{key} cannot be empty")
    return raw


def parse_caller(value: str | None) -> str | None:
    if value is None:
        return None
    caller = str(value).strip()
    return caller or None


def parse_addresses(body: dict[str, Any]) -> list[str]:
    """Accept either `addresses: [...]` or a single `address`."""

    if "addresses" in body:
        raw = body.get("addresses")
        if not isinstance(raw, list):
            raise ValueError("addresses must be a list")
    elif "address" in body:
        raw = [body.get("address")]
    else:
        raise ValueError("Missing addresses")

    out: list[str] = []
    for a in raw:
        if not isinstance(a, str) or not a.strip():
            raise ValueError("addresses must be non-empty strings")
        out.append(a.strip())
    return out


def parse_response_input(body: dict[str, Any]) -> Any:
    """Return the submission input: raw payload bytes, or a logical value.

    Body:
      - payload: 0x-prefixed hex of the stored bytes
      - value: logical value (int or str), encoded server-side with the question's type
    """

    has_payload = "payload" in body
    has_value = "value" in body
    if has_payload and has_value:
        raise ValueError("Provide only one of payload or value")
    if has_payload:
        payload = body.get("payload")
        if not isinstance(payload, str):
            raise ValueError("payload must be a hex string")
        return from_hex(payload)
    if has_value:
        value = body.get("value")
        if value is None or isinstance(value, (dict, list, float)):
            raise ValueError("value must be an integer or a string")
        return value
    raise ValueError("Missing payload or value")
