from __future__ import annotations

from .fields import (
    parse_addresses,
    parse_bool,
    parse_caller,
    parse_int,
    parse_response_input,
    parse_text,
)

__all__ = [
    "parse_bool",
    "parse_int",
    "parse_text",
    "parse_caller",
    "parse_addresses",
    "parse_response_input",
]
