from __future__ import annotations

from .core.codec import ResponseType, decode, encode
from .core.errors import (
    FormNotFound,
    InvalidQuestionIndex,
    InvalidValueKind,
    NotAllowedResponder,
    NotOwner,
    RegistryError,
)
from .core.events import Event, EventLog
from .core.registry import FormRegistry
from .runtime.server import FormsServer, run
from .sdk.client import FormsClient

__all__ = [
    "run",
    "FormsServer",
    "FormsClient",
    "FormRegistry",
    "EventLog",
    "Event",
    "ResponseType",
    "encode",
    "decode",
    "RegistryError",
    "NotOwner",
    "NotAllowedResponder",
    "FormNotFound",
    "InvalidQuestionIndex",
    "InvalidValueKind",
]
