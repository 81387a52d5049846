from __future__ import annotations

from .codec import (
    NUMERIC_WIDTH,
    NumericValue,
    OpaqueValue,
    ResponseType,
    ResponseValue,
    TextValue,
    decode,
    decode_value,
    encode,
    from_hex,
    response_type_name,
    to_hex,
)
from .errors import (
    FormNotFound,
    InvalidQuestionIndex,
    InvalidValueKind,
    NotAllowedResponder,
    NotOwner,
    RegistryError,
)
from .events import Event, EventLog
from .forms import FormDetails, FormRecord, Question, ResponseEntry, ResponseHistory
from .registry import FIRST_FORM_ID, FormRegistry

__all__ = [
    "ResponseType",
    "ResponseValue",
    "NumericValue",
    "TextValue",
    "OpaqueValue",
    "NUMERIC_WIDTH",
    "encode",
    "decode",
    "decode_value",
    "to_hex",
    "from_hex",
    "response_type_name",
    "RegistryError",
    "NotOwner",
    "NotAllowedResponder",
    "FormNotFound",
    "InvalidQuestionIndex",
    "InvalidValueKind",
    "Event",
    "EventLog",
    "Question",
    "ResponseEntry",
    "ResponseHistory",
    "FormDetails",
    "FormRecord",
    "FormRegistry",
    "FIRST_FORM_ID",
]
