from __future__ import annotations

from typing import Any

from ...core.codec import response_type_name, to_hex
from ...core.events import Event
from ...core.forms import FormDetails, Question, ResponseEntry, ResponseHistory


def value_to_json(value: Any) -> Any:
    # Opaque payloads travel as 0x-hex.
    if isinstance(value, (bytes, bytearray, memoryview)):
        return to_hex(bytes(value))
    return value


def question_to_item(q: Question) -> dict[str, Any]:
    return {
        "id": int(q.index),
        "index": int(q.index),
        "title": q.title,
        "description": q.description,
        "required": bool(q.required),
        "responseType": int(q.response_type),
        "responseTypeName": response_type_name(q.response_type),
        "createdAt": float(q.created_at),
    }


def form_to_item(f: FormDetails) -> dict[str, Any]:
    return {
        "id": int(f.id),
        "title": f.title,
        "description": f.description,
        "createdAt": float(f.created_at),
        "questions": [question_to_item(q) for q in f.questions],
        "questionsCount": int(f.questions_count),
    }


def history_to_item(h: ResponseHistory) -> dict[str, Any]:
    return {
        "responses": [value_to_json(v) for v in h.responses],
        "timestamps": [float(t) for t in h.timestamps],
    }


def entry_to_item(e: ResponseEntry) -> dict[str, Any]:
    return {
        "value": value_to_json(e.value),
        "payload": to_hex(e.payload),
        "timestamp": float(e.timestamp),
        "responder": e.responder,
    }


def event_to_item(e: Event) -> dict[str, Any]:
    return {
        "seq": int(e.seq),
        "name": e.name,
        "args": {k: value_to_json(v) for k, v in e.args.items()},
        "timestamp": float(e.timestamp),
    }
