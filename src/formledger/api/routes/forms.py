from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Header, HTTPException

from ...core.errors import RegistryError
from ...core.registry import FormRegistry
from ..parsing import (
    parse_addresses,
    parse_bool,
    parse_caller,
    parse_response_input,
    parse_text,
)
from ..serializers import entry_to_item, form_to_item, history_to_item, question_to_item


def _require_caller(x_caller: str | None) -> str:
    caller = parse_caller(x_caller)
    if caller is None:
        raise HTTPException(status_code=401, detail="Missing X-Caller header")
    return caller


def mount_forms_api(app: FastAPI, registry: FormRegistry) -> None:
    """Mount form, question, responder and response endpoints.

    Mutations identify the caller through the `X-Caller` header. Registry
    failures propagate to the app-level `RegistryError` handler.
    """

    @app.post("/api/forms")
    def create_form(body: dict, x_caller: str | None = Header(default=None)) -> dict[str, Any]:
        caller = _require_caller(x_caller)
        try:
            title = parse_text(body, "title")
            description = parse_text(body, "description", required=False)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        form_id = registry.create_form(title, description, caller=caller)
        return {"ok": True, "formId": form_id}

    @app.get("/api/forms")
    def list_forms() -> list[dict[str, Any]]:
        return [form_to_item(f) for f in registry.get_all_forms()]

    @app.get("/api/forms/{form_id}")
    def get_form(form_id: int) -> dict[str, Any]:
        return form_to_item(registry.get_form_details(form_id))

    @app.post("/api/forms/{form_id}/questions")
    def add_question(form_id: int, body: dict, x_caller: str | None = Header(default=None)) -> dict[str, Any]:
        caller = _require_caller(x_caller)
        try:
            title = parse_text(body, "title")
            description = parse_text(body, "description", required=False)
            required = parse_bool(body.get("required", False), field="required")
            response_type = body.get("responseType", "text")
            if response_type is None:
                raise ValueError("Missing responseType")
            index = registry.add_question_to_form(
                form_id,
                title,
                description,
                required,
                response_type,
                caller=caller,
            )
        except RegistryError:
            raise
        except (TypeError, ValueError) as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"ok": True, "formId": form_id, "questionIndex": index}

    @app.get("/api/forms/{form_id}/questions/{question_index}")
    def get_question(form_id: int, question_index: int) -> dict[str, Any]:
        return question_to_item(registry.get_question_details(form_id, question_index))

    @app.post("/api/forms/{form_id}/responders")
    def add_responders(form_id: int, body: dict, x_caller: str | None = Header(default=None)) -> dict[str, Any]:
        caller = _require_caller(x_caller)
        try:
            addresses = parse_addresses(body)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        added = registry.add_responders(form_id, addresses, caller=caller)
        return {"ok": True, "formId": form_id, "added": added, "responders": addresses}

    @app.get("/api/forms/{form_id}/responders")
    def list_responders(form_id: int) -> list[str]:
        return registry.get_responders(form_id)

    @app.get("/api/forms/{form_id}/responders/{address:path}")
    def is_allowed_responder(form_id: int, address: str) -> dict[str, Any]:
        return {"formId": form_id, "address": address, "allowed": registry.is_allowed_responder(form_id, address)}

    @app.post("/api/forms/{form_id}/questions/{question_index}/responses")
    def submit_response(
        form_id: int,
        question_index: int,
        body: dict,
        x_caller: str | None = Header(default=None),
    ) -> dict[str, Any]:
        caller = _require_caller(x_caller)
        try:
            raw = parse_response_input(body)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        entry = registry.submit_response(form_id, question_index, raw, caller=caller)
        return {"ok": True, "formId": form_id, "questionIndex": question_index, **entry_to_item(entry)}

    @app.get("/api/forms/{form_id}/questions/{question_index}/responses")
    def get_responses(form_id: int, question_index: int, responder: str | None = None) -> dict[str, Any]:
        if responder is not None and responder.strip():
            history = registry.get_responder_history(form_id, question_index, responder)
        else:
            history = registry.get_response_history(form_id, question_index)
        return {"formId": form_id, "questionIndex": question_index, **history_to_item(history)}

    @app.get("/api/forms/{form_id}/questions/{question_index}/entries")
    def get_entries(form_id: int, question_index: int) -> list[dict[str, Any]]:
        return [entry_to_item(e) for e in registry.get_response_entries(form_id, question_index)]
