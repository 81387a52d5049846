from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..core.errors import (
    FormNotFound,
    InvalidQuestionIndex,
    InvalidValueKind,
    NotAllowedResponder,
    NotOwner,
    RegistryError,
)
from ..core.registry import FormRegistry
from .parsing import parse_int
from .routes.forms import mount_forms_api
from .serializers import event_to_item


_STATUS_BY_ERROR: dict[type[RegistryError], int] = {
    NotOwner: 403,
    NotAllowedResponder: 403,
    FormNotFound: 404,
    InvalidQuestionIndex: 404,
    InvalidValueKind: 400,
}


def status_for_error(exc: RegistryError) -> int:
    for cls, status in _STATUS_BY_ERROR.items():
        if isinstance(exc, cls):
            return status
    return 400


def create_api_app(registry: FormRegistry) -> FastAPI:
    app = FastAPI(title="formledger", version="0.1.0")
    app.state.registry = registry

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RegistryError)
    async def _registry_error(request: Request, exc: RegistryError) -> JSONResponse:  # noqa: ARG001
        return JSONResponse(status_code=status_for_error(exc), content={"detail": str(exc), "error": exc.code})

    mount_forms_api(app, registry)

    @app.get("/healthz")
    def healthz() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/api/owner")
    def owner() -> dict[str, str]:
        return {"owner": registry.owner}

    @app.get("/api/events/cursor")
    def events_cursor() -> dict[str, int]:
        return {"revision": registry.revision(), "latestSeq": registry.events.latest_seq()}

    @app.get("/api/events")
    def events(since: int = 0, name: str | None = None) -> dict[str, Any]:
        # Polling endpoint over the notification sink.
        try:
            since_v = parse_int(since, field="since", minimum=0)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {
            "revision": registry.revision(),
            "latestSeq": registry.events.latest_seq(),
            "events": [event_to_item(e) for e in registry.events.since(since_v, name=name or None)],
        }

    return app


__all__ = ["create_api_app", "status_for_error"]
