from __future__ import annotations

from fastapi import FastAPI

from ..api import create_api_app
from ..config import load_settings
from ..core.registry import FormRegistry


def create_app(registry: FormRegistry | None = None) -> FastAPI:
    """Create the API app around `registry`.

    Without an explicit registry a fresh one is built, owned by the configured
    owner identity (`FORMLEDGER_OWNER`).
    """

    if registry is None:
        registry = FormRegistry(load_settings().owner)
    return create_api_app(registry)
