from __future__ import annotations

import contextlib
import logging
import os
import socket
import threading
import time
from dataclasses import dataclass, field
from typing import Any

import uvicorn

from ..config import load_settings
from ..core.registry import FormRegistry
from ..sdk.client import FormsClient
from .app import create_app


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormsServer:
    host: str
    port: int
    url: str
    registry: FormRegistry
    handle: Any = field(default=None, repr=False, compare=False)

    def as_client(self, caller: str | None = None) -> FormsClient:
        """Return an HTTP client bound to this server (defaults to acting as the owner)."""
        return FormsClient(self.url.rstrip("/"), caller=caller if caller is not None else self.registry.owner)

    def stop(self, *, timeout_s: float = 5.0) -> None:
        if self.handle is None:
            return
        server, thread = self.handle
        server.should_exit = True
        thread.join(timeout=timeout_s)


def _find_free_port(host: str) -> int:
    with contextlib.closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind((host, 0))
        return int(s.getsockname()[1])


def _normalize_base_url(url: str) -> str:
    url = url.strip()
    if not url:
        return ""
    # Allow passing just host:port.
    if "://" not in url:
        url = "http://" + url
    return url.rstrip("/")


def _is_server_alive(base_url: str, *, timeout_s: float = 0.2) -> bool:
    """Best-effort probe to determine if a formledger server is reachable."""

    import httpx

    try:
        with httpx.Client(base_url=base_url, timeout=timeout_s) as client:
            r = client.get("/healthz")
            if r.status_code != 200:
                return False
            data = r.json()
            return bool(data.get("ok"))
    except (httpx.HTTPError, ValueError):
        return False


def run(
    *,
    host: str = "127.0.0.1",
    port: int = 0,
    owner: str | None = None,
    registry: FormRegistry | None = None,
    caller: str | None = None,
    log_level: str = "info",
    access_log: bool = False,
    new_server: bool = False,
    connect_timeout_s: float = 0.2,
    startup_timeout_s: float = 5.0,
) -> FormsServer | FormsClient:
    """Serve a registry with a single Python call, or attach to a running one.

    Behavior:
    - If FORMLEDGER_URL is set, we *attach* to that server (client mode) unless
      `new_server=True`.
    - Otherwise, if `port != 0` and a server is already reachable at http://{host}:{port},
      we attach to it unless `new_server=True`.
    - Otherwise we build a registry owned by `owner` (default: FORMLEDGER_OWNER),
      serve it with uvicorn in a daemon thread and return a `FormsServer`.

    `caller` is the identity an attached client acts as.
    """

    settings = load_settings()
    env_url = _normalize_base_url(os.getenv("FORMLEDGER_URL", ""))

    # 1) Try attaching to an explicitly provided server.
    if env_url and not new_server:
        if _is_server_alive(env_url, timeout_s=connect_timeout_s):
            logger.info("attached to %s", env_url)
            return FormsClient(env_url, caller=caller)

    # 2) Try attaching to host/port if they are explicitly chosen.
    if port != 0 and not new_server:
        default_url = _normalize_base_url(f"http://{host}:{port}")
        if _is_server_alive(default_url, timeout_s=connect_timeout_s):
            logger.info("attached to %s", default_url)
            return FormsClient(default_url, caller=caller)

    # 3) Start a fresh server.
    if port == 0:
        port = _find_free_port(host)

    if registry is None:
        registry = FormRegistry(owner or settings.owner)
    app = create_app(registry)

    config = uvicorn.Config(app, host=host, port=port, log_level=log_level, access_log=access_log)
    server = uvicorn.Server(config)

    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    deadline = time.monotonic() + startup_timeout_s
    while not server.started and thread.is_alive() and time.monotonic() < deadline:
        time.sleep(0.01)
    if not server.started:
        raise RuntimeError(f"formledger server failed to start on {host}:{port}")

    url = f"http://{host}:{port}/"
    logger.info("serving registry owned by %s at %s", registry.owner, url)
    return FormsServer(host=host, port=port, url=url, registry=registry, handle=(server, thread))
