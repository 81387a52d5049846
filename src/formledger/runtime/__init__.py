from __future__ import annotations

from .app import create_app
from .server import FormsServer, run

__all__ = ["create_app", "FormsServer", "run"]
