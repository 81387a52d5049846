from __future__ import annotations

from .client import FormsClient

__all__ = ["FormsClient"]
