from __future__ import annotations

from .forms import mount_forms_api

__all__ = ["mount_forms_api"]
