from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

DEFAULT_OWNER = "0x0000000000000000000000000000000000000001"


@dataclass(frozen=True)
class Settings:
    """Process-level configuration.

    Values come from the environment (a local `.env` file is honored). CLI
    flags override individual fields.
    """

    owner: str = DEFAULT_OWNER
    url: str = ""
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "info"


def load_settings(*, dotenv: bool = True) -> Settings:
    if dotenv:
        load_dotenv()

    port_raw = os.getenv("FORMLEDGER_PORT", "8000")
    try:
        port = int(port_raw)
    except ValueError as ex:
        raise ValueError(f"FORMLEDGER_PORT must be an integer, got {port_raw!r}") from ex

    return Settings(
        owner=os.getenv("FORMLEDGER_OWNER", DEFAULT_OWNER).strip() or DEFAULT_OWNER,
        url=os.getenv("FORMLEDGER_URL", "").strip(),
        host=os.getenv("FORMLEDGER_HOST", "127.0.0.1").strip() or "127.0.0.1",
        port=port,
        log_level=os.getenv("FORMLEDGER_LOG_LEVEL", "info").strip().lower() or "info",
    )


def configure_logging(level: str = "info") -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)
