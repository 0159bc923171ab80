"""Runtime configuration loaded from the environment and an optional .env file."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


DEFAULT_STATE_FILE = "interview_state.json"
DEFAULT_TICK_SECONDS = 1.0

# Optional .env beside the packages
DEFAULT_ENV_PATH = Path(__file__).parent.parent / ".env"


@dataclass(frozen=True)
class RuntimeConfig:
    """Runtime config for one local interview console."""

    state_file: Path
    catalog_path: Optional[str]
    tick_seconds: float
    log_level: str


def load_runtime_config(env_file: Optional[Path] = None) -> RuntimeConfig:
    """
    Load runtime config from environment with strict validation.

    Variables from ``env_file`` (default: ``python/.env``)
    never override variables already set in the process environment.

    Raises:
        RuntimeError: If a variable holds an invalid value.
    """
    load_dotenv(env_file or DEFAULT_ENV_PATH)

    state_raw = (os.environ.get("INTERVIEW_STATE_FILE", DEFAULT_STATE_FILE) or "").strip()
    if not state_raw:
        raise RuntimeError("INTERVIEW_STATE_FILE resolved to empty value.")

    catalog_path = (os.environ.get("INTERVIEW_CATALOG_PATH") or "").strip() or None

    tick_raw = (os.environ.get("INTERVIEW_TICK_SECONDS", str(DEFAULT_TICK_SECONDS)) or "").strip()
    try:
        tick_seconds = float(tick_raw)
    except ValueError as exc:
        raise RuntimeError(f"INTERVIEW_TICK_SECONDS must be a number. Got: {tick_raw}") from exc
    if tick_seconds <= 0:
        raise RuntimeError(f"INTERVIEW_TICK_SECONDS must be positive. Got: {tick_seconds}.")

    log_level = (os.environ.get("LOG_LEVEL", "INFO") or "").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise RuntimeError(f"LOG_LEVEL is not a valid logging level. Got: {log_level}")

    return RuntimeConfig(
        state_file=Path(state_raw).expanduser(),
        catalog_path=catalog_path,
        tick_seconds=tick_seconds,
        log_level=log_level,
    )
