from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


@dataclass(frozen=True, slots=True)
class ServerSettings:
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000
    # Bounded retries when a freshly drawn room code is already taken.
    room_code_attempts: int = 10


def project_root() -> Path:
    # tictactoe_live/config.py -> tictactoe_live/ -> project root
    return Path(__file__).resolve().parents[1]


def load_env_file(path: Path | None = None) -> None:
    """Load a local `.env` if present. Real environment variables win."""

    env_path = path or project_root() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)


def settings_from_env() -> ServerSettings:
    attempts = int(os.environ.get("TICTACTOE_ROOM_CODE_ATTEMPTS", "10"))
    if attempts < 1:
        raise ValueError("TICTACTOE_ROOM_CODE_ATTEMPTS must be at least 1")

    return ServerSettings(
        log_level=os.environ.get("TICTACTOE_LOG_LEVEL", "INFO").upper(),
        host=os.environ.get("TICTACTOE_HOST", "127.0.0.1"),
        port=int(os.environ.get("TICTACTOE_PORT", "8000")),
        room_code_attempts=attempts,
    )
