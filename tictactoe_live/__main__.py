from __future__ import annotations

import uvicorn

from tictactoe_live.config import load_env_file, settings_from_env


def main() -> None:
    load_env_file()
    settings = settings_from_env()
    uvicorn.run("tictactoe_live.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
