"""Uvicorn launcher with environment-driven host, port and worker settings."""

import os

import uvicorn


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name, str(default)).strip()
    try:
        return max(minimum, int(raw))
    except ValueError:
        return default


def main() -> None:
    uvicorn.run(
        "name_fortune.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=_env_int("PORT", 8000, minimum=1),
        workers=_env_int("WEB_CONCURRENCY", 1, minimum=1),
        timeout_keep_alive=_env_int("UVICORN_TIMEOUT_KEEP_ALIVE", 5, minimum=1),
        log_level=os.getenv("UVICORN_LOG_LEVEL", "info").strip() or "info",
    )


if __name__ == "__main__":
    main()
