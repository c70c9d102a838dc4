from __future__ import annotations

import logging


def setup_logging(level: str = "INFO") -> None:
    """Configure console logging for the service.

    Safe to call multiple times (won't double-add handlers).
    """

    root = logging.getLogger()
    if root.handlers:
        return

    resolved = logging.getLevelName((level or "INFO").upper().strip())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    console = logging.StreamHandler()
    console.setLevel(resolved)
    console.setFormatter(formatter)

    logging.basicConfig(level=resolved, handlers=[console])

    logging.getLogger("uvicorn").setLevel(resolved)
    logging.getLogger("uvicorn.error").setLevel(resolved)
    logging.getLogger("uvicorn.access").setLevel(resolved)
