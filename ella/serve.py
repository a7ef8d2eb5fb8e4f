"""Launch script that starts the API under Uvicorn."""

from __future__ import annotations

import importlib
import logging
import os

import uvicorn

logger = logging.getLogger("ella.launcher")


def main() -> None:
    app_module = importlib.import_module("ella.main")
    app = app_module.app  # type: ignore[attr-defined]

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "8000"))
    logger.debug("Starting %s on %s:%s", app.title, host, port)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
