from __future__ import annotations

import os

import uvicorn

from backend.app.main import app


def run() -> None:
    """Serve Kokoro on ``HOST``/``PORT``.

    uvicorn's own log config is disabled so its records reach the JSON handlers.
    """

    uvicorn.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_config=None,
    )


if __name__ == "__main__":
    run()
