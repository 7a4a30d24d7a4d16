from __future__ import annotations

import os

import uvicorn
from starlette.applications import Starlette

from bannerpost.app import build_app
from bannerpost.constants import APP_VERSION, LOGGER
from bannerpost.env import load_env, load_settings, setup_logging, validate_env


def create_app() -> Starlette:
    load_env()
    settings = load_settings()
    setup_logging(settings)
    validate_env(settings)
    LOGGER.info(
        "Starting bannerpost %s (production=%s, callback=%s)",
        APP_VERSION,
        settings.production,
        settings.callback_url,
    )
    return build_app(settings)


def main() -> None:
    host = os.getenv("APP_HOST", "127.0.0.1")
    port = int(os.getenv("APP_PORT", "8000"))
    app = create_app()
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
