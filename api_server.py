from __future__ import annotations  # FastAPI server exposing the chat and analysis endpoints

import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.bindings import bind_default_models
from api.routes import router
from config import settings


logger = logging.getLogger(__name__)

CONFIG_PATH = Path(__file__).resolve().parent / "app_config.json"


def create_app(config_path: Path | None = None) -> FastAPI:  # Build the app and bind generation routes
    path = config_path or Path(settings.APP_CONFIG_PATH)
    if not path.is_absolute() and not path.exists():
        path = CONFIG_PATH
    bind_default_models(path)

    application = FastAPI(title="Kiwi Interview API")
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.include_router(router)

    @application.get("/healthz")
    def healthz() -> dict:
        return {"status": "ok"}

    return application


app = create_app()
