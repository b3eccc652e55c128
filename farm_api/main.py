from __future__ import annotations

# IMPORTANT:
# Correct command:
#   python -m uvicorn farm_api.main:create_app --factory --reload

import logging
import logging.config
from typing import Optional

from fastapi import APIRouter, FastAPI
from fastapi.routing import APIRoute
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .database import Base, make_engine, make_session_factory
from .error_logger import ErrorLogger
from .errors import register_exception_handlers
from .routers import animals, expenses, logs, records, tasks

logger = logging.getLogger(__name__)


def logging_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(name)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "default": {
                "class": "rich.logging.RichHandler",
                "formatter": "default",
                "level": "DEBUG",
                "rich_tracebacks": True,
                "show_time": True,
                "show_path": False,
                "log_time_format": "%Y-%m-%d %H:%M:%S",
            },
        },
        "loggers": {
            "farm_api": {
                "handlers": ["default"],
                "level": level.upper(),
                "propagate": False,
            },
        },
    }


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.config.dictConfig(logging_config(settings.log_level))

    engine = make_engine(settings)
    Base.metadata.create_all(bind=engine)
    session_factory = make_session_factory(engine)

    app = FastAPI(title="Farm Management API")
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.error_logger = ErrorLogger(session_factory)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    logger.info("Allowing origins: %s", ", ".join(settings.cors_allowed_origins))

    register_exception_handlers(app)

    # -----------------------------
    # API ROUTERS
    # -----------------------------
    api = APIRouter(prefix=settings.api_prefix)

    @api.get("/ping")
    def ping():
        return {"message": settings.ping_message}

    api.include_router(expenses.router)
    api.include_router(tasks.router)
    api.include_router(animals.router)
    api.include_router(records.router)
    api.include_router(logs.router)
    app.include_router(api)

    @app.get("/")
    def root():
        return {"status": "ok", "api": settings.api_prefix}

    for route in app.routes:
        if isinstance(route, APIRoute):
            logger.debug("Registered: %s %s", ",".join(sorted(route.methods)), route.path)

    return app
