"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from code_deps import __version__
from code_deps.config import ProjectConfig, load_config
from code_deps.web.api import router


def create_app(config: ProjectConfig | None = None) -> FastAPI:
    app = FastAPI(title="code-deps", version=__version__)
    app.state.config = config or load_config()
    app.include_router(router)
    return app
