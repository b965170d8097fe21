"""FastAPI application entrypoint."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from app.errors import ApiError
from app.repositories.memory import InMemoryStore
from app.routes import generation_router, sessions_router


def create_app(store: InMemoryStore | None = None) -> FastAPI:
    app = FastAPI(title="Monumento API", version="1.0.0")
    app.state.store = store if store is not None else InMemoryStore()

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.payload.model_dump(mode="json", exclude_none=True),
        )

    api_prefix = "/api/v1"
    app.include_router(sessions_router, prefix=api_prefix)
    app.include_router(generation_router, prefix=api_prefix)

    return app


app = create_app()
