from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import AliasChoices, BaseModel, Field
from pymongo.errors import ConnectionFailure

from recipebox.app import App
from recipebox.config import Config
from recipebox.errors import UserError
from recipebox.web.error_handlers import (
    general_exception_handler,
    request_validation_handler,
    store_error_handler,
    user_error_handler,
)
from recipebox.web.openapi import set_custom_openapi
from recipebox.web.routers import anonymous_recipes_router, auth_router, recipes_router


class HealthResponse(BaseModel):
    status: str = "ok"
    db_ready: bool = Field(..., validation_alias=AliasChoices("db_ready", "dbReady"), serialization_alias="dbReady")


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        async with app_instance.lifespan():
            yield

    app = FastAPI(
        title="RecipeBox API",
        lifespan=lifespan,
        openapi_tags=[],  # Tags will be added by custom OpenAPI function
    )
    # Set before startup so dependencies resolve even if lifespan is skipped
    app.state.app = app_instance
    app.state.config = config

    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Always 200; readiness is reported in the body
    @app.get("/health")
    async def health_check() -> HealthResponse:
        return HealthResponse(db_ready=app_instance.is_store_ready())

    app.include_router(auth_router, prefix="/api")
    app.include_router(recipes_router, prefix="/api")
    if config.allow_anonymous_recipes:
        app.include_router(anonymous_recipes_router, prefix="/api")

    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ConnectionFailure, store_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app)

    return app
