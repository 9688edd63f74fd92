from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, cast
from urllib.parse import urlparse

import structlog
from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase

from recipebox.config import Config
from recipebox.core.db import StoreHandle, open_store

logger = structlog.get_logger(__name__)


class Service:
    """Base class for services; database access goes through the core's StoreHandle."""

    collection_name: str | None = None

    def __init__(self) -> None:
        self._core: Core | None = None

    async def on_start(self) -> None:
        """Initialize service once the store is reachable."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""

    @property
    def core(self) -> Core:
        """Get the core application context."""
        if self._core is None:
            raise RuntimeError("Core not set for service")
        return self._core

    def set_core(self, core: Core) -> None:
        """Set the core application context."""
        self._core = core

    @property
    def collection(self) -> AsyncCollection[dict[str, Any]]:
        """Service collection; raises UnavailableError while the store is down."""
        if self.collection_name is None:
            raise RuntimeError(f"{type(self).__name__} has no collection")
        return self.core.store.collection(self.collection_name)


class Services:
    """Service registry that automatically discovers and initializes services."""

    from recipebox.core.modules.auth.service import AuthService  # noqa: PLC0415
    from recipebox.core.modules.counter.service import CounterService  # noqa: PLC0415
    from recipebox.core.modules.recipe.service import RecipeService  # noqa: PLC0415
    from recipebox.core.modules.user.service import UserService  # noqa: PLC0415

    counter: CounterService
    user: UserService
    auth: AuthService
    recipe: RecipeService

    def __init__(self) -> None:
        """Initialize all services automatically using service configuration."""
        self._services: list[Service] = []

        # (attribute_name, module_path, class_name); counter must start before the stores that draw ids from it
        service_configs = [
            ("counter", "recipebox.core.modules.counter.service", "CounterService"),
            ("user", "recipebox.core.modules.user.service", "UserService"),
            ("auth", "recipebox.core.modules.auth.service", "AuthService"),
            ("recipe", "recipebox.core.modules.recipe.service", "RecipeService"),
        ]

        for attr_name, module_path, class_name in service_configs:
            module = importlib.import_module(module_path)
            service_class = cast(type[Service], getattr(module, class_name))
            service_instance = service_class()
            setattr(self, attr_name, service_instance)
            self._services.append(service_instance)

    def set_core(self, core: Core) -> None:
        """Set core reference for all services."""
        for service in self._services:
            service.set_core(core)

    async def start_all(self) -> None:
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        for service in self._services:
            await service.on_stop()


class Core:
    """Container providing config, the store handle, and all service instances."""

    config: Config
    mongo_client: AsyncMongoClient[dict[str, Any]] | None
    database: AsyncDatabase[dict[str, Any]]
    store: StoreHandle
    services: Services

    def __init__(self, config: Config, database: AsyncDatabase[dict[str, Any]] | None = None) -> None:
        """Initialize core with config and services; the store is opened in on_start.

        Passing ``database`` skips client creation (used by tests and embedding callers).
        """
        self.config = config
        if database is None:
            self.mongo_client = AsyncMongoClient(
                config.database_url, tz_aware=True, serverSelectionTimeoutMS=config.store_timeout_ms
            )
            database = self.mongo_client.get_database(urlparse(config.database_url).path[1:] or "recipebox")
        else:
            self.mongo_client = None
        self.database = database
        self.store = StoreHandle.disconnected("Store not opened yet")
        self.services = Services()
        self.services.set_core(self)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        """Open the store; services start only if it answered the ping."""
        self.store = await open_store(self.database)
        if not self.store.ready:
            logger.warning("starting_in_limited_mode", reason=self.store.error)
            return
        await self.services.start_all()

    async def on_stop(self) -> None:
        """Stop services and close MongoDB connection on shutdown."""
        await self.services.stop_all()
        if self.mongo_client is not None:
            await self.mongo_client.aclose()
