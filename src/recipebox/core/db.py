from dataclasses import dataclass
from typing import Any, Self

import structlog
from pydantic import BaseModel, ConfigDict, Field
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.cursor import AsyncCursor
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from recipebox.errors import UnavailableError

logger = structlog.get_logger(__name__)


class MongoModel(BaseModel):
    id: int = Field(alias="_id", serialization_alias="id")

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        json_schema_serialization_defaults_required=True,
    )

    def to_mongo(self) -> dict[str, Any]:
        """Convert the model to a dictionary for MongoDB storage with _id field."""
        data = self.model_dump()
        data["_id"] = data.pop("id")
        return data

    @classmethod
    async def list_cursor(cls, cursor: AsyncCursor[dict[str, Any]]) -> list[Self]:
        """Iterate over an AsyncCursor and return a list of model instances."""
        return [cls.model_validate(item) async for item in cursor]


@dataclass(frozen=True)
class StoreHandle:
    """Result of opening the store: a reachable database or the reason it is not."""

    database: AsyncDatabase[dict[str, Any]] | None
    error: str | None = None

    @property
    def ready(self) -> bool:
        return self.database is not None

    @classmethod
    def disconnected(cls, reason: str) -> "StoreHandle":
        return cls(database=None, error=reason)

    def ensure_ready(self) -> AsyncDatabase[dict[str, Any]]:
        """Return the database or raise UnavailableError."""
        if self.database is None:
            raise UnavailableError
        return self.database

    def collection(self, name: str) -> AsyncCollection[dict[str, Any]]:
        return self.ensure_ready().get_collection(name)


async def open_store(database: AsyncDatabase[dict[str, Any]]) -> StoreHandle:
    """Ping the database and wrap the outcome in a StoreHandle."""
    try:
        await database.command("ping")
    except PyMongoError as e:
        logger.warning("store_unavailable", error=str(e))
        return StoreHandle.disconnected(str(e))
    logger.info("store_ready", database=database.name)
    return StoreHandle(database=database)
