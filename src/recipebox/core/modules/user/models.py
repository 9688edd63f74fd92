from datetime import datetime

from pydantic import BaseModel, Field

from recipebox.core.db import MongoModel
from recipebox.utils import now


class User(MongoModel):
    """User domain model with credentials.

    Indexed on username - unique.
    """

    username: str
    password_hash: str  # bcrypt hash
    created_at: datetime = Field(default_factory=now)


class Identity(BaseModel):
    """Verified caller identity (API representation of a user)."""

    id: int = Field(..., description="User ID")
    username: str = Field(..., description="Username")

    @classmethod
    def from_domain(cls, user: User) -> "Identity":
        """Create view model from domain model."""
        return cls(id=user.id, username=user.username)
