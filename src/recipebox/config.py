from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 3002
    debug: bool = False
    jwt_secret: str
    token_ttl_days: int = 7
    bcrypt_rounds: int = 10
    cors_origins: list[str] = []
    # Legacy clients post recipes with a self-asserted ownerId; off unless explicitly enabled
    allow_anonymous_recipes: bool = False
    store_timeout_ms: int = 5000  # serverSelectionTimeoutMS for the startup ping

    model_config = {
        "env_file": [".env"],
        "env_prefix": "RECIPEBOX_",
        "extra": "ignore",
    }
