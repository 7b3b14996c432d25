"""Application configuration loading helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import BaseModel, Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseModel):
    url: str
    pool_size: int = 10
    echo: bool = False

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")


class SecuritySettings(BaseModel):
    jwt_secret: str
    jwt_algorithm: str = "HS256"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="Chemical Inventory", alias="APP_NAME")
    environment: Literal["development", "staging", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_serialize: bool = Field(default=False, alias="LOG_SERIALIZE")

    database_url: str = Field(default="sqlite:///./chemical_inventory.db", alias="DATABASE_URL")
    database_pool_size: int = Field(default=10, alias="DATABASE_POOL_SIZE")
    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")

    jwt_secret: str = Field(default="dev-secret", alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")

    _database: DatabaseSettings = PrivateAttr()
    _security: SecuritySettings = PrivateAttr()

    def model_post_init(self, __context: Any) -> None:  # pragma: no cover - simple data wiring
        object.__setattr__(
            self,
            "_database",
            DatabaseSettings(
                url=self.database_url,
                pool_size=self.database_pool_size,
                echo=self.database_echo,
            ),
        )
        object.__setattr__(
            self,
            "_security",
            SecuritySettings(
                jwt_secret=self.jwt_secret,
                jwt_algorithm=self.jwt_algorithm,
            ),
        )

    @property
    def database(self) -> DatabaseSettings:
        return self._database

    @property
    def security(self) -> SecuritySettings:
        return self._security


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]


__all__ = ["Settings", "get_settings", "DatabaseSettings", "SecuritySettings"]
