"""Runtime configuration."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Attributes
    ----------
    app_name : str
        Human-readable application name.
    database_url : str
        SQLAlchemy database URL for the embedded store.
    sql_echo : bool
        Whether SQLAlchemy echoes emitted SQL.
    log_level : str
        Root logging level name.
    log_file : Path | None
        Optional file that receives log output in addition to the console.
    """

    model_config = SettingsConfigDict(env_prefix="OPS_INVENTORY_", extra="ignore")

    app_name: str = "Ops Inventory"
    database_url: str = "sqlite+aiosqlite:///./ops_inventory.db"
    sql_echo: bool = False
    log_level: str = "INFO"
    log_file: Path | None = Field(default=None)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings.

    Returns
    -------
    Settings
        Cached settings instance.
    """
    return Settings()
