from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Literal
from .adapters.base import WireFormat

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CLOUDEVENTS_", env_file=".env", extra="ignore")

    LOG_JSON: bool = True
    LOG_LEVEL: str = "INFO"
    # Codec backend selection; only the in-process codec ships with the library
    CODEC_ADAPTER: Literal["memory"] = "memory"
    DEFAULT_WIRE_FORMAT: WireFormat = WireFormat.GUESS
    # CloudEvents recommends extension names of at most 20 characters
    EXTENSION_NAME_MAX_LENGTH: int = 20

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
