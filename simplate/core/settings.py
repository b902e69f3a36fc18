from __future__ import annotations

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SIMPLATE_", case_sensitive=False)

    output_dir: Path | None = None
    file_mode: int = 0o644
    dir_mode: int = 0o755
    strict_undefined: bool = True
    file_directives: bool = True

    @field_validator("file_mode", "dir_mode", mode="before")
    @classmethod
    def _parse_octal(cls, value: object) -> object:
        # Environment values are octal strings such as "0644".
        if isinstance(value, str):
            return int(value, 8)
        return value
