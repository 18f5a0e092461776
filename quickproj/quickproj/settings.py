from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="QUICKPROJ_", case_sensitive=False)

    home: Path = Field(default_factory=lambda: Path.home() / ".quickproj")
    templates_dir: Path | None = None
    config_names: list[str] = ["config.json", "config.yaml", "config.yml"]
    hook_shell: str = "/bin/sh"

    @property
    def resolved_templates_dir(self) -> Path:
        return self.templates_dir or self.home / "templates"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
