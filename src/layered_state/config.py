"""Environment-driven settings for containers and logging."""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from layered_state.composer import InjectionPolicy


class LayeredStateSettings(BaseSettings):
    """Defaults applied to containers created without an explicit policy."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
    )

    injection_policy: InjectionPolicy = Field(
        default=InjectionPolicy.ALWAYS_APPEND, alias="LAYERED_STATE_INJECTION_POLICY"
    )
    log_level: str = Field(default="INFO", alias="LAYERED_STATE_LOG_LEVEL")

    @field_validator("injection_policy", mode="before")
    @classmethod
    def _normalize_policy(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower().replace("-", "_")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value


def load_settings() -> LayeredStateSettings:
    return LayeredStateSettings()


__all__ = ["LayeredStateSettings", "load_settings"]
