"""Settings for the Hooki backend with observability configuration."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_field(default, *env_names: str):
	if env_names:
		alias = AliasChoices(*env_names) if len(env_names) > 1 else env_names[0]
		return Field(default=default, validation_alias=alias)
	return Field(default=default)


class Settings(BaseSettings):
	environment: str = _env_field("production", "ENV", "APP_ENV", "ENVIRONMENT")
	service_name: str = _env_field("hooki-api", "SERVICE_NAME")
	git_commit: str = _env_field("unknown", "GIT_COMMIT", "COMMIT_SHA", "SOURCE_VERSION")

	# "memory" keeps everything in process and is only valid for a single instance.
	store_backend: Literal["memory", "redis"] = _env_field("memory", "STORE_BACKEND")
	redis_url: str = _env_field("redis://localhost:6379/0", "REDIS_URL")
	store_key_prefix: str = _env_field("hooki", "STORE_KEY_PREFIX")

	# Radius defaults are caller policy, the geo filter itself has none.
	hooks_default_radius_m: float = _env_field(1000.0, "HOOKS_DEFAULT_RADIUS_M")
	users_default_radius_m: float = _env_field(500.0, "USERS_DEFAULT_RADIUS_M")
	chat_max_message_length: int = _env_field(4000, "CHAT_MAX_MESSAGE_LENGTH")

	obs_enabled: bool = _env_field(True, "OBS_ENABLED")
	obs_log_level: str = _env_field("INFO", "LOG_LEVEL")
	obs_log_sampling_rate_info: float = _env_field(1.0, "LOG_SAMPLING_RATE_INFO")

	cors_allow_origins: Any = _env_field((), "CORS_ALLOW_ORIGINS")

	def is_prod(self) -> bool:
		return self.environment.lower() in ("prod", "production", "live")

	def is_dev(self) -> bool:
		return self.environment.lower() in ("dev", "development")

	model_config = SettingsConfigDict(
		env_prefix="",
		env_file=".env",
		case_sensitive=False,
		extra="ignore",
	)

	@field_validator("cors_allow_origins", mode="before")
	def _split_cors(cls, value):  # type: ignore[override]
		if value in (None, ""):
			return ()
		if isinstance(value, str):
			return tuple(part.strip() for part in value.split(",") if part.strip())
		if isinstance(value, (list, tuple, set)):
			return tuple(str(item).strip() for item in value if str(item).strip())
		return ()

	@field_validator("obs_log_level", mode="after")
	def _normalise_level(cls, value: str) -> str:  # type: ignore[override]
		return value.upper()


settings = Settings()

