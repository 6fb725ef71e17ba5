from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite+pysqlite:///./runconquer.db"
    # Calendar basis for streak day boundaries and "today" stats.
    # Examples: "America/New_York", "Europe/London", or "local" to use system tz.
    timezone: str = "local"
    log_level: str = "INFO"

    # Session tokens issued after e-mail verification
    secret_key: str = "dev-secret-change-me"
    session_token_ttl_hours: int = 24
    verification_code_ttl_minutes: int = 10

    default_territory_color: str = "#E8952E"

    # Allow empty env strings to fall back to defaults
    @field_validator("timezone", mode="before")
    @classmethod
    def _empty_to_local(cls, v):
        if v in ("", None, "null", "None"):
            return "local"
        return v

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
