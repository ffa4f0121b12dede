import json
from pathlib import Path
from typing import Annotated, NamedTuple, Optional

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "CRM Chat Relay"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    # OpenAI
    OPENAI_API_KEY: SecretStr
    OPENAI_MODEL: str = "gpt-3.5-turbo"
    OPENAI_MAX_TOKENS: int = Field(default=150, gt=0)
    OPENAI_TEMPERATURE: float = Field(default=0.7, ge=0.0, le=2.0)
    OPENAI_TIMEOUT: float = Field(default=30.0, gt=0)

    # Replaces the built-in CRM navigation prompt when set
    SYSTEM_PROMPT_FILE: Optional[Path] = None

    # CORS Configuration
    ALLOWED_ORIGINS: Annotated[list[str], NoDecode] = [
        "http://localhost:3000",
        "https://iysinfo.com",
    ]

    # Rate limiting (per client address, /api/* only)
    RATE_LIMIT_WINDOW_SECONDS: int = Field(default=15 * 60, gt=0)
    RATE_LIMIT_MAX_REQUESTS: int = Field(default=100, gt=0)

    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, extra="ignore")

    @field_validator("OPENAI_API_KEY")
    @classmethod
    def _api_key_not_blank(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value().strip():
            raise ValueError("OPENAI_API_KEY must not be empty")
        return v

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def _split_origins(cls, v):
        # Accepts a JSON list or a comma-separated string
        if isinstance(v, str):
            text = v.strip()
            if text.startswith("["):
                return json.loads(text)
            return [item.strip() for item in text.split(",") if item.strip()]
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def _upper_log_level(cls, v: str) -> str:
        return v.upper()

    @field_validator("SYSTEM_PROMPT_FILE")
    @classmethod
    def _prompt_file_exists(cls, v: Optional[Path]) -> Optional[Path]:
        if v is not None and not v.is_file():
            raise ValueError(f"SYSTEM_PROMPT_FILE does not exist: {v}")
        return v


class SettingsResult(NamedTuple):
    settings: Optional[Settings]
    error: Optional[str]


def load_settings(**overrides) -> SettingsResult:
    """Build Settings from the environment without raising.

    Returns ``(settings, None)`` on success and ``(None, message)`` when the
    configuration is unusable, so the entry point can report and exit before
    the server binds a socket.
    """
    try:
        return SettingsResult(Settings(**overrides), None)
    except ValidationError as e:
        problems = []
        for err in e.errors():
            field = ".".join(str(part) for part in err["loc"]) or "settings"
            if err["type"] == "missing":
                problems.append(f"{field} is required")
            else:
                problems.append(f"{field}: {err['msg']}")
        return SettingsResult(None, "Invalid configuration: " + "; ".join(problems))
