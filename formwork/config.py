import os
import re
from functools import lru_cache
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file early so env vars are available for YAML interpolation
_env_file = Path(__file__).parent.parent / ".env"
load_dotenv(_env_file)

# Pattern to match $VAR_NAME environment variable references
ENV_VAR_PATTERN = re.compile(r"\$([A-Z_][A-Z0-9_]*)")


def interpolate_env_vars(value):
    """Recursively replace $VAR_NAME with os.environ values."""
    if isinstance(value, str):

        def replace(match):
            var = match.group(1)
            val = os.environ.get(var)
            if val is None:
                raise ValueError(f"Environment variable ${var} not set")
            return val

        return ENV_VAR_PATTERN.sub(replace, value)
    elif isinstance(value, dict):
        return {k: interpolate_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [interpolate_env_vars(item) for item in value]
    return value


def get_config_path() -> Path:
    """Location of app.yaml, overridable with FORMWORK_CONFIG."""
    return Path(os.environ.get("FORMWORK_CONFIG", Path.cwd() / "app.yaml"))


def load_app_config() -> dict:
    """Load and parse app.yaml with environment variable interpolation."""
    config_path = get_config_path()

    if not config_path.exists():
        raise FileNotFoundError(f"app.yaml not found at {config_path}")

    with open(config_path, "r") as f:
        config = yaml.safe_load(f) or {}

    return interpolate_env_vars(config)


class FormsConfig(BaseModel):
    """Form rendering and value binding configuration."""

    date_format: str = "%Y-%m-%d"
    datetime_format: str = "%Y-%m-%d %H:%M:%S"
    # Stored datetimes are UTC and get shifted into the user's timezone on binding
    utc_dates: bool = False
    default_timezone: str = "UTC"
    translations: dict[str, str] = {"SELECT_NULL_VALUE": "- Select -"}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FORMWORK_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    debug: bool = False

    # Forms config (loaded from app.yaml)
    forms: FormsConfig = FormsConfig()


@lru_cache
def get_settings() -> Settings:
    """Load settings from .env and app.yaml."""
    base_settings = Settings()

    try:
        app_config = load_app_config()
    except FileNotFoundError:
        return base_settings

    if "forms" in app_config:
        merged = {**base_settings.forms.model_dump(), **app_config["forms"]}
        return base_settings.model_copy(update={"forms": FormsConfig(**merged)})

    return base_settings
