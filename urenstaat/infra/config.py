"""
Configuration management using Pydantic Settings.

Architecture Decision: Why pydantic-settings?
- Type-safe configuration with validation
- Supports multiple sources (env vars, .env file, YAML, defaults)
- Easy to test with different configurations

Settings are read once at start-up and passed explicitly to the services
that need them; nothing below reads the environment on its own.
"""

from pathlib import Path
from typing import List, Optional, Tuple, Type

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from urenstaat.domain.errors import ConfigurationError
from urenstaat.infra.db import default_db_url

CONFIG_FILE = Path("config/settings.yaml")


class Settings(BaseSettings):
    """
    Application settings with multiple sources:
    1. Default values (hardcoded)
    2. YAML config file (config/settings.yaml)
    3. .env file
    4. Environment variables (highest priority)
    """
    model_config = SettingsConfigDict(
        env_prefix='URENSTAAT_',
        env_file='.env',
        env_file_encoding='utf-8',
        yaml_file=CONFIG_FILE,
        extra='ignore',
    )

    # Employee identity, blank in the export when absent
    employee_name: str = ""
    employee_title: str = ""
    employee_phone: str = ""
    client_name: str = ""
    company_address: List[str] = Field(default_factory=list)

    # Paths
    output_dir: Path
    database_url: Optional[str] = None
    logo_path: Path = Path("logo.jpg")
    signature_path: Path = Path("signature.png")

    # Ledger rules
    max_daily_hours: float = Field(default=24.0, gt=0, description="Soft maximum of hours per entry")

    # Export behaviour
    strict_assets: bool = Field(default=False, description="Fail the export when an image is unreadable")

    @field_validator("output_dir", mode="before")
    @classmethod
    def _require_output_dir(cls, value):
        if value is None or not str(value).strip():
            raise ValueError("output directory must not be blank")
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    def get_db_url(self) -> str:
        """Get database URL, creating default if not set"""
        if self.database_url:
            return self.database_url
        return default_db_url()


def load_settings(**overrides) -> Settings:
    """
    Build the settings, translating validation failures into ConfigurationError.

    Raises:
        ConfigurationError: a required setting is absent or a value is invalid
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        error = e.errors()[0]
        setting = ".".join(str(part) for part in error["loc"]) or "settings"
        if error["type"] == "missing":
            reason = f"required, set URENSTAAT_{setting.upper()}"
        else:
            reason = error["msg"]
        raise ConfigurationError(setting, reason) from e
