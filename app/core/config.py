# app/core/config.py
import logging
from pathlib import Path
from typing import Any, Optional, Dict, List
from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.utils import constants

logger = logging.getLogger(__name__)


class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class BoardConfig(BaseSettings):
    """
    Configuration for the LineItemBoard client.
    Values come from LINEITEMBOARD_* environment variables or the .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LINEITEMBOARD_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default=constants.APP_NAME_DEFAULT, description="Application name")
    app_version: str = Field(default=constants.VERSION, description="Application version")
    environment: Environment = Field(default=Environment.DEVELOPMENT, description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Logging
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_format: str = Field(
        default='%(asctime)s - %(levelname)s - %(name)s - [%(module)s.%(funcName)s:%(lineno)d] - %(message)s',
        description="Log format string"
    )
    log_file: Optional[str] = Field(default=None, description="Log file path")
    log_max_bytes: int = Field(default=10485760, description="Max log file size (10MB)")
    log_backup_count: int = Field(default=5, description="Number of log file backups")

    # UI
    window_width: int = Field(default=1000, ge=500, le=3840, description="Default window width")
    window_height: int = Field(default=600, ge=300, le=2160, description="Default window height")
    notification_duration_ms: int = Field(default=5000, ge=0, description="Toast auto-close delay, 0 keeps it open")

    # Remote org
    api_base_url: str = Field(default="https://login.salesforce.com", description="Base URL of the remote org")
    api_token: Optional[str] = Field(default=None, description="Bearer token sent with every request")
    api_timeout: int = Field(default=constants.DEFAULT_API_TIMEOUT_SECONDS, ge=5, le=300, description="API request timeout in seconds")
    record_base_url: str = Field(
        default="https://login.salesforce.com",
        description="Base URL used to open a product record in the browser"
    )

    # Session
    current_user_id: Optional[str] = Field(default=None, description="Identifier of the signed-in user")
    opportunity_id: Optional[str] = Field(default=None, description="Opportunity shown when none is given on the command line")
    profile_poll_interval: float = Field(
        default=60.0, ge=0.0,
        description="Seconds between profile refreshes, 0 disables polling"
    )

    @field_validator('api_base_url', 'record_base_url')
    @classmethod
    def validate_urls(cls, v):
        if not v.startswith(('http://', 'https://')):
            raise ValueError('URL must start with http:// or https://')
        return v.rstrip('/')

    @field_validator('environment', mode='before')
    @classmethod
    def validate_environment(cls, v):
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @field_validator('log_level', mode='before')
    @classmethod
    def validate_log_level(cls, v):
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @property
    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    def is_api_configured(self) -> bool:
        """Check if the remote org can be called"""
        return bool(self.api_base_url and self.api_token)

    def load_environment_overrides(self):
        """Load environment-specific overrides from .env.<environment>"""
        env_file = f".env.{self.environment.value}"
        if Path(env_file).exists():
            from dotenv import load_dotenv
            load_dotenv(env_file, override=True)
            logger.info(f"Loaded environment overrides from {env_file}")

    def validate_configuration(self) -> List[str]:
        """Validate configuration and return list of issues"""
        issues = []

        if not self.api_token:
            issues.append("LINEITEMBOARD_API_TOKEN is not set; remote calls will be rejected")
        if not self.current_user_id:
            issues.append("LINEITEMBOARD_CURRENT_USER_ID is not set; privileged actions stay hidden")
        if self.is_production and self.debug:
            issues.append("DEBUG should be False in production")

        return issues

    def export_config(self, include_secrets: bool = False) -> Dict[str, Any]:
        """Export configuration as dictionary"""
        config_dict = self.model_dump()
        if not include_secrets and config_dict.get('api_token'):
            config_dict['api_token'] = "***REDACTED***"
        return config_dict


# Global configuration instance
_config: Optional[BoardConfig] = None


def get_config() -> BoardConfig:
    """Get global configuration instance"""
    global _config
    if _config is None:
        _config = BoardConfig()
        _config.load_environment_overrides()

        issues = _config.validate_configuration()
        if issues:
            logger.warning(f"Configuration issues found: {issues}")

    return _config


def reset_config():
    """Reset global configuration (mainly for testing)"""
    global _config
    _config = None


class ConfigOverride:
    """Context manager for temporarily overriding configuration"""

    def __init__(self, **overrides):
        self.overrides = overrides
        self.original_config = None

    def __enter__(self):
        global _config
        self.original_config = _config
        if _config is None:
            _config = BoardConfig(**self.overrides)
        else:
            config_dict = _config.model_dump()
            config_dict.update(self.overrides)
            _config = BoardConfig(**config_dict)
        return _config

    def __exit__(self, exc_type, exc_val, exc_tb):
        global _config
        _config = self.original_config
