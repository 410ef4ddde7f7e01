"""
Configuration management using Pydantic settings
"""
from pathlib import Path
from typing import List, Literal
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from functools import lru_cache


class SitefrontSettings(BaseSettings):
    """Tenant front-end configuration"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    app_name: str = Field(default="Sitefront", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Expose debug details in error pages")

    # Operational API, kept under a prefix that no tenant route uses
    api_prefix: str = Field(default="/_sitefront/api/v1")
    cors_origins: List[str] = Field(default=["*"])
    allowed_hosts: List[str] = Field(default=[])

    # Collaborator REST API
    api_base_url: str = Field(default="http://localhost:5000/api")
    domain_check_path: str = Field(default="/domain-check")
    domain_check_ttl: int = Field(default=300, description="Seconds a domain-check answer is reused")
    domain_check_timeout: float = Field(default=5.0)

    # Content collaborator
    content_source: Literal["api", "markdown"] = Field(default="api")
    content_directory: Path = Field(default=Path("content"))
    content_ttl: int = Field(default=60)
    related_posts_limit: int = Field(default=3)

    # Routing
    admin_prefixes: List[str] = Field(default=["/signup", "/pricing", "/owner", "/admin"])
    admin_root_bypass: bool = Field(
        default=True,
        description="Serve the admin login at '/' without a domain check; disable when tenants live at the root"
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")  # json or text

    @field_validator("content_directory")
    @classmethod
    def validate_content_directory(cls, v):
        """Ensure content directory is absolute path"""
        if not isinstance(v, Path):
            v = Path(v)
        return v.absolute()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @field_validator("domain_check_ttl", "content_ttl")
    @classmethod
    def validate_ttl(cls, v):
        """Ensure cache lifetimes are positive"""
        if v <= 0:
            raise ValueError("Cache TTL must be positive")
        return v

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")


@lru_cache()
def get_settings() -> SitefrontSettings:
    """Get cached settings instance"""
    return SitefrontSettings()


# Convenience function to reload settings (useful for testing)
def reload_settings():
    """Clear settings cache to reload from environment"""
    get_settings.cache_clear()


def validate_routing(settings: SitefrontSettings) -> SitefrontSettings:
    """
    Reject prefixes that would shadow tenant routes or never match.
    Called once at startup, before the API app is mounted.
    """
    from .exceptions import ConfigurationError

    prefix = settings.api_prefix
    if not prefix.startswith("/") or prefix.rstrip("/") == "":
        raise ConfigurationError("api_prefix", "must be an absolute path other than '/'")

    for admin_prefix in settings.admin_prefixes:
        if not admin_prefix.startswith("/") or admin_prefix == "/":
            raise ConfigurationError("admin_prefixes", f"'{admin_prefix}' must be an absolute path other than '/'")
        if admin_prefix.rstrip("/") == prefix.rstrip("/"):
            raise ConfigurationError("admin_prefixes", f"'{admin_prefix}' collides with the API prefix")

    return settings
