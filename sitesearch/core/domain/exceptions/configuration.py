"""Configuration-related exceptions for sitesearch."""

from .base import SiteSearchError


class ConfigurationError(SiteSearchError):
    """Configuration or environment variable errors.

    Raised when required configuration is missing or invalid.
    """

    error_code = "SS_CFG_001"


class MissingAPIKeyError(ConfigurationError):
    """Required API key or endpoint is not configured."""

    error_code = "SS_CFG_002"


class InvalidConfigurationError(ConfigurationError):
    """Configuration value is invalid."""

    error_code = "SS_CFG_003"
