"""Configuration manager for loading and managing configuration.

This module provides the main configuration loading functionality, including
support for JSON configuration files, .env files, environment variable
overrides, and configuration validation.

The loaded ``Config`` is passed explicitly into the submission orchestrator;
nothing downstream reads the process environment.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from pharmacy_portal.config.defaults import (
    DEFAULT_CONFIG,
    DEFAULT_CONFIG_PATH,
    SENSITIVE_KEYS,
)
from pharmacy_portal.config.schema import (
    AuditStoreConfig,
    BestRXConfig,
    Config,
    LoggingConfig,
    TransportConfig,
)
from pharmacy_portal.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Environment variable prefix for non-credential overrides
ENV_PREFIX = "PHARMACY_PORTAL_"

# Credential variables keep the names the website deployment already uses
CREDENTIAL_ENV_VARS = {
    ("bestrx", "pharmacy_number"): "BESTRX_PHARMACY_NUMBER",
    ("bestrx", "api_key"): "BESTRX_API_KEY",
    ("bestrx", "username"): "BESTRX_USERNAME",
    ("bestrx", "password"): "BESTRX_PASSWORD",
    ("audit_store", "url"): "SUPABASE_URL",
    ("audit_store", "anon_key"): "SUPABASE_ANON_KEY",
}


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file and environment variables.

    Configuration is loaded with the following precedence (highest to lowest):
    1. CLI arguments (handled by caller)
    2. Environment variables (BESTRX_*, SUPABASE_*, PHARMACY_PORTAL_*)
    3. Configuration file (JSON)
    4. Default values

    Args:
        config_path: Path to configuration file. If None, uses ./config/config.json

    Returns:
        Validated Config instance

    Raises:
        ConfigurationError: If configuration is invalid or malformed

    Example:
        >>> config = load_config(Path("custom/config.json"))
        >>> refill_url = config.endpoints.refill_url
    """
    # Load .env file if present in project root
    load_dotenv()

    if config_path is None:
        config_path = Path(DEFAULT_CONFIG_PATH)

    config_dict = _load_config_file(config_path)

    # Checked before env overrides so only file-borne secrets are flagged
    _check_sensitive_values(config_dict, config_path)

    config_dict = _apply_env_overrides(config_dict)

    try:
        return Config(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed:\n{e}\n\n"
            f"Fix: Check your configuration file at {config_path} and ensure all "
            f"values match the expected format."
        )


def _load_config_file(config_path: Path) -> dict[str, Any]:
    """Load configuration file or return defaults.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        ConfigurationError: If JSON is malformed or the file is unreadable
    """
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_dict = json.load(f)
            logger.info(f"Loaded configuration from {config_path}")
            return config_dict
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check JSON syntax at line {e.lineno}, column {e.colno}"
            )
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check file permissions and path"
            )
    else:
        logger.info(
            f"Config file not found: {config_path}. Using default configuration."
        )
        # Deep copy so callers can mutate freely
        return json.loads(json.dumps(DEFAULT_CONFIG))


def _apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Apply credential and PHARMACY_PORTAL_* environment overrides.

    Args:
        config_dict: Configuration dictionary to update

    Returns:
        Updated configuration dictionary with environment overrides applied
    """
    for (section, field), env_var in CREDENTIAL_ENV_VARS.items():
        if value := os.getenv(env_var):
            config_dict.setdefault(section, {})[field] = value
            # Only the variable name is logged, never the value
            logger.debug(f"Override: {section}.{field} from {env_var}")

    # Endpoints section
    if refill_url := os.getenv(f"{ENV_PREFIX}REFILL_URL"):
        config_dict.setdefault("endpoints", {})["refill_url"] = refill_url
        logger.debug("Override: refill_url from environment")

    if transfer_url := os.getenv(f"{ENV_PREFIX}TRANSFER_URL"):
        config_dict.setdefault("endpoints", {})["transfer_url"] = transfer_url
        logger.debug("Override: transfer_url from environment")

    # Transport section
    if verify_tls := os.getenv(f"{ENV_PREFIX}VERIFY_TLS"):
        config_dict.setdefault("transport", {})["verify_tls"] = _parse_bool(verify_tls)
        logger.debug("Override: verify_tls from environment")

    if timeout_connect := os.getenv(f"{ENV_PREFIX}TIMEOUT_CONNECT"):
        config_dict.setdefault("transport", {})["timeout_connect"] = _parse_int(
            timeout_connect, f"{ENV_PREFIX}TIMEOUT_CONNECT"
        )
        logger.debug("Override: timeout_connect from environment")

    if timeout_read := os.getenv(f"{ENV_PREFIX}TIMEOUT_READ"):
        config_dict.setdefault("transport", {})["timeout_read"] = _parse_int(
            timeout_read, f"{ENV_PREFIX}TIMEOUT_READ"
        )
        logger.debug("Override: timeout_read from environment")

    # Logging section
    if log_level := os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
        config_dict.setdefault("logging", {})["level"] = log_level
        logger.debug("Override: log_level from environment")

    if log_file := os.getenv(f"{ENV_PREFIX}LOG_FILE"):
        config_dict.setdefault("logging", {})["log_file"] = log_file
        logger.debug("Override: log_file from environment")

    if redact_pii := os.getenv(f"{ENV_PREFIX}REDACT_PII"):
        config_dict.setdefault("logging", {})["redact_pii"] = _parse_bool(redact_pii)
        logger.debug("Override: redact_pii from environment")

    return config_dict


def _parse_bool(value: str) -> bool:
    """Parse boolean value from string (case-insensitive)."""
    return value.lower() in ("true", "1", "yes", "on")


def _parse_int(value: str, env_var: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(
            f"Invalid value for {env_var}: '{value}'. Must be an integer."
        )


def _check_sensitive_values(config_dict: dict[str, Any], config_path: Path) -> None:
    """Warn when credentials are stored in the configuration file.

    Args:
        config_dict: Configuration dictionary loaded from file
        config_path: Path the dictionary came from
    """
    for section, keys in SENSITIVE_KEYS.items():
        section_dict = config_dict.get(section) or {}
        for key in keys:
            if section_dict.get(key):
                env_var = CREDENTIAL_ENV_VARS[(section, key)]
                logger.warning(
                    f"WARNING: {section}.{key} found in configuration file {config_path}! "
                    f"Credentials should be stored in environment variables, not config files. "
                    f"Use the {env_var} environment variable instead."
                )


def get_bestrx_config(config: Config) -> BestRXConfig:
    """Get BestRX credentials configuration."""
    return config.bestrx


def get_audit_store_config(config: Config) -> AuditStoreConfig:
    """Get audit store configuration."""
    return config.audit_store


def get_transport_config(config: Config) -> TransportConfig:
    """Get transport configuration.

    Example:
        >>> config = load_config()
        >>> transport = get_transport_config(config)
        >>> timeout = transport.timeout_connect
    """
    return config.transport


def get_logging_config(config: Config) -> LoggingConfig:
    """Get logging configuration."""
    return config.logging
