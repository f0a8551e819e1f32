"""Configuration management for mock server."""

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_MOCK_CONFIG_PATH = Path("mocks/config.json")

REFILL_PATH = "/bcswebservice/v2/webrefillservice/SendRefillRequest"
TRANSFER_PATH = "/prescription/submitrxtransferrequest"
RPC_PATH_PREFIX = "/rest/v1/rpc"


class BestRXBehavior(BaseModel):
    """Behavior of one mock BestRX endpoint.

    Attributes:
        response_delay_ms: Response delay in milliseconds (0-5000)
        error_code: When set, reply with this BestRX error code
        error_message: Raw error message to send with ``error_code``
        http_status: When set, reply with this HTTP status and the error body
        require_auth: Reject requests without credentials with HTTP 403
    """

    response_delay_ms: int = Field(
        default=0,
        ge=0,
        le=5000,
        description="Response delay in milliseconds",
    )
    error_code: Optional[str] = Field(
        default=None,
        description="BestRX error code to return instead of success",
    )
    error_message: Optional[str] = Field(
        default=None,
        description="Raw ErrorMessage sent alongside error_code",
    )
    http_status: Optional[int] = Field(
        default=None,
        ge=100,
        le=599,
        description="HTTP status to return instead of 200",
    )
    require_auth: bool = Field(
        default=True,
        description="Reject requests missing credentials with HTTP 403",
    )


class RPCStoreBehavior(BaseModel):
    """Behavior of the mock RPC store.

    Attributes:
        response_delay_ms: Response delay in milliseconds (0-5000)
        failure_rate: Probability of returning HTTP 500 (0.0-1.0)
        failure_message: PostgREST ``message`` sent on failure
    """

    response_delay_ms: int = Field(default=0, ge=0, le=5000)
    failure_rate: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Probability of returning HTTP 500 (0.0-1.0)",
    )
    failure_message: str = Field(default="mock RPC failure")


class MockServerConfig(BaseModel):
    """Mock server configuration model.

    Configuration precedence:
    1. Environment variables (MOCK_SERVER_* prefix)
    2. JSON config file
    3. Default values
    """

    host: str = Field(default="127.0.0.1", description="Server host address")
    http_port: int = Field(default=8080, description="HTTP server port")
    log_level: str = Field(default="INFO", description="Logging level")
    log_path: str = Field(default="mocks/logs/mock-server.log", description="Log file path")

    refill_behavior: BestRXBehavior = Field(default_factory=BestRXBehavior)
    transfer_behavior: BestRXBehavior = Field(default_factory=BestRXBehavior)
    rpc_behavior: RPCStoreBehavior = Field(default_factory=RPCStoreBehavior)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: {', '.join(valid_levels)}"
            )
        return v_upper

    @field_validator("http_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 1 <= v <= 65535:
            raise ValueError(f"Invalid port {v}. Must be between 1 and 65535.")
        return v

    @property
    def endpoints(self) -> list[str]:
        return ["/health", REFILL_PATH, TRANSFER_PATH, f"{RPC_PATH_PREFIX}/<function>"]


def load_config(config_file: Path | None = None) -> MockServerConfig:
    """Load mock server configuration from file and environment variables.

    Args:
        config_file: Path to configuration JSON file. Defaults to mocks/config.json

    Returns:
        MockServerConfig instance with merged configuration

    Raises:
        FileNotFoundError: If config file specified but not found
        ValueError: If configuration is invalid
    """
    if config_file is None:
        config_file = DEFAULT_MOCK_CONFIG_PATH

    config_data = {}
    if config_file.exists():
        try:
            with open(config_file) as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(
                f"Failed to parse configuration file '{config_file}': {e}. "
                f"Ensure the file contains valid JSON."
            )
    elif config_file != DEFAULT_MOCK_CONFIG_PATH:
        raise FileNotFoundError(
            f"Configuration file not found: '{config_file}'. "
            f"Ensure the file exists or check the path."
        )

    # Only scalar top-level fields can be overridden from the environment
    env_prefix = "MOCK_SERVER_"
    for key in ("host", "http_port", "log_level", "log_path"):
        env_key = f"{env_prefix}{key.upper()}"
        if env_key in os.environ:
            value = os.environ[env_key]
            if key == "http_port":
                try:
                    value = int(value)
                except ValueError:
                    raise ValueError(
                        f"Invalid value for {env_key}: '{value}'. Must be an integer."
                    )
            config_data[key] = value

    try:
        config = MockServerConfig(**config_data)
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")

    return config
