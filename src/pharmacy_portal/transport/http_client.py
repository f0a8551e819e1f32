"""HTTP client with connection pooling for pharmacy API and audit store calls.

Sessions never retry: a BestRX submission is not idempotent, so a request
that may have reached the server must not be replayed automatically.
"""

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from pharmacy_portal.config.schema import TransportConfig

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONNECTIONS = 10
DEFAULT_POOL_BLOCK = True
DEFAULT_CONNECT_TIMEOUT = 10
DEFAULT_READ_TIMEOUT = 30


@dataclass
class ConnectionPoolConfig:
    """Configuration for HTTP connection pooling.

    Attributes:
        max_connections: Maximum number of connections in the pool. Must be >= 1.
        pool_block: Whether to block when pool is exhausted.
        connect_timeout: Connection timeout in seconds.
        read_timeout: Read timeout in seconds.
        verify_tls: Whether to verify TLS certificates.

    Example:
        >>> config = ConnectionPoolConfig(max_connections=5, read_timeout=20)
        >>> pool = ConnectionPool(config)
        >>> session = pool.get_session()
    """

    max_connections: int = DEFAULT_MAX_CONNECTIONS
    pool_block: bool = DEFAULT_POOL_BLOCK
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT
    read_timeout: int = DEFAULT_READ_TIMEOUT
    verify_tls: bool = True

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_connections < 1:
            raise ValueError(
                f"max_connections must be >= 1, got {self.max_connections}"
            )
        if self.connect_timeout < 1:
            raise ValueError(
                f"connect_timeout must be >= 1, got {self.connect_timeout}"
            )
        if self.read_timeout < 1:
            raise ValueError(
                f"read_timeout must be >= 1, got {self.read_timeout}"
            )

    @classmethod
    def from_transport_config(cls, transport: TransportConfig) -> "ConnectionPoolConfig":
        return cls(
            max_connections=transport.max_connections,
            connect_timeout=transport.timeout_connect,
            read_timeout=transport.timeout_read,
            verify_tls=transport.verify_tls,
        )

    @property
    def timeout(self) -> tuple[int, int]:
        """(connect, read) tuple as accepted by requests."""
        return (self.connect_timeout, self.read_timeout)


class ConnectionPool:
    """Manages a lazily created, pooled HTTP session.

    Thread-safe for concurrent use.

    Attributes:
        config: Connection pool configuration.

    Example:
        >>> with ConnectionPool() as pool:
        ...     session = pool.get_session()
        ...     response = session.post(url, json=payload, timeout=pool.config.timeout)
    """

    def __init__(self, config: Optional[ConnectionPoolConfig] = None) -> None:
        self.config = config or ConnectionPoolConfig()
        self._session: Optional[requests.Session] = None
        self._lock = Lock()
        logger.debug(
            "ConnectionPool initialized with max_connections=%d, pool_block=%s",
            self.config.max_connections,
            self.config.pool_block,
        )

    def get_session(self) -> requests.Session:
        """Get or create the configured HTTP session.

        Returns:
            requests.Session with connection pooling and retries disabled.
        """
        with self._lock:
            if self._session is None:
                self._session = self._create_session()
            return self._session

    def _create_session(self) -> requests.Session:
        pool_connections = self.config.max_connections

        # total=0: no automatic retries at any layer
        retry_strategy = Retry(total=0, connect=0, read=0, redirect=0, status=0)

        adapter = HTTPAdapter(
            pool_connections=pool_connections,
            pool_maxsize=pool_connections,
            pool_block=self.config.pool_block,
            max_retries=retry_strategy,
        )

        session = requests.Session()
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.verify = self.config.verify_tls

        if not self.config.verify_tls:
            logger.warning(
                "TLS certificate verification is DISABLED. "
                "This should only be used against the local mock server."
            )

        logger.info(
            "Created HTTP session with pool_maxsize=%d, timeouts=%ss connect/%ss read",
            pool_connections,
            self.config.connect_timeout,
            self.config.read_timeout,
        )

        return session

    def close(self) -> None:
        """Close the session and release resources."""
        with self._lock:
            if self._session is not None:
                self._session.close()
                self._session = None
                logger.debug("ConnectionPool session closed")

    def __enter__(self) -> "ConnectionPool":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
