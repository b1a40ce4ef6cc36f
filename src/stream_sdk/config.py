"""Client configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from .errors import ConfigurationError

DEFAULT_ENDPOINT = "ws://localhost:8080/ws"
DEFAULT_HEARTBEAT_INTERVAL = 10.0
DEFAULT_OPEN_TIMEOUT = 10.0

ENV_PREFIX = "STREAM_SDK_"


@dataclass
class ClientConfig:
    """Configuration for StreamClient.

    A heartbeat_interval of zero or less disables the heartbeat loop.
    """

    # Connection
    endpoint: str = DEFAULT_ENDPOINT
    api_key: str = ""
    open_timeout: float = DEFAULT_OPEN_TIMEOUT

    # Liveness
    heartbeat_interval: float = DEFAULT_HEARTBEAT_INTERVAL

    @property
    def heartbeat_enabled(self) -> bool:
        """Check if the heartbeat loop should run."""
        return self.heartbeat_interval > 0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """Build a config from STREAM_SDK_* environment variables.

        Args:
            environ: Mapping to read from (default: os.environ)

        Raises:
            ConfigurationError: If a numeric variable does not parse
        """
        env = os.environ if environ is None else environ
        return cls(
            endpoint=env.get(f"{ENV_PREFIX}ENDPOINT", DEFAULT_ENDPOINT),
            api_key=env.get(f"{ENV_PREFIX}API_KEY", ""),
            open_timeout=_float_from_env(env, "OPEN_TIMEOUT", DEFAULT_OPEN_TIMEOUT),
            heartbeat_interval=_float_from_env(
                env, "HEARTBEAT_INTERVAL", DEFAULT_HEARTBEAT_INTERVAL
            ),
        )


def _float_from_env(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(f"{ENV_PREFIX}{name}")
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from e
