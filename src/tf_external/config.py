"""Runtime configuration for external program invocation."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(slots=True)
class InvokerSettings:
    """Process supervision settings."""

    timeout_seconds: float = 0.0
    terminate_grace_seconds: float = 2.0
    poll_interval_seconds: float = 0.1


@dataclass(slots=True)
class Settings:
    """Application settings."""

    invoker: InvokerSettings = field(default_factory=InvokerSettings)
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment with defaults suitable for local runs."""

        return cls(
            invoker=InvokerSettings(
                timeout_seconds=_env_float("TF_EXTERNAL_TIMEOUT_SECONDS", 0.0),
                terminate_grace_seconds=_env_float("TF_EXTERNAL_TERMINATE_GRACE_SECONDS", 2.0),
                poll_interval_seconds=_env_float("TF_EXTERNAL_POLL_INTERVAL_SECONDS", 0.1),
            ),
            log_level=os.getenv("TF_EXTERNAL_LOG_LEVEL", "WARNING").strip().upper(),
        )

    def validate(self) -> None:
        """Raise configuration error for out-of-range values."""

        if self.invoker.timeout_seconds < 0:
            raise ValueError("TF_EXTERNAL_TIMEOUT_SECONDS must be >= 0.")
        if self.invoker.terminate_grace_seconds <= 0:
            raise ValueError("TF_EXTERNAL_TERMINATE_GRACE_SECONDS must be > 0.")
        if self.invoker.poll_interval_seconds <= 0:
            raise ValueError("TF_EXTERNAL_POLL_INTERVAL_SECONDS must be > 0.")
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(
                f"Invalid TF_EXTERNAL_LOG_LEVEL: {self.log_level!r}. "
                f"Expected one of: {', '.join(_LOG_LEVELS)}.",
            )

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as error:
        raise ValueError(f"Invalid numeric value for {name}: {value!r}") from error
