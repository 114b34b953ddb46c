"""Runtime options for a single invocation."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict


DEFAULT_TIMEOUT = 30.0
MAX_TIMEOUT = 3600.0
DEFAULT_THEME = "monokai"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("plain", "json")


@dataclass(frozen=True)
class ClientConfig:
    """Options controlling transport, highlighting and diagnostics."""

    timeout: float = DEFAULT_TIMEOUT
    theme: str = DEFAULT_THEME
    log_level: str = "WARNING"
    log_format: str = "plain"
    follow_redirects: bool = True

    def __post_init__(self) -> None:
        _validate_config(self)

    def logging_dict(self) -> Dict[str, Any]:
        """Return a mapping suitable for structured logging."""

        return asdict(self)


def _validate_config(config: ClientConfig) -> None:
    _validate_timeout(config.timeout)
    if not config.theme:
        raise ValueError("theme must not be empty.")
    if config.log_level.upper() not in LOG_LEVELS:
        raise ValueError(f"log_level must be one of {list(LOG_LEVELS)}; got {config.log_level}.")
    if config.log_format not in LOG_FORMATS:
        raise ValueError(f"log_format must be one of {list(LOG_FORMATS)}; got {config.log_format}.")


def _validate_timeout(value: float) -> None:
    if not 0 < value <= MAX_TIMEOUT:
        raise ValueError(f"timeout must be greater than 0 and at most {MAX_TIMEOUT}; got {value}.")
