from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

from portfolio_sync.application.exclusion import parse_exclude_patterns
from portfolio_sync.domain.errors import ConfigurationError

DEFAULT_API_URL       = "https://api.github.com"
DEFAULT_PROJECTS_LIMIT = 30
DEFAULT_TIMEOUT       = 30.0


@dataclass(frozen=True)
class SyncConfig:
    """
    Everything the sync engine needs to know, read once and passed in.

    Nothing below the composition root touches os.environ: every class
    receives this object (or the values it needs) via its constructor.
    """
    database_url:     str = ""
    github_username:  str = ""
    github_token:     str | None = None
    exclude_patterns: list[str] = field(default_factory=list)
    projects_limit:   int = DEFAULT_PROJECTS_LIMIT
    api_url:          str = DEFAULT_API_URL
    request_timeout:  float = DEFAULT_TIMEOUT
    log_level:        str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "SyncConfig":
        """
        Build a config from environment variables.

        A missing GITHUB_USERNAME is not an error here: it only disables
        syncing, and is reported when a sync is actually requested.
        """
        env = os.environ if environ is None else environ

        limit = _read_int(env, "GITHUB_PROJECTS_LIMIT", DEFAULT_PROJECTS_LIMIT)

        return cls(
            database_url     = env.get("DATABASE_URL", "").strip(),
            github_username  = env.get("GITHUB_USERNAME", "").strip(),
            github_token     = env.get("GITHUB_TOKEN", "").strip() or None,
            exclude_patterns = parse_exclude_patterns(env.get("GITHUB_EXCLUDE_PATTERNS", "")),
            # 0 means unset, like an empty value
            projects_limit   = max(1, limit or DEFAULT_PROJECTS_LIMIT),
            api_url          = env.get("GITHUB_API_URL", "").strip().rstrip("/") or DEFAULT_API_URL,
            request_timeout  = _read_float(env, "GITHUB_TIMEOUT", DEFAULT_TIMEOUT),
            log_level        = env.get("LOG_LEVEL", "").strip().upper() or "INFO",
        )


def _read_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _read_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value
