"""
pURLs Trace Configuration

YAML-based settings for the redirect tracer and API server, with
environment variable overrides.
"""

from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .tracer import RedirectTracer, DEFAULT_MAX_REDIRECTS, DEFAULT_USER_AGENT
from ..common import get_env_setting, parse_bool

LOG_LEVELS = ('debug', 'info', 'warning', 'error')

# Environment variable -> (config field, converter)
ENV_OVERRIDES = {
    'PURLS_MAX_REDIRECTS': ('max_redirects', int),
    'PURLS_TIMEOUT': ('timeout', float),
    'PURLS_VERIFY_SSL': ('verify_ssl', parse_bool),
    'PURLS_LOG_LEVEL': ('log_level', str.lower),
}


@dataclass
class TraceConfig:
    """Configuration for redirect tracing and the API server."""

    # Tracing
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    timeout: float = 10
    verify_ssl: bool = True
    max_retries: int = 0
    user_agent: str = DEFAULT_USER_AGENT

    # Server options
    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "info"

    def __post_init__(self):
        self.validate()

    def validate(self):
        """
        Check value ranges.

        Raises:
            ValueError: If a setting is out of range
        """
        if self.max_redirects < 0:
            raise ValueError("max_redirects must be >= 0")
        if self.timeout <= 0:
            raise ValueError("timeout must be > 0")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TraceConfig':
        """
        Create config from dictionary.

        Raises:
            ValueError: If unknown keys are present
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")

        try:
            return cls(**data)
        except TypeError as e:
            raise ValueError(f"Invalid config value: {e}") from e

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'TraceConfig':
        """
        Load config from YAML file.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the YAML content is not a mapping of known keys
        """
        path = Path(yaml_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Expected a mapping in {path}, got {type(data).__name__}")

        return cls.from_dict(data)

    @classmethod
    def load(cls, yaml_path: Optional[str] = None) -> 'TraceConfig':
        """Load from an optional YAML file, then apply environment overrides."""
        config = cls.from_yaml(yaml_path) if yaml_path else cls()
        return config.apply_env()

    def apply_env(self) -> 'TraceConfig':
        """
        Override settings from PURLS_* environment variables.

        Raises:
            ValueError: If a variable holds an invalid value
        """
        for env_name, (field_name, convert) in ENV_OVERRIDES.items():
            raw = get_env_setting(env_name)
            if raw is None:
                continue
            try:
                setattr(self, field_name, convert(raw))
            except ValueError as e:
                raise ValueError(f"Invalid value for {env_name}: {raw!r}") from e

        self.validate()
        return self

    def save(self, yaml_path: str):
        """Save config to YAML file."""
        with open(yaml_path, 'w', encoding='utf-8') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def create_tracer(self) -> RedirectTracer:
        """Build a RedirectTracer using these settings."""
        return RedirectTracer(
            timeout=self.timeout,
            verify_ssl=self.verify_ssl,
            max_retries=self.max_retries,
            user_agent=self.user_agent
        )
