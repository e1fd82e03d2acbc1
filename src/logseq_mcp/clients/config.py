"""Configuration for the Logseq API client."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from logseq_mcp.core.exceptions import ConfigError

DEFAULT_API_URL = "http://127.0.0.1:12315"
DEFAULT_CONFIG_PATH = Path.home() / ".logseq-mcp" / "config.json"

# Operations whose strategy can be switched per operation
DATALOG_OPERATIONS = ("conceptNetwork", "buildContext", "searchByRelationship")


@dataclass
class FeatureFlags:
    """Feature switches read from the ``features`` section of the config.

    ``use_datalog`` is either one boolean for every operation or a map from
    operation name (see ``DATALOG_OPERATIONS``) to a boolean.
    """

    use_datalog: bool | dict[str, bool] = False

    def datalog_enabled(self, operation: str) -> bool:
        """Whether the Datalog strategy is selected for ``operation``."""
        if isinstance(self.use_datalog, dict):
            return bool(self.use_datalog.get(operation, False))
        return bool(self.use_datalog)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "FeatureFlags":
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError("Configuration validation failed: features must be an object")

        use_datalog = data.get("useDatalog", False)
        if isinstance(use_datalog, dict):
            unknown = set(use_datalog) - set(DATALOG_OPERATIONS)
            if unknown:
                raise ConfigError(
                    "Configuration validation failed: unknown useDatalog operations: "
                    + ", ".join(sorted(unknown))
                )
            use_datalog = {k: bool(v) for k, v in use_datalog.items()}
        elif not isinstance(use_datalog, bool):
            raise ConfigError(
                "Configuration validation failed: useDatalog must be a boolean or an object"
            )
        return cls(use_datalog=use_datalog)


@dataclass
class LogseqConfig:
    """Connection settings for the Logseq HTTP API server.

    Defaults target the Logseq desktop app's API server on its stock port.
    """

    auth_token: str
    api_url: str = DEFAULT_API_URL
    features: FeatureFlags = field(default_factory=FeatureFlags)

    @property
    def endpoint(self) -> str:
        return self.api_url.rstrip("/") + "/api"


def load_config(path: Path | str | None = None) -> LogseqConfig:
    """Load and validate the JSON configuration file.

    Args:
        path: Config file location (default ``~/.logseq-mcp/config.json``)

    Returns:
        Validated LogseqConfig

    Raises:
        ConfigError: if the file is missing, is not valid JSON or misses
            required fields
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH

    try:
        raw = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"Configuration file not found: {config_path}") from None

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("Configuration validation failed: config must be a JSON object")

    auth_token = data.get("authToken")
    if not auth_token:
        raise ConfigError("Configuration validation failed: authToken is required")
    if not isinstance(auth_token, str):
        raise ConfigError("Configuration validation failed: authToken must be a string")

    api_url = data.get("apiUrl") or DEFAULT_API_URL
    if not isinstance(api_url, str):
        raise ConfigError("Configuration validation failed: apiUrl must be a string")

    return LogseqConfig(
        auth_token=auth_token,
        api_url=api_url,
        features=FeatureFlags.from_dict(data.get("features")),
    )
