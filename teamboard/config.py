"""Runtime settings for the results board.

Defaults live on the ``Settings`` dataclass. A YAML file and ``TEAMBOARD_*``
environment variables can override them; the resulting object is immutable
and passed explicitly to the sequencer and the session.
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import structlog
import yaml

from teamboard.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)

ENV_PREFIX = "TEAMBOARD_"
CONFIG_ENV_VAR = "TEAMBOARD_CONFIG"


@dataclass(frozen=True)
class Settings:
    """Immutable configuration for one board process."""

    modern_root: str = "https://api.loquiz.com/v4"
    legacy_root: str = "https://api.loquiz.com/v3"
    legacy_scheme: str = "ApiKey-v1"
    # Relay passthrough prefixes, tried in order after the direct request
    relays: tuple[str, ...] = (
        "https://corsproxy.io/?",
        "https://api.codetabs.com/v1/proxy?quest=",
    )
    request_timeout: float = 10.0
    operation_deadline: float = 45.0
    poll_interval: float = 10.0
    notification_ttl: float = 4.0
    games_limit: int = 1000
    tasks_limit: int = 500
    results_limit: int = 100
    photos_limit: int = 200


def _coerce(name: str, value: Any, default: Any) -> Any:
    """Converts a raw override to the type of the default value."""
    try:
        if isinstance(default, tuple):
            if isinstance(value, str):
                return tuple(v.strip() for v in value.split(",") if v.strip())
            return tuple(str(v) for v in value)
        if isinstance(default, float):
            return float(value)
        if isinstance(default, int):
            return int(value)
        return str(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Invalid value for setting '{name}': {value!r}",
            parameter=name,
            expected_format=type(default).__name__,
            example=str(default),
        ) from e


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigurationError(
            f"Settings file not found: {path}", parameter="config"
        )
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Settings file must contain a mapping: {path}",
            parameter="config",
            expected_format="YAML mapping",
            example="poll_interval: 15",
        )
    return data


def load_settings(
    path: str | Path | None = None, environ: dict[str, str] | None = None
) -> Settings:
    """Builds Settings from defaults, an optional YAML file and the environment.

    Args:
        path: Optional YAML settings file. Falls back to $TEAMBOARD_CONFIG.
        environ: Environment mapping (defaults to os.environ).

    Returns:
        The merged, immutable Settings.

    Raises:
        ConfigurationError: For unknown keys or values of the wrong type.
    """
    env = os.environ if environ is None else environ
    defaults = Settings()
    known = {f.name: getattr(defaults, f.name) for f in fields(Settings)}
    overrides: dict[str, Any] = {}

    config_path = path or env.get(CONFIG_ENV_VAR)
    if config_path:
        for key, value in _read_yaml(Path(config_path)).items():
            if key not in known:
                raise ConfigurationError(
                    f"Unknown setting '{key}' in {config_path}",
                    parameter=str(key),
                    suggestion=f"Known settings: {', '.join(sorted(known))}",
                )
            overrides[key] = _coerce(key, value, known[key])
        logger.debug("settings_file_loaded", path=str(config_path))

    for name, default in known.items():
        env_value = env.get(f"{ENV_PREFIX}{name.upper()}")
        if env_value is not None:
            overrides[name] = _coerce(name, env_value, default)

    return replace(defaults, **overrides)
