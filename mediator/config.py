"""Runtime configuration.

Settings come from built-in defaults, then an optional YAML file (path given
explicitly or through ``MEDIATOR_CONFIG``), then environment variables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import yaml

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# env var -> (setting name, converter)
_ENV_OVERRIDES = {
    "ADMIN_KEY": ("admin_key", str),
    "HOST": ("host", str),
    "PORT": ("port", int),
    "MEDIATOR_DATA_PATH": ("data_path", Path),
    "MEDIATOR_SAVE_DELAY": ("save_delay", float),
    "MEDIATOR_SWEEP_INTERVAL": ("sweep_interval", float),
    "LOG_LEVEL": ("log_level", str),
}


def _default_data_path() -> Path:
    return Path.home() / ".mediator" / "data.json"


@dataclass
class Settings:
    admin_key: str = "dev-admin"
    host: str = "0.0.0.0"
    port: int = 3001
    data_path: Path = field(default_factory=_default_data_path)
    save_delay: float = 0.5  # seconds; <= 0 writes synchronously
    sweep_interval: float = 0.0  # seconds; 0 disables the expired-sanction sweep
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    def __post_init__(self) -> None:
        self.data_path = Path(self.data_path).expanduser()
        self.log_level = self.log_level.upper()


def _read_yaml(path: Path) -> dict[str, Any]:
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return data


def load_settings(config_path: Optional[str | Path] = None, env: Optional[dict] = None) -> Settings:
    """Build :class:`Settings` from defaults, YAML and the environment."""
    env = os.environ if env is None else env
    values: dict[str, Any] = {}

    path = config_path or env.get("MEDIATOR_CONFIG")
    if path:
        known = {f.name for f in fields(Settings)}
        values.update({k: v for k, v in _read_yaml(Path(path)).items() if k in known})

    for var, (name, convert) in _ENV_OVERRIDES.items():
        raw = env.get(var)
        if raw:
            values[name] = convert(raw)

    return Settings(**values)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
