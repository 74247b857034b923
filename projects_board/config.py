# Projects Board: configuration
# Override the service URL and local paths via config.yaml or environment.

import os
import yaml
from pathlib import Path
from dataclasses import dataclass, fields
from typing import Optional

from .errors import ConfigError

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"

ENV_OVERRIDES = {
    "PROJECTS_BOARD_URL": "base_url",
    "PROJECTS_BOARD_DB": "db_path",
    "PROJECTS_BOARD_TIMEOUT": "timeout",
    "PROJECTS_BOARD_LOG_LEVEL": "log_level",
}


@dataclass
class BoardConfig:
    """Runtime configuration for the board client."""

    # Remote service
    base_url: str = "http://localhost:3000"
    timeout: float = 10.0  # seconds, per request

    # Persisted session (token + identity)
    db_path: str = "~/.local/share/projects-board/session.db"

    log_level: str = "INFO"

    def resolve(self) -> "BoardConfig":
        """Normalise values and reject ones the client cannot use."""
        self.base_url = str(self.base_url).strip().rstrip("/")
        if not self.base_url.startswith(("http://", "https://")):
            raise ConfigError(f"base_url must be an http(s) URL, got: '{self.base_url}'")

        try:
            self.timeout = float(self.timeout)
        except (TypeError, ValueError):
            raise ConfigError(f"timeout must be a number, got: '{self.timeout}'")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be > 0, got: {self.timeout}")

        self.db_path = str(Path(str(self.db_path)).expanduser())
        self.log_level = str(self.log_level).upper()
        return self

    @classmethod
    def load(cls, path: Optional[str] = None) -> "BoardConfig":
        """Load config from YAML, then apply environment overrides."""
        cfg_path = Path(path) if path else CONFIG_PATH
        data = {}
        if cfg_path.exists():
            try:
                with open(cfg_path, "r") as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Cannot parse {cfg_path}: {e}") from e
            if not isinstance(data, dict):
                raise ConfigError(f"{cfg_path} must contain a mapping at the top level")
        elif path:
            raise ConfigError(f"Config file not found: {cfg_path}")

        known = {f.name for f in fields(cls)}
        cfg = cls(**{k: v for k, v in data.items() if k in known})

        for env_name, attr in ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value:
                setattr(cfg, attr, value)

        return cfg.resolve()
