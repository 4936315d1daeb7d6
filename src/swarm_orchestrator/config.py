"""Configuration system using platformdirs for cross-platform paths."""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import platformdirs

APP_NAME = "swarm-orchestrator"
APP_AUTHOR = "swarm-orchestrator"
ENV_PREFIX = "SWARM_ORCHESTRATOR_"


@dataclass
class Config:
	"""Central configuration with XDG/platform conventions."""

	config_dir: Path = field(default_factory=lambda: Path(platformdirs.user_config_dir(APP_NAME)))
	data_dir: Path = field(default_factory=lambda: Path(platformdirs.user_data_dir(APP_NAME)))

	# Derived paths
	log_dir: Path = field(init=False)

	# Agent catalog (None = packaged default_catalog.yaml)
	catalog_path: Optional[Path] = None
	generalist_agent_id: str = "general"

	# Routing
	min_route_score: float = 0.3
	max_fallbacks: int = 2

	# Execution
	max_concurrency: int = 5
	fallback_decay: float = 0.8
	agent_timeout_seconds: Optional[float] = None
	agent_command: str = "claude --print"

	# Verification
	verification_threshold: float = 0.7

	log_level: str = "INFO"

	def __post_init__(self) -> None:
		self.log_dir = self.data_dir / "logs"

	def ensure_dirs(self) -> None:
		"""Create all required directories."""
		self.config_dir.mkdir(parents=True, exist_ok=True)
		self.data_dir.mkdir(parents=True, exist_ok=True)
		self.log_dir.mkdir(parents=True, exist_ok=True)


_PATH_FIELDS = {"config_dir", "data_dir", "catalog_path"}
_INT_FIELDS = {"max_concurrency", "max_fallbacks"}
_FLOAT_FIELDS = {"min_route_score", "fallback_decay", "verification_threshold", "agent_timeout_seconds"}


def _coerce(key: str, val):
	"""Convert a raw env/toml value to the type of the named field."""
	if key in _PATH_FIELDS:
		return Path(os.path.expanduser(str(val)))
	if key in _INT_FIELDS:
		return int(val)
	if key in _FLOAT_FIELDS:
		return float(val)
	return val


def _apply_env_overrides(config: Config) -> Config:
	"""Apply SWARM_ORCHESTRATOR_* environment variable overrides."""
	env_map = {
		"CONFIG_DIR": "config_dir",
		"DATA_DIR": "data_dir",
		"CATALOG_PATH": "catalog_path",
		"GENERALIST_AGENT_ID": "generalist_agent_id",
		"MAX_CONCURRENCY": "max_concurrency",
		"MAX_FALLBACKS": "max_fallbacks",
		"AGENT_TIMEOUT_SECONDS": "agent_timeout_seconds",
		"AGENT_COMMAND": "agent_command",
		"MIN_ROUTE_SCORE": "min_route_score",
		"FALLBACK_DECAY": "fallback_decay",
		"VERIFICATION_THRESHOLD": "verification_threshold",
		"LOG_LEVEL": "log_level",
	}
	for suffix, attr in env_map.items():
		val = os.getenv(ENV_PREFIX + suffix)
		if val:
			setattr(config, attr, _coerce(attr, val))
	# Recompute derived paths after overrides
	config.__post_init__()
	return config


def _apply_toml(config: Config) -> Config:
	"""Apply config.toml overrides if file exists."""
	toml_path = config.config_dir / "config.toml"
	if not toml_path.exists():
		return config

	with open(toml_path, "rb") as f:
		data = tomllib.load(f)

	for key, val in data.items():
		if hasattr(config, key) and key != "log_dir":
			setattr(config, key, _coerce(key, val))

	# Recompute derived paths after toml overrides
	config.__post_init__()
	return config


def load_config() -> Config:
	"""Load config with precedence: env vars > config.toml > defaults."""
	config = Config()
	config = _apply_env_overrides(config)  # config_dir may come from env
	config = _apply_toml(config)
	config = _apply_env_overrides(config)
	config.ensure_dirs()
	return config


# Singleton
_config: Config | None = None


def get_config() -> Config:
	"""Get or create the global config instance."""
	global _config
	if _config is None:
		_config = load_config()
	return _config
