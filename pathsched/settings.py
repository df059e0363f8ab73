"""Environment-driven service settings."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
	value = os.getenv(name)
	if value is None or value == "":
		return default
	try:
		return float(value)
	except ValueError:
		logger.warning(f"Ignoring invalid {name}={value!r}, using {default}")
		return default


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
	value = os.getenv(name)
	if value is None or value == "":
		return default
	try:
		return int(value)
	except ValueError:
		logger.warning(f"Ignoring invalid {name}={value!r}, using {default}")
		return default


@dataclass
class Settings:
	args_path: Optional[str] = None
	config_map_name: Optional[str] = None
	config_map_namespace: Optional[str] = None
	config_key: Optional[str] = None
	min_refresh_interval_s: float = 0.0
	max_score: Optional[int] = None
	log_level: str = "INFO"
	bind: str = "0.0.0.0:8888"

	def apply_overrides(self, args: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
		"""Layer the single-field environment overrides on top of plugin args."""
		overrides = {
			"configMapName": self.config_map_name,
			"configMapNamespace": self.config_map_namespace,
			"configKey": self.config_key,
		}
		overrides = {k: v for k, v in overrides.items() if v}
		if not overrides:
			return args
		merged: Dict[str, Any] = dict(args or {})
		storage = dict(merged.get("storageConfig") or {})
		storage.update(overrides)
		merged["storageConfig"] = storage
		return merged


def from_env() -> Settings:
	return Settings(
		args_path=os.getenv("PATHSCHED_ARGS_PATH") or None,
		config_map_name=os.getenv("PATHSCHED_CONFIGMAP_NAME") or None,
		config_map_namespace=os.getenv("PATHSCHED_CONFIGMAP_NAMESPACE") or None,
		config_key=os.getenv("PATHSCHED_CONFIG_KEY") or None,
		min_refresh_interval_s=_env_float("PATHSCHED_MIN_REFRESH_INTERVAL_S", 0.0),
		max_score=_env_int("PATHSCHED_MAX_SCORE", None),
		log_level=(os.getenv("PATHSCHED_LOG_LEVEL") or "INFO").upper(),
		bind=os.getenv("PATHSCHED_BIND") or "0.0.0.0:8888",
	)


def configure_logging(level: str = "INFO") -> None:
	logging.basicConfig(
		level=getattr(logging, level.upper(), logging.INFO),
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)
