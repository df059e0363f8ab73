"""ConfigMap coordinates and the Kubernetes client used to read them."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from kubernetes import client, config
from kubernetes.client.exceptions import ApiException

from pathsched.config import (
	ConfigError,
	ConfigFetchError,
	MissingDocumentError,
	MissingKeyError,
)

logger = logging.getLogger(__name__)

CONFIG_MAP_NAME = "local-path-config"
CONFIG_MAP_NAMESPACE = "kube-system"
CONFIG_KEY = "config.json"


@dataclass(frozen=True)
class SourceOptions:
	"""Where the node path configuration lives."""
	config_map_name: str = CONFIG_MAP_NAME
	config_map_namespace: str = CONFIG_MAP_NAMESPACE
	config_key: str = CONFIG_KEY

	@classmethod
	def from_args(cls, args: Optional[Mapping[str, Any]]) -> "SourceOptions":
		"""
		Decode plugin args of the form {"storageConfig": {...}}.

		A missing storageConfig keeps the defaults; unset fields inside it
		fall back to their own defaults.
		"""
		if args is None:
			return cls()
		if not isinstance(args, Mapping):
			raise ConfigError(f"failed to decode plugin args: expected a mapping, got {type(args).__name__}")

		storage = args.get("storageConfig")
		if storage is None:
			return cls()
		if not isinstance(storage, Mapping):
			raise ConfigError("failed to decode plugin args: storageConfig must be a mapping")

		return cls(
			config_map_name=storage.get("configMapName") or CONFIG_MAP_NAME,
			config_map_namespace=storage.get("configMapNamespace") or CONFIG_MAP_NAMESPACE,
			config_key=storage.get("configKey") or CONFIG_KEY,
		)

	def to_dict(self) -> Dict[str, str]:
		return {
			"configMapName": self.config_map_name,
			"configMapNamespace": self.config_map_namespace,
			"configKey": self.config_key,
		}


def load_plugin_args(path: Optional[str]) -> Optional[Dict[str, Any]]:
	"""Read a YAML (or JSON) plugin args file; None when no path is given."""
	if not path:
		return None
	try:
		with open(Path(path), "r", encoding="utf-8") as f:
			data = yaml.safe_load(f)
	except (OSError, yaml.YAMLError) as e:
		raise ConfigError(f"failed to read plugin args from {path}: {e}") from e
	if data is None:
		return None
	if not isinstance(data, dict):
		raise ConfigError(f"plugin args in {path} must be a mapping")
	logger.info(f"Loaded plugin args from {path}")
	return data


def _default_core_api() -> client.CoreV1Api:
	try:
		config.load_incluster_config()
		logger.info("Loaded in-cluster Kubernetes config")
	except config.ConfigException:
		config.load_kube_config()
		logger.info("Loaded kubeconfig")
	return client.CoreV1Api()


class ConfigMapSource:
	"""Reads configuration documents from Kubernetes ConfigMaps."""

	def __init__(self, core_api: Optional[client.CoreV1Api] = None) -> None:
		self.core = core_api if core_api is not None else _default_core_api()

	def fetch(self, namespace: str, name: str) -> Dict[str, str]:
		"""
		Return the data of ConfigMap namespace/name.

		Raises:
			MissingDocumentError: If the ConfigMap does not exist
			ConfigFetchError: If the API call fails for any other reason
		"""
		try:
			cm = self.core.read_namespaced_config_map(name=name, namespace=namespace)
		except ApiException as e:
			if e.status == 404:
				raise MissingDocumentError(f"ConfigMap {namespace}/{name} not found") from e
			raise ConfigFetchError(
				f"failed to get ConfigMap {namespace}/{name}: status={e.status}, reason={e.reason}"
			) from e
		except Exception as e:
			raise ConfigFetchError(f"failed to get ConfigMap {namespace}/{name}: {e}") from e
		return dict(cm.data or {})

	def read(self, options: SourceOptions) -> str:
		"""Fetch the configured ConfigMap and return the blob under its key."""
		data = self.fetch(options.config_map_namespace, options.config_map_name)
		if options.config_key not in data:
			raise MissingKeyError(
				f"ConfigMap {options.config_map_namespace}/{options.config_map_name} "
				f"does not contain key {options.config_key}"
			)
		return data[options.config_key]
