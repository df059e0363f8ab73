"""Node path configuration model and lookups."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

# Entry node value that marks every unlisted node as eligible
DEFAULT_NODE_PATH = "DEFAULT_PATH_FOR_NON_LISTED_NODES"


class ConfigError(Exception):
	"""Base class for configuration loading failures."""


class MalformedConfigError(ConfigError):
	"""The configuration document could not be parsed."""


class MissingDocumentError(ConfigError):
	"""The ConfigMap holding the configuration does not exist."""


class MissingKeyError(ConfigError):
	"""The ConfigMap exists but lacks the configured data key."""


class ConfigFetchError(ConfigError):
	"""The Kubernetes API call for the ConfigMap failed."""


@dataclass(frozen=True)
class NodePathEntry:
	"""Storage paths declared for one node."""
	node: str
	paths: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Configuration:
	"""
	Immutable snapshot of the node path map.

	Snapshots are never mutated; a reload builds a new one and the
	store swaps it in wholesale.
	"""
	entries: Tuple[NodePathEntry, ...] = field(default_factory=tuple)

	def has_default_path(self) -> bool:
		return has_default_path(self)

	def is_node_allowed(self, node_name: str) -> bool:
		return is_node_allowed(self, node_name)

	def paths_for(self, node_name: str) -> Optional[Tuple[str, ...]]:
		return paths_for(self, node_name)

	def to_dict(self) -> Dict[str, Any]:
		return {
			"nodePathMap": [
				{"node": entry.node, "paths": list(entry.paths)}
				for entry in self.entries
			]
		}


def has_default_path(snapshot: Configuration) -> bool:
	"""True if the snapshot carries the default-path sentinel entry."""
	return any(entry.node == DEFAULT_NODE_PATH for entry in snapshot.entries)


def is_node_allowed(snapshot: Configuration, node_name: str) -> bool:
	"""
	Check whether a node may receive pods under this snapshot.

	A default-path entry makes every node eligible; otherwise the node
	must be listed explicitly (exact, case-sensitive match).
	"""
	if has_default_path(snapshot):
		return True
	return any(entry.node == node_name for entry in snapshot.entries)


def paths_for(snapshot: Configuration, node_name: str) -> Optional[Tuple[str, ...]]:
	"""Paths of the first entry for node_name, or None when it is not listed."""
	for entry in snapshot.entries:
		if entry.node == node_name:
			return entry.paths
	return None


def _entry_from_dict(raw: Any, index: int) -> NodePathEntry:
	if not isinstance(raw, dict):
		raise MalformedConfigError(f"nodePathMap[{index}] must be an object, got {type(raw).__name__}")

	node = raw.get("node")
	if node is None:
		node = ""
	elif not isinstance(node, str):
		raise MalformedConfigError(f"nodePathMap[{index}].node must be a string")

	paths = raw.get("paths")
	if paths is None:
		paths = []
	elif not isinstance(paths, list):
		raise MalformedConfigError(f"nodePathMap[{index}].paths must be a list")
	for path in paths:
		if not isinstance(path, str):
			raise MalformedConfigError(f"nodePathMap[{index}].paths must only contain strings")

	return NodePathEntry(node=node, paths=tuple(paths))


def parse_configuration(raw: Union[bytes, str]) -> Configuration:
	"""Parse a JSON configuration document into a snapshot."""
	try:
		data = json.loads(raw)
	except (TypeError, ValueError) as e:
		raise MalformedConfigError(f"failed to unmarshal config: {e}") from e

	if not isinstance(data, dict):
		raise MalformedConfigError(f"config must be a JSON object, got {type(data).__name__}")

	node_path_map = data.get("nodePathMap")
	if node_path_map is None:
		return Configuration()
	if not isinstance(node_path_map, list):
		raise MalformedConfigError("nodePathMap must be a list")

	entries: List[NodePathEntry] = [
		_entry_from_dict(item, i) for i, item in enumerate(node_path_map)
	]
	return Configuration(entries=tuple(entries))
