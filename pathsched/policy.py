"""Path-based node eligibility and scoring plugin."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Mapping, Optional, Tuple

from pathsched.config import ConfigError, Configuration
from pathsched.framework import (
	Decision,
	FilterPlugin,
	NodeInfo,
	NodeSnapshot,
	PreFilterPlugin,
	ReservePlugin,
	ScorePlugin,
	pod_key,
)
from pathsched.source import ConfigMapSource, SourceOptions
from pathsched.store import ConfigStore

logger = logging.getLogger(__name__)

NAME = "LocalPathScheduling"

BASE_SCORE = 50
SCORE_PER_PATH = 10


class PolicyInitError(ConfigError):
	"""The plugin could not load its initial configuration."""


class PathPolicy(PreFilterPlugin, FilterPlugin, ScorePlugin, ReservePlugin):
	"""
	Admits and ranks nodes by the storage paths they declare.

	The configuration is re-read from its ConfigMap at the start of every
	scheduling attempt (PreFilter). Filter and Score reuse that snapshot.
	"""

	def __init__(
		self,
		source: ConfigMapSource,
		options: Optional[SourceOptions] = None,
		store: Optional[ConfigStore] = None,
		min_refresh_interval_s: float = 0.0,
		max_score: Optional[int] = None,
	) -> None:
		"""
		Build the plugin without loading anything; see PathPolicy.new.

		Args:
			source: Client used to fetch ConfigMaps
			options: ConfigMap coordinates (defaults when None)
			store: Snapshot holder (a fresh empty one when None)
			min_refresh_interval_s: Skip PreFilter reloads younger than this (0 reloads every time)
			max_score: Upper bound applied to node scores (None leaves them unbounded)
		"""
		self.source = source
		self.options = options or SourceOptions()
		self.store = store if store is not None else ConfigStore()
		self.min_refresh_interval_s = max(0.0, float(min_refresh_interval_s))
		self.max_score = max_score
		self._last_refresh: Optional[float] = None
		self._refresh_lock = threading.Lock()

	@classmethod
	def new(
		cls,
		args: Optional[Mapping[str, Any]] = None,
		source: Optional[ConfigMapSource] = None,
		store: Optional[ConfigStore] = None,
		**kwargs: Any,
	) -> "PathPolicy":
		"""
		Create the plugin and perform the initial configuration load.

		Raises:
			PolicyInitError: If the args cannot be decoded or the first load fails
		"""
		logger.info(f"Creating new {NAME} plugin")
		try:
			options = SourceOptions.from_args(args)
		except ConfigError as e:
			raise PolicyInitError(str(e)) from e
		logger.info(f"Plugin config: {options.to_dict()}")

		if source is None:
			try:
				source = ConfigMapSource()
			except Exception as e:
				raise PolicyInitError(f"failed to create Kubernetes client: {e}") from e

		policy = cls(source, options=options, store=store, **kwargs)
		try:
			policy.refresh_config()
		except ConfigError as e:
			raise PolicyInitError(f"failed to load initial config: {e}") from e
		return policy

	def name(self) -> str:
		return NAME

	def refresh_config(self) -> Configuration:
		"""
		Reload the configuration from its ConfigMap.

		The fetch runs without holding any lock; only the snapshot swap is
		serialized inside the store. On failure the previous snapshot stays.

		Raises:
			ConfigError: If the ConfigMap or key is missing or the data is malformed
		"""
		opts = self.options
		raw = self.source.read(opts)
		try:
			config = self.store.replace(raw)
		except ConfigError as e:
			raise type(e)(f"failed to load config data: {e}") from e
		with self._refresh_lock:
			self._last_refresh = time.monotonic()
		logger.info(
			f"Successfully loaded configuration from ConfigMap {opts.config_map_namespace}/"
			f"{opts.config_map_name} key {opts.config_key} ({len(config.entries)} entries)"
		)
		return config

	def _refresh_due(self) -> bool:
		if self.min_refresh_interval_s <= 0:
			return True
		with self._refresh_lock:
			if self._last_refresh is None:
				return True
			return time.monotonic() - self._last_refresh >= self.min_refresh_interval_s

	def pre_filter(self, pod: Mapping[str, Any], snapshot: NodeSnapshot) -> Decision:
		logger.debug(f"Running PreFilter for pod {pod_key(pod)}")

		if self._refresh_due():
			try:
				self.refresh_config()
			except ConfigError as e:
				# Keep scheduling on the previous snapshot
				logger.error(f"Failed to reload config in PreFilter: {e}")

		try:
			nodes = snapshot.list()
		except Exception as e:
			return Decision.error(f"error listing nodes: {e}")

		if not nodes:
			return Decision.unschedulable("no nodes available to schedule")

		config = self.store.current()
		if config.has_default_path():
			return Decision.success()

		if not any(config.is_node_allowed(n.name) for n in nodes if n.name is not None):
			return Decision.unschedulable("no nodes match the path configuration")

		return Decision.success()

	def filter(self, pod: Mapping[str, Any], node_info: Optional[NodeInfo]) -> Decision:
		node_name = node_info.name if node_info is not None else None
		logger.debug(f"Running Filter for pod {pod_key(pod)} on node {node_name}")

		if node_name is None:
			return Decision.error("node not found")

		if not self.store.is_node_allowed(node_name):
			return Decision.unschedulable("node is not in the allowed nodes list")

		return Decision.success()

	def score(self, pod: Mapping[str, Any], node_name: str, snapshot: NodeSnapshot) -> Tuple[int, Decision]:
		try:
			snapshot.get(node_name)
		except Exception as e:
			return 0, Decision.error(f"getting node {node_name!r} from snapshot: {e}")

		score = BASE_SCORE
		paths = self.store.paths_for(node_name)
		if paths:
			score += len(paths) * SCORE_PER_PATH
		if self.max_score is not None:
			score = min(score, self.max_score)

		logger.debug(f"Calculated score for pod {pod_key(pod)} on node {node_name}: {score}")
		return score, Decision.success()

	def reserve(self, pod: Mapping[str, Any], node_name: str) -> Decision:
		logger.debug(f"Running Reserve for pod {pod_key(pod)} on node {node_name}")
		return Decision.success()

	def unreserve(self, pod: Mapping[str, Any], node_name: str) -> None:
		logger.debug(f"Running Unreserve for pod {pod_key(pod)} on node {node_name}")
