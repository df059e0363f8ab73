"""Thread-safe holder for the current configuration snapshot."""

from __future__ import annotations

import logging
import threading
from typing import Optional, Tuple, Union

from pathsched.config import Configuration, parse_configuration

logger = logging.getLogger(__name__)


class ConfigStore:
	"""
	Holds exactly one Configuration snapshot at a time.

	Readers get the snapshot reference without locking; writers parse
	outside the lock and only swap the reference while holding it, so a
	reader sees either the old or the new snapshot, never a mix.
	"""

	def __init__(self, initial: Optional[Configuration] = None) -> None:
		self._lock = threading.Lock()
		self._config: Configuration = initial if initial is not None else Configuration()
		self._generation: int = 0

	@property
	def generation(self) -> int:
		"""Number of successful replacements so far."""
		return self._generation

	def replace(self, raw: Union[bytes, str]) -> Configuration:
		"""
		Parse raw and swap it in as the current snapshot.

		Raises:
			MalformedConfigError: If raw does not parse; the held snapshot is kept.
		"""
		config = parse_configuration(raw)
		with self._lock:
			self._config = config
			self._generation += 1
			generation = self._generation
		logger.debug(f"Loaded configuration generation {generation}: {len(config.entries)} entries")
		return config

	def current(self) -> Configuration:
		return self._config

	def has_default_path(self) -> bool:
		return self.current().has_default_path()

	def is_node_allowed(self, node_name: str) -> bool:
		return self.current().is_node_allowed(node_name)

	def paths_for(self, node_name: str) -> Optional[Tuple[str, ...]]:
		return self.current().paths_for(node_name)
