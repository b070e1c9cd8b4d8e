"""
Rendering Configuration

Purpose: Load rendering, output and logging settings from YAML.

Responsibilities:
- Read config.yml (bundled next to this module by default)
- Expose typed accessors with defaults for missing keys
- Provide a lazily created default instance
"""

import os
from typing import Any, Dict, Optional

import yaml

__all__ = ["RenderConfigLoader", "get_config", "DEFAULT_TIME_FORMAT", "DEFAULT_JSON_INDENT"]

DEFAULT_TIME_FORMAT = "%Y-%m-%d %H:%M"
DEFAULT_JSON_INDENT = 2
DEFAULT_OUTPUT_DIR = "out"
DEFAULT_LOG_LEVEL = "INFO"


class RenderConfigLoader:
	"""Load issue body configuration (render, output and logging)."""

	def __init__(self, config_path: str) -> None:
		self._config_path = config_path
		self._config = self._load()

	def _load(self) -> Dict[str, Any]:
		if not os.path.isfile(self._config_path):
			raise FileNotFoundError(f"Render config not found: {self._config_path}")
		with open(self._config_path, "r", encoding="utf-8") as f:
			try:
				data = yaml.safe_load(f) or {}
			except yaml.YAMLError as e:
				raise ValueError(f"Render config is not valid YAML: {self._config_path}: {e}") from e
		if not isinstance(data, dict):
			raise ValueError(f"Render config must be a mapping: {self._config_path}")
		return data

	@property
	def render_config(self) -> Dict[str, Any]:
		return self._config.get("render", {}) or {}

	@property
	def time_format(self) -> str:
		return str(self.render_config.get("time_format") or DEFAULT_TIME_FORMAT)

	@property
	def json_indent(self) -> int:
		indent = self.render_config.get("json_indent", DEFAULT_JSON_INDENT)
		try:
			return max(0, int(indent))
		except (TypeError, ValueError):
			return DEFAULT_JSON_INDENT

	def get_output_dir(self) -> str:
		"""Get output directory; relative paths stay relative to the working directory."""
		output = self._config.get("output", {}) or {}
		return str(output.get("dir") or DEFAULT_OUTPUT_DIR)

	def get_log_level(self) -> str:
		logging_config = self._config.get("logging", {}) or {}
		return str(logging_config.get("level") or DEFAULT_LOG_LEVEL).upper()


def _build_config_path() -> str:
	config_dir = os.path.dirname(__file__)
	return os.path.join(config_dir, "config.yml")


_CONFIG_LOADER: Optional[RenderConfigLoader] = None


def get_config() -> RenderConfigLoader:
	"""Lazy-load the bundled RenderConfigLoader singleton."""
	global _CONFIG_LOADER
	if _CONFIG_LOADER is None:
		_CONFIG_LOADER = RenderConfigLoader(_build_config_path())
	return _CONFIG_LOADER
