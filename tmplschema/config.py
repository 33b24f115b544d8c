# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Analyzer configuration and logging setup.

Environment variables (CLI flags take precedence):
- TMPLSCHEMA_FUNCS              comma-separated custom function names
- TMPLSCHEMA_MAX_UNKNOWN_FUNCS  placeholder limit for unknown functions
- TMPLSCHEMA_LOG_LEVEL          DEBUG/INFO/WARNING/ERROR/CRITICAL
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import FrozenSet, Mapping, Optional

from tmplschema.parser import DEFAULT_MAX_UNKNOWN_FUNCS

logger = logging.getLogger(__name__)

ENV_FUNCS = "TMPLSCHEMA_FUNCS"
ENV_MAX_UNKNOWN_FUNCS = "TMPLSCHEMA_MAX_UNKNOWN_FUNCS"
ENV_LOG_LEVEL = "TMPLSCHEMA_LOG_LEVEL"

DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class AnalyzerOptions:
	"""
	Per-run analyzer settings.

	`known_funcs` are custom template functions registered up front, in
	addition to the builtins and the preset helper names.
	"""

	known_funcs: FrozenSet[str] = field(default_factory=frozenset)
	max_unknown_funcs: int = DEFAULT_MAX_UNKNOWN_FUNCS

	def __post_init__(self) -> None:
		if self.max_unknown_funcs < 0:
			raise ValueError(f"max_unknown_funcs must be >= 0, got {self.max_unknown_funcs}")


def options_from_env(environ: Optional[Mapping[str, str]] = None) -> AnalyzerOptions:
	env = os.environ if environ is None else environ
	funcs = frozenset(name.strip() for name in env.get(ENV_FUNCS, "").split(",") if name.strip())
	raw_limit = env.get(ENV_MAX_UNKNOWN_FUNCS, "").strip()
	if not raw_limit:
		return AnalyzerOptions(known_funcs=funcs)
	try:
		limit = int(raw_limit)
	except ValueError:
		raise ValueError(f"{ENV_MAX_UNKNOWN_FUNCS} must be an integer, got {raw_limit!r}") from None
	return AnalyzerOptions(known_funcs=funcs, max_unknown_funcs=limit)


def configure_logging(level: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> str:
	"""Configure root logging on stderr; returns the level actually used."""
	env = os.environ if environ is None else environ
	chosen = (level or env.get(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL).upper()
	if chosen not in LOG_LEVELS:
		logging.basicConfig(level=DEFAULT_LOG_LEVEL, format=LOG_FORMAT)
		logger.warning("Invalid log level: %s, using %s", chosen, DEFAULT_LOG_LEVEL)
		return DEFAULT_LOG_LEVEL
	logging.basicConfig(level=chosen, format=LOG_FORMAT)
	return chosen


__all__ = [
	"AnalyzerOptions",
	"DEFAULT_LOG_LEVEL",
	"ENV_FUNCS",
	"ENV_LOG_LEVEL",
	"ENV_MAX_UNKNOWN_FUNCS",
	"configure_logging",
	"options_from_env",
]
