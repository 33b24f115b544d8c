# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Template parser front-end.

`parse_template` wraps the single-shot parser with unknown-function recovery:
a call to a function the registry does not know is not a real error for
usage analysis, so the name is registered as a placeholder and the parse is
retried, up to a fixed number of distinct names.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, List

from tmplschema.errors import TemplateSyntaxError, UndefinedFunctionError

from .ast import Template
from .funcs import base_registry
from .parser import parse_with_registry

logger = logging.getLogger(__name__)

DEFAULT_MAX_UNKNOWN_FUNCS = 10


def parse_template(
	source: str,
	*,
	known_funcs: Iterable[str] = (),
	max_unknown_funcs: int = DEFAULT_MAX_UNKNOWN_FUNCS,
) -> Template:
	"""
	Parse template source, registering placeholders for unknown functions.

	At most `max_unknown_funcs` placeholder names are added; one more unknown
	name escalates to TemplateSyntaxError.
	"""
	funcs = base_registry(known_funcs)
	discovered: List[str] = []
	while True:
		try:
			template = parse_with_registry(source, funcs)
		except UndefinedFunctionError as exc:
			if len(discovered) >= max_unknown_funcs:
				raise TemplateSyntaxError(
					f"exceeded max retries ({max_unknown_funcs}) while resolving undefined functions: {exc.message}",
					span=exc.span,
				) from exc
			logger.debug("func: registering placeholder name=%s", exc.name)
			discovered.append(exc.name)
			funcs = funcs | {exc.name}
			continue
		return replace(template, placeholder_funcs=tuple(discovered))


__all__ = ["DEFAULT_MAX_UNKNOWN_FUNCS", "parse_template"]
