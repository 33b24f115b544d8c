# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Command-line driver: analyze template files and print their schemas.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

from tmplschema.config import LOG_LEVELS, AnalyzerOptions, configure_logging, options_from_env
from tmplschema.core.diagnostics import Diagnostic
from tmplschema.core.span import Span
from tmplschema.pipeline import TemplateUnit, analyze_units

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog="tmplschema", description="Infer data schemas from Go text/template files")
	parser.add_argument("source", type=Path, nargs="+", help="Template file(s) to analyze")
	parser.add_argument(
		"--json",
		action="store_true",
		help="Emit schemas and diagnostics as one JSON document (exit_code/templates/diagnostics)",
	)
	parser.add_argument(
		"--func",
		dest="funcs",
		action="append",
		default=[],
		metavar="NAME",
		help="Custom template function name (repeatable)",
	)
	parser.add_argument(
		"--max-unknown-funcs",
		type=int,
		default=None,
		metavar="N",
		help="How many unknown function names to tolerate before failing (default: 10)",
	)
	parser.add_argument("--jobs", type=int, default=1, metavar="N", help="Analyze up to N files in parallel")
	parser.add_argument(
		"--log-level",
		choices=LOG_LEVELS,
		type=str.upper,
		default=None,
		help="Logging level (default: $TMPLSCHEMA_LOG_LEVEL or WARNING)",
	)
	return parser


def main(argv: List[str] | None = None) -> int:
	"""
	Analyze each template file and print its schema.

	With --json, prints a single document with an exit_code, the schema of
	every template that succeeded and structured diagnostics for those that
	failed; otherwise schemas go to stdout as indented JSON and errors to
	stderr as `file:line:col: error: message`.
	"""
	parser = _build_parser()
	args = parser.parse_args(argv)
	configure_logging(args.log_level)

	try:
		env_opts = options_from_env()
		options = AnalyzerOptions(
			known_funcs=env_opts.known_funcs | frozenset(args.funcs),
			max_unknown_funcs=env_opts.max_unknown_funcs if args.max_unknown_funcs is None else args.max_unknown_funcs,
		)
	except ValueError as exc:
		parser.error(str(exc))

	diagnostics: List[Diagnostic] = []
	units: List[TemplateUnit] = []
	for path in args.source:
		try:
			source = path.read_text(encoding="utf-8")
		except (OSError, UnicodeDecodeError) as exc:
			diagnostics.append(Diagnostic(message=f"cannot read template: {exc}", phase="io", span=Span(file=str(path))))
			continue
		units.append(TemplateUnit(name=str(path), source=source, group=path.parent.name or None))

	results = analyze_units(units, options, jobs=args.jobs)
	templates = []
	for res in results:
		if res.schema is not None:
			templates.append({"name": res.unit.name, "group": res.unit.group, "schema": res.schema.to_dict()})
		else:
			diagnostics.append(res.diagnostic())

	exit_code = 1 if diagnostics else 0
	if args.json:
		payload = {
			"exit_code": exit_code,
			"templates": templates,
			"diagnostics": [d.to_json() for d in diagnostics],
		}
		print(json.dumps(payload))
		return exit_code

	for tmpl in templates:
		print(f"# {tmpl['name']}")
		print(json.dumps(tmpl["schema"], indent=2))
	for d in diagnostics:
		print(d.render(), file=sys.stderr)
	return exit_code


if __name__ == "__main__":
	sys.exit(main())
