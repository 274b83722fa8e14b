"""
Command-line access to the engine for authors and batch jobs.

  form-engine catalog
  form-engine validate template.json
  form-engine lint template.json
  form-engine rows template.json [--values values.json]
  form-engine submit template.json values.json
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from form_engine.catalog import types_by_category
from form_engine.config import configure_logging, load_env_files, load_settings
from form_engine.contract import validate_template_payload
from form_engine.errors import TemplateFormatError
from form_engine.layout import pack_visible_rows, row_widths, rows_to_ids
from form_engine.lint import has_errors, lint_template
from form_engine.schemas.template import FormTemplate
from form_engine.serialization import template_from_dict
from form_engine.submission import submit


def _read_json(path: str) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def _print_json(obj: Any) -> None:
    print(json.dumps(obj, ensure_ascii=False, indent=2))


def _load_template(path: str) -> FormTemplate:
    return template_from_dict(_read_json(path))


def _cmd_catalog(args: argparse.Namespace) -> int:
    _print_json(types_by_category())
    return 0


def _cmd_validate(args: argparse.Namespace) -> int:
    violations = validate_template_payload(_read_json(args.template))
    if violations:
        print("Template contract check failed:")
        for v in violations:
            print(f"- {v}")
        return 1
    print("Template contract check passed")
    return 0


def _cmd_lint(args: argparse.Namespace) -> int:
    issues = lint_template(_load_template(args.template))
    _print_json([i.model_dump(by_alias=True) for i in issues])
    return 1 if has_errors(issues) else 0


def _cmd_rows(args: argparse.Namespace) -> int:
    tpl = _load_template(args.template)
    values: Dict[str, Any] = _read_json(args.values) if args.values else {}
    rows = pack_visible_rows(tpl, values)
    _print_json({"rows": rows_to_ids(rows), "widths": row_widths(rows)})
    return 0


def _cmd_submit(args: argparse.Namespace) -> int:
    tpl = _load_template(args.template)
    result = submit(tpl, _read_json(args.values))
    _print_json(result.model_dump(by_alias=True))
    return 0 if result.ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="form-engine", description="Form template tooling")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("catalog", help="List field types grouped by category")
    p.set_defaults(func=_cmd_catalog)

    p = sub.add_parser("validate", help="Check a template file against the JSON contract")
    p.add_argument("template")
    p.set_defaults(func=_cmd_validate)

    p = sub.add_parser("lint", help="Report authoring defects in a template")
    p.add_argument("template")
    p.set_defaults(func=_cmd_lint)

    p = sub.add_parser("rows", help="Show the packed display rows")
    p.add_argument("template")
    p.add_argument("--values", default=None, help="JSON file with current values (applies conditional visibility)")
    p.set_defaults(func=_cmd_rows)

    p = sub.add_parser("submit", help="Validate a values file against a template")
    p.add_argument("template")
    p.add_argument("values")
    p.set_defaults(func=_cmd_submit)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_env_files()
    configure_logging(load_settings())
    args = build_parser().parse_args(argv)
    try:
        return int(args.func(args))
    except (OSError, json.JSONDecodeError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except TemplateFormatError as e:
        print(f"error: {e}", file=sys.stderr)
        for v in e.violations:
            print(f"- {v}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
