from __future__ import annotations

import json
import sys
from decimal import Decimal
from pathlib import Path

from payroll_engine.config.rule_table import RuleTableRegistry, default_rules_path, rule_table_from_dict
from payroll_engine.exceptions import ConfigurationError


def load_document(path: str | Path = None) -> dict:
    """Load a rule table JSON document from the given path."""
    path = Path(path) if path is not None else default_rules_path()
    if not path.exists():
        print(f"Error: File not found at {path}")
        sys.exit(1)

    print(f"Loading rule tables from: {path}")
    with path.open(encoding="utf-8") as f:
        return json.load(f, parse_float=Decimal)


def audit_document(data: dict) -> list[str]:
    """Return a list of validation errors for every rule table in the document."""
    rows = data.get("rule_tables") if isinstance(data, dict) else None
    if not isinstance(rows, list):
        return ["Missing required key: rule_tables (a list)"]
    if not rows:
        return ["rule_tables must not be empty"]

    errors: list[str] = []
    tables = []
    for i, row in enumerate(rows, 1):
        if not isinstance(row, dict):
            errors.append(f"rule_tables row {i} is not a dict")
            continue
        try:
            tables.append(rule_table_from_dict(row))
        except ConfigurationError as e:
            errors.append(f"rule_tables row {i}: {e.message}")

    if tables and not errors:
        try:
            RuleTableRegistry(tables)
        except ConfigurationError as e:
            errors.append(e.message)

    return errors


def main(path: str = None) -> None:
    """Audit a rule table file and print results."""
    data = load_document(path)
    errors = audit_document(data)

    if errors:
        print("\n--- AUDIT FAILED ---")
        for err in errors:
            print(f"❌ {err}")
        sys.exit(1)

    print(f"\nAll checks passed for {len(data['rule_tables'])} rule table(s)! ✅")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Audit a rule tables JSON file")
    parser.add_argument(
        "--path",
        default=None,
        help="Path to rule_tables.json (defaults to the file bundled with payroll_engine)",
    )
    args = parser.parse_args()
    main(args.path)
