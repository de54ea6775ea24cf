"""Command line entry point: promo-governor."""

import argparse
import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from promo_governor.governor.control import apply_control_patch
from promo_governor.governor.validation import GovernanceViolationError
from promo_governor.models.config import KitConfig
from promo_governor.pipeline.runner import (
    load_kit_config,
    run_decisions,
    run_recommendation_patch,
)
from promo_governor.store.documents import DocumentStore

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="promo-governor",
        description="Promotion decisions and governed recommendation patches",
    )
    parser.add_argument("--data-dir", default=None, help="Data directory (overrides config paths.dataDir)")
    parser.add_argument("--config", default=None, help="kit.config.json path (default: $KIT_CONFIG or ./kit.config.json)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    decisions = sub.add_parser("decisions", help="Score the promo queue and write promo-decisions.json")
    decisions.add_argument("--dry-run", action="store_true", help="Compute and print, write nothing")

    patch = sub.add_parser("patch", help="Translate recommendations into governed patches")
    patch.add_argument("--dry-run", action="store_true", help="Compute and print, write nothing")
    patch.add_argument("--max-patches", type=int, default=None, help="Override guardrails.maxDataPatchesPerRun")

    control = sub.add_parser("control-patch", help="Apply a human control patch")
    control.add_argument("patch_json", help='e.g. \'{"governance.json":{"decisionsFrozen":true}}\'')

    return parser.parse_args(argv)


def _resolve_store(args: argparse.Namespace, config: KitConfig, config_path: Optional[str]) -> DocumentStore:
    if args.data_dir:
        return DocumentStore(args.data_dir)
    root = Path(config_path).parent if config_path else Path(".")
    return DocumentStore(root / config.paths.data_dir)


def _cmd_decisions(args, store, config, as_of) -> int:
    report = run_decisions(store, config, as_of, dry_run=args.dry_run)
    prefix = "[dry-run] " if args.dry_run else ""
    print(f"{prefix}Decisions: {len(report.decisions)}")
    print(f"{prefix}Budget: tier={report.budget.tier}, allowed={report.budget.items_allowed}")
    for d in report.decisions:
        print(f"{prefix}  {d.slug}: {d.action.value} ({d.score})")
    for w in report.warnings:
        print(f"{prefix}Warning: {w}")
    return 0


def _cmd_patch(args, store, config, as_of) -> int:
    result = run_recommendation_patch(
        store, config, as_of, dry_run=args.dry_run, max_patches=args.max_patches
    )
    a = result.artifact
    prefix = "[dry-run] " if args.dry_run else ""
    if result.files_written:
        print(f"Applied patches to: {', '.join(result.files_written)}")
    print(f"{prefix}Patches: {len(a.patches)}")
    print(f"{prefix}Advisory: {len(a.advisory_notes)}")
    print(f"{prefix}Frozen: {len(a.frozen_actions)}")
    print(f"{prefix}Risk notes: {len(a.risk_notes)}")
    return 0


def _cmd_control_patch(args, store) -> int:
    try:
        patch = json.loads(args.patch_json)
    except ValueError as exc:
        print(f"Error: Invalid JSON: {exc}", file=sys.stderr)
        return 1
    try:
        result = apply_control_patch(patch, store)
    except GovernanceViolationError as exc:
        print("Validation errors:", file=sys.stderr)
        for err in exc.errors:
            print(f"  - {err}", file=sys.stderr)
        return 1
    print(f"Applied patch to: {', '.join(result.applied)}")
    for note in result.risk_notes:
        print(f"  - {note}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config_path = args.config or os.environ.get("KIT_CONFIG")
    config = load_kit_config(config_path or "kit.config.json")
    store = _resolve_store(args, config, config_path)
    as_of = datetime.now(timezone.utc)

    try:
        if args.command == "decisions":
            return _cmd_decisions(args, store, config, as_of)
        if args.command == "patch":
            return _cmd_patch(args, store, config, as_of)
        return _cmd_control_patch(args, store)
    except GovernanceViolationError as exc:
        for err in exc.errors:
            logger.error(err)
        return 1
    except OSError as exc:
        logger.error("I/O failure, run aborted: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
