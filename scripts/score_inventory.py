#!/usr/bin/env python3
"""Print posture and maturity for every tracked object in a snapshot file.

Usage:
    python scripts/score_inventory.py
    python scripts/score_inventory.py --snapshot data/onelist_snapshot.json
    python scripts/score_inventory.py --profile profiles/default/scoring.yaml --as-of 2026-01-31
    python scripts/score_inventory.py --json

Snapshot path and scoring profile default to ONELIST_SNAPSHOT_PATH and
ONELIST_SCORING_PROFILE. Objects are listed worst posture first.
Exits 0 on success, 1 on an invalid profile or date.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from onelist.config import get_settings
from onelist.services.compliance import days_since, is_stale
from onelist.services.maturity import compute_mlg_score
from onelist.services.posture import (
    ScoringProfileError,
    compute_inventory_posture,
    resolve_scoring_config,
)
from onelist.services.store import JsonFileSnapshotStore, load_snapshot

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Score every object in a OneList snapshot.")
    parser.add_argument("--snapshot", default=settings.snapshot_path, help="Snapshot JSON file")
    parser.add_argument(
        "--profile",
        default=settings.scoring_profile,
        help="Scoring profile YAML (default: built-in constants)",
    )
    parser.add_argument("--as-of", default=None, help="Reference date YYYY-MM-DD (default: today)")
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of a table")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    args = _parse_args(argv)

    try:
        as_of = date.fromisoformat(args.as_of) if args.as_of else date.today()
        cfg = resolve_scoring_config(args.profile)
    except (ValueError, ScoringProfileError, FileNotFoundError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    snapshot = load_snapshot(JsonFileSnapshotStore(args.snapshot))
    results = compute_inventory_posture(snapshot, as_of=as_of, _cfg=cfg)
    rows = []
    for obj in snapshot.objects:
        posture = results[obj.id]
        maturity = compute_mlg_score(snapshot.mlg_assessments.get(obj.id), obj)
        rows.append({
            "id": obj.id,
            "name": obj.list_name,
            "type": obj.type,
            "criticality": obj.criticality,
            "posture": posture.to_dict(),
            "maturity": {"score": maturity.score, "label": maturity.tier.label},
            "days_since_review": days_since(obj.last_review_date, as_of),
            "stale": is_stale(obj.last_review_date, as_of, settings.staleness_days),
        })
    rows.sort(key=lambda r: (r["posture"]["order"], r["posture"]["score"]))

    if args.json:
        print(json.dumps(rows, indent=2, default=str))
        return 0

    logger.info("Scored %d objects from %s as of %s", len(rows), args.snapshot, as_of)
    for row in rows:
        posture = row["posture"]
        print(
            f"{posture['label']:<9} {posture['score']:>3}  "
            f"MLG {row['maturity']['score']:>4} ({row['maturity']['label']})  "
            f"{'STALE ' if row['stale'] else ''}{row['name']} [{row['type']}, {row['criticality']}]"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
