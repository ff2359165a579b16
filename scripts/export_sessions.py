#!/usr/bin/env python3
"""
Download stored posture sessions as CSV and print a summary.

Usage:
  python scripts/export_sessions.py --base-url http://127.0.0.1:8000 --out exports/posture_sessions.csv --timeframe month
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import requests


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--base-url", default="http://127.0.0.1:8000")
    ap.add_argument("--out", type=Path, default=Path("exports/posture_sessions.csv"))
    ap.add_argument("--timeframe", choices=["today", "week", "month", "all"], default="all", help="timeframe of the printed summary")
    args = ap.parse_args()

    base = args.base_url.rstrip("/")
    try:
        r = requests.get(f"{base}/history/export", timeout=10)
        r.raise_for_status()
    except requests.RequestException as exc:
        print(f"[error] could not download export: {exc}")
        return 1

    args.out.parent.mkdir(parents=True, exist_ok=True)
    args.out.write_text(r.text, encoding="utf-8")

    summary = requests.get(f"{base}/history/summary", params={"timeframe": args.timeframe}, timeout=10)
    summary.raise_for_status()
    data = (summary.json() or {}).get("data") or {}
    print(json.dumps({
        "out": str(args.out),
        "rows": max(0, len(r.text.splitlines()) - 1),
        "timeframe": data.get("timeframe"),
        "average_poor_posture": data.get("average_poor_posture"),
        "total_session_time": data.get("total_session_time_label"),
        "best_posture_score": data.get("best_posture_score"),
    }, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
