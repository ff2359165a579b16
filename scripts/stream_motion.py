#!/usr/bin/env python3
"""
Stream headphone attitude readings to a running Workwell server.

- Optionally calls /tracking/start before streaming and /tracking/stop after
- Replays a recorded CSV (columns: pitch, roll, yaw; radians unless --degrees)
  or synthesizes an upright / slouched / upright profile
- Posts batches to /motion/samples (server must run with MOTION_SOURCE=push)

Usage:
  python scripts/stream_motion.py --base-url http://127.0.0.1:8000 --duration-sec 60 --start --stop
"""
from __future__ import annotations

import argparse
import csv
import json
import math
import random
import sys
import time
from pathlib import Path
from typing import Dict, Iterator, List

import requests


def synthetic_profile(duration_s: float, rate_hz: float, slouch_deg: float) -> Iterator[Dict[str, float]]:
    """Upright for the first third, slouched for the middle third, upright again."""
    n = int(duration_s * rate_hz)
    for i in range(n):
        phase = i / max(1, n)
        target = slouch_deg if 1 / 3 <= phase < 2 / 3 else -5.0
        yield {
            "pitch": math.radians(target + random.gauss(0.0, 1.0)),
            "roll": math.radians(random.gauss(0.0, 2.0)),
            "yaw": math.radians(random.gauss(0.0, 4.0)),
        }


def replay_csv(path: Path, degrees: bool) -> Iterator[Dict[str, float]]:
    conv = math.radians if degrees else float
    with path.open("r", newline="", encoding="utf-8") as f:
        for row in csv.DictReader(f):
            try:
                yield {
                    "pitch": conv(float(row["pitch"])),
                    "roll": conv(float(row.get("roll") or 0.0)),
                    "yaw": conv(float(row.get("yaw") or 0.0)),
                }
            except (KeyError, ValueError):
                print(f"[warn] skipping bad row: {row}")


def post(base_url: str, path: str, payload: dict | None = None) -> dict:
    r = requests.post(f"{base_url}{path}", json=payload or {}, timeout=5)
    r.raise_for_status()
    return r.json() or {}


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--base-url", default="http://127.0.0.1:8000")
    ap.add_argument("--duration-sec", type=float, default=30.0)
    ap.add_argument("--rate-hz", type=float, default=30.0)
    ap.add_argument("--batch", type=int, default=5, help="readings per request")
    ap.add_argument("--slouch-deg", type=float, default=-28.0)
    ap.add_argument("--csv", type=Path, default=None, help="replay readings from CSV")
    ap.add_argument("--degrees", action="store_true", help="CSV values are degrees")
    ap.add_argument("--start", action="store_true", help="start tracking first")
    ap.add_argument("--stop", action="store_true", help="stop tracking at the end")
    args = ap.parse_args()

    base = args.base_url.rstrip("/")
    if args.start:
        body = post(base, "/tracking/start")
        if not body.get("success"):
            print(f"[error] start failed: {body.get('error')}")
            return 1

    readings = replay_csv(args.csv, args.degrees) if args.csv else synthetic_profile(
        args.duration_sec, args.rate_hz, args.slouch_deg
    )
    dt = 1.0 / max(0.1, float(args.rate_hz))
    batch: List[Dict[str, float]] = []
    sent = 0
    for reading in readings:
        batch.append(reading)
        if len(batch) >= args.batch:
            try:
                post(base, "/motion/samples", {"readings": batch})
                sent += len(batch)
            except requests.RequestException as exc:
                print(f"[warn] POST /motion/samples failed: {exc}")
            batch = []
        time.sleep(dt)
    if batch:
        post(base, "/motion/samples", {"readings": batch})
        sent += len(batch)

    result: dict = {"sent": sent}
    if args.stop:
        result["stop"] = (post(base, "/tracking/stop").get("data") or {}).get("session")
    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
