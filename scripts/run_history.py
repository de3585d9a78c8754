"""Print, export or prune the stored run history.

Usage:
    uv run python scripts/run_history.py
    uv run python scripts/run_history.py --out history.md --unit miles
    uv run python scripts/run_history.py --delete 1718000000000-ab12cd
    uv run python scripts/run_history.py --clear
"""

from __future__ import annotations

import argparse
import os
import sys

from dotenv import load_dotenv

load_dotenv()

from pacemaker.reporting.formatter import HistoryFormatter  # noqa: E402
from pacemaker.storage.store import RunHistoryStorage, SettingsStore  # noqa: E402


def main() -> None:
    ap = argparse.ArgumentParser(description="Pacemaker — run history")
    ap.add_argument("--db", default=os.environ.get("PACEMAKER_DB", "pacemaker.db"))
    ap.add_argument("--unit", choices=["km", "miles"], default=None, help="Display unit")
    ap.add_argument("--out", default="", help="Write Markdown to this file instead of stdout")
    ap.add_argument("--delete", metavar="RUN_ID", default="", help="Remove one run")
    ap.add_argument("--clear", action="store_true", help="Remove every run")
    args = ap.parse_args()

    unit = args.unit
    if unit is None:
        store = SettingsStore(args.db)
        try:
            unit = store.get().distance_unit
        finally:
            store.close()

    storage = RunHistoryStorage(args.db)
    try:
        if args.delete:
            if not storage.remove(args.delete):
                print(f"ERROR: no run with id {args.delete!r}", file=sys.stderr)
                sys.exit(1)
            print(f"Deleted run {args.delete}.")
            return
        if args.clear:
            print(f"Deleted {storage.clear_all()} run(s).")
            return
        runs = storage.list()
    finally:
        storage.close()

    formatter = HistoryFormatter(unit)
    if args.out:
        formatter.write(runs, args.out)
        print(f"Wrote {len(runs)} run(s) to {args.out}")
    else:
        print(formatter.format(runs), end="")


if __name__ == "__main__":
    main()
