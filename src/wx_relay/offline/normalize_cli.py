"""Run the normalizer on saved model output without calling watsonx.ai."""
from __future__ import annotations
import argparse
import json
import logging
import random
import sys

from wx_relay.common.logging_setup import setup_logging
from wx_relay.normalize.lists import normalize_list
from wx_relay.normalize.tables import normalize_table

LOGGER = logging.getLogger("wxrelay.offline.normalize")

def run(args: argparse.Namespace, text: str) -> dict:
    if args.mode == "list":
        return {"data": normalize_list(text, args.count)}
    rng = random.Random(args.seed) if args.seed is not None else None
    return normalize_table(text, args.prompt, args.rows, args.cols, rng=rng).to_dict()

def main(argv: list[str] | None = None) -> None:
    setup_logging()
    ap = argparse.ArgumentParser(description="Normalize raw model output into a list or table")
    ap.add_argument("--mode", choices=["list", "table"], default="list")
    ap.add_argument("--text", help="Raw model text; read from stdin when omitted")
    ap.add_argument("--count", type=int, default=5, help="List length (list mode)")
    ap.add_argument("--rows", type=int, default=5, help="Row count (table mode)")
    ap.add_argument("--cols", type=int, default=4, help="Column count (table mode)")
    ap.add_argument("--prompt", default="", help="Original prompt, used for fallback headers")
    ap.add_argument("--seed", type=int, default=None, help="Seed for fallback rows")
    args = ap.parse_args(argv)

    if min(args.count, args.rows, args.cols) < 0:
        ap.error("--count, --rows and --cols must be >= 0")

    text = args.text if args.text is not None else sys.stdin.read()
    LOGGER.debug("Normalizing %s chars in %s mode", len(text), args.mode)
    print(json.dumps(run(args, text), indent=2))

if __name__ == "__main__":
    main()
