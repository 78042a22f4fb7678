#!/usr/bin/env python3
"""
Render a saved radialwalk result on an interactive map.

Usage:
    python visualize.py RESULT_JSON [--output PATH]

Examples:
    python -m radialwalk --lat 37.5665 --lon 126.9780 --json seoul.json
    python visualize.py seoul.json --output seoul_map.html
"""

import argparse
import json
from pathlib import Path

from radialwalk.map_view import save_map


def load_snapshot(path: str) -> dict:
    """Load a session snapshot written with --json."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    for key in ("markers", "flags", "routes"):
        if not isinstance(data.get(key, []), list):
            raise ValueError(f"'{key}' must be a list")
    return data


def main():
    parser = argparse.ArgumentParser(
        description="Render a saved radialwalk result on a map"
    )
    parser.add_argument("result", help="JSON file written by python -m radialwalk --json")
    parser.add_argument("--output", "-o", default="radialwalk_map.html",
                        help="Output HTML file (default: radialwalk_map.html)")

    args = parser.parse_args()

    if not Path(args.result).exists():
        print(f"Result file not found: {args.result}")
        return 1

    try:
        snapshot = load_snapshot(args.result)
        save_map(snapshot, args.output)
        print(f"Map created: {len(snapshot.get('markers', []))} markers, "
              f"{len(snapshot.get('flags', []))} flags")
        print(f"\nMap saved to: {args.output}")
        print(f"Open in browser: file://{Path(args.output).absolute()}")

    except (OSError, ValueError, KeyError) as e:
        print(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    exit(main())
