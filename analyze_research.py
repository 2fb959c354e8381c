"""Normalize a research tree document into a graph payload with stats."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

from data_source import ResearchDataError, load_json_file, load_lookup
from graph_service import ResearchInputError, build_graph_payload
from normalize_service import extract_research_records


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the research graph and save it as JSON.")
    parser.add_argument("research_tree", help="Research tree JSON document.")
    parser.add_argument("lookup", nargs="?", default="", help="Optional key -> text lookup JSON.")
    parser.add_argument("-o", "--output-path", default="", help="Where to save the graph JSON (stdout when omitted).")
    return parser.parse_args(argv)


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    tree_path = Path(args.research_tree)
    if not tree_path.exists():
        print(f"Input not found: {tree_path}", file=sys.stderr)
        return 2

    try:
        nodes = extract_research_records(load_json_file(tree_path))
        lookup = load_lookup(Path(args.lookup)) if args.lookup else None
        payload = build_graph_payload(nodes, lookup)
    except (ResearchDataError, ResearchInputError) as exc:
        logging.error("Research graph build failed: %s", exc)
        return 1

    text = json.dumps(payload, ensure_ascii=False, indent=2)
    if args.output_path:
        output_path = Path(args.output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text, encoding="utf-8")
        print(f"Research graph saved to: {output_path.resolve()}")
        print("Counts:", f"nodes={payload['stats']['nodes']}", f"roots={payload['stats']['roots']}")
    else:
        sys.stdout.write(text + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
