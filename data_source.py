import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from graph_service import Graph, build_graph
from normalize_service import extract_research_records

APP_DIR = Path(__file__).resolve().parent
DATA_DIR = Path(os.environ.get("RESEARCH_DATA_DIR", str(APP_DIR / "data")))
RESEARCH_TREE_PATH = Path(os.environ.get("RESEARCH_TREE_PATH", str(DATA_DIR / "research_tree.json")))
LOOKUP_PATH = Path(os.environ.get("RESEARCH_LOOKUP_PATH", str(DATA_DIR / "gui_lookup.json")))

_GRAPH_LOCK = threading.Lock()


class ResearchDataError(ValueError):
    pass


def load_json_file(path: Path) -> Any:
    if not path.exists():
        raise ResearchDataError(f"Research data not found: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ResearchDataError(f"Invalid JSON in {path}: {exc}") from exc


def load_lookup(path: Optional[Path] = None) -> Optional[Dict[str, str]]:
    """Flat key -> text table; None when the file is absent, since the lookup is optional."""
    path = LOOKUP_PATH if path is None else path
    if not path.exists():
        logging.info("No lookup table at %s; building without display text", path)
        return None
    raw = load_json_file(path)
    if not isinstance(raw, dict):
        raise ResearchDataError(f"Top-level JSON in {path} must be an object")
    return {str(k): v for k, v in raw.items() if isinstance(v, str)}


def load_research_graph(
    tree_path: Optional[Path] = None,
    lookup_path: Optional[Path] = None,
) -> Tuple[Graph, int]:
    """Build a graph from files; returns the graph and the normalized record count."""
    document = load_json_file(RESEARCH_TREE_PATH if tree_path is None else tree_path)
    nodes = extract_research_records(document)
    graph = build_graph(nodes, load_lookup(lookup_path))
    return graph, len(nodes)


_current_graph: Optional[Tuple[Graph, int]] = None


def get_research_graph() -> Tuple[Graph, int]:
    """Built graph and record count; built on first use and shared afterwards."""
    global _current_graph
    if _current_graph is None:
        with _GRAPH_LOCK:
            if _current_graph is None:
                _current_graph = load_research_graph()
    return _current_graph


def reload_research_graph() -> Tuple[Graph, int]:
    """Rebuild from disk and swap the reference; readers never see a half-linked graph."""
    global _current_graph
    with _GRAPH_LOCK:
        fresh = load_research_graph()
        _current_graph = fresh
    return fresh


def reset_research_graph() -> None:
    global _current_graph
    with _GRAPH_LOCK:
        _current_graph = None
