"""
Shared pytest fixtures for the research graph service.

Provides:
  - A small raw research document in the nested Research/categories shape
  - A matching lookup table
  - Data files on disk plus a FastAPI TestClient pointed at them
"""

import json
import os
import sys
from pathlib import Path
from typing import Any, Dict

import pytest

# ---------------------------------------------------------------------------
# Ensure the project root is on sys.path so we can import app modules
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("RESEARCH_PRELOAD", "0")


# ---------------------------------------------------------------------------
# Raw data fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def research_document() -> Dict[str, Any]:
    """Two trees; revisions differ in casing and list nesting on purpose."""
    return {
        "Research": {
            "categories": {
                "ResearchTree": [
                    {
                        "category": "gui/research/category/industry",
                        "nodes": {
                            "ResearchNode": [
                                {
                                    "research_name": "gui/research/name/mining",
                                    "icon": "icons/mining.png",
                                    "position": {"x": "0", "y": "1.5"},
                                    "research_costs": {
                                        "ResearchCost": {"resource": "carbonium", "count": "100"},
                                    },
                                    "research_awards": {
                                        "ResearchAward": [
                                            {"blueprint": "buildings/resources/furnace_lvl_2", "is_visible": "1"},
                                            {"blueprint": "resources/carbonium", "is_visible": "0"},
                                        ],
                                    },
                                },
                                {
                                    "research_name": "gui/research/name/smelting",
                                    "position": {"x": 1, "y": 1},
                                    "requirements": {
                                        "ResearchNodeRequirement": {"research_name": "gui/research/name/mining"},
                                    },
                                    "research_costs": {
                                        "ResearchCost": [
                                            {"resource": "carbonium", "count": 50},
                                            {"resource": "ironium", "count": "n/a"},
                                        ],
                                    },
                                    "requirement_tooltip": "gui/research/hint/smelting",
                                },
                            ],
                        },
                    },
                    {
                        "Nodes": {
                            "researchNode": {
                                "research_name": "gui/research/name/flamers",
                                "Requirements": {
                                    "researchNodeRequirement": [
                                        {"research_name": "gui/research/name/smelting"},
                                        {"research_name": "gui/research/name/smelting"},
                                    ],
                                },
                                "costs": {"researchCost": {"resource": "ironium", "count": 25}},
                                "awards": {"researchAward": {"blueprint": "items/weapons/flamer_item"}},
                            },
                        },
                    },
                ],
            },
        },
    }


@pytest.fixture()
def lookup() -> Dict[str, str]:
    return {
        "gui/research/name/mining": "Mining",
        "gui/research/description/mining": "Dig \u201cdeeper\u201d \u2014 faster\u2026",
        "gui/research/name/smelting": "Smelting <img=gui/icons/fire>  Basics",
        "gui/research/hint/smelting": "Requires\u00a0a furnace",
        "gui/research/name/flamers": "Flamers",
        "gui/research/category/industry": "Industry",
        "display/building_name/furnace": "Furnace",
        "display/building_description/furnace": "Melts ore.",
        "display/weapon_name/flamethrower": "Flamethrower",
        "display/weapon_description/flamethrower": "Short range fire.",
        "display/resource_name/carbonium": "Carbonium",
        "display/resource_name/ironium": "Ironium",
    }


# ---------------------------------------------------------------------------
# FastAPI TestClient
# ---------------------------------------------------------------------------

@pytest.fixture()
def data_files(tmp_path, monkeypatch, research_document, lookup):
    """Write the fixtures to disk and point data_source at them."""
    import data_source

    tree_path = tmp_path / "research_tree.json"
    lookup_path = tmp_path / "gui_lookup.json"
    tree_path.write_text(json.dumps(research_document), encoding="utf-8")
    lookup_path.write_text(json.dumps(lookup), encoding="utf-8")

    monkeypatch.setattr(data_source, "RESEARCH_TREE_PATH", tree_path)
    monkeypatch.setattr(data_source, "LOOKUP_PATH", lookup_path)
    data_source.reset_research_graph()
    yield {"tree": tree_path, "lookup": lookup_path}
    data_source.reset_research_graph()


@pytest.fixture()
def client(data_files):
    """Starlette TestClient wired to the FastAPI app, serving the fixture data."""
    from fastapi.testclient import TestClient
    from main import app

    with TestClient(app) as c:
        yield c
