"""
Research graph API routes.

Handles:
  /api/research/graph
  /api/research/categories
  /api/research/nodes/{key}
  /api/research/closure/{key}
  /api/research/costs
  /api/research/reload
"""

from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

import closure_service
import data_source
import graph_service

router = APIRouter(tags=["research"])


class CostReq(BaseModel):
    order: List[str] = Field(default_factory=list)


@router.get("/api/research/graph")
def api_research_graph() -> Dict[str, Any]:
    graph, node_count = data_source.get_research_graph()
    return graph_service.graph_to_payload(graph, node_count=node_count)


@router.get("/api/research/categories")
def api_research_categories() -> Dict[str, Any]:
    graph, _ = data_source.get_research_graph()
    return {"categories": graph_service.derive_categories(graph)}


@router.get("/api/research/nodes/{key:path}")
def api_research_node(key: str) -> Dict[str, Any]:
    graph, _ = data_source.get_research_graph()
    node = graph.get(key)
    if node is None:
        raise HTTPException(status_code=404, detail=f"Research node '{key}' not found")
    payload = node.to_dict()
    payload["display_name"] = graph_service.display_name(node)
    return payload


@router.get("/api/research/closure/{key:path}")
def api_research_closure(key: str) -> Dict[str, Any]:
    graph, _ = data_source.get_research_graph()
    return closure_service.closure_payload(graph, key)


@router.post("/api/research/costs")
def api_research_costs(req: CostReq) -> Dict[str, Any]:
    graph, _ = data_source.get_research_graph()
    return {"costs": closure_service.sum_costs(graph, req.order)}


@router.post("/api/research/reload")
def api_research_reload() -> Dict[str, Any]:
    try:
        graph, node_count = data_source.reload_research_graph()
    except data_source.ResearchDataError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"ok": True, "stats": graph_service.graph_stats(graph, node_count)}
