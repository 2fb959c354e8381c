import logging
import os
from typing import Any, Dict

from fastapi import FastAPI

import data_source
from research_router import router as research_router

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(message)s",
)

app = FastAPI()
app.include_router(research_router)


@app.on_event("startup")
def _startup():
    if os.environ.get("RESEARCH_PRELOAD", "1") != "1":
        return
    try:
        data_source.get_research_graph()
    except data_source.ResearchDataError as exc:
        logging.warning("Research graph preload failed: %s", exc)


@app.get("/api/health")
def api_health() -> Dict[str, Any]:
    return {
        "ok": True,
        "service": "research-graph",
    }
