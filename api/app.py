from __future__ import annotations
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .registry import is_known, list_algorithms
from .runner import run_hierarchy, run_route

app = FastAPI(title="Navigator API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class HierarchyRequest(BaseModel):
    locations: List[Dict[str, Any]]
    warehouse_id: Optional[int] = None
    warehouse_code: Optional[str] = None
    quants: List[Dict[str, Any]] = Field(default_factory=list)


class RouteRequest(HierarchyRequest):
    move_lines: List[Dict[str, Any]] = Field(default_factory=list)
    start: List[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0])
    algorithm: str = "best"


@app.get("/api/algorithms")
def get_algorithms():
    return {"algorithms": list_algorithms()}


@app.post("/api/hierarchy")
def api_hierarchy(req: HierarchyRequest):
    try:
        return run_hierarchy(req.locations, req.warehouse_id, req.warehouse_code, req.quants)
    except (KeyError, ValueError) as e:
        raise HTTPException(status_code=422, detail=f"invalid input: {e}")


@app.post("/api/route")
def api_route(req: RouteRequest):
    if not is_known(req.algorithm):
        raise HTTPException(status_code=400, detail=f"unknown algorithm: {req.algorithm}")
    try:
        return run_route(
            req.locations, req.warehouse_id, req.warehouse_code,
            req.move_lines, req.quants, req.start, req.algorithm,
        )
    except (KeyError, ValueError) as e:
        raise HTTPException(status_code=422, detail=f"invalid input: {e}")
