"""Read-only API routes. Each request loads a fresh graph snapshot in a worker thread."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, Field

from code_deps.analysis.impact import DEFAULT_IMPACT_DEPTH
from code_deps.analysis.query import DEFAULT_QUERY_DEPTH
from code_deps.analysis.stale import DEFAULT_STALE_DEPTH
from code_deps.config import ProjectConfig
from code_deps.errors import ArtifactMissingError, UnresolvedReferenceError
from code_deps.pipeline import load_snapshot, run_impact, run_prioritize, run_query, run_stale
from code_deps.storage import graph_to_dict

router = APIRouter(prefix="/api")


# --- Request models ---

class ImpactRequest(BaseModel):
    files: list[str]
    depth: int = DEFAULT_IMPACT_DEPTH


class StaleRequest(BaseModel):
    changed: list[str] = Field(default_factory=list)
    depth: int = DEFAULT_STALE_DEPTH
    tests: bool = False


class PrioritizeRequest(BaseModel):
    failing: list[str] = Field(default_factory=list)


def _config(request: Request) -> ProjectConfig:
    return request.app.state.config


async def _run(fn, *args, **kwargs):
    """Run a pipeline call off the event loop and map domain errors to HTTP."""
    try:
        return await asyncio.to_thread(fn, *args, **kwargs)
    except ArtifactMissingError as e:
        raise HTTPException(404, str(e))
    except UnresolvedReferenceError as e:
        raise HTTPException(404, str(e))


# --- Endpoints ---

@router.get("/graph")
async def get_graph(request: Request):
    graph = await _run(load_snapshot, _config(request))
    return graph_to_dict(graph)


@router.get("/graph/file")
async def get_graph_file(
    request: Request,
    path: str = Query(..., description="File path or a unique suffix of one"),
    depth: int = Query(DEFAULT_QUERY_DEPTH, ge=0),
):
    results = await _run(run_query, _config(request), path, depth)
    return {"matches": [r.to_dict() for r in results]}


@router.post("/impact")
async def impact(request: Request, req: ImpactRequest):
    if not req.files:
        raise HTTPException(400, "files must not be empty")
    result = await _run(run_impact, _config(request), req.files, req.depth)
    return result.to_dict()


@router.post("/stale")
async def stale(request: Request, req: StaleRequest):
    result = await _run(run_stale, _config(request), req.changed, req.depth, req.tests)
    return result.to_dict()


@router.post("/prioritize")
async def prioritize(request: Request, req: PrioritizeRequest):
    # the API never writes artifacts
    result = await _run(run_prioritize, _config(request), req.failing, save=False)
    return result.to_dict()
