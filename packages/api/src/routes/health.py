# This project was developed with assistance from AI tools.
"""Liveness and database reachability."""

from db import DatabaseService, get_db_service
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

router = APIRouter()


@router.get("/health")
async def health(services: list[DatabaseService] = Depends(get_db_service)) -> JSONResponse:
    """Report each store's reachability. 503 when any store is down."""
    databases = {svc.name: await svc.health_check() for svc in services}
    healthy = all(databases.values())
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={"status": "ok" if healthy else "degraded", "databases": databases},
    )
