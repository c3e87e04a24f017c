"""Health & Readiness Probes.

Invariants:
    - GET /api/v1/health/ answers 200 whenever the process can serve requests
    - GET /api/v1/health/ready answers 503 unless every check passes; the body
      always lists each check so operators can see which one failed
"""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from content_sync.infrastructure import database

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def liveness(request: Request):
    return {"status": "alive", "service": "content-sync", "version": request.app.version}


@router.get("/ready")
async def readiness(request: Request):
    manager = database.db_manager
    checks = {
        "database": manager is not None and await manager.ping(),
        "work_queue": getattr(request.app.state, "work_queue", None) is not None,
    }
    report = {name: "ok" if passed else "failing" for name, passed in checks.items()}
    if not all(checks.values()):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": report},
        )
    return {"status": "ready", "checks": report}
