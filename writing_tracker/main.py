"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import FileResponse, JSONResponse

from .config import Settings, settings
from .goals.errors import HostError, InvalidGoalInput, NotFound, PersistenceFailure
from .models import ChangeEvent, ChangeResponse, GoalRequest, GoalResponse
from .tracker import WritingTracker
from .vault.paths import fuzzy_filter

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def create_app(config: Settings, vault=None) -> FastAPI:
    """
    Build the API around a WritingTracker.

    Args:
        config: Application settings
        vault: Optional vault adapter overriding VAULT_SOURCE
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        tracker = WritingTracker(config, vault=vault)
        await tracker.start()
        app.state.tracker = tracker
        try:
            yield
        finally:
            await tracker.stop()

    app = FastAPI(
        title="Writing Tracker",
        description="Daily and total word-count goals for vault files and folders",
        version=VERSION,
        lifespan=lifespan,
    )

    def get_tracker(request: Request) -> WritingTracker:
        return request.app.state.tracker

    @app.exception_handler(InvalidGoalInput)
    async def invalid_goal_handler(request: Request, exc: InvalidGoalInput):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(PersistenceFailure)
    async def persistence_handler(request: Request, exc: PersistenceFailure):
        logger.error(f"Persistence failure: {exc}")
        return JSONResponse(
            status_code=503,
            content={"detail": "Goals changed but could not be saved; they will be saved with the next change"},
        )

    @app.exception_handler(HostError)
    async def host_error_handler(request: Request, exc: HostError):
        logger.error(f"Host error: {exc}")
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": "Writing Tracker",
            "version": VERSION,
            "endpoints": {
                "goals": "/api/goals",
                "targets": "/api/targets",
                "changes": "/api/changes",
                "dashboard": "/api/dashboard",
                "status": "/status",
            },
        }

    @app.get("/status")
    async def status(request: Request):
        """Server status endpoint."""
        tracker = get_tracker(request)
        return {
            "status": "running",
            "version": VERSION,
            "timestamp": datetime.utcnow().isoformat(),
            "vault_source": config.vault_source,
            "goals": len(tracker.store),
            "pending_changes": len(tracker.debouncer.pending),
        }

    @app.get("/api/goals", response_model=list[GoalResponse])
    async def list_goals(request: Request):
        """All goals in insertion order."""
        tracker = get_tracker(request)
        return [GoalResponse.from_goal(goal) for _, goal in tracker.store.list_all()]

    @app.put("/api/goals", response_model=GoalResponse)
    async def set_goal(body: GoalRequest, request: Request):
        """
        Set writing goals for a file or folder.

        Replaces any existing goal for the path and resets its progress.
        """
        tracker = get_tracker(request)
        logger.info(f"Set goal request for {body.path}")
        goal = await tracker.engine.set_goal(body.path, body.daily_goal, body.total_goal)
        return GoalResponse.from_goal(goal)

    @app.delete("/api/goals")
    async def clear_goals(request: Request):
        """Clear all writing goals."""
        tracker = get_tracker(request)
        tracker.engine.clear_all_goals()
        return {"status": "success", "message": "All writing goals cleared"}

    @app.get("/api/goals/{path:path}", response_model=GoalResponse)
    async def get_goal(path: str, request: Request):
        """Goal for an exact file or folder path."""
        goal = get_tracker(request).engine.get_goal(path)
        if goal is None:
            raise HTTPException(status_code=404, detail=f"No goal for {path}")
        return GoalResponse.from_goal(goal)

    @app.delete("/api/goals/{path:path}")
    async def remove_goal(path: str, request: Request):
        """Remove the writing goal for a path. Unknown paths are not an error."""
        removed = get_tracker(request).engine.remove_goal(path)
        return {"status": "success", "removed": removed, "path": path}

    @app.get("/api/targets", response_model=list[str])
    async def list_targets(request: Request, query: Optional[str] = None, limit: int = 50):
        """Files and folders to choose a goal target from, fuzzy-filtered."""
        targets = await get_tracker(request).vault.list_targets()
        return fuzzy_filter(query or "", targets, limit=limit)

    @app.post("/api/changes", response_model=ChangeResponse)
    async def push_change(event: ChangeEvent, request: Request):
        """Receive a modify event from a host that pushes over HTTP."""
        tracker = get_tracker(request)
        await tracker.handle_change(event.path, event.content)
        return ChangeResponse(
            path=event.path,
            tracked=tracker.engine.resolve_target(event.path) is not None,
            debounce_seconds=tracker.debouncer.wait,
        )

    @app.get("/api/dashboard")
    async def dashboard(request: Request):
        """The side panel as a PNG image."""
        file_path = get_tracker(request).panel.image_path()
        return FileResponse(file_path, media_type="image/png")

    return app


app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )
