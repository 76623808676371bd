"""HTTP surface of the build-and-deploy service.

``POST /build`` takes ``{"code": "<base64 component source>"}``, runs the
pipeline in a private workspace and answers with the deployment URL.
``GET /health`` is a liveness probe.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from rich.markup import escape

from vitedeploy import __version__
from vitedeploy.builder import WorkspaceManager
from vitedeploy.config import Config
from vitedeploy.pipeline import Pipeline
from vitedeploy.staging import remove_staged, stage_component
from vitedeploy.utils import console, print_error, print_warning

NO_CODE_ERROR = "No code provided"
DISCONNECTED_ERROR = "Client disconnected; build cancelled"

T = TypeVar("T")


class ClientDisconnected(Exception):
    """The caller went away while its build was still running."""


async def _read_payload(request: Request) -> Any:
    """Parse the JSON body; an empty or malformed body counts as no payload."""
    body = await request.body()
    if not body.strip():
        return {}
    try:
        return await request.json()
    except ValueError:
        return {}


async def _cancel_on_disconnect(
    request: Request, awaitable: Awaitable[T], poll_interval: float = 1.0
) -> T:
    """Await *awaitable*, cancelling it if the client disconnects first.

    Cancelling the pipeline task kills whichever external tool it is
    currently waiting on.
    """
    task = asyncio.ensure_future(awaitable)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                print_warning("Client disconnected, cancelling build...")
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                raise ClientDisconnected(DISCONNECTED_ERROR)
    finally:
        if not task.done():
            task.cancel()


def create_app(
    config: Config | None = None,
    pipeline_factory: Callable[[Config], Pipeline] | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Service configuration; read from the environment when omitted.
        pipeline_factory: Creates the pipeline for each request. Defaults to
            ``Pipeline(config)``.
    """
    config = config or Config.from_env()
    workspaces = WorkspaceManager(config.work_root)
    builds = asyncio.Semaphore(config.build.max_concurrent_builds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        removed = await workspaces.cleanup_all()
        if removed:
            print_warning(f"Removed {removed} leftover workspace(s)")
        console.print(
            f"[bold green]Server running on "
            f"http://{config.server.host}:{config.server.port}[/bold green]"
        )
        yield

    app = FastAPI(
        title="vitedeploy",
        description="Build a React component into a Vite site and publish it",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.workspaces = workspaces
    app.state.pipeline_factory = pipeline_factory or Pipeline

    @app.get("/health")
    async def health():
        """Liveness probe."""
        return {"status": "ok", "version": __version__}

    @app.post("/build")
    async def build(request: Request):
        """Build the submitted component and deploy it."""
        payload = await _read_payload(request)
        code = payload.get("code") if isinstance(payload, dict) else None
        if not code:
            return JSONResponse({"error": NO_CODE_ERROR}, status_code=400)

        async with builds:
            async with workspaces.session() as workspace:
                staged = config.component_path(workspace.path)
                try:
                    await stage_component(code, staged)
                    pipeline = app.state.pipeline_factory(config)
                    result = await _cancel_on_disconnect(
                        request, pipeline.run(staged, workspace.path)
                    )
                except Exception as exc:
                    print_error(f"Build failed: {exc}")
                    return JSONResponse({"error": str(exc)}, status_code=500)
                finally:
                    if remove_staged(staged):
                        console.print(f"[dim]Cleaned up component file {escape(str(staged))}[/dim]")

        return {"success": True, "url": result.url}

    return app


app = create_app()
