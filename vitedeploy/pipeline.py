"""vitedeploy Pipeline Orchestrator.

Turns one staged React component into a live site:

 1. PRE-CLEAN   -- remove a stale project directory from the workspace.
 2. VALIDATE    -- make sure the staged component file exists.
 3. TRANSFORM   -- rewrite the component into the root ``App``.
 4. SCAFFOLD    -- ``npm create vite`` with the React template.
 5. ENTER       -- all later steps run inside the new project directory.
 6. INSTALL     -- ``npm install``.
 7. TAILWIND    -- install and initialise Tailwind CSS, write its config.
 8. TSCONFIG    -- ``@/*`` path alias for TypeScript tooling.
 9. VITE        -- the same alias for the bundler, plus the React plugin.
10. SHADCN      -- ``shadcn init`` with defaults.
11. APP         -- write the transformed component to ``src/App.jsx``.
12. CSS IMPORT  -- make ``src/main.jsx`` import the global stylesheet.
13. BUILD       -- ``npm run build``.
14. VERIFY      -- ``dist/`` must exist.
15. DEPLOY      -- publish ``dist/`` to Surge.
16. RETURN      -- hand back the deployment URL.

The project directory is always removed afterwards.

Usage::

    python -m vitedeploy serve --port 3000
    python -m vitedeploy build ./Component.jsx
"""

from __future__ import annotations

import asyncio
import shutil
import sys
import time
from collections.abc import Callable
from pathlib import Path

from pydantic import BaseModel, Field
from rich.markup import escape
from rich.panel import Panel

from vitedeploy.builder import ToolRunner, WorkspaceManager
from vitedeploy.config import Config
from vitedeploy.errors import (
    BuildVerificationError,
    ComponentLibraryError,
    PipelineError,
    StagingError,
    ToolError,
    ToolTimeoutError,
)
from vitedeploy.scaffolder import (
    DEFAULT_CONTEXT,
    TemplateRenderer,
    ensure_css_import,
    transform_component,
    write_tsconfig,
)
from vitedeploy.utils import (
    console,
    format_duration,
    print_error,
    print_step,
    print_success,
    print_summary_table,
    sanitize_name,
)

STEPS: list[str] = [
    "Pre-clean project directory",
    "Validate component file",
    "Transform component",
    "Scaffold Vite React project",
    "Enter project directory",
    "Install base dependencies",
    "Configure Tailwind CSS",
    "Configure TypeScript aliases",
    "Configure Vite aliases",
    "Initialize ShadCN",
    "Replace App.jsx",
    "Import global stylesheet",
    "Build project",
    "Verify build output",
    "Deploy to Surge",
    "Return deployment URL",
]

SHADCN_FAILURE = "ShadCN initialization failed."


class BuildResult(BaseModel):
    """Outcome of one successful build-and-deploy run."""

    url: str
    project_name: str
    duration_seconds: float = 0.0
    steps_completed: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Pipeline Orchestrator
# ---------------------------------------------------------------------------


class Pipeline:
    """Runs the fixed scaffold/configure/build/deploy sequence once.

    Each step is a hard dependency on the one before it: the first failure
    aborts the run and its error propagates to the caller unchanged, except
    for the component library initialisation whose failure is reported as
    ``ShadCN initialization failed.`` with the original error chained.

    Attributes:
        config: Service configuration.
        runner: Executes the external tools.
        renderer: Renders the generated configuration files.
        steps_completed: Names of the steps finished so far in this run.
    """

    def __init__(
        self,
        config: Config,
        runner: ToolRunner | None = None,
        renderer: TemplateRenderer | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.runner = runner or ToolRunner(
            timeout=config.build.step_timeout,
            tail_lines=config.build.output_tail_lines,
        )
        self.renderer = renderer or TemplateRenderer()
        self.clock = clock
        self.steps_completed: list[str] = []

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def run(self, component_path: str | Path, workspace: str | Path) -> BuildResult:
        """Build and deploy the staged component.

        Args:
            component_path: The staged component file.
            workspace: Directory that will contain the scaffolded project.

        Returns:
            BuildResult carrying the deployment URL.

        Raises:
            ToolTimeoutError: The whole run exceeded ``build.pipeline_timeout``.
            VitedeployError: Any step failed.
        """
        limit = self.config.build.pipeline_timeout
        try:
            return await asyncio.wait_for(
                self._run(Path(component_path), Path(workspace)), timeout=limit
            )
        except asyncio.TimeoutError:
            raise ToolTimeoutError(f"Build pipeline timed out after {limit}s")

    async def _run(self, component_path: Path, workspace: Path) -> BuildResult:
        start = time.monotonic()
        project = self.config.project_path(workspace)
        self.steps_completed = []

        console.print(
            Panel(
                f"[bold bright_cyan]vitedeploy[/bold bright_cyan]\n"
                f"Component : {escape(str(component_path))}\n"
                f"Project   : {escape(str(project))}",
                title="[bold]Build Start[/bold]",
                border_style="bright_cyan",
            )
        )

        try:
            self._begin(1)
            await self._remove_project(project)

            self._begin(2)
            if not component_path.exists():
                raise StagingError(f"Component file {component_path} does not exist.")

            self._begin(3)
            source = await asyncio.to_thread(component_path.read_text, encoding="utf-8")
            component = transform_component(source)

            self._begin(4)
            await self._scaffold(workspace)

            self._begin(5)
            if not project.is_dir():
                raise PipelineError(
                    "scaffold", f"Project directory was not created: {project}"
                )

            self._begin(6)
            await self.runner.run(self.config.tools.npm, "install", cwd=project)

            self._begin(7)
            await self._configure_tailwind(project)

            self._begin(8)
            await write_tsconfig(
                project, DEFAULT_CONTEXT["alias"], DEFAULT_CONTEXT["source_dir"]
            )

            self._begin(9)
            await self.renderer.render_to_file(
                "vite.config.js.j2",
                project / "vite.config.js",
                DEFAULT_CONTEXT,
            )

            self._begin(10)
            await self._init_component_library(project)

            self._begin(11)
            await asyncio.to_thread(_write_text, project / "src" / "App.jsx", component)

            self._begin(12)
            await self._ensure_stylesheet_import(project / "src" / "main.jsx")

            self._begin(13)
            await self.runner.run(self.config.tools.npm, "run", "build", cwd=project)

            self._begin(14)
            dist = self.config.dist_path(workspace)
            if not dist.is_dir():
                raise BuildVerificationError(f"Build directory not found: {dist}")

            self._begin(15)
            url = await self._deploy(dist)

            self._begin(16)
            elapsed = time.monotonic() - start
            result = BuildResult(
                url=url,
                project_name=self.config.project_name,
                duration_seconds=round(elapsed, 2),
                steps_completed=list(self.steps_completed),
            )
            self._print_summary(result)
            return result

        except Exception as exc:
            print_error(f"Error occurred: {exc}")
            raise

        finally:
            await self._remove_project(project)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _begin(self, number: int) -> None:
        """Mark the previous step finished and announce step *number*."""
        if number > 1:
            self.steps_completed.append(STEPS[number - 2])
        print_step(number, len(STEPS), STEPS[number - 1])
        if number == len(STEPS):
            self.steps_completed.append(STEPS[-1])

    async def _remove_project(self, project: Path) -> None:
        if project.exists():
            console.print("[yellow]Cleaning up project folder...[/yellow]")
            await asyncio.to_thread(shutil.rmtree, project)

    async def _scaffold(self, workspace: Path) -> None:
        tools = self.config.tools
        await self.runner.run(
            tools.npm,
            "create",
            "vite@latest",
            self.config.project_name,
            "--",
            "--template",
            tools.vite_template,
            cwd=workspace,
        )

    async def _configure_tailwind(self, project: Path) -> None:
        tools = self.config.tools
        await self.runner.run(
            tools.npm, "install", "-D", tools.tailwind_package, "postcss", "autoprefixer",
            cwd=project,
        )
        await self.runner.run(tools.npx, "--yes", "tailwindcss", "init", "-p", cwd=project)
        await self.renderer.render_to_file(
            "tailwind.config.js.j2",
            project / "tailwind.config.js",
            DEFAULT_CONTEXT,
        )
        await self.renderer.render_to_file(
            "index.css.j2",
            project / "src" / "index.css",
            DEFAULT_CONTEXT,
        )

    async def _init_component_library(self, project: Path) -> None:
        tools = self.config.tools
        try:
            await self.runner.run(
                tools.npx, "--yes", tools.shadcn_package, "init", "-d", cwd=project
            )
        except ToolError as exc:
            console.print(f"[dim]shadcn init output:[/dim] {escape(str(exc))}")
            raise ComponentLibraryError(SHADCN_FAILURE, detail=str(exc)) from exc

    async def _ensure_stylesheet_import(self, main_path: Path) -> None:
        content = await asyncio.to_thread(main_path.read_text, encoding="utf-8")
        updated = ensure_css_import(content)
        if updated != content:
            await asyncio.to_thread(_write_text, main_path, updated)

    def deployment_url(self) -> str:
        """Synthesize ``https://<project>-<epoch ms>.<domain suffix>``."""
        stamp = int(self.clock() * 1000)
        name = sanitize_name(self.config.project_name)
        return f"https://{name}-{stamp}.{self.config.deploy.domain_suffix}"

    async def _deploy(self, dist: Path) -> str:
        url = self.deployment_url()
        argv = [self.config.tools.surge, str(dist), url]
        if self.config.deploy.token:
            argv += ["--token", self.config.deploy.token]
        await self.runner.run(*argv, cwd=dist.parent)
        print_success("Deployment completed successfully! Access your app at:")
        console.print(url)
        return url

    def _print_summary(self, result: BuildResult) -> None:
        print_summary_table(
            {
                "Project": result.project_name,
                "Steps": f"{len(result.steps_completed)}/{len(STEPS)}",
                "Duration": format_duration(result.duration_seconds),
                "URL": result.url,
            },
            title="Build Summary",
        )


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


# ---------------------------------------------------------------------------
# One-shot build from a local file
# ---------------------------------------------------------------------------


async def build_file(config: Config, source_path: Path) -> BuildResult:
    """Stage a local component file in a fresh workspace and run the pipeline."""
    manager = WorkspaceManager(config.work_root)
    async with manager.session() as workspace:
        staged = config.component_path(workspace.path)
        source = await asyncio.to_thread(source_path.read_text, encoding="utf-8")
        await asyncio.to_thread(_write_text, staged, source)
        return await Pipeline(config).run(staged, workspace.path)


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``vitedeploy`` / ``python -m vitedeploy``."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="vitedeploy",
        description="Build a React component into a Vite site and publish it to Surge",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  vitedeploy serve\n"
            "  vitedeploy serve --host 127.0.0.1 --port 8080\n"
            "  vitedeploy build ./Component.jsx\n"
            "  vitedeploy --config vitedeploy.json serve\n"
        ),
    )
    parser.add_argument(
        "--config",
        default=None,
        help="JSON configuration file (default: read VD_* environment variables)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP service")
    serve.add_argument("--host", default=None, help="Bind address (default: VD_HOST or 0.0.0.0)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: VD_PORT or 3000)")

    build = subparsers.add_parser("build", help="Build and deploy a local component file")
    build.add_argument("component", help="Path to the component source (.jsx)")

    args = parser.parse_args(argv)
    config = Config.load(Path(args.config)) if args.config else Config.from_env()

    if args.command == "serve":
        import uvicorn

        from vitedeploy.server import create_app

        if args.host:
            config.server.host = args.host
        if args.port:
            config.server.port = args.port
        uvicorn.run(create_app(config), host=config.server.host, port=config.server.port)
        return

    component = Path(args.component)
    if not component.exists():
        console.print(f"[bold red]Error:[/bold red] Component file not found: {escape(str(component))}")
        sys.exit(1)

    try:
        result = asyncio.run(build_file(config, component))
    except Exception as exc:
        console.print(f"[bold red]Build failed:[/bold red] {escape(str(exc))}")
        sys.exit(1)

    console.print(f"[bold green]Deployed:[/bold green] {result.url}")


if __name__ == "__main__":
    main()
