"""Request-scoped working directories.

Every build gets its own uniquely named directory under the work root. The
staged component and the scaffolded project live inside it, so concurrent
requests never touch each other's files and the process working directory
is never changed.
"""

from __future__ import annotations

import asyncio
import shutil
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console

console = Console()

WORKSPACE_PREFIX = "vitedeploy-"


@dataclass
class Workspace:
    """A private directory owned by one build."""

    path: Path
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def name(self) -> str:
        return self.path.name


class WorkspaceManager:
    """Creates and removes per-request workspaces under ``root``."""

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()

    async def create(self) -> Workspace:
        """Create a fresh, empty workspace directory.

        Returns:
            Workspace describing the new directory.
        """
        await asyncio.to_thread(self.root.mkdir, parents=True, exist_ok=True)
        path = await asyncio.to_thread(
            tempfile.mkdtemp, prefix=WORKSPACE_PREFIX, dir=str(self.root)
        )
        workspace = Workspace(path=Path(path))
        console.print(f"[cyan]Workspace created[/cyan] [bold]{workspace.name}[/bold]")
        return workspace

    async def cleanup(self, workspace: Workspace) -> None:
        """Remove a workspace and everything in it. A missing path is fine."""
        if workspace.path.exists():
            await asyncio.to_thread(shutil.rmtree, workspace.path, True)
        console.print(f"[green]Cleaned up workspace:[/green] {workspace.name}")

    def list_workspaces(self) -> list[Workspace]:
        """List the workspace directories currently present under the root."""
        if not self.root.exists():
            return []
        return [
            Workspace(path=p)
            for p in sorted(self.root.glob(f"{WORKSPACE_PREFIX}*"))
            if p.is_dir()
        ]

    async def cleanup_all(self) -> int:
        """Remove every leftover workspace (e.g. after a crash).

        Returns:
            Number of workspaces removed.
        """
        leftovers = self.list_workspaces()
        if not leftovers:
            console.print("[dim]No leftover workspaces found.[/dim]")
            return 0

        for workspace in leftovers:
            await self.cleanup(workspace)
        return len(leftovers)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Workspace]:
        """Yield a new workspace and remove it on exit, whatever happened."""
        workspace = await self.create()
        try:
            yield workspace
        finally:
            await self.cleanup(workspace)
