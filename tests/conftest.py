"""Shared pytest fixtures for the vitedeploy test suite.

Provides reusable fixtures for:
- Temporary request workspaces and configurations
- Sample component sources and their base64 payloads
- A fake tool runner that emulates npm/npx/surge without touching the network
- Mock subprocess helpers
"""

from __future__ import annotations

import asyncio
import base64
import textwrap
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from vitedeploy.builder.runner import ToolResult
from vitedeploy.config import Config
from vitedeploy.errors import ToolError


# ---------------------------------------------------------------------------
# Paths & configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_workspace(tmp_path: Path) -> Path:
    """An empty directory standing in for a request workspace."""
    workspace = tmp_path / "workspace"
    workspace.mkdir()
    yield workspace


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Config whose work root lives under tmp_path."""
    work_root = tmp_path / "work"
    work_root.mkdir()
    return Config(work_root=work_root)


# ---------------------------------------------------------------------------
# Sample component sources
# ---------------------------------------------------------------------------

@pytest.fixture
def simple_component() -> str:
    """The smallest component accepted by the transform."""
    return "export default function Foo(){ return <div>Hi</div>; }"


@pytest.fixture
def client_component() -> str:
    """A Next.js style client component with hooks and a shadcn import."""
    return textwrap.dedent(
        """\
        "use client";
        import { useState } from "react";
        import { Button } from "@/components/ui/button";

        export default function Counter() {
          const [count, setCount] = useState(0);
          return (
            <div className="p-4">
              <Button onClick={() => setCount(count + 1)}>Clicked {count} times</Button>
            </div>
          );
        }
        """
    )


@pytest.fixture
def vite_main_jsx() -> str:
    """``src/main.jsx`` as generated by the create-vite React template."""
    return textwrap.dedent(
        """\
        import { StrictMode } from 'react'
        import { createRoot } from 'react-dom/client'
        import App from './App.jsx'

        createRoot(document.getElementById('root')).render(
          <StrictMode>
            <App />
          </StrictMode>,
        )
        """
    )


@pytest.fixture
def encode_component():
    """Base64-encode component source the way API clients do."""
    def encode(source: str) -> str:
        return base64.b64encode(source.encode("utf-8")).decode("ascii")
    return encode


# ---------------------------------------------------------------------------
# Fake tool runner
# ---------------------------------------------------------------------------

class FakeToolRunner:
    """Emulates the external tools by creating the files they would create.

    Records every invocation in ``calls`` as ``(argv, cwd)``. Set ``fail_on``
    to a substring of a command line to make that command fail with
    ``ToolError``.
    """

    def __init__(self, main_jsx: str, fail_on: str | None = None, skip_dist: bool = False):
        self.main_jsx = main_jsx
        self.fail_on = fail_on
        self.skip_dist = skip_dist
        self.calls: list[tuple[tuple[str, ...], Path | None]] = []

    async def run(self, *argv: str, cwd: str | Path | None = None, timeout: float | None = None) -> ToolResult:
        cwd_path = Path(cwd) if cwd else None
        self.calls.append((argv, cwd_path))
        command = " ".join(argv)

        if self.fail_on and self.fail_on in command:
            raise ToolError(
                f"Command failed (exit 1): {command}\nsimulated failure",
                command=command,
                exit_code=1,
                output="simulated failure",
            )

        if "create" in argv and cwd_path is not None:
            project = cwd_path / argv[argv.index("create") + 2]
            (project / "src").mkdir(parents=True)
            (project / "package.json").write_text('{"name": "react-vite-project"}', encoding="utf-8")
            (project / "src" / "main.jsx").write_text(self.main_jsx, encoding="utf-8")
            (project / "src" / "App.jsx").write_text("export default function App() {}\n", encoding="utf-8")
            (project / "src" / "index.css").write_text(":root { color: red; }\n", encoding="utf-8")
        elif argv[-2:] == ("run", "build") and cwd_path is not None and not self.skip_dist:
            dist = cwd_path / "dist"
            dist.mkdir()
            (dist / "index.html").write_text("<html></html>", encoding="utf-8")

        return ToolResult(command=command, exit_code=0)

    def commands(self) -> list[str]:
        return [" ".join(argv) for argv, _ in self.calls]


@pytest.fixture
def fake_runner(vite_main_jsx: str) -> FakeToolRunner:
    """A FakeToolRunner that succeeds for every command."""
    return FakeToolRunner(vite_main_jsx)


@pytest.fixture
def fake_runner_factory(vite_main_jsx: str):
    """Factory for FakeToolRunner instances with custom failure behaviour."""
    def factory(**kwargs: Any) -> FakeToolRunner:
        return FakeToolRunner(vite_main_jsx, **kwargs)
    return factory


# ---------------------------------------------------------------------------
# Mock subprocess
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess whose stdout yields the given lines.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(lines=["ok"], returncode=0)
            with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
                ...
    """
    def factory(lines: list[str] | None = None, returncode: int = 0) -> MagicMock:
        reader = asyncio.StreamReader()
        for line in lines or []:
            reader.feed_data(f"{line}\n".encode("utf-8"))
        reader.feed_eof()

        mock_proc = MagicMock()
        mock_proc.stdout = reader
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory
