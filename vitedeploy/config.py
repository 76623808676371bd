"""vitedeploy configuration.

Centralised, typed configuration for the build-and-deploy service. All
settings use Pydantic v2 models so they can be validated at construction time
and serialised to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """Where the HTTP endpoint listens."""

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)


class ToolsConfig(BaseModel):
    """Executables and package specifiers for the external build tools."""

    npm: str = Field(default="npm")
    npx: str = Field(default="npx")
    surge: str = Field(default="surge")
    vite_template: str = Field(default="react", description="create-vite template name")
    tailwind_package: str = Field(
        default="tailwindcss@3",
        description="Tailwind release that still ships the `init` CLI",
    )
    shadcn_package: str = Field(default="shadcn@latest")


class DeployConfig(BaseModel):
    """Static hosting target."""

    domain_suffix: str = Field(default="surge.sh")
    token: str = Field(
        default="",
        description="Surge token; when empty surge falls back to its own login",
    )


class BuildConfig(BaseModel):
    """Tuning knobs for the build pipeline."""

    step_timeout: int = Field(
        default=600, ge=10, description="Per external command timeout in seconds"
    )
    pipeline_timeout: int = Field(
        default=1800, ge=60, description="Timeout for one full build-and-deploy run"
    )
    max_concurrent_builds: int = Field(
        default=1, ge=1, description="Maximum pipelines running at the same time"
    )
    output_tail_lines: int = Field(
        default=40, ge=1, description="Lines of tool output kept for error messages"
    )


class Config(BaseModel):
    """Global vitedeploy configuration.

    Instances are typically created once by the server or by the CLI entry
    point and then passed through the rest of the system.
    """

    project_name: str = Field(default="react-vite-project")
    component_filename: str = Field(default="Component.jsx")
    work_root: Path = Field(default_factory=lambda: Path(tempfile.gettempdir()))
    server: ServerConfig = Field(default_factory=ServerConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    deploy: DeployConfig = Field(default_factory=DeployConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    def project_path(self, workspace: Path) -> Path:
        """Scaffolded project directory inside a request workspace."""
        return Path(workspace) / self.project_name

    def component_path(self, workspace: Path) -> Path:
        """Staged component file inside a request workspace."""
        return Path(workspace) / self.component_filename

    def dist_path(self, workspace: Path) -> Path:
        """Build output directory of the scaffolded project."""
        return self.project_path(workspace) / "dist"

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a configuration from a JSON file (the shape of ``model_dump_json``)."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            VD_HOST, VD_PORT, VD_WORK_ROOT, VD_PROJECT_NAME,
            VD_SURGE_TOKEN, VD_SURGE_DOMAIN,
            VD_STEP_TIMEOUT, VD_PIPELINE_TIMEOUT, VD_MAX_CONCURRENT_BUILDS.
        """
        server_kwargs: dict[str, Any] = {}
        if os.environ.get("VD_HOST"):
            server_kwargs["host"] = os.environ["VD_HOST"]
        if os.environ.get("VD_PORT"):
            server_kwargs["port"] = int(os.environ["VD_PORT"])

        deploy_kwargs: dict[str, Any] = {}
        if os.environ.get("VD_SURGE_TOKEN"):
            deploy_kwargs["token"] = os.environ["VD_SURGE_TOKEN"]
        if os.environ.get("VD_SURGE_DOMAIN"):
            deploy_kwargs["domain_suffix"] = os.environ["VD_SURGE_DOMAIN"]

        build_kwargs: dict[str, Any] = {}
        if os.environ.get("VD_STEP_TIMEOUT"):
            build_kwargs["step_timeout"] = int(os.environ["VD_STEP_TIMEOUT"])
        if os.environ.get("VD_PIPELINE_TIMEOUT"):
            build_kwargs["pipeline_timeout"] = int(os.environ["VD_PIPELINE_TIMEOUT"])
        if os.environ.get("VD_MAX_CONCURRENT_BUILDS"):
            build_kwargs["max_concurrent_builds"] = int(
                os.environ["VD_MAX_CONCURRENT_BUILDS"]
            )

        kwargs: dict[str, Any] = {}
        if os.environ.get("VD_WORK_ROOT"):
            kwargs["work_root"] = Path(os.environ["VD_WORK_ROOT"])
        if os.environ.get("VD_PROJECT_NAME"):
            kwargs["project_name"] = os.environ["VD_PROJECT_NAME"]

        return cls(
            server=ServerConfig(**server_kwargs),
            deploy=DeployConfig(**deploy_kwargs),
            build=BuildConfig(**build_kwargs),
            **kwargs,
        )
