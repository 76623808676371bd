"""Jinja2 template rendering for the generated project configuration.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``vitedeploy/scaffolder/templates/`` directory and renders them with the
project's alias and styling settings. Every file is regenerated from scratch
on each run; nothing is merged with what the scaffolder produced.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape


_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

DEFAULT_CONTEXT: dict[str, Any] = {
    "alias": "@",
    "source_dir": "./src",
    "content_globs": ["./index.html", "./src/**/*.{js,jsx,ts,tsx}"],
    "tailwind_layers": ["base", "components", "utilities"],
}


class TemplateRenderer:
    """Renders the configuration templates for a scaffolded project."""

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self.env.filters["js_string"] = _js_string_filter

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context."""
        template = self.env.get_template(template_path)
        return template.render(**context)

    async def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Parent directories are created automatically.
        """
        content = self.render(template_path, context)
        out = Path(output_path)
        await asyncio.to_thread(_write_file, out, content)
        return out


def tsconfig_paths(alias: str = "@", source_dir: str = "./src") -> str:
    """Return the ``tsconfig.json`` text mapping ``<alias>/*`` to the sources."""
    document = {
        "compilerOptions": {
            "baseUrl": ".",
            "paths": {f"{alias}/*": [f"{source_dir}/*"]},
        }
    }
    return json.dumps(document, indent=2)


async def write_tsconfig(
    project_root: str | Path, alias: str = "@", source_dir: str = "./src"
) -> Path:
    """Write ``tsconfig.json`` into *project_root*, replacing any existing file."""
    out = Path(project_root) / "tsconfig.json"
    await asyncio.to_thread(_write_file, out, tsconfig_paths(alias, source_dir))
    return out


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def _js_string_filter(value: str) -> str:
    """Render a Python string as a single-quoted JavaScript literal."""
    escaped = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
