"""vitedeploy scaffolder -- shapes a freshly generated Vite project.

Renders the Tailwind, TypeScript alias and Vite configuration files and
rewrites the submitted component into the project's root ``App``.

Quick usage::

    from vitedeploy.scaffolder import DEFAULT_CONTEXT, TemplateRenderer, transform_component

    TemplateRenderer().render("index.css.j2", DEFAULT_CONTEXT)
    (project_root / "src" / "App.jsx").write_text(transform_component(source))
"""

from vitedeploy.scaffolder.templates import (
    DEFAULT_CONTEXT,
    TemplateRenderer,
    tsconfig_paths,
    write_tsconfig,
)
from vitedeploy.scaffolder.transform import (
    CSS_IMPORT,
    ROOT_COMPONENT,
    ensure_css_import,
    rename_default_export,
    strip_client_directive,
    transform_component,
)

__all__ = [
    "DEFAULT_CONTEXT",
    "TemplateRenderer",
    "tsconfig_paths",
    "write_tsconfig",
    "CSS_IMPORT",
    "ROOT_COMPONENT",
    "ensure_css_import",
    "rename_default_export",
    "strip_client_directive",
    "transform_component",
]
