"""Rewrites a submitted React component into the project's root ``App``.

The transformation is pattern based: it strips a leading ``"use client"``
directive, renames the default-exported component to ``App`` and appends
``export default App;``. The result is checked afterwards so that a source
without a recognisable default export fails loudly instead of producing a
file the bundler would reject.
"""

from __future__ import annotations

import re

from ..errors import ComponentTransformError

ROOT_COMPONENT = "App"
CSS_IMPORT = "import './index.css';"

_CLIENT_DIRECTIVE = re.compile(r"""^\s*(["'])use client\1[ \t]*;?[ \t]*(?:\r?\n)?""")

# ``export default function Foo``, ``export default async function``,
# ``export default function(`` (anonymous) at the start of a line
_DEFAULT_FUNCTION = re.compile(
    r"^([ \t]*)export\s+default\s+(async\s+)?function\b\s*([A-Za-z_$][\w$]*)?",
    re.MULTILINE,
)

# ``export default class Foo`` or ``export default class extends Base``
_DEFAULT_CLASS = re.compile(
    r"^([ \t]*)export\s+default\s+class\b(?:\s+(?!extends\b)[A-Za-z_$][\w$]*)?",
    re.MULTILINE,
)

# ``export default Foo;`` on a line of its own
_DEFAULT_IDENTIFIER = re.compile(
    r"^[ \t]*export\s+default\s+([A-Za-z_$][\w$]*)[ \t]*;?[ \t]*$", re.MULTILINE
)

# any other ``export default <expression>``, e.g. an arrow function or memo(Foo)
_DEFAULT_EXPRESSION = re.compile(r"^([ \t]*)export\s+default\s+", re.MULTILINE)

_ANY_DEFAULT_EXPORT = re.compile(r"^[ \t]*export\s+default\b", re.MULTILINE)
_CSS_IMPORT_LINE = re.compile(
    r"""^[ \t]*import\s+(["'])\./index\.css\1[ \t]*;?[ \t]*$""", re.MULTILINE
)


def strip_client_directive(source: str) -> str:
    """Drop a leading ``"use client"`` statement; no-op when absent."""
    return _CLIENT_DIRECTIVE.sub("", source, count=1)


def rename_default_export(source: str, name: str = ROOT_COMPONENT) -> str:
    """Turn the default-exported component into a plain declaration of ``name``.

    Only statements at the start of a line count, so a mention inside a
    comment or string earlier in the file is left alone. Handled forms:

    * ``export default function <Any>(...)`` (named, anonymous or async)
    * ``export default class <Any>``
    * ``export default <Identifier>;`` for a component declared earlier
    * ``export default <expression>`` (arrow function, ``memo(Foo)``, ...),
      which becomes ``const <name> = <expression>``

    Raises:
        ComponentTransformError: The source has no default export.
    """
    match = _DEFAULT_FUNCTION.search(source)
    if match:
        indent, prefix = match.group(1), match.group(2) or ""
        return f"{source[:match.start()]}{indent}{prefix}function {name}{source[match.end():]}"

    match = _DEFAULT_CLASS.search(source)
    if match:
        return f"{source[:match.start()]}{match.group(1)}class {name}{source[match.end():]}"

    match = _DEFAULT_IDENTIFIER.search(source)
    if match:
        target = match.group(1)
        replacement = "" if target == name else f"const {name} = {target};"
        return f"{source[:match.start()]}{replacement}{source[match.end():]}"

    match = _DEFAULT_EXPRESSION.search(source)
    if match:
        return f"{source[:match.start()]}{match.group(1)}const {name} = {source[match.end():]}"

    raise ComponentTransformError(
        "No default-exported component found. Expected a line starting with "
        "'export default'."
    )


def _verify(component: str, name: str) -> None:
    exports = len(_ANY_DEFAULT_EXPORT.findall(component))
    if exports != 1:
        raise ComponentTransformError(
            f"Transformed component has {exports} default exports; expected exactly 1."
        )

    declarations = re.findall(
        rf"\b(?:function|const|let|var|class)\s+{re.escape(name)}\b", component
    )
    if len(declarations) != 1:
        raise ComponentTransformError(
            f"Transformed component declares '{name}' {len(declarations)} times; "
            "expected exactly 1."
        )


def transform_component(source: str, name: str = ROOT_COMPONENT) -> str:
    """Produce the text written to ``src/App.jsx``.

    Args:
        source: Decoded component source as submitted.
        name: Identifier of the root component.

    Returns:
        The rewritten source, ending with ``export default <name>;``.

    Raises:
        ComponentTransformError: The source has no usable default export or
            the rewritten text would be ambiguous.
    """
    text = strip_client_directive(source)
    text = rename_default_export(text, name)
    component = f"{text.rstrip()}\n\nexport default {name};"
    _verify(component, name)
    return component


def ensure_css_import(main_source: str, import_line: str = CSS_IMPORT) -> str:
    """Prepend the global stylesheet import unless the entry already has it.

    Any existing ``import './index.css'`` (either quote style, with or
    without a semicolon) counts, so applying this twice changes nothing.
    """
    if import_line in main_source or _CSS_IMPORT_LINE.search(main_source):
        return main_source
    return f"{import_line}\n{main_source}"
