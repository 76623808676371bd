"""Decoding and staging of submitted component sources."""

from __future__ import annotations

import asyncio
import base64
import binascii
from pathlib import Path

from .errors import StagingError


def decode_component(code: str) -> str:
    """Decode a base64 payload into UTF-8 component source.

    Whitespace anywhere in the payload is ignored, so line-wrapped output of
    MIME encoders is accepted, and missing trailing padding is restored.

    Raises:
        StagingError: The payload is not valid base64 or not valid UTF-8.
    """
    if not isinstance(code, str):
        raise StagingError(
            f"Invalid base64 payload: expected a string, got {type(code).__name__}"
        )
    try:
        compact = "".join(code.split())
        compact += "=" * (-len(compact) % 4)
        raw = base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise StagingError(f"Invalid base64 payload: {exc}") from exc

    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise StagingError(f"Invalid base64 payload: not UTF-8 text ({exc.reason})") from exc


def write_staged(source: str, path: str | Path) -> Path:
    """Write decoded source to *path*, replacing any stale copy."""
    target = Path(path)
    if target.exists():
        target.unlink()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(source, encoding="utf-8")
    return target


async def stage_component(code: str, path: str | Path) -> Path:
    """Decode *code* and persist it at *path*.

    Returns:
        The path of the staged file.
    """
    source = decode_component(code)
    return await asyncio.to_thread(write_staged, source, path)


def remove_staged(path: str | Path) -> bool:
    """Delete a staged file if present. Returns whether anything was removed."""
    target = Path(path)
    if target.exists():
        target.unlink()
        return True
    return False
