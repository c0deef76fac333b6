# src/openhome/storage.py
"""JSON import/export of editor documents."""
from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from openhome.models import AppState

logger = logging.getLogger(__name__)


class DocumentError(ValueError):
    """A saved document could not be loaded. Nothing from it was applied."""


def _describe(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "document"
    extra = exc.error_count() - 1
    suffix = f" (and {extra} more problem{'s' if extra > 1 else ''})" if extra else ""
    return f"{location}: {first['msg']}{suffix}"


def load_document(text: str) -> AppState:
    """Parse a saved document, migrating legacy fields.

    Raises:
        DocumentError: the text is not JSON or does not describe an editor state.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("import failed: invalid JSON: %s", exc)
        raise DocumentError(f"Invalid JSON: {exc.msg} (line {exc.lineno})") from exc
    if not isinstance(data, dict):
        raise DocumentError("Invalid document: expected a JSON object at the top level")
    try:
        return AppState.model_validate(data)
    except ValidationError as exc:
        message = _describe(exc)
        logger.warning("import failed: %s", message)
        raise DocumentError(f"Invalid document: {message}") from exc


def dump_document(state: AppState, indent: int | None = 2) -> str:
    return state.model_dump_json(by_alias=True, indent=indent)


def read_document(path: str | Path) -> AppState:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise DocumentError(f"Cannot read {p}: {exc.strerror}") from exc
    return load_document(text)


def write_document(path: str | Path, state: AppState) -> None:
    Path(path).write_text(dump_document(state), encoding="utf-8")
