"""Reading YAML/JSON documents from disk.

Every input kubechains reads (attack tracks, control catalogs, posture
summaries, vulnerability findings) is a YAML or JSON document. JSON is a
subset of YAML, so both are read with ``yaml.safe_load``.

A path may name a single file or a directory; directories are scanned
non-recursively for ``*.json``, ``*.yaml`` and ``*.yml`` files in sorted
order so loading is deterministic.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from kubechains.exceptions import DocumentParseError

_DOCUMENT_EXTENSIONS = (".json", ".yaml", ".yml")


def document_paths(path: Path) -> list[Path]:
    """Return the document files at ``path``.

    Raises:
        DocumentParseError: If ``path`` does not exist.
    """
    if path.is_file():
        return [path]
    if path.is_dir():
        return sorted(
            p for p in path.iterdir()
            if p.is_file() and p.suffix.lower() in _DOCUMENT_EXTENSIONS
        )
    raise DocumentParseError(f"No such file or directory: {path}")


def load_document(path: Path) -> Any:
    """Parse one YAML/JSON file.

    Raises:
        DocumentParseError: If the file cannot be read or parsed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentParseError(f"Cannot read {path}: {exc}") from exc
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise DocumentParseError(f"Invalid YAML/JSON in {path}: {exc}") from exc


def load_items(path: Path, list_key: str | None = None) -> list[Any]:
    """Load every item from the documents at ``path``.

    A document may be a single object, a list of objects, or (when
    ``list_key`` is given) a mapping holding the list under that key.
    Empty documents contribute nothing.
    """
    items: list[Any] = []
    for doc_path in document_paths(path):
        data = load_document(doc_path)
        if data is None:
            continue
        if list_key and isinstance(data, Mapping) and list_key in data:
            data = data[list_key]
        if isinstance(data, list):
            items.extend(data)
        else:
            items.append(data)
    return items


def require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    """Return ``data`` if it is a mapping, else raise DocumentParseError."""
    if not isinstance(data, Mapping):
        raise DocumentParseError(
            f"Expected {what} to be a mapping, got {type(data).__name__}"
        )
    return data


def string_list(value: Any, what: str) -> tuple[str, ...]:
    """Coerce ``value`` to a tuple of strings; None means empty."""
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, list):
        raise DocumentParseError(f"Expected {what} to be a list of strings")
    return tuple(str(item) for item in value)


def boolean(value: Any, what: str) -> bool:
    """Return ``value`` as a bool; None means False.

    Quoted values such as ``"false"`` are rejected rather than coerced.
    """
    if value is None:
        return False
    if not isinstance(value, bool):
        raise DocumentParseError(
            f"Expected {what} to be a boolean, got {type(value).__name__}"
        )
    return value


def string_map(value: Any, what: str) -> dict[str, str]:
    """Coerce ``value`` to a str-to-str dict; None means empty."""
    if value is None:
        return {}
    mapping = require_mapping(value, what)
    return {str(k): "" if v is None else str(v) for k, v in mapping.items()}
