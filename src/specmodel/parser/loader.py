"""Text boundary: read API descriptions from files, URLs or stdin.

The document model itself only deals with generic values (mappings,
sequences and scalars). This module converts between those values and text:

* :func:`load_spec` -- fetch and parse a description from a file path, an
  ``http(s)`` URL, or ``-`` for stdin.
* :func:`parse_content` -- parse a string as JSON, falling back to YAML.
* :func:`stringify` -- render a generic value as JSON or YAML.

Everything that goes wrong here raises
:class:`~specmodel.exceptions.SpecParseError`.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from specmodel.exceptions import SpecParseError

FORMATS = ("json", "yaml")


def load_spec(source: str, timeout: float = 30.0) -> dict[str, Any]:
    """Load an API description from a URL, file path, or stdin (``-``).

    Args:
        source: An ``http(s)`` URL, a local path, or ``-``.
        timeout: Request timeout in seconds for URLs.

    Returns:
        The parsed top-level mapping.

    Raises:
        SpecParseError: If the source cannot be read or is not a JSON/YAML object.
    """
    if source == "-":
        return _load_from_stdin()
    if source.startswith(("http://", "https://")):
        return _load_from_url(source, timeout)
    return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc
    if not content.strip():
        raise SpecParseError("No input received from stdin")
    return parse_content(content)


def _load_from_url(url: str, timeout: float) -> dict[str, Any]:
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(f"HTTP {exc.response.status_code} fetching {url}") from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"
    return parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"File not found: {path}")
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read {path}: {exc}") from exc
    if not content.strip():
        raise SpecParseError(f"File is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"
    return parse_content(content, hint=hint)


def parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse *content* as JSON or YAML.

    JSON is tried first unless *hint* is ``"yaml"``; with a ``"json"`` hint
    a JSON error is final. Otherwise YAML is tried next.

    Raises:
        SpecParseError: If neither format yields a mapping.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            return _require_mapping(json.loads(content))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
            json_error = exc

    try:
        return _require_mapping(yaml.safe_load(content))
    except yaml.YAMLError as exc:
        msg = "Failed to parse content as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise SpecParseError(msg) from exc


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        got = type(result).__name__ if result is not None else "empty document"
        raise SpecParseError(f"Expected a JSON/YAML object (got {got})")
    return result


def stringify(value: Any, fmt: str = "json", indent: int = 2) -> str:
    """Render a generic value as JSON or YAML text.

    Key order is preserved in both formats.

    Raises:
        SpecParseError: If *fmt* is not ``"json"`` or ``"yaml"``.
    """
    if fmt == "json":
        return json.dumps(value, indent=indent, ensure_ascii=False)
    if fmt == "yaml":
        return yaml.safe_dump(value, sort_keys=False, allow_unicode=True, indent=indent)
    raise SpecParseError(f"Unknown output format '{fmt}'. Choose one of: {', '.join(FORMATS)}")
