"""Utilities for loading base documents and sandboxes from YAML/JSON sources."""

from __future__ import annotations

import json
from copy import deepcopy
from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml

from .definitions import BaseDocument
from .errors import DocumentValidationError, LoaderError
from .validation import ValidationReport, validate_document, validate_sandbox
from .whatif import Sandbox

__all__ = [
    "LoaderError",
    "load_document",
    "load_sandbox",
    "read_mapping",
]


def read_mapping(
    source: str | Path | dict[str, Any], *, format: str | None = None
) -> tuple[dict[str, Any], str]:
    """
    Read a raw mapping from a YAML/JSON file or copy an in-memory mapping.

    YAML dates are converted back to ``YYYY-MM-DD`` strings so that both
    formats reach validation in the same shape.

    Returns:
        ``(mapping, label)`` where label is the file path or '<mapping>'

    Raises:
        FileNotFoundError: If ``source`` names a missing file
        LoaderError: On unsupported formats, parse errors or a non-mapping root
    """
    if isinstance(source, dict):
        return _normalize_dates(deepcopy(source)), "<mapping>"

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(path)

    fmt = (format or path.suffix.lstrip(".")).lower()
    text = path.read_text(encoding="utf-8")
    try:
        if fmt in {"yaml", "yml", ""}:
            data = yaml.safe_load(text)
        elif fmt == "json":
            data = json.loads(text)
        else:
            raise LoaderError(f"Unsupported document format '{fmt}' for {path}")
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise LoaderError(f"Could not parse {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise LoaderError(f"Document root must be a mapping (source={path})")
    return _normalize_dates(data), str(path)


def _normalize_dates(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: _normalize_dates(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_normalize_dates(item) for item in value]
    return value


def _raise_if_rejected(report: ValidationReport, label: str) -> None:
    if report.strict and report.issues:
        raise DocumentValidationError(
            label,
            f"{len(report.issues)} validation issue(s): {report.issues[0]}",
            report=report,
            problem_ids=report.problem_ids(),
        )


def load_document(
    source: str | Path | dict[str, Any],
    *,
    strict: bool = False,
    format: str | None = None,
) -> BaseDocument:
    """
    Load and validate a base document.

    Args:
        source: YAML/JSON file path or raw mapping
        strict: Raise instead of dropping/clamping malformed items
        format: Force 'yaml' or 'json' instead of using the file suffix

    Raises:
        DocumentValidationError: In strict mode, when validation finds issues

    Example:
        ```python
        from cashflowlab import compute_projection, load_document

        doc = load_document("plan.yaml")
        result = compute_projection(doc)
        ```
    """
    mapping, label = read_mapping(source, format=format)
    report = validate_document(mapping, strict=strict)
    _raise_if_rejected(report, label)
    return report.document


def load_sandbox(
    source: str | Path | dict[str, Any],
    *,
    fallback_base: BaseDocument | None = None,
    strict: bool = False,
    format: str | None = None,
) -> Sandbox:
    """
    Load and validate a what-if sandbox ``{base, tweaks}``.

    A raw mapping without a 'base' section uses ``fallback_base``.

    Raises:
        DocumentValidationError: In strict mode, when validation finds issues
    """
    mapping, label = read_mapping(source, format=format)
    report = validate_sandbox(mapping, fallback_base=fallback_base, strict=strict)
    _raise_if_rejected(report, label)
    return report.sandbox
