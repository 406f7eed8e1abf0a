"""Shared file loading for the chart management commands."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from django.core.management.base import CommandError


def load_document(path: str) -> Any:
    """Load a JSON or YAML document from disk.

    JSON documents are valid YAML, so both are read with `yaml.safe_load`.

    Raises:
        CommandError: When the file cannot be read or parsed.
    """

    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise CommandError(f"Cannot read {path}: {exc}") from exc
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise CommandError(f"Cannot parse {path}: {exc}") from exc


def load_mapping(path: str) -> dict[str, Any]:
    """Load a document whose top level must be a mapping."""

    document = load_document(path)
    if not isinstance(document, dict):
        raise CommandError(f"{path} must contain a mapping at the top level.")
    return document
