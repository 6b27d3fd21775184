"""JSON-ready dict conversion for domain events.

``event_to_dict`` flattens any ``DomainEvent`` into plain JSON types: enum
members become their values and nested value objects use their own
``to_dict``.  The event class name is stored under ``"type"``.
"""

from __future__ import annotations

from dataclasses import fields
from enum import Enum
from typing import Any

from devops_demo.domain.events import DomainEvent


def _plain(value: Any) -> Any:
    """Return a JSON-compatible version of *value*."""
    if isinstance(value, Enum):
        return value.value
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


def event_to_dict(event: DomainEvent) -> dict[str, Any]:
    data: dict[str, Any] = {"type": type(event).__name__}
    for f in fields(event):
        data[f.name] = _plain(getattr(event, f.name))
    return data
