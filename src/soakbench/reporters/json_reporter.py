"""JSON reporter for machine-readable output."""

from __future__ import annotations

import json
from typing import TypeVar

from pydantic import BaseModel

from .base import Reporter

R = TypeVar("R", bound=BaseModel)


class JSONReporter(Reporter):
    """Serializes records with timestamps as ISO strings."""

    def __init__(self, indent: int | None = 2) -> None:
        self._indent = indent

    def to_dict(self, record: BaseModel) -> dict:
        return record.model_dump(mode="json")

    def render(self, record: BaseModel) -> str:
        return json.dumps(self.to_dict(record), indent=self._indent, ensure_ascii=False)


def load_record(cls: type[R], text: str | bytes) -> R:
    """Load a record previously rendered by JSONReporter.

    Raises pydantic.ValidationError when the payload does not match ``cls``.
    """
    return cls.model_validate_json(text)


__all__ = ["JSONReporter", "load_record"]
