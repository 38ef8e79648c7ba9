"""Base reporter protocol."""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import TextIO

from pydantic import BaseModel


class Reporter(ABC):
    """Output format for result records."""

    @abstractmethod
    def render(self, record: BaseModel) -> str:
        """Render the record as a string."""
        ...

    def emit(self, record: BaseModel, stream: TextIO | None = None) -> None:
        """Write the rendered record to ``stream`` (stdout by default)."""
        print(self.render(record), file=stream or sys.stdout)
