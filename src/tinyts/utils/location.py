"""Source locations for error reporting.

Locations are opaque to the checker: it only copies them from the offending
node onto the raised failure so the caller can render a diagnostic.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Location:
    """Source code position with line and column info (columns are 1-based)."""

    line: int
    column: int
    file: str | None = None

    def __str__(self) -> str:
        if self.file:
            return f"{self.file}:{self.line}:{self.column}"
        return f"line {self.line}, column {self.column}"


@dataclass(frozen=True)
class Span:
    """Source span from start to end location."""

    start: Location
    end: Location

    def __str__(self) -> str:
        prefix = f"{self.start.file}:" if self.start.file else ""
        return f"{prefix}{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"


SourceLocation = Location | Span
