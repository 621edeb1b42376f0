"""Fatal build errors. Any of these aborts the whole run."""

from __future__ import annotations

from typing import Optional


class BuildError(Exception):
    def __init__(self, filename: str, detail: str, line: Optional[int] = None):
        self.filename = filename
        self.line = line
        self.detail = detail
        where = f"{filename}:{line}" if line is not None else filename
        super().__init__(f"{where}: {detail}")


class SchemaError(BuildError):
    """A required column is missing from the file's header."""


class ValidationError(BuildError):
    """A field value violates a domain constraint."""


class ParseError(BuildError):
    """The CSV text itself is malformed or undecodable."""
