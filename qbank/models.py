"""Records flowing through the build and the manifest they end up in."""

from __future__ import annotations

import typing as t
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_serializer


@dataclass
class RawRow:
    values: t.Dict[str, str]
    index: int
    filename: str

    @property
    def line(self) -> int:
        # header occupies line 1
        return self.index + 2

    def get(self, key: str) -> str:
        return self.values.get(key) or ""


@dataclass
class BundleGroup:
    year_key: str
    filenames: t.List[str] = field(default_factory=list)


@dataclass
class BundleArtifact:
    year_key: str
    path: Path
    items: int
    size: int
    sha256: str


class Choice(BaseModel):
    key: int = Field(ge=1, le=5)
    text: str = Field(min_length=1)


class LawCitation(BaseModel):
    law: str
    article: str = ""


class Source(BaseModel):
    paper: str
    page: t.Optional[int] = None

    @model_serializer(mode="wrap")
    def _omit_missing_page(self, handler):
        data = handler(self)
        if data.get("page") is None:
            data.pop("page", None)
        return data


class Question(BaseModel):
    """One normalized exam question, serialized as a single JSONL line."""

    id: str
    year: t.Optional[int] = None
    era: str = ""
    era_year: t.Optional[int] = None
    exam: str
    subject: str
    topic: str = ""
    question_no: int = 0
    statement: str = ""
    choices: t.List[Choice] = Field(default_factory=list)
    answer: int = Field(ge=1, le=5)
    explanation: str = ""
    law_citations: t.List[LawCitation] = Field(default_factory=list)
    difficulty: t.Optional[int] = None
    tags: t.List[str] = Field(default_factory=list)
    source: Source
    updated_at: str

    @model_serializer(mode="wrap")
    def _omit_missing_optionals(self, handler):
        # year stays as null; these two vanish when absent
        data = handler(self)
        for key in ("era_year", "difficulty"):
            if data.get(key) is None:
                data.pop(key, None)
        return data


class ManifestEntry(BaseModel):
    id: str
    title: str
    year: t.Optional[int] = None
    items: int = Field(ge=0)
    url: str
    size: int
    sha256: str
    etag: str
    updated_at: str

    @field_validator("sha256")
    @classmethod
    def validate_sha256(cls, v: str) -> str:
        """Ensure SHA256 is valid hex string of correct length."""
        if len(v) != 64:
            raise ValueError("sha256 must be 64 characters")
        if not all(c in "0123456789abcdef" for c in v.lower()):
            raise ValueError("sha256 must be valid hex")
        return v.lower()

    @field_validator("size")
    @classmethod
    def validate_size(cls, v: int) -> int:
        if v < 0:
            raise ValueError("size must be non-negative")
        return v


class Manifest(BaseModel):
    schema_version: str
    content_version: str
    generated_at: str
    bundles: t.List[ManifestEntry] = Field(default_factory=list)
