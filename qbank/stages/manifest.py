"""Manifest assembly.

The first record of a sorted group supplies the entry's title and year. Groups
whose files mix eras get a title that only describes that first record.
"""

from __future__ import annotations

import typing as t
from pathlib import Path

from qbank.models import BundleArtifact, Manifest, ManifestEntry, Question
from qbank.stages.packer import bundle_relpath
from qbank.utils import get_logger, iso_z, parse_datetime_safe, validate_manifest, write_json_atomic

logger = get_logger(__name__)

SCHEMA_VERSION = "1.1.0"
MANIFEST_NAME = "manifest.json"


def make_title(era: str, era_year: t.Optional[int], items: int) -> str:
    left = f"{era}{era_year}年" if era and era_year else ""
    return f"{left} 全{items}問".strip()


def latest_updated_at(items: t.Iterable[Question]) -> t.Optional[str]:
    stamps = [d for d in (parse_datetime_safe(q.updated_at) for q in items) if d is not None]
    if not stamps:
        return None
    return iso_z(max(stamps))


def make_etag(year_key: str, content_version: str) -> str:
    return f'W/"{year_key}@{content_version}"'


def build_entry(
    art: BundleArtifact,
    items: t.List[Question],
    *,
    content_version: str,
    generated_at: str,
) -> ManifestEntry:
    first = items[0] if items else None
    return ManifestEntry(
        id=art.year_key,
        title=make_title(first.era, first.era_year, len(items)) if first else make_title("", None, 0),
        year=first.year if first else None,
        items=art.items,
        url="/" + bundle_relpath(art.year_key),
        size=art.size,
        sha256=art.sha256,
        etag=make_etag(art.year_key, content_version),
        updated_at=latest_updated_at(items) or generated_at,
    )


def build_manifest(entries: t.List[ManifestEntry], *, content_version: str, generated_at: str) -> Manifest:
    return Manifest(
        schema_version=SCHEMA_VERSION,
        content_version=content_version,
        generated_at=generated_at,
        bundles=entries,
    )


def write_manifest(manifest: Manifest, dist_dir: Path) -> Path:
    doc = manifest.model_dump(mode="json")
    validate_manifest(doc)
    path = dist_dir / MANIFEST_NAME
    write_json_atomic(doc, path)
    logger.info("manifest: wrote %s bundles=%d content_version=%s", path, len(manifest.bundles), manifest.content_version)
    return path
